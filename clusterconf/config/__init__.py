"""
Cluster node configuration.

Loads defaults, the properties file and command-line overrides into one
ClusterConfig, normalizes hostnames to IPs and hot-reloads runtime knobs.
"""

from .types import (
    ClusterConfigError,
    BadSeedUrlFormat,
    ResolutionError,
    CliParseError,
    ConfigReloadError,
    ConfigurationError,
    ConsistencyLevel,
)
from .seeds import SeedUrl, parse_seed_url, parse_seed_urls
from .model import ClusterConfig, HotSettings
from .resolver import HostResolver, is_literal_address
from .loader import (
    ConfigLoader,
    apply_cli_overrides,
    apply_properties,
    get_props_path,
    load_config,
    read_properties,
)
from .reload import HotReloadApplier, apply_hot_props

__all__ = [
    "ClusterConfigError",
    "BadSeedUrlFormat",
    "ResolutionError",
    "CliParseError",
    "ConfigReloadError",
    "ConfigurationError",
    "ConsistencyLevel",
    "SeedUrl",
    "parse_seed_url",
    "parse_seed_urls",
    "ClusterConfig",
    "HotSettings",
    "HostResolver",
    "is_literal_address",
    "ConfigLoader",
    "apply_cli_overrides",
    "apply_properties",
    "get_props_path",
    "load_config",
    "read_properties",
    "HotReloadApplier",
    "apply_hot_props",
]
