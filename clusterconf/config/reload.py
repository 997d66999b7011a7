"""
Hot reload of the runtime-tunable settings.

Only MAX_CONCURRENT_CLIENT_NUM, CONNECTION_TIME_OUT_MS and
MAX_REMOVED_LOG_SIZE are re-read on a live node. Ports, seeds, replication
and consistency stay as they were at startup; changing them would need a
cluster-wide renegotiation.
"""

from pathlib import Path
from typing import Mapping, Optional

from ..constants import (
    KEY_MAX_CONCURRENT_CLIENT_NUM,
    KEY_CONNECTION_TIME_OUT_MS,
    KEY_MAX_REMOVED_LOG_SIZE,
)
from ..logger import get_logger
from .loader import parse_int, read_properties
from .model import ClusterConfig, HotSettings
from .types import ConfigReloadError, ConfigurationError

logger = get_logger(__name__)

HOT_FIELDS = {
    KEY_MAX_CONCURRENT_CLIENT_NUM: "max_concurrent_client_num",
    KEY_CONNECTION_TIME_OUT_MS: "connection_timeout_ms",
    KEY_MAX_REMOVED_LOG_SIZE: "max_removed_log_size",
}


def apply_hot_props(config: ClusterConfig, props: Mapping[str, str]) -> HotSettings:
    """
    Apply the hot-reloadable subset of *props* to *config*.

    All values are parsed first and published as one snapshot. Keys outside
    the hot subset are ignored.

    Raises:
        ConfigReloadError: a hot value is malformed or negative; *config* is untouched.
    """
    changes = {}
    for key, attr in HOT_FIELDS.items():
        raw = props.get(key)
        if raw is None:
            continue
        try:
            value = parse_int(key, raw)
        except ConfigurationError as e:
            raise ConfigReloadError(f"Fail to reload config: {e}") from e
        if value < 0:
            raise ConfigReloadError(f"Fail to reload config: {key} must be >= 0, got {raw!r}")
        changes[attr] = value

    hot = config.update_hot(**changes) if changes else config.hot
    logger.info("Set cluster configuration %s", changes)
    return hot


class HotReloadApplier:
    """Re-reads the properties file and applies the hot subset to a live config."""

    def __init__(self, props_path: Optional[Path]):
        self.props_path = props_path

    def reload(self, config: ClusterConfig) -> Optional[HotSettings]:
        """
        Re-read the properties file and apply the hot subset.

        The file is read fresh on every call.

        Returns:
            The published hot settings, or None when no properties file is
            configured (nothing to reload).

        Raises:
            ConfigReloadError: the file cannot be read or holds a malformed
                hot value. *config* keeps its previous values.
        """
        if self.props_path is None:
            logger.warning("No config file configured, skip reloading hot properties")
            return None

        logger.info("Start to reload config file %s", self.props_path)
        try:
            props = read_properties(self.props_path)
        except (OSError, ConfigurationError) as e:
            raise ConfigReloadError(
                f"Fail to reload config file {self.props_path} because {e}"
            ) from e
        return apply_hot_props(config, props)
