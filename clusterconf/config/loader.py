"""
Layered cluster configuration loader.

Resolution order for every field:
    1. Built-in default (baked into ClusterConfig)
    2. Properties file value, if the key is present
    3. Command-line override, for the four overridable options

A key that is absent from a layer leaves the field alone. A key that is
present with a malformed value is an error and is never replaced by the
default.

Properties file location (evaluated once per loader):
    1. Explicit conf directory, else $CLUSTER_CONF  -> <dir>/cluster.properties
    2. Explicit home directory, else $CLUSTER_HOME  -> <home>/conf/cluster.properties
    3. None (defaults only)
"""

from __future__ import annotations

import argparse
import io
import os
import re
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from dotenv.parser import parse_stream

from ..constants import (
    CONFIG_NAME,
    CONF_DIR_NAME,
    ENV_CLUSTER_CONF,
    ENV_CLUSTER_HOME,
    KEY_LOCAL_IP,
    KEY_LOCAL_META_PORT,
    KEY_LOCAL_DATA_PORT,
    KEY_LOCAL_CLIENT_PORT,
    KEY_MAX_CONCURRENT_CLIENT_NUM,
    KEY_REPLICA_NUM,
    KEY_ENABLE_THRIFT_COMPRESSION,
    KEY_CONNECTION_TIME_OUT_MS,
    KEY_QUERY_TIME_OUT_SEC,
    KEY_MAX_REMOVED_LOG_SIZE,
    KEY_USE_BATCH_IN_CATCH_UP,
    KEY_MAX_NUMBER_OF_LOGS,
    KEY_LOG_DELETION_CHECK_INTERVAL_SECOND,
    KEY_ENABLE_AUTO_CREATE_SCHEMA,
    KEY_CONSISTENCY_LEVEL,
    KEY_SEED_NODES,
    OPTION_META_PORT,
    OPTION_DATA_PORT,
    OPTION_CLIENT_PORT,
    OPTION_SEED_NODES,
    MIN_PORT,
    MAX_PORT,
)
from ..logger import get_logger
from .model import ClusterConfig
from .seeds import parse_seed_urls
from .types import BadSeedUrlFormat, CliParseError, ConfigurationError, ConsistencyLevel

logger = get_logger(__name__)

_INT_RE = re.compile(r"[+-]?[0-9]+")


# ---------------------------------------------------------------------------
# Properties source
# ---------------------------------------------------------------------------

def get_props_path(
    conf_dir: Optional[str] = None,
    home_dir: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[Path]:
    """
    Locate the properties file.

    Returns:
        Path of the properties file, or None when neither a conf directory
        nor a home directory is known.
    """
    env = os.environ if environ is None else environ

    conf_dir = conf_dir or env.get(ENV_CLUSTER_CONF)
    if conf_dir:
        return Path(conf_dir) / CONFIG_NAME

    home_dir = home_dir or env.get(ENV_CLUSTER_HOME)
    if home_dir:
        return Path(home_dir) / CONF_DIR_NAME / CONFIG_NAME

    logger.warning(
        "Cannot find %s or %s environment variable when loading config file %s, "
        "use default configuration",
        ENV_CLUSTER_HOME, ENV_CLUSTER_CONF, CONFIG_NAME,
    )
    return None


def read_properties(path: Path) -> Dict[str, str]:
    """
    Read `KEY=VALUE` pairs from *path*.

    Values are taken literally (no `${VAR}` interpolation). A key written
    without `=` has an empty value, so a recognised numeric key on such a
    line fails to parse instead of keeping its default.

    Raises:
        OSError: if the file cannot be opened or read.
        ConfigurationError: the file is not valid UTF-8, or a line is not
            a `KEY=VALUE` pair (e.g. `REPLICA_NUM 3`).
    """
    with open(path, "rb") as f:
        data = f.read()
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ConfigurationError(
            f"Config file {path} is not valid UTF-8: byte {data[e.start]:#04x} "
            f"at offset {e.start}",
            raw=repr(data[e.start:e.end]),
        ) from e

    props = {}
    for binding in parse_stream(io.StringIO(text)):
        if binding.error:
            line = binding.original.string.rstrip("\r\n")
            raise ConfigurationError(
                f"Cannot parse line {binding.original.line} of {path}: {line!r}",
                raw=line,
            )
        if binding.key is None:
            continue
        props[binding.key] = "" if binding.value is None else binding.value
    return props


# ---------------------------------------------------------------------------
# Value parsers
# ---------------------------------------------------------------------------

def parse_int(key: str, raw: str) -> int:
    """Parse a decimal integer, raising ConfigurationError with the raw text."""
    value = raw.strip()
    if not _INT_RE.fullmatch(value):
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}", key=key, raw=raw)
    return int(value)


def parse_bool(key: str, raw: str) -> bool:
    value = raw.strip().casefold()
    if value in ("true", "false"):
        return value == "true"
    raise ConfigurationError(f"{key} must be true or false, got {raw!r}", key=key, raw=raw)


def _parse_str(key: str, raw: str) -> str:
    value = raw.strip()
    if not value:
        raise ConfigurationError(f"{key} must not be empty", key=key, raw=raw)
    return value


def _parse_consistency(key: str, raw: str) -> ConsistencyLevel:
    try:
        return ConsistencyLevel.from_string(raw)
    except ConfigurationError as e:
        raise ConfigurationError(f"{key}: {e}", key=key, raw=raw) from e


def _parse_seeds(key: str, raw: str) -> list:
    try:
        return parse_seed_urls(raw)
    except BadSeedUrlFormat as e:
        raise ConfigurationError(f"{key}: {e}", key=key, raw=raw) from e


# property key -> (ClusterConfig attribute, parser)
PROPERTY_FIELDS: Dict[str, Tuple[str, Callable[[str, str], Any]]] = {
    KEY_LOCAL_IP: ("local_ip", _parse_str),
    KEY_LOCAL_META_PORT: ("local_meta_port", parse_int),
    KEY_LOCAL_DATA_PORT: ("local_data_port", parse_int),
    KEY_LOCAL_CLIENT_PORT: ("local_client_port", parse_int),
    KEY_MAX_CONCURRENT_CLIENT_NUM: ("max_concurrent_client_num", parse_int),
    KEY_REPLICA_NUM: ("replication_num", parse_int),
    KEY_ENABLE_THRIFT_COMPRESSION: ("rpc_thrift_compression_enabled", parse_bool),
    KEY_CONNECTION_TIME_OUT_MS: ("connection_timeout_ms", parse_int),
    KEY_QUERY_TIME_OUT_SEC: ("query_timeout_sec", parse_int),
    KEY_MAX_REMOVED_LOG_SIZE: ("max_removed_log_size", parse_int),
    KEY_USE_BATCH_IN_CATCH_UP: ("use_batch_in_log_catch_up", parse_bool),
    KEY_MAX_NUMBER_OF_LOGS: ("max_number_of_logs", parse_int),
    KEY_LOG_DELETION_CHECK_INTERVAL_SECOND: ("log_delete_check_interval_sec", parse_int),
    KEY_ENABLE_AUTO_CREATE_SCHEMA: ("enable_auto_create_schema", parse_bool),
    KEY_CONSISTENCY_LEVEL: ("consistency_level", _parse_consistency),
    KEY_SEED_NODES: ("seed_node_urls", _parse_seeds),
}


def apply_properties(config: ClusterConfig, props: Mapping[str, str]) -> ClusterConfig:
    """
    Overlay properties onto *config*.

    Every present value is parsed before any field is written, so a
    malformed value leaves *config* untouched. Unknown keys are ignored.

    Raises:
        ConfigurationError: a present value is malformed.
    """
    updates = {}
    for key, (attr, parser) in PROPERTY_FIELDS.items():
        raw = props.get(key)
        if raw is None:
            continue
        updates[attr] = parser(key, raw)

    for attr, value in updates.items():
        setattr(config, attr, value)
    return config


# ---------------------------------------------------------------------------
# Command-line overrides
# ---------------------------------------------------------------------------

class _OverrideArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of printing usage and exiting."""

    def error(self, message: str):
        raise CliParseError(message)


def _port(raw: str) -> int:
    value = raw.strip()
    if not _INT_RE.fullmatch(value):
        raise argparse.ArgumentTypeError(f"invalid port value: {raw!r}")
    port = int(value)
    if not MIN_PORT <= port <= MAX_PORT:
        raise argparse.ArgumentTypeError(
            f"port {raw!r} out of range {MIN_PORT}-{MAX_PORT}"
        )
    return port


def build_override_parser() -> argparse.ArgumentParser:
    """Parser recognising exactly the four overridable options."""
    parser = _OverrideArgumentParser(
        prog="clusterconf", add_help=False, allow_abbrev=False,
    )
    parser.add_argument(f"--{OPTION_META_PORT}", type=_port, help="port for metadata service")
    parser.add_argument(f"--{OPTION_DATA_PORT}", type=_port, help="port for data service")
    parser.add_argument(f"--{OPTION_CLIENT_PORT}", type=_port, help="port for client service")
    parser.add_argument(
        f"--{OPTION_SEED_NODES}",
        help="comma-separated {IP/DOMAIN}:meta_port:data_port triples",
    )
    return parser


def apply_cli_overrides(config: ClusterConfig, argv: Sequence[str]) -> None:
    """
    Overlay command-line options onto *config*.

    The whole invocation is parsed before anything is applied. An empty
    *argv* is a successful no-op.

    Raises:
        CliParseError: on an unknown option or a malformed value. *config*
            keeps the values it held before the call.
    """
    argv = list(argv)
    try:
        args = build_override_parser().parse_args(argv)
        seed_node_urls = None
        if args.seed_nodes is not None:
            try:
                seed_node_urls = parse_seed_urls(args.seed_nodes)
            except BadSeedUrlFormat as e:
                raise CliParseError(f"argument --{OPTION_SEED_NODES}: {e}") from e
    except CliParseError as e:
        logger.error("replace properties failed, use previous conf params: %s (argv=%s)", e, argv)
        raise

    if args.meta_port is not None:
        config.local_meta_port = args.meta_port
        logger.debug("replace local meta port with=%s", config.local_meta_port)
    if args.data_port is not None:
        config.local_data_port = args.data_port
        logger.debug("replace local data port with=%s", config.local_data_port)
    if args.client_port is not None:
        config.local_client_port = args.client_port
        logger.debug("replace local client port with=%s", config.local_client_port)
    if seed_node_urls is not None:
        config.seed_node_urls = seed_node_urls
        logger.debug("replace seed nodes with=%s", config.seed_node_urls)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

class ConfigLoader:
    """
    Builds a ClusterConfig from defaults, the properties file and argv.

    The properties file location is resolved once, at construction.
    """

    def __init__(
        self,
        conf_dir: Optional[str] = None,
        home_dir: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.props_path = get_props_path(conf_dir, home_dir, environ)

    def load(self) -> ClusterConfig:
        """
        Load defaults overlaid with the properties file.

        A missing or unopenable file degrades to defaults with a warning.

        Raises:
            ConfigurationError: the file is not valid UTF-8, has a line that is
                not a `KEY=VALUE` pair, or a property is present but malformed
                or out of range.
        """
        config = ClusterConfig()
        if self.props_path is None:
            return config

        try:
            logger.info("Start to read config file %s", self.props_path)
            props = read_properties(self.props_path)
        except OSError as e:
            logger.warning("Fail to find config file %s: %s, use default configuration",
                           self.props_path, e)
            return config

        apply_properties(config, props)
        config.validate()
        return config

    def apply_cli_overrides(self, config: ClusterConfig, argv: Sequence[str]) -> None:
        apply_cli_overrides(config, argv)


def load_config(
    conf_dir: Optional[str] = None,
    argv: Optional[Sequence[str]] = None,
) -> ClusterConfig:
    """
    Load the node configuration.

    Command-line overrides are applied when *argv* is given; a failed
    override pass is logged and the file-derived configuration is kept.
    """
    config = ConfigLoader(conf_dir=conf_dir).load()
    if argv:
        try:
            apply_cli_overrides(config, argv)
        except CliParseError:
            logger.warning("Ignoring command-line overrides, keeping configuration from %s",
                           CONFIG_NAME)
    return config
