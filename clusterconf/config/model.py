"""
Cluster node configuration model.

`ClusterConfig` is constructed once at process start with every field at its
built-in default, filled in by `ConfigLoader`, and then handed by reference
to the components that need it.

The three hot-reloadable knobs live in an immutable `HotSettings` snapshot.
A reload swaps the whole snapshot reference, so a reader never sees a
half-written value.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List

from ..constants import (
    DEFAULT_LOCAL_IP,
    DEFAULT_LOCAL_META_PORT,
    DEFAULT_LOCAL_DATA_PORT,
    DEFAULT_LOCAL_CLIENT_PORT,
    DEFAULT_SEED_NODE_URLS,
    DEFAULT_REPLICATION_NUM,
    DEFAULT_CONSISTENCY_LEVEL,
    DEFAULT_MAX_CONCURRENT_CLIENT_NUM,
    DEFAULT_CONNECTION_TIMEOUT_MS,
    DEFAULT_QUERY_TIMEOUT_SEC,
    DEFAULT_MAX_REMOVED_LOG_SIZE,
    DEFAULT_MAX_NUMBER_OF_LOGS,
    DEFAULT_LOG_DELETE_CHECK_INTERVAL_SEC,
    DEFAULT_USE_BATCH_IN_LOG_CATCH_UP,
    DEFAULT_ENABLE_AUTO_CREATE_SCHEMA,
    DEFAULT_RPC_THRIFT_COMPRESSION_ENABLED,
    MIN_PORT,
    MAX_PORT,
)
from .seeds import parse_seed_url
from .types import BadSeedUrlFormat, ConfigurationError, ConsistencyLevel


@dataclass(frozen=True)
class HotSettings:
    """Settings that may change while the node is running."""
    max_concurrent_client_num: int = DEFAULT_MAX_CONCURRENT_CLIENT_NUM
    connection_timeout_ms: int = DEFAULT_CONNECTION_TIMEOUT_MS
    max_removed_log_size: int = DEFAULT_MAX_REMOVED_LOG_SIZE


@dataclass
class ClusterConfig:
    """
    Resolved configuration of one cluster node.

    Connection-identity fields (address, ports, seeds) are set during startup
    and are never touched by hot reload.
    """
    local_ip: str = DEFAULT_LOCAL_IP
    local_meta_port: int = DEFAULT_LOCAL_META_PORT
    local_data_port: int = DEFAULT_LOCAL_DATA_PORT
    local_client_port: int = DEFAULT_LOCAL_CLIENT_PORT
    seed_node_urls: List[str] = field(default_factory=lambda: list(DEFAULT_SEED_NODE_URLS))
    replication_num: int = DEFAULT_REPLICATION_NUM
    consistency_level: ConsistencyLevel = ConsistencyLevel(DEFAULT_CONSISTENCY_LEVEL)
    query_timeout_sec: int = DEFAULT_QUERY_TIMEOUT_SEC
    max_number_of_logs: int = DEFAULT_MAX_NUMBER_OF_LOGS
    log_delete_check_interval_sec: int = DEFAULT_LOG_DELETE_CHECK_INTERVAL_SEC
    use_batch_in_log_catch_up: bool = DEFAULT_USE_BATCH_IN_LOG_CATCH_UP
    enable_auto_create_schema: bool = DEFAULT_ENABLE_AUTO_CREATE_SCHEMA
    rpc_thrift_compression_enabled: bool = DEFAULT_RPC_THRIFT_COMPRESSION_ENABLED
    hot: HotSettings = field(default_factory=HotSettings)
    _hot_lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    # --- hot-reloadable settings ------------------------------------------

    @property
    def max_concurrent_client_num(self) -> int:
        return self.hot.max_concurrent_client_num

    @max_concurrent_client_num.setter
    def max_concurrent_client_num(self, value: int) -> None:
        self.update_hot(max_concurrent_client_num=value)

    @property
    def connection_timeout_ms(self) -> int:
        return self.hot.connection_timeout_ms

    @connection_timeout_ms.setter
    def connection_timeout_ms(self, value: int) -> None:
        self.update_hot(connection_timeout_ms=value)

    @property
    def max_removed_log_size(self) -> int:
        return self.hot.max_removed_log_size

    @max_removed_log_size.setter
    def max_removed_log_size(self, value: int) -> None:
        self.update_hot(max_removed_log_size=value)

    def update_hot(self, **changes: int) -> HotSettings:
        """
        Publish a new hot settings snapshot with *changes* applied.

        Writers are serialised; readers only ever load the `hot` reference.
        """
        with self._hot_lock:
            self.hot = replace(self.hot, **changes)
            return self.hot

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate ranges and seed syntax.

        Returns:
            True if all valid

        Raises:
            ConfigurationError: on an out-of-range value or malformed seed
        """
        for name in ("local_meta_port", "local_data_port", "local_client_port"):
            port = getattr(self, name)
            if not MIN_PORT <= port <= MAX_PORT:
                raise ConfigurationError(
                    f"{name} must be within {MIN_PORT}-{MAX_PORT}, got {port}",
                    key=name, raw=str(port),
                )
        if self.replication_num < 1:
            raise ConfigurationError(
                f"replication_num must be >= 1, got {self.replication_num}",
                key="replication_num", raw=str(self.replication_num),
            )
        for name in (
            "max_concurrent_client_num",
            "connection_timeout_ms",
            "query_timeout_sec",
            "max_removed_log_size",
            "max_number_of_logs",
            "log_delete_check_interval_sec",
        ):
            value = getattr(self, name)
            if value < 0:
                raise ConfigurationError(
                    f"{name} must be >= 0, got {value}", key=name, raw=str(value)
                )
        if not self.local_ip:
            raise ConfigurationError("local_ip must not be empty", key="local_ip")
        for url in self.seed_node_urls:
            try:
                parse_seed_url(url)
            except BadSeedUrlFormat as e:
                raise ConfigurationError(str(e), key="seed_node_urls", raw=url) from e
        return True

    # --- serialisation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating a properties file)."""
        hot = self.hot
        return {
            "local_ip": self.local_ip,
            "local_meta_port": self.local_meta_port,
            "local_data_port": self.local_data_port,
            "local_client_port": self.local_client_port,
            "seed_node_urls": list(self.seed_node_urls),
            "replication_num": self.replication_num,
            "consistency_level": self.consistency_level.value,
            "max_concurrent_client_num": hot.max_concurrent_client_num,
            "connection_timeout_ms": hot.connection_timeout_ms,
            "max_removed_log_size": hot.max_removed_log_size,
            "query_timeout_sec": self.query_timeout_sec,
            "max_number_of_logs": self.max_number_of_logs,
            "log_delete_check_interval_sec": self.log_delete_check_interval_sec,
            "use_batch_in_log_catch_up": self.use_batch_in_log_catch_up,
            "enable_auto_create_schema": self.enable_auto_create_schema,
            "rpc_thrift_compression_enabled": self.rpc_thrift_compression_enabled,
        }
