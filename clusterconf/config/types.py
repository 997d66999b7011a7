"""
Cluster configuration types: error taxonomy and consistency levels.
"""

from enum import Enum


class ClusterConfigError(Exception):
    """Base exception for cluster configuration failures."""


class BadSeedUrlFormat(ClusterConfigError):
    """Raised when a seed entry is not exactly `host:metaPort:dataPort`."""

    def __init__(self, original: str):
        self.original = original
        super().__init__(
            f"Bad seed url format: {original!r} "
            f"(expected host:meta_port:data_port)"
        )


class ResolutionError(ClusterConfigError):
    """Raised when a hostname cannot be resolved to an IP address."""

    def __init__(self, hostname: str, reason: str = ""):
        self.hostname = hostname
        self.reason = reason
        message = f"Cannot resolve host {hostname!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class CliParseError(ClusterConfigError):
    """Raised when command-line overrides cannot be parsed."""


class ConfigReloadError(ClusterConfigError):
    """Raised when the properties source cannot be re-read during hot reload."""


class ConfigurationError(ClusterConfigError, ValueError):
    """Raised on a malformed or out-of-range configuration value at startup."""

    def __init__(self, message: str, key: str = "", raw: str = ""):
        self.key = key
        self.raw = raw
        super().__init__(message)


class ConsistencyLevel(Enum):
    """Read/write guarantee a replica enforces."""
    STRONG = "strong"
    MID = "mid"
    WEAK = "weak"

    @classmethod
    def from_string(cls, raw: str) -> "ConsistencyLevel":
        """
        Parse a consistency level name, case-insensitively.

        Raises:
            ConfigurationError: for anything other than strong, mid or weak.
        """
        value = str(raw).strip().lower()
        for level in cls:
            if level.value == value:
                return level
        raise ConfigurationError(
            f"Unsupported consistency level {raw!r}, "
            f"expected one of {', '.join(l.value for l in cls)}",
            raw=raw,
        )
