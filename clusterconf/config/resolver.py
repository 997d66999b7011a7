"""
Hostname to IP normalization for the node address and the seed list.

Cluster members compare each other by address, so every host is rewritten to
the literal IP it resolves to before membership bootstrap starts.
"""

import ipaddress
import socket
from typing import Callable, List, Optional

from ..logger import get_logger
from .model import ClusterConfig
from .seeds import parse_seed_url
from .types import ResolutionError

logger = get_logger(__name__)


def is_literal_address(s: str) -> bool:
    """True if *s* is an IPv4 or IPv6 literal and needs no name resolution."""
    try:
        ipaddress.ip_address(s)
    except ValueError:
        return False
    return True


class HostResolver:
    """
    Resolves hostnames through the system resolver.

    `resolve` blocks on DNS with no internal timeout and no retry. Callers
    that need bounded latency or retries must wrap it.
    """

    def __init__(self, getaddrinfo: Optional[Callable] = None):
        """
        Args:
            getaddrinfo: Lookup function with the signature of
                `socket.getaddrinfo`. Defaults to the system resolver.
        """
        self._getaddrinfo = getaddrinfo or socket.getaddrinfo

    def resolve(self, hostname: str) -> str:
        """
        Resolve *hostname* to a literal IP, preferring IPv4 results.

        Raises:
            ResolutionError: if the name does not resolve.
        """
        try:
            infos = self._getaddrinfo(hostname, None)
        except (OSError, UnicodeError) as e:
            raise ResolutionError(hostname, str(e)) from e
        if not infos:
            raise ResolutionError(hostname, "no address returned")

        for family, _, _, _, sockaddr in infos:
            if family == socket.AF_INET:
                return sockaddr[0]
        return infos[0][4][0]

    def _normalize_host(self, host: str) -> str:
        if is_literal_address(host):
            return host
        return self.resolve(host)

    def normalize_addresses(self, config: ClusterConfig) -> None:
        """
        Replace the local address and every seed host with a literal IP.

        Port fields are kept verbatim and already-literal seed entries pass
        through unchanged. All results are computed first and committed
        together, so on failure *config* is left exactly as it was.

        Raises:
            BadSeedUrlFormat: a seed entry is not `host:meta_port:data_port`.
            ResolutionError: any host fails to resolve.
        """
        local_ip = self._normalize_host(config.local_ip)

        seed_urls: List[str] = []
        for seed_url in config.seed_node_urls:
            seed = parse_seed_url(seed_url)
            if is_literal_address(seed.host):
                seed_urls.append(seed_url)
            else:
                seed_urls.append(seed.with_host(self.resolve(seed.host)).to_url())

        config.local_ip = local_ip
        config.seed_node_urls = seed_urls
        logger.debug(
            "after replace, the localIP=%s, seedUrls=%s", config.local_ip, config.seed_node_urls
        )
