"""
Seed node URL parsing.

A seed entry has the form ``HOST:META_PORT:DATA_PORT``. HOST may be an IPv4
literal, a DNS name, or an IPv6 literal wrapped in brackets
(``[fe80::1]:9003:40010``). The host is never resolved here.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from .types import BadSeedUrlFormat

_PORT_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class SeedUrl:
    """A validated seed node triple."""
    host: str
    meta_port: str
    data_port: str

    def with_host(self, host: str) -> "SeedUrl":
        return SeedUrl(host, self.meta_port, self.data_port)

    def to_url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{host}:{self.meta_port}:{self.data_port}"


def parse_seed_url(raw: str) -> SeedUrl:
    """
    Split one seed entry into its host and port fields.

    Ports are kept as the digit strings they were written as, so a rebuilt
    entry carries them verbatim.

    Raises:
        BadSeedUrlFormat: unless the entry has exactly three fields and both
            port fields are non-empty digit strings.
    """
    if raw.startswith("["):
        end = raw.find("]")
        if end == -1:
            raise BadSeedUrlFormat(raw)
        host = raw[1:end]
        rest = raw[end + 1:]
        if not host or not rest.startswith(":"):
            raise BadSeedUrlFormat(raw)
        splits = [host] + rest[1:].split(":")
    else:
        splits = raw.split(":")

    if len(splits) != 3:
        raise BadSeedUrlFormat(raw)
    host, meta_port, data_port = splits
    if not host or not _PORT_RE.fullmatch(meta_port) or not _PORT_RE.fullmatch(data_port):
        raise BadSeedUrlFormat(raw)
    return SeedUrl(host, meta_port, data_port)


def parse_seed_urls(raw: Optional[str]) -> List[str]:
    """
    Parse a comma-separated seed list.

    Elements are trimmed and empty elements are dropped. Order is kept and
    duplicates are not removed. Every remaining element must be a valid seed
    entry.

    >>> parse_seed_urls("a:1:2, b:3:4,, c:5:6")
    ['a:1:2', 'b:3:4', 'c:5:6']
    """
    if raw is None:
        return []
    urls = []
    for node_url in raw.split(","):
        node_url = node_url.strip()
        if not node_url:
            continue
        parse_seed_url(node_url)
        urls.append(node_url)
    return urls
