"""Shared fixtures for the cluster configuration tests."""

import socket
import textwrap

import pytest


class FakeResolver:
    """Stands in for socket.getaddrinfo with a fixed host table."""

    def __init__(self, table):
        self.table = dict(table)
        self.calls = []

    def __call__(self, host, port, *args, **kwargs):
        self.calls.append(host)
        if host not in self.table:
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
        results = []
        for ip in self.table[host]:
            family = socket.AF_INET6 if ":" in ip else socket.AF_INET
            sockaddr = (ip, 0, 0, 0) if family == socket.AF_INET6 else (ip, 0)
            results.append((family, socket.SOCK_STREAM, 6, "", sockaddr))
        return results


@pytest.fixture
def fake_dns():
    return FakeResolver({
        "node1.example.com": ["10.0.0.5"],
        "node2.example.com": ["10.0.0.6"],
        "dual.example.com": ["fd00::7", "10.0.0.7"],
        "v6only.example.com": ["fd00::8"],
    })


@pytest.fixture
def write_props(tmp_path):
    """Write a cluster.properties file into tmp_path and return its directory."""
    def _write(content: str):
        path = tmp_path / "cluster.properties"
        path.write_text(textwrap.dedent(content))
        return tmp_path
    return _write
