"""
Tests for the node startup entrypoint.
"""

import logging

import pytest

import run_node
from clusterconf.config import HostResolver


@pytest.fixture
def patched_resolver(monkeypatch, fake_dns):
    original_init = HostResolver.__init__

    def init(self, getaddrinfo=None):
        original_init(self, getaddrinfo or fake_dns)

    monkeypatch.setattr(HostResolver, "__init__", init)
    return fake_dns


class TestMain:

    def test_resolves_and_reports(self, monkeypatch, write_props, patched_resolver, caplog):
        conf_dir = write_props("LOCAL_IP=node1.example.com\nSEED_NODES=node2.example.com:9003:40010\n")
        monkeypatch.setenv("CLUSTER_CONF", str(conf_dir))
        with caplog.at_level(logging.INFO):
            assert run_node.main(["--meta_port", "9500"]) == 0
        assert "10.0.0.5" in caplog.text
        assert "10.0.0.6:9003:40010" in caplog.text
        assert '"local_meta_port": 9500' in caplog.text

    def test_bad_cli_continues(self, monkeypatch, write_props, patched_resolver, caplog):
        monkeypatch.setenv("CLUSTER_CONF", str(write_props("LOCAL_META_PORT=9103\n")))
        with caplog.at_level(logging.INFO):
            assert run_node.main(["--meta_port", "x"]) == 0
        assert '"local_meta_port": 9103' in caplog.text

    def test_bad_file_fails(self, monkeypatch, write_props, patched_resolver):
        monkeypatch.setenv("CLUSTER_CONF", str(write_props("REPLICA_NUM=three\n")))
        assert run_node.main([]) == 1

    def test_undecodable_file_fails(self, monkeypatch, tmp_path, patched_resolver):
        (tmp_path / "cluster.properties").write_bytes(b"# caf\xe9\n")
        monkeypatch.setenv("CLUSTER_CONF", str(tmp_path))
        assert run_node.main([]) == 1

    def test_unresolvable_fails(self, monkeypatch, write_props, patched_resolver):
        monkeypatch.setenv("CLUSTER_CONF", str(write_props("LOCAL_IP=nope.example.com\n")))
        assert run_node.main([]) == 1
