"""
Tests for the ClusterConfig model.
"""

import threading

import pytest

from clusterconf.config import ClusterConfig, ConfigurationError, ConsistencyLevel, HotSettings


class TestDefaults:

    def test_defaults(self):
        cfg = ClusterConfig()
        assert cfg.local_ip == "127.0.0.1"
        assert cfg.local_meta_port == 9003
        assert cfg.local_data_port == 40010
        assert cfg.local_client_port == 55560
        assert cfg.seed_node_urls == [
            "127.0.0.1:9003:40010",
            "127.0.0.1:9005:40012",
            "127.0.0.1:9007:40014",
        ]
        assert cfg.replication_num == 2
        assert cfg.consistency_level is ConsistencyLevel.MID
        assert cfg.max_concurrent_client_num == 10000
        assert cfg.connection_timeout_ms == 20000
        assert cfg.query_timeout_sec == 30
        assert cfg.max_removed_log_size == 512 * 1024 * 1024
        assert cfg.max_number_of_logs == 100
        assert cfg.log_delete_check_interval_sec == 3600
        assert cfg.use_batch_in_log_catch_up is True
        assert cfg.enable_auto_create_schema is True
        assert cfg.rpc_thrift_compression_enabled is False

    def test_seed_list_not_shared(self):
        a = ClusterConfig()
        b = ClusterConfig()
        a.seed_node_urls.append("x:1:2")
        assert "x:1:2" not in b.seed_node_urls

    def test_validate_defaults(self):
        assert ClusterConfig().validate() is True


class TestConsistencyLevel:

    @pytest.mark.parametrize("raw,expected", [
        ("strong", ConsistencyLevel.STRONG),
        ("MID", ConsistencyLevel.MID),
        (" Weak ", ConsistencyLevel.WEAK),
    ])
    def test_from_string(self, raw, expected):
        assert ConsistencyLevel.from_string(raw) is expected

    def test_unknown(self):
        with pytest.raises(ConfigurationError, match="'eventual'"):
            ConsistencyLevel.from_string("eventual")


class TestHotSettings:

    def test_setters_publish_new_snapshot(self):
        cfg = ClusterConfig()
        before = cfg.hot
        cfg.connection_timeout_ms = 5000
        assert cfg.connection_timeout_ms == 5000
        assert before.connection_timeout_ms == 20000
        assert cfg.hot is not before

    def test_update_hot_many(self):
        cfg = ClusterConfig()
        hot = cfg.update_hot(max_concurrent_client_num=5, max_removed_log_size=7)
        assert hot == HotSettings(
            max_concurrent_client_num=5,
            connection_timeout_ms=20000,
            max_removed_log_size=7,
        )

    def test_snapshot_is_frozen(self):
        with pytest.raises(Exception):
            ClusterConfig().hot.connection_timeout_ms = 1

    def test_concurrent_writers(self):
        cfg = ClusterConfig()

        def bump(attr):
            for i in range(200):
                cfg.update_hot(**{attr: i})

        threads = [
            threading.Thread(target=bump, args=("max_concurrent_client_num",)),
            threading.Thread(target=bump, args=("connection_timeout_ms",)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        # Neither writer's last update is lost
        assert cfg.max_concurrent_client_num == 199
        assert cfg.connection_timeout_ms == 199


class TestValidate:

    @pytest.mark.parametrize("attr", ["local_meta_port", "local_data_port", "local_client_port"])
    @pytest.mark.parametrize("port", [0, 65536, -1])
    def test_port_range(self, attr, port):
        cfg = ClusterConfig()
        setattr(cfg, attr, port)
        with pytest.raises(ConfigurationError, match=attr):
            cfg.validate()

    def test_replication_num(self):
        cfg = ClusterConfig(replication_num=0)
        with pytest.raises(ConfigurationError, match="replication_num must be >= 1"):
            cfg.validate()

    def test_negative_timeout(self):
        cfg = ClusterConfig()
        cfg.connection_timeout_ms = -1
        with pytest.raises(ConfigurationError, match="connection_timeout_ms"):
            cfg.validate()

    def test_negative_log_delete_interval(self):
        cfg = ClusterConfig(log_delete_check_interval_sec=-1)
        with pytest.raises(ConfigurationError, match="log_delete_check_interval_sec"):
            cfg.validate()

    def test_bad_seed(self):
        cfg = ClusterConfig(seed_node_urls=["a:1:2", "a:1"])
        with pytest.raises(ConfigurationError) as exc_info:
            cfg.validate()
        assert exc_info.value.raw == "a:1"

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            ClusterConfig(replication_num=0).validate()


class TestToDict:

    def test_to_dict(self):
        cfg = ClusterConfig(consistency_level=ConsistencyLevel.STRONG)
        cfg.max_removed_log_size = 500
        d = cfg.to_dict()
        assert d["consistency_level"] == "strong"
        assert d["max_removed_log_size"] == 500
        assert d["seed_node_urls"] == cfg.seed_node_urls
        assert d["seed_node_urls"] is not cfg.seed_node_urls
