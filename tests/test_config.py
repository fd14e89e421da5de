"""Tests for the config module."""

import os
import pytest
from packetlog.config import Config, load_config, _parse_bool, LOG_LEVELS

ENV_VARS = [
    "SERVER_HOST", "SERVER_PORT", "SERVER_BACKLOG", "BUFFER_SIZE", "DATA_FILE",
    "CONCURRENT", "POLL_INTERVAL", "TRUNCATE_ON_START", "FSYNC", "LOG_LEVEL",
    "LOG_TO_SYSLOG",
]


class TestParserBool:
    def test_true_values(self):
        for val in ("true", "True", "TRUE", "1", "yes", "YES", " true "):
            assert _parse_bool(val) is True

    def test_false_values(self):
        for val in ("false", "False", "0", "no", "NO", "", "random"):
            assert _parse_bool(val) is False


class TestConfigDefaults:
    def test_network_defaults(self):
        cfg = Config()
        assert cfg.host == "0.0.0.0"
        assert cfg.port == 9000
        assert cfg.backlog == 10

    def test_default_data_file(self):
        assert Config().data_file == "/var/tmp/aesdsocketdata"

    def test_sequential_by_default(self):
        assert Config().concurrent is False

    def test_stale_file_kept_by_default(self):
        assert Config().truncate_on_start is False

    def test_frozen(self):
        cfg = Config()
        with pytest.raises(AttributeError):
            cfg.port = 8080


class TestValidate:
    def test_defaults_are_valid(self):
        Config().validate()

    def test_port_zero_allowed(self):
        Config(port=0).validate()

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 65536},
        {"backlog": 0},
        {"buffer_size": 0},
        {"poll_interval": 0},
        {"log_level": "TRACE"},
        {"data_file": ""},
    ])
    def test_invalid(self, overrides):
        with pytest.raises(ValueError):
            Config(**overrides).validate()

    def test_log_levels(self):
        assert LOG_LEVELS == ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class TestLoadConfig:
    def test_defaults(self, monkeypatch):
        for k in ENV_VARS:
            monkeypatch.delenv(k, raising=False)
        assert load_config() == Config()

    def test_env_overrides(self, monkeypatch):
        overrides = {
            "SERVER_HOST": "127.0.0.1",
            "SERVER_PORT": "9100",
            "SERVER_BACKLOG": "3",
            "BUFFER_SIZE": "16",
            "DATA_FILE": "/tmp/packets",
            "CONCURRENT": "yes",
            "POLL_INTERVAL": "0.25",
            "TRUNCATE_ON_START": "1",
            "FSYNC": "false",
            "LOG_LEVEL": "debug",
            "LOG_TO_SYSLOG": "true",
        }
        for k, v in overrides.items():
            monkeypatch.setenv(k, v)
        cfg = load_config()
        assert cfg.host == "127.0.0.1"
        assert cfg.port == 9100
        assert cfg.backlog == 3
        assert cfg.buffer_size == 16
        assert cfg.data_file == "/tmp/packets"
        assert cfg.concurrent is True
        assert cfg.poll_interval == 0.25
        assert cfg.truncate_on_start is True
        assert cfg.fsync is False
        assert cfg.log_level == "DEBUG"
        assert cfg.log_to_syslog is True

    def test_non_numeric_port(self, monkeypatch):
        monkeypatch.setenv("SERVER_PORT", "ninety")
        with pytest.raises(ValueError):
            load_config()
