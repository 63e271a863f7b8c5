"""Unit tests for environment-driven configuration."""

import pytest

from mqm.core.config import MqmConnectionConfig, load_config, validate_config
from mqm.errors import ConfigurationError


class TestConnectionConfig:
    def test_valid(self):
        MqmConnectionConfig(location="http://mqm", shared_space="1001").validate()

    def test_missing_fields(self):
        cfg = MqmConnectionConfig(location="", shared_space=" ", client_type="")
        with pytest.raises(ConfigurationError) as exc_info:
            cfg.validate()
        assert exc_info.value.missing == ["location", "shared_space", "client_type"]


class TestLoadConfig:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("MQM_LOCATION", "https://mqm.example.com")
        monkeypatch.setenv("MQM_SHARED_SPACE", "2002")
        monkeypatch.setenv("MQM_TIMEOUT", "5")
        monkeypatch.setenv("JENKINS_URL", "http://ci:8080")
        cfg = load_config()
        assert cfg.mqm.location == "https://mqm.example.com"
        assert cfg.mqm.shared_space == "2002"
        assert cfg.mqm.timeout == 5.0
        assert cfg.jenkins.base_url == "http://ci:8080"

    def test_client_type_default(self, monkeypatch):
        monkeypatch.delenv("MQM_CLIENT_TYPE", raising=False)
        assert load_config().mqm.client_type == "HPE_CI_CLIENT"

    def test_validate_exits_on_missing(self, monkeypatch):
        monkeypatch.setenv("MQM_LOCATION", "")
        monkeypatch.setenv("MQM_SHARED_SPACE", "")
        monkeypatch.setenv("JENKINS_API_TOKEN", "")
        with pytest.raises(SystemExit):
            validate_config(load_config())
