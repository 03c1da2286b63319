"""
Tests for ConfigManager.
"""

import os
import json
import base64
import tempfile

import pytest
import yaml
from pydantic import ValidationError

from azsharedblob.auth import SharedKeyCredential
from azsharedblob.core.config_manager import (
    ConfigManager,
    ClientConfig,
    LogLevel,
    DEFAULT_CHUNK_SIZE,
)
from azsharedblob.protocol.request_builder import EndpointProtocol

ACCOUNT_KEY = base64.b64encode(b"config-test-key").decode()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep AZSHAREDBLOB_* variables from the host out of the tests."""
    for name in list(os.environ):
        if name.startswith("AZSHAREDBLOB_"):
            monkeypatch.delenv(name)


class TestConfigManager:
    """Test suite for ConfigManager."""

    def test_load_defaults(self):
        """Test loading default configuration."""
        manager = ConfigManager()
        config = manager.load()

        assert config.account_name == ""
        assert config.protocol == EndpointProtocol.HTTPS
        assert config.api_version == "2023-05-03"
        assert config.chunk_size == DEFAULT_CHUNK_SIZE == 5 * 1024 * 1024
        assert config.max_concurrency == 1
        assert config.is_lite is False
        assert config.logging.level == LogLevel.INFO

    def test_load_from_yaml_file(self):
        """Test loading configuration from YAML file."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            yaml.dump({
                "account_name": "myaccount",
                "account_key": ACCOUNT_KEY,
                "chunk_size": 1024,
                "logging": {"level": "DEBUG"},
            }, f)
            config_file = f.name

        try:
            config = ConfigManager().load(config_file=config_file)

            assert config.account_name == "myaccount"
            assert config.chunk_size == 1024
            assert config.logging.level == LogLevel.DEBUG
        finally:
            os.unlink(config_file)

    def test_load_from_json_file(self):
        """Test loading configuration from JSON file."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            json.dump({"account_name": "jsonaccount", "protocol": "http"}, f)
            config_file = f.name

        try:
            config = ConfigManager().load(config_file=config_file)

            assert config.account_name == "jsonaccount"
            assert config.protocol == EndpointProtocol.HTTP
        finally:
            os.unlink(config_file)

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError):
            ConfigManager().load(config_file="/nonexistent/config.yaml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("account_name = 'x'")

        with pytest.raises(ValueError, match="Unsupported"):
            ConfigManager().load(config_file=str(path))

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"account_name": "fileaccount", "chunk_size": 10}))
        monkeypatch.setenv("AZSHAREDBLOB_ACCOUNT_NAME", "envaccount")
        monkeypatch.setenv("AZSHAREDBLOB_MAX_CONCURRENCY", "4")
        monkeypatch.setenv("AZSHAREDBLOB_LOG_LEVEL", "warning")

        config = ConfigManager().load(config_file=str(path))

        assert config.account_name == "envaccount"
        assert config.chunk_size == 10
        assert config.max_concurrency == 4
        assert config.logging.level == LogLevel.WARNING

    def test_cli_overrides_env(self, monkeypatch):
        monkeypatch.setenv("AZSHAREDBLOB_CHUNK_SIZE", "100")

        config = ConfigManager().load(cli_overrides={"chunk_size": 200, "max_concurrency": None})

        assert config.chunk_size == 200
        assert config.max_concurrency == 1

    def test_nested_merge(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"logging": {"level": "DEBUG", "format": "json"}}))

        config = ConfigManager().load(
            config_file=str(path), cli_overrides={"logging": {"level": "ERROR"}}
        )

        assert config.logging.level == LogLevel.ERROR
        assert config.logging.format == "json"

    def test_account_key_redacted_in_log(self, caplog):
        with caplog.at_level("DEBUG", logger="azsharedblob.core.config_manager"):
            ConfigManager().load(cli_overrides={"account_name": "myaccount", "account_key": ACCOUNT_KEY})

        assert ACCOUNT_KEY not in caplog.text
        assert "***REDACTED***" in caplog.text


class TestClientConfig:
    """Test ClientConfig validation."""

    @pytest.mark.parametrize("chunk_size", [0, -1, 4000 * 1024 * 1024 + 1])
    def test_chunk_size_bounds(self, chunk_size):
        with pytest.raises(ValidationError):
            ClientConfig(chunk_size=chunk_size)

    def test_max_concurrency_positive(self):
        with pytest.raises(ValidationError):
            ClientConfig(max_concurrency=0)

    @pytest.mark.parametrize("name", ["ab", "MyAccount", "my-account", "a" * 25])
    def test_invalid_account_name(self, name):
        with pytest.raises(ValidationError):
            ClientConfig(account_name=name)

    def test_invalid_protocol(self):
        with pytest.raises(ValidationError):
            ClientConfig(protocol="ftp")

    def test_credential(self):
        config = ClientConfig(account_name="myaccount", account_key=ACCOUNT_KEY, is_lite=True)

        credential = config.credential()

        assert credential == SharedKeyCredential("myaccount", ACCOUNT_KEY, True)

    def test_credential_requires_account(self):
        with pytest.raises(ValueError):
            ClientConfig().credential()
