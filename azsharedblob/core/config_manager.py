"""
Configuration management for azsharedblob.

Handles loading, validation, and access to client configuration.
"""

import os
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from enum import Enum

import yaml
from pydantic import BaseModel, Field, field_validator, ValidationError, ConfigDict

from azsharedblob.auth.credentials import SharedKeyCredential
from azsharedblob.protocol.request_builder import (
    DEFAULT_API_VERSION,
    EndpointProtocol,
)

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 5 * 1024 * 1024  # 5 MiB
MAX_BLOCK_SIZE = 4000 * 1024 * 1024  # service limit per block

ENV_PREFIX = "AZSHAREDBLOB_"


class LogLevel(str, Enum):
    """Valid log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: LogLevel = LogLevel.INFO
    format: str = "text"
    file: Optional[str] = None
    rotation_size: str = "10MB"
    rotation_count: int = 5
    module_levels: Optional[Dict[str, str]] = Field(
        default=None,
        description="Per-module log levels, e.g., {'azsharedblob.services.blob': 'DEBUG'}"
    )


class ClientConfig(BaseModel):
    """Blob client configuration schema."""

    account_name: str = Field(default="", description="Storage account name")
    account_key: str = Field(default="", description="Base64-encoded shared key")
    is_lite: bool = Field(default=False, description="Sign with SharedKeyLite")
    protocol: EndpointProtocol = EndpointProtocol.HTTPS
    api_version: str = Field(default=DEFAULT_API_VERSION, description="x-ms-version header value")

    chunk_size: int = Field(
        default=DEFAULT_CHUNK_SIZE,
        ge=1,
        le=MAX_BLOCK_SIZE,
        description="Maximum block size in bytes"
    )
    max_concurrency: int = Field(
        default=1,
        ge=1,
        description="Blocks staged in parallel (1 = sequential)"
    )
    timeout: float = Field(default=30.0, gt=0.0, description="HTTP timeout in seconds")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("account_name")
    @classmethod
    def validate_account_name(cls, v: str) -> str:
        """Account names are 3-24 lowercase letters and digits."""
        if v and not (3 <= len(v) <= 24 and v.isalnum() and v.lower() == v):
            raise ValueError("Account name must be 3-24 lowercase letters or digits")
        return v

    model_config = ConfigDict(use_enum_values=False)

    def credential(self) -> SharedKeyCredential:
        """
        Build the shared key credential.

        Raises:
            ValueError: If account name or key is not configured
        """
        if not self.account_name or not self.account_key:
            raise ValueError("Both account_name and account_key must be configured")
        return SharedKeyCredential(self.account_name, self.account_key, self.is_lite)


class ConfigManager:
    """
    Manages client configuration loading and validation.

    Configuration precedence (highest to lowest):
    1. CLI arguments
    2. Environment variables (AZSHAREDBLOB_*)
    3. Configuration file (YAML/JSON)
    4. Defaults
    """

    def __init__(self):
        self._config: Optional[ClientConfig] = None

    def load(
        self,
        config_file: Optional[str] = None,
        cli_overrides: Optional[Dict[str, Any]] = None
    ) -> ClientConfig:
        """
        Load and validate configuration from multiple sources.

        Args:
            config_file: Path to configuration file (YAML or JSON)
            cli_overrides: Dictionary of CLI argument overrides

        Returns:
            Validated ClientConfig instance

        Raises:
            ValidationError: If configuration is invalid
            FileNotFoundError: If specified config file doesn't exist
        """
        logger.debug("Loading azsharedblob configuration")

        config_dict: Dict[str, Any] = {}

        if config_file:
            config_dict = self._load_from_file(config_file)
            logger.debug(f"Loaded configuration from file: {config_file}")

        env_config = self._load_from_env()
        config_dict = self._merge_configs(config_dict, env_config)
        if env_config:
            logger.debug(f"Applied {len(env_config)} environment variable overrides")

        if cli_overrides:
            cli_overrides = {k: v for k, v in cli_overrides.items() if v is not None}
            config_dict = self._merge_configs(config_dict, cli_overrides)
            logger.debug(f"Applied {len(cli_overrides)} CLI argument overrides")

        try:
            self._config = ClientConfig(**config_dict)
            self._log_configuration()
            return self._config
        except ValidationError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

    def _load_from_file(self, file_path: str) -> Dict[str, Any]:
        """Load configuration from YAML or JSON file."""
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        with open(path, 'r') as f:
            if path.suffix in ['.yaml', '.yml']:
                return yaml.safe_load(f) or {}
            elif path.suffix == '.json':
                return json.load(f)
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        if account_name := os.getenv(f"{ENV_PREFIX}ACCOUNT_NAME"):
            config["account_name"] = account_name
        if account_key := os.getenv(f"{ENV_PREFIX}ACCOUNT_KEY"):
            config["account_key"] = account_key
        if protocol := os.getenv(f"{ENV_PREFIX}PROTOCOL"):
            config["protocol"] = protocol.lower()
        if api_version := os.getenv(f"{ENV_PREFIX}API_VERSION"):
            config["api_version"] = api_version
        if chunk_size := os.getenv(f"{ENV_PREFIX}CHUNK_SIZE"):
            config["chunk_size"] = int(chunk_size)
        if max_concurrency := os.getenv(f"{ENV_PREFIX}MAX_CONCURRENCY"):
            config["max_concurrency"] = int(max_concurrency)

        if log_level := os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            config.setdefault("logging", {})["level"] = log_level.upper()
        if log_file := os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            config.setdefault("logging", {})["file"] = log_file

        return config

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _log_configuration(self) -> None:
        """Log the loaded configuration with the account key redacted."""
        if not self._config:
            return

        config_dict = self._config.model_dump(mode="json")
        if config_dict.get("account_key"):
            config_dict["account_key"] = "***REDACTED***"

        logger.debug(f"Active configuration: {json.dumps(config_dict, indent=2)}")
