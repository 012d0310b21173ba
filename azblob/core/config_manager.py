"""
Configuration management for azblob.

Handles loading, validation, and access to client settings.
"""

import json
import logging
import os
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from azblob.constants import DEFAULT_LINK_EXPIRY_SECONDS, DEFAULT_TIMEOUT
from azblob.core.logging_config import setup_logging

logger = logging.getLogger(__name__)

_ACCOUNT_KEY_PATTERN = re.compile(r'(AccountKey=)[^;]+', re.IGNORECASE)


class LogLevel(str, Enum):
    """Valid log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""
    JSON = "json"
    TEXT = "text"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: LogLevel = LogLevel.WARNING
    format: LogFormat = LogFormat.TEXT
    file: Optional[str] = None
    rotation_size: str = "10MB"
    rotation_count: int = 5
    module_levels: Optional[Dict[str, str]] = Field(
        default=None,
        description="Per-module log levels, e.g., {'azblob.auth.sharedkey': 'DEBUG'}"
    )

    model_config = ConfigDict(use_enum_values=True)


class AzBlobConfig(BaseModel):
    """Main azblob configuration schema."""

    connection_string: Optional[str] = Field(
        default=None,
        description="Storage account connection string"
    )

    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0.0,
        description="HTTP timeout in seconds"
    )

    link_expiry_seconds: int = Field(
        default=DEFAULT_LINK_EXPIRY_SECONDS,
        gt=0,
        description="Lifetime of read-only blob links when no expiry is given"
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("connection_string")
    @classmethod
    def validate_connection_string(cls, v: Optional[str]) -> Optional[str]:
        """Reject blank connection strings."""
        if v is not None and not v.strip():
            raise ValueError("connection_string cannot be blank")
        return v

    model_config = ConfigDict(use_enum_values=True)


def redact_connection_string(connection_string: Optional[str]) -> Optional[str]:
    """Replace the AccountKey value of a connection string."""
    if connection_string is None:
        return None
    return _ACCOUNT_KEY_PATTERN.sub(r'\1***REDACTED***', connection_string)


class ConfigManager:
    """
    Manages azblob configuration loading and validation.

    Configuration precedence (highest to lowest):
    1. Explicit overrides
    2. Environment variables (AZBLOB_*)
    3. Configuration file (YAML/JSON)
    4. Defaults
    """

    def __init__(self):
        self._config: Optional[AzBlobConfig] = None
        self._config_file: Optional[Path] = None

    def load(
        self,
        config_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
        configure_logging: bool = True
    ) -> AzBlobConfig:
        """
        Load and validate configuration from multiple sources.

        Args:
            config_file: Path to configuration file (YAML or JSON)
            overrides: Dictionary of explicit overrides
            configure_logging: Apply the logging section to the azblob logger

        Returns:
            Validated AzBlobConfig instance

        Raises:
            ValidationError: If configuration is invalid
            FileNotFoundError: If specified config file doesn't exist
        """
        config_dict: Dict[str, Any] = {}

        if config_file:
            config_dict = self._load_from_file(config_file)
            self._config_file = Path(config_file)
            logger.info(f"Loaded configuration from file: {config_file}")

        env_config = self._load_from_env()
        config_dict = self._merge_configs(config_dict, env_config)
        if env_config:
            logger.info(f"Applied {len(env_config)} environment variable overrides")

        if overrides:
            config_dict = self._merge_configs(config_dict, overrides)
            logger.info(f"Applied {len(overrides)} explicit overrides")

        try:
            self._config = AzBlobConfig(**config_dict)
        except ValidationError as e:
            logger.error(f"Configuration validation failed: {e.error_count()} error(s)")
            raise

        self._log_configuration()

        if configure_logging:
            self.apply_logging()

        return self._config

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

        if connection_string := os.getenv("AZBLOB_CONNECTION_STRING"):
            config["connection_string"] = connection_string
        if timeout := os.getenv("AZBLOB_TIMEOUT"):
            config["timeout"] = float(timeout)
        if link_expiry := os.getenv("AZBLOB_LINK_EXPIRY_SECONDS"):
            config["link_expiry_seconds"] = int(link_expiry)

        if log_level := os.getenv("AZBLOB_LOG_LEVEL"):
            config.setdefault("logging", {})["level"] = log_level.upper()
        if log_format := os.getenv("AZBLOB_LOG_FORMAT"):
            config.setdefault("logging", {})["format"] = log_format.lower()
        if log_file := os.getenv("AZBLOB_LOG_FILE"):
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

        config_dict = self._config.model_dump()
        config_dict["connection_string"] = redact_connection_string(
            config_dict.get("connection_string")
        )

        logger.debug(f"Active configuration: {json.dumps(config_dict, indent=2)}")

    def get_config(self) -> AzBlobConfig:
        """
        Get the loaded configuration.

        Raises:
            RuntimeError: If configuration hasn't been loaded
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._config

    def apply_logging(self) -> logging.Logger:
        """
        Configure the azblob logger from the loaded logging section.

        Raises:
            RuntimeError: If configuration hasn't been loaded
        """
        logging_config = self.get_config().logging
        return setup_logging(
            level=logging_config.level,
            format_type=logging_config.format,
            log_file=logging_config.file,
            rotation_size=logging_config.rotation_size,
            rotation_count=logging_config.rotation_count,
            module_levels=logging_config.module_levels
        )

    def reload(self) -> AzBlobConfig:
        """Reload configuration from the same sources."""
        config_file = str(self._config_file) if self._config_file else None
        return self.load(config_file=config_file)
