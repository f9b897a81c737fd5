"""Configuration service for settings and the stored API key."""

import json
from dataclasses import replace
from pathlib import Path

import structlog

from ..models import AppConfig
from .errors import ConfigurationError

log = structlog.stdlib.get_logger()

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ValidationResult:
    """Result of configuration validation."""

    def __init__(self, is_valid: bool, errors: list[str] | None = None) -> None:
        self.is_valid: bool = is_valid
        self.errors: list[str] = errors or []


class ConfigurationService:
    """Service for managing application configuration.

    The Steam Web API key lives in the same file; it is written back every
    time a run is submitted.
    """

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path: Path = config_path or Path.home() / ".config" / "steam-group-stats" / "config.json"
        log.info("Configuration service initialized", config_path=str(self.config_path))

    def load_config(self) -> AppConfig:
        """Load configuration from file or return default configuration."""
        if not self.config_path.exists():
            log.info("Configuration file not found, using defaults")
            return self._get_default_config()

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data: dict[str, str | float | bool | None] = json.load(f)

            config = self._dict_to_config(data)
            validation_result = self.validate_config(config)

            if not validation_result.is_valid:
                log.warning("Invalid configuration loaded, using defaults", errors=validation_result.errors)
                return self._get_default_config()

            log.info("Configuration loaded successfully", has_api_key=bool(config.api_key))
            return config

        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            log.error("Failed to load configuration, using defaults", error=str(e))
            return self._get_default_config()

    def save_config(self, config: AppConfig) -> None:
        """Save configuration to file.

        Raises:
            ConfigurationError: If the configuration does not validate
            OSError: If the file cannot be written
        """
        validation_result = self.validate_config(config)
        if not validation_result.is_valid:
            raise ConfigurationError(
                f"Invalid configuration: {', '.join(validation_result.errors)}",
                current_value=validation_result.errors,
            )

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            data = self._config_to_dict(config)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)

            log.info("Configuration saved successfully")

        except OSError as e:
            log.error("Failed to save configuration", error=str(e))
            raise

    def remember_run(self, api_key: str, group_input: str) -> AppConfig:
        """Persist the credential and group of a newly submitted run."""
        config = replace(self.load_config(), api_key=api_key.strip(), last_group=group_input.strip())
        self.save_config(config)
        return config

    def validate_config(self, config: AppConfig) -> ValidationResult:
        """Validate configuration settings."""
        errors = []

        if not isinstance(config.api_key, str):
            errors.append("api_key must be a string")
        elif config.api_key and not config.api_key.isalnum():
            errors.append("api_key must contain only letters and digits")

        if not isinstance(config.last_group, str):
            errors.append("last_group must be a string")

        if not isinstance(config.request_timeout, (int, float)) or config.request_timeout < 1:
            errors.append("request_timeout must be at least 1 second")
        elif config.request_timeout > 120:
            errors.append("request_timeout should not exceed 120 seconds")

        if config.log_level not in VALID_LOG_LEVELS:
            errors.append(f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}")

        if config.proxy_url is not None:
            if not isinstance(config.proxy_url, str) or not config.proxy_url.startswith(("http://", "https://")):
                errors.append("proxy_url must be an http(s) URL")

        if not isinstance(config.verify_ssl, bool):
            errors.append("verify_ssl must be a boolean")

        return ValidationResult(len(errors) == 0, errors)

    def _get_default_config(self) -> AppConfig:
        """Get default configuration."""
        return AppConfig(
            api_key="",
            last_group="",
            request_timeout=30.0,
            log_level="INFO",
            proxy_url=None,
            verify_ssl=True,
        )

    def _config_to_dict(self, config: AppConfig) -> dict[str, str | float | bool | None]:
        """Convert AppConfig to dictionary for JSON serialization."""
        return {
            "api_key": config.api_key,
            "last_group": config.last_group,
            "request_timeout": config.request_timeout,
            "log_level": config.log_level,
            "proxy_url": config.proxy_url,
            "verify_ssl": config.verify_ssl,
        }

    def _dict_to_config(self, data: dict[str, str | float | bool | None]) -> AppConfig:
        """Convert dictionary to AppConfig, falling back per field on bad types."""
        timeout_raw = data.get("request_timeout", 30.0)
        request_timeout = float(timeout_raw) if isinstance(timeout_raw, (int, float)) and not isinstance(timeout_raw, bool) else 30.0

        proxy_raw = data.get("proxy_url")
        proxy_url = str(proxy_raw) if proxy_raw else None

        verify_raw = data.get("verify_ssl", True)
        verify_ssl = verify_raw if isinstance(verify_raw, bool) else True

        return AppConfig(
            api_key=str(data.get("api_key") or ""),
            last_group=str(data.get("last_group") or ""),
            request_timeout=request_timeout,
            log_level=str(data["log_level"]) if isinstance(data.get("log_level"), str) else "INFO",
            proxy_url=proxy_url,
            verify_ssl=verify_ssl,
        )
