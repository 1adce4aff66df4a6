"""Configuration service for managing application settings."""

import json
import os
from pathlib import Path
from typing import Any

import structlog

from ..models import STANDARD_POOL_NAMES, AppConfig
from .errors import ConfigurationError
from .repo_sync import parse_repo_url

log = structlog.stdlib.get_logger()

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "neko-companion" / "config.json"
DEFAULT_DATA_DIRECTORY = Path.home() / ".local" / "share" / "neko-companion"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ValidationResult:
    """Result of configuration validation."""

    def __init__(self, is_valid: bool, errors: list[str] | None = None) -> None:
        self.is_valid: bool = is_valid
        self.errors: list[str] = errors or []


class ConfigurationService:
    """Service for managing application configuration.

    The file holds the repository token, so it is written readable by the
    owner only.
    """

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path: Path = config_path or DEFAULT_CONFIG_PATH
        log.info("Configuration service initialized", config_path=str(self.config_path))

    def load_config(self) -> AppConfig:
        """Load configuration from file or return default configuration."""
        if not self.config_path.exists():
            log.info("Configuration file not found, using defaults")
            return self.get_default_config()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data: dict[str, Any] = json.load(f)

            config = self._dict_to_config(data)
            validation_result = self.validate_config(config)

            if not validation_result.is_valid:
                log.warning("Invalid configuration loaded, using defaults", errors=validation_result.errors)
                return self.get_default_config()

            log.info("Configuration loaded successfully")
            return config

        except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as e:
            log.error("Failed to load configuration, using defaults", error=str(e))
            return self.get_default_config()

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
                expected="a configuration that passes validation",
            )

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            data = self._config_to_dict(config)
            fd = os.open(self.config_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            # O_CREAT's mode only applies to new files
            os.chmod(self.config_path, 0o600)

            log.info("Configuration saved successfully")

        except OSError as e:
            log.error("Failed to save configuration", error=str(e))
            raise

    def validate_config(self, config: AppConfig) -> ValidationResult:
        """Validate configuration settings."""
        errors = []

        # An empty URL means sync is not configured yet
        if config.repo_url:
            try:
                parse_repo_url(config.repo_url)
            except ConfigurationError as e:
                errors.append(e.message)

        if not isinstance(config.token, str):
            errors.append("token must be a string")

        if not isinstance(config.data_directory, Path):
            errors.append("data_directory must be a Path object")
        elif not config.data_directory.is_absolute():
            errors.append("data_directory must be an absolute path")

        if not isinstance(config.request_delay, (int, float)) or config.request_delay < 0:
            errors.append("request_delay must be a non-negative number")
        elif config.request_delay > 60:
            errors.append("request_delay should not exceed 60 seconds")

        if config.log_level not in VALID_LOG_LEVELS:
            errors.append(f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}")

        if not isinstance(config.utc_offset_hours, int) or not -12 <= config.utc_offset_hours <= 14:
            errors.append("utc_offset_hours must be an integer between -12 and 14")

        if not isinstance(config.session_window_days, int) or not 1 <= config.session_window_days <= 366:
            errors.append("session_window_days must be between 1 and 366")

        if not isinstance(config.session_lookback_months, int) or not 1 <= config.session_lookback_months <= 120:
            errors.append("session_lookback_months must be between 1 and 120")

        if not all(isinstance(name, str) and name for name in config.standard_pool_names):
            errors.append("standard_pool_names must contain non-empty strings")

        if not isinstance(config.sync_tolerance_seconds, (int, float)) or config.sync_tolerance_seconds < 0:
            errors.append("sync_tolerance_seconds must be a non-negative number")

        return ValidationResult(len(errors) == 0, errors)

    def get_default_config(self) -> AppConfig:
        """Get default configuration."""
        return AppConfig(
            repo_url="",
            token="",
            data_directory=DEFAULT_DATA_DIRECTORY,
            request_delay=0.5,
            log_level="INFO",
        )

    def _config_to_dict(self, config: AppConfig) -> dict[str, Any]:
        """Convert AppConfig to dictionary for JSON serialization."""
        return {
            "repo_url": config.repo_url,
            "token": config.token,
            "data_directory": str(config.data_directory),
            "request_delay": config.request_delay,
            "log_level": config.log_level,
            "utc_offset_hours": config.utc_offset_hours,
            "session_window_days": config.session_window_days,
            "session_lookback_months": config.session_lookback_months,
            "standard_pool_names": list(config.standard_pool_names),
            "sync_tolerance_seconds": config.sync_tolerance_seconds,
            "game_data_updated": config.game_data_updated,
            "gacha_data_updated": config.gacha_data_updated,
        }

    def _dict_to_config(self, data: dict[str, Any]) -> AppConfig:
        """Convert dictionary to AppConfig.

        Settings missing from older files fall back to their defaults.
        """
        defaults = self.get_default_config()

        request_delay_raw = data.get("request_delay", defaults.request_delay)
        pool_names_raw = data.get("standard_pool_names", STANDARD_POOL_NAMES)
        if not isinstance(pool_names_raw, list | tuple):
            raise TypeError("standard_pool_names must be a list")

        return AppConfig(
            repo_url=str(data.get("repo_url") or ""),
            token=str(data.get("token") or ""),
            data_directory=Path(str(data.get("data_directory") or defaults.data_directory)).expanduser(),
            request_delay=float(request_delay_raw) if isinstance(request_delay_raw, (int, float)) else defaults.request_delay,
            log_level=str(data.get("log_level", defaults.log_level)).upper(),
            utc_offset_hours=int(data.get("utc_offset_hours", defaults.utc_offset_hours)),
            session_window_days=int(data.get("session_window_days", defaults.session_window_days)),
            session_lookback_months=int(data.get("session_lookback_months", defaults.session_lookback_months)),
            standard_pool_names=tuple(str(name) for name in pool_names_raw),
            sync_tolerance_seconds=float(data.get("sync_tolerance_seconds", defaults.sync_tolerance_seconds)),
            game_data_updated=data.get("game_data_updated"),
            gacha_data_updated=data.get("gacha_data_updated"),
        )
