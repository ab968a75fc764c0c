"""Configuration management for the Stock Notifier client.

This module provides configuration loading, validation, and management for
the Stock Notifier client, including API settings, sync timing, defaults for
new watchlist entries, and CLI options.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Exception raised for configuration errors."""

    pass


class NotifierConfig:
    """Configuration for the Stock Notifier client.

    Manages configuration from files, environment variables, and defaults.

    Attributes:
        api_url: API server URL
        api_timeout: API request timeout in seconds
        refresh_interval: Seconds between background reloads of mounted screens
        search_debounce: Quiet period in seconds before a search fires
        default_dma_period: DMA window for symbols added to the watchlist
        default_alert_threshold: Alert threshold (percent) for added symbols
        verbose: Enable verbose logging
        json_output: Output in JSON format
    """

    def __init__(
        self,
        api_url: str = "http://localhost:8000",
        api_timeout: float = 30,
        refresh_interval: float = 30.0,
        search_debounce: float = 0.3,
        default_dma_period: int = 200,
        default_alert_threshold: float = 5.0,
        verbose: bool = False,
        json_output: bool = False,
    ):
        """Initialize configuration.

        Args:
            api_url: API server URL
            api_timeout: API request timeout in seconds
            refresh_interval: Background refresh interval in seconds
            search_debounce: Search quiet period in seconds
            default_dma_period: DMA window for new watchlist entries
            default_alert_threshold: Alert threshold for new watchlist entries
            verbose: Enable verbose logging
            json_output: Output in JSON format

        Example:
            >>> config = NotifierConfig(
            ...     api_url="http://localhost:8000",
            ...     refresh_interval=60.0
            ... )
        """
        self.api_url = api_url
        self.api_timeout = api_timeout
        self.refresh_interval = refresh_interval
        self.search_debounce = search_debounce
        self.default_dma_period = default_dma_period
        self.default_alert_threshold = default_alert_threshold
        self.verbose = verbose
        self.json_output = json_output

        self._validate()

    def _validate(self):
        """Validate configuration values.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.api_timeout <= 0:
            raise ConfigurationError("api_timeout must be positive")

        if self.refresh_interval <= 0:
            raise ConfigurationError("refresh_interval must be positive")

        if self.search_debounce < 0:
            raise ConfigurationError("search_debounce must not be negative")

        if self.default_dma_period < 1:
            raise ConfigurationError("default_dma_period must be at least 1")

        if self.default_alert_threshold <= 0 or self.default_alert_threshold > 100:
            raise ConfigurationError("default_alert_threshold must be between 0 and 100")

        if not self.api_url.startswith(("http://", "https://")):
            raise ConfigurationError("api_url must start with http:// or https://")

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get default configuration file path.

        Returns:
            Path to default config file (~/.stock_notifier/config.yaml)
        """
        return Path.home() / ".stock_notifier" / "config.yaml"

    @classmethod
    def load_from_file(cls, path: Optional[Path] = None) -> "NotifierConfig":
        """Load configuration from YAML file.

        Loads configuration from the specified path or the default path.
        If the file doesn't exist, returns default configuration.
        Merges file configuration with environment variable overrides.

        Args:
            path: Optional path to config file (default: ~/.stock_notifier/config.yaml)

        Returns:
            Configuration instance

        Raises:
            ConfigurationError: If configuration file is invalid

        Example:
            >>> config = NotifierConfig.load_from_file()
            >>> print(f"API URL: {config.api_url}")
        """
        config_path = path or cls.get_default_config_path()

        config_dict: dict[str, Any] = {}

        if config_path.exists():
            try:
                with open(config_path) as f:
                    file_config = yaml.safe_load(f)
                    if file_config:
                        config_dict = file_config
                logger.debug(f"Loaded configuration from {config_path}")
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Invalid YAML in configuration file: {e}"
                ) from e
            except OSError as e:
                raise ConfigurationError(
                    f"Failed to load configuration file: {e}"
                ) from e
        else:
            logger.debug(f"Configuration file not found at {config_path}, using defaults")

        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration file must contain a mapping")

        return cls.merge_with_defaults(config_dict)

    @classmethod
    def merge_with_defaults(cls, config_dict: dict[str, Any]) -> "NotifierConfig":
        """Merge configuration dictionary with defaults and environment variables.

        Precedence order (highest to lowest):
        1. Environment variables
        2. Config file values
        3. Default values

        Args:
            config_dict: Configuration dictionary from file

        Returns:
            Configuration instance

        Raises:
            ConfigurationError: If configuration is invalid

        Example:
            >>> config = NotifierConfig.merge_with_defaults({
            ...     "api": {"url": "http://example.com:8000"}
            ... })
        """
        api_config = config_dict.get("api", {}) or {}
        sync_config = config_dict.get("sync", {}) or {}
        defaults_config = config_dict.get("defaults", {}) or {}
        cli_config = config_dict.get("cli", {}) or {}

        try:
            api_url = os.getenv(
                "STOCK_NOTIFIER_API_URL",
                api_config.get("url", "http://localhost:8000"),
            )
            api_timeout = float(
                os.getenv(
                    "STOCK_NOTIFIER_API_TIMEOUT",
                    api_config.get("timeout", 30),
                )
            )
            refresh_interval = float(
                os.getenv(
                    "STOCK_NOTIFIER_REFRESH_INTERVAL",
                    sync_config.get("refresh_interval", 30.0),
                )
            )
            search_debounce = float(
                os.getenv(
                    "STOCK_NOTIFIER_SEARCH_DEBOUNCE",
                    sync_config.get("search_debounce", 0.3),
                )
            )
            default_dma_period = int(
                os.getenv(
                    "STOCK_NOTIFIER_DMA_PERIOD",
                    defaults_config.get("dma_period", 200),
                )
            )
            default_alert_threshold = float(
                os.getenv(
                    "STOCK_NOTIFIER_ALERT_THRESHOLD",
                    defaults_config.get("alert_threshold", 5.0),
                )
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        verbose = os.getenv("STOCK_NOTIFIER_VERBOSE") is not None or cli_config.get(
            "verbose", False
        )
        json_output = os.getenv("STOCK_NOTIFIER_JSON_OUTPUT") is not None or cli_config.get(
            "json_output", False
        )

        return cls(
            api_url=api_url,
            api_timeout=api_timeout,
            refresh_interval=refresh_interval,
            search_debounce=search_debounce,
            default_dma_period=default_dma_period,
            default_alert_threshold=default_alert_threshold,
            verbose=verbose,
            json_output=json_output,
        )

    def save_to_file(self, path: Optional[Path] = None):
        """Save configuration to YAML file.

        Args:
            path: Optional path to save to (default: ~/.stock_notifier/config.yaml)

        Raises:
            ConfigurationError: If save fails
        """
        config_path = path or self.get_default_config_path()

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w") as f:
                yaml.dump(self.to_dict(), f, default_flow_style=False)
            logger.info(f"Configuration saved to {config_path}")
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Configuration as nested dictionary (same layout as the YAML file)
        """
        return {
            "api": {
                "url": self.api_url,
                "timeout": self.api_timeout,
            },
            "sync": {
                "refresh_interval": self.refresh_interval,
                "search_debounce": self.search_debounce,
            },
            "defaults": {
                "dma_period": self.default_dma_period,
                "alert_threshold": self.default_alert_threshold,
            },
            "cli": {
                "verbose": self.verbose,
                "json_output": self.json_output,
            },
        }

    def __repr__(self) -> str:
        return (
            f"NotifierConfig("
            f"api_url={self.api_url!r}, "
            f"api_timeout={self.api_timeout}, "
            f"refresh_interval={self.refresh_interval}, "
            f"search_debounce={self.search_debounce}, "
            f"default_dma_period={self.default_dma_period}, "
            f"default_alert_threshold={self.default_alert_threshold}, "
            f"verbose={self.verbose}, "
            f"json_output={self.json_output}"
            ")"
        )


def load_config(config_path: Optional[Path] = None) -> NotifierConfig:
    """Load configuration from file or defaults.

    Convenience function for loading configuration.

    Args:
        config_path: Optional path to config file

    Returns:
        Configuration instance
    """
    return NotifierConfig.load_from_file(config_path)
