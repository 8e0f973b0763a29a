"""
Configuration management for the Mars Dashboard.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import json
import logging
import os
from typing import Any, Dict, List, Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from mars_dashboard.exceptions import ConfigError

_LOG = logging.getLogger(__name__)

ROVERS = ["Curiosity", "Opportunity", "Spirit"]

MODES = ("development", "production", "test")

DEFAULT_CONFIG = {
    "api_key": "",
    "host": "0.0.0.0",
    "port": 3000,
    "mode": "development",
    "sol": 900,
    "apod_url": "https://api.nasa.gov/planetary/apod",
    "rover_photos_url": "https://api.nasa.gov/mars-photos/api/v1/rovers/{rover}/photos",
    "proxy_base_url": "",
    "request_timeout": 15,
    "user_name": "Student",
    "rovers": ROVERS,
}

# environment variable -> config key; later entries win
ENV_OVERRIDES = {
    "API_KEY": "api_key",
    "NASA_API_KEY": "api_key",
    "HOST": "host",
    "PORT": "port",
    "MARS_DASHBOARD_MODE": "mode",
    "MARS_DASHBOARD_PROXY_URL": "proxy_base_url",
}


class Config:
    """Configuration management for the dashboard and its proxy."""

    def __init__(self, config_file_path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None):
        """Initialize configuration.

        Values come from the JSON file (when given and present), then from the
        process environment. ``environ`` replaces ``os.environ`` for tests.
        """
        self._config_file_path = config_file_path
        self._environ = environ
        self._config: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load configuration from file and environment."""
        self._config = DEFAULT_CONFIG.copy()
        if self._config_file_path and os.path.exists(self._config_file_path):
            try:
                with open(self._config_file_path, "r", encoding="utf-8") as file:
                    self._config.update(json.load(file))
                    _LOG.info("Configuration loaded from %s", self._config_file_path)
            except (OSError, json.JSONDecodeError) as ex:
                _LOG.error("Failed to load configuration: %s", ex)
        else:
            _LOG.info("Configuration file not found, using defaults")

        if self._environ is None:
            load_dotenv(find_dotenv(usecwd=True))
        self._apply_environment(os.environ if self._environ is None else self._environ)
        self._validate(self._config)

    def _apply_environment(self, environ: Mapping[str, str]) -> None:
        for variable, key in ENV_OVERRIDES.items():
            value = environ.get(variable)
            if value:
                self._config[key] = value

    @staticmethod
    def _validate(config: Dict[str, Any]) -> None:
        try:
            config["port"] = int(config["port"])
            config["sol"] = int(config["sol"])
            config["request_timeout"] = float(config["request_timeout"])
        except (TypeError, ValueError) as ex:
            raise ConfigError(f"Invalid numeric setting: {ex}") from ex

        if config["mode"] not in MODES:
            raise ConfigError(f"Unknown mode {config['mode']!r}, expected one of {MODES}")
        if not config["rovers"]:
            raise ConfigError("At least one rover must be configured")

    def save(self) -> None:
        """Save configuration to file."""
        if not self._config_file_path:
            return
        try:
            directory = os.path.dirname(self._config_file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self._config_file_path, "w", encoding="utf-8") as file:
                json.dump(self._config, file, indent=2)
                _LOG.info("Configuration saved to %s", self._config_file_path)
        except OSError as ex:
            _LOG.error("Failed to save configuration: %s", ex)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self._config[key] = value

    def update(self, data: Dict[str, Any]) -> None:
        """Update configuration with new data; rejected updates change nothing."""
        merged = {**self._config, **data}
        self._validate(merged)
        self._config = merged
        self.save()

    @property
    def api_key(self) -> str:
        """Get NASA API key."""
        api_key = self._config.get("api_key", "")
        return api_key if api_key else "DEMO_KEY"

    @property
    def host(self) -> str:
        return self._config["host"]

    @property
    def port(self) -> int:
        return self._config["port"]

    @property
    def mode(self) -> str:
        """Get run mode; ``test`` hides error details in responses."""
        return self._config["mode"]

    @property
    def is_test_mode(self) -> bool:
        return self.mode == "test"

    @property
    def sol(self) -> int:
        """Get the Martian sol queried for rover photos."""
        return self._config["sol"]

    @property
    def apod_url(self) -> str:
        return self._config["apod_url"]

    @property
    def rover_photos_url(self) -> str:
        return self._config["rover_photos_url"]

    @property
    def proxy_base_url(self) -> str:
        """Get the proxy URL the dashboard fetches from."""
        url = self._config.get("proxy_base_url") or f"http://localhost:{self.port}"
        return url.rstrip("/")

    @property
    def request_timeout(self) -> float:
        """Get total request timeout in seconds."""
        return self._config["request_timeout"]

    @property
    def user_name(self) -> str:
        return self._config.get("user_name", "")

    @property
    def rovers(self) -> List[str]:
        """Get the rover names shown as tabs."""
        return list(self._config["rovers"])
