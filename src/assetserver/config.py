"""
=============================================================================
CONFIGURATION
=============================================================================

Settings for a resource application, in one dataclass.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  Source                 Example                                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │  Code                   AppConfig(public_dir="./public")            │
    │  Environment            ASSETS_PUBLIC_DIR=./public                  │
    │  Command line           python -m assetserver --public ./public     │
    └─────────────────────────────────────────────────────────────────────┘

Configuration is validated once, at startup. A typo in a directory name
should stop the process, not turn every request into a 404.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


class ConfigError(ValueError):
    """Raised when configuration values are invalid."""


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class AppConfig:
    """
    Configuration for the resource application.

    Development:
        AppConfig(public_dir="./public", production=False, log_level="DEBUG")

    Production:
        AppConfig(host="0.0.0.0", public_dir="/srv/public", cache_max_age=31536000)
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces (containers)
    """

    port: int = 8080

    # ─────────────────────────────────────────────────────────────────────
    # RESOURCES
    # ─────────────────────────────────────────────────────────────────────

    public_dir: Optional[str] = None
    """Filesystem directory served under public_url_path."""

    public_url_path: str = "/public"

    resource_package: Optional[str] = None
    """
    Package whose bundled "public" directory is served under
    resource_url_path. Lets an installed app ship its assets as
    package data.
    """

    resource_url_path: str = "/assets"

    webjars_package: Optional[str] = None
    """Package holding a "webjars/<library>/<version>/" tree."""

    webjars_url_path: str = "/webjars"

    # ─────────────────────────────────────────────────────────────────────
    # CACHING
    # ─────────────────────────────────────────────────────────────────────

    cache_max_age: int = 3600
    """
    Cache-Control max-age in seconds (production only).
    Versioned URLs change with the file, so this can be long.
    """

    production: bool = True
    """
    False switches Cache-Control to no-cache, so browsers revalidate
    every resource while you edit them.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"

    log_format: str = "text"
    """Access log format: 'text' or 'json'."""

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        Create configuration from environment variables.

        ASSETS_HOST              Bind host (default: 127.0.0.1)
        ASSETS_PORT              Bind port (default: 8080)
        ASSETS_PUBLIC_DIR        Directory served under /public
        ASSETS_PUBLIC_URL_PATH   URL prefix for it (default: /public)
        ASSETS_PACKAGE           Package with bundled public resources
        ASSETS_WEBJARS_PACKAGE   Package with bundled web libraries
        ASSETS_CACHE_MAX_AGE     Cache-Control max-age (default: 3600)
        ASSETS_PRODUCTION        1/0 (default: 1)
        ASSETS_LOG_LEVEL         Logging level (default: INFO)
        ASSETS_LOG_FORMAT        text or json (default: text)
        """
        try:
            return cls(
                host=os.getenv("ASSETS_HOST", "127.0.0.1"),
                port=int(os.getenv("ASSETS_PORT", "8080")),
                public_dir=os.getenv("ASSETS_PUBLIC_DIR"),
                public_url_path=os.getenv("ASSETS_PUBLIC_URL_PATH", "/public"),
                resource_package=os.getenv("ASSETS_PACKAGE"),
                webjars_package=os.getenv("ASSETS_WEBJARS_PACKAGE"),
                cache_max_age=int(os.getenv("ASSETS_CACHE_MAX_AGE", "3600")),
                production=_env_bool("ASSETS_PRODUCTION", True),
                log_level=os.getenv("ASSETS_LOG_LEVEL", "INFO").upper(),
                log_format=os.getenv("ASSETS_LOG_FORMAT", "text").lower(),
            )
        except ValueError as e:
            raise ConfigError(f"Invalid environment configuration: {e}") from e

    @property
    def log_level_number(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.INFO)

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigError: on the first invalid value.
        """
        if not 0 <= self.port < 65536:
            raise ConfigError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.cache_max_age < 0:
            raise ConfigError("cache_max_age must be >= 0")

        if self.public_dir is not None and not os.path.isdir(self.public_dir):
            raise ConfigError(f"Public directory does not exist: {self.public_dir}")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"Unknown log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ConfigError(f"Unknown log format: {self.log_format}")

        mounts = [self.public_url_path, self.resource_url_path, self.webjars_url_path]
        for url_path in mounts:
            if not url_path.startswith("/"):
                raise ConfigError(f"URL path must start with '/': {url_path}")
