"""Configuration management for the edt_gateway server."""

from __future__ import annotations

import logging
import os
import zoneinfo
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_UPSTREAM_URL_TEMPLATE = (
    "https://celcat.rambouillet.iut-velizy.uvsq.fr/cal/ical/{group_id}/schedule.ics"
)
DEFAULT_TIMEZONE = "Europe/Paris"
CACHE_TTL_SECONDS = 600  # 10 minutes

_TRUTHY = ("1", "true", "yes", "on")


class GatewaySettings(BaseModel):
    """Validated runtime settings for the gateway."""

    server_bind: str = Field(default="0.0.0.0", description="Host to bind")  # nosec B104
    server_port: int = Field(default=5000, description="Port to listen on")
    upstream_url_template: str = Field(
        default=DEFAULT_UPSTREAM_URL_TEMPLATE,
        description="Upstream feed URL with a {group_id} placeholder",
    )
    cache_ttl_seconds: int = Field(default=CACHE_TTL_SECONDS, ge=1)
    cache_max_entries: int = Field(default=256, ge=1)
    request_timeout: float = Field(default=10.0, gt=0, description="Upstream timeout in seconds")
    timezone: str = Field(default=DEFAULT_TIMEZONE, description="IANA zone used for day keys")
    default_range_days: int = Field(default=5, ge=0)
    coalesce_requests: bool = Field(default=True)
    log_level: Optional[str] = Field(default=None, description="Root log level; INFO when unset")
    debug_logging: bool = Field(default=False)

    @field_validator("upstream_url_template")
    @classmethod
    def _require_placeholder(cls, value: str) -> str:
        if "{group_id}" not in value:
            raise ValueError("upstream_url_template must contain '{group_id}'")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        level = value.strip().upper()
        if level not in LEVEL_NAMES:
            logger.warning("Unknown log level %r, using the default", value)
            return None
        return level

    @field_validator("timezone")
    @classmethod
    def _valid_timezone(cls, value: str) -> str:
        try:
            zoneinfo.ZoneInfo(value)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError):
            logger.warning("Invalid timezone %r, falling back to %r", value, DEFAULT_TIMEZONE)
            return DEFAULT_TIMEZONE
        return value

    @property
    def tzinfo(self) -> zoneinfo.ZoneInfo:
        return zoneinfo.ZoneInfo(self.timezone)


class ConfigManager:
    """Manages application configuration from environment variables and .env files."""

    def __init__(self, env_file_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            env_file_path: Optional path to .env file (defaults to .env in current directory)
        """
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Load .env file and set environment variables.

        Only sets variables that are not already in the environment.

        Returns:
            List of environment variable keys that were loaded from .env file
        """
        if not self.env_file_path.exists():
            logger.debug("No .env file found at %s", self.env_file_path)
            return []

        set_keys = []

        try:
            content = self.env_file_path.read_text(encoding="utf-8")
        except OSError:
            logger.warning("Failed to read .env file %s", self.env_file_path, exc_info=True)
            return []

        for raw_line in content.splitlines():
            line = raw_line.strip()

            if not line or line.startswith("#") or "=" not in line:
                continue

            key, val = line.split("=", 1)
            key = key.strip()
            val = val.strip().strip('"').strip("'")

            if key and key not in os.environ:
                os.environ[key] = val
                set_keys.append(key)

        if set_keys:
            logger.debug("Loaded .env defaults for keys: %s", ", ".join(set_keys))

        return set_keys

    def build_config_from_env(self) -> dict[str, Any]:
        """Build configuration dictionary from environment variables.

        Recognizes:
        - EDT_GATEWAY_HOST -> 'server_bind'
        - EDT_GATEWAY_PORT or PORT -> 'server_port' (int)
        - EDT_GATEWAY_UPSTREAM_URL -> 'upstream_url_template'
        - EDT_GATEWAY_CACHE_TTL -> 'cache_ttl_seconds' (int)
        - EDT_GATEWAY_CACHE_MAX_ENTRIES -> 'cache_max_entries' (int)
        - EDT_GATEWAY_REQUEST_TIMEOUT -> 'request_timeout' (float)
        - EDT_GATEWAY_TIMEZONE -> 'timezone'
        - EDT_GATEWAY_DEFAULT_RANGE_DAYS -> 'default_range_days' (int)
        - EDT_GATEWAY_COALESCE_REQUESTS -> 'coalesce_requests' (bool)
        - EDT_GATEWAY_LOG_LEVEL -> 'log_level'
        - EDT_GATEWAY_DEBUG -> 'debug_logging' (bool)

        Returns:
            Configuration dictionary accepted by ``GatewaySettings``
        """
        cfg: dict[str, Any] = {}

        host = os.environ.get("EDT_GATEWAY_HOST")
        if host:
            cfg["server_bind"] = host

        self._set_number(cfg, "server_port", int, "EDT_GATEWAY_PORT", "PORT")
        self._set_number(cfg, "cache_ttl_seconds", int, "EDT_GATEWAY_CACHE_TTL")
        self._set_number(cfg, "cache_max_entries", int, "EDT_GATEWAY_CACHE_MAX_ENTRIES")
        self._set_number(cfg, "request_timeout", float, "EDT_GATEWAY_REQUEST_TIMEOUT")
        self._set_number(cfg, "default_range_days", int, "EDT_GATEWAY_DEFAULT_RANGE_DAYS")

        upstream = os.environ.get("EDT_GATEWAY_UPSTREAM_URL")
        if upstream:
            cfg["upstream_url_template"] = upstream

        tz_name = os.environ.get("EDT_GATEWAY_TIMEZONE")
        if tz_name:
            cfg["timezone"] = tz_name

        coalesce = os.environ.get("EDT_GATEWAY_COALESCE_REQUESTS")
        if coalesce:
            cfg["coalesce_requests"] = coalesce.strip().lower() in _TRUTHY

        log_level = os.environ.get("EDT_GATEWAY_LOG_LEVEL")
        if log_level:
            cfg["log_level"] = log_level.upper()

        debug = os.environ.get("EDT_GATEWAY_DEBUG")
        if debug:
            cfg["debug_logging"] = debug.strip().lower() in _TRUTHY

        return cfg

    def _set_number(self, cfg: dict[str, Any], key: str, cast: Any, *env_names: str) -> None:
        raw = next((os.environ[name] for name in env_names if os.environ.get(name)), None)
        if raw is None:
            return
        try:
            cfg[key] = cast(raw)
        except ValueError:
            logger.warning("Invalid %s=%r; ignoring", env_names[0], raw)

    def load_full_config(self) -> dict[str, Any]:
        """Load .env file and build configuration from environment.

        Returns:
            Configuration dictionary
        """
        self.load_env_file()
        return self.build_config_from_env()


def load_settings(overrides: dict[str, Any] | None = None) -> GatewaySettings:
    """Build validated settings from the environment plus explicit overrides."""
    cfg = ConfigManager().load_full_config()
    if overrides:
        cfg.update({k: v for k, v in overrides.items() if v is not None})
    return GatewaySettings.model_validate(cfg)
