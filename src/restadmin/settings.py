"""
Runtime settings for restadmin.

Settings are read from environment variables once and passed explicitly to
the components that need them:

    RESTADMIN_ENV                 development (default), test or production
    RESTADMIN_API_URL             Base URL of the REST backend
    RESTADMIN_HTTP_TIMEOUT        Request timeout in seconds (default 30)
    RESTADMIN_STRICT_IDENTIFIERS  Fail on duplicate target identifiers (default true)
    RESTADMIN_LOG_LEVEL           Log level name (default INFO)
    RESTADMIN_LOG_DIR             Directory for the JSONL log file

Usage:
    from restadmin.settings import RestAdminSettings

    settings = RestAdminSettings.from_env()
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from restadmin.errors import ConfigurationError

logger = logging.getLogger(__name__)


class AdminEnv(StrEnum):
    """Runtime environment values."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


ENV_PREFIX = "RESTADMIN_"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _parse_env(value: str) -> AdminEnv:
    value = value.lower().strip()
    if value in ("production", "prod"):
        return AdminEnv.PRODUCTION
    if value in ("test", "testing"):
        return AdminEnv.TEST
    if value in ("development", "dev", ""):
        return AdminEnv.DEVELOPMENT
    logger.warning(
        "Unknown %sENV value '%s'. Defaulting to development.", ENV_PREFIX, value
    )
    return AdminEnv.DEVELOPMENT


def _parse_bool(name: str, value: str, default: bool) -> bool:
    value = value.lower().strip()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning("Ignoring non-boolean %s%s=%r", ENV_PREFIX, name, value)
    return default


class RestAdminSettings(BaseModel):
    """Settings shared by the client, resolver and CLI."""

    env: AdminEnv = Field(default=AdminEnv.DEVELOPMENT)
    api_url: str | None = Field(default=None, description="REST backend base URL")
    http_timeout: float = Field(default=30.0, description="Request timeout (s)")
    strict_identifiers: bool = Field(
        default=True,
        description="Raise on duplicate identifiers in a target collection",
    )
    log_level: str = Field(default="INFO")
    log_dir: str | None = Field(default=None)

    model_config = ConfigDict(frozen=True)

    @field_validator("http_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper().strip()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level '{v}'")
        return level

    @property
    def is_production(self) -> bool:
        return self.env == AdminEnv.PRODUCTION

    @property
    def log_level_number(self) -> int:
        return logging.getLevelNamesMapping()[self.log_level]

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RestAdminSettings:
        """
        Build settings from ``RESTADMIN_*`` environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        environ = os.environ if environ is None else environ
        defaults = cls()

        def get(name: str) -> str | None:
            return environ.get(f"{ENV_PREFIX}{name}")

        timeout = get("HTTP_TIMEOUT")
        strict = get("STRICT_IDENTIFIERS")

        try:
            return cls(
                env=_parse_env(get("ENV") or ""),
                api_url=get("API_URL") or None,
                http_timeout=timeout or defaults.http_timeout,
                strict_identifiers=(
                    _parse_bool("STRICT_IDENTIFIERS", strict, defaults.strict_identifiers)
                    if strict is not None
                    else defaults.strict_identifiers
                ),
                log_level=get("LOG_LEVEL") or defaults.log_level,
                log_dir=get("LOG_DIR") or None,
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid {ENV_PREFIX}* settings: {e}") from e
