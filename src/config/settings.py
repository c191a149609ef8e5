"""
Configuration for the AgenticVoice access-control service.

Two pydantic-settings models read the environment:

    Settings      APP_*   application, logging, CORS, default role
    AuthSettings  AUTH_*  session token signing

Production deployments must set AUTH_JWT_SECRET (32+ characters).
"""

import sys
import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rbac.roles import Role

logger = logging.getLogger(__name__)

_MIN_SECRET_LENGTH = 32
_PRODUCTION_ENVIRONMENTS = ("production", "prod", "staging")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class AuthSettings(BaseSettings):
    """Session token configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    jwt_secret: Optional[str] = Field(
        default=None,
        description="JWT signing key - a per-process key is generated in development if not set",
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    access_token_expire_hours: int = Field(
        default=8,
        gt=0,
        description="Access token lifetime in hours",
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application info
    name: str = Field(default="AgenticVoice Admin", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    environment: str = Field(default="development", description="Environment name")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    # CORS
    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )

    # Accounts
    default_role: Role = Field(
        default=Role.FREE,
        description="Role assigned to new users and to sessions without a user record",
    )

    # Token settings have their own AUTH_ prefix, read once per Settings
    auth: AuthSettings = Field(default_factory=AuthSettings)

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def is_production(self) -> bool:
        """Production-like environments (production, prod, staging)."""
        return self.environment.lower() in _PRODUCTION_ENVIRONMENTS

    def validate_production_security(self) -> List[str]:
        """
        List the settings that make this deployment unsafe to run.

        Always empty outside production-like environments.
        """
        errors = []

        if not self.is_production:
            return errors

        jwt_secret = self.auth.jwt_secret
        if not jwt_secret:
            errors.append(
                "AUTH_JWT_SECRET: Required in production. "
                "Set a random value of at least 32 characters"
            )
        elif len(jwt_secret) < _MIN_SECRET_LENGTH:
            errors.append(f"AUTH_JWT_SECRET: Must be at least {_MIN_SECRET_LENGTH} characters")

        if self.debug:
            errors.append("APP_DEBUG: Must be False in production")

        if self.default_role is not Role.FREE:
            errors.append("APP_DEFAULT_ROLE: New accounts must start as FREE in production")

        return errors


# =============================================================================
# STARTUP VALIDATION
# =============================================================================

class StartupSecurityError(Exception):
    """Production settings failed validation. ``errors`` lists each problem."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(_format_startup_errors(errors))


def _format_startup_errors(errors: List[str]) -> str:
    rule = "=" * 60
    lines = [rule, "Access-control service refused to start: insecure settings", rule]
    lines.extend(f"  {i}. {err}" for i, err in enumerate(errors, 1))
    lines.append(rule)
    return "\n".join(lines)


def validate_startup_security(settings: Settings, exit_on_failure: bool = True) -> bool:
    """
    Refuse to start a production deployment with insecure settings.

    Non-production environments always pass.

    Raises:
        StartupSecurityError: On failure when ``exit_on_failure`` is False.
    """
    errors = settings.validate_production_security()
    if not errors:
        if settings.is_production:
            logger.info(f"Security settings validated for {settings.environment}")
        return True

    message = _format_startup_errors(errors)
    logger.critical(message)

    if not exit_on_failure:
        raise StartupSecurityError(errors)
    print(message, file=sys.stderr)
    sys.exit(1)


@lru_cache
def get_settings() -> Settings:
    """Settings loaded from the environment, built once per process."""
    return Settings()


def get_validated_settings(exit_on_failure: bool = True) -> Settings:
    """Settings for the application factory, checked for production use."""
    settings = get_settings()
    validate_startup_security(settings, exit_on_failure)
    return settings
