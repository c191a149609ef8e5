"""Configuration module for the access-control service."""

from .settings import (
    AuthSettings,
    Settings,
    StartupSecurityError,
    get_settings,
    get_validated_settings,
    validate_startup_security,
)

__all__ = [
    "AuthSettings",
    "Settings",
    "StartupSecurityError",
    "get_settings",
    "get_validated_settings",
    "validate_startup_security",
]
