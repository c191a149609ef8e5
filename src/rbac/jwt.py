"""
AgenticVoice - Session Token Handling

JWT encoding/decoding for the session claims that carry a user's role.
The role is validated here, where it enters the process: a token with a
role outside the enumeration is rejected, a token without a role yields a
context that fails every check.
"""

import logging
import secrets
import warnings
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Tuple
from uuid import uuid4

import jwt

from .roles import Role, UnknownRoleError, parse_role
from .account import (
    AccountStatus,
    IndustryType,
    DEFAULT_ACCOUNT_STATUS,
    DEFAULT_INDUSTRY_TYPE,
)
from .context import AuthContext

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
_MIN_SECRET_LENGTH = 32


# =============================================================================
# CONFIGURATION
# =============================================================================

def _resolve_settings(settings=None):
    """The given settings, or the process-wide ones."""
    if settings is not None:
        return settings
    # Imported here to avoid a config <-> rbac import cycle
    from config.settings import get_settings
    return get_settings()


def _get_jwt_secret(settings) -> str:
    """
    Get the JWT secret from settings.

    SECURITY: In production, AUTH_JWT_SECRET must be set.
    In development, a random per-process secret is used with a warning.
    """
    secret = settings.auth.jwt_secret

    if not secret:
        if settings.is_production:
            raise RuntimeError(
                "CRITICAL SECURITY ERROR: AUTH_JWT_SECRET is required in production. "
                "Set a random value of at least 32 characters."
            )
        warnings.warn(
            "AUTH_JWT_SECRET not set - using generated development secret. "
            "Set AUTH_JWT_SECRET for production.",
            UserWarning
        )
        return f"DEV-ONLY-{secrets.token_hex(32)}"

    if len(secret) < _MIN_SECRET_LENGTH:
        raise ValueError(f"AUTH_JWT_SECRET must be at least {_MIN_SECRET_LENGTH} characters")

    return secret


# Keyed by (is_production, configured secret): the generated development
# secret must stay stable for the life of the process.
_jwt_secret_cache: Dict[Tuple[bool, Optional[str]], str] = {}


def get_jwt_secret(settings=None) -> str:
    """Get the JWT secret for ``settings`` (process-wide settings by default)."""
    settings = _resolve_settings(settings)
    key = (settings.is_production, settings.auth.jwt_secret)
    if key not in _jwt_secret_cache:
        _jwt_secret_cache[key] = _get_jwt_secret(settings)
    return _jwt_secret_cache[key]


def reset_jwt_secret_cache() -> None:
    """Forget cached secrets so the next call re-reads settings."""
    _jwt_secret_cache.clear()


# =============================================================================
# TOKEN CREATION
# =============================================================================

def create_access_token(
    user_id: str,
    email: str,
    role: Optional[Role] = None,
    name: str = "",
    account_status: AccountStatus = DEFAULT_ACCOUNT_STATUS,
    industry_type: IndustryType = DEFAULT_INDUSTRY_TYPE,
    expires_delta: Optional[timedelta] = None,
    settings=None,
) -> str:
    """
    Create a JWT access token.

    Args:
        user_id: User record identifier
        email: User's email
        role: User's role; the configured default role (FREE) when omitted
        name: User's display name
        account_status: Account lifecycle state
        industry_type: Industry vertical
        expires_delta: Custom expiration time
        settings: Settings to sign with; process-wide settings when omitted

    Returns:
        JWT token string
    """
    settings = _resolve_settings(settings)
    if role is None:
        role = settings.default_role
    role = parse_role(role)

    if expires_delta is None:
        expires_delta = timedelta(hours=settings.auth.access_token_expire_hours)

    issued_at = datetime.now(timezone.utc)

    payload = {
        "sub": str(user_id),
        "email": email,
        "name": name,
        "role": role.value,
        "account_status": AccountStatus(account_status).value,
        "industry_type": IndustryType(industry_type).value,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
        "jti": uuid4().hex,
        "type": ACCESS_TOKEN_TYPE,
    }

    return jwt.encode(payload, get_jwt_secret(settings), algorithm=settings.auth.jwt_algorithm)


# =============================================================================
# TOKEN DECODING
# =============================================================================

def decode_token(token: str, settings=None) -> Dict[str, Any]:
    """
    Decode and validate a JWT token against ``settings`` (process-wide by default).

    Raises:
        jwt.InvalidTokenError: If token is invalid or expired
    """
    settings = _resolve_settings(settings)
    return jwt.decode(token, get_jwt_secret(settings), algorithms=[settings.auth.jwt_algorithm])


def decode_token_safe(token: str, settings=None) -> Optional[Dict[str, Any]]:
    """
    Decode a JWT token without raising exceptions.

    Returns None if token is invalid.
    """
    try:
        return decode_token(token, settings)
    except jwt.InvalidTokenError:
        return None


def validate_access_token(token: str, settings=None) -> Optional[Dict[str, Any]]:
    """
    Validate an access token.

    Returns payload if valid, None if invalid.
    """
    payload = decode_token_safe(token, settings)
    if payload and payload.get("type") == ACCESS_TOKEN_TYPE:
        return payload
    return None


# =============================================================================
# CLAIMS -> CONTEXT
# =============================================================================

def claims_to_context(payload: Dict[str, Any]) -> AuthContext:
    """
    Build an AuthContext from decoded token claims.

    Raises:
        UnknownRoleError: If the role claim is present but not a known role.
        KeyError: If the subject claim is missing.
    """
    raw_role = payload.get("role")
    role = parse_role(raw_role) if raw_role is not None else None

    # Unknown status/industry fall back to the restrictive defaults
    try:
        account_status = AccountStatus(payload.get("account_status", DEFAULT_ACCOUNT_STATUS))
    except ValueError:
        logger.warning(f"Unknown account status in token: {payload.get('account_status')!r}")
        account_status = AccountStatus.INACTIVE
    try:
        industry_type = IndustryType(payload.get("industry_type", DEFAULT_INDUSTRY_TYPE))
    except ValueError:
        industry_type = DEFAULT_INDUSTRY_TYPE

    exp = payload.get("exp")
    return AuthContext(
        user_id=str(payload["sub"]),
        email=payload.get("email", ""),
        name=payload.get("name", ""),
        role=role,
        account_status=account_status,
        industry_type=industry_type,
        token_id=payload.get("jti"),
        token_exp=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
    )


def context_from_token(token: str, settings=None) -> AuthContext:
    """
    Decode a token straight to an AuthContext.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or not an
            access token.
        UnknownRoleError: If the role claim is not a known role.
    """
    payload = decode_token(token, settings)
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise jwt.InvalidTokenError("Not an access token")
    return claims_to_context(payload)


__all__ = [
    "create_access_token",
    "decode_token",
    "decode_token_safe",
    "validate_access_token",
    "claims_to_context",
    "context_from_token",
    "get_jwt_secret",
    "reset_jwt_secret_cache",
    "UnknownRoleError",
]
