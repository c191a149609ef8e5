"""
AgenticVoice - FastAPI Dependencies

Dependency injection helpers for route protection. Each guard names the
primitive it enforces; pick the one the endpoint needs:

    require_allowed_roles   - fixed allow-list (most admin endpoints)
    require_role_at_least   - hierarchy-aware
    require_permission      - permission key
    require_god_mode        - GOD_MODE only

Usage:
    from rbac import require_allowed_roles, require_permission, BACK_OFFICE_ROLES

    @router.get("/admin/users/{user_id}")
    async def get_user(ctx: AuthContext = Depends(require_allowed_roles(BACK_OFFICE_ROLES))):
        ...

    @router.post("/admin/billing")
    async def edit_billing(ctx: AuthContext = Depends(require_permission(Permission.BILLING_EDIT))):
        ...
"""

import logging
from typing import Callable, Iterable, Optional, Union

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt

from .roles import Role, GOD_MODE_ONLY, UnknownRoleError, includes, parse_role
from .permissions import Permission, coerce_permission
from .access import AccessDecision, check_allowed_role, check_permission, INSUFFICIENT_PERMISSIONS
from .context import AuthContext
from .errors import AccessDeniedError, AuthenticationRequiredError
from services.logging_config import AccessLogger, user_id_var

logger = logging.getLogger(__name__)
access_logger = AccessLogger(__name__)


# =============================================================================
# HTTP BEARER SECURITY
# =============================================================================

security = HTTPBearer(auto_error=False)


# =============================================================================
# CORE DEPENDENCIES
# =============================================================================

async def get_auth_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthContext:
    """
    Get the authentication context for the current request.

    Does NOT enforce authentication - use require_auth for that. Any token
    problem yields an anonymous context.
    """
    if hasattr(request.state, "auth_context"):
        return request.state.auth_context

    if credentials is None:
        return AuthContext.anonymous()

    try:
        from .jwt import context_from_token  # Import here to avoid circular imports

        # Apps built by create_app carry their own settings
        settings = getattr(request.app.state, "settings", None)
        ctx = context_from_token(credentials.credentials, settings)
    except jwt.ExpiredSignatureError:
        return AuthContext.anonymous()
    except jwt.InvalidTokenError as e:
        logger.debug(f"Invalid JWT token: {e}")
        return AuthContext.anonymous()
    except UnknownRoleError as e:
        # Signed token with a role we do not know: reject at the boundary
        logger.warning(f"Rejected token with unknown role: {e.value!r}")
        return AuthContext.anonymous()
    except (KeyError, TypeError, ValueError) as e:
        logger.debug(f"Malformed token payload: {e}")
        return AuthContext.anonymous()

    request.state.auth_context = ctx
    user_id_var.set(ctx.user_id)
    return ctx


async def require_auth(
    ctx: AuthContext = Depends(get_auth_context),
) -> AuthContext:
    """
    Require authentication.

    Raises 401 if not authenticated.
    """
    if not ctx.is_authenticated:
        raise AuthenticationRequiredError()
    return ctx


async def optional_auth(
    ctx: AuthContext = Depends(get_auth_context),
) -> Optional[AuthContext]:
    """Return authenticated context when available, otherwise None."""
    if not ctx.is_authenticated:
        return None
    return ctx


async def require_active_account(
    request: Request,
    ctx: AuthContext = Depends(require_auth),
) -> AuthContext:
    """Require an ACTIVE account (suspended users keep a valid token until expiry)."""
    if not ctx.is_active:
        _deny(request, ctx, AccessDecision.deny("Account is not active"))
    return ctx


def _deny(request: Request, ctx: AuthContext, decision: AccessDecision) -> None:
    access_logger.log_denied(
        ctx.user_id or None,
        ctx.role.value if ctx.role else None,
        decision.reason,
        path=request.url.path,
        missing_permission=decision.missing_permission,
    )
    raise AccessDeniedError(decision)


# =============================================================================
# ROLE-BASED DEPENDENCIES
# =============================================================================

def require_allowed_roles(roles: Union[Role, str, Iterable[Union[Role, str]]]) -> Callable:
    """
    Require the caller's role to be in a fixed allow-list.

    Not hierarchy-aware: ``require_allowed_roles({Role.MARKETING})`` rejects
    ADMIN. A single role or role name is a one-entry list. Unknown role names
    raise ValueError when the route is declared.

    Usage:
        @router.get("/admin/crm/deals")
        async def list_deals(ctx: AuthContext = Depends(require_allowed_roles(BACK_OFFICE_ROLES))):
            ...
    """
    if isinstance(roles, str):
        roles = (roles,)
    allowed = frozenset(parse_role(r) for r in roles)

    async def dependency(
        request: Request,
        ctx: AuthContext = Depends(require_auth),
    ) -> AuthContext:
        decision = check_allowed_role(ctx.role, allowed)
        if not decision:
            _deny(request, ctx, decision)
        return ctx

    dependency._allowed_roles = allowed
    return dependency


def require_role_at_least(role: Role) -> Callable:
    """
    Require the caller's role to include ``role`` in the hierarchy.

    ``require_role_at_least(Role.ENTERPRISE)`` accepts ENTERPRISE, CUSTOM,
    MARKETING, ADMIN and GOD_MODE.
    """
    async def dependency(
        request: Request,
        ctx: AuthContext = Depends(require_auth),
    ) -> AuthContext:
        if not includes(ctx.role, role):
            _deny(request, ctx, AccessDecision.deny(
                INSUFFICIENT_PERMISSIONS,
                required_roles={role},
            ))
        return ctx

    dependency._minimum_role = role
    return dependency


async def require_god_mode(
    request: Request,
    ctx: AuthContext = Depends(require_auth),
) -> AuthContext:
    """Require GOD_MODE (destructive operations such as user deletion)."""
    decision = check_allowed_role(ctx.role, GOD_MODE_ONLY)
    if not decision:
        _deny(request, ctx, AccessDecision.deny(
            "Access denied - GOD_MODE required",
            required_roles=GOD_MODE_ONLY,
        ))
    return ctx


# =============================================================================
# PERMISSION-BASED DEPENDENCIES
# =============================================================================

def _parse_required_permission(permission_like: Union[Permission, str]) -> Permission:
    """Normalize a declared permission. Raises ValueError if not in the catalog."""
    parsed = coerce_permission(permission_like)
    if parsed is None:
        raise ValueError(f"Invalid permission: {permission_like!r}")
    return parsed


def require_permission(
    permission: Union[Permission, str, Iterable[Union[Permission, str]]],
    require_all: bool = False,
) -> Callable:
    """
    Require a specific permission (or any/all of a set).

    Unknown permission keys are a programming error and raise ValueError
    when the route is declared, not when it is called.

    Usage:
        @router.post("/admin/crm/export")
        async def export(ctx: AuthContext = Depends(require_permission(Permission.CRM_EXPORT))):
            ...
    """
    if isinstance(permission, (str, Permission)):
        required = [_parse_required_permission(permission)]
    else:
        required = [_parse_required_permission(p) for p in permission]
    if not required:
        raise ValueError("require_permission needs at least one permission")

    async def dependency(
        request: Request,
        ctx: AuthContext = Depends(require_auth),
    ) -> AuthContext:
        decisions = [check_permission(ctx.role, p) for p in required]

        if require_all:
            denied = next((d for d in decisions if not d), None)
            if denied is not None:
                _deny(request, ctx, denied)
        elif not any(decisions):
            _deny(request, ctx, decisions[0])
        return ctx

    dependency._required_permissions = frozenset(required)
    return dependency
