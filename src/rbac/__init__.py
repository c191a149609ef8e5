"""
AgenticVoice - Role-Based Access Control (RBAC)

8-role RBAC for the AgenticVoice admin back office.

Hierarchy (DAG, strict inclusion):
    GOD_MODE > ADMIN > {CUSTOM, MARKETING} > ENTERPRISE > PRO > ESSENTIAL > FREE

Primitives (each call site chooses one):
    - is_allowed_role: fixed per-endpoint allow-list
    - includes: hierarchy-aware role check
    - has_permission: permission key lookup
    - can_change_role: role-change authorization

Usage:
    from rbac import Role, Permission, require_allowed_roles, BACK_OFFICE_ROLES

    @router.get("/admin/users")
    async def list_users(ctx: AuthContext = Depends(require_allowed_roles(BACK_OFFICE_ROLES))):
        ...
"""

from .roles import (
    Role,
    RoleInfo,
    ROLES,
    ROLE_HIERARCHY,
    DEFAULT_ROLE,
    ADMIN_ROLES,
    BACK_OFFICE_ROLES,
    GOD_MODE_ONLY,
    UnknownRoleError,
    get_role_info,
    get_hierarchy,
    includes,
    parse_role,
)
from .permissions import (
    Permission,
    PermissionInfo,
    Category,
    PERMISSIONS,
    ROLE_PERMISSIONS,
    get_permission_info,
    get_role_permissions,
    has_permission,
)
from .access import (
    AccessDecision,
    allow_list,
    can_change_role,
    check_permission,
    check_role_change,
    check_allowed_role,
    is_allowed_role,
    meets_minimum_role,
)
from .account import AccountStatus, IndustryType
from .context import AuthContext
from .errors import AccessDeniedError, AuthenticationRequiredError
from .dependencies import (
    get_auth_context,
    require_auth,
    optional_auth,
    require_active_account,
    require_allowed_roles,
    require_role_at_least,
    require_permission,
    require_god_mode,
)

__all__ = [
    # Roles
    "Role",
    "RoleInfo",
    "ROLES",
    "ROLE_HIERARCHY",
    "DEFAULT_ROLE",
    "ADMIN_ROLES",
    "BACK_OFFICE_ROLES",
    "GOD_MODE_ONLY",
    "UnknownRoleError",
    "get_role_info",
    "get_hierarchy",
    "includes",
    "parse_role",

    # Permissions
    "Permission",
    "PermissionInfo",
    "Category",
    "PERMISSIONS",
    "ROLE_PERMISSIONS",
    "get_permission_info",
    "get_role_permissions",
    "has_permission",

    # Evaluation
    "AccessDecision",
    "allow_list",
    "can_change_role",
    "check_permission",
    "check_role_change",
    "check_allowed_role",
    "is_allowed_role",
    "meets_minimum_role",

    # Account / Context
    "AccountStatus",
    "IndustryType",
    "AuthContext",

    # Errors
    "AccessDeniedError",
    "AuthenticationRequiredError",

    # Dependencies
    "get_auth_context",
    "require_auth",
    "optional_auth",
    "require_active_account",
    "require_allowed_roles",
    "require_role_at_least",
    "require_permission",
    "require_god_mode",
]
