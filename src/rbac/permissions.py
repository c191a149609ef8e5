"""
AgenticVoice - Permission Definitions

Permissions are namespaced string keys ("users.view", "crm.export") grouped
into display categories. Category membership carries no authorization
meaning.

Categories:
    - USER_MANAGEMENT: user accounts and roles
    - BILLING: billing, subscriptions, pricing
    - CRM: contacts, deals, companies
    - VOICE: voice-AI assistants and calls
    - SYSTEM: settings, security, audit, integrations
"""

from enum import Enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from .roles import Role, coerce_role


class Permission(str, Enum):
    """
    All permissions in the system.

    Naming: category.action (e.g., users.view, billing.edit)
    """

    # =========================================================================
    # USER MANAGEMENT
    # =========================================================================

    USERS_VIEW = "users.view"
    USERS_CREATE = "users.create"
    USERS_EDIT = "users.edit"
    USERS_DELETE = "users.delete"
    USERS_SUSPEND = "users.suspend"
    USERS_ROLES = "users.roles"

    # =========================================================================
    # BILLING & SUBSCRIPTIONS
    # =========================================================================

    BILLING_VIEW = "billing.view"
    BILLING_EDIT = "billing.edit"
    SUBSCRIPTIONS_MANAGE = "subscriptions.manage"
    PRICING_CONFIGURE = "pricing.configure"

    # =========================================================================
    # CRM
    # =========================================================================

    CRM_VIEW = "crm.view"
    CRM_CREATE = "crm.create"
    CRM_EDIT = "crm.edit"
    CRM_DELETE = "crm.delete"
    CRM_EXPORT = "crm.export"

    # =========================================================================
    # VOICE
    # =========================================================================

    VAPI_VIEW = "vapi.view"
    VAPI_MANAGE = "vapi.manage"
    CALLS_MONITOR = "calls.monitor"

    # =========================================================================
    # SYSTEM & SECURITY
    # =========================================================================

    SETTINGS_VIEW = "settings.view"
    SETTINGS_EDIT = "settings.edit"
    SECURITY_MANAGE = "security.manage"
    AUDIT_LOGS = "audit.logs"
    INTEGRATIONS_MANAGE = "integrations.manage"


class Category(str, Enum):
    """Permission categories (display grouping only)."""
    USER_MANAGEMENT = "User Management"
    BILLING = "Billing & Subscriptions"
    CRM = "CRM"
    VOICE = "VAPI & Voice"
    SYSTEM = "System & Security"


@dataclass(frozen=True)
class PermissionInfo:
    """Complete information about a permission."""
    permission: Permission
    name: str
    description: str
    category: Category

    @property
    def key(self) -> str:
        return self.permission.value


# =============================================================================
# PERMISSION CATALOG
# =============================================================================

PERMISSIONS: Mapping[Permission, PermissionInfo] = MappingProxyType({
    # User Management
    Permission.USERS_VIEW: PermissionInfo(
        Permission.USERS_VIEW,
        "View Users",
        "Can view user list and details",
        Category.USER_MANAGEMENT,
    ),
    Permission.USERS_CREATE: PermissionInfo(
        Permission.USERS_CREATE,
        "Create Users",
        "Can create new users",
        Category.USER_MANAGEMENT,
    ),
    Permission.USERS_EDIT: PermissionInfo(
        Permission.USERS_EDIT,
        "Edit Users",
        "Can edit user information",
        Category.USER_MANAGEMENT,
    ),
    Permission.USERS_DELETE: PermissionInfo(
        Permission.USERS_DELETE,
        "Delete Users",
        "Can delete users",
        Category.USER_MANAGEMENT,
    ),
    Permission.USERS_SUSPEND: PermissionInfo(
        Permission.USERS_SUSPEND,
        "Suspend Users",
        "Can suspend and unsuspend users",
        Category.USER_MANAGEMENT,
    ),
    Permission.USERS_ROLES: PermissionInfo(
        Permission.USERS_ROLES,
        "Manage Roles",
        "Can change user roles",
        Category.USER_MANAGEMENT,
    ),

    # Billing & Subscriptions
    Permission.BILLING_VIEW: PermissionInfo(
        Permission.BILLING_VIEW,
        "View Billing",
        "Can view billing history and invoices",
        Category.BILLING,
    ),
    Permission.BILLING_EDIT: PermissionInfo(
        Permission.BILLING_EDIT,
        "Edit Billing",
        "Can modify billing information",
        Category.BILLING,
    ),
    Permission.SUBSCRIPTIONS_MANAGE: PermissionInfo(
        Permission.SUBSCRIPTIONS_MANAGE,
        "Manage Subscriptions",
        "Can change subscription plans",
        Category.BILLING,
    ),
    Permission.PRICING_CONFIGURE: PermissionInfo(
        Permission.PRICING_CONFIGURE,
        "Configure Pricing",
        "Can set and change pricing models",
        Category.BILLING,
    ),

    # CRM
    Permission.CRM_VIEW: PermissionInfo(
        Permission.CRM_VIEW,
        "View CRM Data",
        "Can view contacts, deals, and companies",
        Category.CRM,
    ),
    Permission.CRM_CREATE: PermissionInfo(
        Permission.CRM_CREATE,
        "Create CRM Entries",
        "Can create new contacts, deals",
        Category.CRM,
    ),
    Permission.CRM_EDIT: PermissionInfo(
        Permission.CRM_EDIT,
        "Edit CRM Data",
        "Can edit CRM records",
        Category.CRM,
    ),
    Permission.CRM_DELETE: PermissionInfo(
        Permission.CRM_DELETE,
        "Delete CRM Data",
        "Can delete CRM records",
        Category.CRM,
    ),
    Permission.CRM_EXPORT: PermissionInfo(
        Permission.CRM_EXPORT,
        "Export CRM Data",
        "Can export CRM data to CSV",
        Category.CRM,
    ),

    # Voice
    Permission.VAPI_VIEW: PermissionInfo(
        Permission.VAPI_VIEW,
        "View VAPI Usage",
        "Can view VAPI analytics and usage",
        Category.VOICE,
    ),
    Permission.VAPI_MANAGE: PermissionInfo(
        Permission.VAPI_MANAGE,
        "Manage VAPI Settings",
        "Can manage VAPI assistants and settings",
        Category.VOICE,
    ),
    Permission.CALLS_MONITOR: PermissionInfo(
        Permission.CALLS_MONITOR,
        "Monitor Calls",
        "Can monitor live and past calls",
        Category.VOICE,
    ),

    # System & Security
    Permission.SETTINGS_VIEW: PermissionInfo(
        Permission.SETTINGS_VIEW,
        "View Settings",
        "Can view system settings",
        Category.SYSTEM,
    ),
    Permission.SETTINGS_EDIT: PermissionInfo(
        Permission.SETTINGS_EDIT,
        "Edit Settings",
        "Can edit system settings",
        Category.SYSTEM,
    ),
    Permission.SECURITY_MANAGE: PermissionInfo(
        Permission.SECURITY_MANAGE,
        "Manage Security",
        "Can manage security settings like 2FA",
        Category.SYSTEM,
    ),
    Permission.AUDIT_LOGS: PermissionInfo(
        Permission.AUDIT_LOGS,
        "View Audit Logs",
        "Can view audit logs for all actions",
        Category.SYSTEM,
    ),
    Permission.INTEGRATIONS_MANAGE: PermissionInfo(
        Permission.INTEGRATIONS_MANAGE,
        "Manage Integrations",
        "Can manage third-party integrations",
        Category.SYSTEM,
    ),
})


def coerce_permission(value: Any) -> Optional[Permission]:
    """Parse a permission key, returning None if it is not in the catalog."""
    if isinstance(value, Permission):
        return value
    try:
        return Permission(value)
    except (TypeError, ValueError):
        return None


def get_permission_info(permission: Any) -> Optional[PermissionInfo]:
    """Get catalog information about a permission, or None if unknown."""
    parsed = coerce_permission(permission)
    if parsed is None:
        return None
    return PERMISSIONS[parsed]


# =============================================================================
# ROLE -> PERMISSION MAPPING
# =============================================================================

# Each role's list is enumerated on its own; it is not derived from the
# hierarchy. MARKETING, for example, has no billing permissions.
ROLE_PERMISSIONS: Mapping[Role, FrozenSet[Permission]] = MappingProxyType({
    Role.FREE: frozenset({
        Permission.USERS_VIEW,
    }),
    Role.ESSENTIAL: frozenset({
        Permission.USERS_VIEW,
        Permission.BILLING_VIEW,
    }),
    Role.PRO: frozenset({
        Permission.USERS_VIEW,
        Permission.BILLING_VIEW,
        Permission.CRM_VIEW,
    }),
    Role.ENTERPRISE: frozenset({
        Permission.USERS_VIEW,
        Permission.BILLING_VIEW,
        Permission.CRM_VIEW,
        Permission.VAPI_VIEW,
    }),

    # CUSTOM starts with ENTERPRISE permissions
    Role.CUSTOM: frozenset({
        Permission.USERS_VIEW,
        Permission.BILLING_VIEW,
        Permission.CRM_VIEW,
        Permission.VAPI_VIEW,
    }),

    Role.MARKETING: frozenset({
        # Users
        Permission.USERS_VIEW,
        Permission.USERS_EDIT,
        # CRM
        Permission.CRM_VIEW,
        Permission.CRM_CREATE,
        Permission.CRM_EDIT,
        Permission.CRM_EXPORT,
        # System
        Permission.SETTINGS_VIEW,
    }),

    Role.ADMIN: frozenset({
        # Users
        Permission.USERS_VIEW,
        Permission.USERS_EDIT,
        Permission.USERS_SUSPEND,
        # Billing
        Permission.BILLING_VIEW,
        Permission.BILLING_EDIT,
        Permission.SUBSCRIPTIONS_MANAGE,
        # CRM
        Permission.CRM_VIEW,
        Permission.CRM_EDIT,
        # System
        Permission.SETTINGS_VIEW,
        Permission.SETTINGS_EDIT,
        Permission.AUDIT_LOGS,
    }),

    # GOD_MODE: everything in the catalog
    Role.GOD_MODE: frozenset(PERMISSIONS),
})

if set(ROLE_PERMISSIONS) != set(Role):
    raise RuntimeError("Every role needs a permission entry")


def get_role_permissions(role: Any) -> FrozenSet[Permission]:
    """Get all permissions for a role. Unknown or missing roles have none."""
    parsed = coerce_role(role)
    if parsed is None:
        return frozenset()
    return ROLE_PERMISSIONS[parsed]


def has_permission(role: Any, permission: Any) -> bool:
    """
    Check if a role holds a permission.

    Fails closed: an unknown role, a missing role, or a key outside the
    catalog is never granted.
    """
    parsed = coerce_permission(permission)
    if parsed is None:
        return False
    return parsed in get_role_permissions(role)


def get_permissions_by_category() -> Dict[Category, List[PermissionInfo]]:
    """Group the catalog by category, in catalog order."""
    grouped: Dict[Category, List[PermissionInfo]] = {category: [] for category in Category}
    for info in PERMISSIONS.values():
        grouped[info.category].append(info)
    return grouped


def get_permission_matrix() -> Dict[str, List[str]]:
    """Map each role value to its sorted permission keys."""
    return {
        role.value: sorted(p.value for p in ROLE_PERMISSIONS[role])
        for role in Role
    }
