"""
AgenticVoice - Role Definitions

8 roles, one per user account:

    CUSTOMER TIERS (billing plans)
    ├── FREE        - Default role at registration
    ├── ESSENTIAL   - Entry paid plan
    ├── PRO         - Professional plan
    ├── ENTERPRISE  - Enterprise plan
    └── CUSTOM      - Custom contract, high-level client

    BACK OFFICE
    ├── MARKETING   - Marketing team, CRM access
    ├── ADMIN       - Operations and support
    └── GOD_MODE    - Full platform access

The hierarchy is a DAG, not a chain. CUSTOM and MARKETING are siblings
above ENTERPRISE; ADMIN sits above both.

    GOD_MODE
       │
     ADMIN
     ┌─┴──────┐
  CUSTOM   MARKETING
     └─┬──────┘
   ENTERPRISE
       │
      PRO
       │
   ESSENTIAL
       │
      FREE
"""

from enum import Enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, FrozenSet, Mapping, Optional, Set


class Role(str, Enum):
    """
    All 8 roles in the system.

    Values are the upper-case names stored on the user record and carried
    in session tokens.
    """

    # =========================================================================
    # CUSTOMER TIERS
    # =========================================================================

    FREE = "FREE"
    ESSENTIAL = "ESSENTIAL"
    PRO = "PRO"
    ENTERPRISE = "ENTERPRISE"
    CUSTOM = "CUSTOM"

    # =========================================================================
    # BACK OFFICE
    # =========================================================================

    MARKETING = "MARKETING"
    ADMIN = "ADMIN"
    GOD_MODE = "GOD_MODE"


DEFAULT_ROLE = Role.FREE


class UnknownRoleError(ValueError):
    """Raised when a value outside the Role enumeration crosses a boundary."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Unknown role: {value!r}")


@dataclass(frozen=True)
class RoleInfo:
    """Display information about a role."""
    role: Role
    name: str
    description: str
    is_customer: bool      # Is this a billing-plan role?
    is_back_office: bool   # Can this role reach the admin API?


# =============================================================================
# ROLE REGISTRY
# =============================================================================

ROLES: Mapping[Role, RoleInfo] = MappingProxyType({
    Role.FREE: RoleInfo(
        role=Role.FREE,
        name="Free",
        description="Default plan assigned at registration",
        is_customer=True,
        is_back_office=False,
    ),
    Role.ESSENTIAL: RoleInfo(
        role=Role.ESSENTIAL,
        name="Essential",
        description="Entry paid plan",
        is_customer=True,
        is_back_office=False,
    ),
    Role.PRO: RoleInfo(
        role=Role.PRO,
        name="Pro",
        description="Professional plan",
        is_customer=True,
        is_back_office=False,
    ),
    Role.ENTERPRISE: RoleInfo(
        role=Role.ENTERPRISE,
        name="Enterprise",
        description="Enterprise plan",
        is_customer=True,
        is_back_office=False,
    ),
    Role.CUSTOM: RoleInfo(
        role=Role.CUSTOM,
        name="Custom",
        description="Custom contract, high-level client",
        is_customer=True,
        is_back_office=False,
    ),
    Role.MARKETING: RoleInfo(
        role=Role.MARKETING,
        name="Marketing",
        description="Marketing team with broad CRM access",
        is_customer=False,
        is_back_office=True,
    ),
    Role.ADMIN: RoleInfo(
        role=Role.ADMIN,
        name="Admin",
        description="Operations and user administration",
        is_customer=False,
        is_back_office=True,
    ),
    Role.GOD_MODE: RoleInfo(
        role=Role.GOD_MODE,
        name="God Mode",
        description="Full platform access",
        is_customer=False,
        is_back_office=True,
    ),
})


def get_role_info(role: Role) -> RoleInfo:
    """Get information about a role."""
    return ROLES[role]


# =============================================================================
# ROLE HIERARCHY
# =============================================================================

# Each entry lists every role the key implicitly includes. The table is
# closed: a role not listed here is never included by anything but GOD_MODE.
ROLE_HIERARCHY: Mapping[Role, FrozenSet[Role]] = MappingProxyType({
    Role.FREE: frozenset(),
    Role.ESSENTIAL: frozenset({Role.FREE}),
    Role.PRO: frozenset({Role.ESSENTIAL, Role.FREE}),
    Role.ENTERPRISE: frozenset({Role.PRO, Role.ESSENTIAL, Role.FREE}),
    Role.CUSTOM: frozenset({
        Role.ENTERPRISE, Role.PRO, Role.ESSENTIAL, Role.FREE,
    }),
    Role.MARKETING: frozenset({
        Role.ENTERPRISE, Role.PRO, Role.ESSENTIAL, Role.FREE,
    }),
    Role.ADMIN: frozenset({
        Role.MARKETING, Role.CUSTOM, Role.ENTERPRISE, Role.PRO,
        Role.ESSENTIAL, Role.FREE,
    }),
    Role.GOD_MODE: frozenset(Role) - {Role.GOD_MODE},
})


def _validate_hierarchy(table: Mapping[Role, FrozenSet[Role]]) -> None:
    """
    Check the hierarchy table invariants.

    - every role has an entry
    - no role includes itself (acyclic)
    - entries are transitively closed
    - GOD_MODE includes every other role
    - FREE is the unique minimum

    Raises:
        RuntimeError: If any invariant is violated.
    """
    missing = set(Role) - set(table)
    if missing:
        raise RuntimeError(f"Role hierarchy missing entries: {sorted(missing)}")

    for role, included in table.items():
        if role in included:
            raise RuntimeError(f"Role hierarchy cycle at {role.value}")
        for sub in included:
            if not table[sub] <= included:
                raise RuntimeError(
                    f"Role hierarchy not closed: {role.value} includes "
                    f"{sub.value} but not all of its roles"
                )

    if table[Role.GOD_MODE] != frozenset(Role) - {Role.GOD_MODE}:
        raise RuntimeError("GOD_MODE must include every other role")

    minima = {role for role, included in table.items() if not included}
    if minima != {Role.FREE}:
        raise RuntimeError(f"FREE must be the unique minimum, found {sorted(minima)}")


_validate_hierarchy(ROLE_HIERARCHY)


# =============================================================================
# BOUNDARY PARSING
# =============================================================================

def parse_role(value: Any) -> Role:
    """
    Parse a raw value into a Role.

    Use this where role values enter the process (token claims, request
    bodies, user records). Business logic should only see Role members.

    Raises:
        UnknownRoleError: If the value is not one of the 8 roles.
    """
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except (TypeError, ValueError):
        raise UnknownRoleError(value) from None


def coerce_role(value: Any) -> Optional[Role]:
    """Parse a role, returning None for missing or unknown values."""
    if value is None:
        return None
    try:
        return parse_role(value)
    except UnknownRoleError:
        return None


# =============================================================================
# HIERARCHY LOOKUPS
# =============================================================================

def get_hierarchy(role: Any) -> FrozenSet[Role]:
    """
    Get the roles a role strictly includes (itself excluded).

    Unknown or missing roles have an empty closure.
    """
    parsed = coerce_role(role)
    if parsed is None:
        return frozenset()
    return ROLE_HIERARCHY[parsed]


def includes(actor: Any, subject: Any) -> bool:
    """
    Does the actor role implicitly include the subject role?

    Reflexive: every role includes itself. GOD_MODE includes every role.
    Unknown or missing roles on either side are never included.
    """
    actor_role = coerce_role(actor)
    subject_role = coerce_role(subject)
    if actor_role is None or subject_role is None:
        return False
    if actor_role is Role.GOD_MODE or actor_role is subject_role:
        return True
    return subject_role in ROLE_HIERARCHY[actor_role]


def get_customer_roles() -> Set[Role]:
    """Get all billing-plan roles."""
    return {role for role, info in ROLES.items() if info.is_customer}


def get_back_office_roles() -> Set[Role]:
    """Get all roles that reach the admin API."""
    return {role for role, info in ROLES.items() if info.is_back_office}


# =============================================================================
# LINEAR RANK (UI gating)
# =============================================================================

# Used by page-level gates ("show this if the user is at least PRO").
# It is a total order and disagrees with ROLE_HIERARCHY: here MARKETING
# outranks ADMIN. Route handlers should use the hierarchy or an allow-list.
ROLE_RANK: Mapping[Role, int] = MappingProxyType({
    Role.FREE: 0,
    Role.ESSENTIAL: 1,
    Role.PRO: 2,
    Role.ENTERPRISE: 3,
    Role.CUSTOM: 4,
    Role.ADMIN: 5,
    Role.MARKETING: 6,
    Role.GOD_MODE: 7,
})


# =============================================================================
# ROLE SETS (endpoint allow-lists)
# =============================================================================

# User administration endpoints
ADMIN_ROLES = frozenset({
    Role.ADMIN,
    Role.GOD_MODE,
})

# Admin back office: user lookup, CRM, analytics
BACK_OFFICE_ROLES = frozenset({
    Role.GOD_MODE,
    Role.ADMIN,
    Role.MARKETING,
})

# Destructive operations (user deletion)
GOD_MODE_ONLY = frozenset({
    Role.GOD_MODE,
})
