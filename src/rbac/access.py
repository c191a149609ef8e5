"""
AgenticVoice - Access Evaluation

Pure, stateless authorization predicates over the static role and
permission tables. Nothing here raises on bad input: unknown or missing
roles and permissions evaluate to "not authorized". Translating a denial
into a 401/403 is the caller's job (see dependencies.py).

Three distinct primitives exist and each call site picks one:

    is_allowed_role      - fixed allow-list, not hierarchy-aware
    includes             - hierarchy-aware (roles.py)
    meets_minimum_role   - linear rank, used for UI gating

Usage:
    from rbac.access import check_permission, can_change_role

    decision = check_permission(ctx.role, Permission.BILLING_EDIT)
    if not decision:
        raise AccessDeniedError(decision)
"""

from dataclasses import dataclass
from typing import Any, FrozenSet, Iterable, Optional, Union

from .roles import Role, ROLE_HIERARCHY, ROLE_RANK, coerce_role
from .permissions import coerce_permission, has_permission


# =============================================================================
# DECISION
# =============================================================================

@dataclass(frozen=True)
class AccessDecision:
    """
    Result of an authorization check.

    Truthiness follows ``allowed`` so a decision can be used directly in an
    ``if``. On denial, ``reason`` is a user-facing message and one of
    ``missing_permission`` / ``required_roles`` names the unmet requirement.
    """
    allowed: bool
    reason: Optional[str] = None
    missing_permission: Optional[str] = None
    required_roles: Optional[FrozenSet[Role]] = None

    def __bool__(self) -> bool:
        return self.allowed

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(allowed=True)

    @classmethod
    def deny(
        cls,
        reason: str,
        missing_permission: Optional[str] = None,
        required_roles: Optional[Iterable[Role]] = None,
    ) -> "AccessDecision":
        return cls(
            allowed=False,
            reason=reason,
            missing_permission=missing_permission,
            required_roles=frozenset(required_roles) if required_roles is not None else None,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "allowed": self.allowed,
            "reason": self.reason,
            "missing_permission": self.missing_permission,
            "required_roles": (
                sorted(r.value for r in self.required_roles)
                if self.required_roles is not None else None
            ),
        }


INSUFFICIENT_PERMISSIONS = "Insufficient permissions"
ACCESS_DENIED = "Access denied"
GOD_MODE_GRANT_DENIED = "Only GOD_MODE can assign GOD_MODE"
ROLE_CHANGE_DENIED = "Insufficient privileges to change this user's role"
AUTHENTICATION_REQUIRED = "Authentication required"


# =============================================================================
# PERMISSION CHECKS
# =============================================================================

def check_permission(role: Any, permission: Any) -> AccessDecision:
    """Decide whether a role holds a permission, with a reason on denial."""
    if has_permission(role, permission):
        return AccessDecision.allow()
    return AccessDecision.deny(
        INSUFFICIENT_PERMISSIONS,
        missing_permission=_permission_key(permission),
    )


def _permission_key(permission: Any) -> Optional[str]:
    parsed = coerce_permission(permission)
    if parsed is not None:
        return parsed.value
    return str(permission) if permission is not None else None


# =============================================================================
# ROLE CHANGE
# =============================================================================

def can_change_role(actor: Any, current_target_role: Any, new_role: Any) -> bool:
    """
    May ``actor`` change a user's role from ``current_target_role`` to
    ``new_role``?

    1. GOD_MODE may make any change.
    2. Nobody else may assign GOD_MODE.
    3. Otherwise the actor must strictly include the target's *current*
       role. The new role is not compared against the actor's hierarchy.

    Rule 3 means a PRO actor may move a FREE user to ADMIN. This matches
    the behavior the admin panel has always had and is kept as-is until the
    product owner decides whether the new role should also be bounded by the
    actor's hierarchy. See DESIGN.md, "Role-change open question".

    Pure predicate: persisting and auditing the change is the caller's job.
    """
    actor_role = coerce_role(actor)
    target_role = coerce_role(current_target_role)
    requested_role = coerce_role(new_role)
    if actor_role is None or target_role is None or requested_role is None:
        return False

    if actor_role is Role.GOD_MODE:
        return True
    if requested_role is Role.GOD_MODE:
        return False
    return target_role in ROLE_HIERARCHY[actor_role]


def check_role_change(actor: Any, current_target_role: Any, new_role: Any) -> AccessDecision:
    """``can_change_role`` with a user-facing reason on denial."""
    if can_change_role(actor, current_target_role, new_role):
        return AccessDecision.allow()

    if coerce_role(new_role) is Role.GOD_MODE:
        return AccessDecision.deny(GOD_MODE_GRANT_DENIED, required_roles={Role.GOD_MODE})
    return AccessDecision.deny(ROLE_CHANGE_DENIED)


# =============================================================================
# ALLOW-LIST
# =============================================================================

def allow_list(allowed: Union[Role, str, Iterable[Any]]) -> FrozenSet[Role]:
    """
    Normalize an allow-list to a frozenset of roles.

    A single role or role name is a one-entry list. Unknown names are dropped.
    """
    if isinstance(allowed, str):
        allowed = (allowed,)
    return frozenset(r for r in map(coerce_role, allowed) if r is not None)


def is_allowed_role(role: Any, allowed: Union[Role, str, Iterable[Any]]) -> bool:
    """
    Is the caller's role one of the endpoint's allowed roles?

    Plain membership. ADMIN is not accepted by an allow-list of
    {MARKETING} even though ADMIN includes MARKETING in the hierarchy.
    A missing or unknown role is never allowed.
    """
    parsed = coerce_role(role)
    if parsed is None:
        return False
    return parsed in allow_list(allowed)


def check_allowed_role(role: Any, allowed: Union[Role, str, Iterable[Any]]) -> AccessDecision:
    """``is_allowed_role`` with the allow-list attached on denial."""
    allowed_set = allow_list(allowed)
    if is_allowed_role(role, allowed_set):
        return AccessDecision.allow()
    return AccessDecision.deny(ACCESS_DENIED, required_roles=allowed_set)


# =============================================================================
# LINEAR RANK (UI gating)
# =============================================================================

def meets_minimum_role(role: Any, required: Any) -> bool:
    """Is the role's rank at least the required role's rank?"""
    parsed = coerce_role(role)
    required_role = coerce_role(required)
    if parsed is None or required_role is None:
        return False
    return ROLE_RANK[parsed] >= ROLE_RANK[required_role]


def is_admin(role: Any) -> bool:
    """Rank ADMIN or above (ADMIN, MARKETING, GOD_MODE)."""
    return meets_minimum_role(role, Role.ADMIN)


def has_marketing_access(role: Any) -> bool:
    """Rank PRO or above."""
    return meets_minimum_role(role, Role.PRO)
