"""
AgenticVoice - Authentication Context

AuthContext is the primary object passed through routes containing
all information about the authenticated user.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Set

from .roles import Role, ROLE_HIERARCHY
from .permissions import Permission, get_role_permissions, has_permission
from .account import (
    AccountStatus,
    IndustryType,
    DEFAULT_ACCOUNT_STATUS,
    DEFAULT_INDUSTRY_TYPE,
    can_access_industry_features,
    coerce_account_status,
    coerce_industry_type,
    is_account_active,
)
from . import access
from . import roles as role_table


@dataclass
class AuthContext:
    """
    Authentication context for the current request.

    The role is a snapshot taken when the session token was issued; nothing
    here re-reads the user record.

    Usage:
        @router.get("/billing")
        async def get_billing(ctx: AuthContext = Depends(require_auth)):
            if ctx.has_permission(Permission.BILLING_EDIT):
                ...
    """

    # =========================================================================
    # Identity
    # =========================================================================

    user_id: str
    """User record identifier."""

    email: str
    """User's email address."""

    name: str
    """User's display name."""

    role: Optional[Role]
    """User's role, or None when the session carries no role."""

    # =========================================================================
    # Account
    # =========================================================================

    account_status: AccountStatus = DEFAULT_ACCOUNT_STATUS
    industry_type: IndustryType = DEFAULT_INDUSTRY_TYPE

    # =========================================================================
    # Computed Properties (set during context creation)
    # =========================================================================

    permissions: Set[Permission] = field(default_factory=set)
    """All permissions this user has (based on role)."""

    is_authenticated: bool = False
    """Whether the user is authenticated."""

    # =========================================================================
    # Session Info
    # =========================================================================

    token_id: Optional[str] = None
    """JWT token ID (jti) for session tracking."""

    token_exp: Optional[datetime] = None
    """Token expiration time."""

    def __post_init__(self):
        """Populate computed fields after initialization."""
        # Raw values become enum members. Unknown role: None, unknown status: INACTIVE
        self.role = role_table.coerce_role(self.role)
        self.account_status = coerce_account_status(self.account_status) or AccountStatus.INACTIVE
        self.industry_type = coerce_industry_type(self.industry_type) or DEFAULT_INDUSTRY_TYPE
        self.permissions = set(get_role_permissions(self.role))
        if self.user_id:
            self.is_authenticated = True

    # =========================================================================
    # Permission Checks
    # =========================================================================

    def has_permission(self, permission) -> bool:
        """Check if user has a specific permission."""
        return has_permission(self.role, permission)

    def has_any_permission(self, permissions: Iterable[Permission]) -> bool:
        """Check if user has any of the specified permissions."""
        return any(self.has_permission(p) for p in permissions)

    def has_all_permissions(self, permissions: Iterable[Permission]) -> bool:
        """Check if user has all of the specified permissions."""
        return all(self.has_permission(p) for p in permissions)

    # =========================================================================
    # Role Checks
    # =========================================================================

    def has_role(self, role: Role) -> bool:
        """Check if user has exactly this role."""
        return self.role is not None and self.role == role

    def is_allowed(self, allowed: Iterable[Role]) -> bool:
        """Allow-list check (not hierarchy-aware)."""
        return access.is_allowed_role(self.role, allowed)

    def includes_role(self, role: Role) -> bool:
        """Hierarchy check: does the user's role include ``role``?"""
        return role_table.includes(self.role, role)

    def meets_minimum_role(self, role: Role) -> bool:
        """Linear rank check used for UI gating."""
        return access.meets_minimum_role(self.role, role)

    def can_change_role(self, current_target_role: Role, new_role: Role) -> bool:
        """Can this user move a target from ``current_target_role`` to ``new_role``?"""
        return access.can_change_role(self.role, current_target_role, new_role)

    @property
    def hierarchy(self) -> Set[Role]:
        """Roles this user strictly includes."""
        if self.role is None:
            return set()
        return set(ROLE_HIERARCHY[self.role])

    @property
    def is_god_mode(self) -> bool:
        return self.role is Role.GOD_MODE

    @property
    def is_admin(self) -> bool:
        """Rank ADMIN or above, as the dashboard gates it."""
        return access.is_admin(self.role)

    @property
    def is_active(self) -> bool:
        return is_account_active(self.account_status)

    def can_access_industry(self, industry: IndustryType) -> bool:
        return can_access_industry_features(self.industry_type, industry)

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def anonymous(cls) -> "AuthContext":
        """Create an anonymous (unauthenticated) context."""
        return cls(
            user_id="",
            email="",
            name="Anonymous",
            role=None,
            account_status=AccountStatus.INACTIVE,
        )

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "user_id": self.user_id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value if self.role else None,
            "account_status": self.account_status.value,
            "industry_type": self.industry_type.value,
            "is_authenticated": self.is_authenticated,
        }
