"""
Access Evaluation Tests

Tests the stateless predicates: permission checks, role-change
authorization, allow-lists and the linear rank used for UI gating.
"""

from dataclasses import FrozenInstanceError

import pytest

from rbac.roles import Role, ADMIN_ROLES, BACK_OFFICE_ROLES, GOD_MODE_ONLY
from rbac.permissions import Permission
from rbac.access import (
    AccessDecision,
    allow_list,
    ACCESS_DENIED,
    GOD_MODE_GRANT_DENIED,
    INSUFFICIENT_PERMISSIONS,
    ROLE_CHANGE_DENIED,
    can_change_role,
    check_allowed_role,
    check_permission,
    check_role_change,
    has_marketing_access,
    is_admin,
    is_allowed_role,
    meets_minimum_role,
)


NON_GOD_ROLES = [r for r in Role if r is not Role.GOD_MODE]


# =============================================================================
# ACCESS DECISION
# =============================================================================

class TestAccessDecision:
    """Test the decision value object"""

    def test_allow_is_truthy(self):
        decision = AccessDecision.allow()
        assert decision
        assert decision.reason is None

    def test_deny_is_falsy(self):
        decision = AccessDecision.deny("nope", required_roles=[Role.ADMIN])
        assert not decision
        assert decision.required_roles == frozenset({Role.ADMIN})

    def test_to_dict_sorts_roles(self):
        decision = AccessDecision.deny(ACCESS_DENIED, required_roles=BACK_OFFICE_ROLES)
        assert decision.to_dict() == {
            "allowed": False,
            "reason": ACCESS_DENIED,
            "missing_permission": None,
            "required_roles": ["ADMIN", "GOD_MODE", "MARKETING"],
        }

    def test_is_immutable(self):
        decision = AccessDecision.allow()
        with pytest.raises(FrozenInstanceError):
            decision.allowed = False


# =============================================================================
# PERMISSION CHECK
# =============================================================================

class TestCheckPermission:
    """Test permission decisions"""

    def test_granted(self):
        assert check_permission(Role.ADMIN, Permission.AUDIT_LOGS)

    def test_denied_names_permission(self):
        decision = check_permission(Role.FREE, Permission.BILLING_EDIT)
        assert not decision
        assert decision.reason == INSUFFICIENT_PERMISSIONS
        assert decision.missing_permission == "billing.edit"

    def test_unknown_key_denied_with_raw_key(self):
        decision = check_permission(Role.GOD_MODE, "nonexistent.permission")
        assert not decision
        assert decision.missing_permission == "nonexistent.permission"

    def test_missing_role_denied(self):
        decision = check_permission(None, "users.view")
        assert not decision
        assert decision.reason == INSUFFICIENT_PERMISSIONS


# =============================================================================
# ROLE CHANGE
# =============================================================================

class TestCanChangeRole:
    """Test role-change authorization"""

    @pytest.mark.parametrize("current", list(Role))
    @pytest.mark.parametrize("new", list(Role))
    def test_god_mode_may_make_any_change(self, current, new):
        assert can_change_role(Role.GOD_MODE, current, new)

    def test_god_mode_may_grant_god_mode(self):
        assert can_change_role(Role.GOD_MODE, Role.GOD_MODE, Role.GOD_MODE)

    @pytest.mark.parametrize("actor", NON_GOD_ROLES)
    @pytest.mark.parametrize("current", list(Role))
    def test_nobody_else_grants_god_mode(self, actor, current):
        assert not can_change_role(actor, current, Role.GOD_MODE)

    def test_admin_manages_lower_roles(self):
        assert can_change_role(Role.ADMIN, Role.FREE, Role.PRO)
        assert can_change_role(Role.ADMIN, Role.MARKETING, Role.FREE)
        assert can_change_role(Role.ADMIN, Role.CUSTOM, Role.ENTERPRISE)

    def test_admin_cannot_change_admin(self):
        assert not can_change_role(Role.ADMIN, Role.ADMIN, Role.FREE)

    def test_admin_cannot_demote_god_mode(self):
        assert not can_change_role(Role.ADMIN, Role.GOD_MODE, Role.FREE)

    def test_free_cannot_change_anyone(self):
        for current in Role:
            for new in NON_GOD_ROLES:
                assert not can_change_role(Role.FREE, current, new)

    def test_marketing_cannot_change_custom(self):
        assert not can_change_role(Role.MARKETING, Role.CUSTOM, Role.FREE)
        assert can_change_role(Role.MARKETING, Role.ENTERPRISE, Role.PRO)

    def test_new_role_not_bounded_by_actor(self):
        # Only the target's current role is compared against the actor.
        # Kept pending a product decision, see DESIGN.md.
        assert can_change_role(Role.PRO, Role.FREE, Role.ADMIN)

    @pytest.mark.parametrize("actor,current,new", [
        (None, Role.FREE, Role.PRO),
        (Role.GOD_MODE, None, Role.PRO),
        (Role.GOD_MODE, Role.FREE, None),
        ("ROOT", Role.FREE, Role.PRO),
        (Role.GOD_MODE, "ROOT", Role.PRO),
        (Role.GOD_MODE, Role.FREE, "ROOT"),
    ])
    def test_unknown_or_missing_role_denied(self, actor, current, new):
        assert can_change_role(actor, current, new) is False


class TestCheckRoleChange:
    """Test role-change decisions"""

    def test_allowed(self):
        assert check_role_change(Role.ADMIN, Role.FREE, Role.PRO)

    def test_god_mode_grant_reason(self):
        decision = check_role_change(Role.ADMIN, Role.FREE, Role.GOD_MODE)
        assert not decision
        assert decision.reason == GOD_MODE_GRANT_DENIED
        assert decision.required_roles == GOD_MODE_ONLY

    def test_hierarchy_reason(self):
        decision = check_role_change(Role.ADMIN, Role.ADMIN, Role.FREE)
        assert not decision
        assert decision.reason == ROLE_CHANGE_DENIED
        assert decision.required_roles is None


# =============================================================================
# ALLOW-LIST
# =============================================================================

class TestAllowList:
    """Test fixed allow-list membership"""

    def test_member_allowed(self):
        assert is_allowed_role(Role.MARKETING, BACK_OFFICE_ROLES)

    def test_not_hierarchy_aware(self):
        assert not is_allowed_role(Role.ADMIN, {Role.MARKETING})
        assert not is_allowed_role(Role.GOD_MODE, {Role.FREE})

    def test_missing_role_never_allowed(self):
        assert is_allowed_role(None, BACK_OFFICE_ROLES) is False
        assert is_allowed_role(None, list(Role)) is False

    def test_unknown_role_never_allowed(self):
        assert is_allowed_role("SUPERUSER", list(Role)) is False

    def test_raw_value_allowed(self):
        assert is_allowed_role("ADMIN", ADMIN_ROLES)

    def test_empty_allow_list(self):
        assert not is_allowed_role(Role.GOD_MODE, [])

    def test_check_carries_allow_list(self):
        decision = check_allowed_role(Role.PRO, ADMIN_ROLES)
        assert not decision
        assert decision.reason == ACCESS_DENIED
        assert decision.required_roles == ADMIN_ROLES

    def test_check_accepts_generator(self):
        roles = (r for r in [Role.PRO, Role.ADMIN])
        assert check_allowed_role(Role.ADMIN, roles)

    def test_single_role_name(self):
        assert is_allowed_role(Role.ADMIN, "ADMIN")
        assert is_allowed_role("ADMIN", Role.ADMIN)
        assert not is_allowed_role("A", "ADMIN")
        assert not is_allowed_role(Role.MARKETING, "ADMIN")

    def test_allow_list_normalized(self):
        assert allow_list("ADMIN") == {Role.ADMIN}
        assert allow_list(["ADMIN", "ROOT", Role.MARKETING]) == {Role.ADMIN, Role.MARKETING}

    def test_check_single_role_name(self):
        decision = check_allowed_role(Role.PRO, "GOD_MODE")
        assert decision.required_roles == GOD_MODE_ONLY


# =============================================================================
# LINEAR RANK
# =============================================================================

class TestLinearRank:
    """Test the total order used for page-level gates"""

    def test_meets_minimum(self):
        assert meets_minimum_role(Role.PRO, Role.PRO)
        assert meets_minimum_role(Role.ENTERPRISE, Role.PRO)
        assert not meets_minimum_role(Role.ESSENTIAL, Role.PRO)

    def test_marketing_outranks_admin(self):
        # The rank disagrees with the hierarchy here
        assert meets_minimum_role(Role.MARKETING, Role.ADMIN)
        assert not meets_minimum_role(Role.ADMIN, Role.MARKETING)

    def test_is_admin(self):
        assert is_admin(Role.ADMIN)
        assert is_admin(Role.MARKETING)
        assert is_admin(Role.GOD_MODE)
        assert not is_admin(Role.CUSTOM)

    def test_has_marketing_access(self):
        assert has_marketing_access(Role.PRO)
        assert has_marketing_access(Role.CUSTOM)
        assert not has_marketing_access(Role.ESSENTIAL)

    def test_missing_role_fails(self):
        assert not meets_minimum_role(None, Role.FREE)
        assert not is_admin(None)
        assert not has_marketing_access("ROOT")
