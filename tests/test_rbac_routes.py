"""
RBAC admin API tests.

Exercises /api/v1/admin/rbac through the full application.
"""

import logging

import pytest

from rbac.roles import Role
from rbac.permissions import Permission


BASE = "/api/v1/admin/rbac"


# =============================================================================
# ROLE CATALOG
# =============================================================================

class TestListRoles:
    """Test GET /roles"""

    def test_requires_auth(self, client):
        assert client.get(f"{BASE}/roles").status_code == 401

    def test_customer_denied(self, client, auth_header):
        response = client.get(f"{BASE}/roles", headers=auth_header(Role.ENTERPRISE))
        assert response.status_code == 403

    @pytest.mark.parametrize("role", [Role.MARKETING, Role.ADMIN, Role.GOD_MODE])
    def test_back_office_allowed(self, client, auth_header, role):
        response = client.get(f"{BASE}/roles", headers=auth_header(role))
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 8
        assert [r["role"] for r in data["roles"]] == [r.value for r in Role]

    def test_role_detail(self, client, auth_header):
        data = client.get(f"{BASE}/roles", headers=auth_header(Role.ADMIN)).json()
        enterprise = next(r for r in data["roles"] if r["role"] == "ENTERPRISE")
        assert enterprise["includes"] == ["FREE", "ESSENTIAL", "PRO"]
        assert enterprise["is_customer"] is True
        assert "vapi.view" in enterprise["permissions"]

        god = next(r for r in data["roles"] if r["role"] == "GOD_MODE")
        assert len(god["includes"]) == 7
        assert len(god["permissions"]) == len(Permission)


# =============================================================================
# PERMISSION CATALOG
# =============================================================================

class TestListPermissions:
    """Test GET /permissions"""

    def test_full_catalog(self, client, auth_header):
        response = client.get(f"{BASE}/permissions", headers=auth_header(Role.MARKETING))
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == len(Permission)
        assert [c["name"] for c in data["categories"]][0] == "User Management"

    def test_filter_by_category(self, client, auth_header):
        response = client.get(
            f"{BASE}/permissions",
            params={"category": "VAPI & Voice"},
            headers=auth_header(Role.ADMIN),
        )
        data = response.json()
        assert data["total"] == 3
        assert [p["key"] for p in data["categories"][0]["permissions"]] == [
            "vapi.view", "vapi.manage", "calls.monitor",
        ]

    def test_unknown_category(self, client, auth_header):
        response = client.get(
            f"{BASE}/permissions",
            params={"category": "Payroll"},
            headers=auth_header(Role.ADMIN),
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Unknown category: Payroll"


# =============================================================================
# MATRIX
# =============================================================================

class TestPermissionMatrix:
    """Test GET /matrix"""

    def test_admin_allowed(self, client, auth_header):
        response = client.get(f"{BASE}/matrix", headers=auth_header(Role.ADMIN))
        assert response.status_code == 200
        assert response.json()["matrix"]["FREE"] == ["users.view"]

    def test_marketing_denied(self, client, auth_header):
        response = client.get(f"{BASE}/matrix", headers=auth_header(Role.MARKETING))
        assert response.status_code == 403
        assert response.json()["detail"]["required_roles"] == ["ADMIN", "GOD_MODE"]


# =============================================================================
# MY ACCESS
# =============================================================================

class TestMyAccess:
    """Test GET /me"""

    def test_customer_sees_own_access(self, client, auth_header):
        response = client.get(f"{BASE}/me", headers=auth_header(Role.PRO, user_id="user-5"))
        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == "user-5"
        assert data["role"] == "PRO"
        assert data["includes"] == ["FREE", "ESSENTIAL"]
        assert data["permissions"] == ["billing.view", "crm.view", "users.view"]

    def test_anonymous_denied(self, client):
        assert client.get(f"{BASE}/me").status_code == 401


# =============================================================================
# ROLE CHANGE CHECK
# =============================================================================

class TestRoleChangeCheck:
    """Test POST /role-changes/check"""

    def _check(self, client, headers, current, new, **extra):
        body = {"current_role": current, "new_role": new, **extra}
        return client.post(f"{BASE}/role-changes/check", json=body, headers=headers)

    def test_admin_allowed(self, client, auth_header):
        response = self._check(client, auth_header(Role.ADMIN), "FREE", "PRO")
        assert response.status_code == 200
        assert response.json() == {"allowed": True, "reason": None, "required_roles": None}

    def test_admin_cannot_grant_god_mode(self, client, auth_header):
        response = self._check(client, auth_header(Role.ADMIN), "FREE", "GOD_MODE")
        assert response.status_code == 200
        assert response.json() == {
            "allowed": False,
            "reason": "Only GOD_MODE can assign GOD_MODE",
            "required_roles": ["GOD_MODE"],
        }

    def test_admin_cannot_change_admin(self, client, auth_header):
        data = self._check(client, auth_header(Role.ADMIN), "ADMIN", "FREE").json()
        assert data["allowed"] is False
        assert data["reason"] == "Insufficient privileges to change this user's role"

    def test_god_mode_grants_god_mode(self, client, auth_header):
        data = self._check(client, auth_header(Role.GOD_MODE), "ADMIN", "GOD_MODE").json()
        assert data["allowed"] is True

    def test_marketing_cannot_call(self, client, auth_header):
        response = self._check(client, auth_header(Role.MARKETING), "FREE", "PRO")
        assert response.status_code == 403

    def test_unknown_role_is_422(self, client, auth_header):
        response = self._check(client, auth_header(Role.ADMIN), "FREE", "SUPERUSER")
        assert response.status_code == 422

    def test_check_is_logged(self, client, auth_header, caplog):
        caplog.set_level(logging.INFO, logger="admin_panel.api.rbac_routes")
        self._check(
            client, auth_header(Role.ADMIN, user_id="admin-1"), "FREE", "PRO",
            target_user_id="user-2",
        )
        records = [r for r in caplog.records if r.getMessage() == "Role change checked"]
        assert records
        assert records[0].extra_data == {
            "actor_id": "admin-1",
            "actor_role": "ADMIN",
            "target_user_id": "user-2",
            "current_role": "FREE",
            "new_role": "PRO",
            "allowed": True,
        }


# =============================================================================
# TOKEN WITHOUT ROLE
# =============================================================================

class TestRolelessToken:
    """A signed session without a role claim is authenticated but holds nothing"""

    @pytest.fixture
    def roleless_header(self):
        import jwt as pyjwt
        from rbac.jwt import get_jwt_secret

        token = pyjwt.encode(
            {"sub": "user-3", "email": "norole@example.com", "type": "access"},
            get_jwt_secret(),
            algorithm="HS256",
        )
        return {"Authorization": f"Bearer {token}"}

    def test_guarded_route_is_403(self, client, roleless_header):
        response = client.get(f"{BASE}/roles", headers=roleless_header)
        assert response.status_code == 403
        assert response.json()["detail"]["error"] == "Access denied"

    def test_me_reports_no_role(self, client, roleless_header):
        response = client.get(f"{BASE}/me", headers=roleless_header)
        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == "user-3"
        assert data["role"] is None
        assert data["includes"] == []
        assert data["permissions"] == []

    def test_role_change_check_is_403(self, client, roleless_header):
        response = client.post(
            f"{BASE}/role-changes/check",
            json={"current_role": "FREE", "new_role": "PRO"},
            headers=roleless_header,
        )
        assert response.status_code == 403
