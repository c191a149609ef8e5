"""
RBAC Admin API Routes - Role and permission catalog for the back office.

Endpoints:
- GET  /admin/rbac/roles               - Role catalog with hierarchy and permissions
- GET  /admin/rbac/permissions         - Permission catalog grouped by category
- GET  /admin/rbac/matrix              - Role -> permission keys matrix
- GET  /admin/rbac/me                  - Caller's effective access
- POST /admin/rbac/role-changes/check  - Authorize a role change (no persistence)

The tables are static, so every endpoint is read-only. Role changes are
authorized here but persisted by the user-management service.
"""

from typing import Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from rbac import (
    AccessDecision,
    AuthContext,
    Category,
    Role,
    ROLES,
    ROLE_HIERARCHY,
    ADMIN_ROLES,
    BACK_OFFICE_ROLES,
    Permission,
    get_role_permissions,
    check_role_change,
    require_allowed_roles,
    require_auth,
)
from rbac.permissions import get_permission_matrix, get_permissions_by_category
from services.logging_config import AccessLogger

logger = logging.getLogger(__name__)
access_logger = AccessLogger(__name__)

router = APIRouter(prefix="/admin/rbac", tags=["RBAC Management"])


# =============================================================================
# SCHEMAS
# =============================================================================

class PermissionResponse(BaseModel):
    """Permission detail response."""
    key: str
    name: str
    description: str
    category: str


class PermissionCategoryResponse(BaseModel):
    """One display category of the permission catalog."""
    name: str
    permissions: List[PermissionResponse]


class PermissionListResponse(BaseModel):
    """Permission catalog response."""
    categories: List[PermissionCategoryResponse]
    total: int


class RoleResponse(BaseModel):
    """Role detail response."""
    role: Role
    name: str
    description: str
    is_customer: bool
    is_back_office: bool
    includes: List[Role]
    permissions: List[str]


class RoleListResponse(BaseModel):
    """Role catalog response."""
    roles: List[RoleResponse]
    total: int


class PermissionMatrixResponse(BaseModel):
    """Role value -> sorted permission keys."""
    matrix: Dict[str, List[str]]


class MyAccessResponse(BaseModel):
    """The caller's effective access."""
    user_id: str
    email: str
    role: Optional[Role]
    account_status: str
    includes: List[Role]
    permissions: List[str]


class RoleChangeCheckRequest(BaseModel):
    """Request to authorize a role change. Unknown roles fail validation (422)."""
    current_role: Role = Field(..., description="Target user's current role")
    new_role: Role = Field(..., description="Role to assign")
    target_user_id: Optional[str] = Field(None, max_length=200)


class RoleChangeCheckResponse(BaseModel):
    """Outcome of a role-change authorization check."""
    allowed: bool
    reason: Optional[str] = None
    required_roles: Optional[List[str]] = None


def _sorted_roles(roles) -> List[Role]:
    order = list(Role)
    return sorted(roles, key=order.index)


def _permission_keys(role: Optional[Role]) -> List[str]:
    return sorted(p.value for p in get_role_permissions(role))


# =============================================================================
# CATALOG ENDPOINTS
# =============================================================================

@router.get("/roles", response_model=RoleListResponse)
async def list_roles(
    ctx: AuthContext = Depends(require_allowed_roles(BACK_OFFICE_ROLES)),
):
    """List every role with its hierarchy and permissions."""
    responses = [
        RoleResponse(
            role=role,
            name=info.name,
            description=info.description,
            is_customer=info.is_customer,
            is_back_office=info.is_back_office,
            includes=_sorted_roles(ROLE_HIERARCHY[role]),
            permissions=_permission_keys(role),
        )
        for role, info in ROLES.items()
    ]
    return RoleListResponse(roles=responses, total=len(responses))


@router.get("/permissions", response_model=PermissionListResponse)
async def list_permissions(
    category: Optional[str] = Query(None, description="Filter by category name"),
    ctx: AuthContext = Depends(require_allowed_roles(BACK_OFFICE_ROLES)),
):
    """List the permission catalog grouped by category."""
    selected: Optional[Category] = None
    if category is not None:
        try:
            selected = Category(category)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown category: {category}",
            )

    categories = []
    for cat, infos in get_permissions_by_category().items():
        if selected is not None and cat is not selected:
            continue
        categories.append(PermissionCategoryResponse(
            name=cat.value,
            permissions=[
                PermissionResponse(
                    key=info.key,
                    name=info.name,
                    description=info.description,
                    category=info.category.value,
                )
                for info in infos
            ],
        ))

    return PermissionListResponse(
        categories=categories,
        total=sum(len(c.permissions) for c in categories),
    )


async def _require_role_managers(
    request: Request,
    ctx: AuthContext = Depends(require_auth),
) -> AuthContext:
    """ADMIN allow-list, or anyone explicitly granted users.roles."""
    if ctx.is_allowed(ADMIN_ROLES) or ctx.has_permission(Permission.USERS_ROLES):
        return ctx
    # Reuse the allow-list guard so the denial is logged the same way
    return await require_allowed_roles(ADMIN_ROLES)(request, ctx)


@router.get("/matrix", response_model=PermissionMatrixResponse)
async def permission_matrix(
    ctx: AuthContext = Depends(_require_role_managers),
):
    """Role -> permission keys, as shown in the role management panel."""
    return PermissionMatrixResponse(matrix=get_permission_matrix())


@router.get("/me", response_model=MyAccessResponse)
async def my_access(ctx: AuthContext = Depends(require_auth)):
    """Effective access of the caller."""
    return MyAccessResponse(
        user_id=ctx.user_id,
        email=ctx.email,
        role=ctx.role,
        account_status=ctx.account_status.value,
        includes=_sorted_roles(ctx.hierarchy),
        permissions=_permission_keys(ctx.role),
    )


# =============================================================================
# ROLE CHANGE AUTHORIZATION
# =============================================================================

@router.post("/role-changes/check", response_model=RoleChangeCheckResponse)
async def check_role_change_endpoint(
    body: RoleChangeCheckRequest,
    ctx: AuthContext = Depends(require_allowed_roles(ADMIN_ROLES)),
):
    """
    Decide whether the caller may move a user from ``current_role`` to
    ``new_role``.

    Returns 200 with ``allowed: false`` on denial so the panel can show the
    reason next to the role selector.
    """
    decision: AccessDecision = check_role_change(ctx.role, body.current_role, body.new_role)

    access_logger.log_role_change_check(
        ctx.user_id,
        ctx.role.value if ctx.role else None,
        body.current_role.value,
        body.new_role.value,
        decision.allowed,
        target_user_id=body.target_user_id,
    )

    payload = decision.to_dict()
    return RoleChangeCheckResponse(
        allowed=payload["allowed"],
        reason=payload["reason"],
        required_roles=payload["required_roles"],
    )
