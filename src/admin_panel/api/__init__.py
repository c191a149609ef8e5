"""
Admin Panel API Routes

- rbac_routes: role and permission catalog, role-change authorization
"""

from .rbac_routes import router as rbac_router

__all__ = ["rbac_router"]
