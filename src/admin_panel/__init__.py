"""
Admin Panel Module

Administrative API for the AgenticVoice back office.

Key Components:
- api/: REST API routes for admin operations
"""

__all__ = ["rbac_router"]


def __getattr__(name):
    """Lazily expose rbac_router to avoid import-time side effects."""
    if name == "rbac_router":
        from .api.rbac_routes import router

        return router
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
