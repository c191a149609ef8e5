"""
Access-control HTTP errors.

Evaluator functions never raise; these exceptions are how route guards turn
a denied AccessDecision into a 401/403 response with a clear message.
"""

from typing import Optional

from fastapi import HTTPException, status

from .access import AccessDecision, ACCESS_DENIED, AUTHENTICATION_REQUIRED


class AuthenticationRequiredError(HTTPException):
    """401 for callers without a valid session."""

    def __init__(self, detail: str = AUTHENTICATION_REQUIRED):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AccessDeniedError(HTTPException):
    """403 carrying the unmet requirement from an AccessDecision."""

    def __init__(self, decision: Optional[AccessDecision] = None, reason: Optional[str] = None):
        if decision is None:
            decision = AccessDecision.deny(reason or ACCESS_DENIED)
        self.decision = decision
        detail = {
            "error": reason or self.decision.reason or ACCESS_DENIED,
        }
        if self.decision.missing_permission:
            detail["required_permission"] = self.decision.missing_permission
        if self.decision.required_roles is not None:
            detail["required_roles"] = sorted(r.value for r in self.decision.required_roles)

        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
