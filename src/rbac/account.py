"""
AgenticVoice - Account Profile

Account status and industry type carried alongside the role on every user
record, plus the industry-feature gates used by the dashboard.
"""

from enum import Enum
from typing import Any, Optional


class AccountStatus(str, Enum):
    """Lifecycle state of a user account."""
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    PENDING = "PENDING"
    INACTIVE = "INACTIVE"


class IndustryType(str, Enum):
    """Industry vertical selected at onboarding."""
    MEDICAL = "MEDICAL"
    LEGAL = "LEGAL"
    SALES = "SALES"
    OTHER = "OTHER"


DEFAULT_ACCOUNT_STATUS = AccountStatus.ACTIVE
DEFAULT_INDUSTRY_TYPE = IndustryType.OTHER


def coerce_account_status(value: Any) -> Optional[AccountStatus]:
    if isinstance(value, AccountStatus):
        return value
    try:
        return AccountStatus(value)
    except (TypeError, ValueError):
        return None


def coerce_industry_type(value: Any) -> Optional[IndustryType]:
    if isinstance(value, IndustryType):
        return value
    try:
        return IndustryType(value)
    except (TypeError, ValueError):
        return None


def is_account_active(status: Any) -> bool:
    """Only ACTIVE accounts may use the product. Unknown status fails closed."""
    return coerce_account_status(status) is AccountStatus.ACTIVE


def can_access_industry_features(user_industry: Any, industry: Any) -> bool:
    """
    Can a user in ``user_industry`` see features built for ``industry``?

    OTHER is the general-purpose vertical and sees every industry's
    features. A user without an industry sees none.
    """
    user_type = coerce_industry_type(user_industry)
    if user_type is None:
        return False
    return user_type is coerce_industry_type(industry) or user_type is IndustryType.OTHER


def is_medical_user(user_industry: Any) -> bool:
    return coerce_industry_type(user_industry) is IndustryType.MEDICAL


def is_legal_user(user_industry: Any) -> bool:
    return coerce_industry_type(user_industry) is IndustryType.LEGAL


def is_sales_user(user_industry: Any) -> bool:
    return coerce_industry_type(user_industry) is IndustryType.SALES
