"""Pydantic schemas for API request/response validation."""

from tourism_api.schemas.common import ErrorDetail, ErrorResponse
from tourism_api.schemas.guides import (
    ContributionSection,
    GuideActivity,
    GuidePayoutSummary,
    MonthTotals,
    PerpetualSection,
)
from tourism_api.schemas.payouts import (
    AuditEntry,
    CalculationSummary,
    ContributionRecord,
    FounderAssignment,
    GuideRef,
    GuideScore,
    MonthStatus,
    PayoutRecord,
    StoreRef,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "AuditEntry",
    "CalculationSummary",
    "ContributionRecord",
    "ContributionSection",
    "FounderAssignment",
    "GuideActivity",
    "GuidePayoutSummary",
    "GuideRef",
    "GuideScore",
    "MonthStatus",
    "MonthTotals",
    "PayoutRecord",
    "PerpetualSection",
    "StoreRef",
]
