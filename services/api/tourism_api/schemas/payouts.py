"""Schemas for payout administration (/v1/admin)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ContributionRecord(BaseModel):
    """A contribution, joined with guide and store names for display."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    store_id: str
    guide_id: str
    month: str
    type: str
    base_points: float
    evidence_url: str | None = None
    memo: str | None = None
    created_at: datetime | None = None
    guide_name: str | None = None
    store_name: str | None = None


class FounderAssignment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    store_id: str
    guide_id: str
    assigned_at: datetime | None = None
    guide_name: str | None = None
    store_name: str | None = None


class GuideScore(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    guide_id: str
    month: str
    monthly_score: float
    avg3_score: float
    rank_score: float
    rank: str = Field(pattern="^[SABC]$")
    locked: bool = False


class PayoutRecord(BaseModel):
    id: int
    guide_id: str
    store_id: str
    month: str
    type: str
    amount: int
    details: dict[str, Any] = Field(default_factory=dict)
    locked: bool = False
    guide_name: str | None = None
    store_name: str | None = None


class CalculationSummary(BaseModel):
    """Result of a monthly calculation run."""

    month: str
    guides_scored: int = Field(ge=0)
    perpetual_total: int = Field(ge=0)
    contribution_total: int = Field(ge=0)
    grand_total: int = Field(ge=0)


class AuditEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: str
    action: str
    user: str
    role: str
    reason: str | None = None
    timestamp: datetime | None = None


class MonthStatus(BaseModel):
    """Administrative lock state and calculated totals of a month."""

    month: str
    locked: bool
    locked_by: str | None = None
    locked_at: datetime | None = None
    calculated: bool
    guides_scored: int = 0
    perpetual_total: int = 0
    contribution_total: int = 0
    grand_total: int = 0
    audit_log: list[AuditEntry] = Field(default_factory=list)


class GuideRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    guide_name: str
    preferred_language: str | None = None
    contact_method: str | None = None


class StoreRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    store_name: str
