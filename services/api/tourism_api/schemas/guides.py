"""Schemas for the guide dashboard endpoints (/v1/guides)."""

from pydantic import BaseModel, Field

from tourism_api.schemas.payouts import ContributionRecord, FounderAssignment, GuideScore, PayoutRecord


class PerpetualSection(BaseModel):
    """Flat founder payouts of the month plus the stores the guide founds."""

    total: int = Field(ge=0)
    stores: list[FounderAssignment] = Field(default_factory=list)


class ContributionSection(BaseModel):
    total: int = Field(ge=0)
    details: list[PayoutRecord] = Field(default_factory=list)


class MonthTotals(BaseModel):
    month: str
    perpetual: int = Field(ge=0)
    contribution: int = Field(ge=0)
    total: int = Field(ge=0)


class GuidePayoutSummary(BaseModel):
    """Everything a guide's dashboard shows for one month."""

    month: str
    score: GuideScore | None = None
    perpetual: PerpetualSection
    contribution: ContributionSection
    contributions: list[ContributionRecord] = Field(default_factory=list)
    history: list[MonthTotals] = Field(default_factory=list, max_length=3)
    grand_total: int = Field(alias="grandTotal", ge=0)

    model_config = {"populate_by_name": True}


class GuideActivity(BaseModel):
    month: str
    contributions: list[ContributionRecord] = Field(default_factory=list)
    score: GuideScore | None = None
