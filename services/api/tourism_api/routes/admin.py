"""Admin endpoints for payout management.

Authentication is handled by the gateway in front of this service; handlers
receive the admin identity through `get_actor`. Read endpoints accept any admin
role, writes need operator, and unlocking a month needs admin.

Routers are thin: call services for business logic.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from tourism_api.models import PayoutType
from tourism_api.routes.deps import get_actor, get_payout_service
from tourism_api.schemas import (
    CalculationSummary,
    ContributionRecord,
    FounderAssignment,
    GuideRef,
    GuideScore,
    MonthStatus,
    PayoutRecord,
    StoreRef,
)
from tourism_api.services.access import Actor
from tourism_api.services.payout_service import PayoutService

router = APIRouter()
logger = logging.getLogger("uvicorn.error")

MONTH_PATTERN = r"^\d{4}-\d{2}$"


class UpdateSettingRequest(BaseModel):
    """Request body for updating one payout settings section."""

    value: Any


class AssignFounderRequest(BaseModel):
    store_id: str = Field(min_length=1)
    guide_id: str = Field(min_length=1)


class AddContributionRequest(BaseModel):
    """Request body for recording a contribution."""

    store_id: str = Field(min_length=1)
    guide_id: str = Field(min_length=1)
    month: str = Field(pattern=MONTH_PATTERN)  # "2025-03"
    type: str = Field(min_length=1, max_length=10)  # "B" = usage/experience
    evidence_url: str | None = None
    memo: str | None = None


class LockMonthRequest(BaseModel):
    reason: str | None = None


class UnlockMonthRequest(BaseModel):
    reason: str = ""


class SuccessResponse(BaseModel):
    success: bool


# ============================================================
# Settings
# ============================================================


@router.get("/payout-settings")
async def get_payout_settings(
    _actor: Actor = Depends(get_actor),
    service: PayoutService = Depends(get_payout_service),
) -> dict:
    """Current payout settings with defaults applied."""
    config = await service.get_config()
    return config.model_dump()


@router.put("/payout-settings/{key}")
async def update_payout_settings(
    key: str,
    request: UpdateSettingRequest,
    actor: Actor = Depends(get_actor),
    service: PayoutService = Depends(get_payout_service),
) -> dict:
    """Replace one settings section (e.g. `rank_thresholds`)."""
    config = await service.update_setting(key, request.value, actor)
    logger.info(f"[admin] payout setting updated key={key} by={actor.user}")
    return config.model_dump()


# ============================================================
# Founders
# ============================================================


@router.get("/founders", response_model=list[FounderAssignment])
async def list_founders(
    _actor: Actor = Depends(get_actor),
    service: PayoutService = Depends(get_payout_service),
) -> list[FounderAssignment]:
    return await service.list_founders()


@router.post("/founders", response_model=FounderAssignment)
async def assign_founder(
    request: AssignFounderRequest,
    actor: Actor = Depends(get_actor),
    service: PayoutService = Depends(get_payout_service),
) -> FounderAssignment:
    """Assign (or reassign) the founder guide of a store."""
    return await service.assign_founder(request.store_id, request.guide_id, actor)


@router.delete("/founders/{store_id}", response_model=SuccessResponse)
async def remove_founder(
    store_id: str,
    actor: Actor = Depends(get_actor),
    service: PayoutService = Depends(get_payout_service),
) -> SuccessResponse:
    await service.remove_founder(store_id, actor)
    return SuccessResponse(success=True)


# ============================================================
# Contributions
# ============================================================


@router.get("/contributions", response_model=list[ContributionRecord])
async def list_contributions(
    month: str | None = Query(default=None, pattern=MONTH_PATTERN),
    guide_id: str | None = Query(default=None),
    store_id: str | None = Query(default=None),
    _actor: Actor = Depends(get_actor),
    service: PayoutService = Depends(get_payout_service),
) -> list[ContributionRecord]:
    return await service.get_contributions(month=month, guide_id=guide_id, store_id=store_id)


@router.post("/contributions", response_model=ContributionRecord)
async def add_contribution(
    request: AddContributionRequest,
    actor: Actor = Depends(get_actor),
    service: PayoutService = Depends(get_payout_service),
) -> ContributionRecord:
    """Record a contribution. Scores and payouts change on the next monthly run."""
    return await service.add_contribution(
        store_id=request.store_id,
        guide_id=request.guide_id,
        month=request.month,
        type=request.type,
        evidence_url=request.evidence_url,
        memo=request.memo,
        actor=actor,
    )


@router.delete("/contributions/{contribution_id}", response_model=SuccessResponse)
async def delete_contribution(
    contribution_id: int,
    actor: Actor = Depends(get_actor),
    service: PayoutService = Depends(get_payout_service),
) -> SuccessResponse:
    await service.delete_contribution(contribution_id, actor)
    return SuccessResponse(success=True)


# ============================================================
# Scores & payouts
# ============================================================


@router.get("/scores", response_model=list[GuideScore])
async def list_scores(
    month: str | None = Query(default=None, pattern=MONTH_PATTERN),
    guide_id: str | None = Query(default=None),
    _actor: Actor = Depends(get_actor),
    service: PayoutService = Depends(get_payout_service),
) -> list[GuideScore]:
    return await service.get_guide_scores(month=month, guide_id=guide_id)


@router.get("/payouts", response_model=list[PayoutRecord])
async def list_payouts(
    month: str | None = Query(default=None, pattern=MONTH_PATTERN),
    guide_id: str | None = Query(default=None),
    type: PayoutType | None = Query(default=None),
    _actor: Actor = Depends(get_actor),
    service: PayoutService = Depends(get_payout_service),
) -> list[PayoutRecord]:
    return await service.get_payouts(month=month, guide_id=guide_id, type=type)


# ============================================================
# Monthly calculation & locks
# ============================================================


@router.post("/months/{month}/calculate", response_model=CalculationSummary)
async def run_monthly_calculation(
    month: str,
    actor: Actor = Depends(get_actor),
    service: PayoutService = Depends(get_payout_service),
) -> CalculationSummary:
    """Recalculate scores and payouts of a month (full replace)."""
    return await service.run_monthly_calculation(month, actor)


@router.get("/months/{month}", response_model=MonthStatus)
async def get_month_status(
    month: str,
    _actor: Actor = Depends(get_actor),
    service: PayoutService = Depends(get_payout_service),
) -> MonthStatus:
    """Lock state, totals and audit trail of a month."""
    return await service.get_month_status(month)


@router.post("/months/{month}/lock", response_model=MonthStatus)
async def lock_month(
    month: str,
    request: LockMonthRequest | None = None,
    actor: Actor = Depends(get_actor),
    service: PayoutService = Depends(get_payout_service),
) -> MonthStatus:
    reason = request.reason if request else None
    return await service.lock_month(month, actor, reason)


@router.post("/months/{month}/unlock", response_model=MonthStatus)
async def unlock_month(
    month: str,
    request: UnlockMonthRequest,
    actor: Actor = Depends(get_actor),
    service: PayoutService = Depends(get_payout_service),
) -> MonthStatus:
    """Lift a month lock. Admin only; a reason is required."""
    return await service.unlock_month(month, actor, request.reason)


# ============================================================
# Marketplace lookups
# ============================================================


@router.get("/guides", response_model=list[GuideRef])
async def list_guides(
    _actor: Actor = Depends(get_actor),
    service: PayoutService = Depends(get_payout_service),
) -> list[GuideRef]:
    return await service.list_active_guides()


@router.get("/stores", response_model=list[StoreRef])
async def list_stores(
    _actor: Actor = Depends(get_actor),
    service: PayoutService = Depends(get_payout_service),
) -> list[StoreRef]:
    return await service.list_active_stores()
