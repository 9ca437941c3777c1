"""Guide dashboard endpoints.

GET /v1/guides/me          - Guide resolved from the dashboard key
GET /v1/guides/me/payouts  - GuidePayoutSummary for a month
GET /v1/guides/me/activity - Contributions and score for a month

The month defaults to the current one.
"""

from fastapi import APIRouter, Depends, Query

from tourism_api.routes.deps import get_dashboard_guide, get_payout_service
from tourism_api.schemas import GuideActivity, GuidePayoutSummary, GuideRef
from tourism_api.services.months import current_month
from tourism_api.services.payout_service import PayoutService

router = APIRouter()


@router.get("/me", response_model=GuideRef)
async def get_me(guide: GuideRef = Depends(get_dashboard_guide)) -> GuideRef:
    return guide


@router.get("/me/payouts", response_model=GuidePayoutSummary)
async def get_my_payouts(
    month: str | None = Query(
        default=None,
        pattern=r"^\d{4}-\d{2}$",
        description="Month (YYYY-MM); defaults to the current month",
        examples=["2025-03"],
    ),
    guide: GuideRef = Depends(get_dashboard_guide),
    service: PayoutService = Depends(get_payout_service),
) -> GuidePayoutSummary:
    return await service.get_guide_payout_summary(guide.id, month or current_month())


@router.get("/me/activity", response_model=GuideActivity)
async def get_my_activity(
    month: str | None = Query(default=None, pattern=r"^\d{4}-\d{2}$"),
    guide: GuideRef = Depends(get_dashboard_guide),
    service: PayoutService = Depends(get_payout_service),
) -> GuideActivity:
    return await service.get_guide_activity(guide.id, month or current_month())
