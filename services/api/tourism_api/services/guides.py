"""Guide dashboard reads and marketplace lookups.

Guides reach their dashboard through an opaque key; everything here is
read-only and tolerates absence (unknown key -> None, no rows -> empty lists).
"""

from __future__ import annotations

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tourism_api.models import PayoutType, SponsorStore, TourismGuide, store_is_active
from tourism_api.schemas import (
    ContributionSection,
    GuideActivity,
    GuidePayoutSummary,
    GuideRef,
    MonthTotals,
    PerpetualSection,
    StoreRef,
)
from tourism_api.services.contributions import get_contributions
from tourism_api.services.founders import list_founders
from tourism_api.services.months import subtract_months, validate_month
from tourism_api.services.payouts import get_payouts
from tourism_api.services.scoring import get_guide_scores

# Number of previous months shown as history on the dashboard.
HISTORY_MONTHS = 3


async def resolve_guide_by_dashboard_key(session: AsyncSession, dashboard_key: str) -> GuideRef | None:
    key = (dashboard_key or "").strip()
    if not key:
        return None
    result = await session.execute(select(TourismGuide).where(TourismGuide.dashboard_key == key))
    guide = result.scalar_one_or_none()
    if guide is None:
        return None
    return GuideRef.model_validate(guide)


async def _month_totals(session: AsyncSession, guide_id: str, month: str) -> MonthTotals:
    payouts = await get_payouts(session, guide_id=guide_id, month=month)
    perpetual = sum(p.amount for p in payouts if p.type == PayoutType.PERPETUAL.value)
    contribution = sum(p.amount for p in payouts if p.type == PayoutType.CONTRIB.value)
    return MonthTotals(month=month, perpetual=perpetual, contribution=contribution, total=perpetual + contribution)


async def get_guide_payout_summary(session: AsyncSession, guide_id: str, month: str) -> GuidePayoutSummary:
    """Payouts, score, contributions and 3-month history of a guide for one month."""
    month = validate_month(month)

    payouts = await get_payouts(session, guide_id=guide_id, month=month)
    scores = await get_guide_scores(session, guide_id=guide_id, month=month)
    contributions = await get_contributions(session, guide_id=guide_id, month=month)
    founded_stores = await list_founders(session, guide_id=guide_id)

    perpetual_total = sum(p.amount for p in payouts if p.type == PayoutType.PERPETUAL.value)
    contribution_details = [p for p in payouts if p.type == PayoutType.CONTRIB.value]
    contribution_total = sum(p.amount for p in contribution_details)

    history = [
        await _month_totals(session, guide_id, subtract_months(month, i))
        for i in range(1, HISTORY_MONTHS + 1)
    ]

    return GuidePayoutSummary(
        month=month,
        score=scores[0] if scores else None,
        perpetual=PerpetualSection(total=perpetual_total, stores=founded_stores),
        contribution=ContributionSection(total=contribution_total, details=contribution_details),
        contributions=contributions,
        history=history,
        grand_total=perpetual_total + contribution_total,
    )


async def get_guide_activity(session: AsyncSession, guide_id: str, month: str) -> GuideActivity:
    month = validate_month(month)
    contributions = await get_contributions(session, guide_id=guide_id, month=month)
    scores = await get_guide_scores(session, guide_id=guide_id, month=month)
    return GuideActivity(month=month, contributions=contributions, score=scores[0] if scores else None)


async def list_active_guides(session: AsyncSession) -> list[GuideRef]:
    result = await session.execute(
        select(TourismGuide)
        .where(or_(TourismGuide.status == "active", TourismGuide.is_available.is_(True)))
        .order_by(TourismGuide.guide_name)
    )
    return [GuideRef.model_validate(g) for g in result.scalars().all()]


async def list_active_stores(session: AsyncSession) -> list[StoreRef]:
    result = await session.execute(
        select(SponsorStore).where(store_is_active()).order_by(SponsorStore.store_name)
    )
    return [StoreRef.model_validate(s) for s in result.scalars().all()]
