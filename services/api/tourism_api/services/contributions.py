"""Contribution ledger.

Contributions are the raw input of the monthly calculation. Adding or deleting
one does not touch scores or payouts; the month has to be recalculated for the
change to show up there.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tourism_api.models import Contribution, SponsorStore, TourismGuide
from tourism_api.schemas import ContributionRecord
from tourism_api.services.errors import CapacityError, PayoutValidationError
from tourism_api.services.marketplace import require_guide, require_store
from tourism_api.services.months import validate_month
from tourism_api.services.payout_config import PayoutConfig, load_payout_config

logger = logging.getLogger("uvicorn.error")

# Contribution type whose monthly count per (guide, store) is capped.
USAGE_TYPE = "B"


def _require(value: str | None, field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise PayoutValidationError(f"{field} is required", detail={"field": field})
    return cleaned


async def count_contributions(
    session: AsyncSession,
    *,
    guide_id: str,
    store_id: str,
    month: str,
    type: str,
) -> int:
    result = await session.execute(
        select(func.count(Contribution.id)).where(
            Contribution.guide_id == guide_id,
            Contribution.store_id == store_id,
            Contribution.month == month,
            Contribution.type == type,
        )
    )
    return result.scalar() or 0


async def add_contribution(
    session: AsyncSession,
    *,
    store_id: str,
    guide_id: str,
    month: str,
    type: str,
    evidence_url: str | None = None,
    memo: str | None = None,
    config: PayoutConfig | None = None,
) -> ContributionRecord:
    """Record a contribution, pricing it from the current point definitions.

    Raises:
        PayoutValidationError: missing field or malformed month.
        NotFoundError: unknown guide or store.
        CapacityError: the monthly cap for usage contributions is reached.
    """
    store_id = _require(store_id, "store_id")
    guide_id = _require(guide_id, "guide_id")
    contribution_type = _require(type, "type").upper()
    month = validate_month(month)
    await require_guide(session, guide_id)
    await require_store(session, store_id)

    config = config or await load_payout_config(session)
    base_points = config.base_points_for(contribution_type)

    if contribution_type == USAGE_TYPE:
        cap = config.contribution_limits.B_monthly_per_store
        existing = await count_contributions(
            session,
            guide_id=guide_id,
            store_id=store_id,
            month=month,
            type=contribution_type,
        )
        if existing >= cap:
            raise CapacityError(
                f"Usage/experience contributions are limited to {cap} per store per month",
                detail={"guide_id": guide_id, "store_id": store_id, "month": month, "limit": cap},
            )

    contribution = Contribution(
        store_id=store_id,
        guide_id=guide_id,
        month=month,
        type=contribution_type,
        base_points=base_points,
        evidence_url=(evidence_url or None),
        memo=(memo or None),
    )
    session.add(contribution)
    await session.flush()
    await session.refresh(contribution)

    logger.info(
        f"[contributions] added id={contribution.id} guide={guide_id} store={store_id} "
        f"month={month} type={contribution_type} points={base_points}"
    )
    return ContributionRecord.model_validate(contribution)


async def get_contribution(session: AsyncSession, contribution_id: int) -> ContributionRecord | None:
    contribution = await session.get(Contribution, contribution_id)
    if contribution is None:
        return None
    return ContributionRecord.model_validate(contribution)


async def delete_contribution(session: AsyncSession, contribution_id: int) -> bool:
    """Delete a contribution. Returns False if it did not exist."""
    result = await session.execute(delete(Contribution).where(Contribution.id == contribution_id))
    deleted = (result.rowcount or 0) > 0
    logger.info(f"[contributions] delete id={contribution_id} deleted={deleted}")
    return deleted


async def get_contributions(
    session: AsyncSession,
    *,
    month: str | None = None,
    guide_id: str | None = None,
    store_id: str | None = None,
) -> list[ContributionRecord]:
    """List contributions newest first, with guide and store names attached."""
    query = (
        select(Contribution, TourismGuide.guide_name, SponsorStore.store_name)
        .outerjoin(TourismGuide, Contribution.guide_id == TourismGuide.id)
        .outerjoin(SponsorStore, Contribution.store_id == SponsorStore.id)
    )
    if month:
        query = query.where(Contribution.month == validate_month(month))
    if guide_id:
        query = query.where(Contribution.guide_id == guide_id)
    if store_id:
        query = query.where(Contribution.store_id == store_id)
    query = query.order_by(Contribution.created_at.desc(), Contribution.id.desc())

    result = await session.execute(query)
    records: list[ContributionRecord] = []
    for contribution, guide_name, store_name in result.all():
        record = ContributionRecord.model_validate(contribution)
        records.append(record.model_copy(update={"guide_name": guide_name, "store_name": store_name}))
    return records
