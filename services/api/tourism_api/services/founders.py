"""Founder registry: one founder guide per sponsor store."""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tourism_api.models import SponsorStore, StoreFounder, TourismGuide
from tourism_api.schemas import FounderAssignment
from tourism_api.services.errors import CapacityError, PayoutValidationError
from tourism_api.services.marketplace import require_guide, require_store
from tourism_api.services.payout_config import PayoutConfig, load_payout_config

logger = logging.getLogger("uvicorn.error")


async def get_founder_count_by_guide(session: AsyncSession, guide_id: str) -> int:
    result = await session.execute(
        select(func.count(StoreFounder.store_id)).where(StoreFounder.guide_id == guide_id)
    )
    return result.scalar() or 0


async def get_founder_by_store(session: AsyncSession, store_id: str) -> FounderAssignment | None:
    founder = await session.get(StoreFounder, store_id)
    if founder is None:
        return None
    return FounderAssignment.model_validate(founder)


async def assign_founder(
    session: AsyncSession,
    *,
    store_id: str,
    guide_id: str,
    config: PayoutConfig | None = None,
) -> FounderAssignment:
    """Make `guide_id` the founder of `store_id`, replacing any previous founder.

    Raises:
        PayoutValidationError: missing ids.
        NotFoundError: unknown guide or store.
        CapacityError: the guide already founds the configured maximum of stores.
    """
    store_id = (store_id or "").strip()
    guide_id = (guide_id or "").strip()
    if not store_id or not guide_id:
        raise PayoutValidationError("store_id and guide_id are required")
    await require_guide(session, guide_id)
    await require_store(session, store_id)

    config = config or await load_payout_config(session)
    max_stores = config.founder_max_stores.max

    existing = await session.get(StoreFounder, store_id)
    current_count = await get_founder_count_by_guide(session, guide_id)
    if existing is not None and existing.guide_id == guide_id:
        # Re-assigning the same pair does not take up another slot.
        current_count -= 1

    if current_count >= max_stores:
        raise CapacityError(
            f"Guide has reached the founder limit of {max_stores} stores",
            detail={"guide_id": guide_id, "limit": max_stores},
        )

    if existing is None:
        existing = StoreFounder(store_id=store_id, guide_id=guide_id)
        session.add(existing)
    else:
        existing.guide_id = guide_id
        existing.assigned_at = func.now()
    await session.flush()
    await session.refresh(existing)

    logger.info(f"[founders] assigned store={store_id} guide={guide_id}")
    return FounderAssignment.model_validate(existing)


async def remove_founder(session: AsyncSession, store_id: str) -> bool:
    """Remove the founder of a store. Returns False if it had none."""
    result = await session.execute(delete(StoreFounder).where(StoreFounder.store_id == store_id))
    removed = (result.rowcount or 0) > 0
    logger.info(f"[founders] remove store={store_id} removed={removed}")
    return removed


async def list_founders(session: AsyncSession, *, guide_id: str | None = None) -> list[FounderAssignment]:
    """All founder assignments newest first, with guide and store names."""
    query = (
        select(StoreFounder, TourismGuide.guide_name, SponsorStore.store_name)
        .outerjoin(TourismGuide, StoreFounder.guide_id == TourismGuide.id)
        .outerjoin(SponsorStore, StoreFounder.store_id == SponsorStore.id)
    )
    if guide_id:
        query = query.where(StoreFounder.guide_id == guide_id)
    query = query.order_by(StoreFounder.assigned_at.desc(), StoreFounder.store_id)

    result = await session.execute(query)
    return [
        FounderAssignment.model_validate(founder).model_copy(
            update={"guide_name": guide_name, "store_name": store_name}
        )
        for founder, guide_name, store_name in result.all()
    ]
