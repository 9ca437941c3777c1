"""Lookups against the marketplace-owned guide and store tables."""

from sqlalchemy.ext.asyncio import AsyncSession

from tourism_api.models import SponsorStore, TourismGuide
from tourism_api.services.errors import NotFoundError


async def require_guide(session: AsyncSession, guide_id: str) -> TourismGuide:
    guide = await session.get(TourismGuide, guide_id)
    if guide is None:
        raise NotFoundError(f"Unknown guide: {guide_id}", detail={"guide_id": guide_id})
    return guide


async def require_store(session: AsyncSession, store_id: str) -> SponsorStore:
    store = await session.get(SponsorStore, store_id)
    if store is None:
        raise NotFoundError(f"Unknown store: {store_id}", detail={"store_id": store_id})
    return store
