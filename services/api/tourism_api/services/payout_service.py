"""PayoutService: the object routes and scripts talk to.

Built once at startup (see main.lifespan) around a `Database` and an optional
`RedisStore`, and passed to request handlers through FastAPI dependencies.
Every method runs in its own transaction.
"""

from __future__ import annotations

import logging
from typing import Any

from redis.exceptions import RedisError

from tourism_api.models import PayoutType
from tourism_api.schemas import (
    CalculationSummary,
    ContributionRecord,
    FounderAssignment,
    GuideActivity,
    GuidePayoutSummary,
    GuideRef,
    GuideScore,
    MonthStatus,
    PayoutRecord,
    StoreRef,
)
from tourism_api.services import calculation, contributions, founders, guides, month_locks, payouts, scoring
from tourism_api.services.access import Actor, AdminRole, require_role
from tourism_api.services.payout_config import PayoutConfig, load_payout_config, update_payout_setting
from tourism_api.stores.postgres import Database
from tourism_api.stores.redis import RedisStore

logger = logging.getLogger("uvicorn.error")


class PayoutService:
    def __init__(self, db: Database, cache: RedisStore | None = None) -> None:
        self._db = db
        self._cache = cache

    @property
    def db(self) -> Database:
        return self._db

    # ============================================================
    # Settings
    # ============================================================

    async def get_config(self) -> PayoutConfig:
        async with self._db.session() as session:
            return await load_payout_config(session)

    async def update_setting(self, key: str, value: Any, actor: Actor) -> PayoutConfig:
        require_role(actor, AdminRole.OPERATOR)
        async with self._db.session() as session:
            return await update_payout_setting(session, key, value)

    # ============================================================
    # Founders
    # ============================================================

    async def list_founders(self) -> list[FounderAssignment]:
        async with self._db.session() as session:
            return await founders.list_founders(session)

    async def get_founder_by_store(self, store_id: str) -> FounderAssignment | None:
        async with self._db.session() as session:
            return await founders.get_founder_by_store(session, store_id)

    async def get_founder_count_by_guide(self, guide_id: str) -> int:
        async with self._db.session() as session:
            return await founders.get_founder_count_by_guide(session, guide_id)

    async def assign_founder(self, store_id: str, guide_id: str, actor: Actor) -> FounderAssignment:
        require_role(actor, AdminRole.OPERATOR)
        async with self._db.session() as session:
            previous = await founders.get_founder_by_store(session, store_id)
            assignment = await founders.assign_founder(session, store_id=store_id, guide_id=guide_id)
        # Founded stores are listed in every month's summary.
        await self._invalidate_guide(assignment.guide_id)
        if previous is not None and previous.guide_id != assignment.guide_id:
            await self._invalidate_guide(previous.guide_id)
        return assignment

    async def remove_founder(self, store_id: str, actor: Actor) -> bool:
        require_role(actor, AdminRole.OPERATOR)
        async with self._db.session() as session:
            previous = await founders.get_founder_by_store(session, store_id)
            removed = await founders.remove_founder(session, store_id)
        if previous is not None:
            await self._invalidate_guide(previous.guide_id)
        return removed

    # ============================================================
    # Contributions
    # ============================================================

    async def get_contributions(
        self,
        *,
        month: str | None = None,
        guide_id: str | None = None,
        store_id: str | None = None,
    ) -> list[ContributionRecord]:
        async with self._db.session() as session:
            return await contributions.get_contributions(
                session, month=month, guide_id=guide_id, store_id=store_id
            )

    async def add_contribution(
        self,
        *,
        store_id: str,
        guide_id: str,
        month: str,
        type: str,
        actor: Actor,
        evidence_url: str | None = None,
        memo: str | None = None,
    ) -> ContributionRecord:
        require_role(actor, AdminRole.OPERATOR)
        async with self._db.session() as session:
            record = await contributions.add_contribution(
                session,
                store_id=store_id,
                guide_id=guide_id,
                month=month,
                type=type,
                evidence_url=evidence_url,
                memo=memo,
            )
        await self._invalidate_guide(record.guide_id, record.month)
        return record

    async def delete_contribution(self, contribution_id: int, actor: Actor) -> bool:
        require_role(actor, AdminRole.OPERATOR)
        async with self._db.session() as session:
            record = await contributions.get_contribution(session, contribution_id)
            deleted = await contributions.delete_contribution(session, contribution_id)
        if record is not None:
            await self._invalidate_guide(record.guide_id, record.month)
        return deleted

    # ============================================================
    # Results
    # ============================================================

    async def get_guide_scores(self, *, month: str | None = None, guide_id: str | None = None) -> list[GuideScore]:
        async with self._db.session() as session:
            return await scoring.get_guide_scores(session, month=month, guide_id=guide_id)

    async def get_payouts(
        self,
        *,
        month: str | None = None,
        guide_id: str | None = None,
        type: PayoutType | None = None,
    ) -> list[PayoutRecord]:
        async with self._db.session() as session:
            return await payouts.get_payouts(session, month=month, guide_id=guide_id, type=type)

    # ============================================================
    # Calculation and month locks
    # ============================================================

    async def run_monthly_calculation(self, month: str, actor: Actor) -> CalculationSummary:
        require_role(actor, AdminRole.OPERATOR)
        logger.info(f"[calculation] start month={month} by={actor.user}")
        async with self._db.session() as session:
            summary = await calculation.run_monthly_calculation(session, month)
        await self._invalidate_month(summary.month)
        return summary

    async def get_month_status(self, month: str) -> MonthStatus:
        async with self._db.session() as session:
            return await month_locks.get_month_status(session, month)

    async def lock_month(self, month: str, actor: Actor, reason: str | None = None) -> MonthStatus:
        async with self._db.session() as session:
            status = await month_locks.lock_month(session, month, actor, reason)
        await self._invalidate_month(status.month)
        return status

    async def unlock_month(self, month: str, actor: Actor, reason: str | None) -> MonthStatus:
        async with self._db.session() as session:
            status = await month_locks.unlock_month(session, month, actor, reason)
        await self._invalidate_month(status.month)
        return status

    # ============================================================
    # Guide dashboard
    # ============================================================

    async def resolve_guide(self, dashboard_key: str) -> GuideRef | None:
        async with self._db.session() as session:
            return await guides.resolve_guide_by_dashboard_key(session, dashboard_key)

    async def get_guide_payout_summary(self, guide_id: str, month: str) -> GuidePayoutSummary:
        cached = await self._cached_summary(guide_id, month)
        if cached is not None:
            return cached

        async with self._db.session() as session:
            summary = await guides.get_guide_payout_summary(session, guide_id, month)

        if self._cache is not None:
            try:
                await self._cache.set_guide_summary(guide_id, summary.month, summary.model_dump(mode="json"))
            except RedisError:
                logger.warning(f"[guide-summary] cache write failed guide={guide_id} month={month}")
        return summary

    async def get_guide_activity(self, guide_id: str, month: str) -> GuideActivity:
        async with self._db.session() as session:
            return await guides.get_guide_activity(session, guide_id, month)

    async def list_active_guides(self) -> list[GuideRef]:
        async with self._db.session() as session:
            return await guides.list_active_guides(session)

    async def list_active_stores(self) -> list[StoreRef]:
        async with self._db.session() as session:
            return await guides.list_active_stores(session)

    # ============================================================
    # Cache helpers
    # ============================================================

    async def _cached_summary(self, guide_id: str, month: str) -> GuidePayoutSummary | None:
        if self._cache is None:
            return None
        try:
            payload = await self._cache.get_guide_summary(guide_id, month)
        except RedisError:
            logger.warning(f"[guide-summary] cache read failed guide={guide_id} month={month}")
            return None
        if payload is None:
            return None
        return GuidePayoutSummary.model_validate(payload)

    async def _invalidate_guide(self, guide_id: str, month: str | None = None) -> None:
        if self._cache is None:
            return
        try:
            removed = await self._cache.invalidate_guide(guide_id, month)
            logger.info(f"[guide-summary] invalidated guide={guide_id} month={month or '*'} keys={removed}")
        except RedisError:
            logger.warning(f"[guide-summary] invalidation failed guide={guide_id} month={month or '*'}")

    async def _invalidate_month(self, month: str) -> None:
        if self._cache is None:
            return
        try:
            removed = await self._cache.invalidate_month(month)
            logger.info(f"[guide-summary] invalidated month={month} keys={removed}")
        except RedisError:
            # Cached summaries expire on their own TTL.
            logger.warning(f"[guide-summary] invalidation failed month={month}")
