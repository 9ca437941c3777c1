"""Payout engine: perpetual and contribution payouts for a month.

Two pools are paid per active sponsor store:

- PERPETUAL: a flat `perpetual_per_store` to the store's founder guide.
- CONTRIB:   a `contribution_per_store` pool split between the guides who
             contributed at the store that month, proportionally to their
             points weighted by their rank multiplier:

                 adj_points = raw_points * rank_multipliers[rank]
                 amount     = round_half_up(pool * adj_points / store_total_adj)

Each guide's amount is rounded on its own, so a store's amounts may add up to
slightly more or less than the pool. Amounts that round to 0 are not paid.
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tourism_api.models import (
    Contribution,
    Payout,
    PayoutType,
    SponsorStore,
    StoreFounder,
    TourismGuide,
    store_is_active,
)
from tourism_api.schemas import PayoutRecord
from tourism_api.services.months import validate_month
from tourism_api.services.payout_config import PayoutConfig, RankMultipliers
from tourism_api.services.ranking import Rank

logger = logging.getLogger("uvicorn.error")


@dataclass(frozen=True)
class PayoutLine:
    """A payout to be written for the month."""

    guide_id: str
    store_id: str
    type: PayoutType
    amount: int
    details: dict[str, Any] = field(default_factory=dict)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(Decimal(repr(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def multiplier_for(rank: Rank, multipliers: RankMultipliers) -> float:
    return float(getattr(multipliers, rank.name))


def perpetual_payouts(founders: list[tuple[str, str]], amount: int) -> list[PayoutLine]:
    """One flat payout per (store_id, guide_id) founder pair."""
    return [
        PayoutLine(
            guide_id=guide_id,
            store_id=store_id,
            type=PayoutType.PERPETUAL,
            amount=amount,
            details={"reason": "perpetual", "store_id": store_id},
        )
        for store_id, guide_id in founders
    ]


def allocate_contribution_pool(
    store_id: str,
    points_by_guide: dict[str, float],
    ranks: dict[str, Rank],
    multipliers: RankMultipliers,
    pool: int,
) -> list[PayoutLine]:
    """Split one store's contribution pool between its contributing guides.

    Guides without a score row this month are weighted as rank C.
    """
    shares: list[dict[str, Any]] = []
    total_adj = 0.0
    for guide_id in sorted(points_by_guide):
        raw_points = float(points_by_guide[guide_id])
        rank = ranks.get(guide_id, Rank.C)
        multiplier = multiplier_for(rank, multipliers)
        adj_points = raw_points * multiplier
        total_adj += adj_points
        shares.append(
            {
                "guide_id": guide_id,
                "raw_points": raw_points,
                "rank": rank.name,
                "multiplier": multiplier,
                "adj_points": adj_points,
            }
        )

    if total_adj == 0:
        return []

    lines: list[PayoutLine] = []
    for share in shares:
        amount = round_half_up(pool * share["adj_points"] / total_adj)
        if amount <= 0:
            continue
        lines.append(
            PayoutLine(
                guide_id=share["guide_id"],
                store_id=store_id,
                type=PayoutType.CONTRIB,
                amount=amount,
                details={
                    "raw_points": share["raw_points"],
                    "rank": share["rank"],
                    "multiplier": share["multiplier"],
                    "adj_points": share["adj_points"],
                    "total_adj_in_store": total_adj,
                },
            )
        )
    return lines


async def _active_founders(session: AsyncSession) -> list[tuple[str, str]]:
    result = await session.execute(
        select(StoreFounder.store_id, StoreFounder.guide_id)
        .join(SponsorStore, StoreFounder.store_id == SponsorStore.id)
        .where(store_is_active())
        .order_by(StoreFounder.store_id)
    )
    return [(store_id, guide_id) for store_id, guide_id in result.all()]


async def _store_points(session: AsyncSession, month: str) -> dict[str, dict[str, float]]:
    result = await session.execute(
        select(Contribution.store_id, Contribution.guide_id, func.sum(Contribution.base_points))
        .join(SponsorStore, Contribution.store_id == SponsorStore.id)
        .where(Contribution.month == month, store_is_active())
        .group_by(Contribution.store_id, Contribution.guide_id)
    )
    by_store: dict[str, dict[str, float]] = defaultdict(dict)
    for store_id, guide_id, total in result.all():
        by_store[store_id][guide_id] = float(total or 0)
    return by_store


async def build_payouts(
    session: AsyncSession,
    month: str,
    config: PayoutConfig,
    ranks: dict[str, Rank],
) -> list[PayoutLine]:
    """Compute every payout line of `month` from founders, contributions and ranks."""
    amounts = config.payout_amounts
    lines = perpetual_payouts(await _active_founders(session), amounts.perpetual_per_store)

    store_points = await _store_points(session, month)
    for store_id in sorted(store_points):
        lines.extend(
            allocate_contribution_pool(
                store_id,
                store_points[store_id],
                ranks,
                config.rank_multipliers,
                amounts.contribution_per_store,
            )
        )
    return lines


async def write_payouts(session: AsyncSession, month: str, lines: list[PayoutLine]) -> None:
    session.add_all(
        Payout(
            guide_id=line.guide_id,
            store_id=line.store_id,
            month=month,
            type=line.type,
            amount=line.amount,
            details_json=json.dumps(line.details),
            locked=False,
        )
        for line in lines
    )
    await session.flush()


def _details(details_json: str | None) -> dict[str, Any]:
    if not details_json:
        return {}
    try:
        payload = json.loads(details_json)
    except json.JSONDecodeError:
        return {}
    return payload if isinstance(payload, dict) else {}


async def get_payouts(
    session: AsyncSession,
    *,
    month: str | None = None,
    guide_id: str | None = None,
    type: PayoutType | str | None = None,
) -> list[PayoutRecord]:
    """List payouts, largest first, with guide and store names attached."""
    query = (
        select(Payout, TourismGuide.guide_name, SponsorStore.store_name)
        .outerjoin(TourismGuide, Payout.guide_id == TourismGuide.id)
        .outerjoin(SponsorStore, Payout.store_id == SponsorStore.id)
    )
    if month:
        query = query.where(Payout.month == validate_month(month))
    if guide_id:
        query = query.where(Payout.guide_id == guide_id)
    if type:
        query = query.where(Payout.type == PayoutType(type))
    query = query.order_by(Payout.amount.desc(), Payout.id)

    result = await session.execute(query)
    return [
        PayoutRecord(
            id=payout.id,
            guide_id=payout.guide_id,
            store_id=payout.store_id,
            month=payout.month,
            type=payout.type.value,
            amount=payout.amount,
            details=_details(payout.details_json),
            locked=payout.locked,
            guide_name=guide_name,
            store_name=store_name,
        )
        for payout, guide_name, store_name in result.all()
    ]


async def payout_totals(session: AsyncSession, month: str) -> dict[PayoutType, int]:
    """Sum of amounts per payout type for a month (missing types are 0)."""
    result = await session.execute(
        select(Payout.type, func.coalesce(func.sum(Payout.amount), 0))
        .where(Payout.month == month)
        .group_by(Payout.type)
    )
    totals = {payout_type: 0 for payout_type in PayoutType}
    for payout_type, total in result.all():
        totals[payout_type] = int(total)
    return totals
