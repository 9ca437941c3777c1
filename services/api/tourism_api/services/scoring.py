"""Scoring engine: monthly guide scores and ranks.

For a target month every guide with a contribution that month, or with any
founder assignment, gets one `monthly_guide_scores` row:

    monthly_score = sum of base_points of the guide's contributions in the month
    avg3_score    = mean of the monthly_score of M-1 / M-2 rows on record
    rank_score    = blend of the two (see services.ranking)
    rank          = tier of rank_score, never more than one tier below M-1's rank
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tourism_api.models import Contribution, MonthlyGuideScore, StoreFounder
from tourism_api.schemas import GuideScore
from tourism_api.services.months import subtract_months, validate_month
from tourism_api.services.payout_config import PayoutConfig
from tourism_api.services.ranking import Rank, blend_rank_score, limit_drop, rank_for_score

logger = logging.getLogger("uvicorn.error")


@dataclass(frozen=True)
class PriorScore:
    month: str
    monthly_score: float
    rank: Rank | None


@dataclass(frozen=True)
class ScoredGuide:
    guide_id: str
    monthly_score: float
    avg3_score: float
    rank_score: float
    rank: Rank
    months_active: int


def score_guide(
    guide_id: str,
    monthly_score: float,
    month: str,
    prior: list[PriorScore],
    config: PayoutConfig,
) -> ScoredGuide:
    """Score one guide for `month` given their M-1 / M-2 rows (pure)."""
    prior = sorted(prior, key=lambda p: p.month)
    blended = blend_rank_score(
        monthly_score,
        [p.monthly_score for p in prior],
        config.rank_weights,
    )
    rank = rank_for_score(blended.rank_score, config.rank_thresholds)

    previous_month = subtract_months(month, 1)
    previous = next((p for p in prior if p.month == previous_month), None)
    if previous is not None:
        rank = limit_drop(previous.rank, rank)

    return ScoredGuide(
        guide_id=guide_id,
        monthly_score=monthly_score,
        avg3_score=blended.avg3_score,
        rank_score=blended.rank_score,
        rank=rank,
        months_active=blended.months_active,
    )


async def _monthly_points_by_guide(session: AsyncSession, month: str) -> dict[str, float]:
    result = await session.execute(
        select(Contribution.guide_id, func.sum(Contribution.base_points))
        .where(Contribution.month == month)
        .group_by(Contribution.guide_id)
    )
    return {guide_id: float(total or 0) for guide_id, total in result.all()}


async def _founder_guide_ids(session: AsyncSession) -> set[str]:
    result = await session.execute(select(distinct(StoreFounder.guide_id)))
    return set(result.scalars().all())


async def _prior_scores(session: AsyncSession, month: str) -> dict[str, list[PriorScore]]:
    prior_months = [subtract_months(month, 1), subtract_months(month, 2)]
    result = await session.execute(
        select(MonthlyGuideScore).where(MonthlyGuideScore.month.in_(prior_months))
    )
    by_guide: dict[str, list[PriorScore]] = {}
    for row in result.scalars().all():
        by_guide.setdefault(row.guide_id, []).append(
            PriorScore(month=row.month, monthly_score=float(row.monthly_score), rank=Rank.parse(row.rank))
        )
    return by_guide


async def score_month(session: AsyncSession, month: str, config: PayoutConfig) -> list[ScoredGuide]:
    """Compute and insert score rows for every guide in scope for `month`.

    The caller is responsible for having removed any existing rows of `month`.
    """
    points = await _monthly_points_by_guide(session, month)
    guide_ids = sorted(set(points) | await _founder_guide_ids(session))
    prior_by_guide = await _prior_scores(session, month)

    scored: list[ScoredGuide] = []
    for guide_id in guide_ids:
        result = score_guide(
            guide_id,
            points.get(guide_id, 0.0),
            month,
            prior_by_guide.get(guide_id, []),
            config,
        )
        session.add(
            MonthlyGuideScore(
                guide_id=guide_id,
                month=month,
                monthly_score=result.monthly_score,
                avg3_score=result.avg3_score,
                rank_score=result.rank_score,
                rank=result.rank.name,
                locked=False,
            )
        )
        scored.append(result)

    await session.flush()
    logger.info(f"[scoring] month={month} guides_scored={len(scored)}")
    return scored


async def get_guide_scores(
    session: AsyncSession,
    *,
    month: str | None = None,
    guide_id: str | None = None,
) -> list[GuideScore]:
    """Score rows, highest rank score first."""
    query = select(MonthlyGuideScore)
    if month:
        query = query.where(MonthlyGuideScore.month == validate_month(month))
    if guide_id:
        query = query.where(MonthlyGuideScore.guide_id == guide_id)
    query = query.order_by(MonthlyGuideScore.rank_score.desc(), MonthlyGuideScore.guide_id)

    result = await session.execute(query)
    return [GuideScore.model_validate(row) for row in result.scalars().all()]
