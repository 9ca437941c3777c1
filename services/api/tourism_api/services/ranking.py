"""Guide rank tiers and rank-score blending.

Ranking logic:
1. rank_score blends the month's score with the rolling average of the
   (up to two) previous months, depending on how many months are on record.
2. The rank is the highest tier whose threshold rank_score reaches.
3. A guide can fall at most one tier per month; rises are unlimited.
"""

from dataclasses import dataclass
from enum import IntEnum

from tourism_api.services.payout_config import RankThresholds, RankWeights

# Blend used while only one previous month is on record.
TWO_MONTH_WEIGHTS = RankWeights(monthly_weight=0.7, avg3_weight=0.3)


class Rank(IntEnum):
    """Guide tier, ordered C < B < A < S."""

    C = 0
    B = 1
    A = 2
    S = 3

    @classmethod
    def parse(cls, value: "str | Rank | None", default: "Rank | None" = None) -> "Rank | None":
        if isinstance(value, Rank):
            return value
        if value is None:
            return default
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            return default


@dataclass(frozen=True)
class RankScore:
    months_active: int
    avg3_score: float
    rank_score: float


def blend_rank_score(
    monthly_score: float,
    prior_scores: list[float],
    weights: RankWeights,
) -> RankScore:
    """Compute avg3 and rank scores from this month and the prior months found.

    Args:
        monthly_score: Points earned in the target month.
        prior_scores: monthly_score of M-1 / M-2 rows that exist (0-2 values).
        weights: Configured weights, applied once three months are on record.
    """
    months_active = 1 + len(prior_scores)

    if months_active == 1:
        return RankScore(months_active=1, avg3_score=monthly_score, rank_score=monthly_score)

    avg3_score = sum(prior_scores) / len(prior_scores)
    if months_active == 2:
        weights = TWO_MONTH_WEIGHTS

    rank_score = weights.monthly_weight * monthly_score + weights.avg3_weight * avg3_score
    return RankScore(months_active=months_active, avg3_score=avg3_score, rank_score=rank_score)


def rank_for_score(rank_score: float, thresholds: RankThresholds) -> Rank:
    """Highest tier whose threshold is reached; C is the floor."""
    if rank_score >= thresholds.S:
        return Rank.S
    if rank_score >= thresholds.A:
        return Rank.A
    if rank_score >= thresholds.B:
        return Rank.B
    return Rank.C


def limit_drop(previous: Rank | None, computed: Rank) -> Rank:
    """Cap a downgrade at one tier below the previous month's rank."""
    if previous is None:
        return computed
    return Rank(max(computed, previous - 1, Rank.C))
