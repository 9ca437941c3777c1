"""Monthly calculation run.

A run fully replaces the month's results:

0. refuse if the month is administratively locked
1. delete the month's payouts and score rows
2. score every guide in scope (services.scoring)
3. write perpetual and contribution payouts (services.payouts)
4. mark the month's score rows as locked

All of it happens in the caller's transaction: if anything fails, nothing of
the month changes. On PostgreSQL a transaction-scoped advisory lock keeps two
runs for the same month from interleaving.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timezone

from sqlalchemy import delete, text, update
from sqlalchemy.ext.asyncio import AsyncSession

from tourism_api.models import MonthlyGuideScore, Payout, PayoutType
from tourism_api.schemas import CalculationSummary
from tourism_api.services.errors import ConflictError
from tourism_api.services.month_locks import get_or_create_month_lock
from tourism_api.services.months import validate_month
from tourism_api.services.payout_config import load_payout_config
from tourism_api.services.payouts import build_payouts, write_payouts
from tourism_api.services.scoring import score_month

logger = logging.getLogger("uvicorn.error")


def _advisory_lock_key(month: str) -> int:
    raw = f"payout-run:{month}"
    hex_digest = hashlib.md5(raw.encode()).hexdigest()[:8]
    return int(hex_digest, 16) % (2**31)


async def _try_lock_month_run(session: AsyncSession, month: str) -> bool:
    """Take the per-month run lock for the current transaction.

    On other database engines (sqlite in tests) there is no advisory lock and
    the run continues unguarded.
    """
    if session.get_bind().dialect.name != "postgresql":
        return True
    result = await session.execute(
        text("SELECT pg_try_advisory_xact_lock(:key)"),
        {"key": _advisory_lock_key(month)},
    )
    return bool(result.scalar())


async def run_monthly_calculation(session: AsyncSession, month: str) -> CalculationSummary:
    """Recalculate scores and payouts of `month` from scratch.

    Raises:
        PayoutValidationError: malformed month.
        ConflictError: the month is locked, or another run is in progress.
    """
    month = validate_month(month)

    if not await _try_lock_month_run(session, month):
        raise ConflictError(
            f"A calculation for {month} is already running",
            detail={"month": month},
        )

    state = await get_or_create_month_lock(session, month)
    if state.locked:
        raise ConflictError(
            f"{month} is locked. An admin must unlock it before recalculating.",
            detail={"month": month, "locked_by": state.locked_by},
        )

    await session.execute(delete(Payout).where(Payout.month == month))
    await session.execute(delete(MonthlyGuideScore).where(MonthlyGuideScore.month == month))

    config = await load_payout_config(session)
    scored = await score_month(session, month, config)

    ranks = {s.guide_id: s.rank for s in scored}
    lines = await build_payouts(session, month, config, ranks)
    await write_payouts(session, month, lines)

    await session.execute(
        update(MonthlyGuideScore).where(MonthlyGuideScore.month == month).values(locked=True)
    )
    state.calculated_at = datetime.now(timezone.utc)
    await session.flush()

    perpetual_total = sum(line.amount for line in lines if line.type is PayoutType.PERPETUAL)
    contribution_total = sum(line.amount for line in lines if line.type is PayoutType.CONTRIB)
    summary = CalculationSummary(
        month=month,
        guides_scored=len(scored),
        perpetual_total=perpetual_total,
        contribution_total=contribution_total,
        grand_total=perpetual_total + contribution_total,
    )
    logger.info(
        f"[calculation] done month={month} guides_scored={summary.guides_scored} payouts={len(lines)} "
        f"perpetual_total={summary.perpetual_total} contribution_total={summary.contribution_total}"
    )
    return summary
