"""Month lock controller.

A month carries two related flags:

- `month_locks.locked`: the administrative lock. Set and cleared only by an
  explicit lock/unlock, each of which appends an `audit_logs` row. While set,
  the monthly calculation refuses to run.
- `locked` on the month's score/payout rows: marks rows produced by a
  completed calculation. A recalculation replaces those rows, so this flag
  never blocks a re-run. Lock/unlock set and clear it along with the month
  lock.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tourism_api.models import AuditAction, AuditLog, MonthlyGuideScore, MonthLock, Payout, PayoutType
from tourism_api.schemas import AuditEntry, MonthStatus
from tourism_api.services.access import Actor, AdminRole, require_role
from tourism_api.services.errors import ConflictError
from tourism_api.services.months import validate_month
from tourism_api.services.payouts import payout_totals

logger = logging.getLogger("uvicorn.error")


async def get_month_lock(session: AsyncSession, month: str) -> MonthLock | None:
    return await session.get(MonthLock, month)


async def get_or_create_month_lock(session: AsyncSession, month: str) -> MonthLock:
    state = await get_month_lock(session, month)
    if state is None:
        state = MonthLock(month=month, locked=False)
        session.add(state)
        await session.flush()
    return state


async def is_month_locked(session: AsyncSession, month: str) -> bool:
    state = await get_month_lock(session, month)
    return bool(state and state.locked)


async def _set_row_locks(session: AsyncSession, month: str, locked: bool) -> None:
    await session.execute(
        update(MonthlyGuideScore).where(MonthlyGuideScore.month == month).values(locked=locked)
    )
    await session.execute(update(Payout).where(Payout.month == month).values(locked=locked))


def _audit(month: str, action: AuditAction, actor: Actor, reason: str | None) -> AuditLog:
    return AuditLog(
        month=month,
        action=action,
        user=actor.user,
        role=actor.role.value,
        reason=reason,
        timestamp=datetime.now(timezone.utc),
    )


async def lock_month(
    session: AsyncSession,
    month: str,
    actor: Actor,
    reason: str | None = None,
) -> MonthStatus:
    """Administratively lock a month (operator or admin).

    Raises:
        ConflictError: the month is already locked.
    """
    month = validate_month(month)
    require_role(actor, AdminRole.OPERATOR)
    reason = (reason or "").strip() or None

    state = await get_or_create_month_lock(session, month)
    if state.locked:
        raise ConflictError(
            f"{month} is already locked",
            detail={"month": month, "locked_by": state.locked_by},
        )

    state.locked = True
    state.locked_by = actor.user
    state.locked_at = datetime.now(timezone.utc)
    await _set_row_locks(session, month, True)
    session.add(_audit(month, AuditAction.LOCK, actor, reason))
    await session.flush()

    logger.info(f"[month-lock] locked month={month} by={actor.user} role={actor.role.value}")
    return await get_month_status(session, month)


async def unlock_month(
    session: AsyncSession,
    month: str,
    actor: Actor,
    reason: str | None,
) -> MonthStatus:
    """Lift the administrative lock of a month (admin only, reason required).

    Raises:
        ForbiddenError: the actor is not an admin.
        ConflictError: blank reason, or the month is not locked.
    """
    month = validate_month(month)
    require_role(actor, AdminRole.ADMIN)
    reason = (reason or "").strip()
    if not reason:
        raise ConflictError("A reason is required to unlock a month", detail={"month": month})

    state = await get_month_lock(session, month)
    if state is None or not state.locked:
        raise ConflictError(f"{month} is not locked", detail={"month": month})

    state.locked = False
    state.locked_by = None
    state.locked_at = None
    await _set_row_locks(session, month, False)
    session.add(_audit(month, AuditAction.UNLOCK, actor, reason))
    await session.flush()

    logger.info(f"[month-lock] unlocked month={month} by={actor.user} reason={reason!r}")
    return await get_month_status(session, month)


async def list_audit_log(session: AsyncSession, month: str) -> list[AuditEntry]:
    """Audit entries of a month, newest first."""
    result = await session.execute(
        select(AuditLog)
        .where(AuditLog.month == validate_month(month))
        .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
    )
    return [
        AuditEntry(
            month=entry.month,
            action=entry.action.value,
            user=entry.user,
            role=entry.role,
            reason=entry.reason,
            timestamp=entry.timestamp,
        )
        for entry in result.scalars().all()
    ]


async def get_month_status(session: AsyncSession, month: str) -> MonthStatus:
    month = validate_month(month)
    state = await get_month_lock(session, month)

    scored = await session.execute(
        select(func.count()).select_from(MonthlyGuideScore).where(MonthlyGuideScore.month == month)
    )
    guides_scored = scored.scalar() or 0
    totals = await payout_totals(session, month)

    return MonthStatus(
        month=month,
        locked=bool(state and state.locked),
        locked_by=state.locked_by if state else None,
        locked_at=state.locked_at if state else None,
        calculated=bool(state and state.calculated_at is not None),
        guides_scored=guides_scored,
        perpetual_total=totals[PayoutType.PERPETUAL],
        contribution_total=totals[PayoutType.CONTRIB],
        grand_total=totals[PayoutType.PERPETUAL] + totals[PayoutType.CONTRIB],
        audit_log=await list_audit_log(session, month),
    )
