import pytest

from tourism_api.models import MonthlyGuideScore, Payout, PayoutType
from tourism_api.services.errors import ConflictError, ForbiddenError, PayoutValidationError
from tourism_api.services.month_locks import get_month_status, is_month_locked, lock_month, unlock_month


async def test_lock_and_unlock_with_audit_trail(session, operator, admin):
    status = await lock_month(session, "2025-03", operator, "closing March")
    assert status.locked is True
    assert status.locked_by == "ops@example.com"
    assert status.locked_at is not None
    assert await is_month_locked(session, "2025-03")

    status = await unlock_month(session, "2025-03", admin, "correction needed")
    assert status.locked is False
    assert status.locked_by is None
    assert not await is_month_locked(session, "2025-03")

    actions = [(e.action, e.user, e.role, e.reason) for e in status.audit_log]
    assert actions == [
        ("unlock", "root@example.com", "admin", "correction needed"),
        ("lock", "ops@example.com", "operator", "closing March"),
    ]


async def test_lock_reason_is_optional(session, operator):
    status = await lock_month(session, "2025-03", operator)
    assert status.audit_log[0].reason is None


async def test_lock_twice_conflicts(session, operator):
    await lock_month(session, "2025-03", operator)
    with pytest.raises(ConflictError):
        await lock_month(session, "2025-03", operator)


async def test_support_cannot_lock(session, support):
    with pytest.raises(ForbiddenError):
        await lock_month(session, "2025-03", support)
    assert not await is_month_locked(session, "2025-03")


async def test_unlock_requires_admin(session, operator):
    await lock_month(session, "2025-03", operator)
    with pytest.raises(ForbiddenError):
        await unlock_month(session, "2025-03", operator, "please")
    assert await is_month_locked(session, "2025-03")


@pytest.mark.parametrize("reason", [None, "", "   "])
async def test_unlock_requires_reason(session, operator, admin, reason):
    await lock_month(session, "2025-03", operator)
    with pytest.raises(ConflictError):
        await unlock_month(session, "2025-03", admin, reason)
    assert await is_month_locked(session, "2025-03")


async def test_unlock_unlocked_month_conflicts(session, admin):
    with pytest.raises(ConflictError):
        await unlock_month(session, "2025-03", admin, "nothing to do")


async def test_lock_validates_month(session, operator):
    with pytest.raises(PayoutValidationError):
        await lock_month(session, "03-2025", operator)


async def test_lock_flags_rows(session, operator, admin):
    session.add_all(
        [
            MonthlyGuideScore(guide_id="g1", month="2025-03", monthly_score=10, avg3_score=10, rank_score=10, rank="C"),
            Payout(guide_id="g1", store_id="s1", month="2025-03", type=PayoutType.CONTRIB, amount=4000),
            Payout(guide_id="g1", store_id="s1", month="2025-02", type=PayoutType.CONTRIB, amount=4000),
        ]
    )
    await session.flush()

    await lock_month(session, "2025-03", operator)
    payouts = (await session.execute(Payout.__table__.select())).all()
    locked_by_month = {row.month: row.locked for row in payouts}
    assert locked_by_month == {"2025-03": True, "2025-02": False}

    await unlock_month(session, "2025-03", admin, "reopen")
    payouts = (await session.execute(Payout.__table__.select())).all()
    assert all(not row.locked for row in payouts)


async def test_status_of_unknown_month(session):
    status = await get_month_status(session, "2030-01")
    assert status.locked is False
    assert status.calculated is False
    assert status.grand_total == 0
    assert status.audit_log == []
