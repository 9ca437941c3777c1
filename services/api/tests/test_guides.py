"""Guide dashboard reads and the guide summary cache."""

import json

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from tourism_api.services.payout_service import PayoutService
from tourism_api.settings import Settings
from tourism_api.stores.redis import RedisStore, guide_summary_key


@pytest.fixture
async def settled(service, operator, admin):
    """g1 founds s2 and contributes at s1; February and March are calculated."""
    await service.update_setting("point_definitions", {"B": 10}, admin)
    await service.assign_founder("s2", "g1", operator)
    await service.add_contribution(store_id="s1", guide_id="g1", month="2025-03", type="B", actor=operator)
    await service.run_monthly_calculation("2025-02", operator)
    await service.run_monthly_calculation("2025-03", operator)
    return service


async def test_resolve_guide(service):
    guide = await service.resolve_guide("key-g1")
    assert guide is not None
    assert guide.id == "g1"
    assert guide.guide_name == "Aiko"
    assert await service.resolve_guide("nope") is None
    assert await service.resolve_guide("") is None


async def test_guide_payout_summary(settled):
    summary = await settled.get_guide_payout_summary("g1", "2025-03")

    assert summary.month == "2025-03"
    assert summary.score is not None and summary.score.rank == "C"
    assert summary.perpetual.total == 1000
    assert [s.store_id for s in summary.perpetual.stores] == ["s2"]
    assert summary.contribution.total == 4000
    assert [d.store_id for d in summary.contribution.details] == ["s1"]
    assert len(summary.contributions) == 1
    assert summary.grand_total == 5000

    assert [h.month for h in summary.history] == ["2025-02", "2025-01", "2024-12"]
    assert summary.history[0].perpetual == 1000
    assert summary.history[0].total == 1000
    assert summary.history[1].total == 0


async def test_guide_payout_summary_for_inactive_guide_is_empty(settled):
    summary = await settled.get_guide_payout_summary("g2", "2025-03")
    assert summary.score is None
    assert summary.grand_total == 0
    assert summary.contribution.details == []
    assert len(summary.history) == 3


async def test_guide_activity(settled):
    activity = await settled.get_guide_activity("g1", "2025-03")
    assert activity.month == "2025-03"
    assert [c.type for c in activity.contributions] == ["B"]
    assert activity.score is not None and activity.score.monthly_score == 10


async def test_active_guides_and_stores(service):
    guides = await service.list_active_guides()
    assert [g.id for g in guides] == ["g1", "g2"]

    stores = await service.list_active_stores()
    assert [s.id for s in stores] == ["s1", "s2", "s3"]


class TestSummaryCache:
    async def test_summary_is_cached(self, db, settled, fake_redis):
        service = PayoutService(db, RedisStore(fake_redis, summary_ttl=120))
        summary = await service.get_guide_payout_summary("g1", "2025-03")

        key = guide_summary_key("g1", "2025-03")
        assert key in fake_redis.data
        assert fake_redis.ttls[key] == 120

        # Served from the cache on the next read
        cached = json.loads(fake_redis.data[key])
        cached["grand_total"] = 1
        fake_redis.data[key] = json.dumps(cached)
        again = await service.get_guide_payout_summary("g1", "2025-03")
        assert again.grand_total == 1
        assert summary.grand_total == 5000

    async def test_calculation_invalidates_following_months(self, db, settled, fake_redis, operator):
        service = PayoutService(db, RedisStore(fake_redis))
        await service.get_guide_payout_summary("g1", "2025-03")
        await service.get_guide_payout_summary("g1", "2025-06")
        await service.get_guide_payout_summary("g1", "2024-12")

        await service.run_monthly_calculation("2025-02", operator)

        assert guide_summary_key("g1", "2025-03") not in fake_redis.data
        assert guide_summary_key("g1", "2025-06") in fake_redis.data
        assert guide_summary_key("g1", "2024-12") in fake_redis.data

    async def test_lock_invalidates_month(self, db, settled, fake_redis, operator):
        service = PayoutService(db, RedisStore(fake_redis))
        await service.get_guide_payout_summary("g1", "2025-03")
        await service.lock_month("2025-03", operator)
        assert fake_redis.data == {}

    async def test_contribution_changes_invalidate_guide_month(self, db, settled, fake_redis, operator):
        service = PayoutService(db, RedisStore(fake_redis))
        await service.get_guide_payout_summary("g1", "2025-03")
        await service.get_guide_payout_summary("g1", "2025-04")
        await service.get_guide_payout_summary("g2", "2025-03")

        record = await service.add_contribution(
            store_id="s2", guide_id="g1", month="2025-03", type="B", actor=operator
        )
        assert guide_summary_key("g1", "2025-03") not in fake_redis.data
        assert guide_summary_key("g1", "2025-04") in fake_redis.data
        assert guide_summary_key("g2", "2025-03") in fake_redis.data

        summary = await service.get_guide_payout_summary("g1", "2025-03")
        assert len(summary.contributions) == 2

        await service.delete_contribution(record.id, operator)
        assert guide_summary_key("g1", "2025-03") not in fake_redis.data
        summary = await service.get_guide_payout_summary("g1", "2025-03")
        assert len(summary.contributions) == 1

    async def test_founder_changes_invalidate_old_and_new_guide(self, db, settled, fake_redis, operator):
        service = PayoutService(db, RedisStore(fake_redis))
        for guide_id in ("g1", "g2"):
            for month in ("2025-02", "2025-03"):
                await service.get_guide_payout_summary(guide_id, month)

        await service.assign_founder("s2", "g2", operator)
        assert fake_redis.data == {}

        summary = await service.get_guide_payout_summary("g2", "2025-03")
        assert [s.store_id for s in summary.perpetual.stores] == ["s2"]
        await service.get_guide_payout_summary("g1", "2025-03")

        await service.remove_founder("s2", operator)
        assert guide_summary_key("g2", "2025-03") not in fake_redis.data
        assert guide_summary_key("g1", "2025-03") in fake_redis.data

    async def test_zero_ttl_disables_writes(self, db, settled, fake_redis):
        service = PayoutService(db, RedisStore(fake_redis, summary_ttl=0))
        await service.get_guide_payout_summary("g1", "2025-03")
        assert fake_redis.data == {}

    async def test_redis_failure_falls_back_to_database(self, db, settled, fake_redis):
        async def broken(*args, **kwargs):
            raise RedisConnectionError("redis down")

        fake_redis.get = broken
        fake_redis.setex = broken
        service = PayoutService(db, RedisStore(fake_redis))

        summary = await service.get_guide_payout_summary("g1", "2025-03")
        assert summary.grand_total == 5000


async def test_redis_store_disabled_without_url():
    assert await RedisStore.connect(Settings(redis_url="")) is None
