#!/usr/bin/env python3
"""Monthly payout calculation job for Railway Cron.

Schedule:
- Run once at the start of each month; by default it calculates the month
  that just ended.

Behavior:
- Recalculates scores and payouts of the month (full replace, one transaction)
- Fails without writing anything if the month is administratively locked

Run (local / Railway):
  cd services/api
  python -m scripts.run_monthly            # previous month
  python -m scripts.run_monthly 2025-03    # explicit month

Optional env vars:
  PAYOUT_RUN_USER="cron"   # recorded in logs as the actor
"""

import argparse
import asyncio
import logging
import os
import sys


# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tourism_api.services.access import Actor, AdminRole  # noqa: E402
from tourism_api.services.errors import PayoutError  # noqa: E402
from tourism_api.services.months import current_month, subtract_months  # noqa: E402
from tourism_api.services.payout_service import PayoutService  # noqa: E402
from tourism_api.settings import get_settings  # noqa: E402
from tourism_api.stores.postgres import Database  # noqa: E402
from tourism_api.stores.redis import RedisStore  # noqa: E402

logger = logging.getLogger("uvicorn.error")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the monthly payout calculation")
    parser.add_argument(
        "month",
        nargs="?",
        default=None,
        help="Month to calculate (YYYY-MM); defaults to the previous month",
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    month = args.month or subtract_months(current_month(), 1)
    actor = Actor(user=os.getenv("PAYOUT_RUN_USER", "cron"), role=AdminRole.OPERATOR)

    # Same wiring as the API lifespan, for a one-off cron run
    settings = get_settings()
    db = Database.from_settings(settings)
    cache = None
    try:
        cache = await RedisStore.connect(settings)
    except Exception:
        # The run itself does not need Redis; stale summaries expire on their TTL.
        logger.warning("Redis unavailable, cached guide summaries will not be invalidated")

    try:
        service = PayoutService(db, cache)
        summary = await service.run_monthly_calculation(month, actor)
        # Final output for Railway logs (single JSON-ish blob)
        print({"ok": True, **summary.model_dump()})
        return 0
    except PayoutError as e:
        print({"ok": False, "month": month, "error": {"code": e.code, "message": e.message}})
        return 1
    finally:
        if cache is not None:
            await cache.close()
        await db.dispose()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
