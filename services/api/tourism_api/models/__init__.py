"""SQLAlchemy ORM models.

Models represent database tables:
- payout_settings: Payout configuration sections (key -> JSON)
- contributions: Point-earning guide actions per store and month
- store_founders: Founder guide of each sponsor store
- monthly_guide_scores: Scores and ranks produced by the monthly calculation
- payouts: Payout results of the monthly calculation
- audit_logs: Month lock/unlock trail
- month_locks: Administrative month lock state
- tourism_guides / sponsor_stores: Marketplace tables (read-only here)
"""

from tourism_api.models.tourism_guide import TourismGuide
from tourism_api.models.sponsor_store import SponsorStore, store_is_active
from tourism_api.models.payout_setting import PayoutSetting
from tourism_api.models.contribution import Contribution
from tourism_api.models.store_founder import StoreFounder
from tourism_api.models.monthly_guide_score import MonthlyGuideScore
from tourism_api.models.payout import Payout, PayoutType
from tourism_api.models.audit_log import AuditAction, AuditLog
from tourism_api.models.month_lock import MonthLock

__all__ = [
    "AuditAction",
    "AuditLog",
    "Contribution",
    "MonthLock",
    "MonthlyGuideScore",
    "Payout",
    "PayoutSetting",
    "PayoutType",
    "SponsorStore",
    "StoreFounder",
    "TourismGuide",
    "store_is_active",
]
