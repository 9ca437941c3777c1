"""MonthlyGuideScore model.

One row per (guide, month), written by the monthly calculation. `locked` is
set on every row once a calculation run completes, and cleared by an explicit
month unlock. It does not gate recalculation: the month-level lock in
`month_locks` does.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from tourism_api.stores.postgres import Base


class MonthlyGuideScore(Base):
    __tablename__ = "monthly_guide_scores"

    guide_id: Mapped[str] = mapped_column(ForeignKey("tourism_guides.id"), primary_key=True)
    month: Mapped[str] = mapped_column(String(7), primary_key=True, index=True)

    monthly_score: Mapped[float] = mapped_column(default=0)
    avg3_score: Mapped[float] = mapped_column(default=0)
    rank_score: Mapped[float] = mapped_column(default=0, index=True)
    rank: Mapped[str] = mapped_column(String(1), default="C")  # S, A, B, C

    locked: Mapped[bool] = mapped_column(default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<MonthlyGuideScore {self.guide_id} {self.month} {self.rank} ({self.rank_score:.2f})>"
