"""Contribution model.

A point-earning action by a guide at a store in a given month. `base_points`
is derived from the contribution type when the row is inserted and never
changes afterwards, even if the point definitions are edited later.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from tourism_api.stores.postgres import Base


class Contribution(Base):
    __tablename__ = "contributions"
    __table_args__ = (
        Index("ix_contributions_month_guide_store", "month", "guide_id", "store_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    store_id: Mapped[str] = mapped_column(ForeignKey("sponsor_stores.id"), index=True)
    guide_id: Mapped[str] = mapped_column(ForeignKey("tourism_guides.id"), index=True)
    month: Mapped[str] = mapped_column(String(7), index=True)  # YYYY-MM

    # Single letter code, e.g. "B" = usage/experience
    type: Mapped[str] = mapped_column(String(10))
    base_points: Mapped[float] = mapped_column(default=0)

    evidence_url: Mapped[str | None] = mapped_column(Text)
    memo: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Contribution {self.id} {self.guide_id}@{self.store_id} {self.month} {self.type}>"
