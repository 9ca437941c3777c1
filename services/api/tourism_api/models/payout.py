"""Payout model.

Payout rows for a month are a materialized result of the monthly calculation:
each run deletes the month's rows and inserts them again.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from tourism_api.stores.postgres import Base


class PayoutType(Enum):
    PERPETUAL = "PERPETUAL"  # flat amount per active founder store
    CONTRIB = "CONTRIB"  # share of the store's contribution pool


class Payout(Base):
    __tablename__ = "payouts"

    id: Mapped[int] = mapped_column(primary_key=True)

    guide_id: Mapped[str] = mapped_column(ForeignKey("tourism_guides.id"), index=True)
    store_id: Mapped[str] = mapped_column(ForeignKey("sponsor_stores.id"), index=True)
    month: Mapped[str] = mapped_column(String(7), index=True)

    type: Mapped[PayoutType] = mapped_column(
        SAEnum(
            PayoutType,
            name="payout_type",
            native_enum=False,
            length=20,
            values_callable=lambda e: [m.value for m in e],
        )
    )
    amount: Mapped[int] = mapped_column(Integer)  # integer currency units

    # Breakdown of how the amount was derived (JSON-serialized text)
    details_json: Mapped[str | None] = mapped_column(Text)

    locked: Mapped[bool] = mapped_column(default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Payout {self.type.value} {self.guide_id}@{self.store_id} {self.month} {self.amount}>"
