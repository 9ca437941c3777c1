"""PayoutSetting model.

One row per configuration section; `value_json` holds the section as JSON.
See `services.payout_config` for the sections and their defaults.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from tourism_api.stores.postgres import Base


class PayoutSetting(Base):
    __tablename__ = "payout_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value_json: Mapped[str | None] = mapped_column(Text)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<PayoutSetting {self.key}>"
