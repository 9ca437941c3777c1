"""MonthLock model.

Administrative state of a month. While `locked` is set the month's figures
are settled and the monthly calculation refuses to run. `calculated_at`
records the last successful calculation run.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from tourism_api.stores.postgres import Base


class MonthLock(Base):
    __tablename__ = "month_locks"

    month: Mapped[str] = mapped_column(String(7), primary_key=True)
    locked: Mapped[bool] = mapped_column(default=False)

    locked_by: Mapped[str | None] = mapped_column(String(100))
    locked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    calculated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<MonthLock {self.month} locked={self.locked}>"
