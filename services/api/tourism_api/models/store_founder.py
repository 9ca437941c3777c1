"""StoreFounder model.

Assigns one founder guide to a sponsor store. `store_id` is the primary key,
so a store never has more than one founder; reassigning overwrites the row.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column

from tourism_api.stores.postgres import Base


class StoreFounder(Base):
    __tablename__ = "store_founders"

    store_id: Mapped[str] = mapped_column(ForeignKey("sponsor_stores.id"), primary_key=True)
    guide_id: Mapped[str] = mapped_column(ForeignKey("tourism_guides.id"), index=True)

    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<StoreFounder {self.store_id} -> {self.guide_id}>"
