"""SponsorStore model (read-only).

Stores are owned by the marketplace. A store counts as active for payouts when
`status = 'active'` or `is_active` is set.
"""

from sqlalchemy import String, or_
from sqlalchemy.orm import Mapped, mapped_column

from tourism_api.stores.postgres import Base


class SponsorStore(Base):
    __tablename__ = "sponsor_stores"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    store_name: Mapped[str] = mapped_column(String(200))

    status: Mapped[str | None] = mapped_column(String(20), default="pending")  # pending, active, suspended
    is_active: Mapped[bool | None] = mapped_column(default=True)

    def __repr__(self) -> str:
        return f"<SponsorStore {self.id} {self.store_name}>"


def store_is_active():
    """SQL predicate selecting active sponsor stores."""
    return or_(SponsorStore.status == "active", SponsorStore.is_active.is_(True))
