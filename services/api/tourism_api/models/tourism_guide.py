"""TourismGuide model (read-only).

Guides are registered and managed by the marketplace; the payout service only
reads them to attach names and to resolve a guide from their dashboard key.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from tourism_api.stores.postgres import Base


class TourismGuide(Base):
    __tablename__ = "tourism_guides"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    guide_name: Mapped[str] = mapped_column(String(100))

    preferred_language: Mapped[str | None] = mapped_column(String(5))
    contact_method: Mapped[str | None] = mapped_column(String(50))

    # Opaque key embedded in the guide's dashboard link
    dashboard_key: Mapped[str | None] = mapped_column(String(100), unique=True, index=True)

    status: Mapped[str | None] = mapped_column(String(20), default="pending")  # pending, active, inactive
    is_available: Mapped[bool | None] = mapped_column(default=True)

    def __repr__(self) -> str:
        return f"<TourismGuide {self.id} {self.guide_name}>"
