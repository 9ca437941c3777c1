"""Admin actors and role checks.

Authentication happens upstream; by the time a request reaches the service
the gateway has resolved the admin user and their role level.
"""

from dataclasses import dataclass
from enum import Enum

from tourism_api.services.errors import ForbiddenError, PayoutValidationError


class AdminRole(Enum):
    """Admin access level, ordered support < operator < admin."""

    SUPPORT = "support"
    OPERATOR = "operator"
    ADMIN = "admin"

    @property
    def level(self) -> int:
        return _ROLE_LEVELS[self]


_ROLE_LEVELS = {
    AdminRole.SUPPORT: 1,
    AdminRole.OPERATOR: 2,
    AdminRole.ADMIN: 3,
}


@dataclass(frozen=True)
class Actor:
    user: str
    role: AdminRole

    @classmethod
    def parse(cls, user: str | None, role: str | None) -> "Actor":
        user = (user or "").strip()
        if not user:
            raise PayoutValidationError("Admin user is required")
        try:
            parsed_role = AdminRole((role or "").strip().lower())
        except ValueError:
            raise PayoutValidationError(
                f"Unknown admin role: {role!r}",
                detail={"allowed": [r.value for r in AdminRole]},
            ) from None
        return cls(user=user, role=parsed_role)


def require_role(actor: Actor, minimum: AdminRole) -> None:
    """Raise ForbiddenError unless `actor` holds at least `minimum`."""
    if actor.role.level < minimum.level:
        raise ForbiddenError(
            f"{minimum.value} privileges required (current role: {actor.role.value})",
            detail={"required": minimum.value, "role": actor.role.value},
        )
