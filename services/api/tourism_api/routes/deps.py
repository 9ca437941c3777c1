"""FastAPI dependencies shared by routers."""

from fastapi import Depends, Header, HTTPException, Request

from tourism_api.schemas import GuideRef
from tourism_api.services.access import Actor
from tourism_api.services.payout_service import PayoutService


def get_payout_service(request: Request) -> PayoutService:
    """The PayoutService built at startup."""
    service: PayoutService | None = getattr(request.app.state, "payout_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Payout service is not available")
    return service


def get_actor(
    x_admin_user: str | None = Header(default=None),
    x_admin_role: str | None = Header(default=None),
) -> Actor:
    """Admin identity forwarded by the authenticating gateway."""
    if not x_admin_user or not x_admin_role:
        raise HTTPException(status_code=401, detail="Admin identity headers are required")
    return Actor.parse(x_admin_user, x_admin_role)


async def get_dashboard_guide(
    x_dashboard_key: str | None = Header(default=None),
    service: PayoutService = Depends(get_payout_service),
) -> GuideRef:
    """Guide owning the dashboard key, or 404."""
    guide = await service.resolve_guide(x_dashboard_key or "")
    if guide is None:
        raise HTTPException(status_code=404, detail="Unknown dashboard key")
    return guide
