"""
Public Event Routes

GET /public/{tenant_slug}/events/{event_slug}  → event page data; private events need ?token=
"""

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.database import get_db
from sharehub.middleware.logging import get_client_ip
from sharehub.middleware.rate_limit import PUBLIC_LIMIT, limiter
from sharehub.schemas.public import PublicEventResponse
from sharehub.services import public_service

router = APIRouter(prefix="/public", tags=["Public"])


@router.get("/{tenant_slug}/events/{event_slug}", response_model=PublicEventResponse)
@limiter.limit(PUBLIC_LIMIT)
async def get_public_event(
    request: Request,
    response: Response,
    tenant_slug: str,
    event_slug: str,
    token: str | None = Query(None, description="Access token, required for private events"),
    db: AsyncSession = Depends(get_db),
):
    """Every call counts as a page view for the event's metrics."""
    return await public_service.get_public_event(
        tenant_slug, event_slug, db, token=token, client_ip=get_client_ip(request)
    )
