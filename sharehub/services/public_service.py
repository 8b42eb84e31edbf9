"""
Public Event Service

Read-only event pages addressed by tenant and event slug. Private events
are only shown to holders of a valid token for that event.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.context import TenantContext
from sharehub.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from sharehub.models.event import Event
from sharehub.schemas.photo import PhotoResponse
from sharehub.schemas.public import PublicEventResponse
from sharehub.services import metrics_service, photo_service, tenant_service, token_service
from sharehub.services.hierarchy import build_event_hierarchy

logger = logging.getLogger(__name__)


async def get_public_event(
    tenant_slug: str,
    event_slug: str,
    db: AsyncSession,
    token: str | None = None,
    client_ip: str | None = None,
) -> PublicEventResponse:
    tenant = await tenant_service.get_active_tenant_by_slug(tenant_slug, db)
    result = await db.execute(select(Event).where(Event.tenant_id == tenant.id, Event.slug == event_slug))
    event = result.scalars().first()
    if event is None:
        raise NotFoundError("Event", event_slug)

    if event.is_private:
        if not token:
            raise UnauthorizedError("This event is private. An access token is required.")
        validation = await token_service.validate_token(token, db, event_id=event.id)
        if not validation.valid:
            raise ForbiddenError(validation.error)

    hierarchy = await build_event_hierarchy(event, db)
    photos = await photo_service.list_photos(TenantContext.system(tenant.id), event.id, db)
    await metrics_service.track_page_view(event, client_ip, db)
    logger.info("Public page served: tenant=%s event=%s", tenant.slug, event.slug)

    return PublicEventResponse(
        tenant_name=tenant.name,
        branding=tenant.branding or {},
        event=hierarchy,
        photos=[PhotoResponse.model_validate(photo) for photo in photos],
    )
