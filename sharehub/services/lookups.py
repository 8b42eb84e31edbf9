"""
Tenant-scoped lookups shared by the entity services.

Each helper filters on ``ctx.tenant_id`` and, for token holders, on the
token's event. A row outside that scope is reported exactly like a missing
one.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.context import TenantContext
from sharehub.exceptions import NotFoundError
from sharehub.models.event import Event
from sharehub.models.session import EventSession
from sharehub.models.slide import Slide
from sharehub.models.speech import Speech


async def get_scoped_event(ctx: TenantContext, event_id: int, db: AsyncSession) -> Event:
    if not ctx.allows_event(event_id):
        raise NotFoundError("Event", event_id)
    result = await db.execute(select(Event).where(Event.id == event_id, Event.tenant_id == ctx.tenant_id))
    event = result.scalars().first()
    if event is None:
        raise NotFoundError("Event", event_id)
    return event


async def get_scoped_session(ctx: TenantContext, session_id: int, db: AsyncSession) -> EventSession:
    result = await db.execute(
        select(EventSession).where(EventSession.id == session_id, EventSession.tenant_id == ctx.tenant_id)
    )
    session = result.scalars().first()
    if session is None or not ctx.allows_event(session.event_id):
        raise NotFoundError("Session", session_id)
    return session


async def get_scoped_speech(ctx: TenantContext, speech_id: int, db: AsyncSession) -> tuple[Speech, int]:
    """Return the speech and the id of the event it belongs to."""
    result = await db.execute(
        select(Speech, EventSession.event_id)
        .join(EventSession, Speech.session_id == EventSession.id)
        .where(Speech.id == speech_id, Speech.tenant_id == ctx.tenant_id)
    )
    row = result.first()
    if row is None or not ctx.allows_event(row[1]):
        raise NotFoundError("Speech", speech_id)
    return row[0], row[1]


async def get_scoped_slide(ctx: TenantContext, slide_id: int, db: AsyncSession) -> tuple[Slide, int]:
    """Return the slide and the id of the event it belongs to."""
    result = await db.execute(
        select(Slide, EventSession.event_id)
        .join(Speech, Slide.speech_id == Speech.id)
        .join(EventSession, Speech.session_id == EventSession.id)
        .where(Slide.id == slide_id, Slide.tenant_id == ctx.tenant_id)
    )
    row = result.first()
    if row is None or not ctx.allows_event(row[1]):
        raise NotFoundError("Slide", slide_id)
    return row[0], row[1]
