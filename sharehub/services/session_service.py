"""
Session Service

Sessions are the time blocks of an event. They are listed in smart order:
manual display_order where set, scheduled_time otherwise.
"""

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.context import TenantContext
from sharehub.exceptions import ConfirmationRequiredError, ValidationFailedError
from sharehub.models.session import EventSession
from sharehub.models.slide import Slide
from sharehub.models.speech import Speech
from sharehub.schemas.session import SessionCreate, SessionWithContent
from sharehub.services import activity_service, ordering
from sharehub.services.hierarchy import build_sessions_content
from sharehub.services.lookups import get_scoped_event, get_scoped_session
from sharehub.services.storage_service import storage

logger = logging.getLogger(__name__)


async def _siblings(event_id: int, db: AsyncSession) -> list[EventSession]:
    result = await db.execute(select(EventSession).where(EventSession.event_id == event_id))
    return list(result.scalars().all())


async def create_session(ctx: TenantContext, event_id: int, data: SessionCreate, db: AsyncSession) -> EventSession:
    """
    Create a session.

    Without an explicit display_order or scheduled_time the session is
    appended after its manually ordered siblings; with a scheduled_time it
    is left unpinned and slots in chronologically.
    """
    event = await get_scoped_event(ctx, event_id, db)

    siblings = await _siblings(event.id, db)
    display_order = data.display_order
    if display_order is None and data.scheduled_time is None:
        display_order = ordering.next_display_order(siblings)
    else:
        ordering.ensure_position_free(siblings, display_order, "Session")

    session = EventSession(
        event_id=event.id,
        tenant_id=event.tenant_id,
        title=data.title,
        description=data.description,
        scheduled_time=data.scheduled_time,
        display_order=display_order,
    )
    db.add(session)
    await db.commit()
    await db.refresh(session)

    logger.info("Session created: id=%d event=%d", session.id, event.id)
    await activity_service.log_activity(
        ctx, "session_created", event_id=event.id, metadata={"session_id": session.id, "title": session.title}
    )
    return session


async def list_sessions(ctx: TenantContext, event_id: int, db: AsyncSession) -> tuple[list[EventSession], str]:
    """Return the event's sessions in smart order, with the ordering mode."""
    event = await get_scoped_event(ctx, event_id, db)
    sessions = await _siblings(event.id, db)
    return ordering.sort_smart(sessions), ordering.ordering_mode(sessions)


async def get_session(ctx: TenantContext, session_id: int, db: AsyncSession) -> EventSession:
    return await get_scoped_session(ctx, session_id, db)


async def get_session_with_content(ctx: TenantContext, session_id: int, db: AsyncSession) -> SessionWithContent:
    session = await get_scoped_session(ctx, session_id, db)
    return (await build_sessions_content([session], db))[0]


async def update_session(ctx: TenantContext, session_id: int, updates: dict, db: AsyncSession) -> EventSession:
    """
    Partial update. Any scheduled_time in the payload reschedules the
    session, which drops a manual position even if the time is unchanged.
    An explicit display_order in the same payload pins it again.
    """
    session = await get_scoped_session(ctx, session_id, db)
    updates = dict(updates)

    if "title" in updates and updates["title"] is None:
        raise ValidationFailedError("title cannot be empty", field="title")
    if updates.get("display_order") is not None:
        ordering.ensure_position_free(
            await _siblings(session.event_id, db), updates["display_order"], "Session", exclude_id=session.id
        )

    if "scheduled_time" in updates:
        ordering.reschedule(session, updates.pop("scheduled_time"))
    for field, value in updates.items():
        setattr(session, field, value)

    await db.commit()
    await db.refresh(session)
    logger.info("Session updated: id=%d", session.id)
    await activity_service.log_activity(
        ctx, "session_updated", event_id=session.event_id, metadata={"session_id": session.id}
    )
    return session


async def count_session_content(session_id: int, db: AsyncSession) -> tuple[list[Speech], int]:
    result = await db.execute(select(Speech).where(Speech.session_id == session_id))
    speeches = ordering.sort_smart(result.scalars().all())
    slide_count = 0
    if speeches:
        counted = await db.execute(
            select(func.count(Slide.id)).where(Slide.speech_id.in_([s.id for s in speeches]))
        )
        slide_count = counted.scalar_one()
    return speeches, slide_count


async def delete_session(ctx: TenantContext, session_id: int, db: AsyncSession, confirm: bool = False) -> dict:
    """
    Delete a session with its speeches and slides.

    A session that still has speeches is only deleted when confirm is
    True; otherwise ConfirmationRequiredError carries the counts and the
    affected speeches so the caller can ask the user.
    """
    session = await get_scoped_session(ctx, session_id, db)
    speeches, slide_count = await count_session_content(session.id, db)

    if speeches and not confirm:
        raise ConfirmationRequiredError(
            f"Session has {len(speeches)} speech(es) and {slide_count} slide(s). "
            "Retry with confirm=true to delete them all.",
            details={
                "speech_count": len(speeches),
                "slide_count": slide_count,
                "speeches": [{"id": s.id, "title": s.title} for s in speeches],
            },
        )

    speech_ids = [s.id for s in speeches]
    if speech_ids:
        paths = await db.execute(select(Slide.storage_path).where(Slide.speech_id.in_(speech_ids)))
        for path in paths.scalars().all():
            storage.delete_quietly(path)
        await db.execute(delete(Slide).where(Slide.speech_id.in_(speech_ids)))
        await db.execute(delete(Speech).where(Speech.id.in_(speech_ids)))
    await db.delete(session)
    await db.commit()

    logger.info(
        "Session deleted: id=%d (speeches=%d slides=%d)", session_id, len(speeches), slide_count
    )
    await activity_service.log_activity(
        ctx,
        "session_deleted",
        event_id=session.event_id,
        metadata={"session_id": session_id, "speech_count": len(speeches), "slide_count": slide_count},
    )
    return {"deleted": True, "speech_count": len(speeches), "slide_count": slide_count}


async def reorder_sessions(
    ctx: TenantContext, event_id: int, session_ids: list[int], db: AsyncSession
) -> list[EventSession]:
    """
    Give every session of the event a manual position following session_ids.

    The list must name each session of the event exactly once; the request
    is rejected before anything is written otherwise.
    """
    event = await get_scoped_event(ctx, event_id, db)
    sessions = await _siblings(event.id, db)
    ordering.validate_reorder([s.id for s in sessions], session_ids, "Session")

    reordered = ordering.apply_reorder(sessions, session_ids)
    await db.commit()

    logger.info("Sessions reordered for event id=%d", event.id)
    await activity_service.log_activity(
        ctx, "sessions_reordered", event_id=event.id, metadata={"session_ids": list(session_ids)}
    )
    return reordered
