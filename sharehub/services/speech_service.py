"""
Speech Service

Speeches are the talks inside a session and follow the same smart ordering
rules as sessions. Deleting a speech removes its slides and reports how
many went with it.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.context import TenantContext
from sharehub.exceptions import ValidationFailedError
from sharehub.models.slide import Slide
from sharehub.models.speech import Speech
from sharehub.schemas.speech import SpeechCreate, SpeechWithSlides
from sharehub.services import activity_service, ordering
from sharehub.services.hierarchy import load_slides, speech_with_slides
from sharehub.services.lookups import get_scoped_session, get_scoped_speech
from sharehub.services.storage_service import storage

logger = logging.getLogger(__name__)


async def _siblings(session_id: int, db: AsyncSession) -> list[Speech]:
    result = await db.execute(select(Speech).where(Speech.session_id == session_id))
    return list(result.scalars().all())


async def create_speech(ctx: TenantContext, session_id: int, data: SpeechCreate, db: AsyncSession) -> Speech:
    session = await get_scoped_session(ctx, session_id, db)

    siblings = await _siblings(session.id, db)
    display_order = data.display_order
    if display_order is None and data.scheduled_time is None:
        display_order = ordering.next_display_order(siblings)
    else:
        ordering.ensure_position_free(siblings, display_order, "Speech")

    speech = Speech(
        session_id=session.id,
        tenant_id=session.tenant_id,
        title=data.title,
        speaker_name=data.speaker_name,
        duration_minutes=data.duration_minutes,
        description=data.description,
        scheduled_time=data.scheduled_time,
        display_order=display_order,
    )
    db.add(speech)
    await db.commit()
    await db.refresh(speech)

    logger.info("Speech created: id=%d session=%d", speech.id, session.id)
    await activity_service.log_activity(
        ctx, "speech_created", event_id=session.event_id, metadata={"speech_id": speech.id, "title": speech.title}
    )
    return speech


async def list_speeches(ctx: TenantContext, session_id: int, db: AsyncSession) -> tuple[list[Speech], str]:
    session = await get_scoped_session(ctx, session_id, db)
    speeches = await _siblings(session.id, db)
    return ordering.sort_smart(speeches), ordering.ordering_mode(speeches)


async def get_speech(ctx: TenantContext, speech_id: int, db: AsyncSession) -> SpeechWithSlides:
    """Return the speech together with its slides in display order."""
    speech, _ = await get_scoped_speech(ctx, speech_id, db)
    slides = await load_slides([speech.id], db)
    return speech_with_slides(speech, slides.get(speech.id, []))


async def update_speech(ctx: TenantContext, speech_id: int, updates: dict, db: AsyncSession) -> Speech:
    speech, event_id = await get_scoped_speech(ctx, speech_id, db)
    updates = dict(updates)

    for field in ("title", "speaker_name"):
        if field in updates and updates[field] is None:
            raise ValidationFailedError(f"{field} cannot be empty", field=field)
    if updates.get("display_order") is not None:
        ordering.ensure_position_free(
            await _siblings(speech.session_id, db), updates["display_order"], "Speech", exclude_id=speech.id
        )

    if "scheduled_time" in updates:
        ordering.reschedule(speech, updates.pop("scheduled_time"))
    for field, value in updates.items():
        setattr(speech, field, value)

    await db.commit()
    await db.refresh(speech)
    logger.info("Speech updated: id=%d", speech.id)
    await activity_service.log_activity(ctx, "speech_updated", event_id=event_id, metadata={"speech_id": speech.id})
    return speech


async def delete_speech(ctx: TenantContext, speech_id: int, db: AsyncSession) -> dict:
    speech, event_id = await get_scoped_speech(ctx, speech_id, db)

    result = await db.execute(select(Slide.storage_path).where(Slide.speech_id == speech.id))
    paths = result.scalars().all()
    for path in paths:
        storage.delete_quietly(path)

    await db.execute(delete(Slide).where(Slide.speech_id == speech.id))
    await db.delete(speech)
    await db.commit()

    logger.info("Speech deleted: id=%d (slides=%d)", speech_id, len(paths))
    await activity_service.log_activity(
        ctx, "speech_deleted", event_id=event_id, metadata={"speech_id": speech_id, "slide_count": len(paths)}
    )
    return {"deleted": True, "slide_count": len(paths)}


async def reorder_speeches(
    ctx: TenantContext, session_id: int, speech_ids: list[int], db: AsyncSession
) -> list[Speech]:
    session = await get_scoped_session(ctx, session_id, db)
    speeches = await _siblings(session.id, db)
    ordering.validate_reorder([s.id for s in speeches], speech_ids, "Speech")

    reordered = ordering.apply_reorder(speeches, speech_ids)
    await db.commit()

    logger.info("Speeches reordered for session id=%d", session.id)
    await activity_service.log_activity(
        ctx, "speeches_reordered", event_id=session.event_id, metadata={"session_id": session.id}
    )
    return reordered
