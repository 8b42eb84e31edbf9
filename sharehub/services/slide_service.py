"""
Slide Service

Upload, list, download and delete slide decks attached to a speech.
"""

import logging

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.config import settings
from sharehub.context import TenantContext
from sharehub.models.slide import Slide
from sharehub.services import activity_service, metrics_service, ordering
from sharehub.services.lookups import get_scoped_slide, get_scoped_speech
from sharehub.services.storage_service import (
    ALLOWED_SLIDE_TYPES,
    build_slide_path,
    read_upload,
    sanitize_filename,
    storage,
)

logger = logging.getLogger(__name__)


async def _slides_for(speech_id: int, db: AsyncSession) -> list[Slide]:
    result = await db.execute(select(Slide).where(Slide.speech_id == speech_id))
    return ordering.sort_by_display_order(result.scalars().all())


def _next_slide_order(slides: list[Slide]) -> int:
    return max((s.display_order for s in slides), default=-1) + 1


async def upload_slide(ctx: TenantContext, speech_id: int, file: UploadFile, db: AsyncSession) -> Slide:
    """
    Validate and store an uploaded deck, then record it after the speech's
    existing slides.

    Raises:
        InvalidFileTypeError: For anything but PDF, PPT, PPTX, KEY or ODP
        FileTooLargeError: Above slide_max_size
    """
    speech, event_id = await get_scoped_speech(ctx, speech_id, db)
    content, mime_type = await read_upload(file, ALLOWED_SLIDE_TYPES, settings.slide_max_size)

    filename = sanitize_filename(file.filename)
    storage_path = build_slide_path(ctx.tenant_id, event_id, speech.id, filename)
    storage.put(storage_path, content)

    slide = Slide(
        speech_id=speech.id,
        tenant_id=speech.tenant_id,
        filename=filename,
        storage_path=storage_path,
        file_size=len(content),
        mime_type=mime_type,
        display_order=_next_slide_order(await _slides_for(speech.id, db)),
        uploaded_by=ctx.actor_label,
    )
    db.add(slide)
    try:
        await db.commit()
    except Exception:
        storage.delete_quietly(storage_path)
        raise
    await db.refresh(slide)

    logger.info("Slide uploaded: id=%d speech=%d size=%d", slide.id, speech.id, slide.file_size)
    await activity_service.log_activity(
        ctx,
        "slide_uploaded",
        event_id=event_id,
        metadata={"slide_id": slide.id, "speech_id": speech.id, "filename": filename},
    )
    return slide


async def list_slides(ctx: TenantContext, speech_id: int, db: AsyncSession) -> list[Slide]:
    speech, _ = await get_scoped_speech(ctx, speech_id, db)
    return await _slides_for(speech.id, db)


async def get_download_link(ctx: TenantContext, slide_id: int, db: AsyncSession) -> dict:
    """Issue a time-limited signed link and count the download."""
    slide, event_id = await get_scoped_slide(ctx, slide_id, db)
    download_url, expires_at = storage.create_signed_url(slide.storage_path, slide.filename)

    await metrics_service.track_slide_download(event_id, slide.tenant_id, db)
    await activity_service.log_activity(
        ctx, "slide_downloaded", event_id=event_id, metadata={"slide_id": slide.id}
    )
    return {"download_url": download_url, "expires_at": expires_at, "filename": slide.filename}


async def delete_slide(ctx: TenantContext, slide_id: int, db: AsyncSession) -> None:
    """Remove the storage object, then the row; a failed object delete only logs."""
    slide, event_id = await get_scoped_slide(ctx, slide_id, db)
    storage.delete_quietly(slide.storage_path)
    await db.delete(slide)
    await db.commit()

    logger.info("Slide deleted: id=%d", slide_id)
    await activity_service.log_activity(
        ctx, "slide_deleted", event_id=event_id, metadata={"slide_id": slide_id, "filename": slide.filename}
    )
