"""
Photo Service

Event gallery photos. At most one photo per event is the cover.
"""

import logging
import uuid

from fastapi import UploadFile
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.config import settings
from sharehub.context import TenantContext
from sharehub.exceptions import NotFoundError
from sharehub.models.event_photo import EventPhoto
from sharehub.services import activity_service, ordering
from sharehub.services.lookups import get_scoped_event
from sharehub.services.storage_service import (
    ALLOWED_PHOTO_TYPES,
    build_photo_path,
    read_upload,
    sanitize_filename,
    storage,
)

logger = logging.getLogger(__name__)


async def _photos_for(event_id: int, db: AsyncSession) -> list[EventPhoto]:
    result = await db.execute(select(EventPhoto).where(EventPhoto.event_id == event_id))
    return ordering.sort_by_display_order(result.scalars().all())


async def _get_photo(event_id: int, photo_id: int, db: AsyncSession) -> EventPhoto:
    result = await db.execute(
        select(EventPhoto).where(EventPhoto.id == photo_id, EventPhoto.event_id == event_id)
    )
    photo = result.scalars().first()
    if photo is None:
        raise NotFoundError("Photo", photo_id)
    return photo


async def upload_photo(ctx: TenantContext, event_id: int, file: UploadFile, db: AsyncSession) -> EventPhoto:
    """The first photo of an event becomes its cover."""
    event = await get_scoped_event(ctx, event_id, db)
    content, mime_type = await read_upload(file, ALLOWED_PHOTO_TYPES, settings.photo_max_size)

    filename = sanitize_filename(file.filename)
    # Gallery uploads often reuse camera names (IMG_0001.jpg)
    storage_path = build_photo_path(ctx.tenant_id, event.id, f"{uuid.uuid4().hex[:8]}-{filename}")
    storage.put(storage_path, content)

    existing = await _photos_for(event.id, db)
    photo = EventPhoto(
        event_id=event.id,
        tenant_id=event.tenant_id,
        filename=filename,
        storage_path=storage_path,
        file_size=len(content),
        mime_type=mime_type,
        is_cover=not existing,
        display_order=max((p.display_order for p in existing), default=-1) + 1,
    )
    db.add(photo)
    try:
        await db.commit()
    except Exception:
        storage.delete_quietly(storage_path)
        raise
    await db.refresh(photo)

    logger.info("Photo uploaded: id=%d event=%d", photo.id, event.id)
    await activity_service.log_activity(ctx, "photo_uploaded", event_id=event.id, metadata={"photo_id": photo.id})
    return photo


async def list_photos(ctx: TenantContext, event_id: int, db: AsyncSession) -> list[EventPhoto]:
    event = await get_scoped_event(ctx, event_id, db)
    return await _photos_for(event.id, db)


async def set_cover(ctx: TenantContext, event_id: int, photo_id: int, db: AsyncSession) -> EventPhoto:
    event = await get_scoped_event(ctx, event_id, db)
    photo = await _get_photo(event.id, photo_id, db)

    await db.execute(
        update(EventPhoto)
        .where(EventPhoto.event_id == event.id, EventPhoto.id != photo.id)
        .values(is_cover=False)
    )
    photo.is_cover = True
    await db.commit()
    await db.refresh(photo)
    logger.info("Cover photo set: event=%d photo=%d", event.id, photo.id)
    return photo


async def delete_photo(ctx: TenantContext, event_id: int, photo_id: int, db: AsyncSession) -> None:
    """Storage first, then the row. Deleting the cover promotes the next photo."""
    event = await get_scoped_event(ctx, event_id, db)
    photo = await _get_photo(event.id, photo_id, db)
    was_cover = photo.is_cover

    storage.delete_quietly(photo.storage_path)
    await db.delete(photo)
    await db.flush()

    if was_cover:
        remaining = await _photos_for(event.id, db)
        if remaining:
            remaining[0].is_cover = True
    await db.commit()

    logger.info("Photo deleted: id=%d event=%d", photo_id, event.id)
    await activity_service.log_activity(ctx, "photo_deleted", event_id=event.id, metadata={"photo_id": photo_id})
