"""
Archive Service

Bundles slide decks into ZIP files for bulk download. Archives are built in
memory and streamed back in chunks.
"""

import logging
import zipfile
from collections.abc import Iterator
from io import BytesIO

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.context import TenantContext
from sharehub.exceptions import NotFoundError
from sharehub.models.session import EventSession
from sharehub.models.slide import Slide
from sharehub.services.hierarchy import load_slides, load_speeches
from sharehub.services.lookups import get_scoped_event, get_scoped_session, get_scoped_speech
from sharehub.services.ordering import sort_smart
from sharehub.services.storage_service import sanitize_filename, storage
from sharehub.utils.slugify import slugify

logger = logging.getLogger(__name__)

STREAM_CHUNK_SIZE = 64 * 1024


def build_zip(entries: list[tuple[str, Slide]]) -> bytes:
    """
    Write (archive_name, slide) pairs into a ZIP. Slides whose object is
    missing from storage are skipped and logged.
    """
    buffer = BytesIO()
    seen: set[str] = set()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, slide in entries:
            try:
                content = storage.read(slide.storage_path)
            except NotFoundError:
                logger.warning("Skipping slide id=%d, object missing at %s", slide.id, slide.storage_path)
                continue
            unique = name
            counter = 2
            while unique in seen:
                stem, dot, ext = name.rpartition(".")
                unique = f"{stem}-{counter}.{ext}" if dot else f"{name}-{counter}"
                counter += 1
            seen.add(unique)
            archive.writestr(unique, content)
    return buffer.getvalue()


def iter_chunks(data: bytes, chunk_size: int = STREAM_CHUNK_SIZE) -> Iterator[bytes]:
    for start in range(0, len(data), chunk_size):
        yield data[start : start + chunk_size]


async def speech_archive(ctx: TenantContext, speech_id: int, db: AsyncSession) -> tuple[str, bytes]:
    speech, _ = await get_scoped_speech(ctx, speech_id, db)
    slides = (await load_slides([speech.id], db)).get(speech.id, [])
    if not slides:
        raise NotFoundError("Slides for speech", speech.id)

    data = build_zip([(slide.filename, slide) for slide in slides])
    logger.info("Speech archive built: speech=%d slides=%d", speech.id, len(slides))
    return f"{slugify(speech.title) or 'speech'}-slides.zip", data


def _speech_entries(speeches, slides_by_speech, prefix: str = "") -> list[tuple[str, Slide]]:
    entries = []
    for position, speech in enumerate(speeches, start=1):
        folder = sanitize_filename(f"{position:02d}-{speech.speaker_name}-{speech.title}")
        for slide in slides_by_speech.get(speech.id, []):
            entries.append((f"{prefix}{folder}/{slide.filename}", slide))
    return entries


async def session_archive(ctx: TenantContext, session_id: int, db: AsyncSession) -> tuple[str, bytes]:
    """One folder per speech, named by position and speaker."""
    session = await get_scoped_session(ctx, session_id, db)
    speeches = (await load_speeches([session.id], db)).get(session.id, [])
    slides_by_speech = await load_slides([s.id for s in speeches], db)

    entries = _speech_entries(speeches, slides_by_speech)
    if not entries:
        raise NotFoundError("Slides for session", session.id)

    data = build_zip(entries)
    logger.info("Session archive built: session=%d slides=%d", session.id, len(entries))
    return f"{slugify(session.title) or 'session'}-slides.zip", data


async def event_archive(ctx: TenantContext, event_id: int, db: AsyncSession) -> tuple[str, bytes]:
    """Every slide of an event, one folder per session with a speech folder inside."""
    event = await get_scoped_event(ctx, event_id, db)
    result = await db.execute(select(EventSession).where(EventSession.event_id == event.id))
    sessions = sort_smart(result.scalars().all())
    speeches_by_session = await load_speeches([s.id for s in sessions], db)
    speech_ids = [speech.id for speeches in speeches_by_session.values() for speech in speeches]
    slides_by_speech = await load_slides(speech_ids, db)

    entries = []
    for position, session in enumerate(sessions, start=1):
        prefix = sanitize_filename(f"{position:02d}-{session.title}") + "/"
        entries.extend(_speech_entries(speeches_by_session.get(session.id, []), slides_by_speech, prefix))
    if not entries:
        raise NotFoundError("Slides for event", event.id)

    data = build_zip(entries)
    logger.info("Event archive built: event=%d slides=%d", event.id, len(entries))
    return f"{event.slug}-slides.zip", data
