"""
Nested read models (event -> sessions -> speeches -> slides).

Children are fetched one level at a time with an IN query per level and
ordered in memory, so a full event costs three queries regardless of size.
"""

from collections import defaultdict
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.models.event import Event
from sharehub.models.session import EventSession
from sharehub.models.slide import Slide
from sharehub.models.speech import Speech
from sharehub.schemas.event import EventHierarchyResponse, EventResponse
from sharehub.schemas.session import SessionResponse, SessionWithContent
from sharehub.schemas.slide import SlideResponse
from sharehub.schemas.speech import SpeechResponse, SpeechWithSlides
from sharehub.services.ordering import sort_by_display_order, sort_smart


async def load_slides(speech_ids: Sequence[int], db: AsyncSession) -> dict[int, list[Slide]]:
    grouped: dict[int, list[Slide]] = defaultdict(list)
    if not speech_ids:
        return grouped
    result = await db.execute(select(Slide).where(Slide.speech_id.in_(speech_ids)))
    for slide in result.scalars().all():
        grouped[slide.speech_id].append(slide)
    for speech_id in grouped:
        grouped[speech_id] = sort_by_display_order(grouped[speech_id])
    return grouped


async def load_speeches(session_ids: Sequence[int], db: AsyncSession) -> dict[int, list[Speech]]:
    grouped: dict[int, list[Speech]] = defaultdict(list)
    if not session_ids:
        return grouped
    result = await db.execute(select(Speech).where(Speech.session_id.in_(session_ids)))
    for speech in result.scalars().all():
        grouped[speech.session_id].append(speech)
    for session_id in grouped:
        grouped[session_id] = sort_smart(grouped[session_id])
    return grouped


def speech_with_slides(speech: Speech, slides: list[Slide]) -> SpeechWithSlides:
    return SpeechWithSlides(
        **SpeechResponse.model_validate(speech).model_dump(),
        slides=[SlideResponse.model_validate(slide) for slide in slides],
        slide_count=len(slides),
    )


async def build_sessions_content(sessions: Sequence[EventSession], db: AsyncSession) -> list[SessionWithContent]:
    speeches_by_session = await load_speeches([s.id for s in sessions], db)
    speech_ids = [speech.id for speeches in speeches_by_session.values() for speech in speeches]
    slides_by_speech = await load_slides(speech_ids, db)

    return [
        SessionWithContent(
            **SessionResponse.model_validate(session).model_dump(),
            speeches=[
                speech_with_slides(speech, slides_by_speech.get(speech.id, []))
                for speech in speeches_by_session.get(session.id, [])
            ],
        )
        for session in sessions
    ]


async def build_event_hierarchy(event: Event, db: AsyncSession) -> EventHierarchyResponse:
    result = await db.execute(select(EventSession).where(EventSession.event_id == event.id))
    sessions = sort_smart(result.scalars().all())
    return EventHierarchyResponse(
        **EventResponse.model_validate(event).model_dump(),
        sessions=await build_sessions_content(sessions, db),
    )
