from pydantic import BaseModel, Field

from sharehub.schemas.common import ORMModel, UTCDatetime
from sharehub.schemas.speech import SpeechWithSlides


class SessionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100, description="Session title, e.g. 'Morning Session'")
    description: str | None = Field(None, max_length=500)
    scheduled_time: UTCDatetime | None = None
    display_order: int | None = Field(
        None, ge=0, description="Manual position; leave empty to order by scheduled_time"
    )


class SessionUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    scheduled_time: UTCDatetime | None = None
    display_order: int | None = Field(None, ge=0)


class SessionResponse(ORMModel):
    id: int
    event_id: int
    title: str
    description: str | None = None
    scheduled_time: UTCDatetime | None = None
    display_order: int | None = None
    created_at: UTCDatetime
    updated_at: UTCDatetime


class SessionWithContent(SessionResponse):
    speeches: list[SpeechWithSlides] = []


class SessionListResponse(BaseModel):
    sessions: list[SessionResponse]
    total: int
    ordering_mode: str


class SessionReorderRequest(BaseModel):
    session_ids: list[int] = Field(..., description="Every session of the event, in the new order")


class SessionDeleteResponse(BaseModel):
    deleted: bool
    speech_count: int
    slide_count: int
