from pydantic import BaseModel, Field

from sharehub.schemas.common import ORMModel, UTCDatetime
from sharehub.schemas.slide import SlideResponse


class SpeechCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, description="Talk title")
    speaker_name: str = Field(..., min_length=1, max_length=255)
    duration_minutes: int | None = Field(None, ge=1, le=600)
    description: str | None = Field(None, max_length=1000)
    scheduled_time: UTCDatetime | None = None
    display_order: int | None = Field(
        None, ge=0, description="Manual position; leave empty to order by scheduled_time"
    )


class SpeechUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    speaker_name: str | None = Field(None, min_length=1, max_length=255)
    duration_minutes: int | None = Field(None, ge=1, le=600)
    description: str | None = Field(None, max_length=1000)
    scheduled_time: UTCDatetime | None = None
    display_order: int | None = Field(None, ge=0)


class SpeechResponse(ORMModel):
    id: int
    session_id: int
    title: str
    speaker_name: str
    duration_minutes: int | None = None
    description: str | None = None
    scheduled_time: UTCDatetime | None = None
    display_order: int | None = None
    created_at: UTCDatetime
    updated_at: UTCDatetime


class SpeechWithSlides(SpeechResponse):
    slides: list[SlideResponse] = []
    slide_count: int = 0


class SpeechListResponse(BaseModel):
    speeches: list[SpeechResponse]
    total: int
    ordering_mode: str


class SpeechReorderRequest(BaseModel):
    speech_ids: list[int] = Field(..., description="Every speech of the session, in the new order")


class SpeechDeleteResponse(BaseModel):
    deleted: bool
    slide_count: int
