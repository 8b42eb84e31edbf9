from pydantic import BaseModel

from sharehub.schemas.common import ORMModel, UTCDatetime


class SlideResponse(ORMModel):
    id: int
    speech_id: int
    filename: str
    file_size: int
    mime_type: str
    display_order: int
    uploaded_by: str | None = None
    uploaded_at: UTCDatetime


class SlideListResponse(BaseModel):
    slides: list[SlideResponse]
    total: int


class SlideDownloadResponse(BaseModel):
    download_url: str
    expires_at: UTCDatetime
    filename: str
