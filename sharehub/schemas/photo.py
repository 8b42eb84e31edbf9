from pydantic import BaseModel

from sharehub.schemas.common import ORMModel, UTCDatetime


class PhotoResponse(ORMModel):
    id: int
    event_id: int
    filename: str
    file_size: int
    mime_type: str
    is_cover: bool
    display_order: int
    uploaded_at: UTCDatetime


class PhotoListResponse(BaseModel):
    photos: list[PhotoResponse]
    total: int
