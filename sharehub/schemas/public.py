from pydantic import BaseModel

from sharehub.schemas.event import EventHierarchyResponse
from sharehub.schemas.photo import PhotoResponse


class PublicEventResponse(BaseModel):
    tenant_name: str
    branding: dict
    event: EventHierarchyResponse
    photos: list[PhotoResponse] = []
