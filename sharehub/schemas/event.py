import datetime as dt

from pydantic import BaseModel, Field, field_validator, model_validator

from sharehub.models.event import EventVisibility, RetentionPolicy
from sharehub.schemas.common import ORMModel, Pagination, UTCDatetime
from sharehub.schemas.session import SessionWithContent
from sharehub.schemas.token import TokenPairResponse
from sharehub.utils.slugify import is_valid_slug

EARLIEST_EVENT_DATE = dt.date(2020, 1, 1)


def _check_slug(value: str | None) -> str | None:
    if value is not None and not is_valid_slug(value):
        raise ValueError("Slug must be 3-100 lowercase letters, digits or single hyphens")
    return value


def _check_date(value: dt.date | None) -> dt.date | None:
    if value is not None and value < EARLIEST_EVENT_DATE:
        raise ValueError("Event date must be on or after 2020-01-01")
    return value


class EventCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    date: dt.date
    slug: str | None = Field(None, description="Generated from the name when omitted")
    description: str | None = Field(None, max_length=2000)
    visibility: EventVisibility = EventVisibility.PUBLIC
    token_expiration_date: UTCDatetime | None = Field(
        None, description="Required for private events, expiry of the generated token pair"
    )
    retention_policy: RetentionPolicy = RetentionPolicy.KEEP_FOREVER

    @field_validator("slug")
    @classmethod
    def check_slug(cls, value):
        return _check_slug(value)

    @field_validator("date")
    @classmethod
    def check_date(cls, value):
        return _check_date(value)

    @model_validator(mode="after")
    def check_visibility_tokens(self):
        if self.visibility == EventVisibility.PRIVATE and self.token_expiration_date is None:
            raise ValueError("Private events require token_expiration_date")
        if self.visibility == EventVisibility.PUBLIC and self.token_expiration_date is not None:
            raise ValueError("Public events must not set token_expiration_date")
        return self


class EventUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    date: dt.date | None = None
    slug: str | None = None
    description: str | None = Field(None, max_length=2000)
    visibility: EventVisibility | None = None
    token_expiration_date: UTCDatetime | None = None
    retention_policy: RetentionPolicy | None = None
    confirm_past: bool = Field(False, description="Must be true to edit an event whose date has passed")

    @field_validator("slug")
    @classmethod
    def check_slug(cls, value):
        return _check_slug(value)

    @field_validator("date")
    @classmethod
    def check_date(cls, value):
        return _check_date(value)


class EventResponse(ORMModel):
    id: int
    tenant_id: int
    slug: str
    name: str
    date: dt.date
    description: str | None = None
    visibility: EventVisibility
    status: str
    token_expiration_date: UTCDatetime | None = None
    retention_policy: RetentionPolicy
    created_at: UTCDatetime
    updated_at: UTCDatetime


class EventCreateResponse(BaseModel):
    event: EventResponse
    tokens: TokenPairResponse | None = None


class EventListResponse(BaseModel):
    events: list[EventResponse]
    pagination: Pagination


class EventHierarchyResponse(EventResponse):
    sessions: list[SessionWithContent] = []
