from pydantic import BaseModel

from sharehub.models.activity_log import ActivityLog
from sharehub.schemas.common import ORMModel, UTCDatetime
from sharehub.schemas.event import EventResponse


class DashboardMetricsResponse(BaseModel):
    active_events_count: int
    last_activity_at: UTCDatetime | None = None


class ActivityResponse(BaseModel):
    id: int
    event_id: int | None = None
    actor_type: str
    actor_id: str | None = None
    action_type: str
    metadata: dict
    timestamp: UTCDatetime
    retention_days: int
    expires_at: UTCDatetime | None = None
    is_expired: bool

    @classmethod
    def from_log(cls, log: ActivityLog) -> "ActivityResponse":
        return cls(
            id=log.id,
            event_id=log.event_id,
            actor_type=log.actor_type,
            actor_id=log.actor_id,
            action_type=log.action_type,
            metadata=log.metadata_ or {},
            timestamp=log.timestamp,
            retention_days=log.retention_days,
            expires_at=log.expires_at,
            is_expired=log.is_expired(),
        )


class ActivityListResponse(BaseModel):
    activity: list[ActivityResponse]
    total: int


class EventMetricsResponse(ORMModel):
    page_views: int
    unique_visitors: int
    total_slide_downloads: int
    last_activity_at: UTCDatetime | None = None


class TokenSummary(BaseModel):
    total: int
    active: int
    expired: int
    revoked: int
    total_uses: int


class EventDashboardResponse(BaseModel):
    event: EventResponse
    metrics: EventMetricsResponse
    tokens: TokenSummary
    activity: list[ActivityResponse]
