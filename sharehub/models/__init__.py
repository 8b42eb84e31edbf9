from .access_token import AccessToken, TokenType
from .activity_log import ActivityLog, ActorType
from .admin import Admin
from .event import Event, EventStatus, EventVisibility, RetentionPolicy
from .event_metrics import EventMetrics
from .event_photo import EventPhoto
from .session import EventSession
from .slide import Slide
from .speech import Speech
from .tenant import Tenant, TenantStatus

__all__ = [
    "AccessToken",
    "TokenType",
    "ActivityLog",
    "ActorType",
    "Admin",
    "Event",
    "EventStatus",
    "EventVisibility",
    "RetentionPolicy",
    "EventMetrics",
    "EventPhoto",
    "EventSession",
    "Slide",
    "Speech",
    "Tenant",
    "TenantStatus",
]
