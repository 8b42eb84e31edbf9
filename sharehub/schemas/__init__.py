from .auth import LoginRequest, Token
from .event import EventCreate, EventCreateResponse, EventHierarchyResponse, EventResponse, EventUpdate
from .session import SessionCreate, SessionResponse, SessionUpdate, SessionWithContent
from .slide import SlideDownloadResponse, SlideResponse
from .speech import SpeechCreate, SpeechResponse, SpeechUpdate, SpeechWithSlides
from .token import AccessTokenResponse, TokenPairResponse, TokenValidateResponse

# Define the public API of this module
__all__ = [
    "LoginRequest",
    "Token",
    "EventCreate",
    "EventCreateResponse",
    "EventHierarchyResponse",
    "EventResponse",
    "EventUpdate",
    "SessionCreate",
    "SessionResponse",
    "SessionUpdate",
    "SessionWithContent",
    "SlideDownloadResponse",
    "SlideResponse",
    "SpeechCreate",
    "SpeechResponse",
    "SpeechUpdate",
    "SpeechWithSlides",
    "AccessTokenResponse",
    "TokenPairResponse",
    "TokenValidateResponse",
]
