from pydantic import BaseModel, Field

from sharehub.models.access_token import TokenType
from sharehub.schemas.common import ORMModel, UTCDatetime


class AccessTokenResponse(ORMModel):
    id: int
    event_id: int
    token: str
    type: TokenType
    expires_at: UTCDatetime
    created_at: UTCDatetime
    last_used_at: UTCDatetime | None = None
    use_count: int = 0
    revoked_at: UTCDatetime | None = None
    revoked_by: int | None = None


class TokenPairResponse(BaseModel):
    organizer: AccessTokenResponse
    participant: AccessTokenResponse


class TokenCreate(BaseModel):
    type: TokenType | None = Field(None, description="Issue a single token of this type; omit for a new pair")
    expires_at: UTCDatetime


class TokenListResponse(BaseModel):
    tokens: list[AccessTokenResponse]
    total: int


class TokenValidateRequest(BaseModel):
    token: str = Field(..., min_length=1)
    event_id: int | None = None


class TokenValidateResponse(BaseModel):
    valid: bool
    token: AccessTokenResponse | None = None
    error: str | None = None
