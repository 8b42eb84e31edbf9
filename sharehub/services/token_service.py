"""
Token Service

Issues, validates and revokes the opaque per-event access tokens that gate
private event pages. Organizer tokens grant write access to their event,
participant tokens are read-only.
"""

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.context import TenantContext
from sharehub.exceptions import NotFoundError, ValidationFailedError
from sharehub.models.access_token import AccessToken, TokenType
from sharehub.models.event import Event
from sharehub.services import activity_service
from sharehub.services.lookups import get_scoped_event
from sharehub.services.usage_recorder import usage_recorder
from sharehub.utils.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)

TOKEN_LENGTH = 21
TOKEN_ALPHABET = string.ascii_letters + string.digits + "_-"


class TokenState(str, Enum):
    NOT_FOUND = "not_found"
    REVOKED = "revoked"
    EXPIRED = "expired"
    VALID = "valid"


TOKEN_ERRORS = {
    TokenState.NOT_FOUND: "Token not found",
    TokenState.REVOKED: "Token has been revoked",
    TokenState.EXPIRED: "Token has expired",
}

WRONG_EVENT_ERROR = "Token does not belong to this event"


@dataclass
class TokenValidation:
    valid: bool
    token: AccessToken | None = None
    error: str | None = None


def generate_token() -> str:
    """Return a random 21-character URL-safe token string."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))


def check_token_state(token: AccessToken | None, now: datetime | None = None) -> TokenState:
    """Classify a looked-up token. Revocation wins over any remaining validity."""
    if token is None:
        return TokenState.NOT_FOUND
    if token.revoked_at is not None:
        return TokenState.REVOKED
    if as_utc(token.expires_at) <= (now or utcnow()):
        return TokenState.EXPIRED
    return TokenState.VALID


async def get_token_by_value(value: str, db: AsyncSession) -> AccessToken | None:
    result = await db.execute(select(AccessToken).where(AccessToken.token == value))
    return result.scalars().first()


async def validate_token(value: str, db: AsyncSession, event_id: int | None = None) -> TokenValidation:
    """
    Validate a token string, optionally scoped to one event.

    Invalid outcomes are returned, not raised, so callers can render a
    uniform "access denied" response. A valid token has a usage update
    queued without waiting for it.
    """
    token = await get_token_by_value(value, db) if value else None
    state = check_token_state(token)

    if state is not TokenState.VALID:
        return TokenValidation(valid=False, error=TOKEN_ERRORS[state])

    if event_id is not None and token.event_id != event_id:
        return TokenValidation(valid=False, error=WRONG_EVENT_ERROR)

    usage_recorder.record_use(token.id)
    return TokenValidation(valid=True, token=token)


def _check_expiry(expires_at: datetime) -> datetime:
    expires_at = as_utc(expires_at)
    if expires_at <= utcnow():
        raise ValidationFailedError("Token expiration must be in the future", field="expires_at")
    return expires_at


def _new_token(event: Event, token_type: TokenType, expires_at: datetime) -> AccessToken:
    return AccessToken(
        event_id=event.id,
        tenant_id=event.tenant_id,
        token=generate_token(),
        type=token_type.value,
        expires_at=expires_at,
        use_count=0,
    )


def build_token_pair(event: Event, expires_at: datetime) -> dict[str, AccessToken]:
    """Add an organizer and a participant token for the event to a pending unit of work."""
    expires_at = _check_expiry(expires_at)
    return {
        TokenType.ORGANIZER.value: _new_token(event, TokenType.ORGANIZER, expires_at),
        TokenType.PARTICIPANT.value: _new_token(event, TokenType.PARTICIPANT, expires_at),
    }


async def create_token_pair(
    ctx: TenantContext,
    event_id: int,
    expires_at: datetime,
    db: AsyncSession,
) -> dict[str, AccessToken]:
    event = await get_scoped_event(ctx, event_id, db)
    pair = build_token_pair(event, expires_at)
    db.add_all(pair.values())
    await db.commit()
    for token in pair.values():
        await db.refresh(token)
    logger.info("Token pair created for event id=%d", event.id)
    return pair


async def create_token(
    ctx: TenantContext,
    event_id: int,
    token_type: TokenType,
    expires_at: datetime,
    db: AsyncSession,
) -> AccessToken:
    event = await get_scoped_event(ctx, event_id, db)
    token = _new_token(event, token_type, _check_expiry(expires_at))
    db.add(token)
    await db.commit()
    await db.refresh(token)
    logger.info("Token created: id=%d type=%s event=%d", token.id, token.type, event.id)
    return token


async def list_tokens(ctx: TenantContext, event_id: int, db: AsyncSession) -> list[AccessToken]:
    await get_scoped_event(ctx, event_id, db)
    result = await db.execute(
        select(AccessToken)
        .where(AccessToken.event_id == event_id, AccessToken.tenant_id == ctx.tenant_id)
        .order_by(AccessToken.created_at.desc(), AccessToken.id.desc())
    )
    return list(result.scalars().all())


async def get_token(ctx: TenantContext, token_id: int, db: AsyncSession) -> AccessToken:
    result = await db.execute(
        select(AccessToken).where(AccessToken.id == token_id, AccessToken.tenant_id == ctx.tenant_id)
    )
    token = result.scalars().first()
    if token is None or not ctx.allows_event(token.event_id):
        raise NotFoundError("Token", token_id)
    return token


async def revoke_token(ctx: TenantContext, token_id: int, db: AsyncSession) -> AccessToken:
    """
    Soft-delete a token. The row is kept for the audit trail and the token
    fails validation from now on. Revoking twice keeps the first timestamp.
    """
    token = await get_token(ctx, token_id, db)
    if token.revoked_at is None:
        token.revoked_at = utcnow()
        token.revoked_by = ctx.actor_id if ctx.is_admin else None
        await db.commit()
        await db.refresh(token)
        logger.info("Token revoked: id=%d by %s", token.id, ctx.actor_label)
        await activity_service.log_activity(
            ctx, "token_revoked", event_id=token.event_id, metadata={"token_id": token.id, "type": token.type}
        )
    return token
