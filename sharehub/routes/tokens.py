"""
Access Token Routes

POST   /events/{event_id}/tokens   → issue a token pair, or one token of a given type
GET    /events/{event_id}/tokens   → list an event's tokens
POST   /tokens/validate            → check a token (always 200, {valid, token|error})
GET    /tokens/{id}/qr             → PNG QR code for a participant token
POST   /tokens/{id}/revoke         → revoke a token
"""

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.auth import get_admin_context
from sharehub.context import TenantContext
from sharehub.database import get_db
from sharehub.middleware.rate_limit import PUBLIC_LIMIT, limiter
from sharehub.schemas.token import (
    AccessTokenResponse,
    TokenCreate,
    TokenListResponse,
    TokenValidateRequest,
    TokenValidateResponse,
)
from sharehub.services import activity_service, qr_service, token_service

router = APIRouter(tags=["Tokens"])
logger = logging.getLogger(__name__)


@router.post("/events/{event_id}/tokens", response_model=TokenListResponse, status_code=status.HTTP_201_CREATED)
async def create_tokens(
    event_id: int,
    data: TokenCreate,
    ctx: TenantContext = Depends(get_admin_context),
    db: AsyncSession = Depends(get_db),
):
    """Without `type` a new organizer/participant pair is issued."""
    if data.type is None:
        pair = await token_service.create_token_pair(ctx, event_id, data.expires_at, db)
        tokens = list(pair.values())
    else:
        tokens = [await token_service.create_token(ctx, event_id, data.type, data.expires_at, db)]

    await activity_service.log_activity(
        ctx, "tokens_created", event_id=event_id, metadata={"token_ids": [t.id for t in tokens]}
    )
    return TokenListResponse(tokens=[AccessTokenResponse.model_validate(t) for t in tokens], total=len(tokens))


@router.get("/events/{event_id}/tokens", response_model=TokenListResponse)
async def list_tokens(
    event_id: int,
    ctx: TenantContext = Depends(get_admin_context),
    db: AsyncSession = Depends(get_db),
):
    tokens = await token_service.list_tokens(ctx, event_id, db)
    return TokenListResponse(tokens=[AccessTokenResponse.model_validate(t) for t in tokens], total=len(tokens))


@router.post("/tokens/validate", response_model=TokenValidateResponse)
@limiter.limit(PUBLIC_LIMIT)
async def validate_token(
    request: Request,
    response: Response,
    data: TokenValidateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Invalid tokens are a normal outcome here, not an error status."""
    result = await token_service.validate_token(data.token, db, event_id=data.event_id)
    if not result.valid:
        return TokenValidateResponse(valid=False, error=result.error)
    return TokenValidateResponse(valid=True, token=AccessTokenResponse.model_validate(result.token))


@router.get("/tokens/{token_id}/qr")
async def token_qr(
    token_id: int,
    ctx: TenantContext = Depends(get_admin_context),
    db: AsyncSession = Depends(get_db),
):
    png, token = await qr_service.generate_token_qr(ctx, token_id, db)
    return Response(
        content=png,
        media_type="image/png",
        headers={"Content-Disposition": f'inline; filename="token-{token.id}-qr.png"'},
    )


@router.post("/tokens/{token_id}/revoke", response_model=AccessTokenResponse)
async def revoke_token(
    token_id: int,
    ctx: TenantContext = Depends(get_admin_context),
    db: AsyncSession = Depends(get_db),
):
    return await token_service.revoke_token(ctx, token_id, db)
