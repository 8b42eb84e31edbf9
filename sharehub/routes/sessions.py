"""
Session Routes

POST   /events/{event_id}/sessions          → create session
GET    /events/{event_id}/sessions          → list sessions in smart order
GET    /sessions/{id}                       → get session (?include=content)
PUT    /sessions/{id}                       → partial update
DELETE /sessions/{id}?confirm=true          → delete session with its speeches
POST   /sessions/{event_id}/reorder         → reorder the event's sessions
POST   /events/{event_id}/sessions/reorder  → same, addressed by event
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.auth import get_context, require_writer
from sharehub.context import TenantContext
from sharehub.database import get_db
from sharehub.schemas.session import (
    SessionCreate,
    SessionDeleteResponse,
    SessionListResponse,
    SessionReorderRequest,
    SessionResponse,
    SessionUpdate,
)
from sharehub.services import ordering, session_service

router = APIRouter(tags=["Sessions"])
logger = logging.getLogger(__name__)


@router.post("/events/{event_id}/sessions", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    event_id: int,
    data: SessionCreate,
    ctx: TenantContext = Depends(require_writer),
    db: AsyncSession = Depends(get_db),
):
    return await session_service.create_session(ctx, event_id, data, db)


@router.get("/events/{event_id}/sessions", response_model=SessionListResponse)
async def list_sessions(
    event_id: int,
    ctx: TenantContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
):
    sessions, mode = await session_service.list_sessions(ctx, event_id, db)
    return SessionListResponse(
        sessions=[SessionResponse.model_validate(s) for s in sessions],
        total=len(sessions),
        ordering_mode=mode,
    )


@router.get("/sessions/{session_id}", response_model=None)
async def get_session(
    session_id: int,
    include: str | None = Query(None, description="'content' to nest speeches and slides"),
    ctx: TenantContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    if include == "content":
        return await session_service.get_session_with_content(ctx, session_id, db)
    return SessionResponse.model_validate(await session_service.get_session(ctx, session_id, db))


@router.put("/sessions/{session_id}", response_model=SessionResponse)
async def update_session(
    session_id: int,
    data: SessionUpdate,
    ctx: TenantContext = Depends(require_writer),
    db: AsyncSession = Depends(get_db),
):
    """Sending scheduled_time drops any manual position the session had."""
    return await session_service.update_session(ctx, session_id, data.model_dump(exclude_unset=True), db)


@router.delete("/sessions/{session_id}", response_model=SessionDeleteResponse)
async def delete_session(
    session_id: int,
    confirm: bool = Query(False, description="Required when the session still has speeches"),
    ctx: TenantContext = Depends(require_writer),
    db: AsyncSession = Depends(get_db),
):
    return await session_service.delete_session(ctx, session_id, db, confirm=confirm)


async def _reorder(event_id: int, data: SessionReorderRequest, ctx: TenantContext, db: AsyncSession):
    sessions = await session_service.reorder_sessions(ctx, event_id, data.session_ids, db)
    return SessionListResponse(
        sessions=[SessionResponse.model_validate(s) for s in sessions],
        total=len(sessions),
        ordering_mode=ordering.ordering_mode(sessions),
    )


@router.post("/sessions/{event_id}/reorder", response_model=SessionListResponse)
async def reorder_sessions(
    event_id: int,
    data: SessionReorderRequest,
    ctx: TenantContext = Depends(require_writer),
    db: AsyncSession = Depends(get_db),
):
    """The path id is the event whose sessions are reordered."""
    return await _reorder(event_id, data, ctx, db)


@router.post("/events/{event_id}/sessions/reorder", response_model=SessionListResponse)
async def reorder_event_sessions(
    event_id: int,
    data: SessionReorderRequest,
    ctx: TenantContext = Depends(require_writer),
    db: AsyncSession = Depends(get_db),
):
    return await _reorder(event_id, data, ctx, db)
