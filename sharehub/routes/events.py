"""
Event Routes

POST   /events              → create event (+ token pair for private events)
GET    /events              → list events (filters, sort, pagination)
GET    /events/{id}         → get event (?include=hierarchy for nested content)
PUT    /events/{id}         → partial update (confirm_past for past events)
DELETE /events/{id}         → delete event and everything under it
"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.auth import get_admin_context, get_context
from sharehub.context import TenantContext
from sharehub.database import get_db
from sharehub.models.event import EventVisibility
from sharehub.schemas.common import Pagination
from sharehub.schemas.event import (
    EventCreate,
    EventCreateResponse,
    EventListResponse,
    EventResponse,
    EventUpdate,
)
from sharehub.schemas.token import AccessTokenResponse, TokenPairResponse
from sharehub.services import event_service
from sharehub.services.hierarchy import build_event_hierarchy

router = APIRouter(tags=["Events"])
logger = logging.getLogger(__name__)


@router.post("/events", response_model=EventCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    data: EventCreate,
    ctx: TenantContext = Depends(get_admin_context),
    db: AsyncSession = Depends(get_db),
):
    """Create an event. Private events come back with their organizer and participant tokens."""
    event, tokens = await event_service.create_event(ctx, data, db)
    pair = None
    if tokens:
        pair = TokenPairResponse(
            organizer=AccessTokenResponse.model_validate(tokens["organizer"]),
            participant=AccessTokenResponse.model_validate(tokens["participant"]),
        )
    return EventCreateResponse(event=EventResponse.model_validate(event), tokens=pair)


@router.get("/events", response_model=EventListResponse)
async def list_events(
    status: str | None = Query(None, description="all, upcoming or past"),
    visibility: EventVisibility | None = Query(None),
    search: str | None = Query(None, max_length=200),
    sort: str = Query("date-asc", description="date-asc, date-desc or created-desc"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    ctx: TenantContext = Depends(get_admin_context),
    db: AsyncSession = Depends(get_db),
):
    events, total = await event_service.list_events(
        ctx,
        db,
        status=status,
        visibility=visibility.value if visibility else None,
        search=search,
        sort=sort,
        limit=limit,
        offset=offset,
    )
    return EventListResponse(
        events=[EventResponse.model_validate(e) for e in events],
        pagination=Pagination(page=offset // limit + 1, limit=limit, total=total),
    )


@router.get("/events/{event_id}", response_model=None)
async def get_event(
    event_id: int,
    include: str | None = Query(None, description="'hierarchy' to nest sessions, speeches and slides"),
    ctx: TenantContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
) -> EventResponse:
    event = await event_service.get_event(ctx, event_id, db)
    if include == "hierarchy":
        return await build_event_hierarchy(event, db)
    return EventResponse.model_validate(event)


@router.put("/events/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: int,
    data: EventUpdate,
    ctx: TenantContext = Depends(get_admin_context),
    db: AsyncSession = Depends(get_db),
):
    event = await event_service.update_event(ctx, event_id, data.model_dump(exclude_unset=True), db)
    return EventResponse.model_validate(event)


@router.delete("/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: int,
    ctx: TenantContext = Depends(get_admin_context),
    db: AsyncSession = Depends(get_db),
):
    """Deletes unconditionally: sessions, speeches, slides, tokens, photos, metrics and activity."""
    await event_service.delete_event(ctx, event_id, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
