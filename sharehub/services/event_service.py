"""
Event Service

Async CRUD for events. All functions take an explicit TenantContext and an
injected AsyncSession.
"""

import logging

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.context import TenantContext
from sharehub.exceptions import ConfirmationRequiredError, ConflictError, ValidationFailedError
from sharehub.models.access_token import AccessToken
from sharehub.models.activity_log import ActivityLog
from sharehub.models.event import Event, EventStatus, EventVisibility
from sharehub.models.event_metrics import EventMetrics
from sharehub.models.event_photo import EventPhoto
from sharehub.models.session import EventSession
from sharehub.models.slide import Slide
from sharehub.models.speech import Speech
from sharehub.schemas.event import EventCreate
from sharehub.services import activity_service, metrics_service
from sharehub.services.lookups import get_scoped_event
from sharehub.services.storage_service import storage
from sharehub.services.token_service import build_token_pair
from sharehub.utils.slugify import slugify
from sharehub.utils.timeutils import today

logger = logging.getLogger(__name__)

SORT_OPTIONS = {
    "date-asc": (Event.date.asc(), Event.id.asc()),
    "date-desc": (Event.date.desc(), Event.id.desc()),
    "created-desc": (Event.created_at.desc(), Event.id.desc()),
}
STATUS_FILTERS = {"all", EventStatus.UPCOMING.value, EventStatus.PAST.value}
MAX_PAGE_SIZE = 100


async def _slug_taken(tenant_id: int, slug: str, db: AsyncSession, exclude_id: int | None = None) -> bool:
    query = select(Event.id).where(Event.tenant_id == tenant_id, Event.slug == slug)
    if exclude_id is not None:
        query = query.where(Event.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


async def generate_unique_slug(tenant_id: int, name: str, db: AsyncSession) -> str:
    base = slugify(name, max_length=90)
    if len(base) < 3:
        base = f"{base}-event".strip("-")
    slug = base
    suffix = 2
    while await _slug_taken(tenant_id, slug, db):
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug


async def create_event(
    ctx: TenantContext,
    data: EventCreate,
    db: AsyncSession,
) -> tuple[Event, dict[str, AccessToken] | None]:
    """
    Create an event with its metrics row and, for private events, an
    organizer/participant token pair sharing token_expiration_date.
    """
    if data.slug:
        if await _slug_taken(ctx.tenant_id, data.slug, db):
            raise ConflictError(
                f"An event with slug '{data.slug}' already exists",
                details={"field": "slug", "slug": data.slug},
            )
        slug = data.slug
    else:
        slug = await generate_unique_slug(ctx.tenant_id, data.name, db)

    event = Event(
        tenant_id=ctx.tenant_id,
        slug=slug,
        name=data.name,
        date=data.date,
        description=data.description,
        visibility=data.visibility.value,
        token_expiration_date=data.token_expiration_date,
        retention_policy=data.retention_policy.value,
        created_by=ctx.actor_id if ctx.is_admin else None,
    )
    db.add(event)
    await db.flush()

    db.add(metrics_service.initialize_metrics(event))

    tokens = None
    if event.is_private:
        tokens = build_token_pair(event, data.token_expiration_date)
        db.add_all(tokens.values())

    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError(
            f"An event with slug '{slug}' already exists", details={"field": "slug", "slug": slug}
        ) from e

    await db.refresh(event)
    if tokens:
        for token in tokens.values():
            await db.refresh(token)

    logger.info("Event created: id=%d slug=%s tenant=%d", event.id, event.slug, ctx.tenant_id)
    await activity_service.log_activity(
        ctx, "event_created", event_id=event.id, metadata={"name": event.name, "visibility": event.visibility}
    )
    return event, tokens


async def list_events(
    ctx: TenantContext,
    db: AsyncSession,
    status: str | None = None,
    visibility: str | None = None,
    search: str | None = None,
    sort: str = "date-asc",
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Event], int]:
    """Return one page of the tenant's events and the total matching count."""
    if sort not in SORT_OPTIONS:
        raise ValidationFailedError(
            "Invalid sort parameter. Must be one of: date-asc, date-desc, created-desc", field="sort"
        )
    if status is not None and status not in STATUS_FILTERS:
        raise ValidationFailedError("Invalid status filter. Must be one of: all, upcoming, past", field="status")
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValidationFailedError(f"limit must be between 1 and {MAX_PAGE_SIZE}", field="limit")
    if offset < 0:
        raise ValidationFailedError("offset must not be negative", field="offset")

    filters = [Event.tenant_id == ctx.tenant_id]
    if ctx.event_id is not None:
        filters.append(Event.id == ctx.event_id)
    if status == EventStatus.UPCOMING.value:
        filters.append(Event.date >= today())
    elif status == EventStatus.PAST.value:
        filters.append(Event.date < today())
    if visibility:
        filters.append(Event.visibility == visibility)
    if search:
        pattern = f"%{search.strip()}%"
        filters.append(or_(Event.name.ilike(pattern), Event.description.ilike(pattern)))

    total_result = await db.execute(select(func.count(Event.id)).where(*filters))
    total = total_result.scalar_one()

    result = await db.execute(select(Event).where(*filters).order_by(*SORT_OPTIONS[sort]).offset(offset).limit(limit))
    return list(result.scalars().all()), total


async def get_event(ctx: TenantContext, event_id: int, db: AsyncSession) -> Event:
    return await get_scoped_event(ctx, event_id, db)


async def update_event(ctx: TenantContext, event_id: int, updates: dict, db: AsyncSession) -> Event:
    """
    Apply a partial update.

    Events whose date has passed can only be edited with confirm_past=True.
    Switching an event to private issues a token pair if it has none yet.
    """
    updates = dict(updates)
    confirm_past = updates.pop("confirm_past", False)
    event = await get_scoped_event(ctx, event_id, db)

    if event.is_past and not confirm_past:
        raise ConfirmationRequiredError(
            "Cannot edit past events without confirmation",
            details={"event_id": event.id, "date": event.date.isoformat(), "confirm_field": "confirm_past"},
        )

    if updates.get("slug") and updates["slug"] != event.slug:
        if await _slug_taken(ctx.tenant_id, updates["slug"], db, exclude_id=event.id):
            raise ConflictError(
                f"An event with slug '{updates['slug']}' already exists",
                details={"field": "slug", "slug": updates["slug"]},
            )

    for field in ("name", "slug", "date", "visibility", "retention_policy"):
        if field in updates and updates[field] is None:
            raise ValidationFailedError(f"{field} cannot be empty", field=field)

    visibility = updates.get("visibility", event.visibility)
    visibility = getattr(visibility, "value", visibility)
    expiration = updates.get("token_expiration_date", event.token_expiration_date)
    if visibility == EventVisibility.PUBLIC.value:
        if updates.get("token_expiration_date") is not None:
            raise ValidationFailedError(
                "Public events must not set token_expiration_date", field="token_expiration_date"
            )
        updates["token_expiration_date"] = None
    elif expiration is None:
        raise ValidationFailedError("Private events require token_expiration_date", field="token_expiration_date")

    for field, value in updates.items():
        setattr(event, field, getattr(value, "value", value))

    if event.is_private:
        existing = await db.execute(select(AccessToken.id).where(AccessToken.event_id == event.id).limit(1))
        if existing.first() is None:
            db.add_all(build_token_pair(event, event.token_expiration_date).values())

    await db.commit()
    await db.refresh(event)
    logger.info("Event updated: id=%d", event.id)
    await activity_service.log_activity(
        ctx, "event_updated", event_id=event.id, metadata={"fields": sorted(updates)}
    )
    return event


async def delete_event(ctx: TenantContext, event_id: int, db: AsyncSession) -> None:
    """
    Delete an event and everything under it.

    Storage objects go first; a failed object delete is logged and the
    rows are removed anyway.
    """
    event = await get_scoped_event(ctx, event_id, db)

    session_ids = select(EventSession.id).where(EventSession.event_id == event.id)
    speech_ids = select(Speech.id).where(Speech.session_id.in_(session_ids))

    slide_paths = await db.execute(select(Slide.storage_path).where(Slide.speech_id.in_(speech_ids)))
    photo_paths = await db.execute(select(EventPhoto.storage_path).where(EventPhoto.event_id == event.id))
    orphaned = 0
    for path in [*slide_paths.scalars().all(), *photo_paths.scalars().all()]:
        if not storage.delete_quietly(path):
            orphaned += 1

    await db.execute(delete(Slide).where(Slide.speech_id.in_(speech_ids)))
    await db.execute(delete(Speech).where(Speech.session_id.in_(session_ids)))
    await db.execute(delete(EventSession).where(EventSession.event_id == event.id))
    await db.execute(delete(AccessToken).where(AccessToken.event_id == event.id))
    await db.execute(delete(ActivityLog).where(ActivityLog.event_id == event.id))
    await db.execute(delete(EventMetrics).where(EventMetrics.event_id == event.id))
    await db.execute(delete(EventPhoto).where(EventPhoto.event_id == event.id))
    await db.delete(event)
    await db.commit()

    logger.info("Event deleted: id=%d (orphaned storage objects: %d)", event_id, orphaned)
    await activity_service.log_activity(
        ctx, "event_deleted", metadata={"event_id": event_id, "name": event.name, "slug": event.slug}
    )
