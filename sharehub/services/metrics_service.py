"""
Metrics Service

Per-event counters (page views, unique visitors, slide downloads) and the
tenant dashboard summary.
"""

import hashlib
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.config import settings
from sharehub.context import TenantContext
from sharehub.models.access_token import AccessToken
from sharehub.models.event import Event
from sharehub.models.event_metrics import EventMetrics
from sharehub.services import activity_service
from sharehub.services.lookups import get_scoped_event
from sharehub.services.token_service import TokenState, check_token_state
from sharehub.utils.timeutils import today, utcnow

logger = logging.getLogger(__name__)


def hash_visitor(event_id: int, client_ip: str | None) -> str:
    """Visitors are counted by a salted hash, the raw IP is never stored."""
    raw = f"{settings.secret_key}:{event_id}:{client_ip or 'unknown'}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def initialize_metrics(event: Event) -> EventMetrics:
    return EventMetrics(
        event_id=event.id,
        tenant_id=event.tenant_id,
        page_views=0,
        unique_visitors=0,
        total_slide_downloads=0,
        visitor_hashes=[],
    )


async def _get_or_create(event_id: int, tenant_id: int, db: AsyncSession) -> EventMetrics:
    result = await db.execute(select(EventMetrics).where(EventMetrics.event_id == event_id))
    metrics = result.scalars().first()
    if metrics is None:
        logger.warning("Metrics row missing for event id=%d, creating it", event_id)
        metrics = EventMetrics(
            event_id=event_id,
            tenant_id=tenant_id,
            page_views=0,
            unique_visitors=0,
            total_slide_downloads=0,
            visitor_hashes=[],
        )
        db.add(metrics)
    return metrics


async def track_page_view(event: Event, client_ip: str | None, db: AsyncSession) -> EventMetrics:
    metrics = await _get_or_create(event.id, event.tenant_id, db)
    visitor = hash_visitor(event.id, client_ip)
    metrics.page_views = (metrics.page_views or 0) + 1
    hashes = list(metrics.visitor_hashes or [])
    if visitor not in hashes:
        # reassign so the JSON column is flagged dirty
        metrics.visitor_hashes = hashes + [visitor]
        metrics.unique_visitors = (metrics.unique_visitors or 0) + 1
    metrics.last_activity_at = utcnow()
    await db.commit()
    return metrics


async def track_slide_download(event_id: int, tenant_id: int, db: AsyncSession) -> EventMetrics:
    metrics = await _get_or_create(event_id, tenant_id, db)
    metrics.total_slide_downloads = (metrics.total_slide_downloads or 0) + 1
    metrics.last_activity_at = utcnow()
    await db.commit()
    return metrics


async def get_dashboard_metrics(ctx: TenantContext, db: AsyncSession) -> dict:
    """Active (today or later) event count and the newest activity timestamp."""
    result = await db.execute(
        select(func.count(Event.id)).where(Event.tenant_id == ctx.tenant_id, Event.date >= today())
    )
    return {
        "active_events_count": result.scalar_one(),
        "last_activity_at": await activity_service.last_activity_at(ctx.tenant_id, db),
    }


async def get_event_dashboard(ctx: TenantContext, event_id: int, db: AsyncSession, activity_limit: int = 20) -> dict:
    event = await get_scoped_event(ctx, event_id, db)
    metrics = await _get_or_create(event.id, event.tenant_id, db)

    result = await db.execute(select(AccessToken).where(AccessToken.event_id == event.id))
    tokens = list(result.scalars().all())
    now = utcnow()
    summary = {"total": len(tokens), "active": 0, "expired": 0, "revoked": 0, "total_uses": 0}
    for token in tokens:
        state = check_token_state(token, now)
        if state is TokenState.VALID:
            summary["active"] += 1
        elif state is TokenState.EXPIRED:
            summary["expired"] += 1
        else:
            summary["revoked"] += 1
        summary["total_uses"] += token.use_count or 0

    activity = await activity_service.list_recent_activity(ctx, db, limit=activity_limit, event_id=event.id)
    return {"event": event, "metrics": metrics, "tokens": summary, "activity": activity}
