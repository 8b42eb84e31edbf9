"""
Activity Service

Append-only audit trail for admin and organizer actions. Records are
written in their own database session so a failed audit write never
affects the request that triggered it.
"""

import json
import logging

from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub import database
from sharehub.config import settings
from sharehub.context import TenantContext
from sharehub.models.activity_log import RETAIN_INDEFINITELY, ActivityLog
from sharehub.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


def validate_metadata(metadata: dict | None) -> None:
    """Raise ValueError when metadata cannot be stored as JSON."""
    if metadata:
        try:
            json.dumps(metadata)
        except TypeError as e:
            raise ValueError(f"Activity metadata must be JSON-serializable. Error: {e}") from e


async def log_activity(
    ctx: TenantContext,
    action_type: str,
    event_id: int | None = None,
    metadata: dict | None = None,
    retention_days: int | None = None,
) -> None:
    """
    Log an activity using a separate session.
    """
    try:
        validate_metadata(metadata)
        async with database.AsyncSessionLocal() as session:
            session.add(
                ActivityLog(
                    tenant_id=ctx.tenant_id,
                    event_id=event_id,
                    actor_type=ctx.actor_type,
                    actor_id=str(ctx.actor_id) if ctx.actor_id is not None else None,
                    action_type=action_type,
                    metadata_=metadata or {},
                    timestamp=utcnow(),
                    retention_days=(
                        retention_days if retention_days is not None else settings.activity_log_retention_days
                    ),
                )
            )
            await session.commit()
    except Exception as e:
        logger.warning("Failed to log activity %s: %s", action_type, e)


async def list_recent_activity(
    ctx: TenantContext,
    db: AsyncSession,
    limit: int = 20,
    event_id: int | None = None,
) -> list[ActivityLog]:
    """Newest first. Token holders only ever see their own event's records."""
    query = select(ActivityLog).where(ActivityLog.tenant_id == ctx.tenant_id)
    scope = event_id if event_id is not None else ctx.event_id
    if scope is not None:
        query = query.where(ActivityLog.event_id == scope)
    result = await db.execute(query.order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc()).limit(limit))
    return list(result.scalars().all())


async def last_activity_at(tenant_id: int, db: AsyncSession):
    result = await db.execute(
        select(ActivityLog.timestamp)
        .where(ActivityLog.tenant_id == tenant_id)
        .order_by(ActivityLog.timestamp.desc())
        .limit(1)
    )
    return result.scalars().first()


async def delete_expired_activity_logs(db: AsyncSession) -> int:
    """Delete every record past its retention window. Returns the count removed."""
    now = utcnow()
    result = await db.execute(
        select(ActivityLog).where(ActivityLog.retention_days != RETAIN_INDEFINITELY)
    )
    expired_ids = [log.id for log in result.scalars().all() if log.is_expired(now)]
    if not expired_ids:
        return 0
    await db.execute(delete(ActivityLog).where(ActivityLog.id.in_(expired_ids)))
    await db.commit()
    return len(expired_ids)


async def prune_expired_activity_logs() -> int:
    """
    Scheduler entry point. Opens its own session.

    Returns the count of deleted rows, or 0 on failure.
    """
    async with database.AsyncSessionLocal() as db:
        try:
            deleted = await delete_expired_activity_logs(db)
        except Exception as exc:
            logger.warning("activity_retention: prune failed: %s", exc)
            return 0
    if deleted:
        logger.info("activity_retention: pruned %d expired records", deleted)
    return deleted


def install_retention_policy(scheduler, interval_hours: int = 24) -> None:
    """
    Register the activity-log pruning job with the application's scheduler.

    Args:
        scheduler: The application's AsyncIOScheduler.
        interval_hours: How often to run (default: once daily).
    """
    scheduler.add_job(
        prune_expired_activity_logs,
        trigger=IntervalTrigger(hours=interval_hours),
        id="activity_retention",
        replace_existing=True,
        max_instances=1,
    )
    logger.info("activity_retention: installed (interval=%dh)", interval_hours)
