"""
Dashboard Routes

GET /dashboard/metrics         → active events and last activity for the tenant
GET /dashboard/activity        → recent activity feed
GET /events/{event_id}/dashboard → metrics, token summary and activity for one event
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.auth import get_admin_context
from sharehub.context import TenantContext
from sharehub.database import get_db
from sharehub.schemas.dashboard import (
    ActivityListResponse,
    ActivityResponse,
    DashboardMetricsResponse,
    EventDashboardResponse,
    EventMetricsResponse,
    TokenSummary,
)
from sharehub.schemas.event import EventResponse
from sharehub.services import activity_service, metrics_service

router = APIRouter(tags=["Dashboard"])


@router.get("/dashboard/metrics", response_model=DashboardMetricsResponse)
async def dashboard_metrics(
    ctx: TenantContext = Depends(get_admin_context),
    db: AsyncSession = Depends(get_db),
):
    return await metrics_service.get_dashboard_metrics(ctx, db)


@router.get("/dashboard/activity", response_model=ActivityListResponse)
async def dashboard_activity(
    limit: int = Query(20, ge=1, le=100),
    ctx: TenantContext = Depends(get_admin_context),
    db: AsyncSession = Depends(get_db),
):
    logs = await activity_service.list_recent_activity(ctx, db, limit=limit)
    return ActivityListResponse(activity=[ActivityResponse.from_log(log) for log in logs], total=len(logs))


@router.get("/events/{event_id}/dashboard", response_model=EventDashboardResponse)
async def event_dashboard(
    event_id: int,
    ctx: TenantContext = Depends(get_admin_context),
    db: AsyncSession = Depends(get_db),
):
    data = await metrics_service.get_event_dashboard(ctx, event_id, db)
    return EventDashboardResponse(
        event=EventResponse.model_validate(data["event"]),
        metrics=EventMetricsResponse.model_validate(data["metrics"]),
        tokens=TokenSummary(**data["tokens"]),
        activity=[ActivityResponse.from_log(log) for log in data["activity"]],
    )
