"""
Tenant Routes

GET /tenant           → the admin's tenant with its branding
PUT /tenant/branding  → update colors and logo
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.auth import get_admin_context
from sharehub.context import TenantContext
from sharehub.database import get_db
from sharehub.schemas.tenant import BrandingUpdate, TenantResponse
from sharehub.services import tenant_service

router = APIRouter(prefix="/tenant", tags=["Tenant"])


@router.get("", response_model=TenantResponse)
async def get_tenant(
    ctx: TenantContext = Depends(get_admin_context),
    db: AsyncSession = Depends(get_db),
):
    return await tenant_service.get_current_tenant(ctx, db)


@router.put("/branding", response_model=TenantResponse)
async def update_branding(
    data: BrandingUpdate,
    ctx: TenantContext = Depends(get_admin_context),
    db: AsyncSession = Depends(get_db),
):
    """Colors must be #RRGGBB; omitted fields keep their current value."""
    return await tenant_service.update_branding(ctx, data.model_dump(exclude_unset=True), db)
