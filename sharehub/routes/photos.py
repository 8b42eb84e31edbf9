"""
Event Photo Routes

POST   /events/{event_id}/photos                   → upload (JPEG, PNG, WEBP)
GET    /events/{event_id}/photos                   → list gallery
PUT    /events/{event_id}/photos/{photo_id}/cover  → make cover photo
DELETE /events/{event_id}/photos/{photo_id}        → delete photo
"""

from fastapi import APIRouter, Depends, File, Request, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.auth import get_context, require_writer
from sharehub.context import TenantContext
from sharehub.database import get_db
from sharehub.middleware.rate_limit import UPLOAD_LIMIT, limiter
from sharehub.schemas.photo import PhotoListResponse, PhotoResponse
from sharehub.services import photo_service

router = APIRouter(tags=["Photos"])


@router.post("/events/{event_id}/photos", response_model=PhotoResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(UPLOAD_LIMIT)
async def upload_photo(
    request: Request,
    response: Response,
    event_id: int,
    file: UploadFile = File(...),
    ctx: TenantContext = Depends(require_writer),
    db: AsyncSession = Depends(get_db),
):
    return await photo_service.upload_photo(ctx, event_id, file, db)


@router.get("/events/{event_id}/photos", response_model=PhotoListResponse)
async def list_photos(
    event_id: int,
    ctx: TenantContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
):
    photos = await photo_service.list_photos(ctx, event_id, db)
    return PhotoListResponse(photos=[PhotoResponse.model_validate(p) for p in photos], total=len(photos))


@router.put("/events/{event_id}/photos/{photo_id}/cover", response_model=PhotoResponse)
async def set_cover_photo(
    event_id: int,
    photo_id: int,
    ctx: TenantContext = Depends(require_writer),
    db: AsyncSession = Depends(get_db),
):
    return await photo_service.set_cover(ctx, event_id, photo_id, db)


@router.delete("/events/{event_id}/photos/{photo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_photo(
    event_id: int,
    photo_id: int,
    ctx: TenantContext = Depends(require_writer),
    db: AsyncSession = Depends(get_db),
):
    await photo_service.delete_photo(ctx, event_id, photo_id, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
