"""
Slide Routes

POST   /speeches/{speech_id}/slides   → upload a deck (multipart field `file`)
GET    /speeches/{speech_id}/slides   → list a speech's slides
GET    /slides/{id}/download          → signed, time-limited download link
DELETE /slides/{id}                   → delete a slide
GET    /files/{signed}                → stream the object behind a signed link
GET    /speeches/{id}/slides.zip      → all slides of a speech as ZIP
GET    /sessions/{id}/slides.zip      → all slides of a session as ZIP
GET    /events/{id}/slides.zip        → all slides of an event as ZIP
"""

import mimetypes

from fastapi import APIRouter, Depends, File, Request, Response, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.auth import get_context, require_writer
from sharehub.context import TenantContext
from sharehub.database import get_db
from sharehub.middleware.rate_limit import UPLOAD_LIMIT, limiter
from sharehub.schemas.slide import SlideDownloadResponse, SlideListResponse, SlideResponse
from sharehub.services import archive_service, slide_service
from sharehub.services.storage_service import storage

router = APIRouter(tags=["Slides"])


@router.post("/speeches/{speech_id}/slides", response_model=SlideResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(UPLOAD_LIMIT)
async def upload_slide(
    request: Request,
    response: Response,
    speech_id: int,
    file: UploadFile = File(...),
    ctx: TenantContext = Depends(require_writer),
    db: AsyncSession = Depends(get_db),
):
    """Accepts PDF, PPT, PPTX, Keynote and ODP files up to the configured size."""
    return await slide_service.upload_slide(ctx, speech_id, file, db)


@router.get("/speeches/{speech_id}/slides", response_model=SlideListResponse)
async def list_slides(
    speech_id: int,
    ctx: TenantContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
):
    slides = await slide_service.list_slides(ctx, speech_id, db)
    return SlideListResponse(slides=[SlideResponse.model_validate(s) for s in slides], total=len(slides))


@router.get("/slides/{slide_id}/download", response_model=SlideDownloadResponse)
async def download_slide(
    slide_id: int,
    ctx: TenantContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
):
    return await slide_service.get_download_link(ctx, slide_id, db)


@router.delete("/slides/{slide_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_slide(
    slide_id: int,
    ctx: TenantContext = Depends(require_writer),
    db: AsyncSession = Depends(get_db),
):
    await slide_service.delete_slide(ctx, slide_id, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/files/{signed}")
async def serve_file(signed: str):
    """The signature is the credential; expired or tampered links are 404."""
    key, filename = storage.verify_signed(signed)
    content = storage.read(key)
    media_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _zip_response(filename: str, data: bytes) -> StreamingResponse:
    return StreamingResponse(
        archive_service.iter_chunks(data),
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/speeches/{speech_id}/slides.zip")
async def download_speech_slides(
    speech_id: int,
    ctx: TenantContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
):
    filename, data = await archive_service.speech_archive(ctx, speech_id, db)
    return _zip_response(filename, data)


@router.get("/sessions/{session_id}/slides.zip")
async def download_session_slides(
    session_id: int,
    ctx: TenantContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
):
    filename, data = await archive_service.session_archive(ctx, session_id, db)
    return _zip_response(filename, data)


@router.get("/events/{event_id}/slides.zip")
async def download_event_slides(
    event_id: int,
    ctx: TenantContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
):
    filename, data = await archive_service.event_archive(ctx, event_id, db)
    return _zip_response(filename, data)
