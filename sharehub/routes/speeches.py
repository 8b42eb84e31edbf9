"""
Speech Routes

POST   /sessions/{session_id}/speeches          → create speech
GET    /sessions/{session_id}/speeches          → list speeches in smart order
GET    /speeches/{id}                           → get speech with its slides
PUT    /speeches/{id}                           → partial update
DELETE /speeches/{id}                           → delete speech, reports slide_count
POST   /speeches/{session_id}/reorder           → reorder the session's speeches
POST   /sessions/{session_id}/speeches/reorder  → same, addressed by session
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.auth import get_context, require_writer
from sharehub.context import TenantContext
from sharehub.database import get_db
from sharehub.schemas.speech import (
    SpeechCreate,
    SpeechDeleteResponse,
    SpeechListResponse,
    SpeechReorderRequest,
    SpeechResponse,
    SpeechUpdate,
    SpeechWithSlides,
)
from sharehub.services import ordering, speech_service

router = APIRouter(tags=["Speeches"])


@router.post("/sessions/{session_id}/speeches", response_model=SpeechResponse, status_code=status.HTTP_201_CREATED)
async def create_speech(
    session_id: int,
    data: SpeechCreate,
    ctx: TenantContext = Depends(require_writer),
    db: AsyncSession = Depends(get_db),
):
    return await speech_service.create_speech(ctx, session_id, data, db)


@router.get("/sessions/{session_id}/speeches", response_model=SpeechListResponse)
async def list_speeches(
    session_id: int,
    ctx: TenantContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
):
    speeches, mode = await speech_service.list_speeches(ctx, session_id, db)
    return SpeechListResponse(
        speeches=[SpeechResponse.model_validate(s) for s in speeches],
        total=len(speeches),
        ordering_mode=mode,
    )


@router.get("/speeches/{speech_id}", response_model=SpeechWithSlides)
async def get_speech(
    speech_id: int,
    ctx: TenantContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
):
    return await speech_service.get_speech(ctx, speech_id, db)


@router.put("/speeches/{speech_id}", response_model=SpeechResponse)
async def update_speech(
    speech_id: int,
    data: SpeechUpdate,
    ctx: TenantContext = Depends(require_writer),
    db: AsyncSession = Depends(get_db),
):
    return await speech_service.update_speech(ctx, speech_id, data.model_dump(exclude_unset=True), db)


@router.delete("/speeches/{speech_id}", response_model=SpeechDeleteResponse)
async def delete_speech(
    speech_id: int,
    ctx: TenantContext = Depends(require_writer),
    db: AsyncSession = Depends(get_db),
):
    """Slides go with the speech; slide_count says how many."""
    return await speech_service.delete_speech(ctx, speech_id, db)


async def _reorder(session_id: int, data: SpeechReorderRequest, ctx: TenantContext, db: AsyncSession):
    speeches = await speech_service.reorder_speeches(ctx, session_id, data.speech_ids, db)
    return SpeechListResponse(
        speeches=[SpeechResponse.model_validate(s) for s in speeches],
        total=len(speeches),
        ordering_mode=ordering.ordering_mode(speeches),
    )


@router.post("/speeches/{session_id}/reorder", response_model=SpeechListResponse)
async def reorder_speeches(
    session_id: int,
    data: SpeechReorderRequest,
    ctx: TenantContext = Depends(require_writer),
    db: AsyncSession = Depends(get_db),
):
    """The path id is the session whose speeches are reordered."""
    return await _reorder(session_id, data, ctx, db)


@router.post("/sessions/{session_id}/speeches/reorder", response_model=SpeechListResponse)
async def reorder_session_speeches(
    session_id: int,
    data: SpeechReorderRequest,
    ctx: TenantContext = Depends(require_writer),
    db: AsyncSession = Depends(get_db),
):
    return await _reorder(session_id, data, ctx, db)
