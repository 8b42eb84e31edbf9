"""
Auth Routes

POST /auth/login → exchange admin email and password for a bearer JWT
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.auth import authenticate_admin, create_access_token
from sharehub.database import get_db
from sharehub.schemas.auth import LoginRequest, Token

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=Token)
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    admin = await authenticate_admin(data.email, data.password, db)
    logger.info("Admin logged in: id=%d", admin.id)
    return Token(access_token=create_access_token({"sub": admin.email, "tenant_id": admin.tenant_id}))
