"""
Authentication dependencies.

Two credentials are accepted:

* admin bearer JWTs (``sub`` = admin email), issued by ``POST /auth/login``
* per-event access tokens, 21 URL-safe characters, passed as ``?token=`` or
  as ``Authorization: Bearer <token>``

Both resolve to a TenantContext that routes hand to the services.
"""

import logging
from datetime import timedelta

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.config import settings
from sharehub.context import TenantContext
from sharehub.database import get_db
from sharehub.exceptions import ForbiddenError, UnauthorizedError
from sharehub.models.admin import Admin
from sharehub.services.token_service import TOKEN_LENGTH, validate_token
from sharehub.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    if "sub" not in to_encode:
        raise ValueError("Missing 'sub' claim (admin email) in token data.")
    expire = utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str:
    """Return the admin email from a JWT, or raise UnauthorizedError."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as e:
        logger.info("Admin token expired")
        raise UnauthorizedError("Token has expired") from e
    except JWTError as e:
        logger.info("JWT decoding failed: %s", e)
        raise UnauthorizedError("Invalid token") from e

    email = payload.get("sub")
    if email is None:
        raise UnauthorizedError("Token does not contain 'sub' field.")
    return email


def looks_like_access_token(value: str) -> bool:
    """Access tokens are short and dot-free; JWTs always contain two dots."""
    return len(value) == TOKEN_LENGTH and "." not in value


async def authenticate_admin(email: str, password: str, db: AsyncSession) -> Admin:
    result = await db.execute(select(Admin).where(Admin.email == email.lower()))
    admin = result.scalars().first()
    if admin is None or not verify_password(password, admin.hashed_password):
        logger.info("Failed login for %s", email)
        raise UnauthorizedError("Invalid email or password")
    return admin


async def _admin_from_jwt(token: str, db: AsyncSession) -> Admin:
    email = decode_access_token(token)
    result = await db.execute(select(Admin).where(Admin.email == email))
    admin = result.scalars().first()
    if admin is None:
        logger.warning("Admin '%s' from token not found", email)
        raise UnauthorizedError("Could not validate credentials")
    return admin


async def _context_from_access_token(value: str, db: AsyncSession) -> TenantContext:
    validation = await validate_token(value, db)
    if not validation.valid:
        raise ForbiddenError(validation.error)
    return TenantContext.for_token(validation.token)


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Admin:
    if credentials is None:
        raise UnauthorizedError()
    return await _admin_from_jwt(credentials.credentials, db)


async def get_admin_context(request: Request, admin: Admin = Depends(get_current_admin)) -> TenantContext:
    ctx = TenantContext.for_admin(admin)
    request.state.tenant_context = ctx
    return ctx


async def get_context(
    request: Request,
    token: str | None = Query(None, description="Event access token"),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> TenantContext:
    """Admin JWT or event access token, whichever the request carries."""
    if token:
        ctx = await _context_from_access_token(token, db)
    elif credentials is None:
        raise UnauthorizedError()
    elif looks_like_access_token(credentials.credentials):
        ctx = await _context_from_access_token(credentials.credentials, db)
    else:
        ctx = TenantContext.for_admin(await _admin_from_jwt(credentials.credentials, db))
    request.state.tenant_context = ctx
    return ctx


async def require_writer(ctx: TenantContext = Depends(get_context)) -> TenantContext:
    if not ctx.can_write:
        raise ForbiddenError("This action requires organizer access")
    return ctx
