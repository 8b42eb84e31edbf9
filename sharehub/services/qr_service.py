"""
QR Code Service

Renders participant token links as PNG QR codes for printing on badges and
event signage.
"""

import logging
from io import BytesIO

import qrcode
from sqlalchemy.ext.asyncio import AsyncSession

from sharehub.config import settings
from sharehub.context import TenantContext
from sharehub.exceptions import ValidationFailedError
from sharehub.models.access_token import AccessToken, TokenType
from sharehub.models.event import Event
from sharehub.services.lookups import get_scoped_event
from sharehub.services.token_service import TOKEN_ERRORS, TokenState, check_token_state, get_token

logger = logging.getLogger(__name__)


def build_token_url(event: Event, token: AccessToken) -> str:
    return f"{settings.frontend_url.rstrip('/')}/events/{event.slug}?token={token.token}"


def render_qr_png(data: str) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


async def generate_token_qr(ctx: TenantContext, token_id: int, db: AsyncSession) -> tuple[bytes, AccessToken]:
    """
    Render the QR code for a participant token.

    Organizer tokens are never printed; revoked or expired tokens are
    refused with the same message validation would give.
    """
    token = await get_token(ctx, token_id, db)
    if token.type != TokenType.PARTICIPANT.value:
        raise ValidationFailedError("QR codes can only be generated for participant tokens", field="type")

    state = check_token_state(token)
    if state is not TokenState.VALID:
        raise ValidationFailedError(TOKEN_ERRORS[state], details={"token_id": token.id})

    event = await get_scoped_event(ctx, token.event_id, db)
    png = render_qr_png(build_token_url(event, token))
    logger.info("QR code generated for token id=%d", token.id)
    return png, token
