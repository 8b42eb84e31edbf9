import re

from pydantic import BaseModel, Field, field_validator

from sharehub.schemas.common import ORMModel, UTCDatetime

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


class TenantResponse(ORMModel):
    id: int
    name: str
    slug: str
    status: str
    branding: dict
    created_at: UTCDatetime


class BrandingUpdate(BaseModel):
    primary_color: str | None = Field(None, description="Hex color, e.g. #2563EB")
    secondary_color: str | None = Field(None, description="Hex color, e.g. #F59E0B")
    logo_url: str | None = Field(None, max_length=2048)

    @field_validator("primary_color", "secondary_color")
    @classmethod
    def check_hex_color(cls, value):
        if value is not None and not HEX_COLOR.match(value):
            raise ValueError("Color must be a hex value in the form #RRGGBB")
        return value.upper() if value else value
