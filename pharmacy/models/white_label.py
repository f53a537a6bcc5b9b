"""White-label branding configuration models."""

from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from pharmacy.models.base import Base

HEX_COLOR_PATTERN = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"

DEFAULT_BRAND_NAME = "BoltEHR Pharmacy"
DEFAULT_PRIMARY_COLOR = "#0070f3"
DEFAULT_TAGLINE = "Your trusted online pharmacy for affordable medications"
DEFAULT_BORDER_RADIUS = "0.5rem"
BORDER_RADIUS_PATTERN = r"^(0|\d+(\.\d+)?(rem|px|em))$"

# ========== SQLAlchemy ORM Models ==========


class WhiteLabelDB(Base):
    """SQLAlchemy model for white_labels table."""

    __tablename__ = "white_labels"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    company_name = Column(String(255), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(32), nullable=True)
    logo = Column(Text, nullable=True)
    favicon = Column(Text, nullable=True)
    primary_color = Column(String(7), nullable=True)
    secondary_color = Column(String(7), nullable=True)
    accent_color = Column(String(7), nullable=True)
    font_family = Column(String(255), nullable=True)
    border_radius = Column(
        String(16), nullable=True, default=DEFAULT_BORDER_RADIUS, server_default=DEFAULT_BORDER_RADIUS
    )
    tagline = Column(Text, nullable=True)
    custom_css = Column(Text, nullable=True)
    custom_header = Column(Text, nullable=True)
    custom_footer = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    terms_url = Column(Text, nullable=True)
    privacy_url = Column(Text, nullable=True)
    allow_guest_cart = Column(Boolean, nullable=False, default=True, server_default="1")
    is_active = Column(Boolean, nullable=False, default=False, server_default="0")
    is_default = Column(Boolean, nullable=False, default=False, server_default="0")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


# ========== Pydantic Models ==========


class WhiteLabelCreate(BaseModel):
    """White-label configuration payload (admin form)."""

    name: str = Field(..., min_length=2, max_length=255)
    company_name: str | None = Field(None, min_length=2, max_length=255)
    contact_email: str | None = Field(None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    contact_phone: str | None = None
    logo: str | None = None
    favicon: str | None = None
    primary_color: str | None = Field(None, pattern=HEX_COLOR_PATTERN)
    secondary_color: str | None = Field(None, pattern=HEX_COLOR_PATTERN)
    accent_color: str | None = Field(None, pattern=HEX_COLOR_PATTERN)
    font_family: str | None = Field(None, min_length=1, max_length=255)
    border_radius: str | None = Field(DEFAULT_BORDER_RADIUS, pattern=BORDER_RADIUS_PATTERN)
    tagline: str | None = None
    custom_css: str | None = None
    custom_header: str | None = None
    custom_footer: str | None = None
    address: str | None = None
    terms_url: str | None = Field(None, pattern=r"^https?://")
    privacy_url: str | None = Field(None, pattern=r"^https?://")
    allow_guest_cart: bool = True
    is_active: bool = False


class WhiteLabelUpdate(BaseModel):
    """Partial white-label update."""

    name: str | None = Field(None, min_length=2, max_length=255)
    company_name: str | None = Field(None, min_length=2, max_length=255)
    contact_email: str | None = Field(None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    contact_phone: str | None = None
    logo: str | None = None
    favicon: str | None = None
    primary_color: str | None = Field(None, pattern=HEX_COLOR_PATTERN)
    secondary_color: str | None = Field(None, pattern=HEX_COLOR_PATTERN)
    accent_color: str | None = Field(None, pattern=HEX_COLOR_PATTERN)
    font_family: str | None = Field(None, min_length=1, max_length=255)
    border_radius: str | None = Field(None, pattern=BORDER_RADIUS_PATTERN)
    tagline: str | None = None
    custom_css: str | None = None
    custom_header: str | None = None
    custom_footer: str | None = None
    address: str | None = None
    terms_url: str | None = Field(None, pattern=r"^https?://")
    privacy_url: str | None = Field(None, pattern=r"^https?://")
    allow_guest_cart: bool | None = None


class WhiteLabel(BaseModel):
    """Stored white-label configuration."""

    id: int
    name: str
    company_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    logo: str | None = None
    favicon: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    accent_color: str | None = None
    font_family: str | None = None
    border_radius: str | None = None
    tagline: str | None = None
    custom_css: str | None = None
    custom_header: str | None = None
    custom_footer: str | None = None
    address: str | None = None
    terms_url: str | None = None
    privacy_url: str | None = None
    allow_guest_cart: bool = True
    is_active: bool = False
    is_default: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class StorefrontTheme(BaseModel):
    """Styling subset consumed by the storefront head."""

    font_family: str | None = None
    border_radius: str = DEFAULT_BORDER_RADIUS


class StorefrontConfig(BaseModel):
    """Public branding payload served to the storefront."""

    name: str = DEFAULT_BRAND_NAME
    primary_color: str = DEFAULT_PRIMARY_COLOR
    secondary_color: str | None = None
    accent_color: str | None = None
    logo: str | None = None
    favicon: str | None = None
    tagline: str | None = DEFAULT_TAGLINE
    legal_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    address: str | None = None
    terms_url: str | None = None
    privacy_url: str | None = None
    allow_guest_cart: bool = True
    theme: StorefrontTheme = Field(default_factory=StorefrontTheme)


class WebsiteTheme(BaseModel):
    """Branding extracted from an existing website."""

    name: str
    primary_color: str
    secondary_color: str
    accent_color: str
    text_color: str
    background_color: str
    font_family: str
    logo_url: str | None = None
    favicon: str | None = None
    border_radius: str = DEFAULT_BORDER_RADIUS


class ParseWebsiteRequest(BaseModel):
    """Website to extract a theme from."""

    url: str = Field(..., min_length=3, max_length=2048)
