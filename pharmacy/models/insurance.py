"""Patient insurance and insurance provider models."""

from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from pharmacy.models.base import Base

# ========== SQLAlchemy ORM Models ==========


class InsuranceDB(Base):
    """SQLAlchemy model for insurance table."""

    __tablename__ = "insurance"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    provider = Column(String(255), nullable=False)
    member_id = Column(String(64), nullable=False)
    group_number = Column(String(64), nullable=True)
    phone_number = Column(String(32), nullable=True)
    is_primary = Column(Boolean, nullable=False, default=False, server_default="0")


class InsuranceProviderDB(Base):
    """SQLAlchemy model for insurance_providers table (admin-managed list)."""

    __tablename__ = "insurance_providers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    phone = Column(String(32), nullable=True)
    website = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default="1")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


# ========== Pydantic Models ==========


class InsuranceCreate(BaseModel):
    """Insurance capture payload."""

    user_id: int
    provider: str = Field(..., min_length=1, max_length=255)
    member_id: str = Field(..., min_length=1, max_length=64)
    group_number: str | None = Field(None, max_length=64)
    phone_number: str | None = Field(None, max_length=32)
    is_primary: bool = False


class InsuranceUpdate(BaseModel):
    """Partial insurance update."""

    provider: str | None = Field(None, min_length=1, max_length=255)
    member_id: str | None = Field(None, min_length=1, max_length=64)
    group_number: str | None = Field(None, max_length=64)
    phone_number: str | None = Field(None, max_length=32)
    is_primary: bool | None = None


class Insurance(InsuranceCreate):
    """Insurance as returned by the API."""

    id: int

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class InsuranceProviderCreate(BaseModel):
    """Insurance provider payload."""

    name: str = Field(..., min_length=2, max_length=255)
    phone: str | None = Field(None, max_length=32)
    website: str | None = None
    is_active: bool = True


class InsuranceProviderUpdate(BaseModel):
    """Partial insurance provider update."""

    name: str | None = Field(None, min_length=2, max_length=255)
    phone: str | None = Field(None, max_length=32)
    website: str | None = None
    is_active: bool | None = None


class InsuranceProvider(InsuranceProviderCreate):
    """Insurance provider as returned by the API."""

    id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        """Pydantic configuration."""

        from_attributes = True
