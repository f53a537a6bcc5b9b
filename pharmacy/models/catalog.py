"""Medication catalog and category models."""

from pydantic import BaseModel, Field
from sqlalchemy import Boolean, Column, Float, Index, Integer, String, Text

from pharmacy.models.base import Base

# ========== SQLAlchemy ORM Models ==========


class CategoryDB(Base):
    """SQLAlchemy model for categories table."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    icon = Column(String(64), nullable=True)


class MedicationDB(Base):
    """SQLAlchemy model for medications table."""

    __tablename__ = "medications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    generic_name = Column(String(255), nullable=True)
    brand_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    uses = Column(Text, nullable=True)
    side_effects = Column(Text, nullable=True)
    dosage = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    retail_price = Column(Float, nullable=True)
    requires_prescription = Column(Boolean, nullable=False, default=True, server_default="1")
    in_stock = Column(Boolean, nullable=False, default=True, server_default="1")
    category = Column(String(255), nullable=True)
    image_url = Column(Text, nullable=True)
    popularity = Column(Integer, nullable=False, default=0, server_default="0")

    __table_args__ = (
        Index("idx_medications_category", "category"),
        Index("idx_medications_popularity", "popularity"),
    )


# ========== Pydantic Models ==========


class CategoryCreate(BaseModel):
    """Category creation payload."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    icon: str | None = Field(None, max_length=64)


class Category(CategoryCreate):
    """Category as returned by the API."""

    id: int

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class MedicationCreate(BaseModel):
    """Medication creation payload."""

    name: str = Field(..., min_length=1, max_length=255)
    generic_name: str | None = None
    brand_name: str | None = None
    description: str | None = None
    uses: str | None = None
    side_effects: str | None = None
    dosage: str | None = None
    price: float = Field(..., ge=0)
    retail_price: float | None = Field(None, ge=0)
    requires_prescription: bool = True
    in_stock: bool = True
    category: str | None = None
    image_url: str | None = None
    popularity: int = Field(0, ge=0)


class MedicationUpdate(BaseModel):
    """Partial medication update."""

    name: str | None = Field(None, min_length=1, max_length=255)
    generic_name: str | None = None
    brand_name: str | None = None
    description: str | None = None
    uses: str | None = None
    side_effects: str | None = None
    dosage: str | None = None
    price: float | None = Field(None, ge=0)
    retail_price: float | None = Field(None, ge=0)
    requires_prescription: bool | None = None
    in_stock: bool | None = None
    category: str | None = None
    image_url: str | None = None
    popularity: int | None = Field(None, ge=0)


class Medication(MedicationCreate):
    """Medication as returned by the API."""

    id: int

    class Config:
        """Pydantic configuration."""

        from_attributes = True
