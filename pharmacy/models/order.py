"""Cart, order and order item models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator
from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from pharmacy.models.base import Base


class OrderStatus(str, Enum):
    """Order fulfilment status."""

    PENDING = "pending"
    VERIFIED = "verified"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REVOKED = "revoked"


APPROVABLE_STATUSES = {OrderStatus.PENDING.value, OrderStatus.VERIFIED.value}


# ========== SQLAlchemy ORM Models ==========


class OrderDB(Base):
    """SQLAlchemy model for orders table."""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    order_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    status = Column(
        String(20),
        nullable=False,
        default=OrderStatus.PENDING.value,
        server_default=OrderStatus.PENDING.value,
    )
    shipping_method = Column(String(64), nullable=False)
    shipping_cost = Column(Float, nullable=False)
    total = Column(Float, nullable=False)
    shipping_address = Column(Text, nullable=True)
    tracking_number = Column(String(64), nullable=True)
    carrier = Column(String(32), nullable=True)
    prescription_id = Column(Integer, ForeignKey("prescriptions.id"), nullable=True)

    user = relationship("UserDB", lazy="joined")
    prescription = relationship("PrescriptionDB", back_populates="orders")
    items = relationship("OrderItemDB", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint(
            "status IN ({})".format(", ".join(f"'{s.value}'" for s in OrderStatus)),
            name="status",
        ),
        Index("idx_user_orders", "user_id", "order_date"),
        Index("idx_order_status", "status", "order_date"),
    )


class OrderItemDB(Base):
    """SQLAlchemy model for order_items table."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    medication_id = Column(Integer, ForeignKey("medications.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)

    order = relationship("OrderDB", back_populates="items")
    medication = relationship("MedicationDB")

    __table_args__ = (CheckConstraint("quantity > 0", name="quantity_positive"),)


class CartDB(Base):
    """SQLAlchemy model for cart table (one row per user, items stored as JSON)."""

    __tablename__ = "cart"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
    items = Column(JSON, nullable=False, default=list)


# ========== Pydantic Models ==========


class CartItem(BaseModel):
    """Single cart line, stored inside the cart JSON column."""

    medication_id: int
    quantity: int = Field(..., ge=1, le=999)
    name: str = ""
    price: float = Field(..., ge=0)
    requires_prescription: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, v: str | None) -> str:
        return str(v) if v else ""


class CartUpdate(BaseModel):
    """Full replacement of a cart's items."""

    items: list[CartItem] = Field(default_factory=list, max_length=100)


class Cart(BaseModel):
    """Cart as returned by the API."""

    id: int | None = None
    user_id: int
    items: list[CartItem] = Field(default_factory=list)
    subtotal: float = 0.0
    requires_prescription: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderItemCreate(BaseModel):
    """Order item payload."""

    order_id: int
    medication_id: int
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0)


class OrderItem(BaseModel):
    """Order item as returned by the API."""

    id: int
    order_id: int
    medication_id: int
    quantity: int
    price: float

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class OrderCreate(BaseModel):
    """Explicit order creation payload."""

    user_id: int
    status: OrderStatus = OrderStatus.PENDING
    shipping_method: str = Field(..., min_length=1, max_length=64)
    shipping_cost: float = Field(..., ge=0)
    total: float = Field(..., ge=0)
    shipping_address: str | None = None
    tracking_number: str | None = None
    carrier: str | None = None
    prescription_id: int | None = None


class OrderUpdate(BaseModel):
    """Partial order update."""

    status: OrderStatus | None = None
    shipping_method: str | None = Field(None, min_length=1, max_length=64)
    shipping_cost: float | None = Field(None, ge=0)
    total: float | None = Field(None, ge=0)
    shipping_address: str | None = None
    tracking_number: str | None = None
    carrier: str | None = None
    prescription_id: int | None = None


class CheckoutRequest(BaseModel):
    """Checkout of the caller's cart."""

    shipping_method: str = Field("ground", min_length=1, max_length=64)
    shipping_cost: float = Field(..., ge=0)
    shipping_address: str | None = None
    prescription_id: int | None = None


class Order(BaseModel):
    """Order as returned by the API."""

    id: int
    user_id: int
    order_date: datetime | None = None
    status: str = OrderStatus.PENDING.value
    shipping_method: str
    shipping_cost: float
    total: float
    shipping_address: str | None = None
    tracking_number: str | None = None
    carrier: str | None = None
    prescription_id: int | None = None

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class OrderWithItems(Order):
    """Order including its line items."""

    items: list[OrderItem] = Field(default_factory=list)
