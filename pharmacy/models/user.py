"""User account, personal medication list and payment method models."""

import re
from datetime import date, datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from pharmacy.models.base import Base

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PHONE_PATTERN = re.compile(r"^\+?1?[\s.-]?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}$")
ZIP_CODE_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")


class UserRole(str, Enum):
    """Account role."""

    USER = "user"
    ADMIN = "admin"


class MedicationSource(str, Enum):
    """How a medication ended up on a user's personal list."""

    MANUAL = "manual"
    PRESCRIPTION = "prescription"
    ORDER = "order"


# ========== SQLAlchemy ORM Models ==========


class UserDB(Base):
    """SQLAlchemy model for users table."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True)
    password = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    phone = Column(String(32), nullable=True)

    # Shipping address
    address = Column(Text, nullable=True)
    city = Column(String(255), nullable=True)
    state = Column(String(64), nullable=True)
    zip_code = Column(String(10), nullable=True)

    # Billing address
    billing_address = Column(Text, nullable=True)
    billing_city = Column(String(255), nullable=True)
    billing_state = Column(String(64), nullable=True)
    billing_zip_code = Column(String(10), nullable=True)
    same_as_shipping = Column(Boolean, nullable=False, default=True, server_default="1")

    date_of_birth = Column(String(10), nullable=True)
    sex_at_birth = Column(String(32), nullable=True)
    profile_completed = Column(Boolean, nullable=False, default=False, server_default="0")
    role = Column(
        String(20),
        nullable=False,
        default=UserRole.USER.value,
        server_default=UserRole.USER.value,
    )
    allergies = Column(JSON, nullable=True)
    allergies_verified = Column(Boolean, nullable=False, default=False, server_default="0")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    medications = relationship(
        "UserMedicationDB", back_populates="user", cascade="all, delete-orphan"
    )
    payment_methods = relationship(
        "PaymentMethodDB", back_populates="user", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(
            f"role IN ('{UserRole.USER.value}', '{UserRole.ADMIN.value}')",
            name="role",
        ),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


class UserMedicationDB(Base):
    """SQLAlchemy model for user_medications table."""

    __tablename__ = "user_medications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    medication_id = Column(Integer, ForeignKey("medications.id"), nullable=False)
    dosage = Column(String(255), nullable=True)
    frequency = Column(String(255), nullable=True)
    instructions = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    active = Column(Boolean, nullable=False, default=True, server_default="1")
    source = Column(
        String(20),
        nullable=False,
        default=MedicationSource.MANUAL.value,
        server_default=MedicationSource.MANUAL.value,
    )
    start_date = Column(String(10), nullable=True)
    end_date = Column(String(10), nullable=True)
    prescription_id = Column(Integer, ForeignKey("prescriptions.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user = relationship("UserDB", back_populates="medications")
    medication = relationship("MedicationDB", lazy="joined")

    __table_args__ = (Index("idx_user_medications_user", "user_id", "active"),)


class PaymentMethodDB(Base):
    """SQLAlchemy model for payment_methods table.

    Only the card brand, holder, last four digits and expiry are persisted.
    """

    __tablename__ = "payment_methods"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    card_holder = Column(String(255), nullable=False)
    brand = Column(String(32), nullable=False)
    last4 = Column(String(4), nullable=False)
    expiry_month = Column(Integer, nullable=False)
    expiry_year = Column(Integer, nullable=False)
    is_default = Column(Boolean, nullable=False, default=False, server_default="0")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user = relationship("UserDB", back_populates="payment_methods")


# ========== Pydantic Models ==========


class UserBase(BaseModel):
    """Fields shared by user create/read schemas."""

    username: str = Field(..., min_length=3, max_length=255)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    date_of_birth: str | None = None
    sex_at_birth: str | None = None


class UserCreate(UserBase):
    """Registration / admin user creation payload."""

    password: str = Field(..., min_length=8, max_length=128)
    role: UserRole = UserRole.USER


class UserUpdate(BaseModel):
    """Partial user update. Unset fields are left untouched."""

    username: str | None = Field(None, min_length=3, max_length=255)
    email: str | None = Field(None, pattern=EMAIL_PATTERN, max_length=255)
    password: str | None = Field(None, min_length=8, max_length=128)
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    billing_address: str | None = None
    billing_city: str | None = None
    billing_state: str | None = None
    billing_zip_code: str | None = None
    same_as_shipping: bool | None = None
    date_of_birth: str | None = None
    sex_at_birth: str | None = None
    profile_completed: bool | None = None
    role: UserRole | None = None


class UserPublic(UserBase):
    """User as returned by the API (never includes the password hash)."""

    id: int
    billing_address: str | None = None
    billing_city: str | None = None
    billing_state: str | None = None
    billing_zip_code: str | None = None
    same_as_shipping: bool = True
    profile_completed: bool = False
    role: str = UserRole.USER.value
    allergies: list[str] | None = None
    allergies_verified: bool = False

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class ProfileCompletion(BaseModel):
    """Payload of the complete-profile step.

    Billing fields may be omitted when ``same_as_shipping`` is set; they are
    then copied from the shipping address.
    """

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    phone: str = Field(..., min_length=10)
    address: str = Field(..., min_length=3)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str
    billing_address: str | None = None
    billing_city: str | None = None
    billing_state: str | None = None
    billing_zip_code: str | None = None
    same_as_shipping: bool = True
    date_of_birth: str = Field(..., min_length=1)
    sex_at_birth: str = Field(..., min_length=1)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        if not PHONE_PATTERN.match(v.strip()):
            raise ValueError("Please enter a valid US phone number")
        return v.strip()

    @field_validator("zip_code")
    @classmethod
    def validate_zip_code(cls, v: str) -> str:
        if not ZIP_CODE_PATTERN.match(v.strip()):
            raise ValueError("Please enter a valid ZIP code")
        return v.strip()

    @model_validator(mode="after")
    def fill_billing_address(self) -> "ProfileCompletion":
        """Copy shipping into billing, or require a full billing address."""
        if self.same_as_shipping:
            self.billing_address = self.address
            self.billing_city = self.city
            self.billing_state = self.state
            self.billing_zip_code = self.zip_code
            return self

        if (
            not self.billing_address
            or len(self.billing_address) < 3
            or not self.billing_city
            or not self.billing_state
            or not self.billing_zip_code
            or not ZIP_CODE_PATTERN.match(self.billing_zip_code)
        ):
            raise ValueError("Billing address is required when not same as shipping")
        return self


class AllergiesUpdate(BaseModel):
    """Replacement allergy list for a user."""

    allergies: list[str] = Field(default_factory=list, max_length=100)

    @field_validator("allergies")
    @classmethod
    def strip_blank_entries(cls, v: list[str]) -> list[str]:
        """Drop empty entries and duplicates while keeping order."""
        seen: dict[str, None] = {}
        for entry in v:
            cleaned = entry.strip()
            if cleaned and cleaned.lower() not in (k.lower() for k in seen):
                seen[cleaned] = None
        return list(seen)


class UserMedicationCreate(BaseModel):
    """Entry added to a user's personal medication list."""

    medication_id: int
    dosage: str | None = None
    frequency: str | None = None
    instructions: str | None = None
    notes: str | None = None
    active: bool = True
    source: MedicationSource = MedicationSource.MANUAL
    start_date: date | None = None
    end_date: date | None = None
    prescription_id: int | None = None

    @model_validator(mode="after")
    def validate_date_range(self) -> "UserMedicationCreate":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class UserMedicationUpdate(BaseModel):
    """Partial update of a personal medication entry."""

    dosage: str | None = None
    frequency: str | None = None
    instructions: str | None = None
    notes: str | None = None
    active: bool | None = None
    start_date: date | None = None
    end_date: date | None = None


class UserMedication(BaseModel):
    """Personal medication entry as returned by the API."""

    id: int
    user_id: int
    medication_id: int
    medication_name: str | None = None
    dosage: str | None = None
    frequency: str | None = None
    instructions: str | None = None
    notes: str | None = None
    active: bool = True
    source: str = MedicationSource.MANUAL.value
    start_date: str | None = None
    end_date: str | None = None
    prescription_id: int | None = None

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class PaymentMethodCreate(BaseModel):
    """Card details submitted by the client. The number is never stored."""

    user_id: int | None = None
    card_number: str = Field(..., min_length=12, max_length=23)
    card_holder: str = Field(..., min_length=1, max_length=255)
    expiry_date: str = Field(..., pattern=r"^(0[1-9]|1[0-2])/\d{2}$")
    cvv: str = Field(..., pattern=r"^\d{3,4}$")
    is_default: bool = False

    @field_validator("card_number")
    @classmethod
    def validate_card_number(cls, v: str) -> str:
        digits = re.sub(r"[\s-]", "", v)
        if not digits.isdigit() or not luhn_valid(digits):
            raise ValueError("Invalid card number")
        return digits

    @field_validator("expiry_date")
    @classmethod
    def validate_not_expired(cls, v: str) -> str:
        month, year = v.split("/")
        now = datetime.now(timezone.utc)
        if (2000 + int(year), int(month)) < (now.year, now.month):
            raise ValueError("Card has expired")
        return v


class PaymentMethod(BaseModel):
    """Stored payment method."""

    id: int
    user_id: int
    card_holder: str
    brand: str
    last4: str
    expiry_month: int
    expiry_year: int
    is_default: bool = False

    class Config:
        """Pydantic configuration."""

        from_attributes = True


def luhn_valid(digits: str) -> bool:
    """Check a card number with the Luhn checksum."""
    total = 0
    for index, char in enumerate(reversed(digits)):
        value = int(char)
        if index % 2 == 1:
            value *= 2
            if value > 9:
                value -= 9
        total += value
    return total % 10 == 0


def card_brand(digits: str) -> str:
    """Best-effort card network from the leading digits."""
    if digits.startswith("4"):
        return "visa"
    if digits[:2] in {"51", "52", "53", "54", "55"} or 2221 <= int(digits[:4]) <= 2720:
        return "mastercard"
    if digits[:2] in {"34", "37"}:
        return "amex"
    if digits.startswith("6011") or digits.startswith("65"):
        return "discover"
    return "card"
