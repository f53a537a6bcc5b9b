"""Prescription, verification and refill models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field
from sqlalchemy import (
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


class PrescriptionStatus(str, Enum):
    """Review outcome of an uploaded prescription."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class VerificationStatus(str, Enum):
    """Pharmacist verification state."""

    UNVERIFIED = "unverified"
    VERIFIED = "verified"
    FAILED = "failed"


class RefillStatus(str, Enum):
    """Refill request lifecycle."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    COMPLETED = "completed"


# ========== SQLAlchemy ORM Models ==========


class PrescriptionDB(Base):
    """SQLAlchemy model for prescriptions table."""

    __tablename__ = "prescriptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    doctor_name = Column(String(255), nullable=True)
    doctor_phone = Column(String(32), nullable=True)
    upload_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    status = Column(
        String(20),
        nullable=False,
        default=PrescriptionStatus.PENDING.value,
        server_default=PrescriptionStatus.PENDING.value,
    )
    file_url = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Pharmacist verification
    verification_status = Column(
        String(20),
        nullable=False,
        default=VerificationStatus.UNVERIFIED.value,
        server_default=VerificationStatus.UNVERIFIED.value,
    )
    verified_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    verification_date = Column(DateTime(timezone=True), nullable=True)
    verification_method = Column(String(64), nullable=True)
    verification_notes = Column(Text, nullable=True)
    security_code = Column(String(16), nullable=True)
    revoked = Column(Boolean, nullable=False, default=False, server_default="0")
    revoked_reason = Column(Text, nullable=True)

    orders = relationship("OrderDB", back_populates="prescription")
    refill_requests = relationship("RefillRequestDB", back_populates="prescription")

    __table_args__ = (
        CheckConstraint(
            f"status IN ('{PrescriptionStatus.PENDING.value}', "
            f"'{PrescriptionStatus.APPROVED.value}', '{PrescriptionStatus.REJECTED.value}')",
            name="status",
        ),
        CheckConstraint(
            f"verification_status IN ('{VerificationStatus.UNVERIFIED.value}', "
            f"'{VerificationStatus.VERIFIED.value}', '{VerificationStatus.FAILED.value}')",
            name="verification_status",
        ),
        Index("idx_prescriptions_verification", "verification_status", "upload_date"),
    )


class RefillRequestDB(Base):
    """SQLAlchemy model for refill_requests table."""

    __tablename__ = "refill_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    prescription_id = Column(Integer, ForeignKey("prescriptions.id"), nullable=False, index=True)
    medication_id = Column(Integer, ForeignKey("medications.id"), nullable=True)
    request_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    status = Column(
        String(20),
        nullable=False,
        default=RefillStatus.PENDING.value,
        server_default=RefillStatus.PENDING.value,
    )
    notes = Column(Text, nullable=True)

    prescription = relationship("PrescriptionDB", back_populates="refill_requests")
    notifications = relationship("RefillNotificationDB", back_populates="refill_request")


class RefillNotificationDB(Base):
    """SQLAlchemy model for refill_notifications table."""

    __tablename__ = "refill_notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    refill_request_id = Column(Integer, ForeignKey("refill_requests.id"), nullable=False)
    message = Column(Text, nullable=False)
    sent_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    read = Column(Boolean, nullable=False, default=False, server_default="0")

    refill_request = relationship("RefillRequestDB", back_populates="notifications")


# ========== Pydantic Models ==========


class PrescriptionCreate(BaseModel):
    """Prescription upload payload."""

    user_id: int
    doctor_name: str | None = Field(None, max_length=255)
    doctor_phone: str | None = Field(None, max_length=32)
    file_url: str | None = None
    notes: str | None = None


class PrescriptionUpdate(BaseModel):
    """Partial prescription update."""

    doctor_name: str | None = Field(None, max_length=255)
    doctor_phone: str | None = Field(None, max_length=32)
    file_url: str | None = None
    notes: str | None = None
    status: PrescriptionStatus | None = None


class Prescription(BaseModel):
    """Prescription as returned by the API."""

    id: int
    user_id: int
    doctor_name: str | None = None
    doctor_phone: str | None = None
    upload_date: datetime | None = None
    status: str = PrescriptionStatus.PENDING.value
    file_url: str | None = None
    notes: str | None = None
    verification_status: str = VerificationStatus.UNVERIFIED.value
    verified_by: int | None = None
    verification_date: datetime | None = None
    verification_method: str | None = None
    verification_notes: str | None = None
    security_code: str | None = None
    revoked: bool = False
    revoked_reason: str | None = None

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class VerifyPrescriptionRequest(BaseModel):
    """Pharmacist verification decision."""

    verification_status: VerificationStatus = VerificationStatus.VERIFIED
    verification_method: str = Field("manual", min_length=1, max_length=64)
    verification_notes: str | None = None
    status: PrescriptionStatus | None = PrescriptionStatus.APPROVED


class RevokePrescriptionRequest(BaseModel):
    """Prescription revocation payload."""

    reason: str = Field(..., min_length=5)


class RefillRequestCreate(BaseModel):
    """Refill request payload."""

    prescription_id: int
    medication_id: int | None = None
    notes: str | None = None


class RefillRequestUpdate(BaseModel):
    """Admin decision on a refill request."""

    status: RefillStatus
    notes: str | None = None


class RefillRequest(BaseModel):
    """Refill request as returned by the API."""

    id: int
    user_id: int
    prescription_id: int
    medication_id: int | None = None
    request_date: datetime | None = None
    status: str = RefillStatus.PENDING.value
    notes: str | None = None

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class RefillNotification(BaseModel):
    """Notification sent to a user about a refill request."""

    id: int
    user_id: int
    refill_request_id: int
    message: str
    sent_date: datetime | None = None
    read: bool = False

    class Config:
        """Pydantic configuration."""

        from_attributes = True
