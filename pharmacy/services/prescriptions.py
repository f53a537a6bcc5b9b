"""Prescription upload, pharmacist verification and refills."""

import secrets
import string
from datetime import datetime, timezone

import structlog
from sqlalchemy import func, select

from pharmacy.models.order import OrderDB, OrderStatus
from pharmacy.models.prescription import (
    PrescriptionCreate,
    PrescriptionDB,
    PrescriptionStatus,
    PrescriptionUpdate,
    RefillNotificationDB,
    RefillRequestCreate,
    RefillRequestDB,
    RefillRequestUpdate,
    VerificationStatus,
    VerifyPrescriptionRequest,
)
from pharmacy.services.repository import Repository

logger = structlog.get_logger(__name__)

SECURITY_CODE_LENGTH = 8
SECURITY_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_security_code(length: int = SECURITY_CODE_LENGTH) -> str:
    """Random uppercase alphanumeric code printed on verified prescriptions."""
    return "".join(secrets.choice(SECURITY_CODE_ALPHABET) for _ in range(length))


class PrescriptionService(Repository):
    """Manages prescriptions and their verification lifecycle."""

    async def get_prescription(self, prescription_id: int) -> PrescriptionDB | None:
        return await self.db_session.get(PrescriptionDB, prescription_id)

    async def prescriptions_for_user(self, user_id: int) -> list[PrescriptionDB]:
        query = (
            select(PrescriptionDB)
            .where(PrescriptionDB.user_id == user_id)
            .order_by(PrescriptionDB.upload_date.desc(), PrescriptionDB.id.desc())
        )
        result = await self.db_session.execute(query)
        return list(result.scalars().all())

    async def create_prescription(self, data: PrescriptionCreate) -> PrescriptionDB:
        prescription = PrescriptionDB(**data.model_dump())
        await self._persist(prescription)

        logger.info(
            "prescription_uploaded", prescription_id=prescription.id, user_id=prescription.user_id
        )
        return prescription

    async def update_prescription(
        self, prescription_id: int, data: PrescriptionUpdate
    ) -> PrescriptionDB | None:
        prescription = await self.get_prescription(prescription_id)
        if prescription is None:
            return None

        self._apply_changes(prescription, data)
        await self._persist(prescription)
        return prescription

    async def verification_queue(
        self, status: VerificationStatus = VerificationStatus.UNVERIFIED
    ) -> list[PrescriptionDB]:
        """Prescriptions in a verification state, oldest upload first."""
        query = (
            select(PrescriptionDB)
            .where(PrescriptionDB.verification_status == status.value)
            .order_by(PrescriptionDB.upload_date, PrescriptionDB.id)
        )
        result = await self.db_session.execute(query)
        return list(result.scalars().all())

    async def verify_prescription(
        self, prescription_id: int, verifier_id: int, decision: VerifyPrescriptionRequest
    ) -> PrescriptionDB | None:
        """Record a pharmacist's verification decision.

        Args:
            prescription_id: Prescription under review
            verifier_id: Admin performing the verification
            decision: Verification outcome and notes

        Returns:
            Updated prescription, or None when it does not exist

        Raises:
            ValueError: If the prescription has been revoked
        """
        prescription = await self.get_prescription(prescription_id)
        if prescription is None:
            return None
        if prescription.revoked:
            raise ValueError("Revoked prescriptions cannot be verified")

        prescription.verification_status = decision.verification_status.value
        prescription.verification_method = decision.verification_method
        prescription.verification_notes = decision.verification_notes
        prescription.verified_by = verifier_id
        prescription.verification_date = datetime.now(timezone.utc)
        if decision.status is not None:
            prescription.status = decision.status.value
        if not prescription.security_code:
            prescription.security_code = generate_security_code()

        await self._persist(prescription)

        logger.info(
            "prescription_verified",
            prescription_id=prescription_id,
            verified_by=verifier_id,
            verification_status=prescription.verification_status,
        )
        return prescription

    async def revoke_prescription(
        self, prescription_id: int, reason: str
    ) -> tuple[PrescriptionDB, int] | None:
        """Revoke a prescription and every pending order placed against it.

        Returns:
            Tuple of (prescription, number of orders revoked), or None when
            the prescription does not exist
        """
        prescription = await self.get_prescription(prescription_id)
        if prescription is None:
            return None

        prescription.revoked = True
        prescription.revoked_reason = reason
        prescription.status = PrescriptionStatus.REJECTED.value

        result = await self.db_session.execute(
            select(OrderDB).where(
                OrderDB.prescription_id == prescription_id,
                OrderDB.status == OrderStatus.PENDING.value,
            )
        )
        pending = list(result.scalars().all())
        for order in pending:
            order.status = OrderStatus.REVOKED.value
        orders_revoked = len(pending)
        await self._persist(prescription)

        logger.warning(
            "prescription_revoked",
            prescription_id=prescription_id,
            orders_revoked=orders_revoked,
        )
        return prescription, orders_revoked

    async def regenerate_security_code(self, prescription_id: int) -> PrescriptionDB | None:
        prescription = await self.get_prescription(prescription_id)
        if prescription is None:
            return None

        prescription.security_code = generate_security_code()
        await self._persist(prescription)
        return prescription

    async def count_for_user(self, user_id: int) -> int:
        result = await self.db_session.execute(
            select(func.count())
            .select_from(PrescriptionDB)
            .where(PrescriptionDB.user_id == user_id)
        )
        return result.scalar_one()


class RefillService(Repository):
    """Refill requests and the notifications they generate."""

    async def get_refill(self, refill_id: int) -> RefillRequestDB | None:
        return await self.db_session.get(RefillRequestDB, refill_id)

    async def create_refill(self, user_id: int, data: RefillRequestCreate) -> RefillRequestDB:
        """Request a refill of one of the user's prescriptions.

        Raises:
            ValueError: If the prescription is missing, belongs to someone
                else, or has been revoked
        """
        prescription = await self.db_session.get(PrescriptionDB, data.prescription_id)
        if prescription is None or prescription.user_id != user_id:
            raise ValueError("Prescription not found for this user")
        if prescription.revoked:
            raise ValueError("Cannot request a refill for a revoked prescription")

        refill = RefillRequestDB(user_id=user_id, **data.model_dump())
        await self._persist(refill)

        logger.info("refill_requested", refill_id=refill.id, prescription_id=data.prescription_id)
        return refill

    async def refills_for_user(self, user_id: int) -> list[RefillRequestDB]:
        query = (
            select(RefillRequestDB)
            .where(RefillRequestDB.user_id == user_id)
            .order_by(RefillRequestDB.request_date.desc(), RefillRequestDB.id.desc())
        )
        result = await self.db_session.execute(query)
        return list(result.scalars().all())

    async def update_refill(
        self, refill_id: int, data: RefillRequestUpdate
    ) -> RefillRequestDB | None:
        """Change a refill's status and notify its owner."""
        refill = await self.get_refill(refill_id)
        if refill is None:
            return None

        refill.status = data.status.value
        if data.notes is not None:
            refill.notes = data.notes

        message = f"Your refill request #{refill.id} is now {data.status.value}."
        if data.notes:
            message = f"{message} {data.notes}"
        notification = RefillNotificationDB(
            user_id=refill.user_id, refill_request_id=refill.id, message=message
        )
        await self._persist(refill, notification)

        logger.info("refill_status_changed", refill_id=refill_id, status=refill.status)
        return refill

    async def notifications_for_user(self, user_id: int) -> list[RefillNotificationDB]:
        query = (
            select(RefillNotificationDB)
            .where(RefillNotificationDB.user_id == user_id)
            .order_by(RefillNotificationDB.sent_date.desc(), RefillNotificationDB.id.desc())
        )
        result = await self.db_session.execute(query)
        return list(result.scalars().all())

    async def get_notification(self, notification_id: int) -> RefillNotificationDB | None:
        return await self.db_session.get(RefillNotificationDB, notification_id)

    async def mark_notification_read(self, notification_id: int) -> RefillNotificationDB | None:
        notification = await self.get_notification(notification_id)
        if notification is None:
            return None

        notification.read = True
        await self._persist(notification)
        return notification
