"""Integration tests for prescription verification, revocation and refills."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy.models.order import OrderCreate, OrderStatus
from pharmacy.models.prescription import (
    PrescriptionCreate,
    PrescriptionStatus,
    RefillRequestCreate,
    RefillRequestUpdate,
    RefillStatus,
    VerificationStatus,
    VerifyPrescriptionRequest,
)
from pharmacy.services.orders import OrderService
from pharmacy.services.prescriptions import (
    SECURITY_CODE_ALPHABET,
    PrescriptionService,
    RefillService,
    generate_security_code,
)


@pytest.fixture
def prescriptions(async_db_session: AsyncSession) -> PrescriptionService:
    return PrescriptionService(async_db_session)


@pytest.fixture
def refills(async_db_session: AsyncSession) -> RefillService:
    return RefillService(async_db_session)


async def _order(session: AsyncSession, user_id: int, prescription_id: int, status: OrderStatus):
    return await OrderService(session).create_order(
        OrderCreate(
            user_id=user_id,
            status=status,
            shipping_method="ground",
            shipping_cost=0,
            total=10.0,
            prescription_id=prescription_id,
        )
    )


@pytest.mark.integration
class TestVerification:
    """Integration tests for pharmacist verification."""

    def test_security_code_format(self) -> None:
        """Test that security codes are eight uppercase alphanumerics."""
        code = generate_security_code()

        assert len(code) == 8
        assert set(code) <= set(SECURITY_CODE_ALPHABET)

    @pytest.mark.asyncio
    async def test_new_prescription_awaits_verification(self, prescriptions, patient) -> None:
        """Test that uploads start pending and unverified in the queue."""
        prescription = await prescriptions.create_prescription(
            PrescriptionCreate(user_id=patient.id, doctor_name="Dr. House")
        )

        queue = await prescriptions.verification_queue()

        assert prescription.status == PrescriptionStatus.PENDING.value
        assert prescription.verification_status == VerificationStatus.UNVERIFIED.value
        assert [p.id for p in queue] == [prescription.id]

    @pytest.mark.asyncio
    async def test_verify_records_decision(self, prescriptions, patient, admin) -> None:
        """Test that verification stores the verifier and issues a security code."""
        prescription = await prescriptions.create_prescription(PrescriptionCreate(user_id=patient.id))

        verified = await prescriptions.verify_prescription(
            prescription.id,
            admin.id,
            VerifyPrescriptionRequest(verification_method="phone", verification_notes="Called office"),
        )

        assert verified.verification_status == VerificationStatus.VERIFIED.value
        assert verified.status == PrescriptionStatus.APPROVED.value
        assert verified.verified_by == admin.id
        assert verified.verification_date is not None
        assert len(verified.security_code) == 8
        assert await prescriptions.verification_queue() == []

    @pytest.mark.asyncio
    async def test_security_code_kept_on_reverification(self, prescriptions, patient, admin) -> None:
        """Test that re-verifying keeps the existing security code."""
        prescription = await prescriptions.create_prescription(PrescriptionCreate(user_id=patient.id))
        first = await prescriptions.verify_prescription(
            prescription.id, admin.id, VerifyPrescriptionRequest()
        )
        code = first.security_code

        again = await prescriptions.verify_prescription(
            prescription.id,
            admin.id,
            VerifyPrescriptionRequest(verification_status=VerificationStatus.FAILED, status=None),
        )

        assert again.security_code == code
        assert again.verification_status == VerificationStatus.FAILED.value
        assert again.status == PrescriptionStatus.APPROVED.value

    @pytest.mark.asyncio
    async def test_regenerate_security_code(self, prescriptions, patient) -> None:
        """Test that a fresh security code can be issued."""
        prescription = await prescriptions.create_prescription(PrescriptionCreate(user_id=patient.id))

        updated = await prescriptions.regenerate_security_code(prescription.id)

        assert len(updated.security_code) == 8


@pytest.mark.integration
class TestRevocation:
    """Integration tests for prescription revocation."""

    @pytest.mark.asyncio
    async def test_revoke_cascades_to_pending_orders(
        self, async_db_session, prescriptions, patient
    ) -> None:
        """Test that revoking revokes pending orders but leaves shipped ones."""
        prescription = await prescriptions.create_prescription(PrescriptionCreate(user_id=patient.id))
        pending = await _order(async_db_session, patient.id, prescription.id, OrderStatus.PENDING)
        shipped = await _order(async_db_session, patient.id, prescription.id, OrderStatus.SHIPPED)

        revoked, count = await prescriptions.revoke_prescription(prescription.id, "Forged signature")

        assert count == 1
        assert revoked.revoked is True
        assert revoked.revoked_reason == "Forged signature"
        assert revoked.status == PrescriptionStatus.REJECTED.value
        await async_db_session.refresh(pending)
        await async_db_session.refresh(shipped)
        assert pending.status == OrderStatus.REVOKED.value
        assert shipped.status == OrderStatus.SHIPPED.value

    @pytest.mark.asyncio
    async def test_revoked_prescription_cannot_be_verified(
        self, prescriptions, patient, admin
    ) -> None:
        """Test that verification is refused after revocation."""
        prescription = await prescriptions.create_prescription(PrescriptionCreate(user_id=patient.id))
        await prescriptions.revoke_prescription(prescription.id, "Patient request")

        with pytest.raises(ValueError, match="Revoked"):
            await prescriptions.verify_prescription(
                prescription.id, admin.id, VerifyPrescriptionRequest()
            )

    @pytest.mark.asyncio
    async def test_revoke_missing_prescription(self, prescriptions) -> None:
        """Test that revoking an unknown prescription returns None."""
        assert await prescriptions.revoke_prescription(404, "Does not exist") is None


@pytest.mark.integration
class TestRefills:
    """Integration tests for refill requests and notifications."""

    @pytest.mark.asyncio
    async def test_request_refill(self, prescriptions, refills, patient) -> None:
        """Test that users can request refills of their prescriptions."""
        prescription = await prescriptions.create_prescription(PrescriptionCreate(user_id=patient.id))

        refill = await refills.create_refill(
            patient.id, RefillRequestCreate(prescription_id=prescription.id, notes="Running low")
        )

        assert refill.status == RefillStatus.PENDING.value
        assert refill.user_id == patient.id
        assert [r.id for r in await refills.refills_for_user(patient.id)] == [refill.id]

    @pytest.mark.asyncio
    async def test_refill_of_foreign_prescription_rejected(
        self, prescriptions, refills, patient, make_user
    ) -> None:
        """Test that refills require owning the prescription."""
        other = await make_user("other")
        prescription = await prescriptions.create_prescription(PrescriptionCreate(user_id=other.id))

        with pytest.raises(ValueError, match="not found for this user"):
            await refills.create_refill(
                patient.id, RefillRequestCreate(prescription_id=prescription.id)
            )

    @pytest.mark.asyncio
    async def test_refill_of_revoked_prescription_rejected(
        self, prescriptions, refills, patient
    ) -> None:
        """Test that revoked prescriptions cannot be refilled."""
        prescription = await prescriptions.create_prescription(PrescriptionCreate(user_id=patient.id))
        await prescriptions.revoke_prescription(prescription.id, "Expired script")

        with pytest.raises(ValueError, match="revoked"):
            await refills.create_refill(
                patient.id, RefillRequestCreate(prescription_id=prescription.id)
            )

    @pytest.mark.asyncio
    async def test_status_change_notifies_owner(self, prescriptions, refills, patient) -> None:
        """Test that updating a refill creates an unread notification."""
        prescription = await prescriptions.create_prescription(PrescriptionCreate(user_id=patient.id))
        refill = await refills.create_refill(
            patient.id, RefillRequestCreate(prescription_id=prescription.id)
        )

        await refills.update_refill(
            refill.id, RefillRequestUpdate(status=RefillStatus.APPROVED, notes="Ready Friday.")
        )
        notifications = await refills.notifications_for_user(patient.id)

        assert len(notifications) == 1
        assert notifications[0].message == (
            f"Your refill request #{refill.id} is now approved. Ready Friday."
        )
        assert notifications[0].read is False

        marked = await refills.mark_notification_read(notifications[0].id)
        assert marked.read is True
