"""Integration tests for insurance, payment methods, medication lists and onboarding."""

from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy.models.insurance import (
    InsuranceCreate,
    InsuranceProviderCreate,
    InsuranceProviderUpdate,
    InsuranceUpdate,
)
from pharmacy.models.prescription import PrescriptionCreate
from pharmacy.models.user import (
    MedicationSource,
    PaymentMethodCreate,
    UserMedicationCreate,
    UserMedicationUpdate,
)
from pharmacy.services.insurance import InsuranceProviderService, InsuranceService
from pharmacy.services.onboarding import OnboardingStep, onboarding_progress
from pharmacy.services.payment_methods import PaymentMethodService
from pharmacy.services.prescriptions import PrescriptionService
from pharmacy.services.user_medications import UserMedicationService, to_user_medication


def _card(number: str = "4111111111111111", is_default: bool = False) -> PaymentMethodCreate:
    return PaymentMethodCreate(
        card_number=number,
        card_holder="Pat Jones",
        expiry_date="12/99",
        cvv="123",
        is_default=is_default,
    )


@pytest.mark.integration
class TestInsurance:
    """Integration tests for insurance records."""

    @pytest.mark.asyncio
    async def test_single_primary_per_user(self, async_db_session: AsyncSession, patient) -> None:
        """Test that a new primary record demotes the previous one."""
        service = InsuranceService(async_db_session)
        first = await service.create_insurance(
            InsuranceCreate(user_id=patient.id, provider="Aetna", member_id="A1", is_primary=True)
        )
        second = await service.create_insurance(
            InsuranceCreate(user_id=patient.id, provider="Cigna", member_id="C1", is_primary=True)
        )

        await async_db_session.refresh(first)
        assert first.is_primary is False
        assert second.is_primary is True

    @pytest.mark.asyncio
    async def test_update_to_primary(self, async_db_session: AsyncSession, patient) -> None:
        """Test that promoting a record through update clears the others."""
        service = InsuranceService(async_db_session)
        first = await service.create_insurance(
            InsuranceCreate(user_id=patient.id, provider="Aetna", member_id="A1", is_primary=True)
        )
        second = await service.create_insurance(
            InsuranceCreate(user_id=patient.id, provider="Cigna", member_id="C1")
        )

        await service.update_insurance(second.id, InsuranceUpdate(is_primary=True))

        records = await service.insurance_for_user(patient.id)
        assert [(r.id, r.is_primary) for r in records] == [(second.id, True), (first.id, False)]

    @pytest.mark.asyncio
    async def test_primary_is_per_user(
        self, async_db_session: AsyncSession, patient, make_user
    ) -> None:
        """Test that another user's primary record is untouched."""
        other = await make_user("other")
        service = InsuranceService(async_db_session)
        theirs = await service.create_insurance(
            InsuranceCreate(user_id=other.id, provider="Aetna", member_id="A1", is_primary=True)
        )

        await service.create_insurance(
            InsuranceCreate(user_id=patient.id, provider="Cigna", member_id="C1", is_primary=True)
        )

        await async_db_session.refresh(theirs)
        assert theirs.is_primary is True

    @pytest.mark.asyncio
    async def test_provider_directory(self, async_db_session: AsyncSession) -> None:
        """Test provider creation, deactivation filtering and deletion."""
        service = InsuranceProviderService(async_db_session)
        aetna = await service.create_provider(InsuranceProviderCreate(name="Aetna"))
        cigna = await service.create_provider(InsuranceProviderCreate(name="Cigna"))

        await service.update_provider(cigna.id, InsuranceProviderUpdate(is_active=False))

        assert [p.name for p in await service.list_providers(active=True)] == ["Aetna"]
        assert [p.name for p in await service.list_providers()] == ["Aetna", "Cigna"]
        assert await service.delete_provider(aetna.id) is True
        assert await service.delete_provider(aetna.id) is False


@pytest.mark.integration
class TestPaymentMethods:
    """Integration tests for saved cards."""

    @pytest.mark.asyncio
    async def test_only_metadata_stored(self, async_db_session: AsyncSession, patient) -> None:
        """Test that the brand and last four digits are kept, not the number."""
        method = await PaymentMethodService(async_db_session).add_method(patient.id, _card())

        assert method.brand == "visa"
        assert method.last4 == "1111"
        assert method.expiry_month == 12
        assert method.expiry_year == 2099
        assert not hasattr(method, "card_number")

    @pytest.mark.asyncio
    async def test_first_card_becomes_default(self, async_db_session: AsyncSession, patient) -> None:
        """Test that the first saved card is the default."""
        service = PaymentMethodService(async_db_session)

        first = await service.add_method(patient.id, _card())
        second = await service.add_method(patient.id, _card("5555555555554444"))

        assert first.is_default is True
        assert second.is_default is False

    @pytest.mark.asyncio
    async def test_new_default_replaces_old(self, async_db_session: AsyncSession, patient) -> None:
        """Test that only one card is the default."""
        service = PaymentMethodService(async_db_session)
        first = await service.add_method(patient.id, _card())

        second = await service.add_method(patient.id, _card("5555555555554444", is_default=True))

        methods = await service.methods_for_user(patient.id)
        assert [(m.id, m.is_default) for m in methods] == [(second.id, True), (first.id, False)]

    @pytest.mark.asyncio
    async def test_delete_method(self, async_db_session: AsyncSession, patient) -> None:
        """Test that deleting removes the card."""
        service = PaymentMethodService(async_db_session)
        method = await service.add_method(patient.id, _card())

        assert await service.delete_method(method.id) is True
        assert await service.count_for_user(patient.id) == 0


@pytest.mark.integration
class TestUserMedications:
    """Integration tests for personal medication lists."""

    @pytest.mark.asyncio
    async def test_add_entry_includes_medication_name(
        self, async_db_session: AsyncSession, patient, make_medication
    ) -> None:
        """Test that entries expose the catalog medication name."""
        med = await make_medication("Metformin")

        entry = await UserMedicationService(async_db_session).add_entry(
            patient.id,
            UserMedicationCreate(
                medication_id=med.id, dosage="500mg", start_date=date(2026, 1, 1)
            ),
        )
        view = to_user_medication(entry)

        assert view.medication_name == "Metformin"
        assert view.start_date == "2026-01-01"
        assert view.source == MedicationSource.MANUAL.value

    @pytest.mark.asyncio
    async def test_unknown_medication_rejected(
        self, async_db_session: AsyncSession, patient
    ) -> None:
        """Test that entries must reference the catalog."""
        with pytest.raises(ValueError, match="does not exist"):
            await UserMedicationService(async_db_session).add_entry(
                patient.id, UserMedicationCreate(medication_id=999)
            )

    @pytest.mark.asyncio
    async def test_end_before_start_rejected(
        self, async_db_session: AsyncSession, patient, make_medication
    ) -> None:
        """Test that an update may not end an entry before it starts."""
        med = await make_medication()
        service = UserMedicationService(async_db_session)
        entry = await service.add_entry(
            patient.id, UserMedicationCreate(medication_id=med.id, start_date=date(2026, 5, 1))
        )

        with pytest.raises(ValueError, match="end_date"):
            await service.update_entry(entry.id, UserMedicationUpdate(end_date=date(2026, 4, 1)))

    @pytest.mark.asyncio
    async def test_toggle_and_filter(
        self, async_db_session: AsyncSession, patient, make_medication
    ) -> None:
        """Test that toggling moves an entry between active and inactive lists."""
        med = await make_medication()
        service = UserMedicationService(async_db_session)
        entry = await service.add_entry(patient.id, UserMedicationCreate(medication_id=med.id))

        toggled = await service.toggle_active(entry.id)

        assert toggled.active is False
        assert await service.entries_for_user(patient.id, active=True) == []
        assert [e.id for e in await service.entries_for_user(patient.id, active=False)] == [entry.id]


@pytest.mark.integration
class TestOnboardingProgress:
    """Integration tests for wizard progress from stored records."""

    @pytest.mark.asyncio
    async def test_new_user(self, async_db_session: AsyncSession, make_user) -> None:
        """Test that a fresh account has nothing completed."""
        user = await make_user("newbie", profile_completed=False)

        progress = await onboarding_progress(async_db_session, user)

        assert progress.completed_count == 0
        assert progress.next_step == OnboardingStep.PROFILE

    @pytest.mark.asyncio
    async def test_progress_follows_records(
        self, async_db_session: AsyncSession, patient, make_medication
    ) -> None:
        """Test that stored medications, prescriptions and cards complete steps."""
        med = await make_medication()
        await UserMedicationService(async_db_session).add_entry(
            patient.id, UserMedicationCreate(medication_id=med.id)
        )
        await PrescriptionService(async_db_session).create_prescription(
            PrescriptionCreate(user_id=patient.id)
        )
        await PaymentMethodService(async_db_session).add_method(patient.id, _card())

        progress = await onboarding_progress(async_db_session, patient)

        assert progress.completed_count == 4
        assert progress.next_step == OnboardingStep.CHECKOUT
        assert progress.percent == 80
