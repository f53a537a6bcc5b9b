"""A user's personal medication list."""

import structlog
from sqlalchemy import delete, func, select

from pharmacy.models.catalog import MedicationDB
from pharmacy.models.user import (
    UserMedication,
    UserMedicationCreate,
    UserMedicationDB,
    UserMedicationUpdate,
)
from pharmacy.services.repository import Repository

logger = structlog.get_logger(__name__)


def to_user_medication(row: UserMedicationDB) -> UserMedication:
    """API view of an entry, including the catalog medication name."""
    view = UserMedication.model_validate(row)
    if row.medication is not None:
        view.medication_name = row.medication.name
    return view


class UserMedicationService(Repository):
    """Manages entries on users' personal medication lists."""

    async def get_entry(self, entry_id: int) -> UserMedicationDB | None:
        return await self.db_session.get(UserMedicationDB, entry_id)

    async def entries_for_user(
        self, user_id: int, active: bool | None = None
    ) -> list[UserMedicationDB]:
        query = select(UserMedicationDB).where(UserMedicationDB.user_id == user_id)
        if active is not None:
            query = query.where(UserMedicationDB.active.is_(active))
        query = query.order_by(UserMedicationDB.active.desc(), UserMedicationDB.id)

        result = await self.db_session.execute(query)
        return list(result.scalars().unique().all())

    async def add_entry(self, user_id: int, data: UserMedicationCreate) -> UserMedicationDB:
        """Add a catalog medication to a user's list.

        Raises:
            ValueError: If the medication is not in the catalog
        """
        if await self.db_session.get(MedicationDB, data.medication_id) is None:
            raise ValueError(f"Medication {data.medication_id} does not exist")

        entry = UserMedicationDB(user_id=user_id, **data.model_dump(mode="json"))
        await self._save(entry)

        logger.info(
            "user_medication_added",
            user_id=user_id,
            medication_id=data.medication_id,
            source=entry.source,
        )
        return entry

    async def update_entry(
        self, entry_id: int, data: UserMedicationUpdate
    ) -> UserMedicationDB | None:
        entry = await self.get_entry(entry_id)
        if entry is None:
            return None

        self._apply_changes(entry, data)
        if entry.start_date and entry.end_date and entry.end_date < entry.start_date:
            raise ValueError("end_date must not be before start_date")

        await self._save(entry)
        return entry

    async def toggle_active(self, entry_id: int) -> UserMedicationDB | None:
        entry = await self.get_entry(entry_id)
        if entry is None:
            return None

        entry.active = not entry.active
        await self._save(entry)
        return entry

    async def delete_entry(self, entry_id: int) -> bool:
        result = await self.db_session.execute(
            delete(UserMedicationDB).where(UserMedicationDB.id == entry_id)
        )
        await self.db_session.commit()
        return result.rowcount > 0

    async def _save(self, entry: UserMedicationDB) -> None:
        await self._persist(entry)
        await self.db_session.refresh(entry, attribute_names=["medication"])

    async def count_for_user(self, user_id: int) -> int:
        result = await self.db_session.execute(
            select(func.count())
            .select_from(UserMedicationDB)
            .where(UserMedicationDB.user_id == user_id)
        )
        return result.scalar_one()
