"""Medication catalog and category services."""

import structlog
from sqlalchemy import delete, func, or_, select, update

from pharmacy.models.catalog import (
    CategoryCreate,
    CategoryDB,
    MedicationCreate,
    MedicationDB,
    MedicationUpdate,
)
from pharmacy.services.repository import Repository

logger = structlog.get_logger(__name__)


class CatalogService(Repository):
    """Reads and maintains the medication catalog."""

    async def list_medications(self, limit: int = 100, offset: int = 0) -> list[MedicationDB]:
        query = select(MedicationDB).order_by(MedicationDB.name).limit(limit).offset(offset)
        result = await self.db_session.execute(query)
        return list(result.scalars().all())

    async def get_medication(self, medication_id: int) -> MedicationDB | None:
        return await self.db_session.get(MedicationDB, medication_id)

    async def get_medication_by_name(self, name: str) -> MedicationDB | None:
        query = select(MedicationDB).where(func.lower(MedicationDB.name) == name.lower()).limit(1)
        result = await self.db_session.execute(query)
        return result.scalars().first()

    async def get_medications_by_ids(self, medication_ids: list[int]) -> dict[int, MedicationDB]:
        """Load several medications at once, keyed by id."""
        if not medication_ids:
            return {}
        query = select(MedicationDB).where(MedicationDB.id.in_(set(medication_ids)))
        result = await self.db_session.execute(query)
        return {med.id: med for med in result.scalars().all()}

    async def search_medications(self, term: str, limit: int = 50) -> list[MedicationDB]:
        """Case-insensitive substring search on name, generic name and brand name.

        Args:
            term: Search text (must not be blank)
            limit: Maximum number of results

        Returns:
            Matching medications ordered by popularity

        Raises:
            ValueError: If the search term is blank
        """
        term = term.strip()
        if not term:
            raise ValueError("Search query is required")

        pattern = f"%{term.lower()}%"
        query = (
            select(MedicationDB)
            .where(
                or_(
                    func.lower(MedicationDB.name).like(pattern),
                    func.lower(MedicationDB.generic_name).like(pattern),
                    func.lower(MedicationDB.brand_name).like(pattern),
                )
            )
            .order_by(MedicationDB.popularity.desc(), MedicationDB.name)
            .limit(limit)
        )
        result = await self.db_session.execute(query)
        return list(result.scalars().all())

    async def popular_medications(self, limit: int = 4) -> list[MedicationDB]:
        query = (
            select(MedicationDB)
            .order_by(MedicationDB.popularity.desc(), MedicationDB.id)
            .limit(limit)
        )
        result = await self.db_session.execute(query)
        return list(result.scalars().all())

    async def medications_by_category(self, category: str) -> list[MedicationDB]:
        query = (
            select(MedicationDB)
            .where(func.lower(MedicationDB.category) == category.lower())
            .order_by(MedicationDB.popularity.desc(), MedicationDB.name)
        )
        result = await self.db_session.execute(query)
        return list(result.scalars().all())

    async def create_medication(self, data: MedicationCreate) -> MedicationDB:
        medication = MedicationDB(**data.model_dump())
        await self._persist(medication)

        logger.info("medication_created", medication_id=medication.id, name=medication.name)
        return medication

    async def update_medication(
        self, medication_id: int, data: MedicationUpdate
    ) -> MedicationDB | None:
        medication = await self.get_medication(medication_id)
        if medication is None:
            return None

        changes = self._apply_changes(medication, data)
        await self._persist(medication)

        logger.info(
            "medication_updated", medication_id=medication_id, fields=sorted(changes)
        )
        return medication

    async def delete_medication(self, medication_id: int) -> bool:
        result = await self.db_session.execute(
            delete(MedicationDB).where(MedicationDB.id == medication_id)
        )
        await self.db_session.commit()
        return result.rowcount > 0

    async def bump_popularity(self, quantities: dict[int, int]) -> None:
        """Increase popularity by ordered quantity. Does not commit."""
        for medication_id, quantity in quantities.items():
            await self.db_session.execute(
                update(MedicationDB)
                .where(MedicationDB.id == medication_id)
                .values(popularity=MedicationDB.popularity + quantity)
                .execution_options(synchronize_session="fetch")
            )

    # ----- Categories -----

    async def list_categories(self) -> list[CategoryDB]:
        result = await self.db_session.execute(select(CategoryDB).order_by(CategoryDB.name))
        return list(result.scalars().all())

    async def get_category(self, category_id: int) -> CategoryDB | None:
        return await self.db_session.get(CategoryDB, category_id)

    async def count_categories(self) -> int:
        result = await self.db_session.execute(select(func.count()).select_from(CategoryDB))
        return result.scalar_one()

    async def create_category(self, data: CategoryCreate) -> CategoryDB:
        category = CategoryDB(**data.model_dump())
        await self._persist(category)
        return category
