"""Patient insurance records and the admin-managed provider list."""

import structlog
from sqlalchemy import delete, select, update

from pharmacy.models.insurance import (
    InsuranceCreate,
    InsuranceDB,
    InsuranceProviderCreate,
    InsuranceProviderDB,
    InsuranceProviderUpdate,
    InsuranceUpdate,
)
from pharmacy.services.repository import Repository

logger = structlog.get_logger(__name__)


class InsuranceService(Repository):
    """Manages a user's insurance records.

    A user has at most one primary record; marking a record primary clears
    the flag on the user's other records.
    """

    async def get_insurance(self, insurance_id: int) -> InsuranceDB | None:
        return await self.db_session.get(InsuranceDB, insurance_id)

    async def insurance_for_user(self, user_id: int) -> list[InsuranceDB]:
        query = (
            select(InsuranceDB)
            .where(InsuranceDB.user_id == user_id)
            .order_by(InsuranceDB.is_primary.desc(), InsuranceDB.id)
        )
        result = await self.db_session.execute(query)
        return list(result.scalars().all())

    async def create_insurance(self, data: InsuranceCreate) -> InsuranceDB:
        if data.is_primary:
            await self._clear_primary(data.user_id)

        insurance = InsuranceDB(**data.model_dump())
        await self._persist(insurance)

        logger.info("insurance_added", insurance_id=insurance.id, user_id=insurance.user_id)
        return insurance

    async def update_insurance(self, insurance_id: int, data: InsuranceUpdate) -> InsuranceDB | None:
        insurance = await self.get_insurance(insurance_id)
        if insurance is None:
            return None

        if data.is_primary:
            await self._clear_primary(insurance.user_id, keep_id=insurance.id)

        self._apply_changes(insurance, data)
        await self._persist(insurance)
        return insurance

    async def _clear_primary(self, user_id: int, keep_id: int | None = None) -> None:
        statement = update(InsuranceDB).where(
            InsuranceDB.user_id == user_id, InsuranceDB.is_primary.is_(True)
        )
        if keep_id is not None:
            statement = statement.where(InsuranceDB.id != keep_id)
        await self.db_session.execute(
            statement.values(is_primary=False).execution_options(synchronize_session="fetch")
        )


class InsuranceProviderService(Repository):
    """CRUD for the insurance provider directory."""

    async def list_providers(self, active: bool | None = None) -> list[InsuranceProviderDB]:
        query = select(InsuranceProviderDB)
        if active is not None:
            query = query.where(InsuranceProviderDB.is_active.is_(active))
        result = await self.db_session.execute(query.order_by(InsuranceProviderDB.name))
        return list(result.scalars().all())

    async def get_provider(self, provider_id: int) -> InsuranceProviderDB | None:
        return await self.db_session.get(InsuranceProviderDB, provider_id)

    async def create_provider(self, data: InsuranceProviderCreate) -> InsuranceProviderDB:
        provider = InsuranceProviderDB(**data.model_dump())
        await self._persist(provider)
        return provider

    async def update_provider(
        self, provider_id: int, data: InsuranceProviderUpdate
    ) -> InsuranceProviderDB | None:
        provider = await self.get_provider(provider_id)
        if provider is None:
            return None

        self._apply_changes(provider, data)
        await self._persist(provider)
        return provider

    async def delete_provider(self, provider_id: int) -> bool:
        result = await self.db_session.execute(
            delete(InsuranceProviderDB).where(InsuranceProviderDB.id == provider_id)
        )
        await self.db_session.commit()
        return result.rowcount > 0
