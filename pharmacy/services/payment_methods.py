"""Stored payment methods (card metadata only)."""

import structlog
from sqlalchemy import delete, func, select, update

from pharmacy.models.user import PaymentMethodCreate, PaymentMethodDB, card_brand
from pharmacy.services.repository import Repository

logger = structlog.get_logger(__name__)


class PaymentMethodService(Repository):
    """Saves card brand, holder, last four digits and expiry for a user.

    The full card number and CVV are validated by the request schema and then
    dropped; neither is ever written to the database.
    """

    async def methods_for_user(self, user_id: int) -> list[PaymentMethodDB]:
        query = (
            select(PaymentMethodDB)
            .where(PaymentMethodDB.user_id == user_id)
            .order_by(PaymentMethodDB.is_default.desc(), PaymentMethodDB.id)
        )
        result = await self.db_session.execute(query)
        return list(result.scalars().all())

    async def get_method(self, method_id: int) -> PaymentMethodDB | None:
        return await self.db_session.get(PaymentMethodDB, method_id)

    async def add_method(self, user_id: int, data: PaymentMethodCreate) -> PaymentMethodDB:
        month, year = data.expiry_date.split("/")
        existing = await self.count_for_user(user_id)
        # First card becomes the default
        is_default = data.is_default or existing == 0

        if is_default:
            await self.db_session.execute(
                update(PaymentMethodDB)
                .where(PaymentMethodDB.user_id == user_id)
                .values(is_default=False)
                .execution_options(synchronize_session="fetch")
            )

        method = PaymentMethodDB(
            user_id=user_id,
            card_holder=data.card_holder,
            brand=card_brand(data.card_number),
            last4=data.card_number[-4:],
            expiry_month=int(month),
            expiry_year=2000 + int(year),
            is_default=is_default,
        )
        await self._persist(method)

        logger.info(
            "payment_method_added", user_id=user_id, method_id=method.id, brand=method.brand
        )
        return method

    async def delete_method(self, method_id: int) -> bool:
        result = await self.db_session.execute(
            delete(PaymentMethodDB).where(PaymentMethodDB.id == method_id)
        )
        await self.db_session.commit()
        return result.rowcount > 0

    async def count_for_user(self, user_id: int) -> int:
        result = await self.db_session.execute(
            select(func.count())
            .select_from(PaymentMethodDB)
            .where(PaymentMethodDB.user_id == user_id)
        )
        return result.scalar_one()
