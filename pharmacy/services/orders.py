"""Order creation, checkout and fulfilment."""

import structlog
from sqlalchemy import func, or_, select

from pharmacy.models.order import (
    APPROVABLE_STATUSES,
    CheckoutRequest,
    OrderCreate,
    OrderDB,
    OrderItemCreate,
    OrderItemDB,
    OrderStatus,
    OrderUpdate,
)
from pharmacy.models.prescription import PrescriptionDB
from pharmacy.models.shipping import Carrier
from pharmacy.models.user import UserDB
from pharmacy.services.cart import CartService
from pharmacy.services.catalog import CatalogService
from pharmacy.services.repository import Repository
from pharmacy.services.shipping import ShippingService

logger = structlog.get_logger(__name__)


class OrderService(Repository):
    """Manages orders and their line items."""

    def __init__(self, db_session, shipping: ShippingService | None = None):
        """Initialize order service.

        Args:
            db_session: Database session for persistence
            shipping: Carrier integration used when approving orders
        """
        super().__init__(db_session)
        self.shipping = shipping or ShippingService()

    async def get_order(self, order_id: int) -> OrderDB | None:
        return await self.db_session.get(OrderDB, order_id)

    async def get_order_items(self, order_id: int) -> list[OrderItemDB]:
        query = select(OrderItemDB).where(OrderItemDB.order_id == order_id).order_by(OrderItemDB.id)
        result = await self.db_session.execute(query)
        return list(result.scalars().all())

    async def orders_for_user(self, user_id: int) -> list[OrderDB]:
        """A user's orders, newest first."""
        query = (
            select(OrderDB)
            .where(OrderDB.user_id == user_id)
            .order_by(OrderDB.order_date.desc(), OrderDB.id.desc())
        )
        result = await self.db_session.execute(query)
        return list(result.scalars().unique().all())

    async def create_order(self, data: OrderCreate) -> OrderDB:
        order = OrderDB(**data.model_dump(mode="json"))
        await self._persist(order)

        logger.info("order_created", order_id=order.id, user_id=order.user_id, total=order.total)
        return order

    async def update_order(self, order_id: int, data: OrderUpdate) -> OrderDB | None:
        order = await self.get_order(order_id)
        if order is None:
            return None

        changes = self._apply_changes(order, data)
        await self._persist(order)

        if "status" in changes:
            logger.info("order_status_changed", order_id=order_id, status=changes["status"])
        return order

    async def add_order_item(self, data: OrderItemCreate) -> OrderItemDB:
        item = OrderItemDB(**data.model_dump())
        await self._persist(item)
        return item

    async def checkout(
        self, user_id: int, request: CheckoutRequest
    ) -> tuple[OrderDB, list[OrderItemDB]]:
        """Turn a user's cart into an order.

        Items are re-priced from the current catalog. Carts holding
        prescription medications must reference a prescription owned by the
        user that has not been revoked. On success the cart is emptied and
        medication popularity is bumped by the ordered quantities.

        Args:
            user_id: Cart owner placing the order
            request: Shipping choice and optional prescription reference

        Returns:
            Tuple of (order, order items)

        Raises:
            ValueError: If the cart is empty, references unknown medications,
                or lacks a valid prescription
        """
        carts = CartService(self.db_session)
        catalog = CatalogService(self.db_session)

        cart = await carts.get_cart(user_id)
        if not cart.items:
            raise ValueError("Cart is empty")

        medications = await catalog.get_medications_by_ids([i.medication_id for i in cart.items])
        missing = [i.medication_id for i in cart.items if i.medication_id not in medications]
        if missing:
            raise ValueError(f"Medications no longer available: {missing}")

        needs_prescription = any(
            medications[i.medication_id].requires_prescription for i in cart.items
        )
        if needs_prescription:
            await self._check_prescription(user_id, request.prescription_id)

        subtotal = sum(medications[i.medication_id].price * i.quantity for i in cart.items)
        order = OrderDB(
            user_id=user_id,
            status=OrderStatus.PENDING.value,
            shipping_method=request.shipping_method,
            shipping_cost=request.shipping_cost,
            total=round(subtotal + request.shipping_cost, 2),
            shipping_address=request.shipping_address,
            prescription_id=request.prescription_id,
        )
        self.db_session.add(order)
        await self.db_session.flush()

        items = [
            OrderItemDB(
                order_id=order.id,
                medication_id=line.medication_id,
                quantity=line.quantity,
                price=medications[line.medication_id].price,
            )
            for line in cart.items
        ]
        self.db_session.add_all(items)

        quantities: dict[int, int] = {}
        for line in cart.items:
            quantities[line.medication_id] = quantities.get(line.medication_id, 0) + line.quantity
        await catalog.bump_popularity(quantities)
        await carts.clear(user_id, commit=False)

        await self.db_session.commit()
        await self.db_session.refresh(order)
        for item in items:
            await self.db_session.refresh(item)

        logger.info(
            "order_created",
            order_id=order.id,
            user_id=user_id,
            total=order.total,
            item_count=len(items),
            source="checkout",
        )
        return order, items

    async def _check_prescription(self, user_id: int, prescription_id: int | None) -> None:
        if prescription_id is None:
            raise ValueError("A prescription is required for prescription medications")

        prescription = await self.db_session.get(PrescriptionDB, prescription_id)
        if prescription is None or prescription.user_id != user_id:
            raise ValueError("Prescription not found for this user")
        if prescription.revoked:
            raise ValueError("Prescription has been revoked")

    async def search_orders(
        self, search: str | None = None, limit: int = 50, offset: int = 0
    ) -> list[OrderDB]:
        """Admin order search.

        The term matches the order id, tracking number, shipping address, or
        the customer's email, first or last name.
        """
        query = select(OrderDB).join(UserDB, OrderDB.user_id == UserDB.id)

        if search:
            term = search.strip()
            pattern = f"%{term.lower()}%"
            conditions = [
                func.lower(OrderDB.tracking_number).like(pattern),
                func.lower(OrderDB.shipping_address).like(pattern),
                func.lower(UserDB.email).like(pattern),
                func.lower(UserDB.first_name).like(pattern),
                func.lower(UserDB.last_name).like(pattern),
            ]
            if term.isdigit():
                conditions.append(OrderDB.id == int(term))
            query = query.where(or_(*conditions))

        query = query.order_by(OrderDB.order_date.desc(), OrderDB.id.desc()).limit(limit).offset(offset)
        result = await self.db_session.execute(query)
        return list(result.scalars().unique().all())

    async def orders_by_status(
        self, status: OrderStatus, limit: int = 50, offset: int = 0
    ) -> list[OrderDB]:
        query = (
            select(OrderDB)
            .where(OrderDB.status == status.value)
            .order_by(OrderDB.order_date.desc(), OrderDB.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db_session.execute(query)
        return list(result.scalars().unique().all())

    async def approve_order(self, order_id: int, carrier: Carrier | None = None) -> OrderDB | None:
        """Ship an order: assign a carrier and tracking number.

        Returns:
            The shipped order, or None when it does not exist

        Raises:
            ValueError: If the order is not pending or verified
        """
        order = await self.get_order(order_id)
        if order is None:
            return None

        if order.status not in APPROVABLE_STATUSES:
            raise ValueError(f"Order in status '{order.status}' cannot be approved")

        assigned, tracking_number = self.shipping.assign_tracking(carrier)
        order.carrier = assigned.value
        order.tracking_number = tracking_number
        order.status = OrderStatus.SHIPPED.value
        await self._persist(order)

        logger.info(
            "order_approved",
            order_id=order_id,
            carrier=assigned.value,
            tracking_number=tracking_number,
        )
        return order

    async def count_for_user(self, user_id: int) -> int:
        result = await self.db_session.execute(
            select(func.count()).select_from(OrderDB).where(OrderDB.user_id == user_id)
        )
        return result.scalar_one()
