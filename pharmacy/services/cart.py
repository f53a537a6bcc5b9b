"""Per-user shopping cart storage."""

from datetime import datetime, timezone

import structlog
from sqlalchemy import select

from pharmacy.models.order import Cart, CartDB, CartItem
from pharmacy.services.repository import Repository

logger = structlog.get_logger(__name__)


def cart_subtotal(items: list[CartItem]) -> float:
    """Sum of price x quantity, rounded to cents."""
    return round(sum(item.price * item.quantity for item in items), 2)


def normalize_items(raw_items: list[dict] | list[CartItem] | None) -> list[CartItem]:
    """Coerce stored or submitted cart lines into CartItem objects."""
    return [
        item if isinstance(item, CartItem) else CartItem.model_validate(item)
        for item in raw_items or []
    ]


def to_cart(user_id: int, row: CartDB | None) -> Cart:
    """Build the API view of a cart row (or an empty cart when there is none)."""
    if row is None:
        return Cart(user_id=user_id)

    items = normalize_items(row.items)
    return Cart(
        id=row.id,
        user_id=row.user_id,
        items=items,
        subtotal=cart_subtotal(items),
        requires_prescription=any(item.requires_prescription for item in items),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class CartService(Repository):
    """Reads and replaces a user's cart.

    Each user has at most one cart row. Items live in a JSON column and are
    always written as a full replacement.
    """

    async def get_cart_row(self, user_id: int) -> CartDB | None:
        result = await self.db_session.execute(select(CartDB).where(CartDB.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_cart(self, user_id: int) -> Cart:
        return to_cart(user_id, await self.get_cart_row(user_id))

    async def replace_items(self, user_id: int, items: list[CartItem]) -> Cart:
        """Store a new item list, creating the cart if needed.

        Args:
            user_id: Cart owner
            items: Validated replacement items

        Returns:
            Updated cart view
        """
        stored = [item.model_dump() for item in normalize_items(items)]

        row = await self.get_cart_row(user_id)
        if row is None:
            row = CartDB(user_id=user_id, items=stored)
            self.db_session.add(row)
        else:
            row.items = stored
            row.updated_at = datetime.now(timezone.utc)

        await self.db_session.commit()
        await self.db_session.refresh(row)

        logger.debug("cart_updated", user_id=user_id, item_count=len(stored))
        return to_cart(user_id, row)

    async def clear(self, user_id: int, commit: bool = True) -> Cart:
        """Empty the cart (the row itself is kept)."""
        row = await self.get_cart_row(user_id)
        if row is None:
            return Cart(user_id=user_id)

        row.items = []
        row.updated_at = datetime.now(timezone.utc)
        if commit:
            await self.db_session.commit()
            await self.db_session.refresh(row)
        return to_cart(user_id, row)
