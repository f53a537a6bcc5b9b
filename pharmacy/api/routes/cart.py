"""Shopping cart endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy.api.middleware.auth import get_current_user
from pharmacy.auth.access_checker import AccessChecker
from pharmacy.models.order import Cart, CartUpdate
from pharmacy.models.user import UserDB
from pharmacy.services.cart import CartService
from pharmacy.services.database import get_db_session

router = APIRouter(prefix="/api/cart", tags=["cart"])


@router.get("/{user_id}", response_model=Cart)
async def get_cart(
    user_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Cart:
    """Return the stored cart, or an empty one when the user has none."""
    AccessChecker.require_owner_or_admin(current_user, user_id, "cart")
    return await CartService(db).get_cart(user_id)


@router.post("/{user_id}", response_model=Cart)
async def replace_cart(
    user_id: int,
    request: CartUpdate,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Cart:
    """Replace the cart's items with the submitted list."""
    AccessChecker.require_owner_or_admin(current_user, user_id, "cart")
    return await CartService(db).replace_items(user_id, request.items)


@router.delete("/{user_id}", response_model=Cart)
async def clear_cart(
    user_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Cart:
    AccessChecker.require_owner_or_admin(current_user, user_id, "cart")
    return await CartService(db).clear(user_id)
