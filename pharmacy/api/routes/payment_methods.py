"""Saved payment method endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy.api.middleware.auth import get_current_user
from pharmacy.auth.access_checker import AccessChecker
from pharmacy.models.user import PaymentMethod, PaymentMethodCreate, PaymentMethodDB, UserDB
from pharmacy.services.database import get_db_session
from pharmacy.services.payment_methods import PaymentMethodService

router = APIRouter(prefix="/api/payment-methods", tags=["payment-methods"])


@router.get("/{user_id}", response_model=list[PaymentMethod])
async def list_methods(
    user_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> list[PaymentMethodDB]:
    AccessChecker.require_owner_or_admin(current_user, user_id, "payment methods")
    return await PaymentMethodService(db).methods_for_user(user_id)


@router.post("", response_model=PaymentMethod, status_code=status.HTTP_201_CREATED)
async def add_method(
    request: PaymentMethodCreate,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PaymentMethodDB:
    """Save a card for the given user (the caller when omitted).

    Only the brand, holder, last four digits and expiry are kept.
    """
    user_id = request.user_id if request.user_id is not None else current_user.id
    AccessChecker.require_owner_or_admin(current_user, user_id, "payment methods")
    return await PaymentMethodService(db).add_method(user_id, request)


@router.delete("/{method_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_method(
    method_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> None:
    service = PaymentMethodService(db)
    method = await service.get_method(method_id)
    if method is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Payment method {method_id} not found",
        )
    AccessChecker.require_owner_or_admin(current_user, method.user_id, "payment method")
    await service.delete_method(method_id)
