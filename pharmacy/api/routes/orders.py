"""Order, checkout and order item endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy.api.middleware.auth import get_current_user, require_admin
from pharmacy.auth.access_checker import AccessChecker
from pharmacy.models.order import (
    APPROVABLE_STATUSES,
    CheckoutRequest,
    Order,
    OrderCreate,
    OrderDB,
    OrderItem,
    OrderItemCreate,
    OrderItemDB,
    OrderStatus,
    OrderUpdate,
    OrderWithItems,
)
from pharmacy.models.shipping import Carrier
from pharmacy.models.user import UserDB
from pharmacy.services.database import get_db_session
from pharmacy.services.orders import OrderService

router = APIRouter(prefix="/api/orders", tags=["orders"])
order_items_router = APIRouter(prefix="/api/orderItems", tags=["orders"])

# Order fields a customer may change on their own order
CUSTOMER_EDITABLE_FIELDS = {"status", "shipping_address"}


class ApproveOrderRequest(BaseModel):
    """Optional carrier choice when approving an order."""

    carrier: Carrier | None = None


def _order_not_found(order_id: int) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Order {order_id} not found")


def _with_items(order: OrderDB, items: list[OrderItemDB]) -> OrderWithItems:
    return OrderWithItems(
        **Order.model_validate(order).model_dump(),
        items=[OrderItem.model_validate(item) for item in items],
    )


async def _owned_order(service: OrderService, order_id: int, user: UserDB) -> OrderDB:
    order = await service.get_order(order_id)
    if order is None:
        raise _order_not_found(order_id)
    AccessChecker.require_owner_or_admin(user, order.user_id, "order")
    return order


@router.post("", response_model=Order, status_code=status.HTTP_201_CREATED)
async def create_order(
    request: OrderCreate,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> OrderDB:
    """Create an order from explicit fields (back office).

    Customers place orders through ``/checkout``, which prices items and
    checks prescriptions.
    """
    return await OrderService(db).create_order(request)


@router.post("/checkout", response_model=OrderWithItems, status_code=status.HTTP_201_CREATED)
async def checkout(
    request: CheckoutRequest,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> OrderWithItems:
    """Place an order for everything in the caller's cart.

    Raises:
        ValueError: Empty cart or missing/invalid prescription (mapped to 400)
    """
    order, items = await OrderService(db).checkout(current_user.id, request)
    return _with_items(order, items)


@router.get("/all", response_model=list[Order])
async def all_orders(
    search: str | None = Query(None, description="Order id, tracking number, address, or customer"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> list[OrderDB]:
    return await OrderService(db).search_orders(search=search, limit=limit, offset=offset)


@router.get("/status/{order_status}", response_model=list[Order])
async def orders_by_status(
    order_status: OrderStatus,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> list[OrderDB]:
    return await OrderService(db).orders_by_status(order_status, limit=limit, offset=offset)


@router.get("/user/{user_id}", response_model=list[Order])
async def orders_for_user(
    user_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> list[OrderDB]:
    AccessChecker.require_owner_or_admin(current_user, user_id, "order history")
    return await OrderService(db).orders_for_user(user_id)


@router.get("/{order_id}", response_model=OrderWithItems)
async def get_order(
    order_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> OrderWithItems:
    service = OrderService(db)
    order = await _owned_order(service, order_id, current_user)
    return _with_items(order, await service.get_order_items(order_id))


@router.put("/{order_id}", response_model=Order)
async def update_order(
    order_id: int,
    request: OrderUpdate,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> OrderDB:
    """Update an order.

    Customers may only cancel their own orders or change the shipping
    address; every other change requires an administrator.

    Raises:
        ValueError: A customer cancelling an order that is past approval (mapped to 400)
    """
    service = OrderService(db)
    order = await _owned_order(service, order_id, current_user)

    if not AccessChecker.is_admin(current_user):
        changed = request.model_fields_set
        if changed - CUSTOMER_EDITABLE_FIELDS or (
            "status" in changed and request.status != OrderStatus.CANCELLED
        ):
            raise PermissionError("Customers may only cancel an order or change its shipping address")
        if "status" in changed and order.status not in APPROVABLE_STATUSES:
            raise ValueError(f"Orders that are {order.status} can no longer be cancelled")

    return await service.update_order(order_id, request)


@router.post("/{order_id}/approve", response_model=Order)
async def approve_order(
    order_id: int,
    request: ApproveOrderRequest | None = None,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> OrderDB:
    """Ship a pending or verified order with a fresh tracking number."""
    carrier = request.carrier if request else None
    order = await OrderService(db).approve_order(order_id, carrier=carrier)
    if order is None:
        raise _order_not_found(order_id)
    return order


# ========== Order items ==========


@order_items_router.post("", response_model=OrderItem, status_code=status.HTTP_201_CREATED)
async def add_order_item(
    request: OrderItemCreate,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> OrderItemDB:
    service = OrderService(db)
    if await service.get_order(request.order_id) is None:
        raise _order_not_found(request.order_id)
    return await service.add_order_item(request)


@order_items_router.get("/{order_id}", response_model=list[OrderItem])
async def get_order_items(
    order_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> list[OrderItemDB]:
    service = OrderService(db)
    await _owned_order(service, order_id, current_user)
    return await service.get_order_items(order_id)
