"""Shipping rate, label and tracking endpoints."""

from fastapi import APIRouter, Depends, Query

from pharmacy.api.middleware.auth import get_current_user, require_admin
from pharmacy.models.shipping import (
    Carrier,
    LabelRequest,
    RatesRequest,
    ShippingLabel,
    ShippingRate,
    TrackingInfo,
)
from pharmacy.models.user import UserDB
from pharmacy.services.shipping import ShippingService

router = APIRouter(prefix="/api/shipping", tags=["shipping"])


def get_shipping_service() -> ShippingService:
    """FastAPI dependency returning the shipping service (overridable in tests)."""
    return ShippingService()


@router.post("/rates", response_model=list[ShippingRate])
async def get_rates(
    request: RatesRequest,
    user: UserDB = Depends(get_current_user),
    shipping: ShippingService = Depends(get_shipping_service),
) -> list[ShippingRate]:
    """Quote every carrier service for the destination, cheapest first."""
    return shipping.get_rates(request.destination, request.package)


@router.post("/label", response_model=ShippingLabel)
async def create_label(
    request: LabelRequest,
    admin: UserDB = Depends(require_admin),
    shipping: ShippingService = Depends(get_shipping_service),
) -> ShippingLabel:
    return shipping.create_label(
        request.destination,
        request.carrier_id,
        service=request.service_code,
        package=request.package,
    )


@router.get("/track/{tracking_number}", response_model=TrackingInfo)
async def track_package(
    tracking_number: str,
    carrier: Carrier | None = Query(None, description="Carrier (inferred from the number when omitted)"),
    user: UserDB = Depends(get_current_user),
    shipping: ShippingService = Depends(get_shipping_service),
) -> TrackingInfo:
    return shipping.track(tracking_number, carrier=carrier)
