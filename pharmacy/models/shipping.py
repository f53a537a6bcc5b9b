"""Shipping rate, label and tracking schemas (no database tables)."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class Carrier(str, Enum):
    """Supported carriers."""

    UPS = "ups"
    FEDEX = "fedex"


class ServiceLevel(str, Enum):
    """Shipping speed."""

    GROUND = "ground"
    THREEDAY = "threeday"
    TWODAY = "twoday"
    OVERNIGHT = "overnight"


class ShippingAddress(BaseModel):
    """Destination address."""

    name: str = Field(..., min_length=1)
    street1: str = Field(..., min_length=1)
    street2: str | None = None
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=2)
    zip: str = Field(..., pattern=r"^\d{5}(-\d{4})?$")
    country: str = "US"
    phone: str | None = None


class PackageDetails(BaseModel):
    """Parcel weight (lb) and dimensions (in)."""

    weight: float = Field(0.5, gt=0)
    length: float = Field(4, gt=0)
    width: float = Field(2, gt=0)
    height: float = Field(2, gt=0)
    value: float | None = Field(50, ge=0)


class ShippingRate(BaseModel):
    """Quoted rate for one carrier service."""

    carrier_id: Carrier
    carrier_name: str
    service_code: ServiceLevel
    service_name: str
    price: float
    estimated_days: int
    tracking_available: bool = True


class ShippingLabel(BaseModel):
    """Purchased label."""

    tracking_number: str
    label_url: str
    carrier_id: Carrier
    carrier_name: str


class TrackingEvent(BaseModel):
    """Single scan in a package history."""

    timestamp: datetime
    description: str
    location: str


class TrackingInfo(BaseModel):
    """Package status and history, newest event first."""

    tracking_number: str
    carrier: str
    status: str
    estimated_delivery: datetime
    events: list[TrackingEvent] = Field(default_factory=list)


class RatesRequest(BaseModel):
    """Rate quote request."""

    destination: ShippingAddress
    package: PackageDetails = Field(default_factory=PackageDetails)


class LabelRequest(BaseModel):
    """Label purchase request."""

    destination: ShippingAddress
    carrier_id: Carrier
    service_code: ServiceLevel = ServiceLevel.GROUND
    package: PackageDetails = Field(default_factory=PackageDetails)
