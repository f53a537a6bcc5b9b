"""Simulated carrier integration for rate quotes, labels and tracking.

Prices and delivery estimates are computed locally from the origin and
destination ZIP codes; no carrier API is contacted.
"""

import hashlib
import os
import random
from datetime import datetime, timedelta, timezone

import structlog

from pharmacy.models.shipping import (
    Carrier,
    PackageDetails,
    ServiceLevel,
    ShippingAddress,
    ShippingLabel,
    ShippingRate,
    TrackingEvent,
    TrackingInfo,
)

logger = structlog.get_logger(__name__)

DEFAULT_ORIGIN_ZIP = "94107"
DEFAULT_PACKAGE = PackageDetails(weight=0.5, length=4, width=2, height=2, value=50)

BASE_PRICES = {
    ServiceLevel.GROUND: 8.50,
    ServiceLevel.THREEDAY: 12.75,
    ServiceLevel.TWODAY: 18.99,
    ServiceLevel.OVERNIGHT: 29.99,
}

CARRIER_NAMES = {Carrier.UPS: "UPS", Carrier.FEDEX: "FedEx"}

SERVICE_NAMES = {
    Carrier.UPS: {
        ServiceLevel.GROUND: "UPS Ground",
        ServiceLevel.THREEDAY: "UPS 3 Day Select",
        ServiceLevel.TWODAY: "UPS 2nd Day Air",
        ServiceLevel.OVERNIGHT: "UPS Next Day Air",
    },
    Carrier.FEDEX: {
        ServiceLevel.GROUND: "FedEx Ground",
        ServiceLevel.THREEDAY: "FedEx Express Saver",
        ServiceLevel.TWODAY: "FedEx 2Day",
        ServiceLevel.OVERNIGHT: "FedEx Overnight",
    },
}

# FedEx ground undercuts UPS ground slightly
CARRIER_ADJUSTMENT = {(Carrier.FEDEX, ServiceLevel.GROUND): 0.95}

TRACKING_PREFIXES = {Carrier.UPS: "1Z", Carrier.FEDEX: "7"}


def zip_distance(origin_zip: str, destination_zip: str) -> int:
    """Pseudo distance in miles between two ZIP codes.

    Deterministic for a given pair, clamped to 50..2500.
    """
    origin = origin_zip[:5]
    destination = destination_zip[:5]
    diff = abs(int(origin) - int(destination))
    seed = int(origin[:3]) + int(destination[:3])
    return min(2500, max(50, diff * 3 + seed % 500))


def estimated_days(service: ServiceLevel, rng: random.Random | None = None) -> int:
    """Delivery estimate in days for a service level."""
    rng = rng or random
    if service == ServiceLevel.GROUND:
        return 3 + rng.randint(0, 2)
    if service == ServiceLevel.THREEDAY:
        return 3
    if service == ServiceLevel.TWODAY:
        return 2
    if service == ServiceLevel.OVERNIGHT:
        return 1
    return 3 + rng.randint(0, 4)


def shipping_price(
    service: ServiceLevel, weight: float, distance: float, rng: random.Random | None = None
) -> float:
    """Price a shipment.

    base x max(1, 0.75 * weight) x max(1, 0.01 * distance) x variation,
    where variation is drawn from [0.95, 1.05]. Rounded to cents.
    """
    rng = rng or random
    base = BASE_PRICES.get(service, BASE_PRICES[ServiceLevel.GROUND])
    weight_factor = max(1.0, weight * 0.75)
    distance_factor = max(1.0, distance * 0.01)
    variation = rng.uniform(0.95, 1.05)
    return round(base * weight_factor * distance_factor * variation, 2)


def generate_tracking_number(carrier: Carrier, rng: random.Random | None = None) -> str:
    """Carrier-prefixed tracking number with ten random digits."""
    rng = rng or random
    return f"{TRACKING_PREFIXES[carrier]}{rng.randint(0, 9_999_999_999):010d}"


def carrier_for_tracking_number(tracking_number: str) -> Carrier:
    """Guess the carrier from the tracking number prefix."""
    if tracking_number.upper().startswith("1Z"):
        return Carrier.UPS
    return Carrier.FEDEX


class ShippingService:
    """Quotes rates, creates labels and reports tracking history.

    Attributes:
        origin_zip: ZIP code packages ship from
        rng: Random source for price variation and tracking numbers
    """

    def __init__(self, origin_zip: str | None = None, rng: random.Random | None = None):
        """Initialize shipping service.

        Args:
            origin_zip: Pharmacy ZIP code (defaults to PHARMACY_ORIGIN_ZIP env var)
            rng: Optional seeded random source
        """
        self.origin_zip = origin_zip or os.getenv("PHARMACY_ORIGIN_ZIP", DEFAULT_ORIGIN_ZIP)
        self.rng = rng or random.Random()

    def get_rates(
        self, destination: ShippingAddress, package: PackageDetails | None = None
    ) -> list[ShippingRate]:
        """Quote every carrier service for a destination.

        Args:
            destination: Where the package goes
            package: Parcel details (defaults to a standard pill bottle)

        Returns:
            Rates sorted by ascending price
        """
        package = package or DEFAULT_PACKAGE
        distance = zip_distance(self.origin_zip, destination.zip)

        rates = []
        for carrier in Carrier:
            for service in ServiceLevel:
                price = shipping_price(service, package.weight, distance, self.rng)
                price = round(price * CARRIER_ADJUSTMENT.get((carrier, service), 1.0), 2)
                rates.append(
                    ShippingRate(
                        carrier_id=carrier,
                        carrier_name=CARRIER_NAMES[carrier],
                        service_code=service,
                        service_name=SERVICE_NAMES[carrier][service],
                        price=price,
                        estimated_days=estimated_days(service, self.rng),
                    )
                )

        rates.sort(key=lambda rate: rate.price)
        logger.debug(
            "shipping_rates_quoted",
            destination_zip=destination.zip,
            distance=distance,
            rate_count=len(rates),
        )
        return rates

    def create_label(
        self,
        destination: ShippingAddress,
        carrier: Carrier,
        service: ServiceLevel = ServiceLevel.GROUND,
        package: PackageDetails | None = None,
    ) -> ShippingLabel:
        """Create a label and tracking number for a shipment."""
        tracking_number = generate_tracking_number(carrier, self.rng)
        label_hash = hashlib.md5(
            f"{destination.zip}-{tracking_number}".encode(), usedforsecurity=False
        ).hexdigest()

        logger.info(
            "shipping_label_created",
            carrier=carrier.value,
            service=service.value,
            tracking_number=tracking_number,
        )
        return ShippingLabel(
            tracking_number=tracking_number,
            label_url=f"/api/shipping/labels/{label_hash}.pdf",
            carrier_id=carrier,
            carrier_name=CARRIER_NAMES[carrier],
        )

    def assign_tracking(self, carrier: Carrier | None = None) -> tuple[Carrier, str]:
        """Pick a carrier (random when not given) and issue a tracking number."""
        carrier = carrier or self.rng.choice(list(Carrier))
        return carrier, generate_tracking_number(carrier, self.rng)

    def track(
        self,
        tracking_number: str,
        carrier: Carrier | None = None,
        destination: ShippingAddress | None = None,
        now: datetime | None = None,
    ) -> TrackingInfo:
        """Report a package's history.

        The number of events is derived from the last four digits of the
        tracking number, so the same number always yields the same history
        relative to ``now``.
        """
        carrier = carrier or carrier_for_tracking_number(tracking_number)
        now = now or datetime.now(timezone.utc)

        tail = "".join(ch for ch in tracking_number[-4:] if ch.isdigit()) or "0"
        age_days = min(5, int(tail) % 6)
        ship_date = now - timedelta(days=age_days)
        local = f"{destination.city}, {destination.state}" if destination else None

        milestones = [
            (0, timedelta(0), "Shipment information sent to carrier", "San Francisco, CA"),
            (1, timedelta(hours=4), "Picked up by carrier", "San Francisco, CA"),
            (2, timedelta(days=1), "Departed shipping facility", "San Francisco, CA"),
            (3, timedelta(days=2), "In transit", "Memphis, TN"),
            (4, timedelta(days=3), "Arrived at destination facility", local or "Local Facility"),
            (5, timedelta(days=4), "Delivered", local or "Destination"),
        ]
        events = [
            TrackingEvent(timestamp=ship_date + offset, description=text, location=where)
            for threshold, offset, text, where in milestones
            if age_days >= threshold
        ]
        events.sort(key=lambda event: event.timestamp, reverse=True)

        return TrackingInfo(
            tracking_number=tracking_number,
            carrier=CARRIER_NAMES[carrier],
            status="Delivered" if age_days >= 5 else "In Transit",
            estimated_delivery=ship_date + timedelta(days=4),
            events=events,
        )
