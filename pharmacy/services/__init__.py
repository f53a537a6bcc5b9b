"""Business logic services for the pharmacy platform."""

from pharmacy.services.cart import CartService
from pharmacy.services.catalog import CatalogService
from pharmacy.services.database import DatabaseManager, get_db_session
from pharmacy.services.insurance import InsuranceProviderService, InsuranceService
from pharmacy.services.orders import OrderService
from pharmacy.services.payment_methods import PaymentMethodService
from pharmacy.services.prescriptions import PrescriptionService, RefillService
from pharmacy.services.shipping import ShippingService
from pharmacy.services.user_medications import UserMedicationService
from pharmacy.services.users import UserRepository
from pharmacy.services.white_labels import WhiteLabelService

__all__ = [
    "CartService",
    "CatalogService",
    "DatabaseManager",
    "InsuranceProviderService",
    "InsuranceService",
    "OrderService",
    "PaymentMethodService",
    "PrescriptionService",
    "RefillService",
    "ShippingService",
    "UserMedicationService",
    "UserRepository",
    "WhiteLabelService",
    "get_db_session",
]
