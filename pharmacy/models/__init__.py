"""Data models for the pharmacy platform."""

# Import SQLAlchemy ORM models to register them with Base.metadata
# This ensures all tables are known when create_tables() is called
from pharmacy.models.catalog import (  # noqa: F401
    Category,
    CategoryDB,
    Medication,
    MedicationDB,
)
from pharmacy.models.insurance import (  # noqa: F401
    Insurance,
    InsuranceDB,
    InsuranceProvider,
    InsuranceProviderDB,
)
from pharmacy.models.order import (  # noqa: F401
    Cart,
    CartDB,
    CartItem,
    Order,
    OrderDB,
    OrderItem,
    OrderItemDB,
    OrderStatus,
)
from pharmacy.models.prescription import (  # noqa: F401
    Prescription,
    PrescriptionDB,
    PrescriptionStatus,
    RefillNotificationDB,
    RefillRequestDB,
    RefillStatus,
    VerificationStatus,
)
from pharmacy.models.user import (  # noqa: F401
    PaymentMethodDB,
    UserDB,
    UserMedicationDB,
    UserPublic,
    UserRole,
)
from pharmacy.models.white_label import StorefrontConfig, WhiteLabel, WhiteLabelDB  # noqa: F401

__all__ = [
    # Catalog
    "Category",
    "Medication",
    # Users
    "UserPublic",
    "UserRole",
    # Orders
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    # Prescriptions
    "Prescription",
    "PrescriptionStatus",
    "RefillStatus",
    "VerificationStatus",
    # Insurance
    "Insurance",
    "InsuranceProvider",
    # Branding
    "StorefrontConfig",
    "WhiteLabel",
]
