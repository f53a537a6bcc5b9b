"""FastAPI application setup and configuration."""

import os
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from pharmacy.api.middleware.error_handler import (
    generic_exception_handler,
    integrity_exception_handler,
    permission_exception_handler,
    upstream_exception_handler,
    validation_exception_handler,
    value_exception_handler,
)
from pharmacy.api.middleware.logging import LoggingMiddleware, setup_logging
from pharmacy.api.routes import (
    auth,
    cart,
    health,
    insurance,
    medications,
    onboarding,
    orders,
    payment_methods,
    prescriptions,
    shipping,
    user_medications,
    users,
    white_labels,
)
from pharmacy.services.database import initialize_database, shutdown_database


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager.

    Handles startup and shutdown events.
    """
    # Startup
    setup_logging(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_format=os.getenv("LOG_FORMAT", "json"),
    )

    database_url = os.getenv("DATABASE_URL")
    if database_url:
        db_manager = initialize_database(database_url)
        await db_manager.initialize_async()

    yield

    # Shutdown
    await shutdown_database()


app = FastAPI(
    title="Online Pharmacy API",
    description="Catalog, cart, checkout, prescriptions, insurance and white-label branding for an online pharmacy",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# ========== CORS Configuration ==========

allowed_origins = os.getenv("CORS_ALLOWED_ORIGINS", "*").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
)

# ========== Custom Middleware ==========

# Logging middleware (must be first to log all requests)
app.add_middleware(LoggingMiddleware)

# ========== Exception Handlers ==========

app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(IntegrityError, integrity_exception_handler)
app.add_exception_handler(ValueError, value_exception_handler)
app.add_exception_handler(PermissionError, permission_exception_handler)
app.add_exception_handler(httpx.HTTPError, upstream_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# ========== Route Registration ==========

app.include_router(health.router)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(onboarding.router)

# Catalog
app.include_router(medications.router)
app.include_router(medications.categories_router)

# Shopping and fulfilment
app.include_router(cart.router)
app.include_router(orders.router)
app.include_router(orders.order_items_router)
app.include_router(shipping.router)

# Clinical records
app.include_router(prescriptions.router)
app.include_router(prescriptions.refills_router)
app.include_router(insurance.router)
app.include_router(insurance.providers_router)
app.include_router(user_medications.router)
app.include_router(payment_methods.router)

# Branding
app.include_router(white_labels.router)

# ========== Root Endpoint ==========


@app.get(
    "/",
    tags=["root"],
    summary="API root",
    description="Returns API information and available endpoints",
)
async def root() -> dict:
    """API root endpoint.

    Returns:
        API information and version
    """
    return {
        "service": "Online Pharmacy API",
        "version": "0.1.0",
        "description": "REST backend for the pharmacy storefront and admin back office",
        "documentation": {
            "openapi": "/openapi.json",
            "swagger": "/docs",
            "redoc": "/redoc",
        },
        "health": {
            "liveness": "/v1/liveness",
            "readiness": "/v1/readiness",
            "health": "/v1/health",
        },
    }


# ========== Development Server ==========

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pharmacy.api.main:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
        log_level="info",
    )
