"""Medication catalog and category endpoints.

Browsing is public; writes are reserved to administrators.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy.api.middleware.auth import require_admin
from pharmacy.models.catalog import (
    Category,
    CategoryCreate,
    CategoryDB,
    Medication,
    MedicationCreate,
    MedicationDB,
    MedicationUpdate,
)
from pharmacy.models.user import UserDB
from pharmacy.services.catalog import CatalogService
from pharmacy.services.database import get_db_session

router = APIRouter(prefix="/api/medications", tags=["medications"])
categories_router = APIRouter(prefix="/api/categories", tags=["categories"])


def _medication_not_found(medication_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Medication {medication_id} not found",
    )


@router.get("", response_model=list[Medication])
async def list_medications(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db_session),
) -> list[MedicationDB]:
    return await CatalogService(db).list_medications(limit=limit, offset=offset)


@router.get("/search", response_model=list[Medication])
async def search_medications(
    q: str = Query("", description="Name, generic name or brand name fragment"),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db_session),
) -> list[MedicationDB]:
    """Case-insensitive catalog search.

    An empty query is rejected with 400 by the service.
    """
    return await CatalogService(db).search_medications(q, limit=limit)


@router.get("/popular", response_model=list[Medication])
async def popular_medications(
    limit: int = Query(4, ge=1, le=50),
    db: AsyncSession = Depends(get_db_session),
) -> list[MedicationDB]:
    return await CatalogService(db).popular_medications(limit=limit)


@router.get("/category/{category}", response_model=list[Medication])
async def medications_by_category(
    category: str,
    db: AsyncSession = Depends(get_db_session),
) -> list[MedicationDB]:
    return await CatalogService(db).medications_by_category(category)


@router.get("/{medication_id}", response_model=Medication)
async def get_medication(
    medication_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> MedicationDB:
    medication = await CatalogService(db).get_medication(medication_id)
    if medication is None:
        raise _medication_not_found(medication_id)
    return medication


@router.post("", response_model=Medication, status_code=status.HTTP_201_CREATED)
async def create_medication(
    request: MedicationCreate,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> MedicationDB:
    return await CatalogService(db).create_medication(request)


@router.put("/{medication_id}", response_model=Medication)
async def update_medication(
    medication_id: int,
    request: MedicationUpdate,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> MedicationDB:
    medication = await CatalogService(db).update_medication(medication_id, request)
    if medication is None:
        raise _medication_not_found(medication_id)
    return medication


@router.delete("/{medication_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_medication(
    medication_id: int,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> None:
    if not await CatalogService(db).delete_medication(medication_id):
        raise _medication_not_found(medication_id)


# ========== Categories ==========


@categories_router.get("", response_model=list[Category])
async def list_categories(db: AsyncSession = Depends(get_db_session)) -> list[CategoryDB]:
    return await CatalogService(db).list_categories()


@categories_router.get("/{category_id}", response_model=Category)
async def get_category(
    category_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> CategoryDB:
    category = await CatalogService(db).get_category(category_id)
    if category is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Category {category_id} not found",
        )
    return category


@categories_router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
async def create_category(
    request: CategoryCreate,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> CategoryDB:
    """Create a category. Duplicate names surface as 409 from the unique index."""
    return await CatalogService(db).create_category(request)
