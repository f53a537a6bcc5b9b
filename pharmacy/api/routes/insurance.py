"""Insurance record and insurance provider endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy.api.middleware.auth import get_current_user, require_admin
from pharmacy.auth.access_checker import AccessChecker
from pharmacy.models.insurance import (
    Insurance,
    InsuranceCreate,
    InsuranceDB,
    InsuranceProvider,
    InsuranceProviderCreate,
    InsuranceProviderDB,
    InsuranceProviderUpdate,
    InsuranceUpdate,
)
from pharmacy.models.user import UserDB
from pharmacy.services.database import get_db_session
from pharmacy.services.insurance import InsuranceProviderService, InsuranceService

router = APIRouter(prefix="/api/insurance", tags=["insurance"])
providers_router = APIRouter(prefix="/api/insurance-providers", tags=["insurance"])


def _insurance_not_found(insurance_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Insurance record {insurance_id} not found",
    )


def _provider_not_found(provider_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Insurance provider {provider_id} not found",
    )


@router.get("/user/{user_id}", response_model=list[Insurance])
async def insurance_for_user(
    user_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> list[InsuranceDB]:
    """A user's insurance records, primary first."""
    AccessChecker.require_owner_or_admin(current_user, user_id, "insurance")
    return await InsuranceService(db).insurance_for_user(user_id)


@router.get("/{insurance_id}", response_model=Insurance)
async def get_insurance(
    insurance_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> InsuranceDB:
    insurance = await InsuranceService(db).get_insurance(insurance_id)
    if insurance is None:
        raise _insurance_not_found(insurance_id)
    AccessChecker.require_owner_or_admin(current_user, insurance.user_id, "insurance")
    return insurance


@router.post("", response_model=Insurance, status_code=status.HTTP_201_CREATED)
async def create_insurance(
    request: InsuranceCreate,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> InsuranceDB:
    AccessChecker.require_owner_or_admin(current_user, request.user_id, "insurance")
    return await InsuranceService(db).create_insurance(request)


@router.put("/{insurance_id}", response_model=Insurance)
async def update_insurance(
    insurance_id: int,
    request: InsuranceUpdate,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> InsuranceDB:
    service = InsuranceService(db)
    insurance = await service.get_insurance(insurance_id)
    if insurance is None:
        raise _insurance_not_found(insurance_id)
    AccessChecker.require_owner_or_admin(current_user, insurance.user_id, "insurance")

    return await service.update_insurance(insurance_id, request)


# ========== Providers ==========


@providers_router.get("", response_model=list[InsuranceProvider])
async def list_providers(
    active: bool | None = Query(None, description="Filter by active flag"),
    db: AsyncSession = Depends(get_db_session),
) -> list[InsuranceProviderDB]:
    return await InsuranceProviderService(db).list_providers(active=active)


@providers_router.get("/{provider_id}", response_model=InsuranceProvider)
async def get_provider(
    provider_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> InsuranceProviderDB:
    provider = await InsuranceProviderService(db).get_provider(provider_id)
    if provider is None:
        raise _provider_not_found(provider_id)
    return provider


@providers_router.post("", response_model=InsuranceProvider, status_code=status.HTTP_201_CREATED)
async def create_provider(
    request: InsuranceProviderCreate,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> InsuranceProviderDB:
    return await InsuranceProviderService(db).create_provider(request)


@providers_router.put("/{provider_id}", response_model=InsuranceProvider)
async def update_provider(
    provider_id: int,
    request: InsuranceProviderUpdate,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> InsuranceProviderDB:
    provider = await InsuranceProviderService(db).update_provider(provider_id, request)
    if provider is None:
        raise _provider_not_found(provider_id)
    return provider


@providers_router.delete("/{provider_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_provider(
    provider_id: int,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> None:
    if not await InsuranceProviderService(db).delete_provider(provider_id):
        raise _provider_not_found(provider_id)
