"""Personal medication list endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy.api.middleware.auth import get_current_user
from pharmacy.auth.access_checker import AccessChecker
from pharmacy.models.user import (
    UserDB,
    UserMedication,
    UserMedicationCreate,
    UserMedicationDB,
    UserMedicationUpdate,
)
from pharmacy.services.database import get_db_session
from pharmacy.services.user_medications import UserMedicationService, to_user_medication

router = APIRouter(prefix="/api/user-medications", tags=["user-medications"])


async def _owned_entry(
    service: UserMedicationService, entry_id: int, user: UserDB
) -> UserMedicationDB:
    entry = await service.get_entry(entry_id)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Medication entry {entry_id} not found",
        )
    AccessChecker.require_owner_or_admin(user, entry.user_id, "medication entry")
    return entry


@router.get("/{user_id}", response_model=list[UserMedication])
async def list_entries(
    user_id: int,
    active: bool | None = Query(None, description="Only active (true) or inactive (false) entries"),
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> list[UserMedication]:
    AccessChecker.require_owner_or_admin(current_user, user_id, "medication list")
    entries = await UserMedicationService(db).entries_for_user(user_id, active=active)
    return [to_user_medication(entry) for entry in entries]


@router.post("/{user_id}", response_model=UserMedication, status_code=status.HTTP_201_CREATED)
async def add_entry(
    user_id: int,
    request: UserMedicationCreate,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserMedication:
    """Add a catalog medication to the user's list.

    Raises:
        ValueError: Unknown medication (mapped to 400)
    """
    AccessChecker.require_owner_or_admin(current_user, user_id, "medication list")
    entry = await UserMedicationService(db).add_entry(user_id, request)
    return to_user_medication(entry)


@router.put("/{entry_id}", response_model=UserMedication)
async def update_entry(
    entry_id: int,
    request: UserMedicationUpdate,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserMedication:
    service = UserMedicationService(db)
    await _owned_entry(service, entry_id, current_user)
    return to_user_medication(await service.update_entry(entry_id, request))


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    entry_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> None:
    service = UserMedicationService(db)
    await _owned_entry(service, entry_id, current_user)
    await service.delete_entry(entry_id)


@router.post("/{entry_id}/toggle-active", response_model=UserMedication)
async def toggle_active(
    entry_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserMedication:
    service = UserMedicationService(db)
    await _owned_entry(service, entry_id, current_user)
    return to_user_medication(await service.toggle_active(entry_id))
