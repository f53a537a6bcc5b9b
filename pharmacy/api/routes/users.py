"""User administration, profile completion and allergy endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy.api.middleware.auth import get_current_user, require_admin
from pharmacy.auth.access_checker import AccessChecker
from pharmacy.models.user import (
    AllergiesUpdate,
    ProfileCompletion,
    UserCreate,
    UserDB,
    UserPublic,
    UserUpdate,
)
from pharmacy.services.database import get_db_session
from pharmacy.services.users import UserRepository

router = APIRouter(prefix="/api/users", tags=["users"])

# Fields only an administrator may change
ADMIN_ONLY_FIELDS = {"role", "profile_completed"}


def _not_found(user_id: int | str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User {user_id} not found")


@router.post("", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: UserCreate,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> UserDB:
    """Create an account on someone's behalf (any role)."""
    users = UserRepository(db)
    if await users.get_user_by_email(request.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    if await users.get_user_by_username(request.username):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already exists")
    return await users.create_user(request)


@router.get("", response_model=list[UserPublic])
async def list_users(
    search: str | None = Query(None, description="Match username, email or name"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> list[UserDB]:
    return await UserRepository(db).list_users(search=search, limit=limit, offset=offset)


@router.get("/allergies/unverified", response_model=list[UserPublic])
async def unverified_allergies(
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> list[UserDB]:
    """Users whose allergy lists await pharmacist review."""
    return await UserRepository(db).list_unverified_allergies()


@router.get("/email/{email}", response_model=UserPublic)
async def get_user_by_email(
    email: str,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> UserDB:
    user = await UserRepository(db).get_user_by_email(email)
    if user is None:
        raise _not_found(email)
    return user


@router.get("/{user_id}", response_model=UserPublic)
async def get_user(
    user_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserDB:
    AccessChecker.require_owner_or_admin(current_user, user_id, "user")

    user = await UserRepository(db).get_user(user_id)
    if user is None:
        raise _not_found(user_id)
    return user


@router.put("/{user_id}", response_model=UserPublic)
async def update_user(
    user_id: int,
    request: UserUpdate,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserDB:
    """Update a user.

    Users may edit their own record; role and profile flags are reserved to
    administrators.
    """
    AccessChecker.require_owner_or_admin(current_user, user_id, "user")
    if not AccessChecker.is_admin(current_user) and request.model_fields_set & ADMIN_ONLY_FIELDS:
        raise PermissionError("Only administrators can change roles or profile status")

    user = await UserRepository(db).update_user(user_id, request)
    if user is None:
        raise _not_found(user_id)
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> None:
    """Delete an account. Administrators cannot delete themselves."""
    if admin.id == user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account",
        )

    if not await UserRepository(db).delete_user(user_id):
        raise _not_found(user_id)


@router.put("/{user_id}/complete-profile", response_model=UserPublic)
async def complete_profile(
    user_id: int,
    request: ProfileCompletion,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserDB:
    """Save the onboarding profile and mark it complete."""
    AccessChecker.require_owner_or_admin(current_user, user_id, "user")

    user = await UserRepository(db).complete_profile(user_id, request)
    if user is None:
        raise _not_found(user_id)
    return user


@router.put("/{user_id}/allergies", response_model=UserPublic)
async def update_allergies(
    user_id: int,
    request: AllergiesUpdate,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserDB:
    AccessChecker.require_owner_or_admin(current_user, user_id, "user")

    user = await UserRepository(db).update_allergies(user_id, request.allergies)
    if user is None:
        raise _not_found(user_id)
    return user


@router.post("/{user_id}/allergies/verify", response_model=UserPublic)
async def verify_allergies(
    user_id: int,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> UserDB:
    user = await UserRepository(db).verify_allergies(user_id)
    if user is None:
        raise _not_found(user_id)
    return user
