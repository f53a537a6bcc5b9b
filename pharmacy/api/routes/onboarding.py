"""Route guard and onboarding wizard endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy.api.middleware.auth import get_current_user, get_optional_user
from pharmacy.models.user import UserDB
from pharmacy.services.database import get_db_session
from pharmacy.services.onboarding import (
    GuardDecision,
    OnboardingProgress,
    guard_decision,
    onboarding_progress,
)

router = APIRouter(prefix="/api/onboarding", tags=["onboarding"])


@router.get("/guard", response_model=GuardDecision)
async def check_guard(
    require_profile_complete: bool = Query(True, description="Whether the page needs a completed profile"),
    user: UserDB | None = Depends(get_optional_user),
) -> GuardDecision:
    """Tell the storefront whether to show a protected page or redirect.

    Anonymous visitors are sent to ``/auth``; signed-in users with an
    incomplete profile are sent to ``/complete-profile``.
    """
    return guard_decision(user, require_profile_complete)


@router.get("/progress", response_model=OnboardingProgress)
async def get_progress(
    user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> OnboardingProgress:
    return await onboarding_progress(db, user)
