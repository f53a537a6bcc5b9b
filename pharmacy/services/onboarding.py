"""Route guard decisions and onboarding wizard progress."""

from enum import Enum

from pydantic import BaseModel

from pharmacy.models.user import UserDB
from pharmacy.services.orders import OrderService
from pharmacy.services.payment_methods import PaymentMethodService
from pharmacy.services.prescriptions import PrescriptionService
from pharmacy.services.user_medications import UserMedicationService

AUTH_PATH = "/auth"
COMPLETE_PROFILE_PATH = "/complete-profile"


class OnboardingStep(str, Enum):
    """Wizard steps, in the order they are presented."""

    PROFILE = "profile"
    MEDICATIONS = "medications"
    PRESCRIPTIONS = "prescriptions"
    CHECKOUT = "checkout"
    PAYMENT = "payment"


STEP_TITLES = {
    OnboardingStep.PROFILE: "Complete your profile",
    OnboardingStep.MEDICATIONS: "Add your medications",
    OnboardingStep.PRESCRIPTIONS: "Upload a prescription",
    OnboardingStep.CHECKOUT: "Place your first order",
    OnboardingStep.PAYMENT: "Save a payment method",
}


class GuardDecision(BaseModel):
    """Outcome of a route guard check."""

    allowed: bool
    redirect: str | None = None


class StepStatus(BaseModel):
    """A single wizard step."""

    step: OnboardingStep
    title: str
    completed: bool


class OnboardingProgress(BaseModel):
    """Wizard state for a user."""

    steps: list[StepStatus]
    completed_count: int
    total: int
    percent: int
    next_step: OnboardingStep | None = None
    is_complete: bool = False


def resolve_guard_redirect(user: UserDB | None, require_profile_complete: bool = True) -> str | None:
    """Decide where a protected page should send the visitor.

    Args:
        user: Authenticated user, or None for anonymous visitors
        require_profile_complete: Whether the page needs a completed profile

    Returns:
        Redirect path, or None when the page may be shown
    """
    if user is None:
        return AUTH_PATH
    if require_profile_complete and not user.profile_completed:
        return COMPLETE_PROFILE_PATH
    return None


def guard_decision(user: UserDB | None, require_profile_complete: bool = True) -> GuardDecision:
    redirect = resolve_guard_redirect(user, require_profile_complete)
    return GuardDecision(allowed=redirect is None, redirect=redirect)


def build_progress(completed: dict[OnboardingStep, bool]) -> OnboardingProgress:
    """Assemble wizard progress from per-step completion flags."""
    steps = [
        StepStatus(step=step, title=STEP_TITLES[step], completed=completed.get(step, False))
        for step in OnboardingStep
    ]
    done = sum(1 for status in steps if status.completed)
    next_step = next((status.step for status in steps if not status.completed), None)

    return OnboardingProgress(
        steps=steps,
        completed_count=done,
        total=len(steps),
        percent=round(done * 100 / len(steps)),
        next_step=next_step,
        is_complete=next_step is None,
    )


async def onboarding_progress(db_session, user: UserDB) -> OnboardingProgress:
    """Compute a user's wizard progress from their stored records."""
    completed = {
        OnboardingStep.PROFILE: bool(user.profile_completed),
        OnboardingStep.MEDICATIONS: await UserMedicationService(db_session).count_for_user(user.id) > 0,
        OnboardingStep.PRESCRIPTIONS: await PrescriptionService(db_session).count_for_user(user.id) > 0,
        OnboardingStep.CHECKOUT: await OrderService(db_session).count_for_user(user.id) > 0,
        OnboardingStep.PAYMENT: await PaymentMethodService(db_session).count_for_user(user.id) > 0,
    }
    return build_progress(completed)
