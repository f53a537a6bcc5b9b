"""Prescription upload, pharmacist verification and refill endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from pharmacy.api.middleware.auth import get_current_user, require_admin
from pharmacy.auth.access_checker import AccessChecker
from pharmacy.models.prescription import (
    Prescription,
    PrescriptionCreate,
    PrescriptionDB,
    PrescriptionUpdate,
    RefillNotification,
    RefillNotificationDB,
    RefillRequest,
    RefillRequestCreate,
    RefillRequestDB,
    RefillRequestUpdate,
    RevokePrescriptionRequest,
    VerificationStatus,
    VerifyPrescriptionRequest,
)
from pharmacy.models.user import UserDB
from pharmacy.services.database import get_db_session
from pharmacy.services.prescriptions import PrescriptionService, RefillService

router = APIRouter(prefix="/api/prescriptions", tags=["prescriptions"])
refills_router = APIRouter(prefix="/api/refills", tags=["refills"])


class RevokePrescriptionResponse(BaseModel):
    """Revoked prescription plus the number of pending orders it cancelled."""

    prescription: Prescription
    orders_revoked: int


def _prescription_not_found(prescription_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Prescription {prescription_id} not found",
    )


async def _owned_prescription(
    service: PrescriptionService, prescription_id: int, user: UserDB
) -> PrescriptionDB:
    prescription = await service.get_prescription(prescription_id)
    if prescription is None:
        raise _prescription_not_found(prescription_id)
    AccessChecker.require_owner_or_admin(user, prescription.user_id, "prescription")
    return prescription


@router.get("/verification/queue", response_model=list[Prescription])
async def verification_queue(
    verification_status: VerificationStatus = Query(VerificationStatus.UNVERIFIED, alias="status"),
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> list[PrescriptionDB]:
    """Prescriptions awaiting (or past) pharmacist review, oldest first."""
    return await PrescriptionService(db).verification_queue(verification_status)


@router.get("/user/{user_id}", response_model=list[Prescription])
async def prescriptions_for_user(
    user_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> list[PrescriptionDB]:
    AccessChecker.require_owner_or_admin(current_user, user_id, "prescriptions")
    return await PrescriptionService(db).prescriptions_for_user(user_id)


@router.get("/{prescription_id}", response_model=Prescription)
async def get_prescription(
    prescription_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PrescriptionDB:
    return await _owned_prescription(PrescriptionService(db), prescription_id, current_user)


@router.post("", response_model=Prescription, status_code=status.HTTP_201_CREATED)
async def create_prescription(
    request: PrescriptionCreate,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PrescriptionDB:
    AccessChecker.require_owner_or_admin(current_user, request.user_id, "prescription")
    return await PrescriptionService(db).create_prescription(request)


@router.put("/{prescription_id}", response_model=Prescription)
async def update_prescription(
    prescription_id: int,
    request: PrescriptionUpdate,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PrescriptionDB:
    """Edit prescription details. Only administrators may change the status."""
    service = PrescriptionService(db)
    await _owned_prescription(service, prescription_id, current_user)

    if "status" in request.model_fields_set:
        AccessChecker.require_admin(current_user, "change a prescription's status")

    return await service.update_prescription(prescription_id, request)


@router.post("/{prescription_id}/verify", response_model=Prescription)
async def verify_prescription(
    prescription_id: int,
    request: VerifyPrescriptionRequest,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PrescriptionDB:
    prescription = await PrescriptionService(db).verify_prescription(
        prescription_id, admin.id, request
    )
    if prescription is None:
        raise _prescription_not_found(prescription_id)
    return prescription


@router.post("/{prescription_id}/revoke", response_model=RevokePrescriptionResponse)
async def revoke_prescription(
    prescription_id: int,
    request: RevokePrescriptionRequest,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> RevokePrescriptionResponse:
    """Revoke a prescription; its pending orders move to ``revoked``."""
    result = await PrescriptionService(db).revoke_prescription(prescription_id, request.reason)
    if result is None:
        raise _prescription_not_found(prescription_id)

    prescription, orders_revoked = result
    return RevokePrescriptionResponse(
        prescription=Prescription.model_validate(prescription),
        orders_revoked=orders_revoked,
    )


@router.post("/{prescription_id}/security-code", response_model=Prescription)
async def regenerate_security_code(
    prescription_id: int,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PrescriptionDB:
    prescription = await PrescriptionService(db).regenerate_security_code(prescription_id)
    if prescription is None:
        raise _prescription_not_found(prescription_id)
    return prescription


# ========== Refills ==========


@refills_router.post("", response_model=RefillRequest, status_code=status.HTTP_201_CREATED)
async def create_refill(
    request: RefillRequestCreate,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> RefillRequestDB:
    """Request a refill on behalf of the prescription's owner.

    Raises:
        ValueError: If the prescription has been revoked (mapped to 400)
    """
    prescription = await _owned_prescription(
        PrescriptionService(db), request.prescription_id, current_user
    )
    return await RefillService(db).create_refill(prescription.user_id, request)


@refills_router.get("/user/{user_id}", response_model=list[RefillRequest])
async def refills_for_user(
    user_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> list[RefillRequestDB]:
    AccessChecker.require_owner_or_admin(current_user, user_id, "refill requests")
    return await RefillService(db).refills_for_user(user_id)


@refills_router.get("/notifications/{user_id}", response_model=list[RefillNotification])
async def notifications_for_user(
    user_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> list[RefillNotificationDB]:
    AccessChecker.require_owner_or_admin(current_user, user_id, "notifications")
    return await RefillService(db).notifications_for_user(user_id)


@refills_router.post("/notifications/{notification_id}/read", response_model=RefillNotification)
async def mark_notification_read(
    notification_id: int,
    current_user: UserDB = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> RefillNotificationDB:
    service = RefillService(db)
    notification = await service.get_notification(notification_id)
    if notification is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Notification {notification_id} not found",
        )
    AccessChecker.require_owner_or_admin(current_user, notification.user_id, "notification")
    return await service.mark_notification_read(notification_id)


@refills_router.put("/{refill_id}", response_model=RefillRequest)
async def update_refill(
    refill_id: int,
    request: RefillRequestUpdate,
    admin: UserDB = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> RefillRequestDB:
    """Decide a refill request; the owner receives a notification."""
    refill = await RefillService(db).update_refill(refill_id, request)
    if refill is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Refill request {refill_id} not found",
        )
    return refill
