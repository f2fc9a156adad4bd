from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.auth import is_admin
from app.models.models import Parcel, Rider, utc_now
from app.schemas.parcel_schemas import (
    AssignmentResponse,
    DeliveryStatusResponse,
    ParcelCreate,
    ParcelCreatedResponse,
    ParcelResponse,
)
from app.schemas.schemas import DeleteResponse
from app.schemas.status_schema import (
    RIDER_STATUSES,
    DeliveryStatus,
    PaymentStatus,
    RiderStatus,
    WorkStatus,
    lifecycle_rank,
)
from app.services.tracking_service import TrackingLogService
from app.utils.logger_config import setup_logger
from app.utils.utils import generate_tracking_id

logger = setup_logger()


async def get_parcel_or_404(db: AsyncSession, parcel_id: UUID) -> Parcel:
    parcel = await db.get(Parcel, parcel_id)
    if not parcel:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Parcel not found"
        )
    return parcel


async def create_parcel(
    db: AsyncSession, parcel_data: ParcelCreate, current_email: str
) -> ParcelCreatedResponse:
    """
    Record a parcel request exactly as submitted.

    The request is not validated; missing sender or cost is only logged. A
    tracking ID is generated here and never changes afterwards.
    """
    missing = [
        name
        for name in ("sender_email", "courier_cost")
        if getattr(parcel_data, name) is None
    ]
    if missing:
        logger.warning(
            f"Parcel request from {current_email} is missing {', '.join(missing)}"
        )

    parcel = Parcel(
        sender_email=parcel_data.sender_email,
        sender_name=parcel_data.sender_name,
        parcel_name=parcel_data.parcel_name,
        parcel_type=parcel_data.parcel_type,
        courier_cost=parcel_data.courier_cost,
        tracking_id=generate_tracking_id(),
        payment_status=PaymentStatus.UNPAID.value,
        delivery_status=DeliveryStatus.PARCEL_REQUEST_SENT.value,
        details=dict(parcel_data.model_extra or {}),
    )
    db.add(parcel)
    await db.commit()
    await db.refresh(parcel)

    parcel_id, tracking_id = parcel.id, parcel.tracking_id
    logger.info(f"Parcel {parcel_id} requested, tracking ID {tracking_id}")

    tracking = await TrackingLogService.log_tracking(
        db, tracking_id, DeliveryStatus.PARCEL_REQUEST_SENT.value
    )

    return ParcelCreatedResponse(
        id=parcel_id, tracking_id=tracking_id, tracking_logged=tracking.ok
    )


async def get_parcels(
    db: AsyncSession,
    email: str | None = None,
    delivery_status: str | None = None,
) -> list[ParcelResponse]:
    stmt = select(Parcel)
    if email:
        stmt = stmt.where(Parcel.sender_email == email)
    if delivery_status:
        stmt = stmt.where(Parcel.delivery_status == delivery_status)
    stmt = stmt.order_by(Parcel.requested_at.desc())

    result = await db.execute(stmt)
    return [ParcelResponse.model_validate(parcel) for parcel in result.scalars().all()]


async def get_rider_parcels(
    db: AsyncSession, rider_email: str, delivery_status: str | None = None
) -> list[ParcelResponse]:
    """
    Parcels assigned to a rider.

    `delivered` returns the rider's completed deliveries, anything else (or
    nothing) returns every assignment that is still in progress.
    """
    stmt = select(Parcel).where(Parcel.rider_email == rider_email)
    if delivery_status == DeliveryStatus.DELIVERED.value:
        stmt = stmt.where(Parcel.delivery_status == DeliveryStatus.DELIVERED.value)
    else:
        stmt = stmt.where(Parcel.delivery_status != DeliveryStatus.DELIVERED.value)
    stmt = stmt.order_by(Parcel.requested_at.desc())

    result = await db.execute(stmt)
    return [ParcelResponse.model_validate(parcel) for parcel in result.scalars().all()]


async def get_parcel(db: AsyncSession, parcel_id: UUID) -> ParcelResponse:
    parcel = await get_parcel_or_404(db, parcel_id)
    return ParcelResponse.model_validate(parcel)


async def assign_rider(
    db: AsyncSession, parcel_id: UUID, rider_id: UUID
) -> AssignmentResponse:
    """
    Hand a paid parcel to an approved rider.

    The parcel and the rider are updated in one transaction, so either both
    reflect the assignment or neither does.
    """
    parcel = await get_parcel_or_404(db, parcel_id)
    rider = await db.get(Rider, rider_id)
    if not rider:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Rider not found"
        )

    if parcel.delivery_status != DeliveryStatus.PENDING_PICKUP.value:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Parcel is not waiting for pickup (status: {parcel.delivery_status})",
        )
    if rider.status != RiderStatus.APPROVED.value:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Rider is not approved",
        )

    parcel.delivery_status = DeliveryStatus.ASSIGNED_RIDER.value
    parcel.rider_id = rider.id
    parcel.rider_name = rider.name
    parcel.rider_email = rider.email
    parcel.assigned_at = utc_now()
    rider.work_status = WorkStatus.IN_DELIVERY.value

    await db.commit()
    await db.refresh(parcel)

    response = ParcelResponse.model_validate(parcel)
    rider_work_status = rider.work_status
    logger.info(f"Rider {rider.id} assigned to parcel {parcel.id}")

    tracking = await TrackingLogService.log_tracking(
        db, response.tracking_id, DeliveryStatus.ASSIGNED_RIDER.value
    )

    return AssignmentResponse(
        parcel=response,
        rider_work_status=rider_work_status,
        tracking_logged=tracking.ok,
    )


async def update_delivery_status(
    db: AsyncSession,
    parcel_id: UUID,
    delivery_status: DeliveryStatus,
    current_email: str,
) -> DeliveryStatusResponse:
    """
    Move an assigned parcel forward in its lifecycle.

    Only the assigned rider or an admin may report progress, and a parcel
    never moves backwards. Delivering a parcel frees its rider in the same
    transaction.
    """
    if delivery_status not in RIDER_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{delivery_status.value} cannot be set through a status update",
        )

    parcel = await get_parcel_or_404(db, parcel_id)

    if parcel.rider_email != current_email and not await is_admin(db, current_email):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the assigned rider can update this parcel",
        )

    if lifecycle_rank(parcel.delivery_status) < lifecycle_rank(
        DeliveryStatus.ASSIGNED_RIDER.value
    ):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Parcel has no rider assigned",
        )
    if lifecycle_rank(delivery_status.value) <= lifecycle_rank(parcel.delivery_status):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Parcel is already {parcel.delivery_status}",
        )

    parcel.delivery_status = delivery_status.value
    rider_released = False

    if delivery_status == DeliveryStatus.DELIVERED:
        parcel.delivered_at = utc_now()
        rider = await db.get(Rider, parcel.rider_id) if parcel.rider_id else None
        if rider:
            rider.work_status = WorkStatus.AVAILABLE.value
            rider_released = True
        else:
            logger.warning(f"Delivered parcel {parcel.id} has no rider record to release")

    await db.commit()

    tracking_id = parcel.tracking_id
    logger.info(f"Parcel {parcel.id} is now {delivery_status.value}")

    tracking = await TrackingLogService.log_tracking(
        db, tracking_id, delivery_status.value
    )

    return DeliveryStatusResponse(
        id=parcel_id,
        tracking_id=tracking_id,
        delivery_status=delivery_status,
        rider_released=rider_released,
        tracking_logged=tracking.ok,
    )


async def delete_parcel(
    db: AsyncSession, parcel_id: UUID, current_email: str
) -> DeleteResponse:
    """
    Delete a parcel as its sender or an admin. A rider still working on the
    parcel becomes available again in the same commit.
    """
    parcel = await get_parcel_or_404(db, parcel_id)

    if parcel.sender_email != current_email and not await is_admin(db, current_email):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden access",
        )

    # Deleting an undelivered parcel ends its assignment
    rider = None
    if parcel.rider_id and parcel.delivery_status != DeliveryStatus.DELIVERED.value:
        rider = await db.get(Rider, parcel.rider_id)
        if rider:
            rider.work_status = WorkStatus.AVAILABLE.value

    await db.delete(parcel)
    await db.commit()

    if rider:
        logger.info(f"Rider {rider.id} released by deletion of parcel {parcel_id}")
    logger.info(f"Parcel {parcel_id} deleted by {current_email}")
    return DeleteResponse(deleted_count=1)
