from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.models import Rider, User
from app.schemas.rider_schemas import RiderCreate, RiderResponse
from app.schemas.status_schema import RiderStatus, UserRole, WorkStatus
from app.utils.logger_config import setup_logger

logger = setup_logger()


async def apply_as_rider(
    db: AsyncSession, rider_data: RiderCreate, current_email: str
) -> RiderResponse:
    """Store a rider application as pending for the calling user."""
    stmt = select(Rider).where(
        Rider.email == current_email,
        Rider.status.in_([RiderStatus.PENDING.value, RiderStatus.APPROVED.value]),
    )
    result = await db.execute(stmt)
    if result.scalars().first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A rider application already exists for this account",
        )

    rider = Rider(
        name=rider_data.name,
        email=current_email,
        phone=rider_data.phone,
        rider_district=rider_data.rider_district,
        rider_region=rider_data.rider_region,
        status=RiderStatus.PENDING.value,
        details={
            key: value
            for key, value in (rider_data.model_extra or {}).items()
            if key != "email"
        },
    )
    db.add(rider)
    await db.commit()
    await db.refresh(rider)

    logger.info(f"Rider application {rider.id} received from {current_email}")
    return RiderResponse.model_validate(rider)


async def get_riders(
    db: AsyncSession,
    rider_status: RiderStatus | None = None,
    work_status: WorkStatus | None = None,
    district: str | None = None,
) -> list[RiderResponse]:
    stmt = select(Rider)
    if rider_status:
        stmt = stmt.where(Rider.status == rider_status.value)
    if work_status:
        stmt = stmt.where(Rider.work_status == work_status.value)
    if district:
        stmt = stmt.where(Rider.rider_district == district)
    stmt = stmt.order_by(Rider.created_at.desc())

    result = await db.execute(stmt)
    return [RiderResponse.model_validate(rider) for rider in result.scalars().all()]


async def update_rider_status(
    db: AsyncSession, rider_id: UUID, rider_status: RiderStatus
) -> RiderResponse:
    """
    Approve, reject or re-queue a rider application.

    Approval makes the rider available for assignments and promotes the
    matching user account to the rider role. Both writes share one commit.
    """
    rider = await db.get(Rider, rider_id)
    if not rider:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Rider not found"
        )

    was_approved = rider.status == RiderStatus.APPROVED.value
    rider.status = rider_status.value

    if rider_status == RiderStatus.APPROVED:
        # Re-approving must not free a rider who is mid-delivery
        if not was_approved or rider.work_status is None:
            rider.work_status = WorkStatus.AVAILABLE.value
        result = await db.execute(select(User).where(User.email == rider.email))
        user = result.scalar_one_or_none()
        if user:
            user.role = UserRole.RIDER.value
        else:
            logger.warning(
                f"Rider {rider.id} approved but no user account exists for {rider.email}"
            )

    await db.commit()
    await db.refresh(rider)

    logger.info(f"Rider {rider.id} status set to {rider.status}")
    return RiderResponse.model_validate(rider)
