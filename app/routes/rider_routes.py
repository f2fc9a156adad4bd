from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.auth import get_current_admin, get_current_email
from app.database.database import get_db
from app.models.models import User
from app.schemas.rider_schemas import RiderCreate, RiderResponse, RiderStatusUpdate
from app.schemas.status_schema import RiderStatus, WorkStatus
from app.services import rider_service


router = APIRouter(prefix="/riders", tags=["Riders"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def apply_as_rider(
    rider_data: RiderCreate,
    db: AsyncSession = Depends(get_db),
    current_email: str = Depends(get_current_email),
) -> RiderResponse:
    return await rider_service.apply_as_rider(
        db=db, rider_data=rider_data, current_email=current_email
    )


@router.get("", status_code=status.HTTP_200_OK)
async def get_riders(
    rider_status: RiderStatus | None = Query(None, alias="status"),
    work_status: WorkStatus | None = Query(None, alias="workStatus"),
    district: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> list[RiderResponse]:
    return await rider_service.get_riders(
        db=db, rider_status=rider_status, work_status=work_status, district=district
    )


@router.patch("/{rider_id}", status_code=status.HTTP_200_OK)
async def update_rider_status(
    rider_id: UUID,
    data: RiderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> RiderResponse:
    """
    Set a rider application's status. Approval also makes the rider
    available and gives the account the rider role.
    """
    return await rider_service.update_rider_status(
        db=db, rider_id=rider_id, rider_status=data.status
    )
