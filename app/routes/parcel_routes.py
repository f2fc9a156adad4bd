from uuid import UUID
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.auth import get_current_admin, get_current_email
from app.database.database import get_db
from app.models.models import User
from app.schemas.parcel_schemas import (
    AssignmentResponse,
    DeliveryStatusResponse,
    DeliveryStatusUpdate,
    ParcelCreate,
    ParcelCreatedResponse,
    ParcelResponse,
    RiderAssignment,
)
from app.schemas.schemas import DeleteResponse
from app.services import parcel_service
from app.utils.limiter import limiter


router = APIRouter(tags=["Parcels"])


@router.post(
    "/parcels", response_model=ParcelCreatedResponse, status_code=status.HTTP_201_CREATED
)
@limiter.limit("10/minute")
async def create_parcel(
    request: Request,
    parcel_data: ParcelCreate,
    db: AsyncSession = Depends(get_db),
    current_email: str = Depends(get_current_email),
):
    return await parcel_service.create_parcel(
        db=db, parcel_data=parcel_data, current_email=current_email
    )


@router.patch("/parcels", status_code=status.HTTP_200_OK)
async def assign_rider(
    data: RiderAssignment,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> AssignmentResponse:
    return await parcel_service.assign_rider(
        db=db, parcel_id=data.parcel_id, rider_id=data.rider_id
    )


@router.get("/parcels", status_code=status.HTTP_200_OK)
async def get_parcels(
    email: str | None = Query(None),
    delivery_status: str | None = Query(None, alias="deliveryStatus"),
    db: AsyncSession = Depends(get_db),
    current_email: str = Depends(get_current_email),
) -> list[ParcelResponse]:
    return await parcel_service.get_parcels(
        db=db, email=email, delivery_status=delivery_status
    )


@router.get("/parcels/rider", status_code=status.HTTP_200_OK)
async def get_rider_parcels(
    rider_email: str | None = Query(None, alias="riderEmail"),
    delivery_status: str | None = Query(None, alias="deliveryStatus"),
    db: AsyncSession = Depends(get_db),
    current_email: str = Depends(get_current_email),
) -> list[ParcelResponse]:
    """Active assignments by default, completed ones with deliveryStatus=delivered."""
    return await parcel_service.get_rider_parcels(
        db=db,
        rider_email=rider_email or current_email,
        delivery_status=delivery_status,
    )


@router.get("/parcels/{parcel_id}", status_code=status.HTTP_200_OK)
async def get_parcel(
    parcel_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_email: str = Depends(get_current_email),
) -> ParcelResponse:
    return await parcel_service.get_parcel(db=db, parcel_id=parcel_id)


@router.patch("/parcel/{parcel_id}/status", status_code=status.HTTP_200_OK)
async def update_delivery_status(
    parcel_id: UUID,
    data: DeliveryStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_email: str = Depends(get_current_email),
) -> DeliveryStatusResponse:
    return await parcel_service.update_delivery_status(
        db=db,
        parcel_id=parcel_id,
        delivery_status=data.delivery_status,
        current_email=current_email,
    )


@router.delete("/parcels/{parcel_id}", status_code=status.HTTP_200_OK)
async def delete_parcel(
    parcel_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_email: str = Depends(get_current_email),
) -> DeleteResponse:
    return await parcel_service.delete_parcel(
        db=db, parcel_id=parcel_id, current_email=current_email
    )
