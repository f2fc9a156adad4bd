from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.database import get_db
from app.schemas.tracking_schemas import TrackingEventResponse
from app.services.tracking_service import TrackingLogService

router = APIRouter(tags=["Tracking"])


@router.get("/parcelTracing/{tracking_id}", status_code=status.HTTP_200_OK)
async def get_tracking_history(
    tracking_id: str, db: AsyncSession = Depends(get_db)
) -> list[TrackingEventResponse]:
    return await TrackingLogService.get_history(db, tracking_id)
