import re

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.models import TrackingEvent
from app.schemas.tracking_schemas import TrackingEventResponse, TrackingResult
from app.utils.logger_config import setup_logger

logger = setup_logger()


def humanize_status(status_token: str) -> str:
    """`Parcel_Request_Sent` -> `Parcel Request Sent`"""
    return " ".join(part for part in re.split(r"[_-]+", status_token) if part)


class TrackingLogService:
    @staticmethod
    async def log_tracking(
        db: AsyncSession, tracking_id: str, tracking_status: str
    ) -> TrackingResult:
        """
        Append a tracking event for a parcel.

        Runs after the caller has committed its own changes, so a failure here
        only loses the event. It is rolled back, logged, and reported in the
        returned result rather than raised.
        """
        event = TrackingEvent(
            tracking_id=tracking_id,
            status=tracking_status,
            detail=humanize_status(tracking_status),
        )
        try:
            db.add(event)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception(
                f"Tracking event {tracking_status} for {tracking_id} was not recorded"
            )
            return TrackingResult(
                ok=False, tracking_id=tracking_id, status=tracking_status, error=str(e)
            )

        return TrackingResult(
            ok=True, tracking_id=tracking_id, status=tracking_status, event_id=event.id
        )

    @staticmethod
    async def get_history(
        db: AsyncSession, tracking_id: str
    ) -> list[TrackingEventResponse]:
        """
        Every event logged for a tracking id, oldest first.

        Raises:
            HTTPException 404 when nothing was ever logged for the id
        """
        stmt = (
            select(TrackingEvent)
            .where(TrackingEvent.tracking_id == tracking_id)
            .order_by(TrackingEvent.id)
        )
        result = await db.execute(stmt)
        events = result.scalars().all()
        if not events:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No tracking history for this tracking ID",
            )
        return [TrackingEventResponse.model_validate(event) for event in events]
