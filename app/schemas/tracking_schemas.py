from datetime import datetime
from pydantic import Field

from app.schemas.schemas import CamelModel


class TrackingEventResponse(CamelModel):
    id: int
    tracking_id: str = Field(alias="trackingID")
    status: str
    detail: str
    created_at: datetime


class TrackingResult(CamelModel):
    """Outcome of a tracking append; failures are reported, not raised."""

    ok: bool
    tracking_id: str = Field(alias="trackingID")
    status: str
    event_id: int | None = None
    error: str | None = None
