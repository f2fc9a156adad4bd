from datetime import datetime
from typing import Any
from uuid import UUID
from pydantic import ConfigDict

from app.schemas.schemas import CamelModel
from app.schemas.status_schema import RiderStatus, WorkStatus


class RiderCreate(CamelModel):
    """Rider application; unknown fields (licence, bike info, ...) are kept."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    phone: str | None = None
    rider_district: str | None = None
    rider_region: str | None = None


class RiderResponse(CamelModel):
    id: UUID
    name: str | None = None
    email: str
    phone: str | None = None
    rider_district: str | None = None
    rider_region: str | None = None
    status: RiderStatus
    work_status: WorkStatus | None = None
    details: dict[str, Any] = {}
    created_at: datetime


class RiderStatusUpdate(CamelModel):
    status: RiderStatus
