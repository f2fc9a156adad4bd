from datetime import datetime
from typing import Any
from uuid import UUID
from pydantic import ConfigDict, Field

from app.schemas.schemas import CamelModel
from app.schemas.status_schema import DeliveryStatus, PaymentStatus


class ParcelCreate(CamelModel):
    """
    Parcel request as submitted by the sender.

    Nothing is required: the record is stored as submitted, and any field not
    listed here (receiver, districts, weight, ...) is kept in `details`.
    """

    model_config = ConfigDict(extra="allow")

    sender_email: str | None = None
    sender_name: str | None = None
    parcel_name: str | None = None
    parcel_type: str | None = None
    courier_cost: float | None = None


class ParcelResponse(CamelModel):
    id: UUID
    sender_email: str | None = None
    sender_name: str | None = None
    parcel_name: str | None = None
    parcel_type: str | None = None
    courier_cost: float | None = None
    tracking_id: str = Field(alias="trackingID")
    payment_status: PaymentStatus
    delivery_status: str
    rider_id: UUID | None = None
    rider_name: str | None = None
    rider_email: str | None = None
    details: dict[str, Any] = {}
    requested_at: datetime
    assigned_at: datetime | None = None
    delivered_at: datetime | None = None


class ParcelCreatedResponse(CamelModel):
    id: UUID
    tracking_id: str = Field(alias="trackingID")
    tracking_logged: bool


class RiderAssignment(CamelModel):
    parcel_id: UUID
    rider_id: UUID


class AssignmentResponse(CamelModel):
    parcel: ParcelResponse
    rider_work_status: str
    tracking_logged: bool


class DeliveryStatusUpdate(CamelModel):
    delivery_status: DeliveryStatus


class DeliveryStatusResponse(CamelModel):
    id: UUID
    tracking_id: str = Field(alias="trackingID")
    delivery_status: DeliveryStatus
    rider_released: bool
    tracking_logged: bool
