from datetime import datetime
from uuid import UUID
from pydantic import Field

from app.schemas.schemas import CamelModel


class CheckoutSessionCreate(CamelModel):
    parcel_id: UUID = Field(alias="parcelId")
    parcel_name: str | None = None
    courier_cost: float | None = Field(default=None, gt=0)
    sender_email: str | None = None


class CheckoutSessionResponse(CamelModel):
    url: str
    session_id: str


class PaymentSuccessResponse(CamelModel):
    success: bool
    message: str | None = None
    tracking_id: str | None = Field(default=None, alias="trackingID")
    transaction_id: str | None = Field(default=None, alias="transactionID")
    tracking_logged: bool | None = None


class PaymentRecordResponse(CamelModel):
    id: UUID
    transaction_id: str = Field(alias="transactionID")
    session_id: str | None = None
    parcel_id: str | None = Field(default=None, alias="parcelID")
    parcel_name: str | None = None
    customer_email: str | None = None
    amount: float
    currency: str
    payment_status: str
    tracking_id: str | None = Field(default=None, alias="trackingID")
    paid_at: datetime
