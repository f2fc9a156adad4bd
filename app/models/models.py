from typing import Optional
from uuid import UUID, uuid4
from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database.database import Base
from app.schemas.status_schema import (
    DeliveryStatus,
    PaymentStatus,
    RiderStatus,
    UserRole,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    display_name: Mapped[Optional[str]] = mapped_column(nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(nullable=True)
    role: Mapped[str] = mapped_column(String(20), default=UserRole.USER.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Rider(Base):
    __tablename__ = "riders"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[Optional[str]] = mapped_column(nullable=True)
    email: Mapped[str] = mapped_column(String(320), index=True)
    phone: Mapped[Optional[str]] = mapped_column(nullable=True)
    rider_district: Mapped[Optional[str]] = mapped_column(nullable=True, index=True)
    rider_region: Mapped[Optional[str]] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=RiderStatus.PENDING.value)
    work_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    details: Mapped[dict] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


class Parcel(Base):
    __tablename__ = "parcels"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    sender_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True, index=True)
    sender_name: Mapped[Optional[str]] = mapped_column(nullable=True)
    parcel_name: Mapped[Optional[str]] = mapped_column(nullable=True)
    parcel_type: Mapped[Optional[str]] = mapped_column(nullable=True)
    courier_cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    tracking_id: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    payment_status: Mapped[str] = mapped_column(
        String(20), default=PaymentStatus.UNPAID.value
    )
    delivery_status: Mapped[str] = mapped_column(
        String(40), default=DeliveryStatus.PARCEL_REQUEST_SENT.value, index=True
    )
    rider_id: Mapped[Optional[UUID]] = mapped_column(nullable=True)
    rider_name: Mapped[Optional[str]] = mapped_column(nullable=True)
    rider_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True, index=True)
    details: Mapped[dict] = mapped_column(JSON, default=dict)
    requested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    assigned_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    delivered_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class TrackingEvent(Base):
    """Append-only: rows are inserted, never updated or deleted."""

    __tablename__ = "tracking_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tracking_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    status: Mapped[str] = mapped_column(String(40), nullable=False)
    detail: Mapped[str] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


class PaymentRecord(Base):
    __tablename__ = "payments"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    transaction_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    session_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    parcel_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    parcel_name: Mapped[Optional[str]] = mapped_column(nullable=True)
    customer_email: Mapped[Optional[str]] = mapped_column(
        String(320), nullable=True, index=True
    )
    amount: Mapped[float] = mapped_column(Float)
    currency: Mapped[str] = mapped_column(String(10))
    payment_status: Mapped[str] = mapped_column(String(20))
    tracking_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, index=True)
    paid_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
