from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.models import Parcel, PaymentRecord
from app.schemas.payment_schemas import (
    CheckoutSessionCreate,
    CheckoutSessionResponse,
    PaymentRecordResponse,
    PaymentSuccessResponse,
)
from app.schemas.status_schema import DeliveryStatus, PaymentStatus
from app.services.parcel_service import get_parcel_or_404
from app.services.tracking_service import TrackingLogService
from app.utils.checkout_service import StripeCheckoutGateway
from app.utils.logger_config import setup_logger
from app.utils.utils import major_units, minor_units

logger = setup_logger()


async def get_payment_by_transaction_id(
    db: AsyncSession, transaction_id: str
) -> PaymentRecord | None:
    result = await db.execute(
        select(PaymentRecord).where(PaymentRecord.transaction_id == transaction_id)
    )
    return result.scalar_one_or_none()


def already_paid(payment: PaymentRecord) -> PaymentSuccessResponse:
    return PaymentSuccessResponse(
        success=True,
        message="Already paid for it.",
        tracking_id=payment.tracking_id,
        transaction_id=payment.transaction_id,
    )


async def create_checkout_session(
    db: AsyncSession,
    payment_info: CheckoutSessionCreate,
    gateway: StripeCheckoutGateway,
) -> CheckoutSessionResponse:
    """Charge the stored courier cost; a submitted cost must agree with it."""
    parcel = await get_parcel_or_404(db, payment_info.parcel_id)
    if parcel.payment_status == PaymentStatus.PAID.value:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Parcel is already paid"
        )

    if not parcel.courier_cost or parcel.courier_cost <= 0:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Parcel has no courier cost to charge",
        )
    if payment_info.courier_cost is not None and minor_units(
        payment_info.courier_cost
    ) != minor_units(parcel.courier_cost):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Courier cost does not match the parcel",
        )

    parcel_name = payment_info.parcel_name or parcel.parcel_name or "Parcel delivery"
    session = await gateway.create_session(
        amount=parcel.courier_cost,
        product_name=parcel_name,
        customer_email=payment_info.sender_email or parcel.sender_email,
        metadata={
            "parcelId": str(parcel.id),
            "parcelName": parcel_name,
            "trackingID": parcel.tracking_id,
        },
    )

    logger.info(f"Checkout session {session.id} opened for parcel {parcel.id}")
    return CheckoutSessionResponse(url=session.url, session_id=session.id)


async def complete_checkout(
    db: AsyncSession, session_id: str, gateway: StripeCheckoutGateway
) -> PaymentSuccessResponse:
    """
    Settle a checkout session once the customer returns from the gateway.

    Idempotent on the gateway's payment intent: a session that was already
    settled returns the stored tracking and transaction IDs without touching
    anything. The parcel update and the payment record share one commit.

    The paid amount must equal the parcel's courier cost (409 otherwise). A
    payment for a parcel that is already paid is recorded without moving the
    parcel back to pending-pickup.
    """
    session = await gateway.retrieve_session(session_id)
    transaction_id = session.payment_intent

    if transaction_id:
        existing_payment = await get_payment_by_transaction_id(db, transaction_id)
        if existing_payment:
            logger.info(f"Duplicate settlement for transaction {transaction_id} ignored")
            return already_paid(existing_payment)

    if session.payment_status != PaymentStatus.PAID.value or not transaction_id:
        logger.info(
            f"Checkout session {session_id} not settled (status: {session.payment_status})"
        )
        return PaymentSuccessResponse(success=False)

    parcel_id = session.metadata.get("parcelId")
    try:
        parcel = await get_parcel_or_404(db, UUID(parcel_id))
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Parcel not found"
        )

    if parcel.courier_cost is None or session.amount_total != minor_units(
        parcel.courier_cost
    ):
        logger.warning(
            f"Checkout session {session_id} paid {session.amount_total} "
            f"for parcel {parcel_id} costing {parcel.courier_cost}"
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Paid amount does not match the parcel's courier cost",
        )

    # A second session paid for the same parcel is recorded, but the parcel
    # has already moved on and must not go back to pending-pickup
    settles_parcel = parcel.payment_status != PaymentStatus.PAID.value
    if settles_parcel:
        parcel.payment_status = PaymentStatus.PAID.value
        parcel.delivery_status = DeliveryStatus.PENDING_PICKUP.value
    else:
        logger.warning(
            f"Parcel {parcel_id} was already paid, recording extra payment {transaction_id}"
        )
    tracking_id = parcel.tracking_id

    db.add(
        PaymentRecord(
            transaction_id=transaction_id,
            session_id=session.id,
            parcel_id=parcel_id,
            parcel_name=session.metadata.get("parcelName") or parcel.parcel_name,
            customer_email=session.customer_email,
            amount=major_units(session.amount_total),
            currency=session.currency or "",
            payment_status=session.payment_status,
            tracking_id=tracking_id,
        )
    )

    try:
        await db.commit()
    except IntegrityError:
        # Another request settled the same payment first
        await db.rollback()
        existing_payment = await get_payment_by_transaction_id(db, transaction_id)
        if existing_payment is None:
            raise
        logger.info(f"Concurrent settlement for transaction {transaction_id} ignored")
        return already_paid(existing_payment)

    logger.info(f"Payment {transaction_id} settled for parcel {parcel_id}")

    if not settles_parcel:
        return PaymentSuccessResponse(
            success=True,
            message="Parcel was already paid, payment recorded.",
            tracking_id=tracking_id,
            transaction_id=transaction_id,
        )

    tracking = await TrackingLogService.log_tracking(
        db, tracking_id, DeliveryStatus.PENDING_PICKUP.value
    )

    return PaymentSuccessResponse(
        success=True,
        tracking_id=tracking_id,
        transaction_id=transaction_id,
        tracking_logged=tracking.ok,
    )


async def get_payments(
    db: AsyncSession, email: str | None = None
) -> list[PaymentRecordResponse]:
    stmt = select(PaymentRecord)
    if email:
        stmt = stmt.where(PaymentRecord.customer_email == email)
    stmt = stmt.order_by(PaymentRecord.paid_at.desc())

    result = await db.execute(stmt)
    return [
        PaymentRecordResponse.model_validate(payment)
        for payment in result.scalars().all()
    ]
