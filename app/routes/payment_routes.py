from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.auth import ensure_self_or_forbidden, get_current_email, is_admin
from app.database.database import get_db
from app.schemas.payment_schemas import (
    CheckoutSessionCreate,
    CheckoutSessionResponse,
    PaymentRecordResponse,
    PaymentSuccessResponse,
)
from app.services import payment_service
from app.utils.checkout_service import StripeCheckoutGateway, get_checkout_gateway
from app.utils.limiter import limiter


router = APIRouter(tags=["Payments"])


@router.post(
    "/create-checkout-session",
    response_model=CheckoutSessionResponse,
    status_code=status.HTTP_200_OK,
)
@limiter.limit("10/minute")
async def create_checkout_session(
    request: Request,
    payment_info: CheckoutSessionCreate,
    db: AsyncSession = Depends(get_db),
    gateway: StripeCheckoutGateway = Depends(get_checkout_gateway),
    current_email: str = Depends(get_current_email),
):
    """Open a checkout session for a parcel and return the redirect URL."""
    return await payment_service.create_checkout_session(
        db=db, payment_info=payment_info, gateway=gateway
    )


@router.patch("/payment-success", status_code=status.HTTP_200_OK)
async def payment_success(
    session_id: str = Query(...),
    db: AsyncSession = Depends(get_db),
    gateway: StripeCheckoutGateway = Depends(get_checkout_gateway),
    current_email: str = Depends(get_current_email),
) -> PaymentSuccessResponse:
    """
    Settle a checkout session. Safe to call repeatedly for the same session:
    later calls return the tracking and transaction IDs of the first.
    """
    return await payment_service.complete_checkout(
        db=db, session_id=session_id, gateway=gateway
    )


@router.get("/payments", status_code=status.HTTP_200_OK)
async def get_payments(
    email: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    current_email: str = Depends(get_current_email),
) -> list[PaymentRecordResponse]:
    """A caller's own payment history, or every payment for admins."""
    if email:
        ensure_self_or_forbidden(email, current_email)
    elif not await is_admin(db, current_email):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden access"
        )
    return await payment_service.get_payments(db=db, email=email)
