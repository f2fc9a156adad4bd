from typing import Any

import httpx
from fastapi import HTTPException, status
from pydantic import BaseModel

from app.config.config import settings
from app.utils.logger_config import setup_logger
from app.utils.utils import minor_units

logger = setup_logger()


class CheckoutSession(BaseModel):
    id: str
    url: str


class CheckoutSessionStatus(BaseModel):
    id: str
    payment_status: str
    amount_total: int | None = None
    currency: str | None = None
    customer_email: str | None = None
    payment_intent: str | None = None
    metadata: dict[str, str] = {}


class StripeCheckoutGateway:
    """Thin client over the Stripe Checkout Sessions REST API."""

    def __init__(
        self,
        secret_key: str | None = None,
        api_base: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.secret_key = secret_key or settings.STRIPE_SECRET_KEY
        self.api_base = (api_base or settings.STRIPE_API_BASE).rstrip("/")
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.api_base,
            headers={"Authorization": f"Bearer {self.secret_key}"},
            timeout=30.0,
            transport=self.transport,
        )

    async def create_session(
        self,
        *,
        amount: float,
        product_name: str,
        customer_email: str | None,
        metadata: dict[str, str],
        currency: str | None = None,
    ) -> CheckoutSession:
        form: dict[str, Any] = {
            "mode": "payment",
            "line_items[0][quantity]": 1,
            "line_items[0][price_data][currency]": currency or settings.CHECKOUT_CURRENCY,
            "line_items[0][price_data][unit_amount]": minor_units(amount),
            "line_items[0][price_data][product_data][name]": product_name,
            "success_url": f"{settings.SITE_DOMAIN}/dashboard/paymentSuccess?session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": f"{settings.SITE_DOMAIN}/dashboard/paymentCancel",
        }
        if customer_email:
            form["customer_email"] = customer_email
        for key, value in metadata.items():
            form[f"metadata[{key}]"] = value

        try:
            async with self._client() as client:
                response = await client.post("/checkout/sessions", data=form)
                response.raise_for_status()
                response_data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Checkout session creation rejected: {e.response.text}")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Payment gateway error: {str(e)}",
            )
        except httpx.HTTPError as e:
            logger.error(f"Checkout session creation failed: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to create checkout session: {str(e)}",
            )

        return CheckoutSession(id=response_data["id"], url=response_data["url"])

    async def retrieve_session(self, session_id: str) -> CheckoutSessionStatus:
        try:
            async with self._client() as client:
                response = await client.get(f"/checkout/sessions/{session_id}")
                response.raise_for_status()
                response_data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Checkout session {session_id} lookup rejected: {e.response.text}")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Payment gateway error: {str(e)}",
            )
        except httpx.HTTPError as e:
            logger.error(f"Checkout session {session_id} lookup failed: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to verify checkout session: {str(e)}",
            )

        customer_email = response_data.get("customer_email") or (
            response_data.get("customer_details") or {}
        ).get("email")

        return CheckoutSessionStatus(
            id=response_data["id"],
            payment_status=response_data.get("payment_status", "unpaid"),
            amount_total=response_data.get("amount_total"),
            currency=response_data.get("currency"),
            customer_email=customer_email,
            payment_intent=response_data.get("payment_intent"),
            metadata=response_data.get("metadata") or {},
        )


checkout_gateway = StripeCheckoutGateway()


def get_checkout_gateway() -> StripeCheckoutGateway:
    return checkout_gateway
