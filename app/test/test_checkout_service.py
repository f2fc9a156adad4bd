from urllib.parse import parse_qs

import httpx
import pytest
from fastapi import HTTPException

from app.utils.checkout_service import StripeCheckoutGateway


def gateway_for(handler) -> StripeCheckoutGateway:
    return StripeCheckoutGateway(
        secret_key="sk_test_123",
        api_base="https://api.stripe.test/v1",
        transport=httpx.MockTransport(handler),
    )


class TestCreateSession:
    """Test opening checkout sessions with Stripe."""

    async def test_form_body(self):
        """Test the form-encoded session request."""
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["path"] = request.url.path
            captured["auth"] = request.headers["Authorization"]
            captured["form"] = {
                k: v[0] for k, v in parse_qs(request.content.decode()).items()
            }
            return httpx.Response(
                200, json={"id": "cs_test_9", "url": "https://checkout.stripe.com/c/pay/cs_test_9"}
            )

        session = await gateway_for(handler).create_session(
            amount=50.5,
            product_name="Documents",
            customer_email="sender@zapshift.io",
            metadata={"parcelId": "p-1", "trackingID": "PRCL-20250101-ABCDEF"},
        )

        assert session.id == "cs_test_9"
        assert session.url.endswith("cs_test_9")
        assert captured["path"] == "/v1/checkout/sessions"
        assert captured["auth"] == "Bearer sk_test_123"

        form = captured["form"]
        assert form["mode"] == "payment"
        assert form["line_items[0][price_data][unit_amount]"] == "5050"
        assert form["line_items[0][price_data][currency]"] == "usd"
        assert form["line_items[0][price_data][product_data][name]"] == "Documents"
        assert form["customer_email"] == "sender@zapshift.io"
        assert form["metadata[parcelId]"] == "p-1"
        assert form["metadata[trackingID]"] == "PRCL-20250101-ABCDEF"
        assert form["success_url"].endswith(
            "/dashboard/paymentSuccess?session_id={CHECKOUT_SESSION_ID}"
        )

    async def test_rejected_request(self):
        """Test a request Stripe rejects."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": {"message": "Invalid amount"}})

        with pytest.raises(HTTPException) as exc:
            await gateway_for(handler).create_session(
                amount=1,
                product_name="Documents",
                customer_email=None,
                metadata={},
            )
        assert exc.value.status_code == 502

    async def test_network_failure(self):
        """Test a request that never reaches Stripe."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(HTTPException) as exc:
            await gateway_for(handler).create_session(
                amount=1,
                product_name="Documents",
                customer_email=None,
                metadata={},
            )
        assert exc.value.status_code == 500


class TestRetrieveSession:
    """Test reading checkout sessions from Stripe."""

    async def test_paid_session(self):
        """Test reading a paid session."""
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v1/checkout/sessions/cs_test_9"
            return httpx.Response(
                200,
                json={
                    "id": "cs_test_9",
                    "payment_status": "paid",
                    "amount_total": 5050,
                    "currency": "usd",
                    "customer_email": None,
                    "customer_details": {"email": "sender@zapshift.io"},
                    "payment_intent": "pi_123",
                    "metadata": {"parcelId": "p-1", "parcelName": "Documents"},
                },
            )

        session = await gateway_for(handler).retrieve_session("cs_test_9")

        assert session.payment_status == "paid"
        assert session.amount_total == 5050
        assert session.customer_email == "sender@zapshift.io"
        assert session.payment_intent == "pi_123"
        assert session.metadata["parcelId"] == "p-1"

    async def test_open_session(self):
        """Test reading a session that is not paid yet."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"id": "cs_test_9", "payment_status": "unpaid", "metadata": None},
            )

        session = await gateway_for(handler).retrieve_session("cs_test_9")

        assert session.payment_status == "unpaid"
        assert session.payment_intent is None
        assert session.metadata == {}

    async def test_unknown_session(self):
        """Test reading a session Stripe does not know."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error": {"message": "No such session"}})

        with pytest.raises(HTTPException) as exc:
            await gateway_for(handler).retrieve_session("cs_missing")
        assert exc.value.status_code == 502
