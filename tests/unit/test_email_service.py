import json

import httpx
import pytest

from solucenter.cart.models import Customer, OrderLine
from solucenter.exceptions import NotificationError
from solucenter.notifications import build_purchase_email, recipients_for, send_purchase_email
from solucenter.orders.models import OrderSnapshot
from solucenter.payments.webpay_client import GatewayTransactionResult


def _order(email="jane@example.com", name="Jane"):
    return OrderSnapshot(
        order_key="tok-1",
        buy_order="ORD-1",
        total=200,
        items=[OrderLine(id="A", name="Widget <b>", unit_price=100, quantity=2, line_total=200)],
        customer=Customer(name=name, email=email, rut="11.111.111-1", comuna="Curanilahue"),
    )

RESULT = GatewayTransactionResult(token="tok-1", buy_order="ORD-1", status="AUTHORIZED", amount=200)

def test_recipients_customer_first_without_duplicates():
    to = recipients_for(_order(email="OPS@solucenter.test"), ["ops@solucenter.test", "", "ventas@solucenter.test"])
    assert to == ["OPS@solucenter.test", "ventas@solucenter.test"]

def test_build_purchase_email_contents(settings):
    message = build_purchase_email(_order(), RESULT, settings)
    assert message["from"] == "Solucenter <ventas@solucenter.test>"
    assert message["to"] == ["jane@example.com", "ops@solucenter.test", "ventas@solucenter.test"]
    assert message["subject"] == "Compra en Solucenter - Orden ORD-1"
    html = message["html"]
    assert "ORD-1" in html
    assert "$200" in html
    assert "AUTHORIZED" in html
    assert "11.111.111-1" in html and "Curanilahue" in html
    # Valeurs échappées
    assert "Widget &lt;b&gt;" in html
    assert "<b>" not in html.split("Detalle de la compra")[1]

@pytest.mark.asyncio
async def test_send_posts_to_resend(settings):
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email-1"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        await send_purchase_email(_order(), RESULT, settings=settings, http=http)

    assert seen["url"] == "https://resend.test/emails"
    assert seen["auth"] == "Bearer re_test"
    assert seen["body"]["subject"] == "Compra en Solucenter - Orden ORD-1"

@pytest.mark.asyncio
async def test_send_rejected_raises_notification_error(settings):
    def handler(request):
        return httpx.Response(403, json={"message": "API key is invalid"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        with pytest.raises(NotificationError):
            await send_purchase_email(_order(), RESULT, settings=settings, http=http)

@pytest.mark.asyncio
async def test_send_network_error_raises_notification_error(settings):
    def handler(request):
        raise httpx.ConnectTimeout("timeout", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        with pytest.raises(NotificationError):
            await send_purchase_email(_order(), RESULT, settings=settings, http=http)

@pytest.mark.asyncio
async def test_send_without_api_key_fails_before_any_request(settings):
    settings.resend_api_key = ""
    calls = []
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: calls.append(r))) as http:
        with pytest.raises(NotificationError):
            await send_purchase_email(_order(), RESULT, settings=settings, http=http)
    assert calls == []
