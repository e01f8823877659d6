import json

import httpx
import pytest

from solucenter.exceptions import GatewayError
from solucenter.payments.webpay_client import WebpayClient


def _client(settings, handler):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WebpayClient(settings, http=http)

@pytest.mark.asyncio
async def test_create_transaction_sends_headers_and_body(settings):
    seen = {}

    def handler(request: httpx.Request):
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"token": "tok-abc", "url": "https://webpay.test/init"})

    client = _client(settings, handler)
    created = await client.create_transaction("ORD-1", "sess-1", 200, "http://testserver/api/webpay/retorno")

    assert seen["method"] == "POST"
    assert seen["url"] == "https://webpay.test/api/v1.2/transactions"
    assert seen["headers"]["Tbk-Api-Key-Id"] == "597055555532"
    assert seen["headers"]["Tbk-Api-Key-Secret"] == "test-secret"
    assert seen["body"] == {
        "buy_order": "ORD-1",
        "session_id": "sess-1",
        "amount": 200,
        "return_url": "http://testserver/api/webpay/retorno",
    }
    assert created.token == "tok-abc"
    assert created.redirect_url == "https://webpay.test/init?token_ws=tok-abc"

@pytest.mark.asyncio
async def test_confirm_transaction_puts_on_token_path(settings):
    seen = {}

    def handler(request: httpx.Request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        return httpx.Response(200, json={
            "buy_order": "ORD-1",
            "status": "AUTHORIZED",
            "amount": 200,
            "authorization_code": "1213",
        })

    client = _client(settings, handler)
    result = await client.confirm_transaction("tok-abc")

    assert seen == {"method": "PUT", "path": "/api/v1.2/transactions/tok-abc"}
    assert result.token == "tok-abc"
    assert result.buy_order == "ORD-1"
    assert result.authorized is True
    assert result.amount == 200
    # Champs supplémentaires conservés
    assert result.model_extra["authorization_code"] == "1213"

@pytest.mark.asyncio
async def test_non_2xx_raises_gateway_error_with_payload(settings):
    def handler(request):
        return httpx.Response(422, json={"error_message": "Invalid value for parameter: amount"})

    client = _client(settings, handler)
    with pytest.raises(GatewayError) as exc:
        await client.create_transaction("ORD-1", "sess-1", 0, "http://x")
    assert exc.value.status_code == 500
    assert exc.value.http_status == 422
    assert exc.value.payload == {"error_message": "Invalid value for parameter: amount"}

@pytest.mark.asyncio
async def test_network_error_raises_gateway_error(settings):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(settings, handler)
    with pytest.raises(GatewayError) as exc:
        await client.confirm_transaction("tok-abc")
    assert "connection refused" in str(exc.value.payload)

@pytest.mark.asyncio
async def test_create_without_token_is_an_error(settings):
    client = _client(settings, lambda request: httpx.Response(200, json={"url": "https://webpay.test/init"}))
    with pytest.raises(GatewayError):
        await client.create_transaction("ORD-1", "sess-1", 10, "http://x")

@pytest.mark.asyncio
async def test_non_json_body_is_an_error(settings):
    client = _client(settings, lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(GatewayError) as exc:
        await client.confirm_transaction("tok-abc")
    assert exc.value.payload == "<html>oops</html>"
