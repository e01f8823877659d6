from solucenter.exceptions import NotificationError

def test_root_liveness(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.json()["ok"] is True

def test_favicon_no_content(client):
    assert client.get("/favicon.ico").status_code == 204

def test_health_reports_pending_orders(client, store):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"ok": True, "pending_orders": 0, "dispatcher_running": True}

def test_test_email_sends_fake_order(client, monkeypatch, settings):
    sent = []

    async def fake_send(order, result, settings=None, http=None):
        sent.append((order.buy_order, result.status, settings.resend_api_key))

    monkeypatch.setattr("solucenter.notifications.email_service.send_purchase_email", fake_send)
    res = client.get("/api/test-email")
    assert res.status_code == 200
    assert res.json() == {"ok": True, "message": "Correo de prueba enviado"}
    assert sent == [("TEST-00001", "AUTHORIZED", "re_test")]

def test_test_email_failure_returns_500(client, monkeypatch):
    async def fake_send(order, result, settings=None, http=None):
        raise NotificationError("RESEND_API_KEY manquant pour envoyer les courriels")

    monkeypatch.setattr("solucenter.notifications.email_service.send_purchase_email", fake_send)
    res = client.get("/api/test-email")
    assert res.status_code == 500
    assert res.json()["ok"] is False
    assert "RESEND_API_KEY" in res.json()["error"]
