import pytest
from typing import Any, Dict, Generator, List, Optional
from fastapi.testclient import TestClient

from solucenter.app import app as fastapi_app
from solucenter.config import Settings, get_settings
from solucenter.notifications.dispatcher import get_dispatcher
from solucenter.orders.pending_store import PendingOrderStore, get_pending_store
from solucenter.payments.webpay_client import CreatedTransaction, GatewayTransactionResult, get_webpay_client

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)
        elif "/functional/" in nodeid:
            item.add_marker(pytest.mark.functional)


class FakeWebpay:
    """Remplace WebpayClient: enregistre les appels et renvoie des réponses configurables."""
    def __init__(self):
        self.token = "tok-123"
        self.url = "https://webpay.test/webpayserver/initTransaction"
        self.confirm_result: Dict[str, Any] = {"buy_order": "ORD-1", "status": "AUTHORIZED", "amount": 200}
        self.create_error: Optional[Exception] = None
        self.confirm_error: Optional[Exception] = None
        self.created: List[Dict[str, Any]] = []
        self.confirmed: List[str] = []

    async def create_transaction(self, buy_order, session_id, amount, return_url):
        self.created.append({"buy_order": buy_order, "session_id": session_id, "amount": amount, "return_url": return_url})
        if self.create_error:
            raise self.create_error
        return CreatedTransaction(token=self.token, url=self.url)

    async def confirm_transaction(self, token):
        self.confirmed.append(token)
        if self.confirm_error:
            raise self.confirm_error
        return GatewayTransactionResult(**{**self.confirm_result, "token": token})


class RecordingDispatcher:
    """Remplace NotificationDispatcher: garde les jobs sans les exécuter."""
    running = True

    def __init__(self):
        self.jobs = []

    def enqueue(self, job):
        self.jobs.append(job)

    def complete_all(self):
        for job in self.jobs:
            if job.on_done:
                job.on_done()


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        webpay_base_url="https://webpay.test/api/v1.2",
        webpay_commerce_code="597055555532",
        webpay_api_key="test-secret",
        webpay_return_url="http://testserver/api/webpay/retorno",
        frontend_url="http://front.test",
        resend_api_key="re_test",
        resend_from_email="Solucenter <ventas@solucenter.test>",
        resend_api_url="https://resend.test/emails",
        internal_emails=["ops@solucenter.test", "ventas@solucenter.test"],
        notify_timeout_seconds=1.0,
        pending_order_ttl_seconds=3600.0,
        pending_sweep_interval_seconds=0,
    )

@pytest.fixture()
def fake_webpay() -> FakeWebpay:
    return FakeWebpay()

@pytest.fixture()
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()

@pytest.fixture()
def store() -> PendingOrderStore:
    return PendingOrderStore(ttl_seconds=3600.0)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

# Client HTTP avec Webpay, store, dispatcher et settings remplacés
@pytest.fixture()
def client(app, settings, fake_webpay, dispatcher, store) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_webpay_client] = lambda: fake_webpay
    app.dependency_overrides[get_pending_store] = lambda: store
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_settings] = lambda: settings
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()

@pytest.fixture()
def customer() -> Dict[str, Any]:
    return {"name": "Jane", "email": "jane@example.com"}

@pytest.fixture()
def widget_cart() -> List[Dict[str, Any]]:
    return [{"id": "A", "name": "Widget", "price": 100, "quantity": 2}]
