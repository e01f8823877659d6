import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from solucenter.cart.models import Customer, OrderLine
from solucenter.config import Settings, get_settings
from solucenter.orders.models import OrderSnapshot
from solucenter.payments.webpay_client import GatewayTransactionResult, STATUS_AUTHORIZED
from solucenter.notifications import email_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Notifications"])

def fake_order() -> OrderSnapshot:
    """Commande fictive pour vérifier manuellement l'envoi (sans Webpay)."""
    return OrderSnapshot(
        order_key="TEST-TOKEN",
        buy_order="TEST-00001",
        session_id="sess-test",
        total=12345,
        items=[OrderLine(id="test", name="Producto de prueba", unit_price=5000, quantity=2, line_total=10000)],
        customer=Customer(
            name="Cliente Prueba",
            rut="11.111.111-1",
            email="landingpagesolucenter@gmail.com",
            phone="+56 9 1234 5678",
            address="Dirección de prueba",
            comuna="Curanilahue",
            notes="Solo test",
        ),
    )

# module solucenter.notifications.views
@router.get("/test-email")
async def send_test_email(settings: Settings = Depends(get_settings)):
    """
    Envoie le courriel d'achat pour une commande fictive, de manière synchrone.
    - 200 {ok, message} si Resend accepte, 500 {ok:false, error} sinon.
    """
    order = fake_order()
    result = GatewayTransactionResult(token=order.order_key, buy_order=order.buy_order, status=STATUS_AUTHORIZED, amount=order.total)
    try:
        await email_service.send_purchase_email(order, result, settings=settings)
    except Exception as e:
        logger.exception("Erreur /api/test-email")
        return JSONResponse({"ok": False, "error": str(e)}, status_code=500)
    return {"ok": True, "message": "Correo de prueba enviado"}
