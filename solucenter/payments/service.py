"""
Cas d'usage 'checkout': orchestre validation du panier, Webpay et store des commandes en attente.
"""
import logging
import secrets
import time
from typing import Any, Dict

from solucenter.cart import validator
from solucenter.config import Settings
from solucenter.orders.models import OrderSnapshot
from solucenter.orders.pending_store import PendingOrderStore
from .webpay_client import WebpayClient

logger = logging.getLogger(__name__)

def new_buy_order() -> str:
    """ORD-<ms>-<hex4>: ≤ 26 caractères (limite Webpay), unique même à la milliseconde près."""
    return f"ORD-{int(time.time() * 1000)}-{secrets.token_hex(2)}"

def new_session_id() -> str:
    return f"sess-{int(time.time() * 1000)}"

async def start_checkout(
    items: Any,
    customer: Any,
    gateway: WebpayClient,
    store: PendingOrderStore,
    settings: Settings,
) -> Dict[str, Any]:
    """
    Valide le panier, ouvre la transaction Webpay et mémorise la commande.
    - CartValidationError si panier/client invalide (aucun appel Webpay).
    - GatewayError si Webpay refuse ou est injoignable (rien n'est mémorisé).
    - Le snapshot est indexé par le token Webpay, relu tel quel au retour.
    """
    order = validator.validate_checkout(items, customer)
    buy_order = new_buy_order()
    session_id = new_session_id()
    logger.info("checkout.validated buy_order=%s %s", buy_order, validator.order_summary(order))

    created = await gateway.create_transaction(
        buy_order=buy_order,
        session_id=session_id,
        amount=order.total,
        return_url=settings.webpay_return_url,
    )

    snapshot = OrderSnapshot(
        order_key=created.token,
        buy_order=buy_order,
        session_id=session_id,
        total=order.total,
        items=order.items,
        customer=order.customer,
    )
    store.put(created.token, snapshot)
    logger.info("checkout.pending_stored buy_order=%s pending=%s", buy_order, len(store))

    return {
        "ok": True,
        "message": "Carrito validado y Webpay inicializado.",
        "webpayUrl": created.redirect_url,
        "token": created.token,
        "buyOrder": buy_order,
        "amount": order.total,
        "items": order.items_payload(),
        "customer": order.customer.model_dump(),
    }
