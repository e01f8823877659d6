"""
Module 'payments' (feature-first): point d'entrée public.
Réunit le client Webpay, le cas d'usage checkout et la réconciliation du retour.
"""

from .webpay_client import (
    STATUS_AUTHORIZED,
    CreatedTransaction,
    GatewayTransactionResult,
    WebpayClient,
    get_webpay_client,
    close_webpay_client,
)
from .service import new_buy_order, new_session_id, start_checkout
from .reconciler import (
    ReconcileState,
    ReconcileOutcome,
    extract_token,
    reconcile_return,
)

__all__ = [
    # webpay
    "STATUS_AUTHORIZED",
    "CreatedTransaction",
    "GatewayTransactionResult",
    "WebpayClient",
    "get_webpay_client",
    "close_webpay_client",
    # checkout
    "new_buy_order",
    "new_session_id",
    "start_checkout",
    # retour Webpay
    "ReconcileState",
    "ReconcileOutcome",
    "extract_token",
    "reconcile_return",
]
