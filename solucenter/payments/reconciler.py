"""
Réconciliation du retour Webpay (GET ou POST /api/webpay/retorno).

États (par requête, non persistés):
  AWAITING_CALLBACK -> CONFIRMING -> {NOTIFIED, NOTIFY_SKIPPED, NOTIFY_FAILED} -> DONE

Règles:
- token_ws lu dans le formulaire puis dans la query; absent -> MissingTokenError (aucun appel Webpay).
- Une seule confirmation Webpay par retour; GatewayError remonte tel quel (aucune mutation).
- AUTHORIZED: claim du snapshot par le token confirmé puis dépôt du courriel dans le dispatcher;
  le snapshot est supprimé quand le job se termine, quel que soit son résultat.
- Autre statut: ni courriel ni mutation du store.
"""
import enum
import logging
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

from solucenter.exceptions import MissingTokenError
from solucenter.notifications.dispatcher import NotificationDispatcher, NotificationJob
from solucenter.orders.pending_store import PendingOrderStore
from .webpay_client import GatewayTransactionResult, WebpayClient

logger = logging.getLogger(__name__)

SUCCESS_PATH = "/pago-exitoso"
FAILURE_PATH = "/pago-fallido"


class ReconcileState(str, enum.Enum):
    AWAITING_CALLBACK = "AWAITING_CALLBACK"
    CONFIRMING = "CONFIRMING"
    NOTIFIED = "NOTIFIED"
    NOTIFY_SKIPPED = "NOTIFY_SKIPPED"
    NOTIFY_FAILED = "NOTIFY_FAILED"
    DONE = "DONE"


class ReconcileOutcome:
    def __init__(self, authorized: bool, buy_order: str, status: str, amount: Any = None, state: ReconcileState = ReconcileState.DONE):
        self.authorized = authorized
        self.buy_order = buy_order
        self.status = status
        self.amount = amount
        self.state = state

    def redirect_url(self, frontend_url: str) -> str:
        """URL front: /pago-exitoso?order=&amount= ou /pago-fallido?order=&status=."""
        base = frontend_url.rstrip("/")
        if self.authorized:
            query = {"order": self.buy_order, "amount": "" if self.amount is None else self.amount}
            return f"{base}{SUCCESS_PATH}?{urlencode(query)}"
        query = {"order": self.buy_order or "", "status": self.status or ""}
        return f"{base}{FAILURE_PATH}?{urlencode(query)}"


def _first(source: Optional[Mapping[str, Any]], key: str) -> str:
    if not source:
        return ""
    value = source.get(key)
    return str(value).strip() if value is not None else ""

def _either(form: Optional[Mapping[str, Any]], query: Optional[Mapping[str, Any]], key: str) -> str:
    return _first(form, key) or _first(query, key)

def extract_token(form: Optional[Mapping[str, Any]], query: Optional[Mapping[str, Any]]) -> str:
    """
    token_ws depuis le body (form-urlencoded) puis la query string.
    - Absent -> MissingTokenError (400), y compris pour un abandon Webpay
      (TBK_TOKEN/TBK_ORDEN_COMPRA seuls), qui est seulement journalisé.
    - token_ws accompagné de TBK_TOKEN: erreur de formulaire Webpay, journalisée avant la confirmation.
    """
    token = _either(form, query, "token_ws")
    tbk_token = _either(form, query, "TBK_TOKEN")
    buy_order = _either(form, query, "TBK_ORDEN_COMPRA")
    if not token:
        if tbk_token or buy_order:
            logger.warning("webpay.return aborted buy_order=%s tbk_token=%s", buy_order, tbk_token)
            raise MissingTokenError("Pago anulado o expirado en Webpay: falta token_ws")
        raise MissingTokenError("Falta token_ws en la respuesta de Webpay")
    if tbk_token:
        logger.warning("webpay.return form error token=%s tbk_token=%s buy_order=%s", token, tbk_token, buy_order)
    return token

def _notify(token: str, result: GatewayTransactionResult, store: PendingOrderStore, dispatcher: NotificationDispatcher) -> ReconcileState:
    snapshot = store.claim(token)
    if snapshot is None:
        logger.warning("webpay.return no pending order for token=%s buy_order=%s; email skipped", token, result.buy_order)
        return ReconcileState.NOTIFY_SKIPPED

    if snapshot.buy_order != result.buy_order:
        logger.warning(
            "webpay.return buy_order mismatch token=%s stored=%s gateway=%s",
            token, snapshot.buy_order, result.buy_order,
        )

    def _cleanup() -> None:
        store.delete(token)
        logger.info("pending_orders.deleted token=%s buy_order=%s", token, snapshot.buy_order)

    try:
        dispatcher.enqueue(NotificationJob(snapshot, result, on_done=_cleanup))
    except Exception:
        logger.exception("webpay.return could not enqueue email buy_order=%s", snapshot.buy_order)
        _cleanup()
        return ReconcileState.NOTIFY_FAILED
    return ReconcileState.NOTIFIED

async def reconcile_return(
    token: str,
    gateway: WebpayClient,
    store: PendingOrderStore,
    dispatcher: NotificationDispatcher,
) -> ReconcileOutcome:
    """
    Confirme la transaction et décide du résultat présenté à l'acheteur.
    - GatewayError n'est pas interceptée: la vue répond 500.
    - La réponse ne dépend jamais de la délivrabilité du courriel.
    """
    logger.info("webpay.return state=%s token=%s", ReconcileState.CONFIRMING.value, token)
    result = await gateway.confirm_transaction(token)

    if not result.authorized:
        logger.info("webpay.return not authorized buy_order=%s status=%s", result.buy_order, result.status)
        return ReconcileOutcome(authorized=False, buy_order=result.buy_order, status=result.status, amount=result.amount)

    state = _notify(token, result, store, dispatcher)
    logger.info("webpay.return authorized buy_order=%s state=%s", result.buy_order, state.value)
    return ReconcileOutcome(authorized=True, buy_order=result.buy_order, status=result.status, amount=result.amount, state=state)
