import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from starlette.status import HTTP_303_SEE_OTHER

from solucenter.cart.models import CheckoutRequest
from solucenter.config import Settings, get_settings
from solucenter.exceptions import CartValidationError
from solucenter.notifications.dispatcher import NotificationDispatcher, get_dispatcher
from solucenter.orders.pending_store import PendingOrderStore, get_pending_store
from solucenter.payments import reconciler
from solucenter.payments.service import start_checkout
from solucenter.payments.webpay_client import WebpayClient, get_webpay_client

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Checkout API"])

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

# module solucenter.payments.views
@router.post("/cart/checkout")
async def cart_checkout(
    request: Request,
    gateway: WebpayClient = Depends(get_webpay_client),
    store: PendingOrderStore = Depends(get_pending_store),
    settings: Settings = Depends(get_settings),
):
    """
    Valide le panier et initialise Webpay.
    - Entrée JSON: { "items": [ {id, name, price, quantity}, ... ], "customer": {name, email, rut?, ...} }
    - 200: {ok, message, webpayUrl, token, buyOrder, amount, items, customer}
    - 400: {ok:false, message} (panier/client invalide), 500: {ok:false, message, error} (Webpay)
    """
    try:
        body = await request.json()
    except ValueError:
        raise CartValidationError("El carrito está vacío o el formato es inválido.")
    if not isinstance(body, dict):
        raise CartValidationError("El carrito está vacío o el formato es inválido.")
    payload = CheckoutRequest.model_validate(body)
    return await start_checkout(payload.items, payload.customer, gateway, store, settings)

async def _read_form(request: Request) -> Dict[str, Any]:
    # Webpay renvoie token_ws en form-urlencoded (POST); un GET n'a pas de body
    ctype = (request.headers.get("content-type") or "").lower()
    if request.method != "POST" or not ctype.startswith(FORM_CONTENT_TYPES):
        return {}
    form = await request.form()
    return dict(form)

@router.api_route("/webpay/retorno", methods=["GET", "POST"])
async def webpay_return(
    request: Request,
    gateway: WebpayClient = Depends(get_webpay_client),
    store: PendingOrderStore = Depends(get_pending_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    settings: Settings = Depends(get_settings),
):
    """
    Retour Webpay (GET ou POST).
    - token_ws (form puis query) -> confirmation Webpay -> redirection 303 vers le front:
      /pago-exitoso?order=&amount= ou /pago-fallido?order=&status=
    - 400 (page HTML) si token_ws manque, abandon Webpay (TBK_TOKEN/TBK_ORDEN_COMPRA seuls) compris
    - 500 (page HTML) si la confirmation échoue
    """
    form = await _read_form(request)
    query = dict(request.query_params)
    logger.info("webpay.return method=%s form_keys=%s query_keys=%s", request.method, sorted(form), sorted(query))

    token = reconciler.extract_token(form, query)
    outcome = await reconciler.reconcile_return(token, gateway, store, dispatcher)
    return RedirectResponse(url=outcome.redirect_url(settings.frontend_url), status_code=HTTP_303_SEE_OTHER)
