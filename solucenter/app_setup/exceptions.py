"""
Gestionnaires d'exceptions métier (utilisés par la factory).
- API (/api/cart/*, /api/test-email): JSON {ok:false, message[, error]}.
- Retour Webpay (/api/webpay/*): page HTML minimale, le navigateur de l'acheteur y arrive directement.
- NotificationError n'arrive jamais ici: le dispatcher l'absorbe.
"""
import logging
from html import escape

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse

from solucenter.exceptions import CartValidationError, CheckoutError, GatewayError, MissingTokenError

logger = logging.getLogger(__name__)

WEBPAY_RETURN_PREFIX = "/api/webpay/"

def _html_page(title: str, detail: str, status_code: int) -> HTMLResponse:
    body = f"<h1>{escape(title)}</h1><p>{escape(detail)}</p>"
    return HTMLResponse(content=body, status_code=status_code)

def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre les handlers des erreurs du checkout.
    - CartValidationError -> 400 JSON
    - MissingTokenError -> 400 HTML
    - GatewayError -> 500 (JSON pour le checkout, HTML pour le retour Webpay), payload Webpay transmis
    """
    @app.exception_handler(CartValidationError)
    async def cart_validation_error(request: Request, exc: CartValidationError):
        logger.info("checkout.invalid path=%s message=%s", request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"ok": False, "message": exc.message})

    @app.exception_handler(MissingTokenError)
    async def missing_token_error(request: Request, exc: MissingTokenError):
        logger.error("webpay.return sans token_ws path=%s", request.url.path)
        return _html_page("Error", exc.message, exc.status_code)

    @app.exception_handler(GatewayError)
    async def gateway_error(request: Request, exc: GatewayError):
        logger.error("webpay.error path=%s message=%s payload=%s", request.url.path, exc.message, exc.payload)
        if request.url.path.startswith(WEBPAY_RETURN_PREFIX):
            return _html_page(
                "Error al confirmar la transacción en Webpay",
                "No se pudo confirmar el pago. Intenta nuevamente más tarde.",
                exc.status_code,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"ok": False, "message": "Error al crear la transacción en Webpay.", "error": exc.payload},
        )

    @app.exception_handler(CheckoutError)
    async def checkout_error(request: Request, exc: CheckoutError):
        logger.error("checkout.error path=%s message=%s", request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"ok": False, "message": exc.message})
