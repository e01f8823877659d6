"""
Exceptions métier du checkout.
- CartValidationError: panier/client invalide, corrigeable par l'utilisateur (400).
- GatewayError: création ou confirmation Webpay en échec (500), payload Webpay conservé.
- MissingTokenError: retour Webpay sans token_ws (400).
- NotificationError: envoi du courriel en échec; journalisé uniquement, jamais renvoyé au client.
Les handlers HTTP sont enregistrés dans solucenter.app_setup.exceptions.
"""
from typing import Any, Optional


class CheckoutError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CartValidationError(CheckoutError):
    status_code = 400


class GatewayError(CheckoutError):
    status_code = 500

    def __init__(self, message: str, payload: Any = None, http_status: Optional[int] = None):
        super().__init__(message)
        self.payload = payload
        self.http_status = http_status


class MissingTokenError(CheckoutError):
    status_code = 400


class NotificationError(CheckoutError):
    pass
