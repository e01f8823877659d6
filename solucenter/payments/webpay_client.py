"""
Adaptateur Webpay Plus (REST Transbank): centralise les appels et les en-têtes d'authentification.
- create_transaction: POST {base}/transactions
- confirm_transaction: PUT {base}/transactions/{token}
Aucune validation locale du résultat: Webpay est la seule source de vérité sur le paiement.
"""
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict

from solucenter.config import Settings, get_settings
from solucenter.exceptions import GatewayError

logger = logging.getLogger(__name__)

STATUS_AUTHORIZED = "AUTHORIZED"


class CreatedTransaction(BaseModel):
    token: str
    url: str

    @property
    def redirect_url(self) -> str:
        return f"{self.url}?token_ws={self.token}"


class GatewayTransactionResult(BaseModel):
    """Réponse de confirmation Webpay (champs utiles; les autres sont conservés)."""
    model_config = ConfigDict(extra="allow")

    token: str = ""
    buy_order: str = ""
    status: str = ""
    amount: Any = None

    @property
    def authorized(self) -> bool:
        return self.status == STATUS_AUTHORIZED


def _error_payload(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


class WebpayClient:
    def __init__(self, settings: Settings, http: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=settings.webpay_timeout_seconds)

    def _headers(self) -> Dict[str, str]:
        return {
            "Tbk-Api-Key-Id": self.settings.webpay_commerce_code,
            "Tbk-Api-Key-Secret": self.settings.webpay_api_key,
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, payload: Dict[str, Any], action: str) -> Dict[str, Any]:
        url = f"{self.settings.webpay_base_url}{path}"
        try:
            resp = await self._http.request(method, url, json=payload, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error("webpay.%s network error: %s", action, e)
            raise GatewayError(f"Webpay injoignable ({action})", payload=str(e)) from e

        if not 200 <= resp.status_code < 300:
            body = _error_payload(resp)
            logger.error("webpay.%s failed: status=%s body=%s", action, resp.status_code, body)
            raise GatewayError(f"Webpay a refusé la requête ({action})", payload=body, http_status=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise GatewayError(f"Réponse Webpay illisible ({action})", payload=resp.text, http_status=resp.status_code) from e
        if not isinstance(data, dict):
            raise GatewayError(f"Réponse Webpay inattendue ({action})", payload=data, http_status=resp.status_code)
        return data

    async def create_transaction(self, buy_order: str, session_id: str, amount: Any, return_url: str) -> CreatedTransaction:
        """
        Ouvre une transaction Webpay.
        - Corps: {buy_order, session_id, amount, return_url}
        - Retour: {token, url}; redirect_url = url?token_ws=token
        """
        payload = {
            "buy_order": buy_order,
            "session_id": session_id,
            "amount": amount,
            "return_url": return_url,
        }
        logger.info("webpay.create buy_order=%s session_id=%s amount=%s", buy_order, session_id, amount)
        data = await self._request("POST", "/transactions", payload, "create")
        if not data.get("token") or not data.get("url"):
            raise GatewayError("Réponse Webpay sans token ni url (create)", payload=data)
        created = CreatedTransaction(token=str(data["token"]), url=str(data["url"]))
        logger.info("webpay.create ok buy_order=%s token=%s", buy_order, created.token)
        return created

    async def confirm_transaction(self, token: str) -> GatewayTransactionResult:
        """
        Confirme (commit) la transaction et lit le statut final.
        - Requête PUT sans corps métier; le token est dans le chemin.
        - Le token confirmé est recopié dans le résultat (clé du store).
        """
        data = await self._request("PUT", f"/transactions/{token}", {}, "confirm")
        result = GatewayTransactionResult(**{**data, "token": token})
        logger.info("webpay.confirm buy_order=%s status=%s amount=%s", result.buy_order, result.status, result.amount)
        return result

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()


_client: Optional[WebpayClient] = None

def get_webpay_client() -> WebpayClient:
    global _client
    if _client is None:
        _client = WebpayClient(get_settings())
    return _client

async def close_webpay_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
