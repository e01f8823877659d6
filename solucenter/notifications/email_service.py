"""
Courriel de confirmation d'achat (Resend HTTP API).
- build_purchase_email: destinataires (client + adresses internes), sujet et HTML.
- send_purchase_email: POST sur l'API Resend; NotificationError en cas d'échec.
L'échec d'envoi n'annule jamais le paiement déjà confirmé par Webpay.
"""
import logging
from html import escape
from typing import Any, Dict, List, Optional

import httpx

from solucenter.config import Settings, get_settings
from solucenter.exceptions import NotificationError
from solucenter.orders.models import OrderSnapshot
from solucenter.payments.webpay_client import GatewayTransactionResult

logger = logging.getLogger(__name__)

# module solucenter.notifications.email_service
def recipients_for(order: OrderSnapshot, internal_emails: List[str]) -> List[str]:
    """Client d'abord, puis les adresses internes; sans doublons ni vides."""
    seen = set()
    to: List[str] = []
    for addr in [order.customer.email, *internal_emails]:
        addr = (addr or "").strip()
        if addr and addr.lower() not in seen:
            seen.add(addr.lower())
            to.append(addr)
    return to

def _items_rows(order: OrderSnapshot) -> str:
    return "".join(
        f"""
      <tr>
        <td style="padding:6px 8px;">{escape(str(line.quantity))} × {escape(line.name)}</td>
        <td style="padding:6px 8px; text-align:right;">${escape(str(line.unit_price))}</td>
        <td style="padding:6px 8px; text-align:right;">${escape(str(line.line_total))}</td>
      </tr>"""
        for line in order.items
    )

def _customer_rows(order: OrderSnapshot) -> str:
    c = order.customer
    fields = [
        ("Nombre", c.name),
        ("RUT", c.rut),
        ("Correo", c.email),
        ("Teléfono", c.phone),
        ("Dirección", c.address),
        ("Comuna", c.comuna),
        ("Notas", c.notes),
    ]
    return "".join(
        f"<p><strong>{label}:</strong> {escape(value)}</p>" for label, value in fields if value
    )

def build_purchase_email(order: OrderSnapshot, result: GatewayTransactionResult, settings: Settings) -> Dict[str, Any]:
    """
    Construit le message Resend {from, to, subject, html}.
    - Contenu: numéro de commande, total, statut Webpay, coordonnées client, tableau des lignes.
    - Toutes les valeurs interpolées sont échappées (HTML).
    """
    html = f"""
    <div style="font-family:Arial; padding:16px; color:#222;">
      <h2>Gracias por tu compra, {escape(order.customer.name)}</h2>
      <p><strong>Orden:</strong> {escape(order.buy_order)}</p>
      <p><strong>Monto pagado:</strong> ${escape(str(order.total))}</p>
      <p><strong>Estado Webpay:</strong> {escape(result.status or "")}</p>
      <hr />
      <h3>Datos del cliente</h3>
      {_customer_rows(order)}
      <hr />
      <h3>Detalle de la compra</h3>
      <table style="width:100%; border-collapse:collapse;">
        {_items_rows(order)}
      </table>
      <hr />
      <p style="font-size:12px; color:#666;">
        Este correo fue enviado automáticamente por Solucenter.
      </p>
    </div>
    """
    return {
        "from": settings.resend_from_email,
        "to": recipients_for(order, settings.internal_emails),
        "subject": f"Compra en Solucenter - Orden {order.buy_order}",
        "html": html,
    }

async def send_purchase_email(
    order: OrderSnapshot,
    result: GatewayTransactionResult,
    settings: Optional[Settings] = None,
    http: Optional[httpx.AsyncClient] = None,
) -> None:
    """
    Envoie le courriel d'achat via Resend.
    - Soulève NotificationError si RESEND_API_KEY manque, si le réseau échoue ou si Resend refuse.
    - http: client injectable (tests); sinon un client éphémère est créé.
    """
    settings = settings or get_settings()
    if not settings.resend_api_key:
        raise NotificationError("RESEND_API_KEY manquant pour envoyer les courriels")

    message = build_purchase_email(order, result, settings)
    headers = {
        "Authorization": f"Bearer {settings.resend_api_key}",
        "Content-Type": "application/json",
    }
    logger.info("email.send buy_order=%s to=%s", order.buy_order, message["to"])

    client = http or httpx.AsyncClient(timeout=settings.notify_timeout_seconds)
    try:
        resp = await client.post(settings.resend_api_url, json=message, headers=headers)
    except httpx.HTTPError as e:
        raise NotificationError(f"Resend injoignable: {e}") from e
    finally:
        if http is None:
            await client.aclose()

    if not 200 <= resp.status_code < 300:
        logger.error("email.send failed: status=%s body=%s", resp.status_code, resp.text)
        raise NotificationError(f"Resend a refusé l'envoi (status {resp.status_code})")
