"""
Logique panier pure (pas de Webpay, pas de store).
"""
import math
from typing import Any, Dict, List, Optional

from solucenter.exceptions import CartValidationError
from .models import Amount, Customer, NormalizedOrder, OrderLine

CUSTOMER_OPTIONAL_FIELDS = ("rut", "phone", "address", "comuna", "notes")

# module solucenter.cart.validator
def parse_number(value: Any) -> Optional[Amount]:
    """
    Convertit un prix/une quantité reçu du front en nombre.
    - Accepte int, float et chaînes numériques ("5990", " 2 ", "19.5").
    - Retourne None si la valeur n'est pas un nombre fini (bool, None, "abc", "nan", "inf").
    - Les valeurs entières sont rendues en int (CLP: pas de décimales), sans passer par float.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except (ValueError, OverflowError):
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number

def _as_text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    return str(value).strip()

def normalize_customer(customer: Any) -> Customer:
    """
    Valide le client: nom et courriel obligatoires, champs optionnels ramenés à "".
    Soulève CartValidationError si le nom ou le courriel manquent.
    """
    if not isinstance(customer, dict):
        raise CartValidationError("Faltan datos del cliente (nombre o correo).")
    name = _as_text(customer.get("name"))
    email = _as_text(customer.get("email"))
    if not name or not email:
        raise CartValidationError("Faltan datos del cliente (nombre o correo).")
    extra = {field: _as_text(customer.get(field)) for field in CUSTOMER_OPTIONAL_FIELDS}
    return Customer(name=name, email=email, **extra)

def normalize_line(item: Any) -> OrderLine:
    """
    Valide une ligne {id, name, price, quantity} et calcule lineTotal.
    Ordre des contrôles: id/nom, puis prix > 0, puis quantité entière > 0.
    """
    if not isinstance(item, dict):
        raise CartValidationError("Falta id o nombre en uno de los productos del carrito.")
    item_id = _as_text(item.get("id"))
    name = _as_text(item.get("name"))
    if not item_id or not name:
        raise CartValidationError("Falta id o nombre en uno de los productos del carrito.")

    unit_price = parse_number(item.get("price"))
    if unit_price is None or unit_price <= 0:
        raise CartValidationError(f"Precio inválido para el producto: {name}")

    quantity = parse_number(item.get("quantity"))
    if quantity is None or quantity <= 0 or not isinstance(quantity, int):
        raise CartValidationError(f"Cantidad inválida para el producto: {name}")

    return OrderLine(
        id=item_id,
        name=name,
        unit_price=unit_price,
        quantity=quantity,
        line_total=unit_price * quantity,
    )

def validate_checkout(items: Any, customer: Any) -> NormalizedOrder:
    """
    Valide et normalise un panier soumis au checkout.
    - Client d'abord (nom + courriel), puis panier non vide, puis chaque ligne dans l'ordre.
    - La première erreur rencontrée est soulevée (CartValidationError, HTTP 400).
    - total = somme des lineTotal, sans règle d'arrondi.
    """
    normalized_customer = normalize_customer(customer)

    if not isinstance(items, list) or not items:
        raise CartValidationError("El carrito está vacío o el formato es inválido.")

    lines: List[OrderLine] = [normalize_line(item) for item in items]
    total: Amount = sum(line.line_total for line in lines)
    return NormalizedOrder(total=total, items=lines, customer=normalized_customer)

def order_summary(order: NormalizedOrder) -> Dict[str, Any]:
    """Résumé loggable d'une commande validée (sans données de contact)."""
    return {
        "total": order.total,
        "lines": len(order.items),
        "units": sum(line.quantity for line in order.items),
    }
