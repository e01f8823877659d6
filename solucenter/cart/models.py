"""
Modèles du panier et du client (pydantic).
- Entrée HTTP tolérante (CheckoutRequest): les prix/quantités arrivent tels quels (str|int|float)
  et sont validés par solucenter.cart.validator pour produire un message par article.
- Sortie normalisée (OrderLine, Customer, NormalizedOrder): sérialisée en camelCase (by_alias).
"""
from typing import Any, Dict, List, Union
from pydantic import BaseModel, ConfigDict, Field

Amount = Union[int, float]


class CheckoutRequest(BaseModel):
    """Body de POST /api/cart/checkout: { items: [...], customer: {...} }."""
    model_config = ConfigDict(extra="ignore")

    items: Any = None
    customer: Any = None


class OrderLine(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    unit_price: Amount = Field(alias="unitPrice")
    quantity: Amount
    line_total: Amount = Field(alias="lineTotal")


class Customer(BaseModel):
    name: str
    email: str
    rut: str = ""
    phone: str = ""
    address: str = ""
    comuna: str = ""
    notes: str = ""


class NormalizedOrder(BaseModel):
    total: Amount
    items: List[OrderLine]
    customer: Customer

    def items_payload(self) -> List[Dict[str, Any]]:
        return [line.model_dump(by_alias=True) for line in self.items]
