import time
from typing import List
from pydantic import BaseModel, ConfigDict, Field

from solucenter.cart.models import Amount, Customer, OrderLine


class OrderSnapshot(BaseModel):
    """
    Commande en attente du retour Webpay, conservée pour le courriel de confirmation.
    order_key est le token Webpay: c'est la clé d'écriture au checkout et de lecture au retour.
    """
    model_config = ConfigDict(populate_by_name=True)

    order_key: str = Field(alias="orderKey")
    buy_order: str = Field(alias="buyOrder")
    session_id: str = Field(default="", alias="sessionId")
    total: Amount
    items: List[OrderLine]
    customer: Customer
    created_at: float = Field(default_factory=time.time, alias="createdAt")
