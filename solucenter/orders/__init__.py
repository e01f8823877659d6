"""
Module 'orders': commandes en attente du retour Webpay.
"""

from .models import OrderSnapshot
from .pending_store import PendingOrderStore, get_pending_store

__all__ = [
    "OrderSnapshot",
    "PendingOrderStore",
    "get_pending_store",
]
