"""
Module 'cart': validation et normalisation du panier et du client.
"""

from .models import CheckoutRequest, OrderLine, Customer, NormalizedOrder
from .validator import parse_number, normalize_customer, normalize_line, validate_checkout, order_summary

__all__ = [
    "CheckoutRequest",
    "OrderLine",
    "Customer",
    "NormalizedOrder",
    "parse_number",
    "normalize_customer",
    "normalize_line",
    "validate_checkout",
    "order_summary",
]
