"""
Module 'notifications': courriel de confirmation d'achat et dispatcher en arrière-plan.
"""

from .email_service import recipients_for, build_purchase_email, send_purchase_email
from .dispatcher import NotificationJob, NotificationDispatcher, get_dispatcher

__all__ = [
    "recipients_for",
    "build_purchase_email",
    "send_purchase_email",
    "NotificationJob",
    "NotificationDispatcher",
    "get_dispatcher",
]
