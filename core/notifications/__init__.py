"""
Notification system for sending Secret Santa e-mails.

Public API:
    NotificationDispatcher.notify(participant, kind, context) - Send with retries
    NotificationDispatcher.deliver(message) - Send a prebuilt message

High-level actions:
    notify_registration_confirmed(...) - Calendar link after first gift submission
    notify_assignment(...) - Tell a santa who their recipient is
"""

from .actions import notify_assignment, notify_registration_confirmed
from .channels.email import EmailMessage, SendGridGateway, SendResult
from .dispatcher import DeliveryResult, NotificationDispatcher

__all__ = [
    # Low-level
    "NotificationDispatcher",
    "DeliveryResult",
    "EmailMessage",
    "SendResult",
    "SendGridGateway",
    # High-level actions
    "notify_registration_confirmed",
    "notify_assignment",
]
