"""Notification collaborators.

- LoggingNotifier: logs every message (default)
- WebhookNotifier: posts messages to an HTTP endpoint
"""

from supplier_eval.consts import WEBHOOK_URL
from supplier_eval.notifications.base import NotificationKind, Notifier, dispatch_notification
from supplier_eval.notifications.log_notifier import LoggingNotifier
from supplier_eval.notifications.webhook import WebhookNotifier


def default_notifier() -> Notifier:
    """Build the notifier selected by configuration."""
    if WEBHOOK_URL:
        return WebhookNotifier(WEBHOOK_URL)
    return LoggingNotifier()


__all__ = [
    "LoggingNotifier",
    "NotificationKind",
    "Notifier",
    "WebhookNotifier",
    "default_notifier",
    "dispatch_notification",
]
