"""Notification protocol and best-effort dispatch."""

import logging
from enum import Enum
from typing import Any, Protocol

from supplier_eval.exceptions import NotificationError

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    """Messages the engine asks the notification collaborator to send."""

    COMMITMENT_SUBMITTED = "commitment_submitted"  # to administrators
    EVALUATION_FAILED = "evaluation_failed"  # to the provider
    EVALUATION_SUCCESS = "evaluation_success"  # to the provider
    WINNER_SELECTED = "winner_selected"  # to the winning competitor


class Notifier(Protocol):
    """Protocol for notification channels.

    Implementations raise NotificationError when delivery fails. Callers in
    the engine never let that failure affect the operation that triggered
    the message.
    """

    def notify(self, kind: NotificationKind, payload: dict[str, Any]) -> None:
        """Send a notification.

        Args:
            kind: Type of message
            payload: JSON-serializable message data
        """
        ...


def dispatch_notification(
    notifier: Notifier, kind: NotificationKind, payload: dict[str, Any]
) -> bool:
    """Send a notification, logging instead of raising on failure.

    Returns:
        True if the notifier accepted the message, False otherwise.
    """
    try:
        notifier.notify(kind, payload)
    except NotificationError as e:
        logger.warning(f"Notification {kind.value} failed: {e}")
        return False
    except Exception as e:
        logger.warning(f"Unexpected error sending {kind.value} notification: {e}")
        return False
    logger.debug(f"Notification {kind.value} dispatched")
    return True
