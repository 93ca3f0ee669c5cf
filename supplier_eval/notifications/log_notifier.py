"""Notifier that only writes to the application log."""

import logging
from typing import Any

from supplier_eval.notifications.base import NotificationKind

logger = logging.getLogger(__name__)


class LoggingNotifier:
    """Default notifier for local runs: every message becomes a log line."""

    def notify(self, kind: NotificationKind, payload: dict[str, Any]) -> None:
        logger.info(f"[notification:{kind.value}] {payload}")
