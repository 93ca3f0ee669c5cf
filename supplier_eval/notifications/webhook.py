"""Notifier that posts messages to an HTTP webhook.

The receiving service owns templates and delivery (email, chat). This
client only ships the message kind and payload as JSON.
"""

import logging
from typing import Any

import httpx

from supplier_eval.consts import WEBHOOK_TIMEOUT
from supplier_eval.exceptions import NotificationError
from supplier_eval.notifications.base import NotificationKind

logger = logging.getLogger(__name__)


class WebhookNotifier:
    """POST notifications to a webhook endpoint.

    Args:
        url: Endpoint receiving ``{"kind": ..., "payload": ...}``.
        timeout: Request timeout in seconds.
        client: Optional preconfigured httpx client (tests inject a mock transport).
    """

    def __init__(
        self,
        url: str,
        timeout: float = WEBHOOK_TIMEOUT,
        client: httpx.Client | None = None,
    ) -> None:
        self.url = url
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout))

    def notify(self, kind: NotificationKind, payload: dict[str, Any]) -> None:
        """Send the notification.

        Raises:
            NotificationError: On transport errors or non-2xx responses.
        """
        body = {"kind": kind.value, "payload": payload}
        try:
            response = self._client.post(self.url, json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotificationError(
                f"Webhook returned {e.response.status_code} for {kind.value}",
                context={"url": self.url, "status": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise NotificationError(
                f"Webhook request failed for {kind.value}: {e}",
                context={"url": self.url},
            ) from e
        logger.debug(f"Webhook accepted {kind.value} ({response.status_code})")

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()
