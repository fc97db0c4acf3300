from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

from .model import NotificationEvent

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, event: NotificationEvent) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Default transport: write the event to the application log."""

    def notify(self, event: NotificationEvent) -> None:
        logger.info(
            "%s by %s at %s (mode=%s, recipients=%s)",
            event.kind.value,
            event.actor_name,
            event.timestamp.isoformat(timespec="minutes"),
            event.mode.value if event.mode else "-",
            ",".join(event.recipients) or "-",
        )


class WebhookNotifier(Notifier):
    """POST each event as JSON to a configured webhook (chat/WhatsApp relay)."""

    def __init__(self, url: str, *, timeout: float = 10.0, client: Optional[httpx.Client] = None):
        self._url = url
        self._client = client or httpx.Client(timeout=timeout)

    def notify(self, event: NotificationEvent) -> None:
        response = self._client.post(self._url, json=event.to_payload())
        response.raise_for_status()

    def close(self) -> None:
        self._client.close()
