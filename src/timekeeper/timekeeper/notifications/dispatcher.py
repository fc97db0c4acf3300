from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Optional

from ..core import constants
from .model import NotificationEvent
from .notifiers import Notifier

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Fire-and-forget delivery on a worker pool.

    ``dispatch`` returns as soon as the event is queued. Delivery errors are
    logged and reported through the returned future's ``False`` result only.
    """

    def __init__(
        self,
        notifier: Notifier,
        *,
        max_workers: int = constants.DEFAULT_NOTIFY_MAX_WORKERS,
        executor: Optional[Executor] = None,
    ):
        self._notifier = notifier
        self._executor = executor or ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify")

    def dispatch(self, event: NotificationEvent) -> Optional[Future]:
        try:
            return self._executor.submit(self._deliver, event)
        except RuntimeError:
            # Executor already shut down (app teardown).
            logger.error("Dropped %s notification for %s: dispatcher is closed", event.kind.value, event.actor_name)
            return None

    def _deliver(self, event: NotificationEvent) -> bool:
        try:
            self._notifier.notify(event)
        except Exception:
            logger.exception("Failed to deliver %s notification for %s", event.kind.value, event.actor_name)
            return False
        logger.debug("Delivered %s notification for %s", event.kind.value, event.actor_name)
        return True

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
