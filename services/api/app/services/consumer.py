"""Order feed consumer.

Subscribes to one Redis pub/sub channel (the feed subject) and persists every valid order it
receives. Delivery is at-most-once: a message that fails to decode, validate or persist is
logged and dropped, and the subscription keeps running.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import pydantic
import redis

from services.api.app.logger import get_logger
from services.api.app.models.order import Order, validate_order
from services.api.app.services.order_base import (
    ConsumerError,
    OrderRepository,
    OrderValidationError,
)

logger = get_logger(__name__)


class OrderConsumer:
    def __init__(
        self,
        client: redis.Redis,
        subject: str,
        repository: OrderRepository,
        *,
        max_workers: int = 8,
        poll_timeout: float = 1.0,
    ) -> None:
        self.subject = subject
        self._client = client
        self._repository = repository
        self._poll_timeout = poll_timeout
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix=f"consumer-{subject}"
        )
        self._thread: threading.Thread | None = None

        self._stats_lock = threading.Lock()
        self._processed = 0
        self._discarded = 0

    @classmethod
    def from_url(
        cls, url: str, subject: str, repository: OrderRepository, *, max_workers: int = 8
    ) -> OrderConsumer:
        return cls(redis.Redis.from_url(url), subject, repository, max_workers=max_workers)

    @property
    def processed(self) -> int:
        with self._stats_lock:
            return self._processed

    @property
    def discarded(self) -> int:
        with self._stats_lock:
            return self._discarded

    def subscribe(self, stop: threading.Event) -> None:
        """Register on the feed subject and start listening until ``stop`` is set.

        Raises ConsumerError if the subscription cannot be made; there is no retry.
        """

        pubsub = self._client.pubsub(ignore_subscribe_messages=True)
        try:
            pubsub.subscribe(**{self.subject: self._on_message})
        except redis.RedisError as e:
            pubsub.close()
            raise ConsumerError(f'error subscribing to subject "{self.subject}": {e}') from e

        logger.info("feed_subscribed", subject=self.subject)

        self._thread = threading.Thread(
            target=self._listen,
            args=(pubsub, stop),
            name=f"feed-{self.subject}",
            daemon=True,
        )
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _listen(self, pubsub: Any, stop: threading.Event) -> None:
        try:
            while not stop.is_set():
                try:
                    pubsub.get_message(timeout=self._poll_timeout)
                except redis.RedisError as e:
                    logger.error("feed_read_failed", subject=self.subject, error=str(e))
                    stop.wait(self._poll_timeout)
        finally:
            pubsub.close()
            self._executor.shutdown(wait=True)
            logger.info("feed_unsubscribed", subject=self.subject)

    def _on_message(self, message: dict[str, Any]) -> None:
        self._executor.submit(self.handle_message, message["data"])

    def handle_message(self, data: bytes | str) -> None:
        """Decode, validate and persist one feed message. Never raises."""

        logger.info("feed_message_received", subject=self.subject, size=len(data))

        try:
            order = Order.model_validate_json(data, strict=True)
        except pydantic.ValidationError as e:
            self._discard("decode", e)
            return

        try:
            validate_order(order)
        except OrderValidationError as e:
            self._discard("validation", e, order_uid=order.order_uid, field=e.field)
            return

        try:
            self._repository.create_order(order)
        except Exception as e:
            self._discard("persist", e, order_uid=order.order_uid)
            return

        with self._stats_lock:
            self._processed += 1
        logger.info("order_saved", order_uid=order.order_uid)

    def _discard(self, stage: str, error: Exception, **context: Any) -> None:
        with self._stats_lock:
            self._discarded += 1
        logger.warning("feed_message_discarded", stage=stage, error=str(error), **context)
