from __future__ import annotations

import json
import queue
import threading
import time
from pathlib import Path

import pytest
import redis
from services.api.app.models.order import ZERO_TIME, Order, validate_order
from services.api.app.services.consumer import OrderConsumer
from services.api.app.services.order_base import (
    ConsumerError,
    OrderNotFoundError,
    OrderRepositoryError,
    OrderValidationError,
)
from services.api.app.services.order_cached import CachedOrderRepository
from services.api.app.services.order_memory import InMemoryOrderRepository
from services.api.app.services.order_sql import SqlOrderRepository


class _FakePubSub:
    def __init__(self, fail_subscribe: bool = False) -> None:
        self.handlers: dict[str, object] = {}
        self.messages: queue.Queue = queue.Queue()
        self.closed = False
        self._fail_subscribe = fail_subscribe

    def subscribe(self, **handlers) -> None:
        if self._fail_subscribe:
            raise redis.ConnectionError("broker unavailable")
        self.handlers.update(handlers)

    def get_message(self, timeout: float = 0.0) -> None:
        try:
            channel, data = self.messages.get(timeout=timeout)
        except queue.Empty:
            return None
        self.handlers[channel]({"type": "message", "channel": channel, "data": data})
        return None

    def close(self) -> None:
        self.closed = True


class _FakeRedis:
    def __init__(self, pubsub: _FakePubSub) -> None:
        self._pubsub = pubsub

    def pubsub(self, ignore_subscribe_messages: bool = False) -> _FakePubSub:
        assert ignore_subscribe_messages
        return self._pubsub

    def publish(self, channel: str, data: bytes) -> int:
        self._pubsub.messages.put((channel, data))
        return 1


class _FailingRepository:
    def get_order(self, order_uid: str) -> Order:
        raise OrderNotFoundError(order_uid)

    def create_order(self, order: Order) -> None:
        raise OrderRepositoryError("database is down")


@pytest.fixture()
def cached(database: Path) -> CachedOrderRepository:
    return CachedOrderRepository(SqlOrderRepository(), InMemoryOrderRepository())


def _consumer(repository, pubsub: _FakePubSub | None = None) -> OrderConsumer:
    client = _FakeRedis(pubsub or _FakePubSub())
    return OrderConsumer(client, "orders", repository, max_workers=4, poll_timeout=0.05)


def _wait_for(predicate, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        time.sleep(0.01)


def test_valid_message_is_persisted_durably_and_cached(cached, order_payload) -> None:
    consumer = _consumer(cached)

    consumer.handle_message(json.dumps(order_payload()).encode())

    assert consumer.processed == 1
    assert consumer.discarded == 0
    stored = cached.database.get_order("b563feb7b2b84b6test")
    assert len(stored.items or []) == 1
    assert stored.items[0].chrt_id == 9934930
    assert stored.items[0].price == 453
    assert cached.cache.get_order("b563feb7b2b84b6test") == stored


@pytest.mark.parametrize(
    "data",
    [
        b"not json at all",
        b'{"order_uid": "x", "items": [{"chrt_id": "abc"}]}',
        b"[]",
    ],
)
def test_undecodable_message_is_discarded(cached, data) -> None:
    consumer = _consumer(cached)

    consumer.handle_message(data)

    assert consumer.discarded == 1
    assert consumer.processed == 0


@pytest.mark.parametrize("chrt_id", ["9934930", True, 9934930.5])
def test_mistyped_field_is_a_decode_failure(cached, order_payload, chrt_id) -> None:
    consumer = _consumer(cached)
    payload = order_payload()
    payload["items"][0]["chrt_id"] = chrt_id

    consumer.handle_message(json.dumps(payload))

    assert consumer.discarded == 1
    assert consumer.processed == 0
    with pytest.raises(OrderNotFoundError):
        cached.database.get_order("b563feb7b2b84b6test")


@pytest.mark.parametrize("date_created", ["missing", None])
def test_order_without_creation_time_is_persisted(cached, order_payload, date_created) -> None:
    consumer = _consumer(cached)
    payload = order_payload()
    if date_created == "missing":
        del payload["date_created"]
    else:
        payload["date_created"] = date_created

    consumer.handle_message(json.dumps(payload))

    assert consumer.processed == 1
    assert consumer.discarded == 0
    assert cached.database.get_order("b563feb7b2b84b6test").date_created == ZERO_TIME


def test_empty_object_decodes_and_fails_validation_on_uid() -> None:
    order = Order.model_validate_json(b"{}", strict=True)

    with pytest.raises(OrderValidationError) as exc_info:
        validate_order(order)
    assert exc_info.value.field == "order_uid"


def test_invalid_order_is_discarded(cached, order_payload) -> None:
    consumer = _consumer(cached)
    payload = order_payload()
    payload["items"][0]["chrt_id"] = 0

    consumer.handle_message(json.dumps(payload))

    assert consumer.discarded == 1
    with pytest.raises(OrderNotFoundError):
        cached.database.get_order("b563feb7b2b84b6test")


def test_persistence_failure_is_discarded() -> None:
    consumer = _consumer(_FailingRepository())
    payload = {
        "order_uid": "o-1",
        "delivery": {},
        "payment": {"transaction": "t-1"},
        "items": [],
        "date_created": "2021-11-26T06:22:19Z",
    }

    consumer.handle_message(json.dumps(payload))

    assert consumer.discarded == 1
    assert consumer.processed == 0


def test_duplicate_message_is_discarded(cached, order_payload) -> None:
    consumer = _consumer(cached)
    data = json.dumps(order_payload())

    consumer.handle_message(data)
    consumer.handle_message(data)

    assert consumer.processed == 1
    assert consumer.discarded == 1


def test_subscription_keeps_running_after_bad_messages(cached, order_payload) -> None:
    pubsub = _FakePubSub()
    client = _FakeRedis(pubsub)
    consumer = OrderConsumer(client, "orders", cached, max_workers=4, poll_timeout=0.05)
    stop = threading.Event()

    consumer.subscribe(stop)
    client.publish("orders", b"garbage")
    client.publish("orders", json.dumps(order_payload(order_uid="", items=[])).encode())
    client.publish("orders", json.dumps(order_payload("order-a")).encode())
    client.publish("orders", json.dumps(order_payload("order-b")).encode())

    _wait_for(lambda: consumer.processed + consumer.discarded == 4)
    stop.set()
    consumer.join(timeout=5)

    assert consumer.processed == 2
    assert consumer.discarded == 2
    assert pubsub.closed
    assert cached.get_order("order-a").order_uid == "order-a"
    assert cached.get_order("order-b").order_uid == "order-b"


def test_subscription_failure_is_returned_to_caller(cached) -> None:
    pubsub = _FakePubSub(fail_subscribe=True)
    consumer = _consumer(cached, pubsub)

    with pytest.raises(ConsumerError, match='subject "orders"'):
        consumer.subscribe(threading.Event())

    assert pubsub.closed
