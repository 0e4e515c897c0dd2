from __future__ import annotations

import pydantic
import redis

from services.api.app.models.order import Order
from services.api.app.services.order_base import (
    OrderAlreadyExistsError,
    OrderNotFoundError,
    OrderRepositoryError,
)

_KEY_PREFIX = "order:"


class RedisOrderRepository:
    """Order cache kept in Redis as JSON strings, shared between service instances."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisOrderRepository:
        return cls(redis.Redis.from_url(url))

    def get_order(self, order_uid: str) -> Order:
        try:
            payload = self._client.get(_KEY_PREFIX + order_uid)
        except redis.RedisError as e:
            raise OrderRepositoryError(f"error fetching cached order from redis: {e}") from e

        if payload is None:
            raise OrderNotFoundError(order_uid)

        try:
            return Order.model_validate_json(payload)
        except pydantic.ValidationError as e:
            raise OrderRepositoryError(f"error parsing cached order: {e}") from e

    def create_order(self, order: Order) -> None:
        payload = order.model_dump_json()
        try:
            created = self._client.set(_KEY_PREFIX + order.order_uid, payload, nx=True)
        except redis.RedisError as e:
            raise OrderRepositoryError(f"error saving order to redis: {e}") from e

        if not created:
            raise OrderAlreadyExistsError(order.order_uid)
