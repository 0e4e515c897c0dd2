from __future__ import annotations

import threading

from services.api.app.services.order_base import OrderRepository
from services.api.app.services.order_cached import CachedOrderRepository
from services.api.app.services.order_memory import InMemoryOrderRepository
from services.api.app.services.order_sql import SqlOrderRepository
from services.api.app.settings import Settings

_REPOSITORY: OrderRepository | None = None
_LOCK = threading.Lock()


def get_cache_repository(settings: Settings) -> OrderRepository:
    """Select the volatile repository based on ORDERS_CACHE_BACKEND.

    Defaults to the in-process store so tests and local dev need no Redis.
    """

    if settings.cache_backend == "memory":
        return InMemoryOrderRepository()

    if settings.cache_backend == "redis":
        from services.api.app.services.order_redis import RedisOrderRepository

        return RedisOrderRepository.from_url(settings.redis_url)

    raise ValueError(
        f"Unknown ORDERS_CACHE_BACKEND={settings.cache_backend!r}. Expected memory or redis."
    )


def get_order_repository() -> OrderRepository:
    """Return the process-wide cache-aside repository, building it on first use.

    The instance is shared so the in-memory cache outlives individual requests.
    """

    global _REPOSITORY

    with _LOCK:
        if _REPOSITORY is None:
            settings = Settings.from_env()
            _REPOSITORY = CachedOrderRepository(
                database=SqlOrderRepository(),
                cache=get_cache_repository(settings),
            )
        return _REPOSITORY


def reset_order_repository() -> None:
    global _REPOSITORY

    with _LOCK:
        _REPOSITORY = None
