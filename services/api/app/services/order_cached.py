"""Cache-aside composition of a durable repository and a volatile one.

Reads try the cache first and fall back to the database, backfilling the cache on the way
out. Writes go to the database first; the cache only ever receives values that committed.
Cache failures are logged and never reach the caller.
"""

from __future__ import annotations

from services.api.app.logger import get_logger
from services.api.app.models.order import Order
from services.api.app.services.order_base import (
    OrderAlreadyExistsError,
    OrderNotFoundError,
    OrderRepository,
    OrderRepositoryError,
)

logger = get_logger(__name__)


class CachedOrderRepository:
    def __init__(self, database: OrderRepository, cache: OrderRepository) -> None:
        self.database = database
        self.cache = cache

    def get_order(self, order_uid: str) -> Order:
        try:
            return self.cache.get_order(order_uid)
        except OrderNotFoundError:
            pass
        except Exception as e:
            logger.warning("order_cache_read_failed", order_uid=order_uid, error=str(e))

        try:
            order = self.database.get_order(order_uid)
        except OrderNotFoundError:
            raise
        except OrderRepositoryError as e:
            logger.error("order_database_read_failed", order_uid=order_uid, error=str(e))
            raise OrderRepositoryError(
                f"error fetching order {order_uid} from database: {e}"
            ) from e

        self._cache_best_effort(order, action="backfill")
        return order

    def create_order(self, order: Order) -> None:
        try:
            self.database.create_order(order)
        except OrderAlreadyExistsError:
            raise
        except OrderRepositoryError as e:
            logger.error("order_database_write_failed", order_uid=order.order_uid, error=str(e))
            raise OrderRepositoryError(
                f"error saving order {order.order_uid} to database: {e}"
            ) from e

        self._cache_best_effort(order, action="write")

    def _cache_best_effort(self, order: Order, *, action: str) -> None:
        try:
            self.cache.create_order(order)
        except Exception as e:
            logger.warning(
                "order_cache_write_failed",
                order_uid=order.order_uid,
                action=action,
                error=str(e),
            )
