from __future__ import annotations

import threading

from services.api.app.models.order import Order
from services.api.app.services.order_base import OrderAlreadyExistsError, OrderNotFoundError


class InMemoryOrderRepository:
    """Process-local order store, used as the first-look cache.

    Entries live until the process exits. Values are copied in and out so a caller mutating
    its Order cannot change what other readers see.
    """

    def __init__(self) -> None:
        self._orders: dict[str, Order] = {}
        self._lock = threading.Lock()

    def get_order(self, order_uid: str) -> Order:
        with self._lock:
            order = self._orders.get(order_uid)
        if order is None:
            raise OrderNotFoundError(order_uid)
        return order.model_copy(deep=True)

    def create_order(self, order: Order) -> None:
        with self._lock:
            if order.order_uid in self._orders:
                raise OrderAlreadyExistsError(order.order_uid)
            self._orders[order.order_uid] = order.model_copy(deep=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)
