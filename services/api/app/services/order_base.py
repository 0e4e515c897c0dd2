from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from services.api.app.models.order import Order


class OrderError(Exception):
    """Base class for order pipeline errors."""


class OrderRepositoryError(OrderError):
    """A repository could not complete an operation (connection, transaction, codec)."""


class OrderNotFoundError(OrderRepositoryError):
    def __init__(self, order_uid: str) -> None:
        super().__init__("order with provided UID was not found in repository")
        self.order_uid = order_uid


class OrderAlreadyExistsError(OrderRepositoryError):
    def __init__(self, order_uid: str, *, message: str | None = None) -> None:
        super().__init__(message or f"order with the same id already exists: {order_uid}")
        self.order_uid = order_uid


class OrderValidationError(OrderError):
    def __init__(self, message: str, *, field: str) -> None:
        super().__init__(message)
        self.field = field


class ConsumerError(OrderError):
    """The feed subscription could not be established."""


class OrderRepository(Protocol):
    def get_order(self, order_uid: str) -> Order: ...

    def create_order(self, order: Order) -> None: ...
