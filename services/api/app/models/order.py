"""Order entity as carried on the feed and returned by the lookup endpoint."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator, model_validator

from services.api.app.services.order_base import OrderValidationError

# Creation time of an order whose payload did not carry one.
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


class Delivery(BaseModel):
    # Store-assigned surrogate key; never part of the wire format.
    id: int | None = Field(default=None, exclude=True)

    name: str = ""
    phone: str = ""
    zip: str = ""
    city: str = ""
    address: str = ""
    region: str = ""
    email: str = ""


class Payment(BaseModel):
    transaction: str = ""
    request_id: str = ""
    currency: str = ""
    provider: str = ""
    amount: float = 0
    payment_dt: int = 0
    bank: str = ""
    delivery_cost: float = 0
    goods_total: float = 0
    custom_fee: float = 0

    def validate_payment(self) -> None:
        if not self.transaction:
            raise OrderValidationError("transaction is empty", field="transaction")


class Item(BaseModel):
    chrt_id: int = 0
    track_number: str = ""
    price: float = 0
    rid: str = ""
    name: str = ""
    sale: float = 0
    size: str = ""
    total_price: float = 0
    nm_id: int = 0
    brand: str = ""
    status: int = 0

    # Filled in from the parent order by the persistence layer.
    order_uid: str = Field(default="", exclude=True)

    def validate_item(self) -> None:
        if self.chrt_id == 0:
            raise OrderValidationError("illegal chrt_id (0)", field="chrt_id")


class Order(BaseModel):
    order_uid: str = ""
    track_number: str = ""
    entry: str = ""
    delivery: Delivery | None = None
    payment: Payment | None = None
    items: list[Item] | None = None
    locale: str = ""
    internal_signature: str = ""
    customer_id: str = ""
    delivery_service: str = ""
    shardkey: str = ""
    sm_id: int = 0
    date_created: datetime = ZERO_TIME
    oof_shard: str = ""

    @field_validator("date_created", mode="before")
    @classmethod
    def _zero_time_when_null(cls, value: object) -> object:
        return ZERO_TIME if value is None else value

    @model_validator(mode="after")
    def _bind_items(self) -> Order:
        # Item.order_uid follows the parent, whatever the payload said.
        for item in self.items or []:
            item.order_uid = self.order_uid
        return self


def validate_order(order: Order) -> None:
    """Check an order before it is persisted.

    Checks run in a fixed order and stop at the first violation, so the error's ``field``
    always names the first offending part: order_uid, delivery, payment, payment.transaction,
    items, then items[i].chrt_id.
    """

    if not order.order_uid:
        raise OrderValidationError("order uid is empty", field="order_uid")

    if order.delivery is None:
        raise OrderValidationError("delivery info is empty", field="delivery")

    if order.payment is None:
        raise OrderValidationError("payment info is empty", field="payment")

    try:
        order.payment.validate_payment()
    except OrderValidationError as e:
        raise OrderValidationError(f"payment is invalid: {e}", field=f"payment.{e.field}") from e

    if order.items is None:
        raise OrderValidationError("item list is nil", field="items")

    for i, item in enumerate(order.items):
        try:
            item.validate_item()
        except OrderValidationError as e:
            raise OrderValidationError(
                f"item {i} is invalid: {e}", field=f"items[{i}].{e.field}"
            ) from e
