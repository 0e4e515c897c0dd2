"""Durable order repository.

Orders are normalized across four tables: ``orders`` holds the header and points at
``deliveries`` (by surrogate id) and ``payments`` (by transaction); ``items`` point back at
``orders`` by order_uid. Each operation runs in its own transaction.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

from services.api.app.db.database import db_session
from services.api.app.db.models import DeliveryRow, ItemRow, OrderRow, PaymentRow
from services.api.app.models.order import Delivery, Item, Order, Payment
from services.api.app.services.order_base import (
    OrderAlreadyExistsError,
    OrderNotFoundError,
    OrderRepositoryError,
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back; everything is stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SqlOrderRepository:
    def __init__(self, session_factory: Callable[[], Session] = db_session) -> None:
        self._session_factory = session_factory

    def get_order(self, order_uid: str) -> Order:
        try:
            with self._session_factory() as db, db.begin():
                row = (
                    db.query(OrderRow, DeliveryRow, PaymentRow)
                    .join(DeliveryRow, DeliveryRow.id == OrderRow.delivery_id)
                    .join(PaymentRow, PaymentRow.transaction == OrderRow.transaction)
                    .filter(OrderRow.order_uid == order_uid)
                    .first()
                )
                if row is None:
                    raise OrderNotFoundError(order_uid)

                items = (
                    db.query(ItemRow)
                    .filter(ItemRow.order_uid == order_uid)
                    .order_by(ItemRow.id)
                    .all()
                )
                return _to_order(*row, items)
        except SQLAlchemyError as e:
            raise OrderRepositoryError(f"error fetching order from database: {e}") from e

    def create_order(self, order: Order) -> None:
        if order.delivery is None or order.payment is None:
            raise OrderRepositoryError(
                f"order {order.order_uid} has no delivery or payment info"
            )

        try:
            with self._session_factory() as db, db.begin():
                db.add(_payment_row(order.payment))
                db.flush()

                delivery_row = _delivery_row(order.delivery)
                db.add(delivery_row)
                db.flush()
                delivery_id = delivery_row.id

                db.add(_order_row(order, delivery_id, order.payment.transaction))
                db.flush()

                for item in order.items or []:
                    item.order_uid = order.order_uid
                    db.add(_item_row(item))
        except IntegrityError as e:
            # Duplicate orders.order_uid or payments.transaction.
            raise OrderAlreadyExistsError(
                order.order_uid,
                message=f"order {order.order_uid} conflicts with an existing order or payment record",
            ) from e
        except SQLAlchemyError as e:
            raise OrderRepositoryError(f"error saving order in database: {e}") from e

        order.delivery.id = delivery_id


def _payment_row(payment: Payment) -> PaymentRow:
    return PaymentRow(
        transaction=payment.transaction,
        request_id=payment.request_id,
        currency=payment.currency,
        provider=payment.provider,
        amount=payment.amount,
        payment_dt=payment.payment_dt,
        bank=payment.bank,
        delivery_cost=payment.delivery_cost,
        goods_total=payment.goods_total,
        custom_fee=payment.custom_fee,
    )


def _delivery_row(delivery: Delivery) -> DeliveryRow:
    return DeliveryRow(
        name=delivery.name,
        phone=delivery.phone,
        zip=delivery.zip,
        city=delivery.city,
        address=delivery.address,
        region=delivery.region,
        email=delivery.email,
    )


def _order_row(order: Order, delivery_id: int, transaction: str) -> OrderRow:
    return OrderRow(
        order_uid=order.order_uid,
        track_number=order.track_number,
        entry=order.entry,
        delivery_id=delivery_id,
        transaction=transaction,
        locale=order.locale,
        internal_signature=order.internal_signature,
        customer_id=order.customer_id,
        delivery_service=order.delivery_service,
        shardkey=order.shardkey,
        sm_id=order.sm_id,
        date_created=_as_utc(order.date_created),
        oof_shard=order.oof_shard,
    )


def _item_row(item: Item) -> ItemRow:
    return ItemRow(
        order_uid=item.order_uid,
        chrt_id=item.chrt_id,
        track_number=item.track_number,
        price=item.price,
        rid=item.rid,
        name=item.name,
        sale=item.sale,
        size=item.size,
        total_price=item.total_price,
        nm_id=item.nm_id,
        brand=item.brand,
        status=item.status,
    )


def _to_order(
    order_row: OrderRow,
    delivery_row: DeliveryRow,
    payment_row: PaymentRow,
    item_rows: list[ItemRow],
) -> Order:
    return Order(
        order_uid=order_row.order_uid,
        track_number=order_row.track_number,
        entry=order_row.entry,
        delivery=Delivery(
            id=delivery_row.id,
            name=delivery_row.name,
            phone=delivery_row.phone,
            zip=delivery_row.zip,
            city=delivery_row.city,
            address=delivery_row.address,
            region=delivery_row.region,
            email=delivery_row.email,
        ),
        payment=Payment(
            transaction=payment_row.transaction,
            request_id=payment_row.request_id,
            currency=payment_row.currency,
            provider=payment_row.provider,
            amount=payment_row.amount,
            payment_dt=payment_row.payment_dt,
            bank=payment_row.bank,
            delivery_cost=payment_row.delivery_cost,
            goods_total=payment_row.goods_total,
            custom_fee=payment_row.custom_fee,
        ),
        items=[
            Item(
                chrt_id=r.chrt_id,
                track_number=r.track_number,
                price=r.price,
                rid=r.rid,
                name=r.name,
                sale=r.sale,
                size=r.size,
                total_price=r.total_price,
                nm_id=r.nm_id,
                brand=r.brand,
                status=r.status,
            )
            for r in item_rows
        ],
        locale=order_row.locale,
        internal_signature=order_row.internal_signature,
        customer_id=order_row.customer_id,
        delivery_service=order_row.delivery_service,
        shardkey=order_row.shardkey,
        sm_id=order_row.sm_id,
        date_created=_as_utc(order_row.date_created),
        oof_shard=order_row.oof_shard,
    )
