from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class PaymentRow(Base):
    __tablename__ = "payments"

    transaction: Mapped[str] = mapped_column(String, primary_key=True)
    request_id: Mapped[str] = mapped_column(String, nullable=False, default="")
    currency: Mapped[str] = mapped_column(String, nullable=False, default="")
    provider: Mapped[str] = mapped_column(String, nullable=False, default="")
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    payment_dt: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    bank: Mapped[str] = mapped_column(String, nullable=False, default="")
    delivery_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    goods_total: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    custom_fee: Mapped[float] = mapped_column(Float, nullable=False, default=0)


class DeliveryRow(Base):
    __tablename__ = "deliveries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    phone: Mapped[str] = mapped_column(String, nullable=False, default="")
    zip: Mapped[str] = mapped_column(String, nullable=False, default="")
    city: Mapped[str] = mapped_column(String, nullable=False, default="")
    address: Mapped[str] = mapped_column(String, nullable=False, default="")
    region: Mapped[str] = mapped_column(String, nullable=False, default="")
    email: Mapped[str] = mapped_column(String, nullable=False, default="")


class OrderRow(Base):
    __tablename__ = "orders"

    order_uid: Mapped[str] = mapped_column(String, primary_key=True)
    track_number: Mapped[str] = mapped_column(String, nullable=False, default="")
    entry: Mapped[str] = mapped_column(String, nullable=False, default="")
    delivery_id: Mapped[int] = mapped_column(ForeignKey("deliveries.id"), nullable=False)
    transaction: Mapped[str] = mapped_column(ForeignKey("payments.transaction"), nullable=False)
    locale: Mapped[str] = mapped_column(String, nullable=False, default="")
    internal_signature: Mapped[str] = mapped_column(String, nullable=False, default="")
    customer_id: Mapped[str] = mapped_column(String, nullable=False, default="")
    delivery_service: Mapped[str] = mapped_column(String, nullable=False, default="")
    shardkey: Mapped[str] = mapped_column(String, nullable=False, default="")
    sm_id: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    date_created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    oof_shard: Mapped[str] = mapped_column(String, nullable=False, default="")


class ItemRow(Base):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_uid: Mapped[str] = mapped_column(ForeignKey("orders.order_uid"), nullable=False, index=True)

    chrt_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    track_number: Mapped[str] = mapped_column(String, nullable=False, default="")
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    rid: Mapped[str] = mapped_column(String, nullable=False, default="")
    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    sale: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    size: Mapped[str] = mapped_column(String, nullable=False, default="")
    total_price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    nm_id: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    brand: Mapped[str] = mapped_column(String, nullable=False, default="")
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
