from __future__ import annotations

import argparse
import json
from pathlib import Path

import redis

from services.api.app.settings import Settings


def sample_order(order_uid: str) -> dict:
    return {
        "order_uid": order_uid,
        "track_number": "WBILMTESTTRACK",
        "entry": "WBIL",
        "delivery": {
            "name": "Test Testov",
            "phone": "+9720000000",
            "zip": "2639809",
            "city": "Kiryat Mozkin",
            "address": "Ploshad Mira 15",
            "region": "Kraiot",
            "email": "test@gmail.com",
        },
        "payment": {
            "transaction": order_uid,
            "request_id": "",
            "currency": "USD",
            "provider": "wbpay",
            "amount": 1817,
            "payment_dt": 1637907727,
            "bank": "alpha",
            "delivery_cost": 1500,
            "goods_total": 317,
            "custom_fee": 0,
        },
        "items": [
            {
                "chrt_id": 9934930,
                "track_number": "WBILMTESTTRACK",
                "price": 453,
                "rid": "ab4219087a764ae0btest",
                "name": "Mascaras",
                "sale": 30,
                "size": "0",
                "total_price": 317,
                "nm_id": 2389212,
                "brand": "Vivienne Sabo",
                "status": 202,
            }
        ],
        "locale": "en",
        "internal_signature": "",
        "customer_id": "test",
        "delivery_service": "meest",
        "shardkey": "9",
        "sm_id": 99,
        "date_created": "2021-11-26T06:22:19Z",
        "oof_shard": "1",
    }


def main() -> int:
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="Publish an order message to the feed")
    parser.add_argument("--file", type=Path, help="JSON file with the order payload")
    parser.add_argument("--order-uid", default="b563feb7b2b84b6test")
    parser.add_argument("--redis-url", default=settings.redis_url)
    parser.add_argument("--subject", default=settings.subject)
    args = parser.parse_args()

    if args.file is not None:
        payload = args.file.read_bytes()
    else:
        payload = json.dumps(sample_order(args.order_uid)).encode()

    client = redis.Redis.from_url(args.redis_url)
    receivers = client.publish(args.subject, payload)
    print(f"Published {len(payload)} bytes to {args.subject!r} ({receivers} subscribers)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
