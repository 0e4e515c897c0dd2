"""Order service entrypoint: lookup API plus the feed consumer."""

from __future__ import annotations

import threading

from fastapi import FastAPI

from services.api.app.db.init_db import init_db
from services.api.app.logger import get_logger, setup_logging
from services.api.app.routers.order import router as order_router
from services.api.app.services.consumer import OrderConsumer
from services.api.app.services.order_factory import get_order_repository
from services.api.app.settings import Settings

logger = get_logger(__name__)

app = FastAPI(title="Orders API")

app.include_router(order_router)

_STOP = threading.Event()
_CONSUMER: OrderConsumer | None = None


@app.on_event("startup")
def _startup() -> None:
    global _CONSUMER

    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_format)
    init_db()

    if settings.consumer_enabled:
        _STOP.clear()
        consumer = OrderConsumer.from_url(
            settings.redis_url,
            settings.subject,
            get_order_repository(),
            max_workers=settings.consumer_workers,
        )
        # A failed subscription aborts startup.
        consumer.subscribe(_STOP)
        _CONSUMER = consumer

    logger.info("startup_complete", consumer_enabled=settings.consumer_enabled)


@app.on_event("shutdown")
def _shutdown() -> None:
    global _CONSUMER

    _STOP.set()
    if _CONSUMER is not None:
        _CONSUMER.join(timeout=10)
        _CONSUMER = None
    logger.info("shutdown_complete")


@app.get("/health")
def health() -> dict:
    out: dict = {"status": "ok"}
    if _CONSUMER is not None:
        out["consumer"] = {
            "subject": _CONSUMER.subject,
            "processed": _CONSUMER.processed,
            "discarded": _CONSUMER.discarded,
        }
    return out


def run() -> None:
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(app, host=settings.bind_host, port=settings.bind_port)


if __name__ == "__main__":
    run()
