from __future__ import annotations

import os
from dataclasses import dataclass

_TRUTHY = {"1", "true", "yes", "y"}


def env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


@dataclass(frozen=True, slots=True)
class Settings:
    redis_url: str
    subject: str
    cache_backend: str
    consumer_enabled: bool
    consumer_workers: int
    bind_address: str
    log_level: str
    log_format: str

    @classmethod
    def from_env(cls) -> Settings:
        """Read service settings from the environment.

        DATABASE_URL is resolved separately by the db package so tests can swap it per run.
        """

        return cls(
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            subject=os.getenv("ORDERS_SUBJECT", "orders"),
            cache_backend=os.getenv("ORDERS_CACHE_BACKEND", "memory").strip().lower(),
            consumer_enabled=env_flag("ORDERS_CONSUMER_ENABLED", "false"),
            consumer_workers=int(os.getenv("ORDERS_CONSUMER_WORKERS", "8")),
            bind_address=os.getenv("ORDERS_BIND_ADDRESS", "0.0.0.0:8080"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "console"),
        )

    @property
    def bind_host(self) -> str:
        host, _, _port = self.bind_address.rpartition(":")
        return host or "0.0.0.0"

    @property
    def bind_port(self) -> int:
        _host, _, port = self.bind_address.rpartition(":")
        return int(port)
