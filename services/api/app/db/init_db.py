from __future__ import annotations

from services.api.app.db.database import get_engine
from services.api.app.db.models import Base
from services.api.app.settings import env_flag


def init_db() -> None:
    # Schema migrations are out of scope; tables are created if missing.
    if not env_flag("ORDERS_DB_AUTO_CREATE", "true"):
        return

    engine = get_engine()
    Base.metadata.create_all(bind=engine)
