"""Database engine setup.

Any SQLAlchemy URL is accepted. SQLite connections get foreign keys
enabled so association columns behave like they do on server databases.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url


def create_db_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine for *url*, with foreign keys on for SQLite."""
    engine = create_engine(url, echo=echo)

    if make_url(url).get_backend_name() == "sqlite":

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine
