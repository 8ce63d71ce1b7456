"""SQLAlchemy engine factory.

Every engine :class:`~tablemodel.sql.connection.DatabaseManager` creates
comes from :func:`create_model_engine`.  SQLite engines get
``check_same_thread=False`` (one in-memory database shared by the pool) and
``PRAGMA foreign_keys=ON`` on every new DB-API connection; other URLs are
passed to SQLAlchemy untouched.

Tags:
    sqlalchemy, engine, tablemodel
"""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa
from sqlalchemy.engine import Engine


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_model_engine(url: str = "sqlite://", *, echo: bool = False, **kwargs: Any) -> Engine:
    """Create an engine for ``url``.

    Extra keyword arguments (pool sizing, ``connect_args``, ...) go straight
    to ``sqlalchemy.create_engine``.
    """
    if not url.startswith("sqlite"):
        return sa.create_engine(url, echo=echo, **kwargs)

    kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = sa.create_engine(url, echo=echo, **kwargs)
    sa.event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


__all__ = ["create_model_engine"]
