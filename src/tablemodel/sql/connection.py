"""Named database connections for model classes.

Model descriptors refer to databases by alias.  :class:`DatabaseManager`
resolves an alias to a SQLAlchemy engine once and hands out
:class:`Connection` objects that execute the statements built in
:mod:`tablemodel.sql.query`.

Resolution order for ``DatabaseManager.connect(name)``:

1. an engine or URL registered with ``DatabaseManager.register(name, …)``
2. ``TableModelSettings.databases[name]`` (``TABLEMODEL_DATABASES``)
3. ``name`` itself, when it looks like a URL (contains ``://``)

Otherwise :class:`~tablemodel.core.errors.DatabaseNotConfiguredError`.

Generated ids
-------------
Single-row inserts use ``RETURNING <pk>`` when the dialect supports it and
fall back to the DB-API ``lastrowid``.  Multi-row inserts only get
``lastrowid``: SQLite reports the *last* id, which is converted to the first
by subtracting ``rowcount - 1``; MySQL already reports the first.  Either
way, the ids of a multi-row insert are only known to be correct if the
store allocates them contiguously in insertion order.

Tags:
    connection, engine, sqlalchemy, registry, tablemodel
"""

from __future__ import annotations

import threading
from typing import Any

import sqlalchemy as sa
from sqlalchemy.engine import Engine

from tablemodel.core.errors import DatabaseNotConfiguredError
from tablemodel.core.logging import get_logger
from tablemodel.core.settings import get_settings
from tablemodel.sql.engine import create_model_engine
from tablemodel.sql.query import (
    DeleteQuery,
    InsertQuery,
    SelectQuery,
    UpdateQuery,
    UpsertQuery,
)
from tablemodel.sql.results import (
    DeleteResult,
    InsertResult,
    SelectResult,
    UpdateResult,
    UpsertResult,
)

logger = get_logger(__name__)


class Connection:
    """Executes model queries against one engine.

    Every ``execute_*`` call runs in its own transaction
    (``engine.begin()``); SQLAlchemy exceptions propagate unchanged.
    """

    def __init__(self, engine: Engine, name: str | None = None) -> None:
        self.engine = engine
        self.name = name

    def __repr__(self) -> str:
        return f"Connection(name={self.name!r}, dialect={self.engine.dialect.name!r})"

    # -- SELECT ------------------------------------------------------------

    def execute_select(self, query: SelectQuery) -> SelectResult:
        with self.engine.connect() as conn:
            rows = [dict(row) for row in conn.execute(query.statement).mappings()]
        logger.debug("select_executed", database=self.name, table=query.table.source, rows=len(rows))
        return SelectResult(rows)

    # -- INSERT ------------------------------------------------------------

    def _insert_one(self, conn: sa.Connection, stmt: sa.Insert, generated_key: str | None) -> Any:
        """Execute a single-row insert and return its generated id (or None)."""
        if generated_key and self.engine.dialect.insert_returning:
            return conn.execute(stmt.returning(sa.column(generated_key))).scalar()
        result = conn.execute(stmt)
        return result.lastrowid or None

    def execute_insert(self, query: InsertQuery) -> InsertResult:
        if not query.rows:
            return InsertResult(num_rows=0)

        stmt = query.to_statement()
        with self.engine.begin() as conn:
            if len(query.rows) == 1:
                inserted_id = self._insert_one(conn, stmt, query.generated_key)
                result = InsertResult(
                    num_rows=1,
                    inserted_id=inserted_id,
                    inserted_ids=[inserted_id] if inserted_id is not None else None,
                )
            else:
                cursor = conn.execute(stmt)
                num_rows = cursor.rowcount if cursor.rowcount and cursor.rowcount > 0 else len(query.rows)
                result = InsertResult(
                    num_rows=num_rows,
                    inserted_id=self._first_id(cursor.lastrowid, num_rows),
                )

        logger.debug(
            "insert_executed",
            database=self.name,
            table=query.table,
            rows=result.num_rows,
            inserted_id=result.inserted_id,
        )
        return result

    def _first_id(self, lastrowid: Any, num_rows: int) -> Any:
        if not lastrowid:
            return None
        if self.engine.dialect.name == "sqlite":
            return lastrowid - num_rows + 1
        if self.engine.dialect.name in ("mysql", "mariadb"):
            return lastrowid
        return None

    # -- UPDATE ------------------------------------------------------------

    def execute_update(self, query: UpdateQuery) -> UpdateResult:
        with self.engine.begin() as conn:
            cursor = conn.execute(query.to_statement())
        logger.debug("update_executed", database=self.name, table=query.table, rows=cursor.rowcount)
        return UpdateResult(num_rows=cursor.rowcount)

    # -- UPSERT ------------------------------------------------------------

    def execute_upsert(self, query: UpsertQuery) -> UpsertResult:
        """Per object: UPDATE when a row matches ``keys``, INSERT otherwise.

        All objects are processed in one transaction.  Matched rows are not
        touched when ``query.columns`` is empty.  ``inserted_ids`` lines up
        with ``inserts``; an entry is None when no id was generated for it.
        """
        result = UpsertResult()
        ids: list[Any] = []
        with self.engine.begin() as conn:
            for obj, row in zip(query.objects, query.rows):
                if conn.execute(query.match_statement(row)).first() is not None:
                    if query.columns:
                        conn.execute(query.update_statement(row))
                        result.updates.append(obj)
                    continue
                ids.append(self._insert_one(conn, query.insert_statement(row), query.generated_key))
                result.inserts.append(obj)

        if ids:
            result.inserted_ids = ids
            result.inserted_id = next((i for i in ids if i is not None), None)

        logger.debug(
            "upsert_executed",
            database=self.name,
            table=query.table,
            inserted=len(result.inserts),
            updated=len(result.updates),
        )
        return result

    # -- DELETE ------------------------------------------------------------

    def execute_delete(self, query: DeleteQuery) -> DeleteResult:
        with self.engine.begin() as conn:
            cursor = conn.execute(query.to_statement())
        logger.debug("delete_executed", database=self.name, table=query.table, rows=cursor.rowcount)
        return DeleteResult(num_rows=cursor.rowcount, filter=query.filter)


class DatabaseManager:
    """Process-wide alias → engine registry."""

    _engines: dict[str, Engine] = {}
    _urls: dict[str, str] = {}
    _lock = threading.Lock()

    @classmethod
    def register(cls, name: str, target: Engine | str) -> None:
        """Register an engine or URL under ``name`` (replaces any previous one)."""
        with cls._lock:
            if isinstance(target, Engine):
                cls._engines[name] = target
                cls._urls.pop(name, None)
            else:
                cls._urls[name] = target
                cls._engines.pop(name, None)
        logger.debug("database_registered", name=name)

    @classmethod
    def _resolve_url(cls, name: str) -> str:
        if name in cls._urls:
            return cls._urls[name]
        configured = get_settings().databases.get(name)
        if configured:
            return configured
        if "://" in name:
            return name
        raise DatabaseNotConfiguredError(name)

    @classmethod
    def get_engine(cls, name: str) -> Engine:
        """Return the engine for ``name``, creating it on first use."""
        with cls._lock:
            engine = cls._engines.get(name)
            if engine is None:
                url = cls._resolve_url(name)
                engine = create_model_engine(url, echo=get_settings().echo_sql)
                cls._engines[name] = engine
                logger.debug("engine_created", name=name, dialect=engine.dialect.name)
            return engine

    @classmethod
    def connect(cls, name: str) -> Connection:
        return Connection(cls.get_engine(name), name=name)

    @classmethod
    def reset(cls, dispose: bool = True) -> None:
        """Forget every registration (for testing)."""
        with cls._lock:
            if dispose:
                for engine in cls._engines.values():
                    engine.dispose()
            cls._engines.clear()
            cls._urls.clear()


__all__ = [
    "Connection",
    "DatabaseManager",
]
