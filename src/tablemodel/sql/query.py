"""Query builders on top of SQLAlchemy Core.

The model layer never writes SQL text.  It builds statements through the
small vocabulary in this module, which maps one-to-one onto SQLAlchemy Core
constructs using lightweight ``table()`` / ``column()`` clauses, so models do
not need a ``MetaData`` or ``Table`` definition.

Architecture::

    Query.select_from(TableRef)        → SelectQuery  (mutable, chainable)
    Query.insert_into(table, data, …)  → InsertQuery  (frozen)
    Query.update(table, data, …)       → UpdateQuery  (frozen)
    Query.upsert(table, data, …)       → UpsertQuery  (frozen)
    Query.delete_from(table, filter)   → DeleteQuery  (frozen)

    SelectQuery
    ├── where(*clauses, **equals)
    ├── order_by(spec)
    ├── limit(limit, offset=0)
    └── paginate(page, page_size)       # 1-based page

Filter mappings follow one rule set everywhere (``where``, ``delete_from``,
upsert key matching): ``None`` becomes ``IS NULL``, a list/tuple/set becomes
``IN``, anything else is ``=``.

Tags:
    query-builder, sqlalchemy, sql, tablemodel
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import sqlalchemy as sa
from sqlalchemy.sql.elements import ClauseElement

_DIRECTIONS = ("ASC", "DESC")
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


# ── Helpers ──────────────────────────────────────────────────────────────


def column(name: str) -> sa.ColumnElement[Any]:
    """Column reference for ``"col"`` or ``"prefix.col"``.

    Names come from callers (filter keys, ``@orderBy``), so anything that is
    not a plain or table-qualified identifier raises ``ValueError``.
    """
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid column name {name!r}")
    if "." in name:
        # Only validated identifiers reach literal_column.
        return sa.literal_column(name)
    return sa.column(name)


def filter_clauses(filter: Mapping[str, Any]) -> list[sa.ColumnElement[bool]]:
    """Translate ``{column: value}`` into WHERE clauses."""
    clauses = []
    for name, value in filter.items():
        col = column(name)
        if value is None:
            clauses.append(col.is_(None))
        elif isinstance(value, (list, tuple, set, frozenset)):
            clauses.append(col.in_(list(value)))
        else:
            clauses.append(col == value)
    return clauses


def _directed(name: str, direction: str = "ASC") -> sa.ColumnElement[Any]:
    name = name.strip()
    if name.startswith("-"):
        name, direction = name[1:], "DESC"
    else:
        parts = name.rsplit(None, 1)
        if len(parts) == 2 and parts[1].upper() in _DIRECTIONS:
            name, direction = parts
    direction = direction.upper()
    if direction not in _DIRECTIONS:
        raise ValueError(f"Invalid sort direction {direction!r} for column {name!r}")
    col = column(name)
    return col.desc() if direction == "DESC" else col.asc()


def order_clauses(spec: Any) -> list[Any]:
    """Translate an ordering spec into ORDER BY clauses.

    Accepted forms::

        "name"                        name ASC
        "name DESC" / "-name"         name DESC
        "last_name, first_name DESC"  comma-separated list
        ["-created", "id"]            sequence of the above
        {"created": "DESC"}           column → direction
        users.c.name.desc()           SQLAlchemy clause, used as-is
    """
    if isinstance(spec, ClauseElement):
        return [spec]
    if isinstance(spec, str):
        return [_directed(part) for part in spec.split(",") if part.strip()]
    if isinstance(spec, Mapping):
        return [_directed(name, direction) for name, direction in spec.items()]
    if isinstance(spec, Iterable):
        clauses = []
        for item in spec:
            clauses.extend(order_clauses(item))
        return clauses
    raise TypeError(f"Unsupported order spec: {spec!r}")


def row_of(data: Any, columns: Sequence[str] | None = None) -> dict[str, Any]:
    """Extract column values from a model instance or mapping.

    With ``columns=None`` every public attribute is returned.
    """
    if isinstance(data, Mapping):
        if columns is None:
            return dict(data)
        return {c: data.get(c) for c in columns}
    to_row = getattr(data, "to_row", None)
    if callable(to_row):
        return to_row(columns)
    if columns is None:
        return {k: v for k, v in vars(data).items() if not k.startswith("_")}
    return {c: getattr(data, c, None) for c in columns}


def _table(name: str, columns: Iterable[str]) -> sa.TableClause:
    return sa.table(name, *[sa.column(c) for c in dict.fromkeys(columns)])


# ── SELECT ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TableRef:
    """A table name with an optional alias."""

    source: str
    alias: str | None = None

    @property
    def clause(self) -> sa.FromClause:
        table = sa.table(self.source)
        return table.alias(self.alias) if self.alias else table

    def column(self, name: str) -> sa.ColumnElement[Any]:
        """Column qualified by the alias (or the table name without one)."""
        return column(f"{self.alias or self.source}.{name}")


class SelectQuery:
    """Chainable SELECT over one table.

    Every builder method mutates the query in place and returns it, so both
    ``query.limit(10)`` and ``query = query.limit(10)`` work.  The underlying
    SQLAlchemy ``Select`` is available as :attr:`statement` for joins or
    anything else this class does not wrap.
    """

    def __init__(self, table: TableRef):
        self.table = table
        self.statement: sa.Select[Any] = sa.select(sa.literal_column("*")).select_from(
            table.clause
        )

    def __repr__(self) -> str:
        return f"SelectQuery({self.table.source!r}, alias={self.table.alias!r})"

    def __str__(self) -> str:
        return self.compile()

    def column(self, name: str) -> sa.ColumnElement[Any]:
        return column(name)

    def where(self, *clauses: Any, **equals: Any) -> SelectQuery:
        """Add WHERE conditions (ANDed together)."""
        conditions = list(clauses) + filter_clauses(equals)
        if conditions:
            self.statement = self.statement.where(*conditions)
        return self

    def order_by(self, spec: Any) -> SelectQuery:
        self.statement = self.statement.order_by(*order_clauses(spec))
        return self

    def limit(self, limit: int, offset: int = 0) -> SelectQuery:
        self.statement = self.statement.limit(int(limit)).offset(int(offset))
        return self

    def paginate(self, page: int, page_size: int) -> SelectQuery:
        """Restrict to one page of results; ``page`` starts at 1."""
        page, page_size = int(page), int(page_size)
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")
        return self.limit(page_size, (page - 1) * page_size)

    def compile(self, dialect: sa.Dialect | None = None) -> str:
        """Render SQL with bound values inlined (for logging and tests)."""
        compiled = self.statement.compile(
            dialect=dialect, compile_kwargs={"literal_binds": True}
        )
        return str(compiled)


# ── DML ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class InsertQuery:
    """INSERT of one or more rows into ``table``."""

    table: str
    rows: tuple[dict[str, Any], ...]
    columns: tuple[str, ...]
    generated_key: str | None = None

    def to_statement(self) -> sa.Insert:
        stmt = sa.insert(_table(self.table, self.columns))
        if len(self.rows) == 1:
            return stmt.values(self.rows[0])
        return stmt.values(list(self.rows))


@dataclass(frozen=True)
class UpdateQuery:
    """UPDATE of ``columns`` on the rows matching ``keys``."""

    table: str
    row: dict[str, Any]
    keys: tuple[str, ...]
    columns: tuple[str, ...]

    def to_statement(self) -> sa.Update:
        tbl = _table(self.table, self.keys + self.columns)
        match = filter_clauses({k: self.row.get(k) for k in self.keys})
        return (
            sa.update(tbl)
            .where(*match)
            .values({c: self.row.get(c) for c in self.columns})
        )


@dataclass(frozen=True)
class UpsertQuery:
    """Update-or-insert of each object, matched on ``keys``.

    An empty ``columns`` tuple makes the upsert insert-only: matched rows are
    left untouched.  Inserted rows carry every non-None attribute of the
    object.
    """

    table: str
    objects: tuple[Any, ...]
    rows: tuple[dict[str, Any], ...]
    keys: tuple[str, ...]
    columns: tuple[str, ...] = ()
    generated_key: str | None = None

    def match_statement(self, row: Mapping[str, Any]) -> sa.Select[Any]:
        match = filter_clauses({k: row.get(k) for k in self.keys})
        return sa.select(sa.literal(1)).select_from(sa.table(self.table)).where(*match).limit(1)

    def update_statement(self, row: Mapping[str, Any]) -> sa.Update:
        return UpdateQuery(self.table, dict(row), self.keys, self.columns).to_statement()

    def insert_statement(self, row: Mapping[str, Any]) -> sa.Insert:
        values = {k: v for k, v in row.items() if v is not None}
        return sa.insert(_table(self.table, values)).values(values)


@dataclass(frozen=True)
class DeleteQuery:
    """DELETE of the rows matching ``filter``."""

    table: str
    filter: dict[str, Any] = field(default_factory=dict)

    def to_statement(self) -> sa.Delete:
        return sa.delete(sa.table(self.table)).where(*filter_clauses(self.filter))


# ── Constructors ─────────────────────────────────────────────────────────


def _objects(data: Any) -> tuple[Any, ...]:
    if isinstance(data, Mapping) or not isinstance(data, Iterable):
        return (data,)
    return tuple(data)


class Query:
    """Entry points for building statements."""

    @staticmethod
    def select_from(table: TableRef | str, alias: str | None = None) -> SelectQuery:
        if isinstance(table, str):
            table = TableRef(table, alias)
        return SelectQuery(table)

    @staticmethod
    def insert_into(
        table: str,
        data: Any,
        columns: Sequence[str] | None = None,
        *,
        generated_key: str | None = None,
    ) -> InsertQuery:
        """INSERT for one object/mapping or an iterable of them."""
        objects = _objects(data)
        cols = tuple(columns) if columns else None
        rows = tuple(row_of(obj, cols) for obj in objects)
        if cols is None:
            cols = tuple(dict.fromkeys(k for row in rows for k in row))
            rows = tuple({c: row.get(c) for c in cols} for row in rows)
        return InsertQuery(table, rows, cols, generated_key)

    @staticmethod
    def update(
        table: str,
        data: Any,
        keys: Sequence[str],
        columns: Sequence[str],
    ) -> UpdateQuery:
        keys, columns = tuple(keys), tuple(columns)
        if not keys:
            raise ValueError("update() needs at least one key column to match rows")
        if not columns:
            raise ValueError("update() needs at least one column to set")
        return UpdateQuery(table, row_of(data, keys + columns), keys, columns)

    @staticmethod
    def upsert(
        table: str,
        data: Any,
        keys: Sequence[str],
        columns: Sequence[str] = (),
        *,
        generated_key: str | None = None,
    ) -> UpsertQuery:
        keys = tuple(keys)
        if not keys:
            raise ValueError("upsert() needs at least one key column to match rows")
        objects = _objects(data)
        rows = tuple(row_of(obj) for obj in objects)
        return UpsertQuery(table, objects, rows, keys, tuple(columns), generated_key)

    @staticmethod
    def delete_from(table: str, filter: Mapping[str, Any] | None = None) -> DeleteQuery:
        return DeleteQuery(table, dict(filter or {}))


__all__ = [
    "TableRef",
    "SelectQuery",
    "InsertQuery",
    "UpdateQuery",
    "UpsertQuery",
    "DeleteQuery",
    "Query",
    "column",
    "filter_clauses",
    "order_clauses",
    "row_of",
]
