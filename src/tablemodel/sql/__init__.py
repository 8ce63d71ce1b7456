"""SQLAlchemy-backed query builders, results and connections."""

from tablemodel.sql.connection import Connection, DatabaseManager
from tablemodel.sql.engine import create_model_engine
from tablemodel.sql.query import (
    DeleteQuery,
    InsertQuery,
    Query,
    SelectQuery,
    TableRef,
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

__all__ = [
    "Connection",
    "DatabaseManager",
    "create_model_engine",
    "Query",
    "TableRef",
    "SelectQuery",
    "InsertQuery",
    "UpdateQuery",
    "UpsertQuery",
    "DeleteQuery",
    "SelectResult",
    "InsertResult",
    "UpdateResult",
    "UpsertResult",
    "DeleteResult",
]
