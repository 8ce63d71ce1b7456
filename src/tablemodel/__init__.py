"""
tablemodel - Active-record style models over SQLAlchemy Core.

A model class declares its table (``get_model_descriptor``) and how caller
parameters shape its SELECT (``build_select_query``).  Shared plumbing
executes select/insert/update/upsert/delete and verifies that every
parameter a caller passed was actually consumed.

Quick start::

    from tablemodel import AbstractModel, DatabaseManager, ModelDescriptor

    class User(AbstractModel):
        @classmethod
        def get_model_descriptor(cls):
            return ModelDescriptor("main", "users", "u").with_primary_key_names(["id"])

        @classmethod
        def build_select_query(cls, query, params):
            if "name" in params:
                query.where(name=params["name"])
            return query

    DatabaseManager.register("main", "sqlite:///app.db")
    User.get_rows({"name": "ada", "@limit": 10})
"""

from tablemodel.core.descriptor import ModelDescriptor
from tablemodel.core.errors import (
    ConfigError,
    DatabaseNotConfiguredError,
    ModelError,
    ParamUncheckedError,
    TypeMismatchError,
    UnusedParamsError,
)
from tablemodel.core.protocols import ModelProtocol
from tablemodel.framework.model import AbstractModel
from tablemodel.framework.operations import ModelOperations
from tablemodel.framework.params import ModelParams
from tablemodel.sql.connection import Connection, DatabaseManager
from tablemodel.sql.query import Query, SelectQuery, TableRef

__version__ = "0.1.0"

__all__ = [
    # Models
    "AbstractModel",
    "ModelDescriptor",
    "ModelOperations",
    "ModelParams",
    "ModelProtocol",
    # SQL
    "Connection",
    "DatabaseManager",
    "Query",
    "SelectQuery",
    "TableRef",
    # Errors
    "ModelError",
    "ParamUncheckedError",
    "UnusedParamsError",
    "TypeMismatchError",
    "ConfigError",
    "DatabaseNotConfiguredError",
]
