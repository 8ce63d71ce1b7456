"""Inheritance-based entry point for model classes.

Subclass :class:`AbstractModel`, implement the two abstract classmethods,
and the class gains ``get_rows``, ``insert``, ``upsert`` and friends, all
delegating to :class:`~tablemodel.framework.operations.ModelOperations`.

Examples:
    >>> class User(AbstractModel):
    ...     @classmethod
    ...     def get_model_descriptor(cls):
    ...         return ModelDescriptor("main", "users", "u").with_primary_key_names(["id"])
    ...
    ...     @classmethod
    ...     def build_select_query(cls, query, params):
    ...         if "active" in params:
    ...             query.where(active=params["active"])
    ...         return query
    ...
    >>> User.get_rows({"active": True, "@orderBy": "-created_at", "@limit": 10})
    >>> user = User(name="ada")
    >>> User.insert(user, ["name"])
    >>> user.id
    1

Instances are plain attribute holders.  Subclasses may also be dataclasses;
``from_row`` calls ``cls(**row)`` either way.

Tags:
    model, active-record, crud, tablemodel
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, TypeVar

from tablemodel.core.descriptor import ModelDescriptor
from tablemodel.framework.operations import ModelOperations
from tablemodel.framework.params import ModelParams
from tablemodel.sql.query import SelectQuery
from tablemodel.sql.results import DeleteResult, InsertResult, UpdateResult, UpsertResult

M = TypeVar("M", bound="AbstractModel")


class AbstractModel(ABC):
    """Base class for table-backed models."""

    def __init__(self, **attrs: Any) -> None:
        for name, value in attrs.items():
            setattr(self, name, value)

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self.to_row().items())
        return f"{type(self).__name__}({fields})"

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.to_row() == other.to_row()

    __hash__ = None  # type: ignore[assignment]

    # -- Model contract ----------------------------------------------------

    @classmethod
    @abstractmethod
    def get_model_descriptor(cls) -> ModelDescriptor:
        """Return the model's table metadata."""

    @classmethod
    @abstractmethod
    def build_select_query(cls, query: SelectQuery, params: ModelParams) -> SelectQuery:
        """Apply model-specific filters to ``query``.

        Check each parameter with ``in`` before reading it; every parameter
        the caller passed must be read here or by the well-known keys.
        """

    @classmethod
    def get_model_descriptor_cached(cls) -> ModelDescriptor:
        return ModelOperations.get_descriptor(cls)

    @classmethod
    def get_single_primary_key_name(cls) -> str | None:
        return ModelOperations.get_single_primary_key_name(cls)

    # -- Row mapping -------------------------------------------------------

    @classmethod
    def from_row(cls: type[M], row: Mapping[str, Any]) -> M:
        return cls(**dict(row))

    def to_row(self, columns: Iterable[str] | None = None) -> dict[str, Any]:
        if columns is None:
            return {k: v for k, v in vars(self).items() if not k.startswith("_")}
        return {c: getattr(self, c, None) for c in columns}

    # -- Model operations --------------------------------------------------

    @classmethod
    def get_query(cls, params: Mapping[str, Any] | None = None) -> SelectQuery:
        return ModelOperations.get_query(cls, params)

    @classmethod
    def get_rows(cls: type[M], params: Mapping[str, Any] | None = None) -> list[M]:
        return ModelOperations.get_rows(cls, params)

    @classmethod
    def get_first(cls: type[M], params: Mapping[str, Any] | None = None) -> M | None:
        return ModelOperations.get_first(cls, params)

    @classmethod
    def get_last(cls: type[M], params: Mapping[str, Any] | None = None) -> M | None:
        return ModelOperations.get_last(cls, params)

    @classmethod
    def insert(cls, data: Any, columns: Sequence[str]) -> InsertResult:
        return ModelOperations.insert(cls, data, columns)

    @classmethod
    def insert_many(cls, data: Iterable[Any], columns: Sequence[str]) -> InsertResult:
        return ModelOperations.insert_many(cls, data, columns)

    @classmethod
    def update(cls, data: Any, keys: Sequence[str], columns: Sequence[str]) -> UpdateResult:
        return ModelOperations.update(cls, data, keys, columns)

    @classmethod
    def upsert(cls, data: Any, keys: Sequence[str], columns: Sequence[str] = ()) -> UpsertResult:
        return ModelOperations.upsert(cls, data, keys, columns)

    @classmethod
    def upsert_many(
        cls, data: Iterable[Any], keys: Sequence[str], columns: Sequence[str] = ()
    ) -> UpsertResult:
        return ModelOperations.upsert_many(cls, data, keys, columns)

    @classmethod
    def delete(cls, filter: Mapping[str, Any]) -> DeleteResult:
        return ModelOperations.delete(cls, filter)


__all__ = ["AbstractModel"]
