"""
Structural protocols for tablemodel.

Manifesto:
    The dispatcher works with *any* class that can describe its table and
    shape a SELECT.  Models do not have to inherit from
    :class:`~tablemodel.framework.model.AbstractModel`; satisfying
    :class:`ModelProtocol` is enough.

Architecture:
    ::

        protocols.py
        ├── ModelProtocol       entity contract consumed by ModelOperations
        └── RowMappable         optional row conversion hooks

Tags:
    protocol, model, contract, tablemodel
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tablemodel.core.descriptor import ModelDescriptor
    from tablemodel.framework.params import ModelParams
    from tablemodel.sql.query import SelectQuery


@runtime_checkable
class ModelProtocol(Protocol):
    """
    Entity contract: table metadata plus per-entity SELECT shaping.

    Both members are classmethods.  ``build_select_query`` must consume
    every custom parameter it understands by checking it with ``in`` and
    reading it with ``[]``; anything left unread makes ``get_query`` raise
    :class:`~tablemodel.core.errors.UnusedParamsError`.

    Examples:
        >>> class User:
        ...     @classmethod
        ...     def get_model_descriptor(cls):
        ...         return ModelDescriptor("main", "users", "u")
        ...
        ...     @classmethod
        ...     def build_select_query(cls, query, params):
        ...         if "name" in params:
        ...             query.where(name=params["name"])
        ...         return query
    """

    @classmethod
    def get_model_descriptor(cls) -> ModelDescriptor:
        """Return the model's table metadata."""
        ...

    @classmethod
    def build_select_query(cls, query: SelectQuery, params: ModelParams) -> SelectQuery:
        """Apply entity-specific filters and joins to ``query``."""
        ...


@runtime_checkable
class RowMappable(Protocol):
    """Models that convert themselves to and from column mappings."""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Any:
        """Build an instance from a result row."""
        ...

    def to_row(self, columns: Iterable[str] | None = None) -> dict[str, Any]:
        """Return column values for INSERT/UPDATE."""
        ...


__all__ = [
    "ModelProtocol",
    "RowMappable",
]
