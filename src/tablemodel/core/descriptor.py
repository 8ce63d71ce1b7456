"""Immutable table metadata for a model class.

A :class:`ModelDescriptor` tells the dispatcher *where* a model lives: which
database alias to connect to, which table to query, the alias to use for
that table in SELECTs, and which columns form the primary key.

Examples:
    >>> md = ModelDescriptor("db1", "users", "u").with_primary_key_names(["id"])
    >>> md.single_primary_key_name
    'id'

Tags:
    descriptor, metadata, value-object, tablemodel
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass, field


def _key_names(names: str | Iterable[str]) -> tuple[str, ...]:
    if isinstance(names, str):
        return (names,)
    return tuple(names)


@dataclass(frozen=True)
class ModelDescriptor:
    """Database, table and primary-key metadata for one model class.

    Attributes:
        database: Database alias (resolved by DatabaseManager) or a URL
        table_name: Table name used in every statement
        table_alias: Alias used in SELECT statements, or None
        primary_key_names: Primary key columns, in declaration order
    """

    database: str
    table_name: str
    table_alias: str | None = None
    primary_key_names: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        # A lone string is one key name.
        object.__setattr__(self, "primary_key_names", _key_names(self.primary_key_names))

    def with_primary_key_names(
        self, primary_key_names: str | Iterable[str]
    ) -> ModelDescriptor:
        """Return a copy with ``primary_key_names`` replaced (a string is one name)."""
        return dataclasses.replace(self, primary_key_names=_key_names(primary_key_names))

    @property
    def single_primary_key_name(self) -> str | None:
        """The primary key column when exactly one is declared, else None."""
        if len(self.primary_key_names) == 1:
            return self.primary_key_names[0]
        return None


__all__ = ["ModelDescriptor"]
