"""Execution results returned by :class:`~tablemodel.sql.connection.Connection`.

Insert and upsert results carry generated identifiers so the dispatcher can
write them back onto the model instances that produced the rows:

* ``inserted_id``: first generated id of the statement (or None)
* ``inserted_ids``: the per-row id list when the backend reported it, else
  None.  For upserts it lines up with ``inserts`` and may hold None
  entries.  When absent, ids are assumed to be contiguous from
  ``inserted_id`` in insertion order.

Tags:
    results, dataclass, tablemodel
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class SelectResult:
    """Rows returned by a SELECT, as dicts in result order."""

    rows: list[dict[str, Any]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self.rows)

    def to_list(self) -> list[dict[str, Any]]:
        return list(self.rows)

    def to_typed(self, cls: type) -> list[Any]:
        """Map every row onto ``cls``.

        Uses ``cls.from_row(row)`` when the class defines it, otherwise
        ``cls(**row)``.
        """
        from_row = getattr(cls, "from_row", None)
        if callable(from_row):
            return [from_row(row) for row in self.rows]
        return [cls(**row) for row in self.rows]


@dataclass
class InsertResult:
    num_rows: int = 0
    inserted_id: Any = None
    inserted_ids: list[Any] | None = None

    def get_inserted_id(self) -> Any:
        return self.inserted_id


@dataclass
class UpdateResult:
    num_rows: int = 0


@dataclass
class UpsertResult:
    """Outcome of an upsert.

    ``inserts`` and ``updates`` hold the data objects (not rows) in the order
    they were processed.
    """

    inserts: list[Any] = field(default_factory=list)
    updates: list[Any] = field(default_factory=list)
    inserted_id: Any = None
    inserted_ids: list[Any] | None = None

    @property
    def num_rows(self) -> int:
        return len(self.inserts) + len(self.updates)

    def get_inserted_id(self) -> Any:
        return self.inserted_id

    def get_inserts(self) -> list[Any]:
        return list(self.inserts)


@dataclass
class DeleteResult:
    num_rows: int = 0
    filter: Mapping[str, Any] = field(default_factory=dict)


__all__ = [
    "SelectResult",
    "InsertResult",
    "UpdateResult",
    "UpsertResult",
    "DeleteResult",
]
