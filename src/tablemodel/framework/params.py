"""Tracked-access parameter map for select query building.

Manifesto:
    A typo in a filter name (``@order_by`` instead of ``@orderBy``) should
    fail loudly instead of silently returning unfiltered rows.
    :class:`ModelParams` wraps the caller's parameters and records which
    keys were existence-checked and which were read, so the dispatcher can
    verify afterwards that every parameter was consumed.

State machine (per key)::

    Unknown ──(key in params)──▶ Checked ──(params[key])──▶ Read
                                    ▲                          │
                                    └──────────────────────────┘
                                        reading again is a no-op

    params[key] while Unknown  ──▶ ParamUncheckedError

Examples:
    >>> params = ModelParams({"alpha": 1, "bravo": 2})
    >>> "alpha" in params
    True
    >>> params["alpha"]
    1
    >>> params.check_used()
    Traceback (most recent call last):
    ...
    UnusedParamsError: Unused params: bravo

Tags:
    params, validation, query-building, tablemodel
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from tablemodel.core.errors import ParamUncheckedError, UnusedParamsError


class ModelParams:
    """Caller parameters with existence-check and read tracking.

    Iteration (``iter``, ``keys``, ``items``) walks the values in insertion
    order and never counts as a check or a read.
    """

    def __init__(self, params: Mapping[Any, Any] | None = None):
        self._params: dict[Any, Any] = dict(params or {})
        self._checked: set[Any] = set()
        self._read: set[Any] = set()

    def __repr__(self) -> str:
        return f"ModelParams({self._params!r})"

    # -- Tracked access ----------------------------------------------------

    def __contains__(self, key: Any) -> bool:
        self._checked.add(key)
        return key in self._params

    def exists(self, key: Any) -> bool:
        """Same as ``key in params``."""
        return key in self

    def __getitem__(self, key: Any) -> Any:
        if key not in self._checked:
            raise ParamUncheckedError(key)
        self._read.add(key)
        return self._params.get(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self._params[key] = value

    def subparams(self, key: Any) -> Any:
        """Read ``key`` like ``params[key]`` but only return collection values.

        Mappings and non-string sequences are returned as they are; anything
        else (scalars, strings, None) yields an empty dict.
        """
        value = self[key]
        if isinstance(value, Mapping):
            return value
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            return value
        return {}

    # -- Untracked traversal -----------------------------------------------

    def __len__(self) -> int:
        return len(self._params)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._params)

    def keys(self):
        return self._params.keys()

    def items(self):
        return self._params.items()

    # -- Consistency -------------------------------------------------------

    @property
    def checked(self) -> frozenset[Any]:
        """Keys that had an existence check."""
        return frozenset(self._checked)

    @property
    def read(self) -> frozenset[Any]:
        """Keys whose value was read."""
        return frozenset(self._read)

    def unused(self) -> list[Any]:
        """Keys that were supplied but never read, sorted."""
        return sorted((k for k in self._params if k not in self._read), key=str)

    def check_used(self) -> bool:
        """Verify every supplied parameter was read.

        Returns:
            True when all parameters were used.

        Raises:
            UnusedParamsError: listing the unread keys.
        """
        unused = self.unused()
        if not unused:
            return True
        raise UnusedParamsError(unused)


__all__ = ["ModelParams"]
