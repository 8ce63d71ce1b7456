"""
Structured error types for tablemodel.

Every error raised by the model layer extends :class:`ModelError` so callers
can catch one base class, log a consistent payload via ``to_dict()`` and
route by :class:`ErrorCategory`.

Manifesto:
    - **Typed hierarchy:** Misuse of the parameter contract, caller input
      mistakes and type errors each get their own class
    - **Rich context:** Errors carry the model, table and operation involved
    - **Fail fast:** Nothing here is retryable; errors are never swallowed

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                        ModelError                            │
        │  (category, context, cause)                                  │
        ├─────────────────────────────────────────────────────────────┤
        │  ParamUncheckedError   UnusedParamsError   TypeMismatchError │
        │  (INTERNAL)            (VALIDATION)        (VALIDATION)      │
        │                                                              │
        │  ConfigError                                                 │
        │  (CONFIG)                                                    │
        │     │                                                        │
        │  DatabaseNotConfiguredError                                  │
        └─────────────────────────────────────────────────────────────┘

    Database execution errors are SQLAlchemy's own exceptions and pass
    through this layer unchanged.

Examples:
    >>> err = UnusedParamsError(["@order_by"])
    >>> str(err)
    'Unused params: @order_by'
    >>> err.category.value
    'VALIDATION'

Tags:
    error-handling, exception-hierarchy, error-context, tablemodel
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    VALIDATION = "VALIDATION"     # Caller passed data the layer cannot accept
    CONFIG = "CONFIG"             # Missing database alias, invalid settings
    DATABASE = "DATABASE"         # Reserved for execution-side failures
    INTERNAL = "INTERNAL"         # Bugs in model code
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to a :class:`ModelError`.

    Only fields that are set end up in ``to_dict()``, so the logged payload
    stays small.

    Attributes:
        model: Qualified name of the model class involved
        table: Table name from the model descriptor
        database: Database alias from the model descriptor
        operation: Dispatcher operation (``get_query``, ``insert``, ...)
        metadata: Additional key-value pairs
    """

    model: str | None = None
    table: str | None = None
    database: str | None = None
    operation: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["model", "table", "database", "operation"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ModelError(Exception):
    """
    Base exception for all tablemodel errors.

    Subclasses set ``default_category`` to classify themselves.

    Usage:
        raise ModelError("Something broke").with_context(
            model="app.models.User",
            operation="insert",
        )
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ModelError:
        """Add context to this error (fluent API)."""
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# PARAMETER CONTRACT ERRORS
# =============================================================================


class ParamUncheckedError(ModelError):
    """
    A parameter value was read without a prior existence check.

    Always a bug in a model's ``build_select_query``: the required pattern is
    ``if "key" in params: value = params["key"]``.
    """

    default_category = ErrorCategory.INTERNAL

    def __init__(self, param: Any, message: str | None = None, **kwargs: Any):
        if message is None:
            message = f"Retrieving `params[{param!r}]` without `{param!r} in params`."
        super().__init__(message, **kwargs)
        self.param = param

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["param"] = self.param
        return result


class UnusedParamsError(ModelError):
    """
    Caller passed parameters that no query-building logic consumed.

    ``params`` holds the sorted, de-duplicated offending keys.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(self, params: Iterable[Any], message: str | None = None, **kwargs: Any):
        unique = sorted(set(params), key=str)
        if message is None:
            message = "Unused params: " + ", ".join(str(p) for p in unique)
        super().__init__(message, **kwargs)
        self.params = unique

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["params"] = list(self.params)
        return result


# =============================================================================
# DATA ERRORS
# =============================================================================


class TypeMismatchError(ModelError, TypeError):
    """
    A data object is not an instance of the model class it was passed to.

    Batch operations set ``index`` to the position of the first offending
    element.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        expected: type,
        actual: Any,
        *,
        index: int | None = None,
        message: str | None = None,
        **kwargs: Any,
    ):
        if message is None:
            if index is None:
                message = f"Argument data must be of type {expected.__qualname__}."
            else:
                message = (
                    f"Invalid item type in data[{index}], "
                    f"must be of type {expected.__qualname__}."
                )
        super().__init__(message, **kwargs)
        self.expected = expected
        self.actual = type(actual)
        self.index = index

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["expected"] = self.expected.__qualname__
        result["actual"] = self.actual.__qualname__
        if self.index is not None:
            result["index"] = self.index
        return result


# =============================================================================
# CONFIG ERRORS
# =============================================================================


class ConfigError(ModelError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


class DatabaseNotConfiguredError(ConfigError):
    """A model refers to a database alias nobody registered."""

    def __init__(self, database: str, message: str | None = None, **kwargs: Any):
        if message is None:
            message = (
                f"Database {database!r} is not registered and is not a URL. "
                "Register it with DatabaseManager.register() or set "
                "TABLEMODEL_DATABASES."
            )
        super().__init__(message, **kwargs)
        self.database = database


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ModelError",
    "ParamUncheckedError",
    "UnusedParamsError",
    "TypeMismatchError",
    "ConfigError",
    "DatabaseNotConfiguredError",
]
