"""Class-parameterized CRUD dispatcher.

Manifesto:
    Every model needs the same select/insert/update/upsert/delete plumbing;
    only the table metadata and the SELECT filters differ.  Models supply
    those two things (:class:`~tablemodel.core.protocols.ModelProtocol`) and
    :class:`ModelOperations` does the rest, including the parameter
    consumption check that turns a misspelled filter into an error.

Architecture::

    get_query(cls, params)
      1. ModelParams(params)
      2. Query.select_from(table, alias)
      3. cls.build_select_query(query, params)      ← model logic
      4. @orderBy                 → order_by()
      5. @limit (+ @offset = 0)   → limit()
      6. @page (+ @pageSize = 500) → paginate()
      7. params.check_used()                        ← UnusedParamsError
      8. return query

    get_rows / get_first / get_last  → DatabaseManager.connect(db).execute_select
    insert / insert_many             → execute_insert  + id back-fill
    update                           → execute_update
    upsert / upsert_many             → execute_upsert  + id back-fill
    delete                           → execute_delete

Well-known keys are checked by the dispatcher itself, after model logic
runs, so models never declare them.  ``@offset`` is only looked at when
``@limit`` is present and ``@pageSize`` only when ``@page`` is, so either one
alone is reported as unused.

Generated id back-fill:
    Only for models with exactly one primary key column.  Explicit per-row
    ids from the result are used when available (a None entry leaves that
    object alone); otherwise ids are assigned sequentially from the first
    generated id, which assumes the database allocated them contiguously in
    insertion order.

Tags:
    dispatcher, crud, model, query-building, tablemodel
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, TypeVar

from tablemodel.core.descriptor import ModelDescriptor
from tablemodel.core.errors import TypeMismatchError, UnusedParamsError
from tablemodel.core.logging import get_logger
from tablemodel.core.protocols import ModelProtocol
from tablemodel.framework.params import ModelParams
from tablemodel.sql.connection import DatabaseManager
from tablemodel.sql.query import Query, SelectQuery, TableRef
from tablemodel.sql.results import DeleteResult, InsertResult, UpdateResult, UpsertResult

logger = get_logger(__name__)

T = TypeVar("T")

ORDER_BY = "@orderBy"
LIMIT = "@limit"
OFFSET = "@offset"
PAGE = "@page"
PAGE_SIZE = "@pageSize"

DEFAULT_OFFSET = 0
DEFAULT_PAGE_SIZE = 500


def _take(params: ModelParams, key: str, default: Any = None) -> Any:
    """Check and read ``key``; a missing key or a None value yields ``default``."""
    if key in params:
        value = params[key]
        if value is not None:
            return value
    return default


def _model_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


class ModelOperations:
    """CRUD entry points taking the model class as first argument."""

    _descriptors: dict[type, ModelDescriptor] = {}
    _lock = threading.Lock()

    # -- Model metadata ----------------------------------------------------

    @staticmethod
    def check_model(cls: type) -> None:
        """Raise TypeMismatchError unless ``cls`` satisfies ModelProtocol."""
        if not isinstance(cls, type) or not isinstance(cls, ModelProtocol):
            raise TypeMismatchError(
                ModelProtocol,
                cls,
                message=f"The class {cls!r} must implement ModelProtocol "
                "(get_model_descriptor and build_select_query).",
            )

    @classmethod
    def get_descriptor(cls, model: type) -> ModelDescriptor:
        """Return the model's descriptor, built once per class."""
        descriptor = cls._descriptors.get(model)
        if descriptor is not None:
            return descriptor
        with cls._lock:
            descriptor = cls._descriptors.get(model)
            if descriptor is None:
                descriptor = model.get_model_descriptor()
                cls._descriptors[model] = descriptor
        return descriptor

    @classmethod
    def clear_descriptor_cache(cls) -> None:
        """Forget cached descriptors (for testing)."""
        with cls._lock:
            cls._descriptors.clear()

    @classmethod
    def get_single_primary_key_name(cls, model: type) -> str | None:
        cls.check_model(model)
        return cls.get_descriptor(model).single_primary_key_name

    # -- SELECT ------------------------------------------------------------

    @classmethod
    def get_query(cls, model: type, params: Mapping[str, Any] | None = None) -> SelectQuery:
        """Build the SELECT for ``model`` from ``params``.

        Recognized keys besides the model's own:
          - ``@orderBy``: ordering spec passed to ``SelectQuery.order_by``
          - ``@limit``: maximum number of rows
          - ``@offset``: rows to skip, only together with ``@limit`` (default 0)
          - ``@page``: 1-based page number
          - ``@pageSize``: rows per page, only together with ``@page`` (default 500)

        Raises:
            UnusedParamsError: if any parameter was not consumed.
        """
        cls.check_model(model)
        model_params = ModelParams(params)
        descriptor = cls.get_descriptor(model)

        query = Query.select_from(TableRef(descriptor.table_name, descriptor.table_alias))
        query = model.build_select_query(query, model_params)

        order = _take(model_params, ORDER_BY)
        if order is not None:
            query.order_by(order)

        limit = _take(model_params, LIMIT)
        if limit is not None:
            query.limit(limit, _take(model_params, OFFSET, DEFAULT_OFFSET))

        page = _take(model_params, PAGE)
        if page is not None:
            query.paginate(page, _take(model_params, PAGE_SIZE, DEFAULT_PAGE_SIZE))

        try:
            model_params.check_used()
        except UnusedParamsError as e:
            e.with_context(
                model=_model_name(model),
                table=descriptor.table_name,
                database=descriptor.database,
                operation="get_query",
            )
            logger.warning("unused_params", model=_model_name(model), params=e.params)
            raise

        logger.debug(
            "select_query_built",
            model=_model_name(model),
            table=descriptor.table_name,
            params=sorted(model_params.keys(), key=str),
        )
        return query

    @classmethod
    def get_rows(cls, model: type[T], params: Mapping[str, Any] | None = None) -> list[T]:
        """Execute ``get_query`` and map every row onto ``model``."""
        query = cls.get_query(model, params)
        descriptor = cls.get_descriptor(model)
        db = DatabaseManager.connect(descriptor.database)
        return db.execute_select(query).to_typed(model)

    @classmethod
    def get_first(cls, model: type[T], params: Mapping[str, Any] | None = None) -> T | None:
        rows = cls.get_rows(model, params)
        return rows[0] if rows else None

    @classmethod
    def get_last(cls, model: type[T], params: Mapping[str, Any] | None = None) -> T | None:
        rows = cls.get_rows(model, params)
        return rows[-1] if rows else None

    # -- Type checks -------------------------------------------------------

    @classmethod
    def _check_instance(cls, model: type, data: Any, operation: str) -> None:
        cls.check_model(model)
        if not isinstance(data, model):
            raise TypeMismatchError(model, data).with_context(
                model=_model_name(model), operation=operation
            )

    @classmethod
    def _check_instances(cls, model: type, data: Iterable[Any], operation: str) -> list[Any]:
        cls.check_model(model)
        items = list(data)
        for index, item in enumerate(items):
            if not isinstance(item, model):
                raise TypeMismatchError(model, item, index=index).with_context(
                    model=_model_name(model), operation=operation
                )
        return items

    # -- Id back-fill ------------------------------------------------------

    @staticmethod
    def _backfill_ids(
        objects: Sequence[Any],
        pk: str,
        first_id: Any,
        explicit_ids: Sequence[Any] | None,
    ) -> None:
        if explicit_ids is not None and len(explicit_ids) == len(objects):
            ids: Iterable[Any] = explicit_ids
        else:
            ids = range(first_id, first_id + len(objects))
        for obj, generated in zip(objects, ids):
            if generated is not None:
                setattr(obj, pk, generated)
        logger.debug("ids_backfilled", pk=pk, count=len(objects), first_id=first_id)

    # -- INSERT ------------------------------------------------------------

    @classmethod
    def insert(cls, model: type, data: Any, columns: Sequence[str]) -> InsertResult:
        """Insert ``data`` (a ``model`` instance) restricted to ``columns``.

        The generated id is written to ``data`` when the model has a single
        primary key.
        """
        cls._check_instance(model, data, "insert")
        descriptor = cls.get_descriptor(model)
        pk = descriptor.single_primary_key_name

        db = DatabaseManager.connect(descriptor.database)
        query = Query.insert_into(descriptor.table_name, data, columns, generated_key=pk)
        result = db.execute_insert(query)

        if pk and result.inserted_id:
            setattr(data, pk, result.inserted_id)
        return result

    @classmethod
    def insert_many(cls, model: type, data: Iterable[Any], columns: Sequence[str]) -> InsertResult:
        """Insert every instance in ``data`` with one multi-row statement."""
        items = cls._check_instances(model, data, "insert_many")
        descriptor = cls.get_descriptor(model)
        pk = descriptor.single_primary_key_name

        db = DatabaseManager.connect(descriptor.database)
        query = Query.insert_into(descriptor.table_name, items, columns, generated_key=pk)
        result = db.execute_insert(query)

        if pk and result.inserted_id:
            cls._backfill_ids(items, pk, result.inserted_id, result.inserted_ids)
        return result

    # -- UPDATE ------------------------------------------------------------

    @classmethod
    def update(
        cls,
        model: type,
        data: Any,
        keys: Sequence[str],
        columns: Sequence[str],
    ) -> UpdateResult:
        """Set ``columns`` on the rows whose ``keys`` match ``data``."""
        cls._check_instance(model, data, "update")
        descriptor = cls.get_descriptor(model)
        db = DatabaseManager.connect(descriptor.database)
        query = Query.update(descriptor.table_name, data, keys, columns)
        return db.execute_update(query)

    # -- UPSERT ------------------------------------------------------------

    @classmethod
    def _execute_upsert(
        cls,
        model: type,
        items: Sequence[Any],
        keys: Sequence[str],
        columns: Sequence[str],
    ) -> UpsertResult:
        descriptor = cls.get_descriptor(model)
        pk = descriptor.single_primary_key_name

        db = DatabaseManager.connect(descriptor.database)
        query = Query.upsert(descriptor.table_name, items, keys, columns, generated_key=pk)
        result = db.execute_upsert(query)

        if pk and result.inserted_id:
            cls._backfill_ids(result.inserts, pk, result.inserted_id, result.inserted_ids)
        return result

    @classmethod
    def upsert(
        cls,
        model: type,
        data: Any,
        keys: Sequence[str],
        columns: Sequence[str] = (),
    ) -> UpsertResult:
        """Update the row matching ``keys`` or insert ``data``.

        With empty ``columns`` the operation is insert-only: an existing
        matching row is left untouched.
        """
        cls._check_instance(model, data, "upsert")
        return cls._execute_upsert(model, [data], keys, columns)

    @classmethod
    def upsert_many(
        cls,
        model: type,
        data: Iterable[Any],
        keys: Sequence[str],
        columns: Sequence[str] = (),
    ) -> UpsertResult:
        items = cls._check_instances(model, data, "upsert_many")
        return cls._execute_upsert(model, items, keys, columns)

    # -- DELETE ------------------------------------------------------------

    @classmethod
    def delete(cls, model: type, filter: Mapping[str, Any]) -> DeleteResult:
        """Delete the rows matching ``filter``."""
        cls.check_model(model)
        descriptor = cls.get_descriptor(model)
        db = DatabaseManager.connect(descriptor.database)
        return db.execute_delete(Query.delete_from(descriptor.table_name, filter))


__all__ = [
    "ModelOperations",
    "DEFAULT_PAGE_SIZE",
]
