"""Entity service: executes the six generic operations against the store.

Every operation is one statement (list adds a companion count). Before-hooks
run ahead of create, update and soft-delete; blocking store calls run in the
thread pool so the event loop never waits on the database.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from starlette.concurrency import run_in_threadpool

from mastercrud.core.errors import BadRequest, CrudError, NoFieldsProvided, NotFound, StoreFailure
from mastercrud.core.types import Record, check_value
from mastercrud.hooks.service import HookService
from mastercrud.hooks.types import Operation
from mastercrud.metadata.loader import EntityDescriptor
from mastercrud.persistence.adapter import PersistenceAdapter
from mastercrud.query.builder import QueryBuilder, Statement
from mastercrud.query.pagination import Pagination, total_pages

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Page:
    """One page of a list result."""

    page: int
    limit: int
    total_data: int
    total_page: int
    data: list[Record] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total_data": self.total_data,
            "total_page": self.total_page,
            "data": self.data,
        }


def scan_record(desc: EntityDescriptor, row: dict[str, Any]) -> Record:
    """Turn a store row into a Record in descriptor field order."""
    record: Record = {}
    for f in desc.fields:
        value = row.get(f.name)
        if f.type == "boolean" and isinstance(value, int):
            value = bool(value)
        record[f.name] = value
    return record


def prepare_partial(
    desc: EntityDescriptor,
    body: dict[str, Any],
    operation: Operation,
) -> dict[str, Any]:
    """Reduce a request body to the entity's writable fields.

    Unknown keys and server-controlled fields are dropped silently.

    Raises:
        BadRequest: On a value of the wrong kind, or a missing/null required field
    """
    partial: dict[str, Any] = {}
    for f in desc.writable_fields:
        if f.name not in body:
            if operation is Operation.CREATE and f.required:
                raise BadRequest(f"{f.name} is required")
            continue

        value = body[f.name]
        if value is None and f.required:
            raise BadRequest(f"{f.name} is required")
        try:
            partial[f.name] = check_value(f.type, value)
        except ValueError as e:
            raise BadRequest(f"{f.name} {e}") from None
    return partial


class EntityService:
    """Runs entity operations: registry descriptor in, Record(s) out."""

    def __init__(
        self,
        adapter: PersistenceAdapter,
        hook_service: HookService,
        builder: QueryBuilder | None = None,
    ):
        self.adapter = adapter
        self.hook_service = hook_service
        self.builder = builder or QueryBuilder(adapter.dialect)

    async def _store(self, fn: Callable[[Statement], T], statement: Statement) -> T:
        """Run one adapter call off the event loop, translating failures."""
        try:
            return await run_in_threadpool(fn, statement)
        except CrudError:
            raise
        except Exception as e:
            logger.exception("Store failure executing: %s", statement.sql)
            raise StoreFailure() from e

    @staticmethod
    def _not_found(desc: EntityDescriptor) -> NotFound:
        return NotFound(f"{desc.display_name} not found")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_one(self, desc: EntityDescriptor, id: int) -> Record:
        row = await self._store(self.adapter.fetch_one, self.builder.build_get_one(desc, id))
        if row is None:
            raise self._not_found(desc)
        return scan_record(desc, row)

    async def get_list(
        self,
        desc: EntityDescriptor,
        pagination: Pagination,
        search: str | None = None,
    ) -> Page:
        """Return one page of active rows, optionally filtered by ``search``.

        The total comes from a separate count statement. It may be stale
        relative to the page, and a failing count degrades ``total_data``
        to 0 instead of failing the request.
        """
        rows = await self._store(
            self.adapter.fetch_all,
            self.builder.build_get_list(desc, pagination, search),
        )

        total = 0
        try:
            count_row = await run_in_threadpool(
                self.adapter.fetch_one, self.builder.build_count(desc, search)
            )
            if count_row:
                total = int(next(iter(count_row.values())))
        except Exception as e:
            logger.warning("Count query for '%s' failed, reporting 0: %s", desc.key, e)

        return Page(
            page=pagination.page,
            limit=pagination.limit,
            total_data=total,
            total_page=total_pages(total, pagination.limit),
            data=[scan_record(desc, row) for row in rows],
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create(self, desc: EntityDescriptor, body: dict[str, Any]) -> Record:
        partial = prepare_partial(desc, body, Operation.CREATE)
        await self.hook_service.run_before(Operation.CREATE, desc.key, partial)

        row = await self._store(self.adapter.fetch_one, self.builder.build_create(desc, partial))
        if row is None:
            raise StoreFailure()
        logger.debug("Created %s id=%s", desc.key, row.get("id"))
        return scan_record(desc, row)

    async def update(self, desc: EntityDescriptor, id: int, body: dict[str, Any]) -> Record:
        partial = prepare_partial(desc, body, Operation.UPDATE)
        if not partial:
            raise NoFieldsProvided(desc.key)
        await self.hook_service.run_before(Operation.UPDATE, desc.key, partial, id=id)

        statement = self.builder.build_update(desc, id, partial)

        row = await self._store(self.adapter.fetch_one, statement)
        if row is None:
            raise self._not_found(desc)
        return scan_record(desc, row)

    async def soft_delete(self, desc: EntityDescriptor, id: int) -> None:
        await self.hook_service.run_before(Operation.DELETE, desc.key, id=id)

        affected = await self._store(self.adapter.execute, self.builder.build_soft_delete(desc, id))
        if affected == 0:
            raise self._not_found(desc)
        logger.debug("Soft-deleted %s id=%s", desc.key, id)

    async def restore(self, desc: EntityDescriptor, id: int) -> Record:
        """Reactivate a row. Restoring an active row is a successful no-op."""
        row = await self._store(self.adapter.fetch_one, self.builder.build_restore(desc, id))
        if row is None:
            raise self._not_found(desc)
        logger.debug("Restored %s id=%s", desc.key, id)
        return scan_record(desc, row)
