"""Parameterized SQL generation from entity descriptors.

Identifier quoting strategy
----------------------------
Table and column names come only from an :class:`EntityDescriptor`, whose
identifiers were checked against ``IDENTIFIER_RE`` at load time. They are
double-quoted so that names such as ``user`` or ``order`` never collide with
reserved words. Every value, including LIMIT/OFFSET and search patterns, is
a bound parameter.

Helper functions:
  ``_col(name)``          → ``"name"``
  ``_select_cols(desc)``  → ``"id", "kode", ..., "deleted_at"``
"""

from dataclasses import dataclass
from typing import Any

from mastercrud.core.errors import NoFieldsProvided
from mastercrud.core.types import get_field_type
from mastercrud.metadata.loader import (
    CREATED_AT,
    DELETED_AT,
    PRIMARY_KEY,
    UPDATED_AT,
    EntityDescriptor,
)
from mastercrud.query.dialect import Dialect
from mastercrud.query.pagination import Pagination, search_pattern


@dataclass(frozen=True)
class Statement:
    """SQL text with positional placeholders plus its bound arguments."""

    sql: str
    params: tuple[Any, ...] = ()


def _col(name: str) -> str:
    return f'"{name}"'


def _select_cols(desc: EntityDescriptor) -> str:
    return ", ".join(_col(name) for name in desc.field_names)


class QueryBuilder:
    """Builds one statement per entity operation for a given dialect."""

    def __init__(self, dialect: Dialect):
        self.dialect = dialect

    @property
    def _ph(self) -> str:
        return self.dialect.placeholder

    def _active_filter(self) -> str:
        return f"{_col(DELETED_AT)} IS NULL"

    def _search_filter(
        self, desc: EntityDescriptor, search_term: str | None
    ) -> tuple[str, list[Any]]:
        """OR-ed case-insensitive substring match over the searchable fields."""
        pattern = search_pattern(search_term)
        if pattern is None or not desc.search_fields:
            return "", []

        op = self.dialect.like
        parts = [
            f"{_col(name)} {op} {self._ph} ESCAPE '\\'" for name in desc.search_fields
        ]
        return f" AND ({' OR '.join(parts)})", [pattern] * len(parts)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def build_get_one(self, desc: EntityDescriptor, id: int) -> Statement:
        sql = (
            f"SELECT {_select_cols(desc)} FROM {_col(desc.table_name)}"
            f" WHERE {_col(PRIMARY_KEY)} = {self._ph} AND {self._active_filter()}"
        )
        return Statement(sql, (id,))

    def build_get_list(
        self,
        desc: EntityDescriptor,
        pagination: Pagination,
        search_term: str | None = None,
    ) -> Statement:
        search_sql, search_params = self._search_filter(desc, search_term)
        sql = (
            f"SELECT {_select_cols(desc)} FROM {_col(desc.table_name)}"
            f" WHERE {self._active_filter()}{search_sql}"
            f" ORDER BY {_col(PRIMARY_KEY)}"
            f" LIMIT {self._ph} OFFSET {self._ph}"
        )
        return Statement(sql, (*search_params, pagination.limit, pagination.offset))

    def build_count(self, desc: EntityDescriptor, search_term: str | None = None) -> Statement:
        """Companion to :meth:`build_get_list` with the identical filter."""
        search_sql, search_params = self._search_filter(desc, search_term)
        sql = (
            f"SELECT COUNT(*) AS total FROM {_col(desc.table_name)}"
            f" WHERE {self._active_filter()}{search_sql}"
        )
        return Statement(sql, tuple(search_params))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _writable_values(
        self, desc: EntityDescriptor, partial: dict[str, Any]
    ) -> list[tuple[str, Any]]:
        """Supplied writable fields in descriptor order; everything else is dropped."""
        return [(f.name, partial[f.name]) for f in desc.writable_fields if f.name in partial]

    def build_create(self, desc: EntityDescriptor, partial: dict[str, Any]) -> Statement:
        """INSERT the supplied fields; omitted fields take column defaults.

        ``created_at`` and ``updated_at`` are always set by the store clock.
        """
        values = self._writable_values(desc, partial)
        columns = [_col(name) for name, _ in values] + [_col(CREATED_AT), _col(UPDATED_AT)]
        placeholders = [self._ph for _ in values] + [self.dialect.now, self.dialect.now]

        sql = (
            f"INSERT INTO {_col(desc.table_name)} ({', '.join(columns)})"
            f" VALUES ({', '.join(placeholders)})"
            f" RETURNING {_select_cols(desc)}"
        )
        return Statement(sql, tuple(v for _, v in values))

    def build_update(self, desc: EntityDescriptor, id: int, partial: dict[str, Any]) -> Statement:
        """UPDATE only the supplied fields of an active row.

        Raises:
            NoFieldsProvided: If ``partial`` holds no writable field
        """
        values = self._writable_values(desc, partial)
        if not values:
            raise NoFieldsProvided(desc.key)

        assignments = [f"{_col(name)} = {self._ph}" for name, _ in values]
        assignments.append(f"{_col(UPDATED_AT)} = {self.dialect.now}")

        sql = (
            f"UPDATE {_col(desc.table_name)} SET {', '.join(assignments)}"
            f" WHERE {_col(PRIMARY_KEY)} = {self._ph} AND {self._active_filter()}"
            f" RETURNING {_select_cols(desc)}"
        )
        return Statement(sql, (*(v for _, v in values), id))

    def build_soft_delete(self, desc: EntityDescriptor, id: int) -> Statement:
        sql = (
            f"UPDATE {_col(desc.table_name)} SET {_col(DELETED_AT)} = {self.dialect.now}"
            f" WHERE {_col(PRIMARY_KEY)} = {self._ph} AND {self._active_filter()}"
        )
        return Statement(sql, (id,))

    def build_restore(self, desc: EntityDescriptor, id: int) -> Statement:
        """Clear ``deleted_at``; an already active row is left as is."""
        sql = (
            f"UPDATE {_col(desc.table_name)} SET {_col(DELETED_AT)} = NULL"
            f" WHERE {_col(PRIMARY_KEY)} = {self._ph}"
            f" RETURNING {_select_cols(desc)}"
        )
        return Statement(sql, (id,))

    # ------------------------------------------------------------------
    # DDL
    # ------------------------------------------------------------------

    def build_create_table(self, desc: EntityDescriptor) -> Statement:
        """CREATE TABLE IF NOT EXISTS for an empty store. Never alters."""
        columns = []
        for f in desc.fields:
            col_def = f"{_col(f.name)} {self.dialect.column_type(get_field_type(f.type))}"
            if f.name in (CREATED_AT, UPDATED_AT):
                col_def += f" NOT NULL DEFAULT ({self.dialect.now})"
            elif f.required:
                col_def += " NOT NULL"
            columns.append(col_def)

        sql = f"CREATE TABLE IF NOT EXISTS {_col(desc.table_name)} ({', '.join(columns)})"
        return Statement(sql)
