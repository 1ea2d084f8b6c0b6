"""Statement generation: query builder, dialects and pagination."""

from mastercrud.query.builder import QueryBuilder, Statement
from mastercrud.query.dialect import POSTGRESQL, SQLITE, Dialect
from mastercrud.query.pagination import Pagination, search_pattern, total_pages

__all__ = [
    "Dialect",
    "POSTGRESQL",
    "Pagination",
    "QueryBuilder",
    "SQLITE",
    "Statement",
    "search_pattern",
    "total_pages",
]
