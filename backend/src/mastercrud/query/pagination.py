"""Pagination and search parameter normalisation for list requests."""

import math
from dataclasses import dataclass

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _to_int(raw: str | int | None) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(raw.strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class Pagination:
    """A normalised page window.

    Construct through :meth:`from_params`, which guarantees
    ``page >= 1`` and ``1 <= limit <= MAX_LIMIT``.
    """

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_params(
        cls,
        page: str | int | None = None,
        limit: str | int | None = None,
    ) -> "Pagination":
        """Build a Pagination from raw query parameters.

        Missing, non-numeric or non-positive values fall back to the
        defaults; a limit above ``MAX_LIMIT`` is clamped to it.
        """
        page_num = _to_int(page)
        if page_num is None or page_num < 1:
            page_num = DEFAULT_PAGE

        limit_num = _to_int(limit)
        if limit_num is None or limit_num < 1:
            limit_num = DEFAULT_LIMIT
        elif limit_num > MAX_LIMIT:
            limit_num = MAX_LIMIT

        return cls(page=page_num, limit=limit_num)


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed to show ``total`` rows, ``limit`` per page."""
    return math.ceil(total / limit)


def search_pattern(term: str | None) -> str | None:
    """Build a substring LIKE pattern for ``term``.

    LIKE wildcards in the term are escaped with backslash so they match
    literally. Returns None for an empty or blank term.
    """
    if term is None or not term.strip():
        return None
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
