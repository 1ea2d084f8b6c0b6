"""SQL dialect differences the query builder needs to know about."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Dialect:
    """Per-store SQL spelling.

    Attributes:
        name: "postgresql" or "sqlite"
        placeholder: Positional parameter marker
        now: Expression producing the current timestamp
        like: Case-insensitive pattern operator
    """

    name: str
    placeholder: str
    now: str
    like: str

    def column_type(self, field_type) -> str:
        """DDL type for a :class:`~mastercrud.core.types.FieldType`."""
        if self.name == "postgresql":
            return field_type.postgres_type
        return field_type.sqlite_type


POSTGRESQL = Dialect(name="postgresql", placeholder="%s", now="NOW()", like="ILIKE")

# SQLite has no ILIKE; its LIKE is case-insensitive for ASCII text.
SQLITE = Dialect(
    name="sqlite",
    placeholder="?",
    now="strftime('%Y-%m-%dT%H:%M:%fZ', 'now')",
    like="LIKE",
)
