"""Field type registry with storage defaults and value checks."""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Union

# A single value of a Record. Rows scanned from the store and partial
# records received from clients hold only these kinds.
Scalar = Union[str, int, float, bool, Decimal, date, datetime, None]
Record = dict[str, Scalar]

# Calendar dates are accepted only in extended YYYY-MM-DD form.
DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


@dataclass(frozen=True)
class FieldType:
    name: str
    sqlite_type: str
    postgres_type: str
    searchable: bool = False


FIELD_TYPES: dict[str, FieldType] = {
    "id": FieldType(
        name="id",
        sqlite_type="INTEGER PRIMARY KEY AUTOINCREMENT",
        postgres_type="BIGSERIAL PRIMARY KEY",
    ),
    "string": FieldType(
        name="string",
        sqlite_type="TEXT",
        postgres_type="VARCHAR(255)",
        searchable=True,
    ),
    "text": FieldType(
        name="text",
        sqlite_type="TEXT",
        postgres_type="TEXT",
        searchable=True,
    ),
    "email": FieldType(
        name="email",
        sqlite_type="TEXT",
        postgres_type="VARCHAR(255)",
        searchable=True,
    ),
    "integer": FieldType(
        name="integer",
        sqlite_type="INTEGER",
        postgres_type="INTEGER",
    ),
    "decimal": FieldType(
        name="decimal",
        sqlite_type="REAL",
        postgres_type="NUMERIC(18, 2)",
    ),
    "boolean": FieldType(
        name="boolean",
        sqlite_type="INTEGER",  # 0/1
        postgres_type="BOOLEAN",
    ),
    "date": FieldType(
        name="date",
        sqlite_type="TEXT",  # ISO format
        postgres_type="DATE",
    ),
    "timestamp": FieldType(
        name="timestamp",
        sqlite_type="TEXT",  # ISO format
        postgres_type="TIMESTAMPTZ",
    ),
}


def get_field_type(type_name: str) -> FieldType:
    """Get field type definition.

    Raises:
        ValueError: If the type is not registered
    """
    if type_name not in FIELD_TYPES:
        raise ValueError(
            f"Unknown field type '{type_name}'. "
            f"Allowed: {', '.join(sorted(FIELD_TYPES))}"
        )
    return FIELD_TYPES[type_name]


def check_value(type_name: str, value: Any) -> Scalar:
    """Check a client-supplied value against a field type.

    Values are returned unchanged; the store driver performs the final
    conversion. Nested structures are never accepted.

    Raises:
        ValueError: If the value is not acceptable for the type
    """
    if value is None:
        return None

    if isinstance(value, (dict, list)):
        raise ValueError("must be a scalar value")

    if type_name in ("string", "text", "email"):
        if not isinstance(value, str):
            raise ValueError("must be a string")
    elif type_name == "integer":
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("must be an integer")
    elif type_name == "decimal":
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise ValueError("must be a number")
        if not math.isfinite(value):
            raise ValueError("must be a finite number")
    elif type_name == "boolean":
        if not isinstance(value, bool):
            raise ValueError("must be a boolean")
    elif type_name == "date":
        if not isinstance(value, str) or not is_iso_date(value):
            raise ValueError("must be a date string (YYYY-MM-DD)")
    elif type_name == "timestamp":
        if not isinstance(value, str):
            raise ValueError("must be an ISO-8601 timestamp string")
        try:
            datetime.fromisoformat(value)
        except ValueError:
            raise ValueError("must be an ISO-8601 timestamp string") from None

    return value


def is_iso_date(value: str) -> bool:
    """True for a real calendar date written as YYYY-MM-DD."""
    if not DATE_RE.fullmatch(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True
