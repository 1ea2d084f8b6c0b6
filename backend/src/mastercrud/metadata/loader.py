"""Load entity descriptors from YAML files and serve them from a registry."""

import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from mastercrud.core.errors import NotFound
from mastercrud.core.types import get_field_type

# Table and column names are interpolated into SQL text, so every identifier
# must come from metadata and match this pattern.
IDENTIFIER_RE = re.compile(r"^[a-z_][a-z0-9_]*$")

PRIMARY_KEY = "id"
CREATED_AT = "created_at"
UPDATED_AT = "updated_at"
DELETED_AT = "deleted_at"
SYSTEM_FIELDS = (PRIMARY_KEY, CREATED_AT, UPDATED_AT, DELETED_AT)

HOOK_POINTS = ("beforeCreate", "beforeUpdate", "beforeDelete")


@dataclass(frozen=True)
class FieldDefinition:
    name: str
    type: str
    display_name: str
    required: bool = False

    @property
    def is_system(self) -> bool:
        return self.name in SYSTEM_FIELDS


@dataclass(frozen=True)
class EntityDescriptor:
    """A registered master table.

    Attributes:
        key: URL path segment that addresses the entity (e.g. "customer")
        table_name: Backing table
        fields: Ordered field list; ``id`` first, system timestamps last
        search_fields: Text fields matched by the list ``q`` filter
        display_name: Human-readable name used in messages
        hooks: Hook names per hook point, resolved at start-up
    """

    key: str
    table_name: str
    fields: tuple[FieldDefinition, ...]
    search_fields: tuple[str, ...] = ()
    display_name: str = ""
    hooks: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def writable_fields(self) -> tuple[FieldDefinition, ...]:
        """Fields a client may supply on create or update."""
        return tuple(f for f in self.fields if not f.is_system)


class EntityRegistry:
    """Immutable lookup from entity key to descriptor."""

    def __init__(self, entities: dict[str, EntityDescriptor]):
        self._entities = dict(entities)

    def resolve(self, key: str) -> EntityDescriptor:
        """Return the descriptor for ``key``.

        Raises:
            NotFound: If no entity is registered under ``key``
        """
        try:
            return self._entities[key]
        except KeyError:
            raise NotFound(f"Entity '{key}' not found") from None

    def list_keys(self) -> list[str]:
        return sorted(self._entities)

    def __iter__(self):
        return iter(self._entities[k] for k in self.list_keys())

    def __len__(self) -> int:
        return len(self._entities)


class MetadataLoader:
    """Loads entity definitions from ``<metadata_path>/entities/*.yaml``."""

    def __init__(self, metadata_path: Path):
        self.metadata_path = metadata_path
        self.entities: dict[str, EntityDescriptor] = {}

    def load_all(self) -> EntityRegistry:
        """Load every entity file and return a registry over them."""
        entities_path = self.metadata_path / "entities"
        if not entities_path.exists():
            return EntityRegistry({})

        tables: dict[str, str] = {}
        for yaml_file in sorted(entities_path.glob("*.yaml")):
            with open(yaml_file) as f:
                data = yaml.safe_load(f)
            if not data or "entity" not in data:
                continue

            entity = self._resolve_entity(data)
            if entity.key in self.entities:
                raise ValueError(f"Duplicate entity key '{entity.key}' in {yaml_file.name}")
            if entity.table_name in tables:
                raise ValueError(
                    f"Table '{entity.table_name}' used by both "
                    f"'{tables[entity.table_name]}' and '{entity.key}'"
                )
            tables[entity.table_name] = entity.key
            self.entities[entity.key] = entity

        return EntityRegistry(self.entities)

    def _resolve_entity(self, data: dict) -> EntityDescriptor:
        """Resolve an entity definition, adding the system fields."""
        key = data["entity"]
        _check_identifier(key, "entity key")

        table_name = data.get("table", key)
        _check_identifier(table_name, f"table name of '{key}'")

        declared = [self._resolve_field(key, f) for f in data.get("fields", [])]
        seen: set[str] = set()
        for f in declared:
            if f.is_system:
                raise ValueError(
                    f"Entity '{key}' declares reserved field '{f.name}'; "
                    f"{', '.join(SYSTEM_FIELDS)} are added automatically"
                )
            if f.name in seen:
                raise ValueError(f"Entity '{key}' declares field '{f.name}' twice")
            seen.add(f.name)

        fields = (
            FieldDefinition(name=PRIMARY_KEY, type="id", display_name="ID"),
            *declared,
            FieldDefinition(name=CREATED_AT, type="timestamp", display_name="Created At"),
            FieldDefinition(name=UPDATED_AT, type="timestamp", display_name="Updated At"),
            FieldDefinition(name=DELETED_AT, type="timestamp", display_name="Deleted At"),
        )

        by_name = {f.name: f for f in declared}
        search_fields = tuple(data.get("search", []))
        for name in search_fields:
            if name not in by_name:
                raise ValueError(f"Entity '{key}' search field '{name}' is not declared")
            if not get_field_type(by_name[name].type).searchable:
                raise ValueError(
                    f"Entity '{key}' search field '{name}' has type "
                    f"'{by_name[name].type}', only text fields are searchable"
                )

        return EntityDescriptor(
            key=key,
            table_name=table_name,
            fields=fields,
            search_fields=search_fields,
            display_name=data.get("displayName", key.replace("_", " ").title()),
            hooks=self._resolve_hooks(key, data.get("hooks") or {}),
        )

    def _resolve_field(self, entity_key: str, data: dict) -> FieldDefinition:
        """Convert field dict to FieldDefinition."""
        name = data["name"]
        _check_identifier(name, f"field name in '{entity_key}'")

        field_type = data.get("type", "string")
        if field_type == "id":
            raise ValueError(f"Field '{entity_key}.{name}' cannot use the 'id' type")
        get_field_type(field_type)

        return FieldDefinition(
            name=name,
            type=field_type,
            display_name=data.get("displayName", name.replace("_", " ").title()),
            required=data.get("required", False),
        )

    def _resolve_hooks(self, entity_key: str, data: dict) -> dict[str, tuple[str, ...]]:
        hooks: dict[str, tuple[str, ...]] = {}
        for point, names in data.items():
            if point not in HOOK_POINTS:
                raise ValueError(
                    f"Entity '{entity_key}' has unknown hook point '{point}'. "
                    f"Allowed: {', '.join(HOOK_POINTS)}"
                )
            if isinstance(names, str):
                names = [names]
            hooks[point] = tuple(names or ())
        return hooks


def _check_identifier(value: str, what: str) -> None:
    if not isinstance(value, str) or not IDENTIFIER_RE.match(value):
        raise ValueError(f"Invalid {what}: {value!r} (must match {IDENTIFIER_RE.pattern})")
