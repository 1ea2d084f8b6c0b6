"""Entity metadata: YAML loading, schema validation and the entity registry."""

from mastercrud.metadata.loader import (
    EntityDescriptor,
    EntityRegistry,
    FieldDefinition,
    MetadataLoader,
)

__all__ = ["EntityDescriptor", "EntityRegistry", "FieldDefinition", "MetadataLoader"]
