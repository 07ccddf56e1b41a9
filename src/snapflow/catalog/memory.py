"""In-memory schema catalog for testing and development.

Entity types are registered up front as name -> field list. Useful for
exercising the engine and the validators without a database.
"""

from typing import Dict, Iterable, Optional

from snapflow.catalog.records import EntityType


class InMemorySchemaCatalog:
    """Schema catalog backed by a dictionary of entity definitions.

    Attributes:
        entities: Registered entity types by name
    """

    def __init__(self, entities: Optional[Dict[str, Iterable[str]]] = None):
        """Initialize the catalog.

        Args:
            entities: Mapping of entity name -> field names
        """
        self.entities: Dict[str, EntityType] = {}
        for name, fields in (entities or {}).items():
            self.register(name, fields)

    def register(self, name: str, fields: Iterable[str], key_fields: Iterable[str] = ()) -> EntityType:
        """Add or replace an entity type.

        This is useful for tests that need a specific schema.
        """
        entity_type = EntityType(name, fields, key_fields=key_fields)
        self.entities[name] = entity_type
        return entity_type

    def unregister(self, name: str) -> None:
        self.entities.pop(name, None)

    def resolve_entity_type(self, name: str) -> Optional[EntityType]:
        return self.entities.get(name)
