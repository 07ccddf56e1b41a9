"""Schema catalog protocol definitions.

Entity types and field names are discovered at run time. These protocols
describe the capability the engine needs from whatever system knows the
schema: resolve an entity type by name, ask whether it has a field,
allocate an empty record and read/write fields by name.
"""

from typing import Any, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class Record(Protocol):
    """A dynamically typed record of some entity type."""

    @property
    def entity_name(self) -> str:
        """Name of the entity type the record belongs to."""
        ...

    def get(self, field_name: str) -> Any:
        """Return the value of ``field_name``.

        Raises:
            SchemaResolutionError: If the record carries no such field
        """
        ...

    def set(self, field_name: str, value: Any) -> None:
        """Assign ``value`` to ``field_name`` without type coercion.

        Raises:
            SchemaResolutionError: If the entity type declares no such field
        """
        ...


@runtime_checkable
class EntityTypeHandle(Protocol):
    """Resolved entity type."""

    @property
    def name(self) -> str:
        ...

    @property
    def key_fields(self) -> List[str]:
        """Fields identifying a record; empty when no key is declared."""
        ...

    def new_record(self) -> Record:
        """Allocate an empty record of this entity type."""
        ...

    def has_field(self, field_name: str) -> bool:
        """Return True when the entity type declares ``field_name``."""
        ...


@runtime_checkable
class SchemaCatalog(Protocol):
    """Entity type lookup by name."""

    def resolve_entity_type(self, name: str) -> Optional[EntityTypeHandle]:
        """Return the entity type called ``name`` or None when unregistered."""
        ...
