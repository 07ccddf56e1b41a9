"""Dynamically typed records and entity types.

A record is a bag of field values tagged with the name of its entity type.
Records created through an entity type know the fields that type declares
and reject assignments to anything else; records built from query results
accept whatever columns the query returned.
"""

from typing import Any, Dict, Iterable, List, Optional

from snapflow.common.exceptions import unknown_field_error


class EntityRecord:
    """A record of some entity type, addressed by field name.

    Args:
        entity_name: Name of the entity type
        fields: Fields declared by the entity type. None leaves the record
            open to any field
        values: Initial field values
    """

    __slots__ = ("_entity_name", "_fields", "_values")

    def __init__(
        self,
        entity_name: str,
        fields: Optional[Iterable[str]] = None,
        values: Optional[Dict[str, Any]] = None,
    ):
        self._entity_name = entity_name
        self._fields = frozenset(fields) if fields is not None else None
        self._values: Dict[str, Any] = {}
        for field_name, value in (values or {}).items():
            self.set(field_name, value)

    @property
    def entity_name(self) -> str:
        return self._entity_name

    def has_field(self, field_name: str) -> bool:
        if self._fields is None:
            return field_name in self._values
        return field_name in self._fields

    def get(self, field_name: str) -> Any:
        """Return a field value; declared but unset fields read as None.

        Raises:
            SchemaResolutionError: If the record carries no such field
        """
        if field_name in self._values:
            return self._values[field_name]
        if self._fields is not None and field_name in self._fields:
            return None
        raise unknown_field_error(self._entity_name, field_name)

    def set(self, field_name: str, value: Any) -> None:
        """Assign a value as is; no type coercion happens here.

        Raises:
            SchemaResolutionError: If the entity type declares no such field
        """
        if self._fields is not None and field_name not in self._fields:
            raise unknown_field_error(self._entity_name, field_name)
        self._values[field_name] = value

    def to_dict(self) -> Dict[str, Any]:
        """Explicitly assigned values only; unset fields keep storage defaults."""
        return dict(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EntityRecord):
            return NotImplemented
        return self._entity_name == other._entity_name and self._values == other._values

    def __repr__(self) -> str:
        return f"EntityRecord({self._entity_name!r}, {self._values!r})"


class EntityType:
    """An entity type known by its name and declared fields.

    Args:
        name: Entity type name
        fields: Declared field names
        key_fields: Fields identifying a record, in key order. Empty when
            the schema declares no key
    """

    def __init__(self, name: str, fields: Iterable[str], key_fields: Iterable[str] = ()):
        self._name = name
        self._fields: List[str] = list(dict.fromkeys(fields))
        self._key_fields: List[str] = [field_name for field_name in key_fields if field_name in self._fields]

    @property
    def name(self) -> str:
        return self._name

    @property
    def fields(self) -> List[str]:
        return list(self._fields)

    @property
    def key_fields(self) -> List[str]:
        return list(self._key_fields)

    def has_field(self, field_name: str) -> bool:
        return field_name in self._fields

    def new_record(self) -> EntityRecord:
        return EntityRecord(self._name, fields=self._fields)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r}, fields={self._fields!r})"
