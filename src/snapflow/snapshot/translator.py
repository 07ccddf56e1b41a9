from typing import Iterable, List

from snapflow.protocols import EntityTypeHandle, Record
from snapflow.types import FieldMap


class RecordTranslator:
    """Copy mapped field values from source records into new target records.

    Values are copied as is. Target fields without a mapping are left unset
    so the store applies its defaults.
    """

    def __init__(self, field_map: FieldMap):
        self.field_map = dict(field_map)

    def translate(self, source: Record, target_type: EntityTypeHandle) -> Record:
        """Allocate one target record and fill it from ``source``.

        Raises:
            SchemaResolutionError: If a mapped field is missing on either side
        """
        target = target_type.new_record()
        for source_field, target_field in self.field_map.items():
            target.set(target_field, source.get(source_field))
        return target

    def translate_all(self, sources: Iterable[Record], target_type: EntityTypeHandle) -> List[Record]:
        return [self.translate(source, target_type) for source in sources]
