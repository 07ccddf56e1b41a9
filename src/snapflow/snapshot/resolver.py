"""Rule resolution.

Loads a snapshot rule and its field mappings from configuration storage and
folds the mappings into the FieldMap that drives the projection. Entity and
field names are not checked here; that is the validators' job.
"""

from typing import NamedTuple

from snapflow.common.exceptions import malformed_mapping_error, rule_not_found_error
from snapflow.logging import get_logger
from snapflow.protocols import ConfigurationStore, SchemaCatalog
from snapflow.types import FieldMap, SnapshotRule, build_field_map

logger = get_logger(__name__)


def identifier_field(catalog: SchemaCatalog, entity_name: str, default: str) -> str:
    """Return the first key field of ``entity_name``.

    Falls back to ``default`` when the entity does not resolve or declares
    no key.
    """
    entity_type = catalog.resolve_entity_type(entity_name)
    if entity_type is not None and entity_type.key_fields:
        return entity_type.key_fields[0]
    return default


class ResolvedRule(NamedTuple):
    rule: SnapshotRule
    field_map: FieldMap


class RuleResolver:
    """Resolve rule identifiers against a configuration store."""

    def __init__(self, config_store: ConfigurationStore):
        self.config_store = config_store

    def resolve(self, rule_id: str) -> ResolvedRule:
        """Load exactly one rule and build its FieldMap.

        Args:
            rule_id: Rule identifier

        Returns:
            ResolvedRule with the rule and its FieldMap

        Raises:
            NotFoundError: If zero or several rules carry ``rule_id``
            ConfigurationError: If a mapping has a blank field name
        """
        rule_id = str(rule_id)
        rules = self.config_store.get_rules(rule_id)
        if len(rules) != 1:
            raise rule_not_found_error(rule_id, len(rules))
        rule = rules[0]

        mappings = self.config_store.get_field_mappings(rule_id)
        for mapping in mappings:
            if not mapping.source_field.strip() or not mapping.target_field.strip():
                raise malformed_mapping_error(
                    rule_id,
                    f"Field mapping of rule '{rule_id}' has a blank field name",
                    mapping=mapping.to_dict(),
                )

        field_map = build_field_map(mappings)
        if len(field_map) < len(mappings):
            logger.warning(
                "rule.mappings.duplicate_source",
                extra={
                    "rule_id": rule_id,
                    "mapping_count": len(mappings),
                    "field_count": len(field_map),
                },
            )

        logger.debug(
            "rule.resolved",
            extra={
                "rule_id": rule_id,
                "source_entity": rule.source_entity,
                "target_entity": rule.target_entity,
                "field_count": len(field_map),
            },
        )
        return ResolvedRule(rule, field_map)
