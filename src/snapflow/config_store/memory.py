"""In-memory configuration store for testing and development."""

from typing import Iterable, List, Optional

from snapflow.types import FieldMapping, SnapshotRule


class InMemoryConfigurationStore:
    """Configuration store holding rules and mappings in lists.

    Duplicate rule ids are allowed so that ambiguous configuration can be
    reproduced in tests.
    """

    def __init__(
        self,
        rules: Optional[Iterable[SnapshotRule]] = None,
        mappings: Optional[Iterable[FieldMapping]] = None,
    ):
        self.rules: List[SnapshotRule] = list(rules or [])
        self.mappings: List[FieldMapping] = list(mappings or [])

    def add_rule(self, rule: SnapshotRule) -> SnapshotRule:
        self.rules.append(rule)
        return rule

    def add_mapping(self, rule_id: str, source_field: str, target_field: str) -> FieldMapping:
        mapping = FieldMapping(rule_id=rule_id, source_field=source_field, target_field=target_field)
        self.mappings.append(mapping)
        return mapping

    def get_rules(self, rule_id: str) -> List[SnapshotRule]:
        return [rule for rule in self.rules if rule.id == str(rule_id)]

    def get_field_mappings(self, rule_id: str) -> List[FieldMapping]:
        return [mapping for mapping in self.mappings if mapping.rule_id == str(rule_id)]
