"""Unit tests for rule resolution."""

import pytest

from snapflow.common.exceptions import ConfigurationError, ErrorCode, NotFoundError
from snapflow.config_store import InMemoryConfigurationStore
from snapflow.snapshot import RuleResolver
from snapflow.types import FieldMapping, SnapshotRule


def _rule(rule_id="r1", **overrides):
    data = dict(id=rule_id, source_entity="Account", target_entity="AccountSnapshot",
                entry_criteria="Industry = 'Finance'")
    data.update(overrides)
    return SnapshotRule(**data)


class TestRuleResolver:

    def test_resolves_rule_and_field_map(self):
        store = InMemoryConfigurationStore(rules=[_rule()])
        store.add_mapping("r1", "Name", "SnapshotName")
        store.add_mapping("r1", "Revenue", "SnapshotRevenue")

        rule, field_map = RuleResolver(store).resolve("r1")

        assert rule.source_entity == "Account"
        assert field_map == {"Name": "SnapshotName", "Revenue": "SnapshotRevenue"}

    def test_last_mapping_wins_for_duplicate_source(self):
        store = InMemoryConfigurationStore(rules=[_rule()])
        store.add_mapping("r1", "Name", "FirstTarget")
        store.add_mapping("r1", "Name", "SecondTarget")

        _, field_map = RuleResolver(store).resolve("r1")

        assert field_map == {"Name": "SecondTarget"}

    def test_mappings_of_other_rules_are_ignored(self):
        store = InMemoryConfigurationStore(rules=[_rule(), _rule("r2")])
        store.add_mapping("r2", "Name", "SnapshotName")

        _, field_map = RuleResolver(store).resolve("r1")

        assert field_map == {}

    def test_rule_not_found(self):
        with pytest.raises(NotFoundError) as exc_info:
            RuleResolver(InMemoryConfigurationStore()).resolve("nope")

        assert exc_info.value.error_code == ErrorCode.RULE_NOT_FOUND
        assert exc_info.value.details == {"rule_id": "nope", "matches": 0}

    def test_ambiguous_rule(self):
        store = InMemoryConfigurationStore(rules=[_rule(), _rule()])

        with pytest.raises(NotFoundError) as exc_info:
            RuleResolver(store).resolve("r1")

        assert exc_info.value.error_code == ErrorCode.DUPLICATE_RULE

    def test_not_found_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            RuleResolver(InMemoryConfigurationStore()).resolve("nope")

    @pytest.mark.parametrize("source_field,target_field", [("", "SnapshotName"), ("Name", "  ")])
    def test_blank_mapping_field_is_malformed(self, source_field, target_field):
        store = InMemoryConfigurationStore(
            rules=[_rule()],
            mappings=[FieldMapping(rule_id="r1", source_field=source_field, target_field=target_field)],
        )

        with pytest.raises(ConfigurationError) as exc_info:
            RuleResolver(store).resolve("r1")

        assert exc_info.value.error_code == ErrorCode.MALFORMED_MAPPING

    def test_numeric_rule_id(self):
        store = InMemoryConfigurationStore(rules=[_rule(7)])

        rule, _ = RuleResolver(store).resolve(7)

        assert rule.id == "7"
