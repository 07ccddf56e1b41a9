"""Unit tests for snapshot query generation."""

import pytest
from unittest.mock import Mock

from snapflow.common.exceptions import QueryError
from snapflow.constants import QueryType
from snapflow.operations import Select
from snapflow.query_builder import SnapshotQueryBuilder


class TestSnapshotQueryBuilder:

    @pytest.fixture
    def builder(self):
        return SnapshotQueryBuilder()

    def test_select_with_criteria(self, builder):
        query = builder.build_snapshot_query(
            {"Name": "SnapshotName", "Revenue": "SnapshotRevenue"}.keys(),
            "Account",
            "Industry = 'Finance'",
        )

        assert query == "SELECT Name, Revenue FROM Account WHERE Industry = 'Finance'"

    def test_field_list_has_no_container_delimiters(self, builder):
        for fields in ({"a": "x", "b": "y"}.keys(), {"a", "b"}, ("a", "b"), ["a", "b"]):
            query = builder.build_snapshot_query(fields, "T", "c = 1")
            column_list = query[len("SELECT "):query.index(" FROM")]
            assert sorted(column_list.split(", ")) == ["a", "b"]
            for delimiter in "[](){}'":
                assert delimiter not in column_list

    def test_duplicate_fields_emitted_once(self, builder):
        query = builder.build_snapshot_query(["b", "a", "b"], "T", "c = 1")

        assert query == "SELECT b, a FROM T WHERE c = 1"

    def test_empty_field_map_selects_identifier(self, builder):
        assert builder.build_snapshot_query({}.keys(), "Account", "x = 1") == "SELECT id FROM Account WHERE x = 1"

    def test_identifier_field_is_configurable(self):
        builder = SnapshotQueryBuilder(id_field="AccountId")

        assert builder.build_snapshot_query([], "Account", "") == "SELECT AccountId FROM Account"

    @pytest.mark.parametrize("criteria", ["", "   ", None])
    def test_blank_criteria_omits_where(self, builder, criteria):
        assert builder.build_snapshot_query(["Name"], "Account", criteria) == "SELECT Name FROM Account"

    def test_criteria_is_used_verbatim(self, builder):
        criteria = "Name LIKE 'O''Brien%' OR (Revenue > 10 AND Closed = 0)"

        query = builder.build_snapshot_query(["Name"], "Account", criteria)

        assert query.endswith(f"WHERE {criteria}")

    def test_schema_qualified_entity(self, builder):
        assert builder.build_snapshot_query(["id"], "crm.account", "") == "SELECT id FROM crm.account"

    def test_invalid_field_name(self, builder):
        with pytest.raises(QueryError):
            builder.build_snapshot_query(["Name; DROP TABLE Account"], "Account", "")

    def test_invalid_entity_name(self, builder):
        with pytest.raises(QueryError):
            builder.build_snapshot_query(["Name"], "Account WHERE 1=1", "")

    def test_probe_query(self, builder):
        assert builder.build_probe_query("Account", "Industry = 'Finance'") == (
            "SELECT id FROM Account WHERE Industry = 'Finance'"
        )

    def test_probe_query_with_key_field(self, builder):
        assert builder.build_probe_query("Lead", "Status = 'Open'", id_field="LeadKey") == (
            "SELECT LeadKey FROM Lead WHERE Status = 'Open'"
        )

    def test_build_query_rejects_unknown_operation(self, builder):
        operation = Mock(spec=Select)
        operation.operation_type = QueryType.INSERT

        with pytest.raises(ValueError, match="Unsupported operation type"):
            builder.build_query(operation)
