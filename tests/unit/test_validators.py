"""Unit tests for rule validators using an in-memory catalog."""

from unittest.mock import Mock

import pytest

from snapflow.catalog import InMemorySchemaCatalog
from snapflow.common.exceptions import QueryError
from snapflow.config_store import InMemoryConfigurationStore
from snapflow.settings import DatabaseSettings, SnapshotSettings, _Settings
from snapflow.snapshot import SnapshotBackend, SnapshotRuleValidator
from snapflow.types import FieldMapping, SnapshotRule


@pytest.fixture
def catalog():
    return InMemorySchemaCatalog({
        "Account": ["id", "Name", "Industry"],
        "AccountSnapshot": ["id", "SnapshotName"],
    })


@pytest.fixture
def query_service():
    service = Mock()
    service.execute_query.return_value = []
    return service


def _validator(catalog, query_service, criteria="Industry = 'Finance'", target="AccountSnapshot", field_map=None):
    rule = SnapshotRule(id="r1", source_entity="Account", target_entity=target, entry_criteria=criteria)
    return SnapshotRuleValidator(rule, catalog, query_service, field_map=field_map)


def _mapping(source, target):
    return FieldMapping(rule_id="r1", source_field=source, target_field=target)


class TestFieldsValid:

    def test_both_fields_exist(self, catalog, query_service):
        assert _validator(catalog, query_service).fields_valid(_mapping("Name", "SnapshotName")) is True

    @pytest.mark.parametrize("source,target", [("Nme", "SnapshotName"), ("Name", "Nme"), ("Nme", "Nme")])
    def test_missing_field(self, catalog, query_service, source, target):
        assert _validator(catalog, query_service).fields_valid(_mapping(source, target)) is False

    def test_unresolvable_entity(self, catalog, query_service):
        validator = _validator(catalog, query_service, target="Nowhere")

        assert validator.fields_valid(_mapping("Name", "SnapshotName")) is False

    def test_catalog_failure_is_false(self, query_service):
        catalog = Mock()
        catalog.resolve_entity_type.side_effect = RuntimeError("catalog offline")

        assert _validator(catalog, query_service).fields_valid(_mapping("Name", "SnapshotName")) is False


class TestCriteriaValid:

    def test_probe_query_is_executed(self, catalog, query_service):
        assert _validator(catalog, query_service).criteria_valid() is True

        query_service.execute_query.assert_called_once_with(
            "SELECT id FROM Account WHERE Industry = 'Finance' LIMIT 1"
        )

    def test_rejected_by_datastore(self, catalog, query_service):
        query_service.execute_query.side_effect = QueryError("no such column: Industri")

        assert _validator(catalog, query_service, criteria="Industri = 'Finance'").criteria_valid() is False

    def test_syntax_error_is_caught_before_probing(self, catalog, query_service):
        assert _validator(catalog, query_service, criteria="Industry = 'Finance").criteria_valid() is False

        query_service.execute_query.assert_not_called()

    def test_blank_criteria(self, catalog, query_service):
        assert _validator(catalog, query_service, criteria="").criteria_valid() is True

        query_service.execute_query.assert_called_once_with("SELECT id FROM Account LIMIT 1")

    def test_probe_selects_source_key(self, catalog, query_service):
        catalog.register("Lead", ["LeadKey", "Status"], key_fields=["LeadKey"])
        rule = SnapshotRule(id="r2", source_entity="Lead", target_entity="AccountSnapshot",
                            entry_criteria="Status = 'Open'")

        assert SnapshotRuleValidator(rule, catalog, query_service).criteria_valid() is True

        query_service.execute_query.assert_called_once_with("SELECT LeadKey FROM Lead WHERE Status = 'Open' LIMIT 1")


class TestEntitiesValid:

    def test_both_resolve(self, catalog, query_service):
        assert _validator(catalog, query_service).entities_valid() is True

    def test_target_missing(self, catalog, query_service):
        assert _validator(catalog, query_service, target="Nowhere").entities_valid() is False


class TestValidate:

    def test_report(self, catalog, query_service):
        validator = _validator(
            catalog,
            query_service,
            field_map={"Name": "SnapshotName", "Industry": "SnapshotIndustry"},
        )

        report = validator.validate()

        assert report.rule_id == "r1"
        assert report.entities_valid
        assert report.criteria_valid
        assert not report.is_valid
        assert [(check.source_field, check.target_field) for check in report.invalid_mappings] == [
            ("Industry", "SnapshotIndustry")
        ]


class TestForRule:

    def _backend(self, catalog, query_service, url):
        config_store = InMemoryConfigurationStore(rules=[
            SnapshotRule(id="r1", source_entity="Account", target_entity="AccountSnapshot",
                         entry_criteria="Industry = 'Finance'"),
        ])
        config_store.add_mapping("r1", "Name", "SnapshotName")
        return SnapshotBackend(
            config_store=config_store,
            catalog=catalog,
            query_service=query_service,
            store=Mock(),
            sql_engine=Mock(settings=DatabaseSettings(url=url)),
        )

    def _settings(self, url, sql_dialect=None):
        return _Settings(database=DatabaseSettings(url=url), snapshot=SnapshotSettings(sql_dialect=sql_dialect))

    def test_dialect_follows_database_url(self, catalog, query_service):
        url = "mssql+pyodbc://app@crm"
        validator = SnapshotRuleValidator.for_rule(
            "r1", backend=self._backend(catalog, query_service, url), settings=self._settings(url)
        )

        assert validator.dialect == "tsql"
        assert validator.criteria_valid() is True
        probe = query_service.execute_query.call_args.args[0]
        assert probe.startswith("SELECT TOP 1 id FROM Account")
        assert "LIMIT" not in probe

    def test_postgres_url(self, catalog, query_service):
        url = "postgresql+psycopg://app@db/crm"
        validator = SnapshotRuleValidator.for_rule(
            "r1", backend=self._backend(catalog, query_service, url), settings=self._settings(url)
        )

        assert validator.dialect == "postgres"
        assert validator.field_map == {"Name": "SnapshotName"}

    def test_configured_dialect_wins(self, catalog, query_service):
        url = "mssql+pyodbc://app@crm"
        validator = SnapshotRuleValidator.for_rule(
            "r1",
            backend=self._backend(catalog, query_service, url),
            settings=self._settings(url, sql_dialect="duckdb"),
        )

        assert validator.dialect == "duckdb"
