"""Unit tests for records, entity types and translation."""

import pytest

from snapflow.catalog import EntityRecord, InMemorySchemaCatalog
from snapflow.common.exceptions import ErrorCode, SchemaResolutionError
from snapflow.snapshot import RecordTranslator


@pytest.fixture
def catalog():
    return InMemorySchemaCatalog({
        "Account": ["Id", "Name", "Industry", "Revenue"],
        "AccountSnapshot": ["Id", "SnapshotName", "SnapshotRevenue", "Status"],
    })


class TestEntityRecord:

    def test_declared_fields_default_to_none(self, catalog):
        record = catalog.resolve_entity_type("AccountSnapshot").new_record()

        assert record.entity_name == "AccountSnapshot"
        assert record.get("Status") is None
        assert record.to_dict() == {}

    def test_set_undeclared_field(self, catalog):
        record = catalog.resolve_entity_type("AccountSnapshot").new_record()

        with pytest.raises(SchemaResolutionError) as exc_info:
            record.set("Bogus", 1)

        assert exc_info.value.error_code == ErrorCode.UNKNOWN_FIELD
        assert exc_info.value.details == {"entity": "AccountSnapshot", "field": "Bogus"}

    def test_open_record_accepts_any_field(self):
        record = EntityRecord("Account", values={"Name": "Acme"})
        record.set("Anything", 3)

        assert record.get("Anything") == 3
        with pytest.raises(SchemaResolutionError):
            record.get("Missing")

    def test_values_are_not_coerced(self):
        record = EntityRecord("Account", fields=["Revenue"])
        record.set("Revenue", "12.50")

        assert record.get("Revenue") == "12.50"


class TestInMemorySchemaCatalog:

    def test_unknown_entity(self, catalog):
        assert catalog.resolve_entity_type("Contact") is None

    def test_register_and_unregister(self, catalog):
        catalog.register("Contact", ["Email"])
        assert catalog.resolve_entity_type("Contact").has_field("Email")

        catalog.unregister("Contact")
        assert catalog.resolve_entity_type("Contact") is None

    def test_key_fields(self, catalog):
        lead = catalog.register("Lead", ["LeadKey", "Status"], key_fields=["LeadKey", "Missing"])

        assert lead.key_fields == ["LeadKey"]
        assert catalog.resolve_entity_type("Account").key_fields == []


class TestRecordTranslator:

    def test_copies_mapped_fields(self, catalog):
        source = EntityRecord("Account", values={"Name": "Acme", "Revenue": 10, "Industry": "Finance"})
        translator = RecordTranslator({"Name": "SnapshotName", "Revenue": "SnapshotRevenue"})

        target = translator.translate(source, catalog.resolve_entity_type("AccountSnapshot"))

        assert target.to_dict() == {"SnapshotName": "Acme", "SnapshotRevenue": 10}
        assert target.get("Status") is None

    def test_one_target_per_source(self, catalog):
        sources = [EntityRecord("Account", values={"Name": name}) for name in ("A", "B", "C")]

        targets = RecordTranslator({"Name": "SnapshotName"}).translate_all(
            sources, catalog.resolve_entity_type("AccountSnapshot")
        )

        assert [target.get("SnapshotName") for target in targets] == ["A", "B", "C"]
        assert len({id(target) for target in targets}) == 3

    def test_missing_target_field(self, catalog):
        source = EntityRecord("Account", values={"Name": "Acme"})

        with pytest.raises(SchemaResolutionError):
            RecordTranslator({"Name": "Nope"}).translate(source, catalog.resolve_entity_type("AccountSnapshot"))

    def test_empty_field_map_yields_blank_record(self, catalog):
        source = EntityRecord("Account", values={"Id": 1})

        target = RecordTranslator({}).translate(source, catalog.resolve_entity_type("AccountSnapshot"))

        assert target.to_dict() == {}
