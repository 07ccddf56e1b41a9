"""Pre-flight checks for snapshot rules.

Every check is a predicate that answers False instead of raising, so hosts
can call them when a rule is saved and show the outcome to the operator.
"""

from typing import TYPE_CHECKING, Optional

import sqlglot

from snapflow.datastore import sqlglot_dialect
from snapflow.logging import get_logger
from snapflow.protocols import QueryService, SchemaCatalog
from snapflow.query_builder import SnapshotQueryBuilder
from snapflow.snapshot.backend import SnapshotBackend, get_backend
from snapflow.snapshot.resolver import RuleResolver, identifier_field
from snapflow.types import FieldMap, FieldMapping, MappingCheck, RuleValidationReport, SnapshotRule
from snapflow.utils.decorators import catch_exception

if TYPE_CHECKING:
    from snapflow.settings import _Settings

logger = get_logger(__name__)


class SnapshotRuleValidator:
    """Validate one rule's entities, criteria and field mappings.

    Args:
        rule: Rule under validation
        catalog: Catalog used to resolve entity types
        query_service: Service used to run the criteria probe query
        builder: Query builder for the probe query
        dialect: sqlglot dialect used for the static criteria check
        field_map: The rule's FieldMap, checked by ``validate()``
    """

    def __init__(
        self,
        rule: SnapshotRule,
        catalog: SchemaCatalog,
        query_service: QueryService,
        builder: Optional[SnapshotQueryBuilder] = None,
        dialect: str = "sqlite",
        field_map: Optional[FieldMap] = None,
    ):
        self.rule = rule
        self.catalog = catalog
        self.query_service = query_service
        self.builder = builder or SnapshotQueryBuilder()
        self.dialect = dialect
        self.field_map: FieldMap = dict(field_map or {})

    @classmethod
    def for_rule(
        cls,
        rule_id: str,
        *,
        backend: Optional[SnapshotBackend] = None,
        settings: Optional['_Settings'] = None,
    ) -> "SnapshotRuleValidator":
        """Resolve ``rule_id`` and build a validator for it.

        The criteria dialect comes from ``settings.snapshot.sql_dialect`` or,
        when unset, from the backend's database engine.

        Raises:
            NotFoundError: If the rule id matches zero or several rules
            ConfigurationError: If the rule's mappings are malformed
        """
        if settings is None:
            from snapflow.settings import get_settings
            settings = get_settings()
        backend = backend or get_backend()

        dialect = settings.snapshot.sql_dialect
        if dialect is None:
            if backend.sql_engine is not None:
                dialect = sqlglot_dialect(backend.sql_engine.settings.dialect_name)
            else:
                dialect = "sqlite"

        rule, field_map = RuleResolver(backend.config_store).resolve(rule_id)
        return cls(
            rule,
            backend.catalog,
            backend.query_service,
            builder=SnapshotQueryBuilder(id_field=settings.snapshot.id_field),
            dialect=dialect,
            field_map=field_map,
        )

    @catch_exception(default_return=False)
    def fields_valid(self, mapping: FieldMapping) -> bool:
        """True when the source field exists on the source entity and the
        target field on the target entity."""
        source_type = self.catalog.resolve_entity_type(self.rule.source_entity)
        target_type = self.catalog.resolve_entity_type(self.rule.target_entity)
        if source_type is None or target_type is None:
            return False
        return source_type.has_field(mapping.source_field) and target_type.has_field(mapping.target_field)

    @catch_exception(default_return=False)
    def criteria_valid(self) -> bool:
        """True when the entry criteria runs against the source entity.

        The probe query selects the source entity's key field. It is parsed
        first, then executed with a one-row limit rendered in ``dialect``.
        Criteria matching no records is still valid.
        """
        id_field = identifier_field(self.catalog, self.rule.source_entity, self.builder.id_field)
        probe = self.builder.build_probe_query(self.rule.source_entity, self.rule.entry_criteria, id_field=id_field)
        statement = sqlglot.parse_one(probe, read=self.dialect)
        self.query_service.execute_query(statement.limit(1).sql(dialect=self.dialect))
        return True

    @catch_exception(default_return=False)
    def entities_valid(self) -> bool:
        """True when both the source and the target entity resolve."""
        return (
            self.catalog.resolve_entity_type(self.rule.source_entity) is not None
            and self.catalog.resolve_entity_type(self.rule.target_entity) is not None
        )

    def validate(self) -> RuleValidationReport:
        """Run every check and collect the outcome."""
        mappings = [
            MappingCheck(
                source_field=source_field,
                target_field=target_field,
                valid=self.fields_valid(
                    FieldMapping(rule_id=self.rule.id, source_field=source_field, target_field=target_field)
                ),
            )
            for source_field, target_field in self.field_map.items()
        ]
        report = RuleValidationReport(
            rule_id=self.rule.id,
            entities_valid=self.entities_valid(),
            criteria_valid=self.criteria_valid(),
            mappings=mappings,
        )
        logger.info(
            "rule.validated",
            extra={
                "rule_id": self.rule.id,
                "valid": report.is_valid,
                "entities_valid": report.entities_valid,
                "criteria_valid": report.criteria_valid,
                "invalid_mappings": len(report.invalid_mappings),
            },
        )
        return report
