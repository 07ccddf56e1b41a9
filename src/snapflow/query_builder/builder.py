"""Query builder for snapshot rules.

The builder turns a rule's projection (the source fields of its field map),
source entity and entry criteria into a selection query:

    SELECT f1, f2, ... FROM <source_entity> WHERE <entry_criteria>

Query builders only generate text. Execution belongs to the query service.
"""

from typing import Iterable, List, Optional

from pydantic import ValidationError

from snapflow.common.exceptions import QueryError
from snapflow.constants import DEFAULT_ID_FIELD, QueryType
from snapflow.logging import get_logger
from snapflow.operations import BaseOperation, Select

logger = get_logger(__name__)


class SnapshotQueryBuilder:
    """Builds the selection queries issued by snapshot rules.

    Entry criteria are trusted: they are placed after ``WHERE`` exactly as
    configured, with no escaping or semantic checking. Rules are expected to
    pass ``SnapshotRuleValidator.criteria_valid`` before they are activated.

    Field names, on the other hand, are validated as plain identifiers and
    rendered as a comma-joined list whatever container they arrive in.

    Attributes:
        id_field: Field selected when a rule maps no fields
    """

    def __init__(self, id_field: str = DEFAULT_ID_FIELD):
        self.id_field = id_field

    def build_query(self, operation: BaseOperation) -> str:
        """Render an operation into SQL text.

        Args:
            operation: Operation to render

        Returns:
            SQL statement

        Raises:
            ValueError: If the operation type is not supported
        """
        if operation.operation_type == QueryType.SELECT:
            return self._build_select(operation)
        raise ValueError(f"Unsupported operation type: {operation.operation_type}")

    def _build_select(self, operation: Select) -> str:
        query = f"SELECT {self.format_column_list(operation.columns)} FROM {operation.object_name}"
        if operation.where_clause:
            query = f"{query} WHERE {operation.where_clause}"
        return query

    @staticmethod
    def format_column_list(columns: Iterable[str]) -> str:
        return ", ".join(columns)

    def select_operation(
        self,
        source_fields: Iterable[str],
        source_entity: str,
        entry_criteria: Optional[str],
    ) -> Select:
        """Build the Select operation for a rule projection.

        Args:
            source_fields: Source field names, typically a field map's keys
            source_entity: Entity to select from
            entry_criteria: Predicate fragment; blank means no filter

        Returns:
            Select operation

        Raises:
            QueryError: If an entity or field name is not a valid identifier
        """
        columns: List[str] = [str(name) for name in source_fields]
        if not columns:
            columns = [self.id_field]

        criteria = (entry_criteria or "").strip() or None
        try:
            return Select(
                object_name=source_entity,
                columns=columns,
                where_clause=criteria,
                logging_context={"entity": source_entity},
            )
        except ValidationError as exc:
            raise QueryError(
                f"Cannot build query over '{source_entity}': {exc.errors()[0]['msg']}",
                details={"entity": source_entity, "columns": columns},
                cause=exc,
            )

    def build_snapshot_query(
        self,
        source_fields: Iterable[str],
        source_entity: str,
        entry_criteria: Optional[str],
    ) -> str:
        """Build the query selecting a rule's source records.

        Args:
            source_fields: Source field names, typically a field map's keys
            source_entity: Entity to select from
            entry_criteria: Predicate fragment; blank means no filter

        Returns:
            SQL text

        Example:
            >>> SnapshotQueryBuilder().build_snapshot_query(
            ...     {"Name": "SnapshotName"}.keys(), "Account", "Industry = 'Finance'"
            ... )
            "SELECT Name FROM Account WHERE Industry = 'Finance'"
        """
        operation = self.select_operation(source_fields, source_entity, entry_criteria)
        query = self.build_query(operation)
        logger.debug("query_builder.snapshot_query", extra={**operation.telemetry_fields(), "query": query})
        return query

    def build_probe_query(
        self,
        source_entity: str,
        entry_criteria: Optional[str],
        id_field: Optional[str] = None,
    ) -> str:
        """Build an identifier-only query used to check entry criteria.

        ``id_field`` defaults to the builder's ``id_field``.
        """
        return self.build_query(self.select_operation([id_field or self.id_field], source_entity, entry_criteria))
