from typing import Any, Optional

from snapflow.observability.context import execution_request_scope, resolve_request_context
from snapflow.settings import get_settings
from snapflow.snapshot import SnapshotBackend, SnapshotExecutor, SnapshotRuleValidator
from snapflow.types import RuleValidationReport, SnapshotRunResult


def _context_for(rule_id: str, ctx: Optional[Any]):
    context = resolve_request_context(ctx)
    if not context.rule_id:
        context.rule_id = str(rule_id)
    return context


def run_snapshot(
    rule_id: str,
    dry_run: Optional[bool] = None,
    *,
    ctx: Optional[Any] = None,
    backend: Optional[SnapshotBackend] = None,
) -> SnapshotRunResult:
    """Run a snapshot rule once.

    Args:
        rule_id: Rule to run
        dry_run: Rehearse and roll back. Defaults to ``snapshot.dry_run_default``
        ctx: Optional request context carrying logging/trace metadata
        backend: Services to use. Defaults to the SQL backend from settings
    """
    context = _context_for(rule_id, ctx)
    with execution_request_scope(context, operation="snapflow.snapshot.run_rule"):
        settings = get_settings()
        if dry_run is None:
            dry_run = settings.snapshot.dry_run_default
        executor = SnapshotExecutor(rule_id, dry_run, backend=backend, settings=settings)
        return executor.run()


def validate_snapshot_rule(
    rule_id: str,
    *,
    ctx: Optional[Any] = None,
    backend: Optional[SnapshotBackend] = None,
) -> RuleValidationReport:
    """Check a rule's entities, entry criteria and field mappings."""
    context = _context_for(rule_id, ctx)
    with execution_request_scope(context, operation="snapflow.snapshot.validate_rule"):
        validator = SnapshotRuleValidator.for_rule(rule_id, backend=backend, settings=get_settings())
        return validator.validate()
