from .snapshot import run_snapshot, validate_snapshot_rule

__all__ = [
    "run_snapshot",
    "validate_snapshot_rule",
]
