"""Snapshot engine constants and enumerations.

This module contains the enum types describing snapshot rules and the
outcome of a snapshot run.
"""

from enum import Enum


class SnapshotFrequency(str, Enum):
    """Snapshot frequency enumeration.

    Well-known schedule descriptors. A rule's frequency is stored as plain
    text and may hold any other descriptor the scheduler understands; the
    engine never reads it.
    """

    EVERY_RUN = "EVERY_RUN"
    HOURLY = "HOURLY"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


class RunStatus(str, Enum):
    """Outcome of a single snapshot run.

    COMMITTED: Target records were persisted
    ROLLED_BACK: Target records were written then discarded (dry run)
    NO_MATCHES: The entry criteria selected no source records
    """

    COMMITTED = "COMMITTED"
    ROLLED_BACK = "ROLLED_BACK"
    NO_MATCHES = "NO_MATCHES"


DEFAULT_ID_FIELD = "id"
DEFAULT_RULE_TABLE = "snapshot_rule"
DEFAULT_MAPPING_TABLE = "snapshot_field_mapping"
