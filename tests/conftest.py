"""Shared fixtures: a throw-away SQLite database holding an ``account`` table,
its ``account_snapshot`` target and the snapshot configuration tables."""

from typing import Callable, Dict, Optional

import pytest
from sqlalchemy import create_engine, text

from snapflow.monitoring import MetricsCollector
from snapflow.settings import DatabaseSettings, SnapshotSettings, _Settings
from snapflow.snapshot import create_sql_backend

SCHEMA = (
    """
    CREATE TABLE account (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        industry TEXT,
        annual_revenue REAL
    )
    """,
    """
    CREATE TABLE account_snapshot (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        snapshot_name TEXT NOT NULL,
        snapshot_revenue REAL CHECK (snapshot_revenue IS NULL OR snapshot_revenue >= 0),
        snapshot_status TEXT DEFAULT 'captured'
    )
    """,
    """
    CREATE TABLE snapshot_rule (
        id TEXT NOT NULL,
        name TEXT,
        source_entity TEXT NOT NULL,
        target_entity TEXT NOT NULL,
        entry_criteria TEXT,
        frequency TEXT,
        description TEXT,
        active INTEGER DEFAULT 1
    )
    """,
    """
    CREATE TABLE snapshot_field_mapping (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        rule_id TEXT NOT NULL,
        source_field TEXT,
        target_field TEXT
    )
    """,
)

ACCOUNTS = (
    (1, "Acme", "Finance", 100.0),
    (2, "Globex", "Finance", 250.0),
    (3, "Initech", "Finance", 75.5),
    (4, "Umbrella", "Retail", 40.0),
    (5, "Hooli", "Retail", 60.0),
    (6, "Stark", "Energy", 10.0),
    (7, "Wayne", "Energy", 20.0),
    (8, "Oscorp", "Energy", -5.0),
)

ACCOUNT_MAPPINGS = {"name": "snapshot_name", "annual_revenue": "snapshot_revenue"}


@pytest.fixture
def db_url(tmp_path) -> str:
    url = f"sqlite:///{tmp_path / 'snapflow.db'}"
    engine = create_engine(url)
    with engine.begin() as conn:
        for statement in SCHEMA:
            conn.exec_driver_sql(statement)
        conn.execute(
            text("INSERT INTO account (id, name, industry, annual_revenue) VALUES (:id, :name, :industry, :revenue)"),
            [dict(id=i, name=n, industry=ind, revenue=r) for i, n, ind, r in ACCOUNTS],
        )
    engine.dispose()
    return url


@pytest.fixture
def sql(db_url):
    """Plain engine for arranging and asserting database state."""
    engine = create_engine(db_url)
    yield engine
    engine.dispose()


@pytest.fixture
def count_rows(sql) -> Callable[[str], int]:
    def _count(table: str) -> int:
        with sql.connect() as conn:
            return conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar_one()
    return _count


@pytest.fixture
def add_rule(sql) -> Callable[..., None]:
    """Insert a rule row and its mapping rows."""
    def _add(
        rule_id: str,
        entry_criteria: Optional[str] = "industry = 'Finance'",
        mappings: Optional[Dict[str, str]] = None,
        source_entity: str = "account",
        target_entity: str = "account_snapshot",
        frequency: Optional[str] = "DAILY",
    ) -> None:
        with sql.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO snapshot_rule (id, name, source_entity, target_entity, entry_criteria, frequency) "
                    "VALUES (:id, :name, :source, :target, :criteria, :frequency)"
                ),
                dict(id=rule_id, name=rule_id.title(), source=source_entity, target=target_entity,
                     criteria=entry_criteria, frequency=frequency),
            )
            for source_field, target_field in (ACCOUNT_MAPPINGS if mappings is None else mappings).items():
                conn.execute(
                    text(
                        "INSERT INTO snapshot_field_mapping (rule_id, source_field, target_field) "
                        "VALUES (:rule_id, :source, :target)"
                    ),
                    dict(rule_id=rule_id, source=source_field, target=target_field),
                )
    return _add


@pytest.fixture
def settings(db_url) -> _Settings:
    return _Settings(
        database=DatabaseSettings(url=db_url, max_retries=0),
        snapshot=SnapshotSettings(),
    )


@pytest.fixture
def backend(settings):
    backend = create_sql_backend(settings)
    yield backend
    backend.dispose()


@pytest.fixture
def metrics() -> MetricsCollector:
    return MetricsCollector(service_name="snapflow-tests")
