"""Tests for the Alembic migrations.

Runs each migration against an in-memory SQLite database and checks
the result matches the ORM model.
"""

import importlib.util
from pathlib import Path
from types import ModuleType

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import IntegrityError

from condition_records.models import Condition

VERSIONS_DIR = Path(__file__).parent.parent / "alembic" / "versions"


def load_migration(filename: str) -> ModuleType:
    """Load a migration module from its file."""
    spec = importlib.util.spec_from_file_location(f"migration_{filename[:3]}", VERSIONS_DIR / filename)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def migration() -> ModuleType:
    """The conditions table migration."""
    return load_migration("001_create_conditions_table.py")


class TestCreateConditionsTable:
    """Tests for migration 001."""

    def test_revision_identifiers(self, migration: ModuleType) -> None:
        """Test the migration is the first revision."""
        assert migration.revision == "001"
        assert migration.down_revision is None

    def test_upgrade_matches_model(self, migration: ModuleType) -> None:
        """Test upgrade creates every column the model declares."""
        engine = create_engine("sqlite:///:memory:")
        with engine.begin() as conn:
            with Operations.context(MigrationContext.configure(conn)):
                migration.upgrade()

            inspector = inspect(conn)
            columns = {c["name"] for c in inspector.get_columns("conditions")}
            unique = inspector.get_unique_constraints("conditions")
            indexes = {i["name"] for i in inspector.get_indexes("conditions")}

        assert columns == set(Condition.__table__.c.keys())
        assert any(u["column_names"] == ["uuid"] for u in unique)
        assert "ix_conditions_patient_id" in indexes
        assert "ix_conditions_encounter_id" in indexes
        engine.dispose()

    def test_upgrade_constrains_status_values(self, migration: ModuleType) -> None:
        """Test the migrated table rejects unknown clinical status values, like the model."""
        engine = create_engine("sqlite:///:memory:")
        with engine.begin() as conn:
            with Operations.context(MigrationContext.configure(conn)):
                migration.upgrade()

            with pytest.raises(IntegrityError):
                conn.execute(
                    text(
                        "INSERT INTO conditions (uuid, patient_id, clinical_status) "
                        "VALUES ('bad-status', 2, 'unknown')"
                    )
                )
        engine.dispose()

    def test_downgrade_drops_table(self, migration: ModuleType) -> None:
        """Test downgrade removes the conditions table."""
        engine = create_engine("sqlite:///:memory:")
        with engine.begin() as conn:
            with Operations.context(MigrationContext.configure(conn)):
                migration.upgrade()
                migration.downgrade()
            assert "conditions" not in inspect(conn).get_table_names()
        engine.dispose()
