"""Pytest configuration and shared fixtures.

This module provides centralized test fixtures for:
- In-memory SQLite sessions with the condition tables
- The database-backed condition service
- A seeded set of conditions for two patients
"""

from collections.abc import Iterator
from datetime import UTC, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from condition_records.core.context import ActorContext
from condition_records.core.database import Base
from condition_records.models import Condition
from condition_records.schemas.base import ClinicalStatus, VerificationStatus
from condition_records.schemas.condition import CodedOrFreeText
from condition_records.services.condition_service_db import DatabaseConditionService

PATIENT_ID = 2
OTHER_PATIENT_ID = 7
ENCOUNTER_ID = 2039

INACTIVE_UUID = "2cc6880e-2c46-15e4-9038-a6c5e4d22fb7"
ACTIVE_UUID = "2cc6880e-2c46-11e4-9138-a6c5e4d20fb7"
ENCOUNTER_OLDER_UUID = "054a376e-0bf6-4388-aa31-9dac63f8e315"
OTHER_ACTIVE_UUID = "2cb6880e-2cd6-11e4-9138-a6c5e4d20fb7"
ENCOUNTER_NEWER_UUID = "9757313d-92ef-4f51-a002-72a0493c5078"


@pytest.fixture
def db_session() -> Iterator[Session]:
    """Create a fresh in-memory database session with the condition tables."""
    engine = create_engine("sqlite:///:memory:", echo=False, future=True)
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def condition_service(db_session: Session) -> DatabaseConditionService:
    """Create a DatabaseConditionService."""
    return DatabaseConditionService(db_session)


@pytest.fixture
def actor() -> ActorContext:
    """The acting user for writes."""
    return ActorContext(user_id=1)


@pytest.fixture
def seeded_conditions(
    condition_service: DatabaseConditionService, actor: ActorContext
) -> dict[str, Condition]:
    """Seed five conditions, keyed by uuid.

    Patient 2 has one inactive/provisional and one active/confirmed
    condition. Patient 7 has three, two of them recorded during
    encounter 2039. Ids are assigned 1..5 in the order below.
    """
    rows = [
        Condition(
            uuid=INACTIVE_UUID,
            patient_id=PATIENT_ID,
            coding=CodedOrFreeText(non_coded="Seasonal allergies"),
            clinical_status=ClinicalStatus.INACTIVE,
            verification_status=VerificationStatus.PROVISIONAL,
            date_created=datetime(2015, 1, 1, tzinfo=UTC),
        ),
        Condition(
            uuid=ACTIVE_UUID,
            patient_id=PATIENT_ID,
            coding=CodedOrFreeText(coded=5497),
            clinical_status=ClinicalStatus.ACTIVE,
            verification_status=VerificationStatus.CONFIRMED,
            date_created=datetime(2015, 6, 1, tzinfo=UTC),
        ),
        Condition(
            uuid=ENCOUNTER_OLDER_UUID,
            patient_id=OTHER_PATIENT_ID,
            encounter_id=ENCOUNTER_ID,
            coding=CodedOrFreeText(non_coded="Headache"),
            clinical_status=ClinicalStatus.INACTIVE,
            date_created=datetime(2016, 1, 1, tzinfo=UTC),
        ),
        Condition(
            uuid=OTHER_ACTIVE_UUID,
            patient_id=OTHER_PATIENT_ID,
            coding=CodedOrFreeText(coded=3, specific_name=2),
            clinical_status=ClinicalStatus.ACTIVE,
            verification_status=VerificationStatus.CONFIRMED,
            date_created=datetime(2016, 3, 1, tzinfo=UTC),
        ),
        Condition(
            uuid=ENCOUNTER_NEWER_UUID,
            patient_id=OTHER_PATIENT_ID,
            encounter_id=ENCOUNTER_ID,
            coding=CodedOrFreeText(non_coded="Fever"),
            clinical_status=ClinicalStatus.ACTIVE,
            date_created=datetime(2016, 5, 1, tzinfo=UTC),
        ),
    ]
    return {row.uuid: condition_service.save_condition(row, actor) for row in rows}
