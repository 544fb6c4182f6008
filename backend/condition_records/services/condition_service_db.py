"""Database-backed condition service.

Implements condition persistence, lookup and lifecycle operations
on a caller-owned SQLAlchemy session. The service flushes but never
commits; the caller owns the transaction.

IMPORTANT: save_condition never changes the void audit fields. They
are only written by void_condition and unvoid_condition, which discard
any other unflushed edits to the condition before acting.
"""

import logging
from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import Row, Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from condition_records.core.audit import AuditAction, log_condition_change
from condition_records.core.context import ActorContext
from condition_records.models.condition import UUID_MAX_LENGTH, Condition
from condition_records.schemas.base import ClinicalStatus
from condition_records.services.condition_service import (
    VOID_AUDIT_FIELDS,
    BaseConditionService,
    ConditionNotFoundError,
    DuplicateConditionError,
    as_utc,
)

logger = logging.getLogger(__name__)

# Fields an update may change
MUTABLE_FIELDS = (
    "encounter_id",
    "condition_coded",
    "condition_coded_name",
    "condition_non_coded",
    "clinical_status",
    "verification_status",
    "onset_date",
    "end_date",
    "end_reason",
    "additional_detail",
    "form_namespace",
    "form_path",
)

# Fields an update must leave as persisted
PROTECTED_FIELDS = ("uuid", "patient_id", "creator", "date_created", *VOID_AUDIT_FIELDS)

# Fields void, unvoid and purge restore before acting
STORED_FIELDS = (*MUTABLE_FIELDS, *PROTECTED_FIELDS, "changed_by", "date_changed")


class DatabaseConditionService(BaseConditionService):
    """Database-backed condition service.

    Usage:
        with get_session() as session:
            service = DatabaseConditionService(session)
            condition = service.save_condition(
                Condition(patient_id=2, clinical_status=ClinicalStatus.ACTIVE),
                actor=ActorContext(user_id=1),
            )
            active = service.get_active_conditions(2)
    """

    def __init__(self, session: Session) -> None:
        """Initialize the database condition service.

        Args:
            session: SQLAlchemy database session.
        """
        self._session = session

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def save_condition(self, condition: Condition, actor: ActorContext | None = None) -> Condition:
        """Insert a new condition or update an existing one.

        Raises:
            ConditionValidationError: If the condition fails validation.
            DuplicateConditionError: If a new condition reuses an existing uuid.
            ConditionNotFoundError: If an update targets a missing condition.
        """
        self.validate(condition)

        if condition.id is None:
            return self._insert(condition, actor)
        return self._update(condition, actor)

    def _insert(self, condition: Condition, actor: ActorContext | None) -> Condition:
        if condition.uuid is None:
            condition.uuid = str(uuid4())
        else:
            with self._session.no_autoflush:
                existing = self._find_by_uuid(condition.uuid)
            if existing is not None and existing is not condition:
                raise DuplicateConditionError(f"Condition with uuid {condition.uuid} already exists")

        # New conditions always start unvoided
        condition.voided = False
        condition.void_reason = None
        condition.date_voided = None
        condition.voided_by = None

        condition.creator = actor.user_id if actor else None
        if condition.date_created is None:
            condition.date_created = datetime.now(UTC)

        self._session.add(condition)
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise DuplicateConditionError(f"Condition with uuid {condition.uuid} already exists") from exc

        logger.info(f"Created condition id={condition.id} patient_id={condition.patient_id}")
        log_condition_change(AuditAction.CREATE, condition, user_id=condition.creator)
        return condition

    def _update(self, condition: Condition, actor: ActorContext | None) -> Condition:
        with self._session.no_autoflush:
            persisted_values = self._stored_values(condition.id, PROTECTED_FIELDS)
            if persisted_values is None:
                raise ConditionNotFoundError(f"Condition {condition.id} not found")

            existing = self._session.get(Condition, condition.id)

        if existing is not condition:
            for name in MUTABLE_FIELDS:
                setattr(existing, name, getattr(condition, name))

        # Revert anything outside the mutable set to its stored value
        self._revert(existing, PROTECTED_FIELDS, persisted_values)

        existing.changed_by = actor.user_id if actor else None
        existing.date_changed = datetime.now(UTC)
        self._session.flush()

        logger.info(f"Updated condition id={existing.id}")
        log_condition_change(AuditAction.UPDATE, existing, user_id=existing.changed_by)
        return existing

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_condition(self, condition_id: int) -> Condition | None:
        """Retrieve a condition by its surrogate id."""
        if condition_id is None:
            return None
        return self._session.get(Condition, condition_id)

    def get_condition_by_uuid(self, uuid: str) -> Condition | None:
        """Retrieve a condition by uuid.

        Any string that matches no condition, malformed or not,
        returns None.
        """
        if not isinstance(uuid, str) or not uuid or len(uuid) > UUID_MAX_LENGTH:
            return None
        return self._find_by_uuid(uuid)

    def _find_by_uuid(self, uuid: str) -> Condition | None:
        stmt = select(Condition).where(Condition.uuid == uuid)
        return self._session.execute(stmt).scalar_one_or_none()

    def get_active_conditions(self, patient_id: int) -> list[Condition]:
        """Get the patient's active, non-voided conditions, newest first."""
        stmt = (
            select(Condition)
            .where(Condition.patient_id == patient_id)
            .where(Condition.clinical_status == ClinicalStatus.ACTIVE)
            .where(Condition.voided.is_(False))
        )
        return list(self._session.execute(self._apply_ordering(stmt)).scalars().all())

    def get_all_conditions(self, patient_id: int) -> list[Condition]:
        """Get every condition of the patient, voided or not, newest first."""
        stmt = select(Condition).where(Condition.patient_id == patient_id)
        return list(self._session.execute(self._apply_ordering(stmt)).scalars().all())

    def get_conditions_by_encounter(self, encounter_id: int) -> list[Condition]:
        """Get every condition recorded during an encounter, newest first."""
        stmt = select(Condition).where(Condition.encounter_id == encounter_id)
        return list(self._session.execute(self._apply_ordering(stmt)).scalars().all())

    def _apply_ordering(self, query: Select[tuple[Condition]]) -> Select[tuple[Condition]]:
        """Apply standard ordering (newest first, id breaks ties)."""
        return query.order_by(Condition.date_created.desc(), Condition.id.desc())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def void_condition(self, condition: Condition, reason: str, actor: ActorContext) -> Condition:
        """Soft-delete a condition.

        Clinical and verification status are left unchanged. Unflushed
        edits to the condition are discarded first.

        Raises:
            ConditionNotFoundError: If the condition is not persisted.
            ConditionValidationError: If the reason is blank or too long.
            InvalidStateTransitionError: If the condition is already voided.
        """
        persisted = self._require_persisted(condition)
        self.apply_void(persisted, reason, actor)
        self._session.flush()

        logger.info(f"Voided condition id={persisted.id}")
        log_condition_change(
            AuditAction.VOID,
            persisted,
            user_id=actor.user_id,
            details={"reason": reason},
        )
        return persisted

    def unvoid_condition(self, condition: Condition) -> Condition:
        """Restore a voided condition.

        Raises:
            ConditionNotFoundError: If the condition is not persisted.
            InvalidStateTransitionError: If the condition is not voided.
        """
        persisted = self._require_persisted(condition)
        voided_by = persisted.voided_by
        self.apply_unvoid(persisted)
        self._session.flush()

        logger.info(f"Unvoided condition id={persisted.id}")
        log_condition_change(
            AuditAction.UNVOID,
            persisted,
            details={"previously_voided_by": voided_by},
        )
        return persisted

    def purge_condition(self, condition: Condition) -> None:
        """Permanently delete a condition.

        Raises:
            ConditionNotFoundError: If the condition is not persisted.
        """
        persisted = self._require_persisted(condition)
        self._session.delete(persisted)
        self._session.flush()

        logger.info(f"Purged condition id={persisted.id}")
        log_condition_change(AuditAction.PURGE, persisted)

    def _require_persisted(self, condition: Condition) -> Condition:
        """Return the session's copy of a stored condition with unflushed edits discarded."""
        if condition is None:
            raise ConditionNotFoundError("No condition given")

        with self._session.no_autoflush:
            stored = None
            if condition.id is not None:
                stored = self._stored_values(condition.id, STORED_FIELDS)
            if stored is None:
                raise ConditionNotFoundError(f"Condition {condition.id} not found")

            persisted = self._session.get(Condition, condition.id)

        self._revert(persisted, STORED_FIELDS, stored)
        return persisted

    def _stored_values(self, condition_id: int, fields: tuple[str, ...]) -> Row | None:
        stmt = select(*(getattr(Condition, name) for name in fields)).where(
            Condition.id == condition_id
        )
        return self._session.execute(stmt).one_or_none()

    def _revert(self, condition: Condition, fields: tuple[str, ...], stored: Row) -> None:
        for name, value in zip(fields, stored, strict=True):
            if not _same_value(getattr(condition, name), value):
                logger.debug(f"Ignoring change to {name} on condition id={condition.id}")
                setattr(condition, name, value)


def _same_value(current: object, stored: object) -> bool:
    # SQLite returns naive datetimes for timezone-aware columns
    if isinstance(current, datetime) and isinstance(stored, datetime):
        return as_utc(current) == as_utc(stored)
    return current == stored
