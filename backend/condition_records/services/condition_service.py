"""Condition service interface and storage-independent rules.

Defines the operations every condition manager provides (save, lookup,
listing, void/unvoid, purge) and implements the rules that do not
depend on storage: validation, form field encoding and the void state
transitions.
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime

from condition_records.core.config import settings
from condition_records.core.context import ActorContext
from condition_records.models.condition import (
    FORM_NAMESPACE_PATH_SEPARATOR,
    UUID_MAX_LENGTH,
    Condition,
    decode_form_field,
    encode_form_field,
)

VOID_AUDIT_FIELDS = ("voided", "void_reason", "date_voided", "voided_by")


class ConditionValidationError(ValueError):
    """Raised when a condition fails validation."""

    pass


class ConditionNotFoundError(ValueError):
    """Raised when an update or purge targets a condition that does not exist."""

    pass


class DuplicateConditionError(ValueError):
    """Raised when a new condition reuses an existing uuid."""

    pass


class InvalidStateTransitionError(ValueError):
    """Raised when voiding a voided condition or unvoiding a non-voided one."""

    pass


class ConditionServiceInterface(ABC):
    """Interface for condition record managers.

    Example usage:
        service = DatabaseConditionService(session)
        condition = service.save_condition(Condition(patient_id=2), actor)
        service.void_condition(condition, "Entered in error", actor)
    """

    @abstractmethod
    def save_condition(self, condition: Condition, actor: ActorContext | None = None) -> Condition:
        """Insert a new condition or update an existing one.

        Args:
            condition: The condition to persist. Inserted when it has no id.
            actor: User making the change, recorded as creator/changed_by.

        Returns:
            The persisted condition with its id populated.
        """
        pass  # pragma: no cover

    @abstractmethod
    def get_condition(self, condition_id: int) -> Condition | None:
        """Retrieve a condition by its surrogate id.

        Returns:
            The condition if found, None otherwise.
        """
        pass  # pragma: no cover

    @abstractmethod
    def get_condition_by_uuid(self, uuid: str) -> Condition | None:
        """Retrieve a condition by uuid.

        Returns:
            The condition if found, None otherwise.
        """
        pass  # pragma: no cover

    @abstractmethod
    def get_active_conditions(self, patient_id: int) -> list[Condition]:
        """Get the patient's active, non-voided conditions."""
        pass  # pragma: no cover

    @abstractmethod
    def get_all_conditions(self, patient_id: int) -> list[Condition]:
        """Get every condition of the patient, voided or not."""
        pass  # pragma: no cover

    @abstractmethod
    def get_conditions_by_encounter(self, encounter_id: int) -> list[Condition]:
        """Get every condition recorded during an encounter."""
        pass  # pragma: no cover

    @abstractmethod
    def void_condition(self, condition: Condition, reason: str, actor: ActorContext) -> Condition:
        """Soft-delete a condition, recording who, when and why."""
        pass  # pragma: no cover

    @abstractmethod
    def unvoid_condition(self, condition: Condition) -> Condition:
        """Restore a voided condition."""
        pass  # pragma: no cover

    @abstractmethod
    def purge_condition(self, condition: Condition) -> None:
        """Permanently delete a condition."""
        pass  # pragma: no cover


class BaseConditionService(ConditionServiceInterface):
    """Base implementation with the storage-independent rules.

    Subclasses provide persistence and call into these helpers.
    """

    @staticmethod
    def encode_form_field(namespace: str | None, path: str | None) -> str | None:
        """Combine namespace and path as ``namespace^path``."""
        return encode_form_field(namespace, path)

    @staticmethod
    def decode_form_field(value: str | None) -> tuple[str | None, str | None]:
        """Split a combined form field into namespace and path."""
        return decode_form_field(value)

    def validate(self, condition: Condition) -> None:
        """Check a condition before it is written.

        Raises:
            ConditionValidationError: If any rule is violated.
        """
        if condition.patient_id is None:
            raise ConditionValidationError("Condition requires a patient")

        if condition.clinical_status is None:
            raise ConditionValidationError("Condition requires a clinical status")

        if condition.uuid is not None and len(condition.uuid) > UUID_MAX_LENGTH:
            raise ConditionValidationError(f"Condition uuid exceeds {UUID_MAX_LENGTH} characters")

        self._validate_free_text("Non-coded condition", condition.condition_non_coded)
        self._validate_free_text("End reason", condition.end_reason)
        self._validate_form_field(condition.form_namespace, condition.form_path)

        if condition.onset_date and condition.end_date:
            if as_utc(condition.end_date) < as_utc(condition.onset_date):
                raise ConditionValidationError("Condition end date cannot be before its onset date")

    def _validate_free_text(self, label: str, value: str | None) -> None:
        if value is not None and len(value) > settings.free_text_max_length:
            raise ConditionValidationError(
                f"{label} exceeds {settings.free_text_max_length} characters"
            )

    def _validate_form_field(self, namespace: str | None, path: str | None) -> None:
        for part in (namespace, path):
            if part and FORM_NAMESPACE_PATH_SEPARATOR in part:
                raise ConditionValidationError(
                    f"Form namespace and path must not contain '{FORM_NAMESPACE_PATH_SEPARATOR}'"
                )

        combined = encode_form_field(namespace, path) or namespace or path or ""
        if len(combined) > settings.form_namespace_path_max_length:
            raise ConditionValidationError(
                f"Form namespace and path exceed {settings.form_namespace_path_max_length} characters"
            )

    def apply_void(self, condition: Condition, reason: str, actor: ActorContext) -> None:
        """Set the void audit fields on a condition.

        Raises:
            ConditionValidationError: If the reason is blank or too long.
            InvalidStateTransitionError: If the condition is already voided.
        """
        if not reason or not reason.strip():
            raise ConditionValidationError("A void reason is required")
        self._validate_free_text("Void reason", reason)
        if condition.voided:
            raise InvalidStateTransitionError(f"Condition {condition.uuid} is already voided")

        condition.voided = True
        condition.void_reason = reason
        condition.date_voided = datetime.now(UTC)
        condition.voided_by = actor.user_id

    def apply_unvoid(self, condition: Condition) -> None:
        """Clear the void audit fields on a condition.

        Raises:
            InvalidStateTransitionError: If the condition is not voided.
        """
        if not condition.voided:
            raise InvalidStateTransitionError(f"Condition {condition.uuid} is not voided")

        condition.voided = False
        condition.void_reason = None
        condition.date_voided = None
        condition.voided_by = None


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    # SQLite hands back naive datetimes for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
