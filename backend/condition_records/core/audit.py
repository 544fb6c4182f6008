"""Audit logging for condition record operations.

Every write to a condition (create, update, void, unvoid, purge) emits
one audit event on the dedicated ``audit`` logger. The event carries
the acting user and the patient the record belongs to.

This audit log should be persisted to a secure, append-only store
in production for compliance purposes.
"""

import logging
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

# Separate audit logger for security-critical events
audit_logger = logging.getLogger("audit")


class AuditAction(str, Enum):
    """Types of auditable actions."""

    CREATE = "create"
    UPDATE = "update"
    VOID = "void"
    UNVOID = "unvoid"
    PURGE = "purge"


class AuditEvent(BaseModel):
    """Audit event record.

    Contains all relevant context for an auditable action.
    """

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    action: AuditAction = Field(..., description="Type of action performed")
    resource_type: str = Field(..., description="Type of resource accessed")
    resource_id: int | None = Field(None, description="Surrogate id of the resource")
    resource_uuid: str | None = Field(None, description="UUID of the resource")
    patient_id: int | None = Field(None, description="Patient ID if applicable")
    user_id: int | None = Field(None, description="User who performed action")
    details: dict | None = Field(None, description="Additional context")
    success: bool = Field(True, description="Whether action succeeded")


def log_audit(
    action: AuditAction,
    resource_type: str,
    resource_id: int | None = None,
    resource_uuid: str | None = None,
    patient_id: int | None = None,
    user_id: int | None = None,
    details: dict | None = None,
    success: bool = True,
) -> AuditEvent:
    """Log an audit event.

    Args:
        action: Type of action being audited
        resource_type: The type of resource being accessed
        resource_id: Surrogate id of the resource
        resource_uuid: UUID of the resource
        patient_id: Patient the record belongs to
        user_id: User performing the action
        details: Additional context
        success: Whether the action succeeded

    Returns:
        The created AuditEvent
    """
    event = AuditEvent(
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        resource_uuid=resource_uuid,
        patient_id=patient_id,
        user_id=user_id,
        details=details,
        success=success,
    )

    log_level = logging.INFO if success else logging.WARNING
    audit_logger.log(
        log_level,
        f"AUDIT: {action.value} {resource_type}"
        f"{f'/{resource_id}' if resource_id is not None else ''}"
        f"{f' patient={patient_id}' if patient_id is not None else ''}"
        f"{f' user={user_id}' if user_id is not None else ''}"
        f" success={success}",
        extra={"audit_event": event.model_dump()},
    )

    return event


def log_condition_change(
    action: AuditAction,
    condition,
    user_id: int | None = None,
    details: dict | None = None,
) -> AuditEvent:
    """Log a write to a condition record.

    Convenience wrapper that pulls identifiers off the condition.

    Args:
        action: Type of write
        condition: The condition being written (ORM instance)
        user_id: User performing the write
        details: Additional context

    Returns:
        The created AuditEvent
    """
    return log_audit(
        action=action,
        resource_type="condition",
        resource_id=condition.id,
        resource_uuid=condition.uuid,
        patient_id=condition.patient_id,
        user_id=user_id,
        details=details,
    )
