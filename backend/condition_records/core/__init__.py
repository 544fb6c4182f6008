"""Core application configuration and utilities."""

from condition_records.core.audit import AuditAction, AuditEvent, log_audit, log_condition_change
from condition_records.core.config import settings
from condition_records.core.context import ActorContext
from condition_records.core.database import Base, get_session, init_db

__all__ = [
    # Config
    "settings",
    # Database
    "Base",
    "get_session",
    "init_db",
    # Actor
    "ActorContext",
    # Audit
    "AuditAction",
    "AuditEvent",
    "log_audit",
    "log_condition_change",
]
