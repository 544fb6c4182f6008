"""Condition services."""

from condition_records.services.condition_service import (
    BaseConditionService,
    ConditionNotFoundError,
    ConditionServiceInterface,
    ConditionValidationError,
    DuplicateConditionError,
    InvalidStateTransitionError,
)
from condition_records.services.condition_service_db import DatabaseConditionService

__all__ = [
    "BaseConditionService",
    "ConditionServiceInterface",
    "DatabaseConditionService",
    # Errors
    "ConditionNotFoundError",
    "ConditionValidationError",
    "DuplicateConditionError",
    "InvalidStateTransitionError",
]
