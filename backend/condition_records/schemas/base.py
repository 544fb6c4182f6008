"""Base schemas and enums for Condition Records."""

from enum import Enum


class ClinicalStatus(str, Enum):
    """Clinical status of a condition."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    HISTORY_OF = "history_of"


class VerificationStatus(str, Enum):
    """How certain the diagnosis is."""

    PROVISIONAL = "provisional"
    CONFIRMED = "confirmed"
