"""Pydantic schemas for Condition Records."""

from condition_records.schemas.base import ClinicalStatus, VerificationStatus
from condition_records.schemas.condition import CodedOrFreeText, Condition

__all__ = [
    # Enums
    "ClinicalStatus",
    "VerificationStatus",
    # Condition
    "CodedOrFreeText",
    "Condition",
]
