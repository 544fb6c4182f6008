"""Condition schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from condition_records.schemas.base import ClinicalStatus, VerificationStatus


class CodedOrFreeText(BaseModel):
    """A diagnosis expressed as a coded concept or as free text.

    A value may carry a coded concept, optionally narrowed to one of
    its names, or only free text when no concept fits.
    """

    model_config = ConfigDict(frozen=True)

    coded: int | None = Field(None, description="Concept ID of the coded diagnosis")
    specific_name: int | None = Field(None, description="Concept name ID within the coded concept")
    non_coded: str | None = Field(None, description="Free-text diagnosis")

    @property
    def is_empty(self) -> bool:
        """Check if neither a code nor free text is present."""
        return self.coded is None and self.specific_name is None and not self.non_coded


class Condition(BaseModel):
    """Schema for a persisted condition record."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Surrogate condition identifier")
    uuid: str = Field(..., description="Globally unique identifier")
    patient_id: int = Field(..., description="Owning patient")
    encounter_id: int | None = Field(None, description="Encounter the condition was recorded in")
    coding: CodedOrFreeText = Field(default_factory=CodedOrFreeText, description="Diagnosis")
    clinical_status: ClinicalStatus = Field(..., description="Clinical status")
    verification_status: VerificationStatus | None = Field(None, description="Verification status")
    onset_date: datetime | None = Field(None, description="When the condition began")
    end_date: datetime | None = Field(None, description="When the condition ended")
    end_reason: str | None = Field(None, description="Why the condition ended")
    additional_detail: str | None = Field(None, description="Free-text detail")
    form_namespace_and_path: str | None = Field(None, description="Originating form field")
    date_created: datetime = Field(..., description="When the record was created")
    voided: bool = Field(False, description="Whether the record is voided")
    void_reason: str | None = Field(None, description="Why the record was voided")
    date_voided: datetime | None = Field(None, description="When the record was voided")
    voided_by: int | None = Field(None, description="User who voided the record")

    @property
    def is_active(self) -> bool:
        """Check if this condition counts as an active problem."""
        return self.clinical_status == ClinicalStatus.ACTIVE and not self.voided
