"""SQLAlchemy model for Condition."""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Enum, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from condition_records.core.database import Base
from condition_records.schemas.base import ClinicalStatus, VerificationStatus
from condition_records.schemas.condition import CodedOrFreeText

FORM_NAMESPACE_PATH_SEPARATOR = "^"
UUID_MAX_LENGTH = 38


def encode_form_field(namespace: str | None, path: str | None) -> str | None:
    """Join a form namespace and path into ``namespace^path``.

    Returns None unless both components are non-blank.
    """
    if namespace and namespace.strip() and path and path.strip():
        return f"{namespace}{FORM_NAMESPACE_PATH_SEPARATOR}{path}"
    return None


def decode_form_field(value: str | None) -> tuple[str | None, str | None]:
    """Split ``namespace^path`` back into its components."""
    if not value:
        return None, None
    namespace, sep, path = value.partition(FORM_NAMESPACE_PATH_SEPARATOR)
    if not sep:
        return namespace, None
    return namespace or None, path or None


class Condition(Base):
    """A clinical problem or diagnosis recorded for a patient.

    Conditions are soft-deleted by voiding, which keeps the row and
    records who voided it, when and why. Purging removes the row.

    The void audit fields (voided, void_reason, date_voided, voided_by)
    are only written by the void/unvoid operations of the service.
    """

    __tablename__ = "conditions"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    uuid: Mapped[str] = mapped_column(
        String(UUID_MAX_LENGTH),
        nullable=False,
        unique=True,
        default=lambda: str(uuid4()),
    )

    # References (resolved outside this package)
    patient_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )
    encounter_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        index=True,
    )

    # Diagnosis (coded or free text)
    condition_coded: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )
    condition_coded_name: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )
    condition_non_coded: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    # Status
    clinical_status: Mapped[ClinicalStatus] = mapped_column(
        Enum(ClinicalStatus, name="condition_clinical_status", create_constraint=True, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=ClinicalStatus.ACTIVE,
        index=True,
    )
    verification_status: Mapped[VerificationStatus | None] = mapped_column(
        Enum(VerificationStatus, name="condition_verification_status", create_constraint=True, values_callable=lambda x: [e.value for e in x]),
        nullable=True,
    )

    # Course
    onset_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    end_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    end_reason: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    additional_detail: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    # Originating form field
    form_namespace: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    form_path: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    # Change tracking
    creator: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )
    date_created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    changed_by: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )
    date_changed: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Void audit
    voided: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
    )
    void_reason: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    date_voided: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    voided_by: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )

    __table_args__ = (
        Index("idx_condition_patient_status", "patient_id", "clinical_status"),
        {"sqlite_autoincrement": True},
    )

    def __init__(self, **kwargs) -> None:
        coding = kwargs.pop("coding", None)
        kwargs.setdefault("clinical_status", ClinicalStatus.ACTIVE)
        kwargs.setdefault("voided", False)
        super().__init__(**kwargs)
        if coding is not None:
            self.coding = coding

    def __repr__(self) -> str:
        return f"<Condition(id={self.id}, uuid={self.uuid}, patient={self.patient_id}, status={self.clinical_status}, voided={self.voided})>"

    @property
    def coding(self) -> CodedOrFreeText:
        """The diagnosis as a value object."""
        return CodedOrFreeText(
            coded=self.condition_coded,
            specific_name=self.condition_coded_name,
            non_coded=self.condition_non_coded,
        )

    @coding.setter
    def coding(self, value: CodedOrFreeText | None) -> None:
        value = value or CodedOrFreeText()
        self.condition_coded = value.coded
        self.condition_coded_name = value.specific_name
        self.condition_non_coded = value.non_coded

    @property
    def form_namespace_and_path(self) -> str | None:
        """Combined form field, ``namespace^path``, when both parts are set."""
        return encode_form_field(self.form_namespace, self.form_path)

    def set_form_field(self, namespace: str | None, path: str | None) -> None:
        """Record the form field this condition was captured from."""
        self.form_namespace = namespace if namespace and namespace.strip() else None
        self.form_path = path if path and path.strip() else None

    @property
    def is_active(self) -> bool:
        """Check if this condition counts as an active problem."""
        return bool(self.clinical_status == ClinicalStatus.ACTIVE and not self.voided)
