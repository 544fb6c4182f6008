"""Create conditions table.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "conditions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(38), nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("encounter_id", sa.Integer(), nullable=True),
        sa.Column("condition_coded", sa.Integer(), nullable=True),
        sa.Column("condition_coded_name", sa.Integer(), nullable=True),
        sa.Column("condition_non_coded", sa.String(255), nullable=True),
        sa.Column(
            "clinical_status",
            sa.Enum(
                "active",
                "inactive",
                "history_of",
                name="condition_clinical_status",
                create_constraint=True,
            ),
            nullable=False,
            server_default="active",
        ),
        sa.Column(
            "verification_status",
            sa.Enum(
                "provisional",
                "confirmed",
                name="condition_verification_status",
                create_constraint=True,
            ),
            nullable=True,
        ),
        sa.Column("onset_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_reason", sa.String(255), nullable=True),
        sa.Column("additional_detail", sa.Text(), nullable=True),
        sa.Column("form_namespace", sa.String(255), nullable=True),
        sa.Column("form_path", sa.String(255), nullable=True),
        sa.Column("creator", sa.Integer(), nullable=True),
        sa.Column(
            "date_created", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column("changed_by", sa.Integer(), nullable=True),
        sa.Column("date_changed", sa.DateTime(timezone=True), nullable=True),
        sa.Column("voided", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("void_reason", sa.String(255), nullable=True),
        sa.Column("date_voided", sa.DateTime(timezone=True), nullable=True),
        sa.Column("voided_by", sa.Integer(), nullable=True),
        sa.UniqueConstraint("uuid", name="uq_conditions_uuid"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_conditions_patient_id", "conditions", ["patient_id"])
    op.create_index("ix_conditions_encounter_id", "conditions", ["encounter_id"])
    op.create_index("ix_conditions_clinical_status", "conditions", ["clinical_status"])
    op.create_index("ix_conditions_voided", "conditions", ["voided"])
    op.create_index("idx_condition_patient_status", "conditions", ["patient_id", "clinical_status"])


def downgrade() -> None:
    op.drop_table("conditions")

    # Drop enum types
    if op.get_bind().dialect.name != "postgresql":
        return
    op.execute("DROP TYPE IF EXISTS condition_verification_status")
    op.execute("DROP TYPE IF EXISTS condition_clinical_status")
