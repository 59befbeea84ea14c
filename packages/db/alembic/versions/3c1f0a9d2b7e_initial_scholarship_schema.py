"""initial scholarship schema

Revision ID: 3c1f0a9d2b7e
Revises:
Create Date: 2026-10-18 09:12:31.402117

"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "3c1f0a9d2b7e"
down_revision = None
branch_labels = None
depends_on = None

_LIFECYCLE_STATES = (
    "DRAFT", "ACTIVE", "OPEN", "CLOSED", "SUSPENDED", "INACTIVE",
    "READY_FOR_LAUNCH", "REVIEWING", "COMPLETED", "CANCELLED",
)
_APPLICATION_STATUSES = ("DRAFT", "SUBMITTED", "UNDER_REVIEW", "APPROVED", "REJECTED", "WITHDRAWN")
_ACTIVE_APPLICATION_WHERE = sa.text("status NOT IN ('WITHDRAWN', 'REJECTED')")


def _timestamps(with_updated: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]
    if with_updated:
        columns.append(
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)
        )
    return columns


def upgrade() -> None:
    op.create_table(
        "sponsors",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "type",
            sa.Enum("INDIVIDUAL", "ORGANIZATION", name="sponsor_type", native_enum=False),
            nullable=False,
        ),
        sa.Column("contact_person", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_sponsors_name"), "sponsors", ["name"], unique=False)

    op.create_table(
        "programs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sponsor_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("default_amount", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("default_slots", sa.Integer(), nullable=True),
        sa.Column("start_year", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["sponsor_id"], ["sponsors.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("sponsor_id", "name", name="uq_program_sponsor_name"),
    )
    op.create_index(op.f("ix_programs_sponsor_id"), "programs", ["sponsor_id"], unique=False)

    op.create_table(
        "cycles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("program_id", sa.Integer(), nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("total_slots", sa.Integer(), nullable=False),
        sa.Column("available_slots", sa.Integer(), nullable=False),
        sa.Column("application_start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("application_end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_months", sa.Integer(), nullable=False),
        sa.Column(
            "disbursement_schedule",
            sa.Enum(
                "SEMESTER", "QUARTERLY", "ANNUAL", "LUMP_SUM",
                name="disbursement_schedule", native_enum=False,
            ),
            nullable=False,
        ),
        sa.Column(
            "persisted_status",
            sa.Enum(*_LIFECYCLE_STATES, name="cycle_lifecycle_state", native_enum=False),
            nullable=False,
        ),
        sa.Column("scholarship_type", sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "total_slots >= 0 AND available_slots >= 0 AND available_slots <= total_slots",
            name="ck_cycle_slot_bounds",
        ),
        sa.CheckConstraint(
            "application_start_date < application_end_date",
            name="ck_cycle_application_window",
        ),
        sa.ForeignKeyConstraint(["program_id"], ["programs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_cycles_program_id"), "cycles", ["program_id"], unique=False)
    op.create_index(op.f("ix_cycles_persisted_status"), "cycles", ["persisted_status"], unique=False)

    op.create_table(
        "cycle_criteria",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("cycle_id", sa.Integer(), nullable=False),
        sa.Column(
            "criteria_type",
            sa.Enum("GENERAL", name="criteria_type", native_enum=False),
            nullable=False,
        ),
        sa.Column("criteria_value", sa.Text(), nullable=False),
        sa.Column("is_mandatory", sa.Boolean(), nullable=False),
        *_timestamps(with_updated=False),
        sa.ForeignKeyConstraint(["cycle_id"], ["cycles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_cycle_criteria_cycle_id"), "cycle_criteria", ["cycle_id"], unique=False)

    op.create_table(
        "applications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_number", sa.String(length=32), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("cycle_id", sa.Integer(), nullable=False),
        sa.Column("motivation_letter", sa.Text(), nullable=True),
        sa.Column("additional_info", sa.JSON(), nullable=True),
        sa.Column(
            "status",
            sa.Enum(*_APPLICATION_STATUSES, name="application_status", native_enum=False),
            nullable=False,
        ),
        sa.Column("decision_notes", sa.Text(), nullable=True),
        sa.Column("decision_by", sa.String(length=255), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("decision_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["cycle_id"], ["cycles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("application_number"),
    )
    op.create_index(op.f("ix_applications_user_id"), "applications", ["user_id"], unique=False)
    op.create_index(op.f("ix_applications_cycle_id"), "applications", ["cycle_id"], unique=False)
    op.create_index(op.f("ix_applications_status"), "applications", ["status"], unique=False)
    op.create_index(
        "uq_active_application_per_applicant",
        "applications",
        ["cycle_id", "user_id"],
        unique=True,
        postgresql_where=_ACTIVE_APPLICATION_WHERE,
        sqlite_where=_ACTIVE_APPLICATION_WHERE,
    )

    op.create_table(
        "application_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("document_id", sa.String(length=255), nullable=False),
        sa.Column("is_required", sa.Boolean(), nullable=False),
        *_timestamps(with_updated=False),
        sa.ForeignKeyConstraint(["application_id"], ["applications.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("application_id", "document_id", name="uq_app_document"),
    )
    op.create_index(
        op.f("ix_application_documents_application_id"),
        "application_documents", ["application_id"], unique=False,
    )

    op.create_table(
        "application_reviews",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("reviewer_id", sa.String(length=255), nullable=False),
        sa.Column(
            "decision",
            sa.Enum(*_APPLICATION_STATUSES, name="review_decision", native_enum=False),
            nullable=False,
        ),
        sa.Column("score", sa.Integer(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        *_timestamps(with_updated=False),
        sa.CheckConstraint("score IS NULL OR (score >= 0 AND score <= 100)", name="ck_review_score"),
        sa.ForeignKeyConstraint(["application_id"], ["applications.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_application_reviews_application_id"),
        "application_reviews", ["application_id"], unique=False,
    )

    op.create_table(
        "application_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column(
            "action",
            sa.Enum(
                "CREATED", "UPDATED", "SUBMITTED", "REVIEWED", "WITHDRAWN",
                name="history_action", native_enum=False,
            ),
            nullable=False,
        ),
        sa.Column("from_status", sa.String(length=20), nullable=True),
        sa.Column("to_status", sa.String(length=20), nullable=True),
        sa.Column("performed_by", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(with_updated=False),
        sa.ForeignKeyConstraint(["application_id"], ["applications.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_application_history_application_id"),
        "application_history", ["application_id"], unique=False,
    )


def downgrade() -> None:
    op.drop_table("application_history")
    op.drop_table("application_reviews")
    op.drop_table("application_documents")
    op.drop_index("uq_active_application_per_applicant", table_name="applications")
    op.drop_table("applications")
    op.drop_table("cycle_criteria")
    op.drop_table("cycles")
    op.drop_table("programs")
    op.drop_table("sponsors")
