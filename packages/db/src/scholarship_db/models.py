# This project was developed with assistance from AI tools.
"""
Scholarship cycles -- domain models

Funding lifecycle models covering sponsors, programs, yearly cycles with
their eligibility criteria, and student applications with their documents,
reviews and history.

Ownership graph (deletes cascade downward):
    Program -> Cycle -> {Criterion, Application -> {Document, Review, History}}
"""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import (
    ApplicationStatus,
    CriteriaType,
    CycleLifecycleState,
    DisbursementSchedule,
    HistoryAction,
    SponsorType,
)

# Applications in these statuses neither hold a slot nor block re-application.
_ACTIVE_APPLICATION_WHERE = text("status NOT IN ('WITHDRAWN', 'REJECTED')")


class Sponsor(Base):
    """Funding entity behind one or more programs."""

    __tablename__ = "sponsors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    type = Column(
        Enum(SponsorType, name="sponsor_type", native_enum=False),
        nullable=False,
        default=SponsorType.ORGANIZATION,
    )
    contact_person = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    programs = relationship("Program", back_populates="sponsor")

    def __repr__(self):
        return f"<Sponsor(id={self.id}, name='{self.name}')>"


class Program(Base):
    """Reusable scholarship template that yearly cycles instantiate."""

    __tablename__ = "programs"
    __table_args__ = (
        UniqueConstraint("sponsor_id", "name", name="uq_program_sponsor_name"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    sponsor_id = Column(
        Integer, ForeignKey("sponsors.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    default_amount = Column(Numeric(12, 2), nullable=True)
    default_slots = Column(Integer, nullable=True)
    start_year = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    sponsor = relationship("Sponsor", back_populates="programs")
    cycles = relationship("Cycle", back_populates="program")

    def __repr__(self):
        return f"<Program(id={self.id}, name='{self.name}')>"


class Cycle(Base):
    """One funding-period instance of a program."""

    __tablename__ = "cycles"
    __table_args__ = (
        CheckConstraint(
            "total_slots >= 0 AND available_slots >= 0 AND available_slots <= total_slots",
            name="ck_cycle_slot_bounds",
        ),
        CheckConstraint(
            "application_start_date < application_end_date",
            name="ck_cycle_application_window",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    program_id = Column(
        Integer, ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    academic_year = Column(String(20), nullable=False)
    display_name = Column(String(255), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    total_slots = Column(Integer, nullable=False)
    available_slots = Column(Integer, nullable=False)
    application_start_date = Column(DateTime(timezone=True), nullable=False)
    application_end_date = Column(DateTime(timezone=True), nullable=False)
    duration_months = Column(Integer, nullable=False, default=12)
    disbursement_schedule = Column(
        Enum(DisbursementSchedule, name="disbursement_schedule", native_enum=False),
        nullable=False,
        default=DisbursementSchedule.SEMESTER,
    )
    persisted_status = Column(
        Enum(CycleLifecycleState, name="cycle_lifecycle_state", native_enum=False),
        nullable=False,
        default=CycleLifecycleState.ACTIVE,
        index=True,
    )
    scholarship_type = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    program = relationship("Program", back_populates="cycles")
    criteria = relationship(
        "Criterion", back_populates="cycle", cascade="all, delete-orphan",
        order_by="Criterion.id",
    )
    applications = relationship(
        "Application", back_populates="cycle", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Cycle(id={self.id}, name='{self.display_name}', status='{self.persisted_status}')>"


class Criterion(Base):
    """Eligibility requirement attached to a cycle."""

    __tablename__ = "cycle_criteria"

    id = Column(Integer, primary_key=True, autoincrement=True)
    cycle_id = Column(
        Integer, ForeignKey("cycles.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    criteria_type = Column(
        Enum(CriteriaType, name="criteria_type", native_enum=False),
        nullable=False,
        default=CriteriaType.GENERAL,
    )
    criteria_value = Column(Text, nullable=False)
    is_mandatory = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    cycle = relationship("Cycle", back_populates="criteria")

    def __repr__(self):
        return f"<Criterion(cycle_id={self.cycle_id}, value='{self.criteria_value}')>"


class Application(Base):
    """A single applicant's submission against one cycle."""

    __tablename__ = "applications"
    __table_args__ = (
        Index(
            "uq_active_application_per_applicant",
            "cycle_id",
            "user_id",
            unique=True,
            postgresql_where=_ACTIVE_APPLICATION_WHERE,
            sqlite_where=_ACTIVE_APPLICATION_WHERE,
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_number = Column(String(32), unique=True, nullable=False)
    user_id = Column(String(255), nullable=False, index=True)
    cycle_id = Column(
        Integer, ForeignKey("cycles.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    motivation_letter = Column(Text, nullable=True)
    additional_info = Column(JSON, nullable=True)
    status = Column(
        Enum(ApplicationStatus, name="application_status", native_enum=False),
        nullable=False,
        default=ApplicationStatus.DRAFT,
        index=True,
    )
    decision_notes = Column(Text, nullable=True)
    decision_by = Column(String(255), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    decision_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    cycle = relationship("Cycle", back_populates="applications")
    documents = relationship(
        "ApplicationDocument", back_populates="application", cascade="all, delete-orphan",
        order_by="ApplicationDocument.id",
    )
    reviews = relationship(
        "ApplicationReview", back_populates="application", cascade="all, delete-orphan",
        order_by="ApplicationReview.id",
    )
    history = relationship(
        "ApplicationHistory", back_populates="application", cascade="all, delete-orphan",
        order_by="ApplicationHistory.id",
    )

    def __repr__(self):
        return f"<Application(id={self.id}, number='{self.application_number}', status='{self.status}')>"


class ApplicationDocument(Base):
    """Link between an application and an uploaded document."""

    __tablename__ = "application_documents"
    __table_args__ = (
        UniqueConstraint("application_id", "document_id", name="uq_app_document"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    document_id = Column(String(255), nullable=False)
    is_required = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="documents")

    def __repr__(self):
        return f"<ApplicationDocument(app_id={self.application_id}, doc='{self.document_id}')>"


class ApplicationReview(Base):
    """Reviewer assessment recorded when an application is reviewed."""

    __tablename__ = "application_reviews"
    __table_args__ = (
        CheckConstraint("score IS NULL OR (score >= 0 AND score <= 100)", name="ck_review_score"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    reviewer_id = Column(String(255), nullable=False)
    decision = Column(
        Enum(ApplicationStatus, name="review_decision", native_enum=False),
        nullable=False,
    )
    score = Column(Integer, nullable=True)
    comments = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="reviews")

    def __repr__(self):
        return f"<ApplicationReview(app_id={self.application_id}, decision='{self.decision}')>"


class ApplicationHistory(Base):
    """Append-only trail of actions taken on an application."""

    __tablename__ = "application_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    action = Column(
        Enum(HistoryAction, name="history_action", native_enum=False),
        nullable=False,
    )
    from_status = Column(String(20), nullable=True)
    to_status = Column(String(20), nullable=True)
    performed_by = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="history")

    def __repr__(self):
        return f"<ApplicationHistory(app_id={self.application_id}, action='{self.action}')>"
