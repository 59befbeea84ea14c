# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, DatabaseService, get_db, get_db_service
from .enums import (
    ApplicationStatus,
    CriteriaType,
    CycleLifecycleState,
    DisbursementSchedule,
    ExternalCycleStatus,
    HistoryAction,
    ScholarshipType,
    SponsorType,
    UserRole,
)
from .models import (
    Application,
    ApplicationDocument,
    ApplicationHistory,
    ApplicationReview,
    Criterion,
    Cycle,
    Program,
    Sponsor,
)

__all__ = [
    "Base",
    "DatabaseService",
    "get_db",
    "get_db_service",
    "__version__",
    # Enums
    "ApplicationStatus",
    "CriteriaType",
    "CycleLifecycleState",
    "DisbursementSchedule",
    "ExternalCycleStatus",
    "HistoryAction",
    "ScholarshipType",
    "SponsorType",
    "UserRole",
    # Models
    "Application",
    "ApplicationDocument",
    "ApplicationHistory",
    "ApplicationReview",
    "Criterion",
    "Cycle",
    "Program",
    "Sponsor",
]
