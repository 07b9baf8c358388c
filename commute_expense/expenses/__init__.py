"""
Expenses Module

Commute expense drafts, submission, approval, grouping and CSV export.
"""

from .models import (
    ExpenseKind,
    ExpenseLine,
    Fare,
    PassFare,
    Submission,
    SubmissionNotice,
    SubmissionStatus,
    TripFare,
)
from .row_editor import ExpenseRowEditor
from .validation import has_content, is_blank, validate_draft
from .grouping import group_submissions_by_year_and_month, sorted_groups
from .csv_export import CsvExport, build_csv_export, generate_csv_data
from .session import DraftStore, Profile, Session, close_session, open_session
from .repository import ProfileRepository, SubmissionRepository, create_tables
from .submission import SubmissionService
from .approval import ApprovalWorkflow, DeletionConfirmation

__all__ = [
    # Models
    "ExpenseKind",
    "ExpenseLine",
    "Fare",
    "PassFare",
    "Submission",
    "SubmissionNotice",
    "SubmissionStatus",
    "TripFare",
    # Draft Editing
    "ExpenseRowEditor",
    "has_content",
    "is_blank",
    "validate_draft",
    # Views
    "group_submissions_by_year_and_month",
    "sorted_groups",
    "CsvExport",
    "build_csv_export",
    "generate_csv_data",
    # Session
    "DraftStore",
    "Profile",
    "Session",
    "close_session",
    "open_session",
    # Persistence
    "ProfileRepository",
    "SubmissionRepository",
    "create_tables",
    # Workflows
    "SubmissionService",
    "ApprovalWorkflow",
    "DeletionConfirmation",
]
