"""
Approval Workflow

Administrator operations over stored submissions: status changes,
confirmed deletion, and CSV export of approved expenses.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timezone, tzinfo
from typing import Callable

from .csv_export import CsvExport, build_csv_export
from .exceptions import ConfirmationAborted, NothingToExport, PersistenceFailure
from .formatting import status_label
from .models import Submission, SubmissionStatus
from .repository import SubmissionRepository
from .session import Session
from .submission import utc_now

logger = logging.getLogger(__name__)

CONFIRMATION_WORD = "削除"
DELETE_CANCELLED = "削除がキャンセルされました。"
EXPORT_FAILED = "CSV出力に失敗しました。"
NOTHING_APPROVED = "承認済みの交通費がありません。"


@dataclass
class DeletionConfirmation:
    """The operator's two answers before a delete.

    ``confirmed`` is the yes/no answer; ``typed_word`` is what the operator
    typed when asked to enter the confirmation word.
    """

    confirmed: bool = False
    typed_word: str = ""

    def is_complete(self) -> bool:
        return self.confirmed and self.typed_word == CONFIRMATION_WORD


class ApprovalWorkflow:
    """Status changes, deletion and export for administrators."""

    def __init__(
        self,
        repository: SubmissionRepository,
        clock: Callable[[], datetime] = utc_now,
        tz: tzinfo | None = None,
    ):
        """Initialize the workflow.

        Args:
            repository: Submission store
            clock: Source of the current time
            tz: Display zone for exported timestamps
        """
        self.repository = repository
        self.clock = clock
        self.tz = tz

    def list_submissions(self, session: Session) -> list[Submission]:
        """Every submission, newest first."""
        session.require_admin()
        return self.repository.find()

    def list_pending(self, session: Session) -> list[Submission]:
        """Submissions still awaiting a decision, newest first."""
        session.require_admin()
        return self.repository.find(status=SubmissionStatus.PENDING)

    def set_status(
        self,
        session: Session,
        submission_id: str,
        status: SubmissionStatus,
    ) -> Submission:
        """Move a submission to a new status.

        Approving stamps ``approved_at`` and clears ``rejected_at``; rejecting
        does the opposite; returning to pending clears both.

        Args:
            session: Administrator session
            submission_id: Submission to update
            status: New status

        Returns:
            The updated submission

        Raises:
            PermissionDenied: If the session is not an administrator
            PersistenceFailure: If the store write failed
        """
        session.require_admin()

        now = self.clock()
        approved_at = now if status == SubmissionStatus.APPROVED else None
        rejected_at = now if status == SubmissionStatus.REJECTED else None

        submission = self.repository.update_status(
            submission_id,
            status,
            approved_at=approved_at,
            rejected_at=rejected_at,
        )

        logger.info(f"Submission {submission_id} set to {status.value} by {session.user_id}")
        return submission

    def status_message(self, status: SubmissionStatus) -> str:
        return f"ステータスを「{status_label(status.value)}」に更新しました。"

    def delete_submission(
        self,
        session: Session,
        submission_id: str,
        confirmation: DeletionConfirmation,
    ) -> None:
        """Delete a submission after both confirmations were given.

        Raises:
            PermissionDenied: If the session is not an administrator
            ConfirmationAborted: If either confirmation is missing or wrong
            PersistenceFailure: If the store delete failed
        """
        session.require_admin()

        if not confirmation.is_complete():
            logger.info(f"Deletion of {submission_id} cancelled by {session.user_id}")
            raise ConfirmationAborted(DELETE_CANCELLED)

        self.repository.delete(submission_id)
        logger.info(f"Submission {submission_id} deleted by {session.user_id}")

    def export_approved(
        self,
        session: Session,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> CsvExport:
        """Render approved submissions, oldest first, as CSV.

        Args:
            session: Administrator session
            start_date: First creation day to include (from 00:00:00 UTC)
            end_date: Last creation day to include (until 23:59:59 UTC)

        Returns:
            The CSV file

        Raises:
            PermissionDenied: If the session is not an administrator
            PersistenceFailure: If the query failed
            NothingToExport: If no approved submission matched
        """
        session.require_admin()

        created_from = datetime.combine(start_date, time.min, tzinfo=timezone.utc) if start_date else None
        created_to = datetime.combine(end_date, time.max, tzinfo=timezone.utc) if end_date else None

        try:
            submissions = self.repository.find(
                status=SubmissionStatus.APPROVED,
                created_from=created_from,
                created_to=created_to,
                ascending=True,
            )
        except PersistenceFailure as e:
            logger.error(f"Error fetching approved expenses: {e}")
            raise PersistenceFailure(EXPORT_FAILED) from e

        if not submissions:
            raise NothingToExport(NOTHING_APPROVED)

        export = build_csv_export(submissions, tz=self.tz)
        logger.info(
            f"Exported {export.submission_count} approved submissions "
            f"({export.row_count} rows) for {session.user_id}"
        )
        return export
