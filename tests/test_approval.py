"""
Approval Workflow Tests

Tests status changes, confirmed deletion and the approved-expense export.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from commute_expense.expenses.approval import (
    CONFIRMATION_WORD,
    DELETE_CANCELLED,
    EXPORT_FAILED,
    NOTHING_APPROVED,
    ApprovalWorkflow,
    DeletionConfirmation,
)
from commute_expense.expenses.csv_export import UTF8_BOM
from commute_expense.expenses.exceptions import (
    ConfirmationAborted,
    NothingToExport,
    PermissionDenied,
    PersistenceFailure,
    SubmissionNotFound,
)
from commute_expense.expenses.models import ExpenseKind, SubmissionStatus, TripFare


def _fares(amount: int = 500):
    return [TripFare(ExpenseKind.ONE_TIME, "A", "B", amount, "2024-04-01", "JR")]


@pytest.fixture
def workflow(submission_repository, clock) -> ApprovalWorkflow:
    return ApprovalWorkflow(submission_repository, clock=clock, tz=timezone.utc)


@pytest.fixture
def pending(submission_repository, fixed_now):
    return submission_repository.insert("user-1", _fares(), created_at=fixed_now - timedelta(days=1))


class FailingFindRepository:
    """Store double whose queries always fail."""

    def find(self, **kwargs):
        raise PersistenceFailure("取得に失敗しました: timeout")


# =============================================================================
# Status Changes
# =============================================================================

class TestSetStatus:
    """Tests for approve, reject and reset to pending."""

    def test_approve(self, workflow, admin_session, pending, fixed_now):
        updated = workflow.set_status(admin_session, pending.id, SubmissionStatus.APPROVED)

        assert updated.status == SubmissionStatus.APPROVED
        assert updated.approved_at == fixed_now
        assert updated.rejected_at is None

    def test_reject(self, workflow, admin_session, pending, fixed_now):
        updated = workflow.set_status(admin_session, pending.id, SubmissionStatus.REJECTED)

        assert updated.status == SubmissionStatus.REJECTED
        assert updated.rejected_at == fixed_now
        assert updated.approved_at is None

    def test_approve_after_reject(self, submission_repository, admin_session, pending, fixed_now):
        """Test approving a rejected submission clears the rejection time."""
        ApprovalWorkflow(submission_repository, clock=lambda: fixed_now - timedelta(hours=1)).set_status(
            admin_session, pending.id, SubmissionStatus.REJECTED
        )
        workflow = ApprovalWorkflow(submission_repository, clock=lambda: fixed_now)

        updated = workflow.set_status(admin_session, pending.id, SubmissionStatus.APPROVED)

        assert updated.status == SubmissionStatus.APPROVED
        assert updated.approved_at == fixed_now
        assert updated.rejected_at is None

    def test_back_to_pending_clears_both(self, workflow, admin_session, pending):
        workflow.set_status(admin_session, pending.id, SubmissionStatus.APPROVED)

        updated = workflow.set_status(admin_session, pending.id, SubmissionStatus.PENDING)

        assert updated.status == SubmissionStatus.PENDING
        assert updated.approved_at is None
        assert updated.rejected_at is None

    def test_unknown_submission(self, workflow, admin_session):
        with pytest.raises(SubmissionNotFound):
            workflow.set_status(admin_session, "missing", SubmissionStatus.APPROVED)

    def test_requires_admin(self, workflow, user_session, pending):
        with pytest.raises(PermissionDenied):
            workflow.set_status(user_session, pending.id, SubmissionStatus.APPROVED)

    def test_status_message(self, workflow):
        assert workflow.status_message(SubmissionStatus.APPROVED) == "ステータスを「承認」に更新しました。"


class TestListing:
    """Tests for the admin listings."""

    def test_pending_only(self, workflow, admin_session, submission_repository, pending, fixed_now):
        other = submission_repository.insert("user-2", _fares(), created_at=fixed_now)
        workflow.set_status(admin_session, other.id, SubmissionStatus.APPROVED)

        assert [s.id for s in workflow.list_pending(admin_session)] == [pending.id]
        assert [s.id for s in workflow.list_submissions(admin_session)] == [other.id, pending.id]

    def test_listing_requires_admin(self, workflow, user_session):
        with pytest.raises(PermissionDenied):
            workflow.list_submissions(user_session)


# =============================================================================
# Deletion
# =============================================================================

class TestDeleteSubmission:
    """Tests for the double-confirmed delete."""

    def test_delete(self, workflow, admin_session, submission_repository, pending):
        confirmation = DeletionConfirmation(confirmed=True, typed_word=CONFIRMATION_WORD)

        workflow.delete_submission(admin_session, pending.id, confirmation)

        with pytest.raises(SubmissionNotFound):
            submission_repository.get(pending.id)

    @pytest.mark.parametrize("confirmation", [
        DeletionConfirmation(confirmed=False, typed_word=CONFIRMATION_WORD),
        DeletionConfirmation(confirmed=True, typed_word=""),
        DeletionConfirmation(confirmed=True, typed_word="delete"),
        DeletionConfirmation(confirmed=True, typed_word=" 削除"),
    ])
    def test_aborted(self, workflow, admin_session, submission_repository, pending, confirmation):
        """Test the submission survives any incomplete confirmation."""
        with pytest.raises(ConfirmationAborted) as exc_info:
            workflow.delete_submission(admin_session, pending.id, confirmation)

        assert exc_info.value.message == DELETE_CANCELLED
        assert submission_repository.get(pending.id).id == pending.id

    def test_delete_unknown(self, workflow, admin_session):
        confirmation = DeletionConfirmation(confirmed=True, typed_word=CONFIRMATION_WORD)
        with pytest.raises(SubmissionNotFound):
            workflow.delete_submission(admin_session, "missing", confirmation)


# =============================================================================
# Export
# =============================================================================

class TestExportApproved:
    """Tests for the approved-expense CSV export."""

    def test_nothing_approved(self, workflow, admin_session, pending):
        """Test an export with only pending submissions produces no file."""
        with pytest.raises(NothingToExport) as exc_info:
            workflow.export_approved(admin_session)

        assert exc_info.value.message == NOTHING_APPROVED

    def test_oldest_first(self, workflow, admin_session, submission_repository):
        newer = submission_repository.insert("user-1", _fares(100), created_at=datetime(2024, 4, 10, tzinfo=timezone.utc))
        older = submission_repository.insert("user-1", _fares(200), created_at=datetime(2024, 4, 2, tzinfo=timezone.utc))
        for submission in (newer, older):
            workflow.set_status(admin_session, submission.id, SubmissionStatus.APPROVED)

        export = workflow.export_approved(admin_session)
        text = export.content[len(UTF8_BOM):].decode("utf-8")
        rows = text.split("\r\n")[1:-1]

        assert export.submission_count == 2
        assert rows[0].startswith(f'"1","{older.id}"')
        assert rows[1].startswith(f'"2","{newer.id}"')

    def test_date_range(self, workflow, admin_session, submission_repository):
        """Test the range covers whole days on both ends."""
        inside_start = submission_repository.insert("user-1", _fares(), created_at=datetime(2024, 4, 1, 0, 0, tzinfo=timezone.utc))
        inside_end = submission_repository.insert("user-1", _fares(), created_at=datetime(2024, 4, 30, 23, 59, tzinfo=timezone.utc))
        outside = submission_repository.insert("user-1", _fares(), created_at=datetime(2024, 5, 1, 0, 0, tzinfo=timezone.utc))
        for submission in (inside_start, inside_end, outside):
            workflow.set_status(admin_session, submission.id, SubmissionStatus.APPROVED)

        export = workflow.export_approved(admin_session, start_date=date(2024, 4, 1), end_date=date(2024, 4, 30))
        text = export.content.decode("utf-8-sig")

        assert export.submission_count == 2
        assert inside_start.id in text
        assert inside_end.id in text
        assert outside.id not in text

    def test_query_failure(self, admin_session):
        workflow = ApprovalWorkflow(FailingFindRepository())

        with pytest.raises(PersistenceFailure) as exc_info:
            workflow.export_approved(admin_session)

        assert exc_info.value.message == EXPORT_FAILED

    def test_requires_admin(self, workflow, user_session):
        with pytest.raises(PermissionDenied):
            workflow.export_approved(user_session)
