"""
Submission Workflow

Validates the caller's draft, stores it as one pending submission and
announces it to the team channel.
"""

import logging
from datetime import datetime, timezone, tzinfo
from typing import Callable

from .exceptions import NotificationFailure
from .formatting import format_short_date
from .models import Submission, SubmissionNotice
from .repository import SubmissionRepository
from .row_editor import ExpenseRowEditor
from .session import Session
from .validation import validate_draft

logger = logging.getLogger(__name__)

SUBMITTED_MESSAGE = "交通費を登録しました。承認をお待ちください。"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionService:
    """Turns a draft into a stored submission."""

    def __init__(
        self,
        repository: SubmissionRepository,
        notifier=None,
        clock: Callable[[], datetime] = utc_now,
        tz: tzinfo | None = None,
    ):
        """Initialize the service.

        Args:
            repository: Submission store
            notifier: Object with an async ``notify_submission(notice)``;
                notifications are skipped when None
            clock: Source of the current time
            tz: Zone used for the date shown in the notification
        """
        self.repository = repository
        self.notifier = notifier
        self.clock = clock
        self.tz = tz

    async def submit(self, session: Session, editor: ExpenseRowEditor) -> Submission:
        """Validate and store the draft, then notify.

        The draft is reset only after the store accepted the submission, so
        a failed write can be retried without re-entering anything.

        Args:
            session: Signed-in applicant
            editor: The applicant's draft

        Returns:
            The stored submission

        Raises:
            ValidationFailure: If the draft is empty or a row is invalid
            PersistenceFailure: If the store rejected the write
        """
        fares = validate_draft(editor.lines)

        now = self.clock()
        submission = self.repository.insert(session.user_id, fares, created_at=now)
        logger.info(
            f"Submission {submission.id} stored for {session.user_id} "
            f"({len(fares)} items, total {submission.total_amount})"
        )

        await self._notify(session, submission, now)

        editor.reset()
        return submission

    async def _notify(self, session: Session, submission: Submission, now: datetime) -> None:
        """Announce a stored submission; failures are only logged."""
        if self.notifier is None:
            return

        local_now = now.astimezone(self.tz) if self.tz else now
        notice = SubmissionNotice.from_fares(
            user_name=session.display_name,
            date=format_short_date(local_now.date()),
            fares=submission.lines,
        )

        try:
            await self.notifier.notify_submission(notice)
        except NotificationFailure as e:
            logger.warning(f"Slack notification failed for submission {submission.id}: {e}")
