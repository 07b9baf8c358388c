"""
Submissions API Routes

Provides the caller's own submission history.
"""

from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...expenses.formatting import kind_label, status_label
from ...expenses.grouping import group_submissions_by_year_and_month, sorted_groups
from ...expenses.models import Submission
from ...expenses.repository import SubmissionRepository
from ...expenses.session import Session
from ..auth import get_current_session
from ..database import get_submission_repository
from ..dependencies import get_display_tz

router = APIRouter(prefix="/submissions", tags=["submissions"])


class ExpenseLineItem(BaseModel):
    """One fare of a submission, in stored shape plus display labels."""

    type: str
    type_label: str
    from_station: str
    to_station: str
    amount: str
    start_date: str
    end_date: str
    date_label: str
    transportation: str
    notes: str


class SubmissionItem(BaseModel):
    """Submission with its fares."""

    id: str
    user_id: str
    created_at: datetime
    status: str
    status_label: str
    approved_at: datetime | None
    rejected_at: datetime | None
    applicant: str
    total_amount: int
    expenses_data: list[ExpenseLineItem]

    @classmethod
    def from_submission(cls, submission: Submission) -> "SubmissionItem":
        return cls(
            id=submission.id,
            user_id=submission.owner_id,
            created_at=submission.created_at,
            status=submission.status.value,
            status_label=status_label(submission.status.value),
            approved_at=submission.approved_at,
            rejected_at=submission.rejected_at,
            applicant=submission.applicant_label,
            total_amount=submission.total_amount,
            expenses_data=[
                ExpenseLineItem(
                    **line.to_dict(),
                    type_label=kind_label(line.kind.value),
                    date_label=line.date_label,
                )
                for line in submission.lines
            ],
        )


class MonthGroup(BaseModel):
    """Submissions of one month."""

    month: str
    submissions: list[SubmissionItem]


class YearGroup(BaseModel):
    """Submissions of one year, newest month first."""

    year: str
    months: list[MonthGroup]


class SubmissionHistoryResponse(BaseModel):
    """Submissions grouped by year and month."""

    total: int
    years: list[YearGroup]


def to_history_response(submissions: list[Submission], tz: ZoneInfo) -> SubmissionHistoryResponse:
    grouped = group_submissions_by_year_and_month(submissions, tz=tz)

    years = [
        YearGroup(
            year=year,
            months=[
                MonthGroup(
                    month=month,
                    submissions=[SubmissionItem.from_submission(s) for s in items],
                )
                for month, items in months
            ],
        )
        for year, months in sorted_groups(grouped)
    ]

    return SubmissionHistoryResponse(total=len(submissions), years=years)


@router.get("", response_model=SubmissionHistoryResponse)
async def get_my_submissions(
    session: Session = Depends(get_current_session),
    repository: SubmissionRepository = Depends(get_submission_repository),
    tz: ZoneInfo = Depends(get_display_tz),
) -> SubmissionHistoryResponse:
    """Get the caller's submissions grouped by year and month.

    Args:
        session: Current session
        repository: Submission store
        tz: Display zone for grouping

    Returns:
        Grouped submission history
    """
    submissions = repository.find(owner_id=session.user_id)
    return to_history_response(submissions, tz)
