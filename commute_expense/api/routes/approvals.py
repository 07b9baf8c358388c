"""
Approvals API Routes

Provides administrator endpoints for the approval workflow.
"""

from datetime import date
from typing import Literal
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from pydantic import BaseModel

from ...expenses.approval import ApprovalWorkflow, DeletionConfirmation
from ...expenses.models import SubmissionStatus
from ...expenses.session import Session
from ..auth import require_admin
from ..dependencies import get_approval_workflow, get_display_tz
from .submissions import SubmissionHistoryResponse, SubmissionItem, to_history_response

router = APIRouter(prefix="/approvals", tags=["approvals"])


class PendingListResponse(BaseModel):
    """Submissions awaiting a decision."""

    items: list[SubmissionItem]
    total: int


class StatusUpdateRequest(BaseModel):
    """New status for a submission."""

    status: Literal["pending", "approved", "rejected"]


class StatusUpdateResponse(BaseModel):
    """Result of a status change."""

    message: str
    submission: SubmissionItem


class DeleteRequest(BaseModel):
    """The operator's answers to both delete confirmations."""

    confirmed: bool = False
    confirmation_text: str = ""


@router.get("", response_model=SubmissionHistoryResponse)
async def get_all_submissions(
    session: Session = Depends(require_admin),
    workflow: ApprovalWorkflow = Depends(get_approval_workflow),
    tz: ZoneInfo = Depends(get_display_tz),
) -> SubmissionHistoryResponse:
    """Get every submission grouped by year and month."""
    return to_history_response(workflow.list_submissions(session), tz)


@router.get("/pending", response_model=PendingListResponse)
async def get_pending_approvals(
    session: Session = Depends(require_admin),
    workflow: ApprovalWorkflow = Depends(get_approval_workflow),
) -> PendingListResponse:
    """Get pending submissions, newest first."""
    items = [SubmissionItem.from_submission(s) for s in workflow.list_pending(session)]
    return PendingListResponse(items=items, total=len(items))


@router.get("/export")
async def export_approved(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    session: Session = Depends(require_admin),
    workflow: ApprovalWorkflow = Depends(get_approval_workflow),
) -> Response:
    """Download approved expenses as CSV.

    Args:
        start_date: First creation day to include
        end_date: Last creation day to include
        session: Administrator session
        workflow: Approval workflow

    Returns:
        CSV attachment
    """
    export = workflow.export_approved(session, start_date=start_date, end_date=end_date)

    return Response(
        content=export.content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@router.put("/{submission_id}/status", response_model=StatusUpdateResponse)
async def set_status(
    submission_id: str,
    request: StatusUpdateRequest,
    session: Session = Depends(require_admin),
    workflow: ApprovalWorkflow = Depends(get_approval_workflow),
) -> StatusUpdateResponse:
    """Approve, reject, or return a submission to pending.

    Args:
        submission_id: Submission ID
        request: New status
        session: Administrator session
        workflow: Approval workflow

    Returns:
        Confirmation message and the updated submission
    """
    status = SubmissionStatus(request.status)
    submission = workflow.set_status(session, submission_id, status)

    return StatusUpdateResponse(
        message=workflow.status_message(status),
        submission=SubmissionItem.from_submission(submission),
    )


@router.delete("/{submission_id}")
async def delete_submission(
    submission_id: str,
    request: DeleteRequest,
    session: Session = Depends(require_admin),
    workflow: ApprovalWorkflow = Depends(get_approval_workflow),
) -> dict:
    """Delete a submission once both confirmations were given.

    Returns:
        Success message
    """
    confirmation = DeletionConfirmation(
        confirmed=request.confirmed,
        typed_word=request.confirmation_text,
    )
    workflow.delete_submission(session, submission_id, confirmation)

    return {"message": "申請を削除しました。", "id": submission_id}
