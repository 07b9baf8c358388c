"""
Draft API Routes

Provides endpoints for editing the caller's expense draft and submitting it.
"""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ...expenses.formatting import format_amount
from ...expenses.repository import SubmissionRepository
from ...expenses.row_editor import ExpenseRowEditor
from ...expenses.session import DraftStore, Session
from ...expenses.submission import SUBMITTED_MESSAGE, SubmissionService
from ..auth import get_current_session
from ..database import get_submission_repository
from ..dependencies import get_draft_store, get_submission_service
from .submissions import SubmissionItem

router = APIRouter(prefix="/draft", tags=["draft"])

ExpenseType = Literal["one_time", "business_trip", "regular"]


class DraftRow(BaseModel):
    """One editable row."""

    type: ExpenseType
    from_station: str
    to_station: str
    amount: str
    formatted_amount: str
    start_date: str
    end_date: str
    transportation: str
    notes: str


class DraftResponse(BaseModel):
    """The caller's draft with its running total."""

    rows: list[DraftRow]
    total_amount: int
    formatted_total: str


class DraftRowUpdate(BaseModel):
    """Fields to change on a row; omitted fields stay as they are."""

    type: ExpenseType | None = None
    from_station: str | None = None
    to_station: str | None = None
    amount: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    transportation: str | None = None
    notes: str | None = None


class TemplateResponse(BaseModel):
    """Result of applying a past submission to the draft."""

    applied: int
    message: str
    draft: DraftResponse


class SubmitResponse(BaseModel):
    """Result of a successful submission."""

    message: str
    submission: SubmissionItem
    draft: DraftResponse


def to_draft_response(editor: ExpenseRowEditor) -> DraftResponse:
    rows = [
        DraftRow(
            type=line.kind.value,
            from_station=line.from_station,
            to_station=line.to_station,
            amount=line.amount,
            formatted_amount=format_amount(line.amount),
            start_date=line.start_date,
            end_date=line.end_date,
            transportation=line.transportation,
            notes=line.notes,
        )
        for line in editor.lines
    ]
    total = editor.total_amount()

    return DraftResponse(rows=rows, total_amount=total, formatted_total=f"{total:,}")


def get_editor(
    session: Session = Depends(get_current_session),
    drafts: DraftStore = Depends(get_draft_store),
) -> ExpenseRowEditor:
    return drafts.editor_for(session)


@router.get("", response_model=DraftResponse)
async def get_draft(editor: ExpenseRowEditor = Depends(get_editor)) -> DraftResponse:
    """Get the caller's draft."""
    return to_draft_response(editor)


@router.post("/rows", response_model=DraftResponse)
async def add_row(editor: ExpenseRowEditor = Depends(get_editor)) -> DraftResponse:
    """Append a row departing from the last row's arrival station."""
    editor.add_row()
    return to_draft_response(editor)


@router.patch("/rows/{index}", response_model=DraftResponse)
async def update_row(
    index: int,
    update: DraftRowUpdate,
    editor: ExpenseRowEditor = Depends(get_editor),
) -> DraftResponse:
    """Change fields of a row.

    Args:
        index: Row position
        update: Fields to change
        editor: Caller's draft

    Returns:
        Updated draft
    """
    changes = update.model_dump(exclude_none=True)
    if "type" in changes:
        changes["kind"] = changes.pop("type")

    editor.update_row(index, **changes)
    return to_draft_response(editor)


@router.delete("/rows/{index}", response_model=DraftResponse)
async def remove_row(index: int, editor: ExpenseRowEditor = Depends(get_editor)) -> DraftResponse:
    """Remove a row; the last remaining row cannot be removed."""
    editor.remove_row(index)
    return to_draft_response(editor)


@router.post("/rows/{index}/clear", response_model=DraftResponse)
async def clear_row(index: int, editor: ExpenseRowEditor = Depends(get_editor)) -> DraftResponse:
    """Blank a row in place."""
    editor.clear_row(index)
    return to_draft_response(editor)


@router.post("/rows/{index}/round-trip", response_model=DraftResponse)
async def make_round_trip(index: int, editor: ExpenseRowEditor = Depends(get_editor)) -> DraftResponse:
    """Insert the return leg after a row."""
    editor.make_round_trip(index)
    return to_draft_response(editor)


@router.post("/template/{submission_id}", response_model=TemplateResponse)
async def apply_template(
    submission_id: str,
    session: Session = Depends(get_current_session),
    editor: ExpenseRowEditor = Depends(get_editor),
    repository: SubmissionRepository = Depends(get_submission_repository),
) -> TemplateResponse:
    """Copy a past submission's rows into the draft, without dates.

    Args:
        submission_id: Submission to use as template
        session: Current session
        editor: Caller's draft
        repository: Submission store

    Returns:
        Number of rows applied and the new draft
    """
    submission = repository.get(submission_id)

    if submission.owner_id != session.user_id and not session.is_admin:
        raise HTTPException(status_code=404, detail="Submission not found")

    applied = editor.apply_template(submission.lines)

    return TemplateResponse(
        applied=applied,
        message=f"{applied}件の項目をフォームに適用しました。",
        draft=to_draft_response(editor),
    )


@router.post("/submit", response_model=SubmitResponse)
async def submit_draft(
    session: Session = Depends(get_current_session),
    editor: ExpenseRowEditor = Depends(get_editor),
    service: SubmissionService = Depends(get_submission_service),
) -> SubmitResponse:
    """Validate and submit the draft.

    On success the draft is reset to a single blank row.
    """
    submission = await service.submit(session, editor)

    return SubmitResponse(
        message=SUBMITTED_MESSAGE,
        submission=SubmissionItem.from_submission(submission),
        draft=to_draft_response(editor),
    )
