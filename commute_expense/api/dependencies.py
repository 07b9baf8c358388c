"""
Workflow Dependencies

FastAPI providers for the draft store, notifier and workflows.
"""

import os
from functools import lru_cache
from zoneinfo import ZoneInfo

from fastapi import Depends

from ..expenses.approval import ApprovalWorkflow
from ..expenses.repository import SubmissionRepository
from ..expenses.session import DraftStore
from ..expenses.submission import SubmissionService
from ..notifications import SlackNotifier
from .database import get_submission_repository

DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "Asia/Tokyo")


@lru_cache
def get_display_tz() -> ZoneInfo:
    return ZoneInfo(DISPLAY_TIMEZONE)


@lru_cache
def get_draft_store() -> DraftStore:
    return DraftStore()


@lru_cache
def get_notifier() -> SlackNotifier:
    return SlackNotifier()


def get_submission_service(
    repository: SubmissionRepository = Depends(get_submission_repository),
    notifier: SlackNotifier = Depends(get_notifier),
    tz: ZoneInfo = Depends(get_display_tz),
) -> SubmissionService:
    return SubmissionService(repository, notifier=notifier, tz=tz)


def get_approval_workflow(
    repository: SubmissionRepository = Depends(get_submission_repository),
    tz: ZoneInfo = Depends(get_display_tz),
) -> ApprovalWorkflow:
    return ApprovalWorkflow(repository, tz=tz)
