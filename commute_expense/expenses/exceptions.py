"""
Expense Workflow Exceptions

Typed errors for the submission and approval workflows. Each carries a
machine-readable ``code`` and the user-facing ``message``.

    ExpenseWorkflowError
    |
    +-- ValidationFailure
    |   +-- NothingToExport
    +-- PersistenceFailure
    |   +-- SubmissionNotFound
    +-- NotificationFailure
    +-- ConfirmationAborted
    +-- PermissionDenied
"""


class ExpenseWorkflowError(Exception):
    """Base class for all workflow errors."""

    code: str = "EXPENSE_WORKFLOW_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationFailure(ExpenseWorkflowError):
    """Input must be corrected by the user. Nothing was mutated."""

    code: str = "VALIDATION_FAILURE"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        line_index: int | None = None,
    ):
        self.field = field
        self.line_index = line_index
        super().__init__(message)


class NothingToExport(ValidationFailure):
    """Export query succeeded but matched no approved submissions."""

    code: str = "NOTHING_TO_EXPORT"


class PersistenceFailure(ExpenseWorkflowError):
    """The persistence store rejected or failed a call."""

    code: str = "PERSISTENCE_FAILURE"


class SubmissionNotFound(PersistenceFailure):
    """No submission exists with the given id."""

    code: str = "SUBMISSION_NOT_FOUND"

    def __init__(self, submission_id: str):
        self.submission_id = submission_id
        super().__init__(f"Submission not found: {submission_id}")


class NotificationFailure(ExpenseWorkflowError):
    """The outbound webhook could not be delivered."""

    code: str = "NOTIFICATION_FAILURE"


class ConfirmationAborted(ExpenseWorkflowError):
    """The operator cancelled a destructive action."""

    code: str = "CONFIRMATION_ABORTED"


class PermissionDenied(ExpenseWorkflowError):
    """The session lacks the capability required for the operation."""

    code: str = "PERMISSION_DENIED"
