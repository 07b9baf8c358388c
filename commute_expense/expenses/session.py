"""
Session and Profile State

The signed-in identity is an explicit object handed to every workflow call.
It is created once the identity provider has resolved the caller and torn
down on sign-out, which also drops the caller's unsent draft.
"""

import logging
from dataclasses import dataclass
from threading import Lock

from .exceptions import PermissionDenied
from .row_editor import ExpenseRowEditor

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


@dataclass
class Profile:
    """Stored profile of an identity."""

    id: str
    email: str
    name: str | None = None


@dataclass
class Session:
    """Signed-in identity with its display name."""

    user_id: str
    email: str
    role: str | None = None
    profile_name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    @property
    def display_name(self) -> str:
        """Profile name if set, otherwise the sign-in email."""
        return self.profile_name.strip() or self.email

    def require_admin(self) -> None:
        """Capability check guarding the approval workflow.

        Raises:
            PermissionDenied: If the identity is not an administrator
        """
        if not self.is_admin:
            raise PermissionDenied("管理者権限が必要です。")


class DraftStore:
    """Process-local drafts, one row editor per identity."""

    def __init__(self):
        self._drafts: dict[str, ExpenseRowEditor] = {}
        self._lock = Lock()

    def editor_for(self, session: Session) -> ExpenseRowEditor:
        with self._lock:
            editor = self._drafts.get(session.user_id)
            if editor is None:
                editor = ExpenseRowEditor()
                self._drafts[session.user_id] = editor
            return editor

    def discard(self, session: Session) -> None:
        with self._lock:
            self._drafts.pop(session.user_id, None)


def open_session(
    user_id: str,
    email: str,
    role: str | None,
    profile: Profile | None = None,
) -> Session:
    """Build the session for an identity the provider has accepted."""
    session = Session(
        user_id=user_id,
        email=email,
        role=role,
        profile_name=(profile.name or "") if profile else "",
    )
    logger.debug(f"Session opened for {user_id} (admin={session.is_admin})")
    return session


def close_session(session: Session, drafts: DraftStore) -> None:
    """Tear a session down on sign-out."""
    drafts.discard(session)
    logger.info(f"Session closed for {session.user_id}")
