"""
Session API Routes

Provides the signed-in identity, profile name editing, and sign-out.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...expenses.exceptions import ValidationFailure
from ...expenses.repository import ProfileRepository
from ...expenses.session import DraftStore, Session, close_session
from ..auth import get_current_session
from ..database import get_profile_repository
from ..dependencies import get_draft_store

router = APIRouter(tags=["session"])

NAME_REQUIRED = "名前を入力してください。"


class SessionResponse(BaseModel):
    """Current identity and display name."""

    user_id: str
    email: str
    role: str | None
    is_admin: bool
    profile_name: str
    display_name: str
    needs_name: bool


class ProfileUpdateRequest(BaseModel):
    """New display name."""

    name: str


def to_session_response(session: Session) -> SessionResponse:
    return SessionResponse(
        user_id=session.user_id,
        email=session.email,
        role=session.role,
        is_admin=session.is_admin,
        profile_name=session.profile_name,
        display_name=session.display_name,
        needs_name=not session.profile_name.strip(),
    )


@router.get("/session", response_model=SessionResponse)
async def get_session(session: Session = Depends(get_current_session)) -> SessionResponse:
    """Get the signed-in identity."""
    return to_session_response(session)


@router.post("/session/sign-out")
async def sign_out(
    session: Session = Depends(get_current_session),
    drafts: DraftStore = Depends(get_draft_store),
) -> dict:
    """End the session and discard its draft."""
    close_session(session, drafts)
    return {"message": "Signed out"}


@router.get("/profile", response_model=SessionResponse)
async def get_profile(session: Session = Depends(get_current_session)) -> SessionResponse:
    """Get the caller's profile."""
    return to_session_response(session)


@router.put("/profile", response_model=SessionResponse)
async def update_profile(
    request: ProfileUpdateRequest,
    session: Session = Depends(get_current_session),
    profiles: ProfileRepository = Depends(get_profile_repository),
) -> SessionResponse:
    """Save the caller's display name.

    Raises:
        ValidationFailure: If the name is blank
    """
    name = request.name.strip()
    if not name:
        raise ValidationFailure(NAME_REQUIRED, field="name")

    profiles.set_name(session.user_id, session.email, name)
    session.profile_name = name

    return to_session_response(session)
