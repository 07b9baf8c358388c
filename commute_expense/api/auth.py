"""
Authentication Module

Resolves the caller through the identity provider's claims and builds the
request's Session.
"""

import os
from pathlib import Path

import yaml
from fastapi import Depends, Header, HTTPException, status
from pydantic import BaseModel

from ..expenses.repository import ProfileRepository
from ..expenses.session import ADMIN_ROLE, Session, open_session
from .database import get_profile_repository


class Identity(BaseModel):
    """Claims the identity provider holds for a user."""

    id: str
    email: str
    role: str | None = None


DEV_IDENTITY = Identity(id="dev", email="dev@example.com", role=ADMIN_ROLE)


class AuthConfig:
    """Identity claims loaded from identity_acl.yaml."""

    def __init__(self, config_path: Path | str | None = None):
        """Initialize auth config.

        Args:
            config_path: Path to identity_acl.yaml
        """
        if config_path is None:
            config_path = Path(__file__).parent.parent.parent / "config" / "identity_acl.yaml"

        self.config_path = Path(config_path)
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML."""
        if self.config_path.exists():
            with open(self.config_path) as f:
                self.config = yaml.safe_load(f) or {}
        else:
            # Default config for development
            self.config = {
                "users": [
                    DEV_IDENTITY.model_dump(),
                ],
            }

    def get_identity(self, user_id: str) -> Identity | None:
        """Get the claims of a user.

        Args:
            user_id: Identity id

        Returns:
            Identity or None if the provider does not know the user
        """
        for user_data in self.config.get("users", []):
            if str(user_data.get("id")) == str(user_id):
                return Identity(
                    id=str(user_id),
                    email=user_data.get("email", ""),
                    role=user_data.get("role"),
                )

        return None


# Global auth config instance
auth_config = AuthConfig()


def get_auth_config() -> AuthConfig:
    return auth_config


async def get_current_identity(
    x_user_id: str | None = Header(None, alias="X-User-ID"),
    config: AuthConfig = Depends(get_auth_config),
) -> Identity:
    """Resolve the caller from request headers.

    Raises:
        HTTPException: If the caller is missing or unknown
    """
    # Development mode: allow header-less requests
    if os.getenv("ENVIRONMENT", "development") == "development":
        if not x_user_id:
            return DEV_IDENTITY

    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-ID header",
        )

    identity = config.get_identity(x_user_id)

    if not identity:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User not authorized",
        )

    return identity


async def get_current_session(
    identity: Identity = Depends(get_current_identity),
    profiles: ProfileRepository = Depends(get_profile_repository),
) -> Session:
    """Open the session of an authenticated caller."""
    profile = profiles.ensure(identity.id, identity.email)
    return open_session(identity.id, identity.email, identity.role, profile)


async def require_admin(session: Session = Depends(get_current_session)) -> Session:
    """Dependency guarding the approval endpoints."""
    if not session.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return session
