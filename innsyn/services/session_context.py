"""
Session context: who is acting and in which session.

Identity is resolved once in ``SessionContext.initialize`` and the
resulting object is immutable; services receive it explicitly instead of
reading ambient client state.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from uuid import uuid4

from config.settings import settings
from innsyn.exceptions import NotApprovedError, NotAuthenticatedError, StoreError
from innsyn.services.identity_service import IdentityProvider
from innsyn.utils.audit_logger import security_audit_logger

logger = logging.getLogger(__name__)


class SessionTokenStore:
    """Random session token persisted in a local state directory"""

    def __init__(self, state_dir: Optional[Path] = None, key: Optional[str] = None):
        self.state_dir = Path(state_dir or settings.session.state_dir)
        self.key = key or settings.session.session_key

    @property
    def path(self) -> Path:
        return self.state_dir / self.key

    def load_or_create(self) -> str:
        """
        Return the persisted token, creating one on first use.

        If the state directory is not writable the token only lives for
        this process.
        """
        try:
            if self.path.exists():
                existing = self.path.read_text(encoding="utf-8").strip()
                if existing:
                    return existing
        except OSError as e:
            logger.warning(f"Could not read session token from {self.path}: {e}")

        token = str(uuid4())
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            self.path.write_text(token, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not persist session token to {self.path}: {e}")
        return token


@dataclass(frozen=True)
class SessionContext:
    """Identity of the acting user plus the session token"""

    session_id: str
    user_id: Optional[str] = None
    email: Optional[str] = None
    approved: bool = False

    @classmethod
    async def initialize(
        cls,
        identity: IdentityProvider,
        token_store: Optional[SessionTokenStore] = None,
    ) -> "SessionContext":
        """
        Resolve session token and identity once.

        Args:
            identity: Identity provider to ask for the current user
            token_store: Where the session token lives

        Returns:
            Immutable SessionContext
        """
        session_id = (token_store or SessionTokenStore()).load_or_create()

        user = await identity.get_current_user()
        if user is None:
            logger.info("Session started without an authenticated user")
            return cls(session_id=session_id)

        try:
            approved = await identity.is_approved(user.id)
        except StoreError as e:
            logger.error(f"Could not read approval for user {user.id}: {e.message}")
            approved = False

        logger.info(f"Session started for user {user.id} (approved={approved})")
        return cls(session_id=session_id, user_id=user.id, email=user.email, approved=approved)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def require_user(self) -> str:
        """Return the user id or raise ``NotAuthenticatedError``."""
        if not self.user_id:
            raise NotAuthenticatedError()
        return self.user_id

    def require_approved(self) -> str:
        """Return the user id of an approved user or raise."""
        user_id = self.require_user()
        if not self.approved:
            security_audit_logger.log_access_denied(user_id, reason="User not approved")
            raise NotApprovedError()
        return user_id
