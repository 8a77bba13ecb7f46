"""Persistent lifecycle of admin sessions."""

import hashlib
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Final

from sqlmodel import Session

from ..constants import SESSION_MAX_AGE_SECONDS
from ..domain.entities import AdminSession, SessionWithOwner, utcnow
from ..infrastructure.database.repositories import SessionRepository
from ..logging_config import get_logger
from ..metrics import sessions_issued_total, sessions_revoked_total

logger: Final = get_logger(__name__)

TOKEN_BYTES: Final = 32
HANDLE_LENGTH: Final = 16


def generate_token() -> str:
    """A URL-safe token from the OS CSPRNG. Uniqueness is probabilistic."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def session_handle(token: str) -> str:
    """Public identifier of a session; the token itself is never listed."""
    return hashlib.sha256(token.encode()).hexdigest()[:HANDLE_LENGTH]


class SessionStore:
    """Create, validate, list and revoke session rows.

    The database is the only source of truth; nothing is cached between calls.
    """

    def __init__(
        self,
        session: Session,
        max_age_seconds: int = SESSION_MAX_AGE_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repo = SessionRepository(session)
        self.max_age = timedelta(seconds=max_age_seconds)
        self.clock = clock

    def create(
        self, admin_id: int, user_agent: str | None = None, ip: str | None = None
    ) -> str:
        """Insert a new session for `admin_id` and return its token.

        Raises:
            StorageError: If the row cannot be written
        """
        now = self.clock()
        admin_session = AdminSession(
            id=generate_token(),
            admin_id=admin_id,
            user_agent=user_agent,
            ip=ip,
            created_at=now,
            expires_at=now + self.max_age,
        )
        self.repo.add(admin_session)

        sessions_issued_total.add(1)
        logger.info(
            "Admin session created",
            admin_id=admin_id,
            ip=ip,
            expires_at=admin_session.expires_at.isoformat()
            if admin_session.expires_at
            else None,
        )
        return admin_session.id

    def validate(self, token: str) -> AdminSession | None:
        """Return the session for `token` if it exists and has not lapsed.

        Lapsed rows are left in place.
        """
        admin_session = self.repo.find_by_id(token)
        if admin_session is None:
            return None
        if not admin_session.is_valid_at(self.clock()):
            logger.debug("Admin session expired", admin_id=admin_session.admin_id)
            return None
        return admin_session

    def revoke(self, token: str) -> None:
        """Delete the session. Revoking an unknown token is a no-op."""
        if self.repo.delete(token):
            sessions_revoked_total.add(1)
            logger.info("Admin session revoked")
        else:
            logger.debug("Revoke requested for unknown session")

    def revoke_by_handle(self, handle: str) -> bool:
        """Revoke the session listed under `handle`; False if none matches."""
        for entry in self.repo.list_with_owner():
            if session_handle(entry.session.id) == handle:
                self.revoke(entry.session.id)
                return True
        logger.debug("Revoke requested for unknown session handle")
        return False

    def revoke_all_for_admin(self, admin_id: int) -> int:
        """Delete every session owned by `admin_id`; returns how many went."""
        removed = self.repo.delete_by_admin(admin_id)
        if removed:
            sessions_revoked_total.add(removed)
        logger.info("Admin sessions revoked", admin_id=admin_id, count=removed)
        return removed

    def list_for_audit(self) -> list[SessionWithOwner]:
        """All sessions with owner usernames, newest first."""
        return self.repo.list_with_owner()

    def count(self) -> int:
        return self.repo.count()
