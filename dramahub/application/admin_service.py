"""First-run setup, login and the admin dashboard."""

from dataclasses import dataclass
from typing import Final

from sqlmodel import Session

from ..domain.constants import MAX_USERNAME_LENGTH, MIN_PASSWORD_LENGTH
from ..domain.entities import Admin, ArticleSummary
from ..domain.exceptions import (
    InvalidCredentialsError,
    SetupAlreadyCompletedError,
    ValidationError,
)
from ..infrastructure.database.repositories import AdminRepository, ArticleRepository
from ..infrastructure.security.passwords import hash_password, verify_password
from ..logging_config import get_logger
from ..logging_utils import log_admin_action
from ..metrics import login_failures_total
from .session_store import SessionStore

logger: Final = get_logger(__name__)

RECENT_ARTICLES_LIMIT: Final = 5


@dataclass(frozen=True)
class DashboardStats:
    article_count: int
    session_count: int
    recent_articles: list[ArticleSummary]


class AdminService:
    """Application service for admin accounts and their sessions."""

    def __init__(
        self,
        session: Session,
        store: SessionStore,
        min_password_length: int = MIN_PASSWORD_LENGTH,
    ):
        self.admins = AdminRepository(session)
        self.articles = ArticleRepository(session)
        self.store = store
        self.min_password_length = min_password_length

    def has_admin(self) -> bool:
        return self.admins.exists_any()

    def setup_first_admin(
        self,
        username: str,
        password: str,
        display_name: str | None = None,
        email: str | None = None,
    ) -> Admin:
        """Create the one admin account a fresh install needs.

        Raises:
            SetupAlreadyCompletedError: If any admin already exists
            ValidationError: If username is blank or password too short
        """
        if self.admins.exists_any():
            logger.warning("Setup rejected - admin already exists")
            raise SetupAlreadyCompletedError("An admin account already exists")

        username = (username or "").strip()
        if not username:
            raise ValidationError("Username is required", field="username")
        if len(username) > MAX_USERNAME_LENGTH:
            raise ValidationError(
                f"Username cannot be longer than {MAX_USERNAME_LENGTH} characters",
                field="username",
            )
        if not password or len(password) < self.min_password_length:
            raise ValidationError(
                f"Password must be at least {self.min_password_length} characters",
                field="password",
            )

        admin = self.admins.add(
            username=username,
            password_hash=hash_password(password),
            email=email or None,
            display_name=display_name or None,
        )
        log_admin_action("setup", admin.id, username=admin.username)
        return admin

    def authenticate(self, username: str, password: str) -> Admin:
        """Check a username/password pair.

        Raises:
            InvalidCredentialsError: Unknown user or wrong password; the two are
                indistinguishable to the caller
        """
        if not username or not password:
            raise ValidationError("Username and password are required")

        admin = self.admins.find_by_username(username.strip())
        if admin is None or not verify_password(admin.password_hash, password):
            login_failures_total.add(1)
            logger.warning("Login failed", username=username)
            raise InvalidCredentialsError("Invalid username or password")
        return admin

    def login(
        self,
        username: str,
        password: str,
        user_agent: str | None = None,
        ip: str | None = None,
    ) -> str:
        """Authenticate and open a session; returns the session token."""
        admin = self.authenticate(username, password)
        token = self.store.create(admin.id, user_agent=user_agent, ip=ip)
        log_admin_action("login", admin.id, ip=ip)
        return token

    def logout(self, token: str | None) -> None:
        """Revoke the caller's session if there is one."""
        if token:
            self.store.revoke(token)

    def get_admin(self, admin_id: int) -> Admin | None:
        return self.admins.find_by_id(admin_id)

    def dashboard(self) -> DashboardStats:
        return DashboardStats(
            article_count=self.articles.count(),
            session_count=self.store.count(),
            recent_articles=self.articles.list_summaries(limit=RECENT_ARTICLES_LIMIT),
        )
