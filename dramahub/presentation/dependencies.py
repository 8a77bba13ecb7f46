"""FastAPI dependency providers for the admin components."""

from fastapi import Depends
from sqlmodel import Session

from ..application.admin_service import AdminService
from ..application.article_service import ArticleService
from ..application.auth_guard import AuthGuard
from ..application.credentials import CredentialCodec
from ..application.mutation_coordinator import MutationCoordinator
from ..application.session_store import SessionStore
from ..config import settings
from ..infrastructure.database.database import get_session


def get_credential_codec() -> CredentialCodec:
    return CredentialCodec(settings.cookie_config())


def get_session_store(session: Session = Depends(get_session)) -> SessionStore:
    return SessionStore(session, max_age_seconds=settings.session_max_age_seconds)


def get_auth_guard(
    codec: CredentialCodec = Depends(get_credential_codec),
    store: SessionStore = Depends(get_session_store),
) -> AuthGuard:
    return AuthGuard(codec, store, login_path=settings.login_path)


def get_admin_service(
    session: Session = Depends(get_session),
    store: SessionStore = Depends(get_session_store),
) -> AdminService:
    return AdminService(
        session, store, min_password_length=settings.min_password_length
    )


def get_article_service(session: Session = Depends(get_session)) -> ArticleService:
    return ArticleService(session)


def get_mutation_coordinator(
    session: Session = Depends(get_session),
) -> MutationCoordinator:
    return MutationCoordinator(session)
