from datetime import datetime
from typing import Final

from fastapi import APIRouter, Depends, Form, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, ConfigDict, Field

from ..application.admin_service import AdminService
from ..application.article_service import ArticleService
from ..application.auth_guard import AuthGuard, Unauthenticated
from ..application.credentials import CredentialCodec
from ..application.mutation_coordinator import MutationCoordinator, generate_slug
from ..application.session_store import SessionStore, session_handle
from ..constants import ADMIN_ARTICLES_PATH, ADMIN_HOME_PATH, SETUP_PATH
from ..domain.entities import Article, ArticleForm
from ..logging_config import get_logger
from ..request_utils import get_client_ip, get_user_agent
from .dependencies import (
    get_admin_service,
    get_article_service,
    get_auth_guard,
    get_credential_codec,
    get_mutation_coordinator,
    get_session_store,
)

logger: Final = get_logger(__name__)

admin_router: Final = APIRouter(
    prefix="/admin",
    tags=["admin"],
    responses={
        302: {"description": "Redirect - login required or action completed"},
        400: {"description": "Bad Request - Invalid form data"},
        404: {"description": "Not Found - Article does not exist"},
        409: {"description": "Conflict - Slug already in use"},
    },
)


# Response Models
class AdminPrincipal(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    display_name: str | None = None
    email: str | None = None


class ArticleSummaryResponse(BaseModel):
    """Article row shown in admin lists."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    status: str
    created_at: datetime
    updated_at: datetime


class DashboardResponse(BaseModel):
    admin: AdminPrincipal
    article_count: int = Field(description="Number of articles in any status")
    session_count: int = Field(description="Number of stored admin sessions")
    recent_articles: list[ArticleSummaryResponse]


class SessionInfo(BaseModel):
    """One admin session as shown on the session management page."""

    handle: str = Field(description="Short hash identifying the session")
    username: str
    ip: str | None
    user_agent: str | None
    created_at: datetime
    expires_at: datetime | None
    current: bool = Field(description="Whether this is the caller's own session")


class SessionListResponse(BaseModel):
    sessions: list[SessionInfo]


class ArticleDetailResponse(BaseModel):
    """Article with its tags, as loaded into the editor or the public page."""

    id: int
    slug: str
    title: str
    content: str
    status: str
    excerpt: str | None
    hero_image_key: str | None
    author_id: int | None
    created_at: datetime | None
    updated_at: datetime | None
    tags: list[str]
    tags_text: str = Field(description="Tags joined for the editor input")

    @classmethod
    def from_article(cls, article: Article) -> "ArticleDetailResponse":
        assert article.id is not None
        return cls(
            id=article.id,
            slug=article.slug,
            title=article.title,
            content=article.content,
            status=article.status,
            excerpt=article.excerpt,
            hero_image_key=article.hero_image_key,
            author_id=article.author_id,
            created_at=article.created_at,
            updated_at=article.updated_at,
            tags=article.tags,
            tags_text=", ".join(article.tags),
        )


class RevisionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    article_id: int
    title: str
    content: str
    edited_by: int
    edited_at: datetime


def _redirect(url: str, credential: str | None = None) -> Response:
    response = RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)
    if credential is not None:
        CredentialCodec.attach(response, credential)
    return response


def _article_form(
    title: str,
    slug: str,
    content: str,
    article_status: str,
    excerpt: str | None,
    hero_image_key: str | None,
    tags: str | None,
) -> ArticleForm:
    return ArticleForm(
        title=title,
        slug=slug,
        content=content,
        status=article_status,
        excerpt=excerpt,
        hero_image_key=hero_image_key,
        tags_raw=tags,
    )


# First-run setup
@admin_router.get("/setup", response_model=None)
def setup_page(
    admin_service: AdminService = Depends(get_admin_service),
    guard: AuthGuard = Depends(get_auth_guard),
) -> Response | dict[str, bool]:
    if admin_service.has_admin():
        return _redirect(guard.login_path)
    return {"setup_required": True}


@admin_router.post("/setup", response_model=None)
def setup_submit(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    display_name: str | None = Form(None),
    email: str | None = Form(None),
    admin_service: AdminService = Depends(get_admin_service),
    codec: CredentialCodec = Depends(get_credential_codec),
) -> Response:
    admin = admin_service.setup_first_admin(
        username, password, display_name=display_name, email=email
    )
    token = admin_service.store.create(
        admin.id, user_agent=get_user_agent(request), ip=get_client_ip(request)
    )
    return _redirect(ADMIN_HOME_PATH, codec.encode(token))


# Login / logout
@admin_router.get("/login", response_model=None)
def login_page(
    request: Request,
    admin_service: AdminService = Depends(get_admin_service),
    guard: AuthGuard = Depends(get_auth_guard),
) -> Response | dict[str, bool]:
    if guard.get_session(request) is not None:
        return _redirect(ADMIN_HOME_PATH)
    if not admin_service.has_admin():
        return _redirect(SETUP_PATH)
    return {"login_required": True}


@admin_router.post("/login", response_model=None)
def login_submit(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    admin_service: AdminService = Depends(get_admin_service),
    codec: CredentialCodec = Depends(get_credential_codec),
) -> Response:
    token = admin_service.login(
        username,
        password,
        user_agent=get_user_agent(request),
        ip=get_client_ip(request),
    )
    return _redirect(ADMIN_HOME_PATH, codec.encode(token))


@admin_router.post("/logout", response_model=None)
def logout(
    request: Request,
    admin_service: AdminService = Depends(get_admin_service),
    guard: AuthGuard = Depends(get_auth_guard),
    codec: CredentialCodec = Depends(get_credential_codec),
) -> Response:
    admin_service.logout(codec.decode(request.headers.get("cookie")))
    return _redirect(guard.login_path, codec.encode_clear())


# Dashboard
@admin_router.get("", response_model=DashboardResponse)
def dashboard(
    request: Request,
    guard: AuthGuard = Depends(get_auth_guard),
    admin_service: AdminService = Depends(get_admin_service),
) -> Response | DashboardResponse:
    outcome = guard.require_session(request)
    if isinstance(outcome, Unauthenticated):
        return outcome.to_response()

    admin = admin_service.get_admin(outcome.admin_id)
    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Admin not found"
        )

    stats = admin_service.dashboard()
    return DashboardResponse(
        admin=AdminPrincipal.model_validate(admin),
        article_count=stats.article_count,
        session_count=stats.session_count,
        recent_articles=[
            ArticleSummaryResponse.model_validate(summary)
            for summary in stats.recent_articles
        ],
    )


# Session management
@admin_router.get("/sessions", response_model=SessionListResponse)
def list_sessions(
    request: Request,
    guard: AuthGuard = Depends(get_auth_guard),
    store: SessionStore = Depends(get_session_store),
) -> Response | SessionListResponse:
    outcome = guard.require_session(request)
    if isinstance(outcome, Unauthenticated):
        return outcome.to_response()

    return SessionListResponse(
        sessions=[
            SessionInfo(
                handle=session_handle(entry.session.id),
                username=entry.username,
                ip=entry.session.ip,
                user_agent=entry.session.user_agent,
                created_at=entry.session.created_at,
                expires_at=entry.session.expires_at,
                current=entry.session.id == outcome.session.id,
            )
            for entry in store.list_for_audit()
        ]
    )


@admin_router.post("/sessions/revoke", response_model=None)
def revoke_session(
    request: Request,
    handle: str = Form(""),
    guard: AuthGuard = Depends(get_auth_guard),
    store: SessionStore = Depends(get_session_store),
) -> Response:
    outcome = guard.require_session(request)
    if isinstance(outcome, Unauthenticated):
        return outcome.to_response()

    if handle and store.revoke_by_handle(handle):
        logger.info("Session revoked from management page", admin_id=outcome.admin_id)
    return _redirect(f"{ADMIN_HOME_PATH}/sessions")


# Articles
@admin_router.get("/articles", response_model=list[ArticleSummaryResponse])
def list_articles(
    request: Request,
    guard: AuthGuard = Depends(get_auth_guard),
    article_service: ArticleService = Depends(get_article_service),
) -> Response | list[ArticleSummaryResponse]:
    outcome = guard.require_session(request)
    if isinstance(outcome, Unauthenticated):
        return outcome.to_response()

    return [
        ArticleSummaryResponse.model_validate(summary)
        for summary in article_service.list_articles()
    ]


@admin_router.get("/articles/new", response_model=None)
def new_article(
    request: Request,
    guard: AuthGuard = Depends(get_auth_guard),
) -> Response | dict[str, str]:
    outcome = guard.require_session(request)
    if isinstance(outcome, Unauthenticated):
        return outcome.to_response()
    return {"slug": generate_slug()}


@admin_router.post("/articles", response_model=None)
def create_article(
    request: Request,
    title: str = Form(""),
    slug: str = Form(""),
    content: str = Form(""),
    article_status: str = Form("draft", alias="status"),
    excerpt: str | None = Form(None),
    hero_image_key: str | None = Form(None),
    tags: str | None = Form(None),
    guard: AuthGuard = Depends(get_auth_guard),
    coordinator: MutationCoordinator = Depends(get_mutation_coordinator),
) -> Response:
    outcome = guard.require_session(request)
    if isinstance(outcome, Unauthenticated):
        return outcome.to_response()

    form = _article_form(
        title, slug, content, article_status, excerpt, hero_image_key, tags
    )
    coordinator.create_article(outcome, form)
    return _redirect(ADMIN_ARTICLES_PATH)


@admin_router.get("/articles/{article_id}", response_model=ArticleDetailResponse)
def get_article(
    request: Request,
    article_id: int,
    guard: AuthGuard = Depends(get_auth_guard),
    article_service: ArticleService = Depends(get_article_service),
) -> Response | ArticleDetailResponse:
    outcome = guard.require_session(request)
    if isinstance(outcome, Unauthenticated):
        return outcome.to_response()

    return ArticleDetailResponse.from_article(article_service.get_article(article_id))


@admin_router.post("/articles/{article_id}", response_model=None)
def edit_article(
    request: Request,
    article_id: int,
    intent: str | None = Form(None, alias="_intent"),
    title: str = Form(""),
    slug: str = Form(""),
    content: str = Form(""),
    article_status: str = Form("draft", alias="status"),
    excerpt: str | None = Form(None),
    hero_image_key: str | None = Form(None),
    tags: str | None = Form(None),
    guard: AuthGuard = Depends(get_auth_guard),
    coordinator: MutationCoordinator = Depends(get_mutation_coordinator),
) -> Response:
    outcome = guard.require_session(request)
    if isinstance(outcome, Unauthenticated):
        return outcome.to_response()

    if intent == "delete":
        coordinator.delete_article(outcome, article_id)
    else:
        form = _article_form(
            title, slug, content, article_status, excerpt, hero_image_key, tags
        )
        coordinator.update_article(outcome, article_id, form)
    return _redirect(ADMIN_ARTICLES_PATH)


@admin_router.get(
    "/articles/{article_id}/versions", response_model=list[RevisionResponse]
)
def article_versions(
    request: Request,
    article_id: int,
    guard: AuthGuard = Depends(get_auth_guard),
    article_service: ArticleService = Depends(get_article_service),
    coordinator: MutationCoordinator = Depends(get_mutation_coordinator),
) -> Response | list[RevisionResponse]:
    outcome = guard.require_session(request)
    if isinstance(outcome, Unauthenticated):
        return outcome.to_response()

    article_service.get_article(article_id)
    return [
        RevisionResponse.model_validate(revision)
        for revision in coordinator.revisions.history(article_id)
    ]
