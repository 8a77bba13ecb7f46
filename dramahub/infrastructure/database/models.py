from datetime import datetime

from sqlalchemy import Text
from sqlmodel import Field, SQLModel

from ...domain.constants import (
    DEFAULT_ARTICLE_STATUS,
    MAX_CLIENT_IP_LENGTH,
    MAX_SLUG_LENGTH,
    MAX_TAG_LENGTH,
    MAX_TITLE_LENGTH,
    MAX_USERNAME_LENGTH,
)
from ...domain.entities import Admin as DomainAdmin
from ...domain.entities import AdminSession as DomainAdminSession
from ...domain.entities import Article as DomainArticle
from ...domain.entities import ArticleSummary
from ...domain.entities import AuditEvent as DomainAuditEvent
from ...domain.entities import RevisionSnapshot as DomainRevisionSnapshot
from ...domain.entities import utcnow


class AdminModel(SQLModel, table=True):  # type: ignore[call-arg]
    """An administrator account. Created once by first-run setup."""

    __tablename__: str = "admins"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True, max_length=MAX_USERNAME_LENGTH)
    email: str | None = None
    password_hash: str
    display_name: str | None = None
    created_at: datetime = Field(default_factory=utcnow)

    def to_domain(self) -> DomainAdmin:
        """Convert persistence model to domain entity."""
        assert self.id is not None
        return DomainAdmin(
            id=self.id,
            username=self.username,
            email=self.email,
            password_hash=self.password_hash,
            display_name=self.display_name,
            created_at=self.created_at,
        )


class SessionModel(SQLModel, table=True):  # type: ignore[call-arg]
    """A server-side admin session keyed by the token held in the cookie."""

    __tablename__: str = "sessions"  # type: ignore[assignment]

    id: str = Field(primary_key=True, max_length=128)
    admin_id: int = Field(foreign_key="admins.id", index=True, ondelete="CASCADE")
    user_agent: str | None = None
    ip: str | None = Field(default=None, max_length=MAX_CLIENT_IP_LENGTH)
    created_at: datetime = Field(default_factory=utcnow, index=True)
    expires_at: datetime | None = Field(default=None, index=True)

    def to_domain(self) -> DomainAdminSession:
        """Convert persistence model to domain entity."""
        return DomainAdminSession(
            id=self.id,
            admin_id=self.admin_id,
            user_agent=self.user_agent,
            ip=self.ip,
            created_at=self.created_at,
            expires_at=self.expires_at,
        )


class ArticleModel(SQLModel, table=True):  # type: ignore[call-arg]
    """An article. `content` holds markdown source."""

    __tablename__: str = "articles"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    slug: str = Field(unique=True, index=True, max_length=MAX_SLUG_LENGTH)
    title: str = Field(max_length=MAX_TITLE_LENGTH)
    content: str = Field(sa_type=Text)
    excerpt: str | None = Field(default=None, sa_type=Text)
    hero_image_key: str | None = None
    status: str = Field(default=DEFAULT_ARTICLE_STATUS, index=True)
    author_id: int | None = Field(
        default=None, foreign_key="admins.id", ondelete="SET NULL"
    )
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)

    def to_domain(self, tags: list[str] | None = None) -> DomainArticle:
        """Convert persistence model to domain entity."""
        return DomainArticle(
            id=self.id,
            slug=self.slug,
            title=self.title,
            content=self.content,
            excerpt=self.excerpt,
            hero_image_key=self.hero_image_key,
            status=self.status,
            author_id=self.author_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
            tags=list(tags or []),
        )

    def to_summary(self) -> ArticleSummary:
        assert self.id is not None
        return ArticleSummary(
            id=self.id,
            title=self.title,
            slug=self.slug,
            status=self.status,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class ArticleTagModel(SQLModel, table=True):  # type: ignore[call-arg]
    """Tag attached to an article. The same tag may appear twice."""

    __tablename__: str = "article_tags"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    article_id: int = Field(foreign_key="articles.id", index=True, ondelete="CASCADE")
    tag: str = Field(index=True, max_length=MAX_TAG_LENGTH)


class ArticleVersionModel(SQLModel, table=True):  # type: ignore[call-arg]
    """Pre-edit snapshot of an article. Rows are never updated."""

    __tablename__: str = "article_versions"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    article_id: int = Field(foreign_key="articles.id", index=True, ondelete="CASCADE")
    title: str
    content: str = Field(sa_type=Text)
    edited_by: int = Field(foreign_key="admins.id")
    edited_at: datetime = Field(default_factory=utcnow, index=True)

    def to_domain(self) -> DomainRevisionSnapshot:
        """Convert persistence model to domain entity."""
        return DomainRevisionSnapshot(
            id=self.id,
            article_id=self.article_id,
            title=self.title,
            content=self.content,
            edited_by=self.edited_by,
            edited_at=self.edited_at,
        )


class AuditLogModel(SQLModel, table=True):  # type: ignore[call-arg]
    """Reserved append-only action log."""

    __tablename__: str = "audit_log"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    actor_id: int | None = Field(default=None, index=True)
    action: str | None = Field(default=None, index=True)
    target_type: str | None = None
    target_id: str | None = None
    payload: str | None = Field(default=None, sa_type=Text)
    created_at: datetime = Field(default_factory=utcnow, index=True)

    def to_domain(self) -> DomainAuditEvent:
        """Convert persistence model to domain entity."""
        return DomainAuditEvent(
            id=self.id,
            actor_id=self.actor_id,
            action=self.action,
            target_type=self.target_type,
            target_id=self.target_id,
            payload=self.payload,
            created_at=self.created_at,
        )
