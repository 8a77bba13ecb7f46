"""Infrastructure layer - Repository implementations.

Every write commits on its own; callers get no cross-call transaction.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from ...domain.entities import Admin as DomainAdmin
from ...domain.entities import AdminSession as DomainAdminSession
from ...domain.entities import Article as DomainArticle
from ...domain.entities import ArticleForm, ArticleSummary, SessionWithOwner
from ...domain.entities import AuditEvent as DomainAuditEvent
from ...domain.entities import RevisionSnapshot as DomainRevisionSnapshot
from ...domain.exceptions import StorageError
from ...logging_utils import log_database_operation
from .models import (
    AdminModel,
    ArticleModel,
    ArticleTagModel,
    ArticleVersionModel,
    AuditLogModel,
    SessionModel,
)


@contextmanager
def storage_operation(session: Session, operation: str, table: str) -> Iterator[None]:
    """Roll back and re-raise database failures as StorageError."""
    try:
        yield
    except SQLAlchemyError as e:
        session.rollback()
        log_database_operation(
            operation=operation,
            table=table,
            success=False,
            error_type=type(e).__name__,
            error=str(e),
        )
        raise StorageError(f"Database {operation} on {table} failed") from e


class AdminRepository:
    """Repository for Admin persistence operations."""

    def __init__(self, session: Session):
        self.session = session

    def exists_any(self) -> bool:
        """Check whether first-run setup has happened."""
        with storage_operation(self.session, "select", "admins"):
            return self.session.exec(select(AdminModel.id).limit(1)).first() is not None

    def add(
        self,
        username: str,
        password_hash: str,
        email: str | None = None,
        display_name: str | None = None,
    ) -> DomainAdmin:
        admin_model = AdminModel(
            username=username,
            password_hash=password_hash,
            email=email,
            display_name=display_name,
        )
        with storage_operation(self.session, "create", "admins"):
            self.session.add(admin_model)
            self.session.commit()
            self.session.refresh(admin_model)
        return admin_model.to_domain()

    def find_by_id(self, admin_id: int) -> DomainAdmin | None:
        with storage_operation(self.session, "select", "admins"):
            admin_model = self.session.get(AdminModel, admin_id)
        return admin_model.to_domain() if admin_model else None

    def find_by_username(self, username: str) -> DomainAdmin | None:
        with storage_operation(self.session, "select", "admins"):
            admin_model = self.session.exec(
                select(AdminModel).where(AdminModel.username == username)
            ).first()
        return admin_model.to_domain() if admin_model else None


class SessionRepository:
    """Repository for admin session rows."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, admin_session: DomainAdminSession) -> None:
        session_model = SessionModel(
            id=admin_session.id,
            admin_id=admin_session.admin_id,
            user_agent=admin_session.user_agent,
            ip=admin_session.ip,
            created_at=admin_session.created_at,
            expires_at=admin_session.expires_at,
        )
        with storage_operation(self.session, "create", "sessions"):
            self.session.add(session_model)
            self.session.commit()

    def find_by_id(self, session_id: str) -> DomainAdminSession | None:
        with storage_operation(self.session, "select", "sessions"):
            session_model = self.session.get(SessionModel, session_id)
        return session_model.to_domain() if session_model else None

    def delete(self, session_id: str) -> bool:
        """Delete a session row. Returns False when there was nothing to delete."""
        with storage_operation(self.session, "delete", "sessions"):
            session_model = self.session.get(SessionModel, session_id)
            if not session_model:
                return False
            self.session.delete(session_model)
            self.session.commit()
        return True

    def delete_by_admin(self, admin_id: int) -> int:
        with storage_operation(self.session, "delete", "sessions"):
            session_models = self.session.exec(
                select(SessionModel).where(SessionModel.admin_id == admin_id)
            ).all()
            for session_model in session_models:
                self.session.delete(session_model)
            self.session.commit()
        return len(session_models)

    def list_with_owner(self) -> list[SessionWithOwner]:
        """All sessions with their owner's username, newest first."""
        statement = (
            select(SessionModel, AdminModel.username)
            .join(AdminModel, col(SessionModel.admin_id) == col(AdminModel.id))
            .order_by(col(SessionModel.created_at).desc())
        )
        with storage_operation(self.session, "select", "sessions"):
            rows = self.session.exec(statement).all()
        return [
            SessionWithOwner(session=session_model.to_domain(), username=username)
            for session_model, username in rows
        ]

    def count(self) -> int:
        with storage_operation(self.session, "select", "sessions"):
            return int(
                self.session.exec(select(func.count()).select_from(SessionModel)).one()
            )


class ArticleRepository:
    """Repository for articles and their tags."""

    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, article_id: int) -> DomainArticle | None:
        with storage_operation(self.session, "select", "articles"):
            article_model = self.session.get(ArticleModel, article_id)
        if not article_model:
            return None
        return article_model.to_domain(self.tags_for(article_id))

    def find_by_slug(
        self, slug: str, status: str | None = None
    ) -> DomainArticle | None:
        statement = select(ArticleModel).where(ArticleModel.slug == slug)
        if status is not None:
            statement = statement.where(ArticleModel.status == status)
        with storage_operation(self.session, "select", "articles"):
            article_model = self.session.exec(statement).first()
        if not article_model:
            return None
        assert article_model.id is not None
        return article_model.to_domain(self.tags_for(article_model.id))

    def slug_taken(self, slug: str, exclude_id: int | None = None) -> bool:
        """Check whether a slug belongs to an article other than `exclude_id`."""
        statement = select(ArticleModel.id).where(ArticleModel.slug == slug)
        if exclude_id is not None:
            statement = statement.where(ArticleModel.id != exclude_id)
        with storage_operation(self.session, "select", "articles"):
            return self.session.exec(statement).first() is not None

    def add(self, form: ArticleForm, author_id: int | None) -> DomainArticle:
        article_model = ArticleModel(
            slug=form.slug,
            title=form.title,
            content=form.content,
            excerpt=form.excerpt,
            hero_image_key=form.hero_image_key,
            status=form.status,
            author_id=author_id,
        )
        with storage_operation(self.session, "create", "articles"):
            self.session.add(article_model)
            self.session.commit()
            self.session.refresh(article_model)
        return article_model.to_domain()

    def update(
        self, article_id: int, form: ArticleForm, updated_at: datetime
    ) -> DomainArticle | None:
        """Overwrite the live row with submitted values."""
        with storage_operation(self.session, "update", "articles"):
            article_model = self.session.get(ArticleModel, article_id)
            if not article_model:
                return None
            article_model.title = form.title
            article_model.slug = form.slug
            article_model.excerpt = form.excerpt
            article_model.content = form.content
            article_model.status = form.status
            article_model.hero_image_key = form.hero_image_key
            article_model.updated_at = updated_at
            self.session.add(article_model)
            self.session.commit()
            self.session.refresh(article_model)
        return article_model.to_domain()

    def delete(self, article_id: int) -> bool:
        with storage_operation(self.session, "delete", "articles"):
            article_model = self.session.get(ArticleModel, article_id)
            if not article_model:
                return False
            self.session.delete(article_model)
            self.session.commit()
        return True

    def list_summaries(self, limit: int | None = None) -> list[ArticleSummary]:
        statement = select(ArticleModel).order_by(
            col(ArticleModel.created_at).desc(), col(ArticleModel.id).desc()
        )
        if limit is not None:
            statement = statement.limit(limit)
        with storage_operation(self.session, "select", "articles"):
            article_models = self.session.exec(statement).all()
        return [article_model.to_summary() for article_model in article_models]

    def count(self) -> int:
        with storage_operation(self.session, "select", "articles"):
            return int(
                self.session.exec(select(func.count()).select_from(ArticleModel)).one()
            )

    def tags_for(self, article_id: int) -> list[str]:
        statement = (
            select(ArticleTagModel.tag)
            .where(ArticleTagModel.article_id == article_id)
            .order_by(col(ArticleTagModel.id))
        )
        with storage_operation(self.session, "select", "article_tags"):
            return list(self.session.exec(statement).all())

    def replace_tags(self, article_id: int, tags: list[str]) -> None:
        """Drop every tag of the article, then insert `tags` as given."""
        with storage_operation(self.session, "update", "article_tags"):
            existing = self.session.exec(
                select(ArticleTagModel).where(ArticleTagModel.article_id == article_id)
            ).all()
            for tag_model in existing:
                self.session.delete(tag_model)
            for tag in tags:
                self.session.add(ArticleTagModel(article_id=article_id, tag=tag))
            self.session.commit()


class RevisionRepository:
    """Append-only repository for article snapshots."""

    def __init__(self, session: Session):
        self.session = session

    def add(
        self,
        article_id: int,
        title: str,
        content: str,
        edited_by: int,
        edited_at: datetime,
    ) -> DomainRevisionSnapshot:
        version_model = ArticleVersionModel(
            article_id=article_id,
            title=title,
            content=content,
            edited_by=edited_by,
            edited_at=edited_at,
        )
        with storage_operation(self.session, "create", "article_versions"):
            self.session.add(version_model)
            self.session.commit()
            self.session.refresh(version_model)
        return version_model.to_domain()

    def find_by_article(self, article_id: int) -> list[DomainRevisionSnapshot]:
        statement = (
            select(ArticleVersionModel)
            .where(ArticleVersionModel.article_id == article_id)
            .order_by(
                col(ArticleVersionModel.edited_at).desc(),
                col(ArticleVersionModel.id).desc(),
            )
        )
        with storage_operation(self.session, "select", "article_versions"):
            return [row.to_domain() for row in self.session.exec(statement).all()]


class AuditLogRepository:
    """Append-only repository for the general audit log."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, event: DomainAuditEvent) -> DomainAuditEvent:
        audit_model = AuditLogModel(
            actor_id=event.actor_id,
            action=event.action,
            target_type=event.target_type,
            target_id=event.target_id,
            payload=event.payload,
            created_at=event.created_at,
        )
        with storage_operation(self.session, "create", "audit_log"):
            self.session.add(audit_model)
            self.session.commit()
            self.session.refresh(audit_model)
        return audit_model.to_domain()

    def find_recent(self, limit: int) -> list[DomainAuditEvent]:
        statement = (
            select(AuditLogModel)
            .order_by(
                col(AuditLogModel.created_at).desc(), col(AuditLogModel.id).desc()
            )
            .limit(limit)
        )
        with storage_operation(self.session, "select", "audit_log"):
            return [row.to_domain() for row in self.session.exec(statement).all()]
