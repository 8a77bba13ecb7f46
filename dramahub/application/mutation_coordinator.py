"""Article writes: validation, conflict checks, snapshots and tag upkeep.

An edit moves through

    Unauthenticated -> Guarded -> Snapshotted -> Persisted -> tags reconciled

Holding an `Authenticated` result is what makes a caller Guarded, so every
mutation takes one. Each step commits on its own; an aborted request can leave
a snapshot without the matching write.
"""

import secrets
from collections.abc import Callable
from datetime import datetime
from typing import Final

from sqlmodel import Session

from ..domain.constants import GENERATED_SLUG_LENGTH, SLUG_ALPHABET
from ..domain.entities import Article, ArticleForm, utcnow
from ..domain.exceptions import ArticleNotFoundError, SlugConflictError
from ..infrastructure.database.repositories import ArticleRepository
from ..logging_config import get_logger
from ..logging_utils import log_admin_action, log_database_operation
from ..metrics import record_article_mutation
from .auth_guard import Authenticated
from .revision_log import RevisionLog

logger: Final = get_logger(__name__)


def generate_slug() -> str:
    """Random default slug offered by the new-article form."""
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(GENERATED_SLUG_LENGTH))


class MutationCoordinator:
    """The only component that touches articles, tags and revisions together."""

    def __init__(self, session: Session, clock: Callable[[], datetime] = utcnow):
        self.articles = ArticleRepository(session)
        self.revisions = RevisionLog(session, clock=clock)
        self.clock = clock

    def create_article(self, guarded: Authenticated, form: ArticleForm) -> Article:
        """Insert a new article. Creation never writes a revision.

        Raises:
            ValidationError: If required fields are missing or malformed
            SlugConflictError: If the slug is already in use
        """
        form.validate()
        if self.articles.slug_taken(form.slug):
            logger.warning("Article creation failed - slug taken", slug=form.slug)
            raise SlugConflictError(form.slug)

        article = self.articles.add(form, author_id=guarded.admin_id)
        assert article.id is not None
        tags = form.tags
        if tags:
            self.articles.replace_tags(article.id, tags)
        article.tags = tags

        record_article_mutation("create")
        log_database_operation(
            operation="create",
            table="articles",
            article_id=article.id,
            slug=article.slug,
        )
        log_admin_action("create_article", guarded.admin_id, article_id=article.id)
        return article

    def update_article(
        self, guarded: Authenticated, article_id: int, form: ArticleForm
    ) -> Article:
        """Snapshot the current article, then overwrite it with `form`.

        Validation, existence and slug checks all run before the snapshot, so a
        rejected edit leaves neither history nor live row changed.

        Raises:
            ValidationError: If required fields are missing or malformed
            ArticleNotFoundError: If `article_id` does not exist
            SlugConflictError: If another article already uses the slug
        """
        form.validate()
        if self.articles.find_by_id(article_id) is None:
            logger.warning("Article update failed - not found", article_id=article_id)
            raise ArticleNotFoundError(article_id)
        if self.articles.slug_taken(form.slug, exclude_id=article_id):
            logger.warning(
                "Article update failed - slug taken",
                article_id=article_id,
                slug=form.slug,
            )
            raise SlugConflictError(form.slug)

        self.revisions.snapshot(article_id, guarded.admin_id)

        article = self.articles.update(article_id, form, updated_at=self.clock())
        if article is None:
            # Deleted by a concurrent request between the checks and the write
            raise ArticleNotFoundError(article_id)

        tags = form.tags
        self.articles.replace_tags(article_id, tags)
        article.tags = tags

        record_article_mutation("update")
        log_database_operation(
            operation="update", table="articles", article_id=article_id, slug=form.slug
        )
        log_admin_action("update_article", guarded.admin_id, article_id=article_id)
        return article

    def delete_article(self, guarded: Authenticated, article_id: int) -> None:
        """Remove an article. Tags and revisions go with it by FK cascade.

        Raises:
            ArticleNotFoundError: If `article_id` does not exist
        """
        if not self.articles.delete(article_id):
            logger.warning("Article deletion failed - not found", article_id=article_id)
            raise ArticleNotFoundError(article_id)

        record_article_mutation("delete")
        log_database_operation(
            operation="delete", table="articles", article_id=article_id
        )
        log_admin_action("delete_article", guarded.admin_id, article_id=article_id)
