"""Append-only history of article edits."""

from collections.abc import Callable
from datetime import datetime
from typing import Final

from sqlmodel import Session

from ..domain.entities import RevisionSnapshot, utcnow
from ..infrastructure.database.repositories import ArticleRepository, RevisionRepository
from ..logging_config import get_logger
from ..metrics import revisions_recorded_total

logger: Final = get_logger(__name__)


class RevisionLog:
    """Record the pre-edit state of an article.

    `snapshot` must run before the live row is overwritten, otherwise the new
    values would be recorded as history.
    """

    def __init__(self, session: Session, clock: Callable[[], datetime] = utcnow):
        self.articles = ArticleRepository(session)
        self.repo = RevisionRepository(session)
        self.clock = clock

    def snapshot(
        self, article_id: int, acting_admin_id: int
    ) -> RevisionSnapshot | None:
        """Copy the current title and content of `article_id`.

        Returns None without writing anything when the article does not exist.
        """
        current = self.articles.find_by_id(article_id)
        if current is None:
            logger.debug("Snapshot skipped - article not found", article_id=article_id)
            return None

        revision = self.repo.add(
            article_id=article_id,
            title=current.title,
            content=current.content,
            edited_by=acting_admin_id,
            edited_at=self.clock(),
        )
        revisions_recorded_total.add(1)
        logger.info(
            "Article revision recorded",
            article_id=article_id,
            revision_id=revision.id,
            edited_by=acting_admin_id,
        )
        return revision

    def history(self, article_id: int) -> list[RevisionSnapshot]:
        """Snapshots of `article_id`, newest first."""
        return self.repo.find_by_article(article_id)
