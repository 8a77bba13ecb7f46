from typing import Final

from sqlmodel import Session

from ..domain.entities import AdminSession, Article, ArticleSummary
from ..domain.exceptions import ArticleNotFoundError
from ..infrastructure.database.repositories import ArticleRepository
from ..logging_config import get_logger

logger: Final = get_logger(__name__)

PUBLISHED: Final = "published"


class ArticleService:
    """Read side of articles for the admin lists and the public page."""

    def __init__(self, session: Session):
        self.articles = ArticleRepository(session)

    def list_articles(self) -> list[ArticleSummary]:
        return self.articles.list_summaries()

    def get_article(self, article_id: int) -> Article:
        article = self.articles.find_by_id(article_id)
        if article is None:
            raise ArticleNotFoundError(article_id)
        return article

    def get_article_for_display(
        self, slug: str, viewer: AdminSession | None
    ) -> Article:
        """Published articles for everyone; any status for a logged-in admin."""
        status = None if viewer is not None else PUBLISHED
        article = self.articles.find_by_slug(slug, status=status)
        if article is None:
            logger.debug("Article not visible", slug=slug, as_admin=viewer is not None)
            raise ArticleNotFoundError(slug)
        return article
