from typing import Final

from fastapi import APIRouter, Depends, Request

from ..application.article_service import ArticleService
from ..application.auth_guard import AuthGuard
from ..config import settings
from .admin_routes import ArticleDetailResponse
from .dependencies import get_article_service, get_auth_guard

router: Final = APIRouter(tags=["articles"])
api_router: Final = APIRouter(prefix="/api", tags=["health"])


@router.get("/articles/{slug}", response_model=ArticleDetailResponse)
def show_article(
    request: Request,
    slug: str,
    guard: AuthGuard = Depends(get_auth_guard),
    article_service: ArticleService = Depends(get_article_service),
) -> ArticleDetailResponse:
    """Public article page. Drafts and archived articles are admin-only."""
    viewer = guard.get_session(request)
    article = article_service.get_article_for_display(slug, viewer)
    return ArticleDetailResponse.from_article(article)


@api_router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "version": settings.version}
