"""Centralized error handling for the presentation layer."""

from typing import Any, Final

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ..config import settings
from ..domain.exceptions import (
    ArticleNotFoundError,
    DomainError,
    InvalidCredentialsError,
    SetupAlreadyCompletedError,
    SlugConflictError,
    StorageError,
    ValidationError,
)
from ..logging_config import get_logger
from .problem_details import (
    ConflictProblemDetail,
    ErrorCodes,
    ProblemDetail,
    ProblemDetailFactory,
    ValidationProblemDetail,
    problem_content,
)

MESSAGES: Final[dict[str, dict[str, str]]] = {
    "ja": {
        "article_required": "タイトル、スラッグ、本文は必須です。",
        "slug_format": "スラッグは英数字、ハイフン、アンダースコアのみ使用できます。",
        "too_long": "入力が長すぎます。短くしてください。",
        "invalid_status": "公開状態の値が正しくありません。",
        "setup_requirements": "ユーザー名と、{min_length}文字以上のパスワードが必要です。",
        "credentials_required": "ユーザー名とパスワードを入力してください。",
        "invalid_credentials": "ユーザー名またはパスワードが間違っています。",
        "slug_conflict": "このスラッグは既に他の記事で使われています。",
        "article_not_found": "記事が見つかりません。",
        "setup_completed": "管理者アカウントは既に作成されています。",
        "storage": "保存中にエラーが発生しました",
        "invalid_request": "無効なリクエストです",
        "unexpected": "エラーが発生しました",
    },
    "en": {
        "article_required": "Title, slug and content are required.",
        "slug_format": "Slugs may only use letters, digits, hyphens and underscores.",
        "too_long": "The input is too long. Please shorten it.",
        "invalid_status": "The publication status is not valid.",
        "setup_requirements": "A username and a password of at least "
        "{min_length} characters are required.",
        "credentials_required": "Please enter your username and password.",
        "invalid_credentials": "The username or password is incorrect.",
        "slug_conflict": "This slug is already used by another article.",
        "article_not_found": "Article not found.",
        "setup_completed": "An admin account has already been created.",
        "storage": "An error occurred while saving.",
        "invalid_request": "Invalid request.",
        "unexpected": "Something went wrong. Please try again.",
    },
}

ARTICLE_FIELDS: Final = ("title", "slug", "content")
ACCOUNT_FIELDS: Final = ("username", "password")

# Location prefixes dropped from request validation error paths
REQUEST_PARTS: Final = ("body", "path", "query", "header", "cookie")


def translate(key: str, locale: str | None = None, **params: Any) -> str:
    catalog = MESSAGES.get(locale or settings.locale, MESSAGES["en"])
    return catalog[key].format(**params) if params else catalog[key]


class ErrorFormatter:
    """Formats errors for consistent user experience."""

    @staticmethod
    def format_user_friendly_message(
        error: Exception, locale: str | None = None
    ) -> str:
        """Convert technical errors to localized user-facing messages."""
        if isinstance(error, SlugConflictError):
            return translate("slug_conflict", locale)

        elif isinstance(error, ArticleNotFoundError):
            return translate("article_not_found", locale)

        elif isinstance(error, InvalidCredentialsError):
            return translate("invalid_credentials", locale)

        elif isinstance(error, SetupAlreadyCompletedError):
            return translate("setup_completed", locale)

        elif isinstance(error, StorageError):
            return translate("storage", locale)

        elif isinstance(error, ValidationError):
            error_msg = str(error).lower()
            if "too long" in error_msg or "longer" in error_msg:
                return translate("too_long", locale)
            elif error.field in ACCOUNT_FIELDS:
                return translate(
                    "setup_requirements",
                    locale,
                    min_length=settings.min_password_length,
                )
            elif error.field == "slug" and "only contain" in error_msg:
                return translate("slug_format", locale)
            elif error.field in ARTICLE_FIELDS:
                return translate("article_required", locale)
            elif error.field == "status":
                return translate("invalid_status", locale)
            elif error.field is None and "username" in error_msg:
                return translate("credentials_required", locale)
            return translate("invalid_request", locale)

        elif isinstance(error, ValueError):
            return translate("invalid_request", locale)

        else:
            return translate("unexpected", locale)


def _field_error_code(message: str) -> str:
    message = message.lower()
    if "required" in message or "empty" in message:
        return ErrorCodes.FIELD_REQUIRED
    if "longer" in message or "too long" in message:
        return ErrorCodes.FIELD_TOO_LONG
    if "only contain" in message:
        return ErrorCodes.FIELD_INVALID_FORMAT
    return ErrorCodes.FIELD_INVALID_VALUE


def _extract_field_errors(error: ValidationError) -> list[dict[str, str]]:
    if error.field is None:
        return []
    return [
        {
            "field": error.field,
            "code": _field_error_code(str(error)),
            "message": str(error),
        }
    ]


def build_domain_problem(
    error: DomainError, instance: str, locale: str | None = None
) -> ProblemDetail:
    """Map a domain exception to its Problem Details document."""
    user_message = ErrorFormatter.format_user_friendly_message(error, locale)

    problem: ProblemDetail | ValidationProblemDetail | ConflictProblemDetail
    if isinstance(error, ValidationError):
        problem = ProblemDetailFactory.validation_failed(
            detail=user_message,
            instance=instance,
            field_errors=_extract_field_errors(error),
        )
    elif isinstance(error, InvalidCredentialsError):
        problem = ProblemDetailFactory.invalid_credentials(
            detail=user_message, instance=instance
        )
    elif isinstance(error, ArticleNotFoundError):
        problem = ProblemDetailFactory.not_found(
            resource_type="article", detail=user_message, instance=instance
        )
    elif isinstance(error, SlugConflictError):
        problem = ProblemDetailFactory.resource_already_exists(
            resource_type="article",
            detail=user_message,
            instance=instance,
            conflicting_field="slug",
        )
    elif isinstance(error, SetupAlreadyCompletedError):
        problem = ProblemDetailFactory.setup_already_completed(
            detail=user_message, instance=instance
        )
    else:
        problem = ProblemDetailFactory.internal_server_error(
            detail=user_message, instance=instance
        )
    return problem


def handle_domain_error(error: DomainError, request: Request) -> JSONResponse:
    """Convert domain errors to RFC 7807 responses."""
    problem = build_domain_problem(error, instance=str(request.url.path))
    return JSONResponse(status_code=problem.status, content=problem_content(problem))


def handle_validation_error(error: ValueError, request: Request) -> JSONResponse:
    """Convert bare ValueErrors to a 400 problem."""
    problem = ProblemDetailFactory.validation_failed(
        detail=ErrorFormatter.format_user_friendly_message(error),
        instance=str(request.url.path),
    )
    return JSONResponse(status_code=problem.status, content=problem_content(problem))


def handle_unexpected_error(request: Request, key: str = "unexpected") -> JSONResponse:
    problem = ProblemDetailFactory.internal_server_error(
        detail=translate(key), instance=str(request.url.path)
    )
    return JSONResponse(status_code=problem.status, content=problem_content(problem))


def _log_failure(
    request: Request,
    message: str,
    exc: Exception,
    server_side: bool = False,
    **fields: Any,
) -> None:
    logger = get_logger(__name__)
    log = logger.error if server_side else logger.warning
    log(
        message,
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
        **fields,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the global handlers that turn exceptions into problem documents."""

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        _log_failure(
            request,
            "Domain error occurred",
            exc,
            server_side=isinstance(exc, StorageError),
        )
        return handle_domain_error(exc, request)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        _log_failure(request, "Validation error occurred", exc)
        return handle_validation_error(exc, request)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ):
        _log_failure(
            request, "Request validation error occurred", exc, errors=exc.errors()
        )
        field_errors = [
            {
                "field": ".".join(
                    str(loc) for loc in error["loc"] if loc not in REQUEST_PARTS
                )
                or "unknown",
                "code": error["type"],
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        problem = ProblemDetailFactory.validation_failed(
            detail=translate("invalid_request"),
            instance=str(request.url.path),
            field_errors=field_errors,
        )
        return JSONResponse(
            status_code=problem.status, content=problem_content(problem)
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        _log_failure(
            request, "Database error occurred", exc, server_side=True, exc_info=True
        )
        return handle_unexpected_error(request, key="storage")

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        _log_failure(
            request, "Unexpected error occurred", exc, server_side=True, exc_info=True
        )
        return handle_unexpected_error(request)
