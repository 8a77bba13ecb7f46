"""Domain-specific exceptions."""


class DomainError(Exception):
    """Base exception for domain errors."""

    pass


class ValidationError(DomainError):
    """Raised when domain validation fails."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class InvalidCredentialsError(DomainError):
    """Raised when a username/password pair does not match an admin."""

    pass


class ArticleNotFoundError(DomainError):
    """Raised when an operation targets an article that does not exist."""

    def __init__(self, article_ref: int | str):
        super().__init__(f"Article {article_ref!r} not found")
        self.article_ref = article_ref


class SlugConflictError(DomainError):
    """Raised when a slug is already used by a different article."""

    def __init__(self, slug: str):
        super().__init__(f"Slug '{slug}' is already used by another article")
        self.slug = slug


class SetupAlreadyCompletedError(DomainError):
    """Raised when first-run setup is attempted after an admin exists."""

    pass


class StorageError(DomainError):
    """Raised when a persistence operation fails unexpectedly."""

    pass
