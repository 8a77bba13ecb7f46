"""Pure domain entities without infrastructure dependencies."""

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime

from .constants import (
    ARTICLE_STATUSES,
    DEFAULT_ARTICLE_STATUS,
    MAX_SLUG_LENGTH,
    MAX_TAG_LENGTH,
    MAX_TITLE_LENGTH,
    SLUG_PATTERN,
    TAG_SEPARATORS,
)
from .exceptions import ValidationError


def utcnow() -> datetime:
    """Current time as naive UTC, the representation stored in the database."""
    return datetime.now(UTC).replace(tzinfo=None)


def parse_tags(raw: str | None) -> list[str]:
    """Split a comma separated tag string.

    Entries are trimmed and empty ones dropped. Duplicates are kept in the
    order they were typed.
    """
    if not raw:
        return []
    pattern = "|".join(re.escape(sep) for sep in TAG_SEPARATORS)
    return [tag.strip() for tag in re.split(pattern, raw) if tag.strip()]


def validate_slug(slug: str) -> None:
    """Validate the human-readable article identifier.

    Raises:
        ValidationError: If slug is empty, too long, or has characters outside
            letters, digits, hyphen and underscore
    """
    if not slug or not slug.strip():
        raise ValidationError("Slug cannot be empty", field="slug")
    if len(slug) > MAX_SLUG_LENGTH:
        raise ValidationError(
            f"Slug cannot be longer than {MAX_SLUG_LENGTH} characters", field="slug"
        )
    if not SLUG_PATTERN.match(slug):
        raise ValidationError(
            "Slug may only contain letters, digits, hyphens and underscores",
            field="slug",
        )


@dataclass(frozen=True)
class Admin:
    """The principal behind an admin session."""

    id: int
    username: str
    password_hash: str
    created_at: datetime
    email: str | None = None
    display_name: str | None = None


@dataclass(frozen=True)
class AdminSession:
    """One authenticated client; `id` is the token the client holds."""

    id: str
    admin_id: int
    created_at: datetime
    user_agent: str | None = None
    ip: str | None = None
    expires_at: datetime | None = None

    def is_valid_at(self, now: datetime) -> bool:
        """A session without expiry never lapses; `expires_at == now` has lapsed."""
        return self.expires_at is None or self.expires_at > now


@dataclass(frozen=True)
class SessionWithOwner:
    """A session row joined with its owner's username for the management view."""

    session: AdminSession
    username: str


@dataclass
class Article:
    """Editable content item."""

    id: int | None
    slug: str
    title: str
    content: str
    status: str = DEFAULT_ARTICLE_STATUS
    excerpt: str | None = None
    hero_image_key: str | None = None
    author_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ArticleSummary:
    """Article columns shown in admin lists."""

    id: int
    title: str
    slug: str
    status: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class RevisionSnapshot:
    """Immutable copy of an article's title and body before an edit."""

    id: int | None
    article_id: int
    title: str
    content: str
    edited_by: int
    edited_at: datetime


@dataclass(frozen=True)
class AuditEvent:
    """General-purpose action record kept for future use."""

    id: int | None
    created_at: datetime
    actor_id: int | None = None
    action: str | None = None
    target_type: str | None = None
    target_id: str | None = None
    payload: str | None = None


@dataclass
class ArticleForm:
    """Values submitted by the article editor."""

    title: str
    slug: str
    content: str
    status: str = DEFAULT_ARTICLE_STATUS
    excerpt: str | None = None
    hero_image_key: str | None = None
    tags_raw: str | None = None

    def __post_init__(self):
        """Normalize optional blanks to None and trim the slug."""
        self.slug = (self.slug or "").strip()
        self.excerpt = self.excerpt or None
        self.hero_image_key = self.hero_image_key or None
        self.status = self.status or DEFAULT_ARTICLE_STATUS

    @property
    def tags(self) -> list[str]:
        return parse_tags(self.tags_raw)

    def validate(self) -> None:
        """Validate editor input against article business rules."""
        if not self.title or not self.title.strip():
            raise ValidationError("Title is required", field="title")
        if not self.content or not self.content.strip():
            raise ValidationError("Content is required", field="content")
        if len(self.title) > MAX_TITLE_LENGTH:
            raise ValidationError(
                f"Title cannot be longer than {MAX_TITLE_LENGTH} characters",
                field="title",
            )
        validate_slug(self.slug)
        if self.status not in ARTICLE_STATUSES:
            raise ValidationError(
                f"Status must be one of {', '.join(ARTICLE_STATUSES)}", field="status"
            )
        for tag in self.tags:
            if len(tag) > MAX_TAG_LENGTH:
                raise ValidationError(
                    f"Tags cannot be longer than {MAX_TAG_LENGTH} characters",
                    field="tags",
                )
