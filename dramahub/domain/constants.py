"""Domain business rules and constants."""

import re
from typing import Final

# Business Rules - Core domain constraints
MAX_TITLE_LENGTH: Final = 200
MAX_SLUG_LENGTH: Final = 100
MAX_TAG_LENGTH: Final = 50
MIN_PASSWORD_LENGTH: Final = 8
MAX_USERNAME_LENGTH: Final = 50
MAX_CLIENT_IP_LENGTH: Final = 64

SLUG_PATTERN: Final = re.compile(r"^[A-Za-z0-9_-]+$")
SLUG_ALPHABET: Final = (
    "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_"
)
GENERATED_SLUG_LENGTH: Final = 16

# Tags are typed with either separator in the editor
TAG_SEPARATORS: Final = (",", "、")

ARTICLE_STATUSES: Final = ("published", "draft", "archived")
DEFAULT_ARTICLE_STATUS: Final = "draft"
