"""Infrastructure and technical constants."""

from typing import Final

# Technical configuration constants
DEFAULT_PORT: Final = 8000

# Session cookie
SESSION_MAX_AGE_SECONDS: Final = 60 * 60 * 24 * 7
DEV_COOKIE_NAME: Final = "admin-session"
PROD_COOKIE_NAME: Final = "__Host-admin-session"

# Admin entry points
LOGIN_PATH: Final = "/admin/login"
SETUP_PATH: Final = "/admin/setup"
ADMIN_HOME_PATH: Final = "/admin"
ADMIN_ARTICLES_PATH: Final = "/admin/articles"
