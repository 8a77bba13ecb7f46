"""Session token <-> cookie conversion.

The codec is a pure transform. It never touches storage and never raises on
bad client input.
"""

import re
from dataclasses import dataclass
from typing import Final, Literal

from starlette.requests import cookie_parser
from starlette.responses import Response

from ..constants import DEV_COOKIE_NAME, PROD_COOKIE_NAME, SESSION_MAX_AGE_SECONDS

# Shape of tokens minted by secrets.token_urlsafe
TOKEN_PATTERN: Final = re.compile(r"^[A-Za-z0-9_-]{16,128}$")


@dataclass(frozen=True)
class CookieConfig:
    """Transport attributes of the admin session cookie."""

    name: str
    secure: bool
    max_age: int = SESSION_MAX_AGE_SECONDS
    path: str = "/"
    http_only: bool = True
    same_site: Literal["lax", "strict", "none"] = "lax"

    @classmethod
    def for_environment(
        cls, production: bool, max_age: int = SESSION_MAX_AGE_SECONDS
    ) -> "CookieConfig":
        """Production uses the `__Host-` prefixed name, which requires Secure."""
        return cls(
            name=PROD_COOKIE_NAME if production else DEV_COOKIE_NAME,
            secure=production,
            max_age=max_age,
        )


class CredentialCodec:
    """Encodes session tokens into Set-Cookie values and reads them back."""

    def __init__(self, config: CookieConfig):
        self.config = config

    @property
    def cookie_name(self) -> str:
        return self.config.name

    def encode(self, token: str) -> str:
        """Build the Set-Cookie value carrying `token`."""
        return self._serialize(token, self.config.max_age)

    def encode_clear(self) -> str:
        """Build a Set-Cookie value that makes the client drop its credential."""
        return self._serialize("", 0)

    def decode(self, raw_header: str | None) -> str | None:
        """Extract the session token from a Cookie header.

        Returns None for a missing header, a missing or empty cookie, or a value
        that cannot be a token.
        """
        if not raw_header or not isinstance(raw_header, str):
            return None
        token = cookie_parser(raw_header).get(self.config.name)
        if not token or not TOKEN_PATTERN.match(token):
            return None
        return token

    def presented(self, raw_header: str | None) -> bool:
        """Whether the client sent our cookie at all, well-formed or not."""
        if not raw_header or not isinstance(raw_header, str):
            return False
        return self.config.name in cookie_parser(raw_header)

    @staticmethod
    def attach(response: Response, credential: str) -> Response:
        """Add a Set-Cookie header built by encode/encode_clear to a response."""
        response.headers.append("set-cookie", credential)
        return response

    def _serialize(self, value: str, max_age: int) -> str:
        scratch = Response()
        scratch.set_cookie(
            key=self.config.name,
            value=value,
            max_age=max_age,
            path=self.config.path,
            secure=self.config.secure,
            httponly=self.config.http_only,
            samesite=self.config.same_site,
        )
        return scratch.headers["set-cookie"]
