"""The single authorization chokepoint for admin routes.

`require_session` returns a result instead of raising, and callers must branch
on it:

    outcome = guard.require_session(request)
    if isinstance(outcome, Unauthenticated):
        return outcome.to_response()
    admin_session = outcome.session
"""

from dataclasses import dataclass
from typing import Final, Protocol

from starlette.datastructures import Headers
from starlette.responses import RedirectResponse, Response

from ..constants import LOGIN_PATH
from ..domain.entities import AdminSession
from ..logging_config import get_logger
from ..metrics import stale_credentials_cleared_total
from .credentials import CredentialCodec
from .session_store import SessionStore

logger: Final = get_logger(__name__)


class HasHeaders(Protocol):
    """Anything carrying request headers, e.g. a Starlette Request."""

    @property
    def headers(self) -> Headers: ...


@dataclass(frozen=True)
class Authenticated:
    """The caller holds a valid session."""

    session: AdminSession

    @property
    def admin_id(self) -> int:
        return self.session.admin_id


@dataclass(frozen=True)
class Unauthenticated:
    """The caller must log in.

    `clear_credential` is set only when the caller presented a cookie that did
    not validate, so the stale cookie gets dropped client-side.
    """

    redirect_to: str
    clear_credential: str | None = None

    def to_response(self) -> Response:
        response = RedirectResponse(url=self.redirect_to, status_code=302)
        if self.clear_credential is not None:
            CredentialCodec.attach(response, self.clear_credential)
        return response


AuthOutcome = Authenticated | Unauthenticated


class AuthGuard:
    """Resolve the calling admin session from request cookies."""

    def __init__(
        self,
        codec: CredentialCodec,
        store: SessionStore,
        login_path: str = LOGIN_PATH,
    ):
        self.codec = codec
        self.store = store
        self.login_path = login_path

    def get_session(self, request: HasHeaders) -> AdminSession | None:
        """Non-terminating probe for routes that degrade for anonymous callers."""
        token = self.codec.decode(request.headers.get("cookie"))
        if token is None:
            return None
        return self.store.validate(token)

    def require_session(self, request: HasHeaders) -> AuthOutcome:
        raw_header = request.headers.get("cookie")
        if not self.codec.presented(raw_header):
            return Unauthenticated(redirect_to=self.login_path)

        token = self.codec.decode(raw_header)
        admin_session = self.store.validate(token) if token is not None else None
        if admin_session is None:
            stale_credentials_cleared_total.add(1)
            logger.info("Rejected invalid or expired admin credential")
            return Unauthenticated(
                redirect_to=self.login_path,
                clear_credential=self.codec.encode_clear(),
            )
        return Authenticated(session=admin_session)
