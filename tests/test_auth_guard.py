"""Tests for the admin route guard."""

from starlette.requests import Request

from dramahub.application.auth_guard import AuthGuard, Authenticated, Unauthenticated
from dramahub.application.credentials import CredentialCodec
from dramahub.application.session_store import SessionStore, generate_token
from dramahub.constants import DEV_COOKIE_NAME, LOGIN_PATH
from dramahub.domain.entities import Admin


def _request(cookie: str | None = None) -> Request:
    headers = [(b"cookie", cookie.encode("latin-1"))] if cookie is not None else []
    return Request(
        {"type": "http", "method": "GET", "path": "/admin", "headers": headers}
    )


def _guard(codec: CredentialCodec, store: SessionStore) -> AuthGuard:
    return AuthGuard(codec, store)


def test_missing_cookie_redirects_without_clearing(codec, store, admin: Admin):
    """Test that an anonymous caller is sent to login and no cookie is touched."""
    outcome = _guard(codec, store).require_session(_request())

    assert isinstance(outcome, Unauthenticated)
    assert outcome.redirect_to == LOGIN_PATH
    assert outcome.clear_credential is None


def test_unrelated_cookies_are_not_cleared(codec, store, admin: Admin):
    """Test that only our own cookie name triggers a clearing credential."""
    outcome = _guard(codec, store).require_session(_request("theme=dark"))

    assert isinstance(outcome, Unauthenticated)
    assert outcome.clear_credential is None


def test_valid_session_is_authenticated(codec, store, admin: Admin):
    """Test that a live session passes the guard with its principal."""
    token = store.create(admin.id)

    outcome = _guard(codec, store).require_session(
        _request(f"{DEV_COOKIE_NAME}={token}")
    )

    assert isinstance(outcome, Authenticated)
    assert outcome.admin_id == admin.id
    assert outcome.session.id == token


def test_unknown_token_is_cleared(codec, store, admin: Admin):
    """Test that a well-formed but unknown token gets a clearing credential."""
    outcome = _guard(codec, store).require_session(
        _request(f"{DEV_COOKIE_NAME}={generate_token()}")
    )

    assert isinstance(outcome, Unauthenticated)
    assert outcome.clear_credential is not None
    assert "max-age=0" in outcome.clear_credential.lower()


def test_malformed_cookie_is_cleared(codec, store, admin: Admin):
    """Test that a cookie that cannot hold a token is also cleared."""
    outcome = _guard(codec, store).require_session(
        _request(f"{DEV_COOKIE_NAME}=%%%")
    )

    assert isinstance(outcome, Unauthenticated)
    assert outcome.clear_credential is not None


def test_expired_session_is_cleared(codec, store, admin: Admin, clock):
    """Test that a lapsed session is rejected like an unknown one."""
    token = store.create(admin.id)
    clock.advance(days=7)

    outcome = _guard(codec, store).require_session(
        _request(f"{DEV_COOKIE_NAME}={token}")
    )

    assert isinstance(outcome, Unauthenticated)
    assert outcome.clear_credential is not None


def test_revoked_session_is_rejected(codec, store, admin: Admin):
    """Test that the guard reads revocation straight from storage."""
    token = store.create(admin.id)
    guard = _guard(codec, store)
    request = _request(f"{DEV_COOKIE_NAME}={token}")
    assert isinstance(guard.require_session(request), Authenticated)

    store.revoke(token)

    assert isinstance(guard.require_session(request), Unauthenticated)


def test_unauthenticated_response_redirects_and_clears(codec, store, admin: Admin):
    """Test the redirect response built from an Unauthenticated outcome."""
    outcome = _guard(codec, store).require_session(
        _request(f"{DEV_COOKIE_NAME}={generate_token()}")
    )
    assert isinstance(outcome, Unauthenticated)

    response = outcome.to_response()

    assert response.status_code == 302
    assert response.headers["location"] == LOGIN_PATH
    assert response.headers["set-cookie"].startswith(f"{DEV_COOKIE_NAME}=")


def test_unauthenticated_response_without_cookie():
    """Test that no Set-Cookie is sent when nothing needs clearing."""
    response = Unauthenticated(redirect_to=LOGIN_PATH).to_response()

    assert response.status_code == 302
    assert "set-cookie" not in response.headers


def test_get_session_probe(codec, store, admin: Admin):
    """Test the non-terminating probe used by public pages."""
    guard = _guard(codec, store)
    token = store.create(admin.id)

    assert guard.get_session(_request()) is None
    assert guard.get_session(_request(f"{DEV_COOKIE_NAME}=junk")) is None
    probed = guard.get_session(_request(f"{DEV_COOKIE_NAME}={token}"))
    assert probed is not None
    assert probed.admin_id == admin.id
