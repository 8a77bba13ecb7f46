"""Tests for session cookie encoding and decoding."""

import pytest
from starlette.responses import Response

from dramahub.application.credentials import CookieConfig, CredentialCodec
from dramahub.application.session_store import generate_token
from dramahub.config import Settings
from dramahub.constants import DEV_COOKIE_NAME, PROD_COOKIE_NAME


def test_encode_sets_cookie_attributes(codec: CredentialCodec):
    """Test that the credential carries the token and the session cookie flags."""
    token = generate_token()
    credential = codec.encode(token)
    lowered = credential.lower()

    assert credential.startswith(f"{DEV_COOKIE_NAME}={token}")
    assert "httponly" in lowered
    assert "samesite=lax" in lowered
    assert "path=/" in lowered
    assert "max-age=604800" in lowered
    assert "secure" not in lowered


def test_production_cookie_uses_host_prefix_and_secure():
    """Test that production credentials are __Host- prefixed and Secure."""
    codec = CredentialCodec(CookieConfig.for_environment(production=True))
    credential = codec.encode(generate_token())

    assert credential.startswith(f"{PROD_COOKIE_NAME}=")
    assert "secure" in credential.lower()
    assert "path=/" in credential.lower()


def test_settings_build_cookie_config_per_environment():
    """Test that settings choose the cookie name from the environment."""
    assert Settings(environment="development").cookie_config().name == DEV_COOKIE_NAME
    production = Settings(environment="production", session_max_age_seconds=60)
    config = production.cookie_config()
    assert config.name == PROD_COOKIE_NAME
    assert config.secure is True
    assert config.max_age == 60


def test_decode_reads_token_back(codec: CredentialCodec):
    """Test that a token sent back in a Cookie header decodes unchanged."""
    token = generate_token()

    assert codec.decode(f"{DEV_COOKIE_NAME}={token}") == token
    assert codec.decode(f"theme=dark; {DEV_COOKIE_NAME}={token}; lang=ja") == token


@pytest.mark.parametrize("production", [False, True])
def test_decode_of_encode_round_trips(production: bool):
    """Test that decode(encode(t)) == t for freshly issued tokens."""
    codec = CredentialCodec(CookieConfig.for_environment(production=production))

    for _ in range(20):
        token = generate_token()
        assert codec.decode(codec.encode(token)) == token


@pytest.mark.parametrize(
    "raw_header",
    [
        None,
        "",
        "theme=dark",
        f"{DEV_COOKIE_NAME}=",
        f"{DEV_COOKIE_NAME}=short",
        f"{DEV_COOKIE_NAME}=not a token at all!!",
        ";;;=",
        "\x00\xff garbage",
    ],
)
def test_decode_returns_none_for_unusable_input(codec: CredentialCodec, raw_header):
    """Test that decode degrades to None instead of raising."""
    assert codec.decode(raw_header) is None


def test_decode_ignores_other_cookie_names(codec: CredentialCodec):
    """Test that a production-named cookie is not read by a development codec."""
    assert codec.decode(f"{PROD_COOKIE_NAME}={generate_token()}") is None


def test_encode_clear_expires_cookie(codec: CredentialCodec):
    """Test that the clearing credential has zero lifetime and no token."""
    cleared = codec.encode_clear()

    assert cleared.startswith(f"{DEV_COOKIE_NAME}=")
    assert "max-age=0" in cleared.lower()
    assert codec.decode(cleared.split(";")[0]) is None


def test_presented_detects_cookie_even_when_malformed(codec: CredentialCodec):
    """Test that presence is reported independently of token shape."""
    assert codec.presented(f"{DEV_COOKIE_NAME}=garbage") is True
    assert codec.presented("theme=dark") is False
    assert codec.presented(None) is False


def test_attach_appends_set_cookie_header(codec: CredentialCodec):
    """Test that attach adds a Set-Cookie header without replacing others."""
    response = Response()
    response.headers.append("set-cookie", "theme=dark")

    CredentialCodec.attach(response, codec.encode_clear())

    cookies = response.headers.getlist("set-cookie")
    assert len(cookies) == 2
    assert cookies[1].startswith(f"{DEV_COOKIE_NAME}=")
