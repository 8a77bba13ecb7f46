"""Tests for the operator command line."""

import pytest
from sqlmodel import Session
from typer.testing import CliRunner

from dramahub.application.session_store import SessionStore
from dramahub.domain.entities import Admin
from dramahub.infrastructure.database.repositories import AdminRepository
from dramahub.tools import admin_cli

runner = CliRunner()


@pytest.fixture(autouse=True)
def use_test_engine(session: Session, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(admin_cli, "get_main_engine", lambda: session.get_bind())


def test_create_admin(session: Session):
    """Test first-run setup from the command line."""
    result = runner.invoke(
        admin_cli.app,
        ["create-admin", "--username", "owner", "--password", "long-enough-password"],
    )

    assert result.exit_code == 0, result.output
    assert "owner" in result.output
    assert AdminRepository(session).find_by_username("owner") is not None


def test_create_admin_refused_after_setup(admin: Admin):
    """Test that the command obeys the single first-run rule."""
    result = runner.invoke(
        admin_cli.app,
        ["create-admin", "--username", "second", "--password", "long-enough-password"],
    )

    assert result.exit_code == 1


def test_revoke_sessions(session: Session, admin: Admin):
    """Test logging an admin out everywhere."""
    store = SessionStore(session)
    store.create(admin.id)
    store.create(admin.id)

    result = runner.invoke(admin_cli.app, ["revoke-sessions", admin.username])

    assert result.exit_code == 0, result.output
    assert "Revoked 2" in result.output
    assert store.count() == 0


def test_revoke_sessions_unknown_admin(admin: Admin):
    """Test the error for an unknown username."""
    result = runner.invoke(admin_cli.app, ["revoke-sessions", "nobody"])

    assert result.exit_code == 1


def test_list_sessions(session: Session, admin: Admin):
    """Test the session table output."""
    SessionStore(session).create(admin.id, ip="198.51.100.4")

    result = runner.invoke(admin_cli.app, ["list-sessions"])

    assert result.exit_code == 0, result.output
    assert admin.username in result.output
