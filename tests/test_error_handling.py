"""Tests for error handling with RFC 7807 Problem Details."""

import pytest

from dramahub.config import settings
from dramahub.domain.exceptions import (
    ArticleNotFoundError,
    InvalidCredentialsError,
    SetupAlreadyCompletedError,
    SlugConflictError,
    StorageError,
    ValidationError,
)
from dramahub.presentation.error_handlers import (
    MESSAGES,
    ErrorFormatter,
    build_domain_problem,
)
from dramahub.presentation.problem_details import ErrorCodes, ProblemDetailFactory


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (ValidationError("Title is required", field="title"), 400),
        (InvalidCredentialsError("Invalid username or password"), 401),
        (ArticleNotFoundError(42), 404),
        (SlugConflictError("taken"), 409),
        (SetupAlreadyCompletedError("done"), 409),
        (StorageError("Database create on articles failed"), 500),
    ],
)
def test_domain_errors_map_to_status(error, status):
    """Test the HTTP status of each domain error."""
    problem = build_domain_problem(error, instance="/admin/articles", locale="en")

    assert problem.status == status
    assert problem.instance == "/admin/articles"


def test_storage_error_hides_internals():
    """Test that database details do not leak into the problem detail."""
    problem = build_domain_problem(
        StorageError("Database create on articles failed"), instance="/x", locale="en"
    )

    assert "articles" not in (problem.detail or "")
    assert problem.detail == MESSAGES["en"]["storage"]


def test_validation_problem_lists_field_errors():
    """Test that a field-scoped validation error becomes an errors entry."""
    problem = build_domain_problem(
        ValidationError("Title cannot be longer than 200 characters", field="title"),
        instance="/admin/articles",
        locale="en",
    )

    data = problem.model_dump(exclude_none=True)
    assert data["errors"] == [
        {
            "field": "title",
            "code": ErrorCodes.FIELD_TOO_LONG,
            "message": "Title cannot be longer than 200 characters",
        }
    ]


@pytest.mark.parametrize(
    ("error", "key"),
    [
        (ValidationError("Content is required", field="content"), "article_required"),
        (
            ValidationError("Slug may only contain letters", field="slug"),
            "slug_format",
        ),
        (ValidationError("Username and password are required"), "credentials_required"),
        (SlugConflictError("taken"), "slug_conflict"),
        (InvalidCredentialsError("nope"), "invalid_credentials"),
        (ValueError("bad"), "invalid_request"),
        (RuntimeError("boom"), "unexpected"),
    ],
)
@pytest.mark.parametrize("locale", ["ja", "en"])
def test_user_friendly_messages(error, key, locale):
    """Test that errors translate to the catalog message for each locale."""
    message = ErrorFormatter.format_user_friendly_message(error, locale)

    assert message == MESSAGES[locale][key]


@pytest.mark.parametrize("locale", ["ja", "en"])
def test_setup_message_uses_configured_password_length(
    locale, monkeypatch: pytest.MonkeyPatch
):
    """Test that the setup message states the configured minimum length."""
    monkeypatch.setattr(settings, "min_password_length", 12)
    error = ValidationError(
        "Password must be at least 12 characters", field="password"
    )

    message = ErrorFormatter.format_user_friendly_message(error, locale)

    assert "12" in message
    assert "8" not in message
    assert message == MESSAGES[locale]["setup_requirements"].format(min_length=12)


def test_overlong_username_reports_length_not_setup_rules():
    """Test that a too-long username gets the length message."""
    error = ValidationError(
        "Username cannot be longer than 50 characters", field="username"
    )

    message = ErrorFormatter.format_user_friendly_message(error, "ja")

    assert message == MESSAGES["ja"]["too_long"]


def test_catalogs_have_the_same_keys():
    """Test that every message exists in both languages."""
    assert MESSAGES["ja"].keys() == MESSAGES["en"].keys()


def test_error_codes_are_consistent():
    """Test that error codes are structured and consistent."""
    assert ErrorCodes.FIELD_REQUIRED == "field_required"
    assert ErrorCodes.FIELD_TOO_LONG == "field_too_long"
    assert ErrorCodes.RESOURCE_ALREADY_EXISTS == "resource_already_exists"


def test_problem_detail_factory():
    """Test that ProblemDetailFactory creates correct structures."""
    problem = ProblemDetailFactory.validation_failed(
        detail="Test validation error",
        instance="/test/path",
        field_errors=[
            {"field": "slug", "code": "field_required", "message": "Slug is required"}
        ],
    )

    assert problem.type.endswith("/validation-failed")
    assert problem.title == "Validation Failed"
    assert problem.status == 400
    assert problem.errors is not None
    assert problem.errors[0]["field"] == "slug"

    conflict = ProblemDetailFactory.resource_already_exists(
        resource_type="article",
        detail="Slug already used",
        instance="/admin/articles",
        conflicting_field="slug",
    )

    assert conflict.type.endswith("/resource-already-exists")
    assert conflict.status == 409
    assert conflict.resource_type == "article"
    assert conflict.conflicting_field == "slug"


def test_api_problem_details_shape(client, admin):
    """Test the RFC 7807 fields on an HTTP error response."""
    response = client.post(
        "/admin/login", data={"username": "editor", "password": "wrong-password"}
    )

    data = response.json()
    assert response.status_code == 401
    assert data["type"].endswith("/invalid-credentials")
    assert data["title"] == "Invalid Credentials"
    assert data["status"] == 401
    assert data["instance"] == "/admin/login"


def test_malformed_path_parameter_returns_problem_details(admin_client):
    """Test that request validation failures are 400 problem documents."""
    response = admin_client.get("/admin/articles/not-a-number")

    assert response.status_code == 400
    data = response.json()
    assert data["errors"][0]["field"] == "article_id"
