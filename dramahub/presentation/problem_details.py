"""RFC 7807 Problem Details for HTTP APIs."""

from typing import Any, Final

from pydantic import BaseModel, Field

PROBLEM_TYPE_BASE: Final = "https://dramahub.example/problems"


class ErrorCodes:
    """Machine-readable codes used in `errors[].code`."""

    VALIDATION_FAILED: Final = "validation_failed"
    FIELD_REQUIRED: Final = "field_required"
    FIELD_TOO_LONG: Final = "field_too_long"
    FIELD_INVALID_FORMAT: Final = "field_invalid_format"
    FIELD_INVALID_VALUE: Final = "field_invalid_value"
    INVALID_CREDENTIALS: Final = "invalid_credentials"
    RESOURCE_NOT_FOUND: Final = "resource_not_found"
    RESOURCE_ALREADY_EXISTS: Final = "resource_already_exists"
    SETUP_ALREADY_COMPLETED: Final = "setup_already_completed"
    INTERNAL_ERROR: Final = "internal_error"


class ProblemDetail(BaseModel):
    type: str = Field(description="URI identifying the problem type")
    title: str = Field(description="Short summary of the problem type")
    status: int = Field(description="HTTP status code")
    detail: str | None = Field(None, description="Explanation for this occurrence")
    instance: str | None = Field(None, description="Request path that failed")


class ValidationProblemDetail(ProblemDetail):
    errors: list[dict[str, str]] | None = Field(
        None, description="Per-field validation errors"
    )


class ConflictProblemDetail(ProblemDetail):
    resource_type: str | None = None
    conflicting_field: str | None = None


def _type_uri(slug: str) -> str:
    return f"{PROBLEM_TYPE_BASE}/{slug}"


class ProblemDetailFactory:
    """Builds the problem documents returned by the exception handlers."""

    @staticmethod
    def validation_failed(
        detail: str,
        instance: str | None = None,
        field_errors: list[dict[str, str]] | None = None,
    ) -> ValidationProblemDetail:
        return ValidationProblemDetail(
            type=_type_uri("validation-failed"),
            title="Validation Failed",
            status=400,
            detail=detail,
            instance=instance,
            errors=field_errors or None,
        )

    @staticmethod
    def invalid_credentials(
        detail: str, instance: str | None = None
    ) -> ProblemDetail:
        return ProblemDetail(
            type=_type_uri("invalid-credentials"),
            title="Invalid Credentials",
            status=401,
            detail=detail,
            instance=instance,
        )

    @staticmethod
    def not_found(
        resource_type: str, detail: str, instance: str | None = None
    ) -> ProblemDetail:
        return ProblemDetail(
            type=_type_uri(f"{resource_type}-not-found"),
            title="Resource Not Found",
            status=404,
            detail=detail,
            instance=instance,
        )

    @staticmethod
    def resource_already_exists(
        resource_type: str,
        detail: str,
        instance: str | None = None,
        conflicting_field: str | None = None,
    ) -> ConflictProblemDetail:
        return ConflictProblemDetail(
            type=_type_uri("resource-already-exists"),
            title="Resource Already Exists",
            status=409,
            detail=detail,
            instance=instance,
            resource_type=resource_type,
            conflicting_field=conflicting_field,
        )

    @staticmethod
    def setup_already_completed(
        detail: str, instance: str | None = None
    ) -> ProblemDetail:
        return ProblemDetail(
            type=_type_uri("setup-already-completed"),
            title="Setup Already Completed",
            status=409,
            detail=detail,
            instance=instance,
        )

    @staticmethod
    def internal_server_error(
        detail: str, instance: str | None = None
    ) -> ProblemDetail:
        return ProblemDetail(
            type=_type_uri("internal-server-error"),
            title="Internal Server Error",
            status=500,
            detail=detail,
            instance=instance,
        )


def problem_content(problem: ProblemDetail) -> dict[str, Any]:
    return problem.model_dump(exclude_none=True)
