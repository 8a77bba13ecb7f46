"""Structured log helpers shared by the admin, request and storage layers.

Records go through stdlib logging with their fields in `extra`, so they reach
both the Rich console handler and the optional file log. Fields whose names
look like secrets are replaced before they are logged.
"""

import logging
from datetime import UTC, datetime
from typing import Any, Final

from fastapi import Request

from .request_utils import get_client_ip

REDACTED: Final = "[REDACTED]"
SENSITIVE_FIELD_MARKERS: Final = frozenset(
    {"password", "secret", "token", "credential", "cookie", "session_id"}
)
MAX_LOGGED_USER_AGENT: Final = 100


def _emit(logger_name: str, level: int, message: str, **fields: Any) -> None:
    logging.getLogger(logger_name).log(
        level,
        message,
        extra={key: _redact(key, value) for key, value in fields.items()},
    )


def log_admin_action(
    action: str, admin_id: int, logger_name: str = "admin_actions", **kwargs: Any
) -> None:
    """Record a privileged action such as login or an article edit.

    Args:
        action: Short action name, e.g. 'login' or 'update_article'
        admin_id: Acting admin
        logger_name: Name of the logger to use
        **kwargs: Extra context; sensitive keys are redacted
    """
    _emit(
        logger_name,
        logging.INFO,
        f"Admin {admin_id}: {action}",
        action=action,
        admin_id=admin_id,
        timestamp=datetime.now(UTC).isoformat(),
        **kwargs,
    )


def log_api_request(
    request: Request,
    response_status: int,
    process_time_ms: float | None = None,
    logger_name: str = "api",
) -> None:
    """One line per handled request; level follows the status class."""
    if response_status >= 500:
        level = logging.ERROR
    elif response_status >= 400:
        level = logging.WARNING
    else:
        level = logging.INFO

    message = f"{request.method} {request.url.path} -> {response_status}"
    if process_time_ms is not None:
        message = f"{message} in {process_time_ms:.1f}ms"

    _emit(
        logger_name,
        level,
        message,
        method=request.method,
        path=request.url.path,
        status_code=response_status,
        client_ip=get_client_ip(request),
        user_agent=request.headers.get("user-agent", "Unknown")[
            :MAX_LOGGED_USER_AGENT
        ],
        process_time_ms=round(process_time_ms, 2)
        if process_time_ms is not None
        else None,
    )


def log_database_operation(
    operation: str,
    table: str,
    success: bool = True,
    logger_name: str = "database",
    **kwargs: Any,
) -> None:
    """Log a repository write, or any failed repository call.

    Args:
        operation: create, update, delete or select
        table: Table the operation ran against
        success: False logs at ERROR level
        logger_name: Name of the logger to use
        **kwargs: Extra context; sensitive keys are redacted
    """
    outcome = "ok" if success else "FAILED"
    _emit(
        logger_name,
        logging.INFO if success else logging.ERROR,
        f"{table}.{operation} {outcome}",
        operation=operation,
        table=table,
        success=success,
        **kwargs,
    )


def log_system_info(hostname: str, ip_address: str, debug_mode: bool) -> None:
    _emit(
        "system",
        logging.INFO,
        f"Drama Hub started on {hostname} ({ip_address})",
        hostname=hostname,
        ip_address=ip_address,
        debug_mode=debug_mode,
        timestamp=datetime.now(UTC).isoformat(),
    )


def _redact(field: str, value: Any) -> Any:
    return REDACTED if _is_sensitive_field(field) else value


def _is_sensitive_field(field_name: str) -> bool:
    """Match on substrings so 'new_password' or 'auth_token' are caught too."""
    field_lower = field_name.lower()
    return any(marker in field_lower for marker in SENSITIVE_FIELD_MARKERS)
