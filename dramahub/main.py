import socket
from contextlib import asynccontextmanager
from typing import Final

from fastapi import FastAPI

from .config import settings
from .infrastructure.database.database import get_main_engine, init_db
from .logging_config import get_logger, setup_logging
from .logging_utils import log_system_info
from .middleware import log_requests_middleware
from .presentation.admin_routes import admin_router
from .presentation.error_handlers import register_exception_handlers
from .presentation.public_routes import api_router, router
from .telemetry import setup_telemetry


def _host_address(hostname: str) -> str:
    try:
        return socket.gethostbyname(hostname)
    except OSError:
        return "unknown"


@asynccontextmanager
async def lifespan(_app: FastAPI):
    setup_logging()
    logger = get_logger(__name__)

    # Schema is created at startup; there are no migrations
    init_db(get_main_engine())
    logger.info("Database initialized", database_url=settings.database_url)

    hostname = socket.gethostname()
    log_system_info(hostname, _host_address(hostname), settings.debug)

    yield

    logger.info("Application shutdown completed")


app: Final = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
    description="""
**Drama Hub** admin backend.

## Authentication

Admins log in with a username and password and receive an opaque session
cookie (`admin-session`, or `__Host-admin-session` in production). Sessions
are stored server-side, last seven days, and can be revoked individually from
the session management endpoint.

## Revision history

Every edit of an article first records the article's previous title and body.
The history is append-only and is removed only together with its article.
    """.strip(),
    license_info={
        "name": "MIT License",
        "url": "https://opensource.org/licenses/MIT",
    },
    openapi_tags=[
        {"name": "admin", "description": "Setup, login, sessions and article editing"},
        {"name": "articles", "description": "Public article pages"},
        {"name": "health", "description": "Liveness probe"},
    ],
)

setup_telemetry(app)

app.middleware("http")(log_requests_middleware)

register_exception_handlers(app)

app.include_router(api_router)
app.include_router(admin_router)
app.include_router(router)
