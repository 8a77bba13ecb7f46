#!/usr/bin/env python3
"""Drama Hub operator commands."""

import typer
from rich.console import Console
from rich.table import Table
from sqlmodel import Session

from ..application.admin_service import AdminService
from ..application.session_store import SessionStore
from ..config import settings
from ..domain.exceptions import DomainError
from ..infrastructure.database.database import get_main_engine, init_db
from ..infrastructure.database.repositories import AdminRepository
from ..logging_config import setup_logging

console = Console()
app = typer.Typer(help="Drama Hub admin tools", no_args_is_help=True)


def _session() -> Session:
    return Session(get_main_engine())


@app.command("init-db")
def init_database() -> None:
    """Create all tables."""
    init_db(get_main_engine())
    console.print("[green]✓[/green] Database schema is up to date")


@app.command("create-admin")
def create_admin(
    username: str = typer.Option(..., prompt=True),
    password: str = typer.Option(
        ..., prompt=True, hide_input=True, confirmation_prompt=True
    ),
    display_name: str | None = typer.Option(None),
    email: str | None = typer.Option(None),
) -> None:
    """Run first-time setup from the command line."""
    init_db(get_main_engine())
    with _session() as session:
        service = AdminService(
            session,
            SessionStore(session),
            min_password_length=settings.min_password_length,
        )
        try:
            admin = service.setup_first_admin(
                username, password, display_name=display_name, email=email
            )
        except DomainError as e:
            console.print(f"[red]✗[/red] {e}")
            raise typer.Exit(code=1) from e
    console.print(f"[green]✓[/green] Created admin [bold]{admin.username}[/bold]")


@app.command("list-sessions")
def list_sessions() -> None:
    """Show every stored admin session, newest first."""
    with _session() as session:
        entries = SessionStore(session).list_for_audit()

    table = Table(title="Admin sessions")
    table.add_column("User")
    table.add_column("IP")
    table.add_column("Created")
    table.add_column("Expires")
    table.add_column("User agent", overflow="fold")
    for entry in entries:
        admin_session = entry.session
        table.add_row(
            entry.username,
            admin_session.ip or "-",
            admin_session.created_at.isoformat(timespec="seconds"),
            admin_session.expires_at.isoformat(timespec="seconds")
            if admin_session.expires_at
            else "never",
            admin_session.user_agent or "-",
        )
    console.print(table)


@app.command("revoke-sessions")
def revoke_sessions(username: str) -> None:
    """Log an admin out everywhere."""
    with _session() as session:
        admin = AdminRepository(session).find_by_username(username)
        if admin is None:
            console.print(f"[red]✗[/red] No admin named {username!r}")
            raise typer.Exit(code=1)
        removed = SessionStore(session).revoke_all_for_admin(admin.id)
    console.print(f"[green]✓[/green] Revoked {removed} session(s) for {username}")


@app.command()
def serve(
    host: str = typer.Option(settings.host),
    port: int = typer.Option(settings.port),
    reload: bool = typer.Option(False),
) -> None:
    """Run the web application with uvicorn."""
    import uvicorn

    uvicorn.run("dramahub.main:app", host=host, port=port, reload=reload)


def main() -> None:
    setup_logging()
    app()


if __name__ == "__main__":
    main()
