"""Kitchen Hand Guide CLI — run the server and manage staff accounts.

Usage:
    kitchenhand serve                            # Run the web app (uvicorn)
    kitchenhand init-db                          # Create tables directly
    kitchenhand create-user alice alice@kitchen  # Add a staff login (prompts for password)
    kitchenhand hash-password                    # Print a bcrypt hash

Self-registration is disabled on the site, so create-user is how staff
accounts get made.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys
from typing import Optional

import click
from pydantic import ValidationError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _settings():
    """Load settings, exiting with a readable message if JWT_SECRET etc. are bad."""
    from kitchenhand.config import configure_logging, load_settings

    try:
        settings = load_settings()
    except ValidationError as e:
        click.secho(f"Error: invalid configuration\n{e}", fg="red", err=True)
        sys.exit(1)
    configure_logging(settings)
    return settings


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="kitchenhand")
def main():
    """Kitchen Hand Guide — product and preparation catalog."""


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: HOST setting)")
@click.option("--port", "-p", type=int, default=None, help="Port (default: PORT setting)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the web app."""
    import uvicorn

    settings = _settings()
    uvicorn.run(
        "kitchenhand.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


# ---------------------------------------------------------------------------
# init-db
# ---------------------------------------------------------------------------


@main.command("init-db")
def init_db():
    """Create all tables (use alembic for upgrades)."""
    _run(_init_db_impl())
    click.secho("Tables created.", fg="green")


async def _init_db_impl():
    from kitchenhand.db.engine import build_engine
    from kitchenhand.db.models import Base

    engine = build_engine(_settings())
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()


# ---------------------------------------------------------------------------
# create-user
# ---------------------------------------------------------------------------


@main.command("create-user")
@click.argument("username")
@click.argument("email")
@click.password_option("--password", help="Password (prompted if omitted)")
def create_user(username: str, email: str, password: str):
    """Create a staff account that can log in and edit the catalog."""
    from kitchenhand.schemas.catalog import RegisterForm, form_error

    try:
        form = RegisterForm(
            username=username,
            email=email,
            password=password,
            confirm_password=password,
        )
    except ValidationError as e:
        click.secho(f"Error: {form_error(e)}", fg="red", err=True)
        sys.exit(1)

    user_id = _run(_create_user_impl(form.username, form.email, form.password))
    if user_id is None:
        click.secho("Error: username or email already exists", fg="red", err=True)
        sys.exit(1)
    click.secho(f"Created user {form.username} ({user_id})", fg="green")


async def _create_user_impl(username: str, email: str, password: str) -> Optional[str]:
    from kitchenhand.db.engine import build_engine, build_session_factory
    from kitchenhand.services.user_service import UserService

    settings = _settings()
    engine = build_engine(settings)
    try:
        async with build_session_factory(engine)() as session:
            svc = UserService(session)
            if await svc.get_by_username_or_email(username, email):
                return None
            user = await svc.create_user(
                username, email, password, rounds=settings.bcrypt_rounds
            )
            return str(user.id)
    finally:
        await engine.dispose()


# ---------------------------------------------------------------------------
# hash-password
# ---------------------------------------------------------------------------


@main.command("hash-password")
@click.password_option("--password", help="Password (prompted if omitted)")
@click.option("--rounds", type=int, default=None, help="bcrypt cost (default: 12)")
def hash_password_cmd(password: str, rounds: Optional[int]):
    """Print a bcrypt hash, e.g. for seeding a users row by hand."""
    from kitchenhand.auth.password import CodecError, hash_password

    try:
        click.echo(hash_password(password, rounds=rounds))
    except CodecError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
