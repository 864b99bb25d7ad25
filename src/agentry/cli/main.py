"""Click CLI group: migrate, users, API keys, catalog inspection, and serve."""

from __future__ import annotations

import hashlib
import json
import secrets
import sys

import click

from agentry.agents.loader import get_bundle_loader
from agentry.agents.prompt import assemble_system_prompt
from agentry.agents.registry import AgentCatalog
from agentry.agents.store import AgentStore
from agentry.auth.api_keys import ApiKeyManager
from agentry.config import get_settings
from agentry.db.connection import get_conn
from agentry.db.migrations.runner import run_migrations
from agentry.db.queries import create_user as insert_user
from agentry.db.queries import get_user_by_username
from agentry.logging import configure_logging


def hash_password(password: str) -> str:
    salt = secrets.token_bytes(16)
    digest = hashlib.scrypt(password.encode("utf-8"), salt=salt, n=2**14, r=8, p=1)
    return f"scrypt${salt.hex()}${digest.hex()}"


def _require_user_id(username: str) -> int:
    with get_conn() as conn:
        user = get_user_by_username(conn, username)
    if user is None:
        click.echo(f"unknown user: {username}", err=True)
        sys.exit(1)
    return int(str(user["id"]))


@click.group()
def cli() -> None:
    """Agentry agent registry CLI."""
    configure_logging(get_settings().log_level)


@cli.command()
def migrate() -> None:
    """Apply pending database migrations."""
    applied = run_migrations()
    click.echo(f"applied: {', '.join(applied)}" if applied else "database is up to date")


@cli.command("create-user")
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
def create_user(username: str, password: str) -> None:
    """Create a user account."""
    run_migrations()
    with get_conn() as conn:
        if get_user_by_username(conn, username) is not None:
            click.echo(f"user already exists: {username}", err=True)
            sys.exit(1)
        user = insert_user(conn, username, hash_password(password))
    click.echo(f"created user {user['username']} (id={user['id']})")


@cli.command("create-api-key")
@click.argument("username")
@click.argument("name")
def create_api_key(username: str, name: str) -> None:
    """Issue an API key; the token is printed once and never stored."""
    user_id = _require_user_id(username)
    with get_conn() as conn:
        created = ApiKeyManager(conn).create(user_id, name)
    click.echo(created.token)


@cli.command("list-agents")
@click.argument("username")
@click.option("--json", "json_output", is_flag=True, help="Print structured JSON output.")
def list_agents(username: str, json_output: bool) -> None:
    """List the unified agent catalog for a user."""
    user_id = _require_user_id(username)
    with get_conn() as conn:
        views = AgentCatalog(get_bundle_loader(), AgentStore(conn)).list_unified(user_id)
    if json_output:
        click.echo(json.dumps([view.to_dict() for view in views], indent=2))
        return
    for view in views:
        click.echo(f"{view.id:<24} {view.source:<9} {view.display_name}")


@cli.command("show-prompt")
@click.argument("name")
def show_prompt(name: str) -> None:
    """Print the assembled system prompt of a file-based agent."""
    loader = get_bundle_loader()
    if not loader.has_agent(name):
        click.echo(f"no persona found for agent: {name}", err=True)
        sys.exit(1)
    click.echo(assemble_system_prompt(loader.load_agent(name)))


@cli.command()
@click.option("--reload", is_flag=True, help="Reload on code changes.")
def serve(reload: bool) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "agentry.main:app", host=settings.bind_host, port=settings.bind_port, reload=reload
    )


if __name__ == "__main__":
    cli()
