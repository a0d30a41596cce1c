"""Command-line interface for gtasks-mcp."""

import asyncio
import sys
from typing import NoReturn

import click

from gtasks_mcp.__version__ import __version__
from gtasks_mcp.auth import OAuthManager, StoredTokenProvider, TokenStatus
from gtasks_mcp.client import TasksClient
from gtasks_mcp.config import TASKS_SCOPES
from gtasks_mcp.exceptions import GTasksError

_TOKEN_PROBLEMS = {
    TokenStatus.MISSING: "Not authenticated. Run 'gtasks-mcp setup' first.",
    TokenStatus.INVALID: "Token file is corrupted. Run 'gtasks-mcp setup --force'.",
}


def _fail(message: str) -> NoReturn:
    click.echo(f"❌ {message}", err=True)
    sys.exit(1)


async def _count_task_lists(manager: OAuthManager) -> int:
    """Call the Tasks API with the stored token and count the user's lists."""
    client = TasksClient(StoredTokenProvider(manager=manager))
    try:
        return len(await client.list_task_lists())
    finally:
        await client.close()


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Google Tasks MCP Server - let AI agents manage your Google Tasks.

    Provides 8 tools: list task lists, list/get/create/update/complete/
    delete tasks, and move tasks between positions and parents.
    """


@main.command()
@click.option("--client-id", envvar="GOOGLE_OAUTH_CLIENT_ID", help="Google OAuth client ID")
@click.option(
    "--client-secret", envvar="GOOGLE_OAUTH_CLIENT_SECRET", help="Google OAuth client secret"
)
@click.option("--force", is_flag=True, help="Re-run consent even if a valid token exists.")
def setup(client_id: str | None, client_secret: str | None, force: bool) -> None:
    """Authorize access to Google Tasks.

    Opens the browser for the OAuth2 consent flow, stores the token in
    ./.gtasks-mcp/tokens.json and confirms it by listing your task lists.

    Requires GOOGLE_OAUTH_CLIENT_ID / GOOGLE_OAUTH_CLIENT_SECRET or the
    equivalent options. Create them in the Google Cloud console with the
    Tasks API enabled.
    """
    manager = OAuthManager()

    if manager.has_valid_tokens() and not force:
        click.echo(f"✓ Already authenticated (token at {manager.token_path}).")
        click.echo("Use --force to authorize again, e.g. for a different account.")
        return

    if not client_id or not client_secret:
        _fail(
            "OAuth client credentials required.\n"
            "Set GOOGLE_OAUTH_CLIENT_ID and GOOGLE_OAUTH_CLIENT_SECRET, or pass\n"
            "  gtasks-mcp setup --client-id=... --client-secret=..."
        )

    click.echo("Browser will open for Google consent (scope: Google Tasks)...")
    try:
        asyncio.run(manager.authenticate(client_id=client_id, client_secret=client_secret))
    except Exception as e:
        _fail(f"Authentication failed: {e}")

    click.echo(f"✓ Token stored at {manager.token_path}")

    try:
        count = asyncio.run(_count_task_lists(manager))
    except GTasksError as e:
        _fail(f"Token stored, but the Tasks API rejected it: {e}")

    click.echo(f"✓ Tasks API reachable: {count} task list(s) found")


@main.command()
def logout() -> None:
    """Delete the stored token for this project."""
    manager = OAuthManager()

    if manager.storage.clear():
        click.echo(f"✓ Removed {manager.token_path}")
    else:
        click.echo(f"No token stored at {manager.token_path}")


@main.command()
def mcp() -> None:
    """Start the stdio MCP server.

    This command is normally launched by the MCP client. An expired token
    is accepted; it is refreshed on the first tool call.
    """
    from gtasks_mcp.server import main as server_main

    status, _ = OAuthManager().get_status()
    if status in _TOKEN_PROBLEMS:
        _fail(_TOKEN_PROBLEMS[status])

    try:
        server_main()
    except KeyboardInterrupt:
        click.echo("\nServer stopped.", err=True)


@main.command()
@click.option("--offline", is_flag=True, help="Skip the live Tasks API call.")
def doctor(offline: bool) -> None:
    """Check the stored token and, unless --offline, reach the Tasks API."""
    manager = OAuthManager()
    status, stored = manager.get_status()
    problems = 0

    click.echo(f"gtasks-mcp {__version__}")
    click.echo(f"Token file: {manager.token_path}")

    if status in _TOKEN_PROBLEMS:
        _fail(_TOKEN_PROBLEMS[status])

    expires = stored.token.expires_at.strftime("%Y-%m-%d %H:%M:%S UTC")
    if status == TokenStatus.EXPIRED:
        if stored.token.refresh_token:
            click.echo(f"  ⚠️  Token expired at {expires} (refreshed on next use)")
        else:
            click.echo(f"  ❌ Token expired at {expires} and has no refresh token")
            problems += 1
    else:
        click.echo(f"  ✓ Token valid until {expires}")

    missing_scopes = sorted(set(TASKS_SCOPES) - set(stored.token.scopes))
    if missing_scopes:
        click.echo(f"  ❌ Token lacks scope: {', '.join(missing_scopes)}")
        problems += 1
    else:
        click.echo("  ✓ Google Tasks scope granted")

    if offline:
        click.echo("  - Tasks API check skipped")
    else:
        try:
            count = asyncio.run(_count_task_lists(manager))
        except GTasksError as e:
            click.echo(f"  ❌ Tasks API call failed: {e}")
            problems += 1
        else:
            click.echo(f"  ✓ Tasks API reachable: {count} task list(s)")

    if problems:
        _fail("Fix the problems above, then run 'gtasks-mcp setup --force'.")
    click.echo("✓ Ready to use!")


if __name__ == "__main__":
    main()
