"""Deep Thoughts CLI — post and read thoughts from the terminal.

Usage:
    deepthoughts signup ann ann@example.com s3cret   # prints a token
    deepthoughts login ann@example.com s3cret        # prints a token
    export DEEPTHOUGHTS_TOKEN=...
    deepthoughts feed [--user ann]                   # newest first
    deepthoughts post "Hello there"
    deepthoughts react <thought-id> "Nice one"
    deepthoughts befriend <user-id>
    deepthoughts me
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click

from deepthoughts import __version__
from deepthoughts.client import ApiError, AuthSession, DeepThoughtsClient
from deepthoughts.client.api import DEFAULT_API_URL

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


def _api_url() -> str:
    return os.environ.get("DEEPTHOUGHTS_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> DeepThoughtsClient:
    """Build a client pointed at the backend, carrying the token if any."""
    token = token or os.environ.get("DEEPTHOUGHTS_TOKEN")
    return DeepThoughtsClient(_api_url(), session=AuthSession(token))


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
        # No running loop — normal CLI invocation
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _call(token: Optional[str], method: str, *args):
    """Invoke one client method, exiting with a red message on API errors."""

    async def go():
        async with _client(token) as dt:
            return await getattr(dt, method)(*args)

    try:
        return _run(go())
    except ApiError as e:
        click.secho(f"Error: {e.message} ({e.code})", fg="red", err=True)
        sys.exit(1)


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _print_thoughts(thoughts: list[dict]):
    if not thoughts:
        click.echo("No thoughts yet.")
        return
    for t in thoughts:
        click.secho(f"{t['username']}", bold=True, nl=False)
        click.echo(f"  {t['createdAt']}  [{t['id']}]")
        click.echo(f"  {t['thoughtText']}")
        click.secho(f"  {t['reactionCount']} reaction(s)", fg="cyan")
        click.echo()


token_option = click.option(
    "--token", envvar="DEEPTHOUGHTS_TOKEN", help="Bearer token (or set DEEPTHOUGHTS_TOKEN)"
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="deepthoughts")
def main():
    """Deep Thoughts — post thoughts, react to them, keep a friend list."""


@main.command()
@click.argument("username")
@click.argument("email")
@click.argument("password")
def signup(username: str, email: str, password: str):
    """Create an account and print its token."""
    data = _call(None, "add_user", username, email, password)
    click.secho(f"Welcome, {data['user']['username']}!", fg="green", err=True)
    click.echo(data["token"])


@main.command()
@click.argument("email")
@click.argument("password")
def login(email: str, password: str):
    """Log in and print a token."""
    data = _call(None, "login", email, password)
    click.secho(f"Logged in as {data['user']['username']}", fg="green", err=True)
    click.echo(data["token"])


@main.command()
@click.option("--user", "username", help="Only this user's thoughts")
@token_option
def feed(username: Optional[str], token: Optional[str]):
    """List thoughts, newest first."""
    _print_thoughts(_call(token, "thoughts", username))


@main.command()
@click.argument("text")
@token_option
def post(text: str, token: Optional[str]):
    """Post a new thought."""
    thought = _call(token, "add_thought", text)
    click.secho(f"Posted thought {thought['id']}", fg="green")


@main.command()
@click.argument("thought_id")
@click.argument("body")
@token_option
def react(thought_id: str, body: str, token: Optional[str]):
    """React to a thought."""
    thought = _call(token, "add_reaction", thought_id, body)
    if thought is None:
        click.secho("Thought not found", fg="red", err=True)
        sys.exit(1)
    _print_thoughts([thought])


@main.command()
@click.argument("friend_id")
@token_option
def befriend(friend_id: str, token: Optional[str]):
    """Add a user to your friend list."""
    profile = _call(token, "add_friend", friend_id)
    click.secho(f"You now have {profile['friendCount']} friend(s)", fg="green")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
@token_option
def me(as_json: bool, token: Optional[str]):
    """Show your own profile."""
    profile = _call(token, "me")
    if as_json:
        click.echo(_pretty_json(profile))
        return
    click.secho(profile["username"], bold=True)
    click.echo(f"  {profile['email']}")
    click.echo(f"  friends: {', '.join(f['username'] for f in profile['friends']) or '—'}")
    click.echo()
    _print_thoughts(profile["thoughts"])


if __name__ == "__main__":
    main()
