"""Taskboard CLI — sign in, check who you are, list boards.

Usage:
    taskboard login me@example.com              # prompts for password, prints tokens
    taskboard me                                 # who the server thinks you are
    taskboard boards                             # boards visible to you
    taskboard boards --mine                      # only boards you own
    taskboard create-board "Sprint 12" --private

Authenticated commands read the bearer token from --token or
TASKBOARD_TOKEN. Either a local access token or a federated ID token works;
the server decides which.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("TASKBOARD_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Taskboard backend."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

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


def _require_token(token: Optional[str]) -> str:
    tok = token or os.environ.get("TASKBOARD_TOKEN")
    if not tok:
        click.secho(
            "Error: --token required (or set TASKBOARD_TOKEN env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return tok


def _check(r: httpx.Response) -> dict | list:
    if r.status_code >= 400:
        try:
            detail = r.json().get("detail", r.text)
        except ValueError:
            detail = r.text
        click.secho(f"Error {r.status_code}: {detail}", fg="red", err=True)
        sys.exit(1)
    return r.json()


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "-"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="taskboard")
def main():
    """Taskboard — command-line access to the board API."""


@main.command()
@click.argument("email")
@click.password_option(confirmation_prompt=False)
def login(email: str, password: str):
    """Log in with email and password and print the token pair."""
    _run(_login_impl(email, password))


async def _login_impl(email: str, password: str):
    async with _client() as c:
        r = await c.post("/api/v1/auth/login", json={"email": email, "password": password})
        tokens = _check(r)
    click.secho("Logged in.", fg="green")
    click.echo(f"export TASKBOARD_TOKEN={tokens['access_token']}")
    click.echo(f"refresh token: {tokens['refresh_token']}")


@main.command()
@click.option("--token", help="Bearer token (or set TASKBOARD_TOKEN)")
@click.option("--json", "as_json", is_flag=True, help="Raw JSON output")
def me(token: Optional[str], as_json: bool):
    """Show the user the server resolved your token to."""
    _run(_me_impl(_require_token(token), as_json))


async def _me_impl(token: str, as_json: bool):
    async with _client(token) as c:
        user = _check(await c.get("/api/v1/auth/me"))
    if as_json:
        click.echo(_pretty_json(user))
        return
    click.echo(f"{user['name']} <{user['email']}>")
    click.echo(f"id:       {user['id']}")
    click.echo(f"signed in via: {user['scheme']}")
    if not user["has_password"]:
        click.secho("(no password set: federated sign-in only)", fg="yellow")


@main.command()
@click.option("--token", help="Bearer token (or set TASKBOARD_TOKEN)")
@click.option("--mine", is_flag=True, help="Only boards you own")
@click.option("--json", "as_json", is_flag=True, help="Raw JSON output")
def boards(token: Optional[str], mine: bool, as_json: bool):
    """List boards visible to you."""
    _run(_boards_impl(_require_token(token), mine, as_json))


async def _boards_impl(token: str, mine: bool, as_json: bool):
    path = "/api/v1/boards/mine" if mine else "/api/v1/boards"
    async with _client(token) as c:
        rows = _check(await c.get(path))
    if as_json:
        click.echo(_pretty_json(rows))
        return
    if not rows:
        click.echo("No boards.")
        return
    for row in rows:
        row["visibility"] = "private" if row["is_private"] else "public"
    _print_table(rows, [
        ("ID", "id", 6),
        ("NAME", "name", 30),
        ("OWNER", "owner_name", 20),
        ("VISIBILITY", "visibility", 10),
    ])


@main.command("create-board")
@click.argument("name")
@click.option("--private", "is_private", is_flag=True, help="Owner-only board")
@click.option("--token", help="Bearer token (or set TASKBOARD_TOKEN)")
def create_board(name: str, is_private: bool, token: Optional[str]):
    """Create a board with the default lists."""
    _run(_create_board_impl(_require_token(token), name, is_private))


async def _create_board_impl(token: str, name: str, is_private: bool):
    async with _client(token) as c:
        board = _check(await c.post(
            "/api/v1/boards", json={"name": name, "is_private": is_private}
        ))
    click.secho(f"Board #{board['id']} created: {board['name']}", fg="green")
    click.echo("Lists: " + ", ".join(tl["name"] for tl in board["lists"]))


if __name__ == "__main__":
    main()
