"""Task Manager CLI — run the server, and talk to it from a terminal.

Usage:
    taskmanager serve                                # Run the API with uvicorn
    taskmanager init-db                              # Create tables from the models
    taskmanager signup me@example.com                # Create an account (prompts for password)
    taskmanager login me@example.com                 # Print a token; export it as TASKMANAGER_TOKEN
    taskmanager recover me@example.com               # Mail a temporary password
    taskmanager tasks list                           # List your tasks
    taskmanager tasks add "write report" -d "Q3"     # Create a task
    taskmanager tasks done 42                        # Mark task 42 completed
    taskmanager tasks rm 42                          # Delete task 42
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

from taskmanager import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:2000"


def _api_url() -> str:
    return os.environ.get("TASKMANAGER_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the API."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0, headers=headers)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Offloads to a thread when an event loop is already running (e.g.
    CliRunner inside an async test).
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _token_from_env(token: Optional[str]) -> str:
    """Resolve the bearer token from --token or TASKMANAGER_TOKEN."""
    tok = token or os.environ.get("TASKMANAGER_TOKEN")
    if not tok:
        click.secho(
            "Error: --token required (or set TASKMANAGER_TOKEN; get one with `taskmanager login`)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return tok


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _detail(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return r.text or r.reason_phrase
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return _pretty_json(body)


def _check(r: httpx.Response) -> None:
    """Exit with the server's error message on a non-2xx response."""
    if r.is_success:
        return
    click.secho(f"Error {r.status_code}: {_detail(r)}", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


def _done_mark(completed: bool) -> str:
    return click.style("x", fg="green") if completed else " "


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="taskmanager")
def main():
    """Task Manager — authenticated to-do lists over HTTP."""


# ---------------------------------------------------------------------------
# Server-side commands
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: TASKMANAGER_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: TASKMANAGER_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from taskmanager.config import settings

    uvicorn.run(
        "taskmanager.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("init-db")
def init_db():
    """Create the users and tasks tables (use Alembic in production)."""
    from taskmanager.db.engine import create_tables, engine
    from taskmanager.logging_setup import configure_logging

    configure_logging()

    async def _impl():
        await create_tables()
        await engine.dispose()

    _run(_impl())
    click.secho("Tables created.", fg="green")


# ---------------------------------------------------------------------------
# Account commands
# ---------------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.password_option()
def signup(email: str, password: str):
    """Create an account."""
    _run(_signup_impl(email, password))


async def _signup_impl(email: str, password: str):
    async with _client() as c:
        r = await c.post("/signUp", json={"email": email, "password": password})
        _check(r)
        click.secho(f"Account created for {r.json()['email']}", fg="green")


@main.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
def login(email: str, password: str):
    """Log in and print a bearer token."""
    _run(_login_impl(email, password))


async def _login_impl(email: str, password: str):
    async with _client() as c:
        r = await c.post("/login", json={"email": email, "password": password})
        _check(r)
        click.echo(r.json()["token"])


@main.command()
@click.argument("email")
def recover(email: str):
    """Mail a temporary password to EMAIL."""
    _run(_recover_impl(email))


async def _recover_impl(email: str):
    async with _client() as c:
        r = await c.put("/recover-password", json={"email": email})
        _check(r)
        click.echo(r.json()["message"])


@main.command("reset-password")
@click.argument("email")
@click.option("--current", prompt="Current password", hide_input=True)
@click.option("--new", "new_password", prompt="New password", hide_input=True,
              confirmation_prompt=True)
def reset_password(email: str, current: str, new_password: str):
    """Change the password for EMAIL."""
    _run(_reset_impl(email, current, new_password))


async def _reset_impl(email: str, current: str, new_password: str):
    async with _client() as c:
        r = await c.put("/reset-password", json={
            "email": email,
            "currentPassword": current,
            "newPassword": new_password,
        })
        _check(r)
        click.secho("Password changed.", fg="green")


# ---------------------------------------------------------------------------
# taskmanager tasks ...
# ---------------------------------------------------------------------------


@main.group()
def tasks():
    """Manage your tasks (needs TASKMANAGER_TOKEN)."""


@tasks.command("list")
@click.option("--token", help="Bearer token (or set TASKMANAGER_TOKEN)")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
def list_tasks(token: Optional[str], as_json: bool):
    """List your tasks."""
    _run(_list_impl(_token_from_env(token), as_json))


async def _list_impl(token: str, as_json: bool):
    async with _client(token) as c:
        r = await c.get("/tasks")
        _check(r)
        rows = r.json()

    if as_json:
        click.echo(_pretty_json(rows))
        return
    if not rows:
        click.echo("No tasks found.")
        return

    click.secho(f"Tasks ({len(rows)}):", bold=True)
    click.echo()
    for row in rows:
        row["done"] = "x" if row["completed"] else ""
    _print_table(rows, [
        ("ID", "id", 6),
        ("Done", "done", 4),
        ("Title", "title", 40),
        ("Description", "description", 40),
    ])


@tasks.command("add")
@click.argument("title")
@click.option("--description", "-d", default="", help="Longer description")
@click.option("--completed", is_flag=True, help="Create already completed")
@click.option("--token", help="Bearer token (or set TASKMANAGER_TOKEN)")
def add_task(title: str, description: str, completed: bool, token: Optional[str]):
    """Create a task."""
    _run(_add_impl(_token_from_env(token), title, description, completed))


async def _add_impl(token: str, title: str, description: str, completed: bool):
    async with _client(token) as c:
        r = await c.post("/tasks", json={
            "title": title,
            "description": description,
            "completed": completed,
        })
        _check(r)
        click.secho(f"Task #{r.json()['id']} created", fg="green")


@tasks.command("show")
@click.argument("task_id", type=int)
@click.option("--token", help="Bearer token (or set TASKMANAGER_TOKEN)")
def show_task(task_id: int, token: Optional[str]):
    """Show one task."""
    _run(_show_impl(_token_from_env(token), task_id))


async def _show_impl(token: str, task_id: int):
    async with _client(token) as c:
        r = await c.get(f"/tasks/{task_id}")
        _check(r)
        t = r.json()
    click.echo(f"[{_done_mark(t['completed'])}] #{t['id']} {t['title']}")
    if t["description"]:
        click.echo(f"    {t['description']}")


@tasks.command("update")
@click.argument("task_id", type=int)
@click.option("--title", "-t", default=None, help="New title")
@click.option("--description", "-d", default=None, help="New description")
@click.option("--completed/--not-completed", default=None)
@click.option("--token", help="Bearer token (or set TASKMANAGER_TOKEN)")
def update_task(task_id: int, title: Optional[str], description: Optional[str],
                completed: Optional[bool], token: Optional[str]):
    """Change a task; unspecified fields keep their current value."""
    _run(_update_impl(_token_from_env(token), task_id, title, description, completed))


async def _update_impl(token: str, task_id: int, title: Optional[str],
                       description: Optional[str], completed: Optional[bool]):
    async with _client(token) as c:
        # PUT replaces every field, so start from the current values
        r = await c.get(f"/tasks/{task_id}")
        _check(r)
        current = r.json()
        body = {
            "title": title if title is not None else current["title"],
            "description": description if description is not None else current["description"],
            "completed": completed if completed is not None else current["completed"],
        }
        r = await c.put(f"/tasks/{task_id}", json=body)
        _check(r)
        click.secho(f"Task #{task_id} updated", fg="green")


@tasks.command("done")
@click.argument("task_id", type=int)
@click.option("--token", help="Bearer token (or set TASKMANAGER_TOKEN)")
def done_task(task_id: int, token: Optional[str]):
    """Mark a task completed."""
    _run(_update_impl(_token_from_env(token), task_id, None, None, True))


@tasks.command("rm")
@click.argument("task_id", type=int)
@click.option("--token", help="Bearer token (or set TASKMANAGER_TOKEN)")
def remove_task(task_id: int, token: Optional[str]):
    """Delete a task."""
    _run(_rm_impl(_token_from_env(token), task_id))


async def _rm_impl(token: str, task_id: int):
    async with _client(token) as c:
        r = await c.delete(f"/tasks/{task_id}")
        _check(r)
        click.secho(f"Task #{task_id} deleted", fg="green")


if __name__ == "__main__":
    main()
