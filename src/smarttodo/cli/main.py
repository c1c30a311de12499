"""SmartTodo CLI — talk to the API from a terminal.

Usage:
    smarttodo register ann                  # Create an account (prompts for password)
    smarttodo login ann                     # Print a bearer token
    export SMARTTODO_TOKEN=...              # ...and keep it for later commands
    smarttodo tasks add "Buy milk"          # Create a task
    smarttodo tasks list                    # List your tasks, newest first
    smarttodo tasks done <id>               # Mark a task completed
    smarttodo tasks edit <id> --title ...   # Change title/description/status
    smarttodo tasks rm <id>                 # Delete a task
    smarttodo health                        # Liveness check
    smarttodo serve                         # Run the API with uvicorn
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
    return os.environ.get("SMARTTODO_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the SmartTodo backend."""
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0)


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


def _auth_headers(token: Optional[str]) -> dict:
    tok = token or os.environ.get("SMARTTODO_TOKEN")
    if not tok:
        click.secho(
            "Error: --token required (or set SMARTTODO_TOKEN env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return {"Authorization": f"Bearer {tok}"}


def _unwrap(r: httpx.Response) -> dict:
    """Return the envelope's data, or print its message and exit on failure."""
    try:
        body = r.json()
    except ValueError:
        body = {"message": r.text}
    if r.is_error:
        click.secho(f"Error ({r.status_code}): {body.get('message', r.reason_phrase)}", fg="red", err=True)
        for err in body.get("errors", []):
            click.secho(f"  - {err}", fg="red", err=True)
        sys.exit(1)
    return body.get("data") or {}


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
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.secho(line, fg=_status_color(row.get("status", "")))


def _status_color(status: str) -> str:
    return {"pending": "yellow", "completed": "green"}.get(status, "white")


token_option = click.option("--token", help="Bearer token (or set SMARTTODO_TOKEN)")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="smarttodo")
def main():
    """SmartTodo — manage your private task list."""


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@main.command()
@click.argument("username")
@click.password_option()
def register(username: str, password: str):
    """Create a new account."""
    _run(_register_impl(username, password))


async def _register_impl(username: str, password: str):
    async with _client() as c:
        r = await c.post("/api/auth/register", json={"username": username, "password": password})
        user = _unwrap(r)["user"]
    click.secho(f"Registered {user['username']} ({user['id']})", fg="green")


@main.command()
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True)
@click.option("--export", "as_export", is_flag=True, help="Print as a shell export line")
def login(username: str, password: str, as_export: bool):
    """Log in and print a bearer token."""
    _run(_login_impl(username, password, as_export))


async def _login_impl(username: str, password: str, as_export: bool):
    async with _client() as c:
        r = await c.post("/api/auth/login", json={"username": username, "password": password})
        data = _unwrap(r)
    if as_export:
        click.echo(f"export SMARTTODO_TOKEN={data['token']}")
    else:
        click.echo(data["token"])
        click.secho(f"Valid for {data['expires_in']} seconds.", fg="cyan", err=True)


@main.command()
def health():
    """Check that the API is up."""
    _run(_health_impl())


async def _health_impl():
    async with _client() as c:
        r = await c.get("/health")
        data = _unwrap(r)
    click.echo(_pretty_json(data))


# ---------------------------------------------------------------------------
# smarttodo tasks ...
# ---------------------------------------------------------------------------


@main.group()
def tasks():
    """Manage your tasks."""


@tasks.command("list")
@token_option
@click.option("--json", "as_json", is_flag=True, help="Raw JSON output")
def list_tasks(token: Optional[str], as_json: bool):
    """List your tasks, newest first."""
    _run(_list_impl(token, as_json))


async def _list_impl(token: Optional[str], as_json: bool):
    async with _client() as c:
        r = await c.get("/api/tasks", headers=_auth_headers(token))
        data = _unwrap(r)

    if as_json:
        click.echo(_pretty_json(data["tasks"]))
        return
    if not data["tasks"]:
        click.echo("No tasks found.")
        return

    click.secho(f"Tasks ({data['count']}):", bold=True)
    click.echo()
    _print_table(data["tasks"], [
        ("ID", "id", 36),
        ("Status", "status", 10),
        ("Title", "title", 50),
    ])


@tasks.command("add")
@click.argument("title")
@click.option("--description", "-d", default=None, help="Longer description")
@click.option("--status", type=click.Choice(["pending", "completed"]), default=None)
@token_option
def add_task(title: str, description: Optional[str], status: Optional[str], token: Optional[str]):
    """Create a task."""
    _run(_add_impl(title, description, status, token))


async def _add_impl(title: str, description: Optional[str], status: Optional[str],
                    token: Optional[str]):
    body: dict = {"title": title}
    if description is not None:
        body["description"] = description
    if status is not None:
        body["status"] = status

    async with _client() as c:
        r = await c.post("/api/tasks", json=body, headers=_auth_headers(token))
        task = _unwrap(r)["task"]
    click.secho(f"Created task {task['id']}: {task['title']} [{task['status']}]", fg="green")


@tasks.command("edit")
@click.argument("task_id")
@click.option("--title", default=None)
@click.option("--description", "-d", default=None)
@click.option("--status", default=None, help="pending or completed")
@token_option
def edit_task(task_id: str, title: Optional[str], description: Optional[str],
              status: Optional[str], token: Optional[str]):
    """Change fields of a task. Fields you leave out are untouched."""
    changes = {
        k: v for k, v in
        (("title", title), ("description", description), ("status", status))
        if v is not None
    }
    if not changes:
        click.secho("Nothing to change.", fg="yellow")
        return
    _run(_update_impl(task_id, changes, token))


@tasks.command("done")
@click.argument("task_id")
@token_option
def done_task(task_id: str, token: Optional[str]):
    """Mark a task completed."""
    _run(_update_impl(task_id, {"status": "completed"}, token))


async def _update_impl(task_id: str, changes: dict, token: Optional[str]):
    async with _client() as c:
        r = await c.put(f"/api/tasks/{task_id}", json=changes, headers=_auth_headers(token))
        task = _unwrap(r)["task"]
    click.secho(f"Updated task {task['id']}: {task['title']} [{task['status']}]", fg="green")


@tasks.command("rm")
@click.argument("task_id")
@token_option
def remove_task(task_id: str, token: Optional[str]):
    """Delete a task."""
    _run(_remove_impl(task_id, token))


async def _remove_impl(task_id: str, token: Optional[str]):
    async with _client() as c:
        r = await c.delete(f"/api/tasks/{task_id}", headers=_auth_headers(token))
        _unwrap(r)
    click.secho(f"Deleted task {task_id}", fg="green")


# ---------------------------------------------------------------------------
# smarttodo serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: SMARTTODO_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: SMARTTODO_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from smarttodo.config import settings

    uvicorn.run(
        "smarttodo.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


if __name__ == "__main__":
    main()
