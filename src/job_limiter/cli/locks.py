"""
CLI: ``job-limiter locks`` — look at or remove a held lock.

Locks expire on their own; ``release`` is for the rare case where a lock
outlives its purpose (for example a dedup lock with a very long expiration
whose job was lost).

Both commands need a shared store; the per-process ``memory`` backend is
refused.
"""

from __future__ import annotations

import typer

from job_limiter.cli.utils import console, fail, get_lock_store, print_mapping
from job_limiter.core.errors import LimiterError

app = typer.Typer(no_args_is_help=True)


@app.command("inspect")
def inspect_lock(
    key: str = typer.Argument(..., help="Lock key"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the value and remaining TTL of a lock."""
    try:
        info = get_lock_store().inspect(key)
    except LimiterError as e:
        fail(e)
        return

    if info is None:
        console.print(f"[yellow]No lock held under[/yellow] {key}", highlight=False, markup=True)
        raise typer.Exit(code=1)

    print_mapping(info.to_dict(), as_json=json_output, title="Lock")


@app.command("release")
def release_lock(
    key: str = typer.Argument(..., help="Lock key"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a lock before its TTL runs out."""
    try:
        store = get_lock_store()
    except LimiterError as e:
        fail(e)
        return

    if not yes:
        typer.confirm(f"Release lock {key}?", abort=True)

    try:
        store.release(key)
    except LimiterError as e:
        fail(e)
        return

    console.print(f"[green]✓[/green] Released {key}", highlight=False)
