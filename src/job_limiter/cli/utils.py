"""
CLI utility helpers — consoles, error rendering and store access.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from job_limiter.core.errors import ConfigError, LimiterError

console = Console()
err_console = Console(stderr=True)


def get_lock_store() -> Any:
    """Lock store selected by the current settings.

    Raises:
        ConfigError: The backend is ``memory``.  Its locks live inside the
            worker process, so a separate CLI process cannot see them.
    """
    from job_limiter.core.config import LockStoreBackend, create_lock_store, get_settings, resolve_lock_store_backend

    settings = get_settings()
    if resolve_lock_store_backend(settings.lock_store_backend) is LockStoreBackend.MEMORY:
        raise ConfigError(
            "The memory lock store is private to each process; "
            "set JOB_LIMITER_LOCK_STORE_BACKEND=redis to inspect or release shared locks"
        )
    return create_lock_store(settings)


def fail(error: LimiterError | str, *, code: int = 1) -> None:
    """Print an error to stderr and exit."""
    if isinstance(error, LimiterError):
        err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}", highlight=False)
    else:
        err_console.print(f"[bold red]Error[/bold red]: {error}", highlight=False)
    raise typer.Exit(code=code)


def print_mapping(data: dict[str, Any], *, as_json: bool = False, title: str = "") -> None:
    """Render a flat mapping as a two-column table or as JSON."""
    if as_json:
        console.print_json(json.dumps(data, default=str))
        return

    table = Table(title=title or None)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in data.items():
        table.add_row(str(key), "" if value is None else str(value))
    console.print(table)
