"""
CLI: ``job-limiter config`` — configuration inspection.
"""

from __future__ import annotations

import typer

from job_limiter.cli.utils import console, fail
from job_limiter.core.errors import ConfigError

app = typer.Typer(no_args_is_help=True)


@app.command("show")
def show_config(
    format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, env"),
) -> None:
    """Show the effective settings."""
    from job_limiter.core.config import get_settings

    settings = get_settings()

    if format == "json":
        console.print_json(settings.model_dump_json())
        return

    if format == "env":
        for key, value in sorted(settings.model_dump().items()):
            typer.echo(f"JOB_LIMITER_{key.upper()}={value}")
        return

    if format != "table":
        fail(f"Unknown format {format!r} (expected table, json or env)")

    from rich.table import Table

    console.print("[bold]Components:[/bold]")
    components = Table()
    components.add_column("Component")
    components.add_column("Value")
    components.add_row("Lock store", settings.lock_store_backend)
    components.add_row("Scheduler", settings.scheduler_backend)
    console.print(components)

    console.print("\n[bold]All Settings:[/bold]")
    for key, value in sorted(settings.model_dump().items()):
        console.print(f"  {key}: {value}", highlight=False)


@app.command("validate")
def validate_config() -> None:
    """Validate settings and backend names."""
    from pydantic import ValidationError

    from job_limiter.core.config import get_settings, resolve_lock_store_backend, resolve_scheduler_backend

    try:
        settings = get_settings(_force_reload=True)
    except ValidationError as e:
        console.print(f"[red]Configuration Error:[/red] {e}", highlight=False)
        raise typer.Exit(1) from e

    try:
        store = resolve_lock_store_backend(settings.lock_store_backend)
        scheduler = resolve_scheduler_backend(settings.scheduler_backend)
    except ConfigError as e:
        fail(e)
        return

    console.print(f"[green]✓[/green] lock store: {store.value}, scheduler: {scheduler.value}")
