"""
Root Typer application for the job-limiter CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

app = Typer(
    name="job-limiter",
    help="job-limiter — dedup and throttle gates for background jobs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from job_limiter import __version__

        typer.echo(f"job-limiter {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override JOB_LIMITER_LOG_LEVEL."),
) -> None:
    """job-limiter CLI — inspect configuration, lock keys and held locks."""
    from pydantic import ValidationError

    from job_limiter.core.config import get_settings
    from job_limiter.core.logging import configure_logging

    try:
        settings = get_settings()
    except ValidationError:
        # ``config validate`` reports the details
        configure_logging(level=log_level or "INFO")
        return

    configure_logging(
        level=log_level or settings.log_level,
        json_format=settings.log_format == "json",
    )


# ── Sub-command registration ─────────────────────────────────────────────

from job_limiter.cli.config import app as config_app  # noqa: E402
from job_limiter.cli.keys import app as keys_app  # noqa: E402
from job_limiter.cli.locks import app as locks_app  # noqa: E402

app.add_typer(config_app, name="config", help="Configuration inspection.")
app.add_typer(keys_app, name="keys", help="Compute the lock keys a job would use.")
app.add_typer(locks_app, name="locks", help="Inspect and release held locks.")
