"""
CLI: ``job-limiter keys`` — print the lock keys a job would use.

Useful when looking for a stuck lock in Redis: the commands apply exactly
the key formulas the gates use, including the configured namespace.
"""

from __future__ import annotations

import json

import typer

from job_limiter.cli.utils import fail
from job_limiter.keys import ThrottlePhase, arguments_digest, dedup_key, enqueue_resource_id, throttle_key

app = typer.Typer(no_args_is_help=True)


def _namespace(namespace: str | None) -> str:
    if namespace:
        return namespace
    from job_limiter.core.config import get_settings

    return get_settings().key_namespace


@app.command("dedup")
def dedup(
    job_class: str = typer.Argument(..., help="Job class name"),
    args_json: str = typer.Argument("[]", help="Job arguments as a JSON list"),
    namespace: str | None = typer.Option(None, "--namespace", "-n", help="Key namespace"),
) -> None:
    """Key of the dedup lock for one exact job."""
    try:
        arguments = json.loads(args_json)
    except json.JSONDecodeError as e:
        fail(f"ARGS_JSON is not valid JSON: {e}")
        return
    if not isinstance(arguments, list):
        fail("ARGS_JSON must be a JSON list")
        return

    typer.echo(dedup_key(job_class, arguments, namespace=_namespace(namespace)))
    typer.echo(f"digest: {arguments_digest(arguments)}")


@app.command("throttle")
def throttle(
    job_class: str = typer.Argument(..., help="Job class name"),
    resource_id: str = typer.Argument(..., help="Resource id returned by the extractor"),
    queue: str = typer.Option("default", "--queue", "-q", help="Queue name (enqueue phase only)"),
    namespace: str | None = typer.Option(None, "--namespace", "-n", help="Key namespace"),
) -> None:
    """Keys of the three throttle locks for one resource."""
    ns = _namespace(namespace)
    for phase in ThrottlePhase:
        phase_resource = enqueue_resource_id(resource_id, queue) if phase is ThrottlePhase.ENQUEUE else resource_id
        typer.echo(f"{phase.value}: {throttle_key(job_class, phase_resource, phase, namespace=ns)}")
