"""
Templates command for jobhistory.

Shows, previews and renders job history message templates.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import logging
from datetime import datetime
from typing import Any, List, Optional

import typer

from jobhistory.config import MESSAGE_PROPERTIES, build_plugin
from jobhistory.events import JobExecutionError, JobExecutionEvent
from jobhistory.message_format import TemplateError, render

app = typer.Typer(help="Show, preview and render message templates")

PREVIEW_LOGGER = "jobhistory.preview"


class _EchoHandler(logging.Handler):
    """Writes each record's level and message to stdout."""

    def emit(self, record: logging.LogRecord) -> None:
        typer.echo(f"{record.levelname:<7} {record.getMessage()}")


def parse_argument(text: str) -> Any:
    """
    Convert a command-line argument to a template value.

    'none' -> None, integers -> int, ISO-8601 timestamps -> datetime,
    anything else stays a string.
    """
    if text.lower() == "none":
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return text


def _parse_time(text: Optional[str]) -> Optional[datetime]:
    if text is None:
        return None
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise typer.BadParameter(f"Not an ISO-8601 timestamp: {text}")


@app.command()
def show(ctx: typer.Context):
    """Show the effective template for each event kind."""
    config = ctx.obj.get("config", {})

    try:
        plugin = build_plugin(config)
    except (TemplateError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    for key, prop in MESSAGE_PROPERTIES.items():
        typer.echo(f"{key}:")
        typer.echo(f"  {getattr(plugin, prop)}")


@app.command()
def preview(
    ctx: typer.Context,
    job: str = typer.Option("Job1", "--job", help="Job name"),
    group: str = typer.Option("Group1", "--group", help="Job group"),
    trigger: str = typer.Option("Trig1", "--trigger", help="Trigger name"),
    trigger_group: str = typer.Option("GroupA", "--trigger-group", help="Trigger group"),
    previous: Optional[str] = typer.Option(
        None, "--previous", help="Previous fire time (ISO-8601)"
    ),
    next_time: Optional[str] = typer.Option(
        None, "--next", help="Next fire time (ISO-8601)"
    ),
    refire_count: int = typer.Option(0, "--refire-count", min=0, help="Re-fire count"),
    result: Optional[str] = typer.Option(None, "--result", help="Job result text"),
    error: str = typer.Option("boom", "--error", help="Error message for the failure line"),
):
    """
    Preview the four audit lines for a sample job.

    Runs a sample event through a configured plugin: fired, completed,
    failed and vetoed.

    Examples:
        jobhistory templates preview
        jobhistory templates preview --job backup --result 42
    """
    config = ctx.obj.get("config", {})

    preview_logger = logging.getLogger(PREVIEW_LOGGER)
    preview_logger.setLevel(logging.INFO)
    preview_logger.propagate = False
    handler = _EchoHandler()
    preview_logger.addHandler(handler)

    try:
        try:
            plugin = build_plugin(config, logger=preview_logger)
        except (TemplateError, ValueError) as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)

        event = JobExecutionEvent(
            job_name=job,
            job_group=group,
            trigger_name=trigger,
            trigger_group=trigger_group,
            previous_fire_time=_parse_time(previous),
            next_fire_time=_parse_time(next_time),
            refire_count=refire_count,
            result=result,
        )

        plugin.start()
        plugin.job_to_be_executed(event)
        plugin.job_was_executed(event, None)
        plugin.job_was_executed(event, JobExecutionError(error))
        plugin.job_execution_vetoed(event)
        plugin.shutdown()
    finally:
        preview_logger.removeHandler(handler)


@app.command("render")
def render_command(
    template: str = typer.Argument(..., help="Template, e.g. 'Job {1}.{0} at {2, date, HH:mm}'"),
    args: Optional[List[str]] = typer.Argument(None, help="Positional arguments"),
):
    """
    Render an arbitrary template.

    Arguments are converted before rendering: 'none' becomes an absent
    value, integers become numbers and ISO-8601 timestamps become dates.

    Examples:
        jobhistory templates render "{0} at {1, date, HH:mm}" backup 2025-01-02T03:04:05
    """
    values = [parse_argument(arg) for arg in args or []]

    try:
        typer.echo(render(template, values))
    except TemplateError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
