"""
Main CLI entry point for jobhistory.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import logging
from typing import Optional

import typer
import yaml

from jobhistory import __version__
from jobhistory.commands import config, templates
from jobhistory.config import get_logging_settings, load_config

# Initialize main app
app = typer.Typer(
    name="jobhistory",
    help="Audit logging for scheduled job executions",
    no_args_is_help=True,
)

# Add subcommands
app.add_typer(templates.app, name="templates")
app.add_typer(config.app, name="config")


def setup_logging(verbose: bool = False, level: str = "INFO", fmt: Optional[str] = None):
    """Configure logging for the CLI."""
    level_value = logging.DEBUG if verbose else getattr(logging, level, logging.INFO)
    logging.basicConfig(
        level=level_value,
        format=fmt or "%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: ~/jobhistory.yml or ./jobhistory.yml)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
):
    """
    jobhistory: audit log lines for job fired, completed, failed and vetoed events.

    Templates and logging are read from a YAML config file when one exists;
    built-in defaults are used otherwise.
    """
    state = {"config": {}, "config_path": config_path, "verbose": verbose}

    # Commands that need an actual config file to work on
    commands_requiring_config = ["config"]

    if ctx.invoked_subcommand and ctx.invoked_subcommand != "version":
        try:
            state["config"] = load_config(config_path)
        except FileNotFoundError as e:
            if config_path or ctx.invoked_subcommand in commands_requiring_config:
                typer.echo(f"Error: {e}", err=True)
                raise typer.Exit(1)
        except (yaml.YAMLError, ValueError) as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)

    settings = get_logging_settings(state["config"])
    setup_logging(verbose, settings["level"], settings["format"])

    if verbose:
        logging.debug(f"Loaded config from: {config_path or 'default location'}")

    ctx.obj = state


@app.command()
def version():
    """Show version information."""
    typer.echo(f"jobhistory version {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
