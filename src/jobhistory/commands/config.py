# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Config command for jobhistory.

Validates configuration structure and message templates.
"""

import typer

from jobhistory.validation import validate_config

app = typer.Typer(help="Validate configuration")


@app.command()
def validate(ctx: typer.Context):
    """
    Validate configuration structure and templates.

    Checks:
    - Known sections and keys
    - Templates parse and stay within their event's arguments
    - Date symbol tables and logging level
    """
    config = ctx.obj.get("config", {})

    typer.echo("Validating configuration...")
    typer.echo()

    issues = validate_config(config)

    if issues:
        typer.echo("Configuration Issues:")
        for issue in issues:
            typer.echo(f"  ⚠️  {issue}")
        typer.echo()
        raise typer.Exit(1)

    typer.echo("✓ Configuration is valid")
