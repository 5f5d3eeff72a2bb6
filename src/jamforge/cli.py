"""
jamforge.cli - Command Line Interface
=====================================

This module provides the command-line interface for jamforge using Typer.

Architecture
------------
The CLI is structured around Typer's app pattern:

    app (main entry point)
    ├── new        - Generate a new JAM service project from a template
    └── templates  - List the bundled templates

Commands are designed to be both interactive (with prompts) and
scriptable (with flags). The --defaults flag skips all prompts for CI usage.

Usage Examples
--------------
Interactive mode (prompts for every template variable):
    $ jamforge new my-service

Non-interactive mode:
    $ jamforge new my-service --defaults -d author="Jane Doe"

From a git repository:
    $ jamforge new my-service --git gh:owner/templates --path basic

Show help:
    $ jamforge --help
    $ jamforge new --help

See Also
--------
- generator.py: The generation pipeline
- models.py: Manifest and request models
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import pydantic
import typer
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from jamforge import __version__
from jamforge.errors import JamforgeError, ValidationError
from jamforge.generator import create_project
from jamforge.models import DEFAULT_TEMPLATE, NewProjectRequest, TemplateManifest
from jamforge.prompts import prompt_text
from jamforge.sources import BundledTemplateSource
from jamforge.validation import PROJECT_NAME_PATTERN, validate_project_name


# =============================================================================
# CLI Application Setup
# =============================================================================

# Create the main Typer application
app = typer.Typer(
    name="jamforge",
    help="Generate JAM service projects from templates.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=True,
)

# Console for rich output
console = Console()


# =============================================================================
# Version Callback
# =============================================================================

def version_callback(value: bool) -> None:
    """
    Display version information and exit.

    Parameters
    ----------
    value : bool
        True if --version was passed.
    """
    if value:
        console.print(Panel(
            f"[bold green]jamforge[/] version [cyan]{__version__}[/]\n\n"
            f"[dim]Template-driven JAM service project generator[/]",
            border_style="green",
        ))
        raise typer.Exit()


# =============================================================================
# Helpers
# =============================================================================

def prompt_project_name() -> str:
    """
    Ask for the project name until it passes validation.

    The prompt itself enforces the name pattern; reserved names and overlong
    names are reported and asked again.
    """
    while True:
        name = prompt_text("Project name?", regex=PROJECT_NAME_PATTERN)
        try:
            return validate_project_name(name)
        except ValidationError as e:
            rprint(f"[red]Error:[/] {e}")


def format_request_error(error: pydantic.ValidationError) -> str:
    """Collapse pydantic's report into one line per failing field."""
    lines = []
    for detail in error.errors():
        message = detail["msg"].removeprefix("Value error, ")
        location = ".".join(str(part) for part in detail["loc"])
        lines.append(f"{location}: {message}" if location else message)
    return "\n".join(lines)


# =============================================================================
# Main Application Callback
# =============================================================================

@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    [bold]jamforge[/] - JAM service project generator.

    [bold]Quick Start:[/]

        jamforge new my-service

    [bold]Non-interactive:[/]

        jamforge new my-service --defaults
    """
    pass


# =============================================================================
# New Command - Generate a Project
# =============================================================================

@app.command()
def new(
    name: Annotated[
        str | None,
        typer.Argument(
            help="Name of the project to create (prompted for if omitted)",
        ),
    ] = None,
    # Template selection
    template: Annotated[
        str,
        typer.Option(
            "--template",
            "-t",
            help="Bundled template to use",
        ),
    ] = DEFAULT_TEMPLATE,
    git: Annotated[
        str | None,
        typer.Option(
            "--git",
            help="Git repository holding the template (URL or gh:/gl:/bb: shorthand)",
        ),
    ] = None,
    branch: Annotated[
        str | None,
        typer.Option(
            "--branch",
            help="Branch of the --git repository",
        ),
    ] = None,
    path: Annotated[
        Path | None,
        typer.Option(
            "--path",
            help="Subdirectory of the --git repository holding the template",
        ),
    ] = None,
    # Output directory
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Directory to create the project in (default: ./NAME)",
        ),
    ] = None,
    # Variables
    defaults: Annotated[
        bool,
        typer.Option(
            "--defaults",
            help="Skip all prompts, use template defaults",
        ),
    ] = False,
    define: Annotated[
        list[str] | None,
        typer.Option(
            "--define",
            "-d",
            help="Set a template variable (KEY=VALUE, repeatable)",
        ),
    ] = None,
    values_file: Annotated[
        Path | None,
        typer.Option(
            "--values-file",
            help="TOML file with template variables",
        ),
    ] = None,
    # Features
    no_git: Annotated[
        bool,
        typer.Option(
            "--no-git",
            help="Skip git initialization",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show resolved variables and every created file",
        ),
    ] = False,
) -> None:
    """
    Create a new JAM service project from a template.

    [bold]Examples:[/]

        # Interactive mode (prompts for template variables)
        jamforge new my-service

        # All defaults, preset author
        jamforge new my-service --defaults -d author="Jane Doe"

        # Template from a git repository
        jamforge new my-service --git gh:owner/templates --branch main --path basic
    """
    if name is None:
        if defaults:
            rprint("[red]Error:[/] Project name is required when using --defaults")
            raise typer.Exit(1)
        name = prompt_project_name()

    # Build the request
    try:
        request = NewProjectRequest(
            name=name,
            template=template,
            git=git,
            branch=branch,
            path=path,
            output=output,
            defaults=defaults,
            defines=define or [],
            values_file=values_file,
            init_git=not no_git,
        )
    except pydantic.ValidationError as e:
        rprint(f"[red]Error:[/] {format_request_error(e)}")
        raise typer.Exit(1)

    if values_file is not None and not values_file.is_file():
        rprint(f"[red]Error:[/] Values file not found: {values_file}")
        raise typer.Exit(1)

    # Create the project
    try:
        create_project(request, verbose=True, details=verbose)
    except (JamforgeError, OSError) as e:
        rprint(f"[red]Error:[/] {e}")
        raise typer.Exit(1)


# =============================================================================
# Templates Command - List Bundled Templates
# =============================================================================

@app.command()
def templates() -> None:
    """
    List the templates bundled with jamforge.

    Use a name from this list with [cyan]jamforge new NAME --template TEMPLATE[/].
    """
    table = Table(title="Bundled Templates")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Version", style="dim")

    for template_name in BundledTemplateSource.available():
        try:
            with BundledTemplateSource(template_name) as source:
                manifest = TemplateManifest.load(source.fetch())
        except JamforgeError as e:
            table.add_row(template_name, f"[red]{e}[/]", "")
            continue

        table.add_row(
            template_name,
            manifest.template.description or "",
            manifest.template.version or "",
        )

    console.print(table)
