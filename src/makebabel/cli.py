"""
makebabel.cli - Command Line Interface
======================================

This module provides the command-line interface for make-babel using Typer.
The tool has a single command, so the Typer app runs it directly:

    make-babel <project-directory> [options]

Usage Examples
--------------
Default template with npm:
    $ make-babel my-app

Named template with Yarn:
    $ make-babel my-app --template typescript --yarn

Show environment information:
    $ make-babel --info

Settings
--------
Defaults for ``--template``, the package manager and ``--verbose`` can be
kept in a TOML file passed with ``--config`` or the ``MAKE_BABEL_CONFIG``
environment variable. Flags always win.

See Also
--------
- generator.py: The creation pipeline
- models.py: Configuration models
"""

from __future__ import annotations

import logging
import os
import platform
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Annotated

import questionary
import typer
from pydantic import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from makebabel import __version__
from makebabel.errors import (
    DirectoryConflictError,
    InstallError,
    InvalidProjectNameError,
    MakeBabelError,
    TemplateError,
)
from makebabel.generator import create_app
from makebabel.models import PackageManager, ScaffoldConfig, UserSettings


# =============================================================================
# CLI Application Setup
# =============================================================================

app = typer.Typer(
    name="make-babel",
    help="Create a new Babel app from a template.",
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()

PROGRAM_NAME = "make-babel"


# =============================================================================
# Callbacks and Helpers
# =============================================================================

def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(Panel(
            f"[bold green]{PROGRAM_NAME}[/] version [cyan]{__version__}[/]",
            border_style="green",
        ))
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route diagnostic logging through Rich; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def get_tool_version(executable: str) -> str | None:
    """
    Ask an executable for its version.

    Returns
    -------
    str | None
        The trimmed ``--version`` output, or None if the tool isn't
        installed or fails.
    """
    path = shutil.which(executable)
    if path is None:
        return None

    try:
        result = subprocess.run(
            [path, "--version"],
            check=False, capture_output=True,
            text=True,
        )
    except OSError:
        return None

    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def print_env_info() -> None:
    """Print environment details useful in bug reports."""
    table = Table(title="Environment Info", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("OS", platform.platform())
    table.add_row("Python", platform.python_version())
    table.add_row(PROGRAM_NAME, __version__)
    for manager in PackageManager:
        table.add_row(
            manager.display_name,
            get_tool_version(manager.executable) or "[dim]Not Found[/]",
        )

    console.print(table)


def print_usage_hint() -> None:
    """Explain how to call the tool when the project directory is missing."""
    rprint("[red]Please specify the project directory:[/]")
    rprint(f"  [cyan]{PROGRAM_NAME}[/] [green]<project-directory>[/]")
    rprint()
    rprint("For example:")
    rprint(f"  [cyan]{PROGRAM_NAME}[/] [green]sample-babel-app[/]")
    rprint()
    rprint(f"Run [cyan]{PROGRAM_NAME} --help[/] to see all options.")


def prompt_project_directory() -> str:
    """
    Interactively ask for the project directory.

    Returns
    -------
    str
        The directory name entered.
    """
    result = questionary.text(
        "Project directory:",
        default="sample-babel-app",
    ).ask()

    if not result:
        raise typer.Abort()

    return result


def load_settings(path: Path | None) -> UserSettings:
    """Load the settings file, or empty settings when none is given."""
    if path is None:
        return UserSettings()
    return UserSettings.from_toml(path)


def resolve_package_manager(
    use_yarn: bool,
    package_manager: PackageManager | None,
    settings: UserSettings,
) -> PackageManager:
    """
    Pick the package manager.

    ``--yarn`` wins, then ``--package-manager``, then the settings file,
    then whichever package manager launched us (``npx``/``yarn create``).
    """
    if use_yarn:
        return PackageManager.YARN
    if package_manager is not None:
        return package_manager
    if settings.package_manager is not None:
        return settings.package_manager
    return PackageManager.from_user_agent(os.environ.get("npm_config_user_agent"))


def report_invalid_name(error: InvalidProjectNameError) -> None:
    """Print why a project name was rejected."""
    if error.reserved:
        rprint(
            f'[red]Cannot create a project named [green]"{error.name}"[/green] because a '
            "dependency with the same name exists.\n"
            "Due to the way npm works, the following names are not allowed:[/]\n"
        )
        for name in error.reserved:
            rprint(f"  [cyan]{name}[/]")
    else:
        rprint(
            f'[red]Cannot create a project named [green]"{error.name}"[/green] '
            "because of npm naming restrictions:[/]\n"
        )
        for problem in error.problems:
            rprint(f"[red]  * {problem}[/]")
    rprint("\n[red]Please choose a different project name.[/]")


# =============================================================================
# Main Command
# =============================================================================

@app.command()
def main(
    project_directory: Annotated[
        str | None,
        typer.Argument(
            help="Directory to create the app in",
            show_default=False,
        ),
    ] = None,
    template: Annotated[
        str | None,
        typer.Option(
            "--template",
            "-t",
            help="Template name, e.g. [green]typescript[/] or [green]@scope/name[/]",
        ),
    ] = None,
    use_yarn: Annotated[
        bool,
        typer.Option(
            "--yarn",
            help="Use Yarn instead of npm",
        ),
    ] = False,
    package_manager: Annotated[
        PackageManager | None,
        typer.Option(
            "--package-manager",
            "-p",
            help="Package manager to install with",
            case_sensitive=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Print additional logs",
        ),
    ] = False,
    info: Annotated[
        bool,
        typer.Option(
            "--info",
            help="Print environment debug info",
        ),
    ] = False,
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="TOML file with default settings",
            envvar="MAKE_BABEL_CONFIG",
            exists=True,
            file_okay=True,
            dir_okay=False,
        ),
    ] = None,
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
    Create a new Babel app.

    Only [green]<project-directory>[/] is required.

    [cyan]--template[/] can be one of:

        - JavaScript: [green]js[/]
        - TypeScript: [green]ts[/]
        - any [green]cba-template-*[/] package, file: path, tarball or URL

    [bold]Examples:[/]

        make-babel my-app
        make-babel my-app --template ts --yarn
    """
    if info:
        print_env_info()
        raise typer.Exit()

    try:
        settings = load_settings(config_file)
    except (ValidationError, ValueError, OSError) as e:
        rprint(f"[red]Error:[/] Invalid settings file {config_file}: {e}")
        raise typer.Exit(1)

    verbose = verbose or bool(settings.verbose)
    configure_logging(verbose)

    if project_directory is None:
        if sys.stdin.isatty():
            project_directory = prompt_project_directory()
        else:
            print_usage_hint()
            raise typer.Exit(1)

    try:
        config = ScaffoldConfig(
            project_dir=project_directory,
            template=template or settings.template,
            package_manager=resolve_package_manager(use_yarn, package_manager, settings),
            verbose=verbose,
            original_directory=Path.cwd(),
        )
    except ValidationError as e:
        rprint(f"[red]Error:[/] {e}")
        raise typer.Exit(1)
    except OSError as e:
        rprint(f"[red]Error:[/] Cannot read the current working directory: {e}")
        raise typer.Exit(1)

    try:
        create_app(config)
    except InvalidProjectNameError as e:
        report_invalid_name(e)
        raise typer.Exit(1)
    except (DirectoryConflictError, InstallError, TemplateError):
        # Already reported by the generator.
        raise typer.Exit(1)
    except MakeBabelError as e:
        rprint(f"[red]Error:[/] {e}")
        raise typer.Exit(1)
    except Exception as e:
        rprint(f"[red]Error:[/] {e}")
        raise typer.Exit(1)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    app()
