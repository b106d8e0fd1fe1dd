"""
makebabel.generator - App Creation Pipeline
===========================================

This module strings the other modules together into the one thing
make-babel does: turn a directory name into a ready-to-run Babel app.

Architecture
------------
The generator follows a linear pipeline; each step either succeeds or ends
the run:

    1. Validate the app name (npm naming rules)
    2. Create the directory, or check an existing one for conflicts
    3. Write a minimal package.json
    4. Check that npm starts in the project directory (npm only)
    5. Install @babel/core, @babel/preset-env and the template package
    6. Apply the template (merge manifest, copy files, install its deps)

Steps 5 and 6 spawn the package manager. If either fails, the run is
aborted: the generated manifest, lockfiles and node_modules are deleted,
the directory itself is removed when nothing else is left in it, and the
error is re-raised for the CLI to turn into exit status 1.

Usage Example
-------------
>>> from makebabel.generator import create_app
>>> from makebabel.models import ScaffoldConfig
>>> result = create_app(ScaffoldConfig(project_dir="my-app", template="typescript"))
>>> result.template
'cba-template-typescript'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.panel import Panel

from makebabel.directory import (
    can_npm_read_cwd,
    find_conflicts,
    is_safe_to_create_project_in,
    remove_generated_files,
)
from makebabel.errors import DirectoryConflictError, InstallError, MakeBabelError, NpmCwdError
from makebabel.installer import install
from makebabel.manifest import write_manifest
from makebabel.models import PackageManager, PackageManifest, ScaffoldConfig
from makebabel.naming import BUILD_DEPENDENCIES, check_app_name, get_template_install_package
from makebabel.template import initialize_template


logger = logging.getLogger(__name__)

console = Console()


# =============================================================================
# Result Data Classes
# =============================================================================


@dataclass
class GenerationResult:
    """
    Result of an app creation run.

    Attributes
    ----------
    success : bool
        Whether the app was created.

    project_path : Path
        Absolute path of the project directory.

    template : str | None
        Package spec the template was installed from, once resolved.

    files_removed : list[str]
        Generated entries deleted while cleaning up after a failure.

    directory_removed : bool
        Whether cleanup removed the (then empty) project directory.

    errors : list[str]
        Error messages collected during the run.
    """

    success: bool
    project_path: Path
    template: str | None = None
    files_removed: list[str] = field(default_factory=list)
    directory_removed: bool = False
    errors: list[str] = field(default_factory=list)


# =============================================================================
# Pipeline
# =============================================================================


def create_app(config: ScaffoldConfig) -> GenerationResult:
    """
    Create a new Babel app.

    Parameters
    ----------
    config : ScaffoldConfig
        Where to create the app and how.

    Returns
    -------
    GenerationResult
        Outcome of a successful run.

    Raises
    ------
    InvalidProjectNameError
        If the directory name is not a usable package name. Nothing is
        written.
    DirectoryConflictError
        If the directory holds entries the scaffold could overwrite.
        Nothing is written.
    NpmCwdError
        If npm would run in the wrong directory.
    InstallError
        If a package-manager command fails.
    TemplateError
        If the template can't be applied.
    """
    root = config.root
    app_name = config.app_name
    result = GenerationResult(success=False, project_path=root)

    check_app_name(app_name)

    root.mkdir(parents=True, exist_ok=True)
    if not is_safe_to_create_project_in(root, app_name):
        raise DirectoryConflictError(app_name, find_conflicts(root))

    console.print(f"Using [green]{config.package_manager.display_name}[/]")
    console.print()
    console.print(
        Panel(
            f"[bold blue]Creating a new Babel App in[/] [green]{root}[/]",
            title="[bold]make-babel[/]",
            border_style="blue",
        )
    )
    console.print()

    try:
        write_manifest(root / "package.json", PackageManifest(name=app_name).to_json_dict())
        logger.debug("Wrote %s", root / "package.json")

        if config.package_manager is PackageManager.NPM and not can_npm_read_cwd(root):
            raise NpmCwdError(f"npm cannot run in {root}")
    except Exception as e:
        _cleanup(root, app_name, result, e)
        raise

    run(config, result)

    result.success = True
    return result


def run(config: ScaffoldConfig, result: GenerationResult) -> None:
    """
    Install build dependencies and the template, then apply the template.

    On any failure the project is cleaned up before the error propagates.

    Parameters
    ----------
    config : ScaffoldConfig
        Run configuration.

    result : GenerationResult
        Updated in place with the resolved template and cleanup details.
    """
    root = config.root
    template_spec = get_template_install_package(config.template, config.original_directory)
    result.template = template_spec

    dependencies = [*BUILD_DEPENDENCIES, template_spec]

    try:
        console.print("Installing packages. This might take a couple of minutes.")
        console.print(
            "Installing "
            + ", ".join(f"[cyan]{dep}[/]" for dep in BUILD_DEPENDENCIES)
            + f", with [cyan]{template_spec}[/]"
        )
        console.print()

        install(root, config.package_manager, dependencies, verbose=config.verbose)

        initialize_template(
            root,
            config.app_name,
            template_spec,
            config.package_manager,
            verbose=config.verbose,
            original_directory=config.original_directory,
        )

    except Exception as e:
        console.print()
        console.print("Aborting installation.")
        if isinstance(e, InstallError):
            console.print(f"  [cyan]{e.command}[/] has failed.")
        elif isinstance(e, MakeBabelError):
            console.print(f"  [red]{e}[/]")
        else:
            console.print("[red]Unexpected error. Please report it as a bug:[/]")
            console.print(f"  {e}")
        console.print()

        _cleanup(root, config.app_name, result, e)
        console.print("Done.")
        raise


def _cleanup(root: Path, app_name: str, result: GenerationResult, error: Exception) -> None:
    result.errors.append(str(error))
    result.files_removed.extend(remove_generated_files(root, app_name))
    result.directory_removed = not root.exists()
    logger.debug(
        "Cleanup removed %s (directory removed: %s)",
        result.files_removed,
        result.directory_removed,
    )
