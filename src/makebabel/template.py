"""
makebabel.template - Applying a Template Package
================================================

Once the template package has been installed into ``node_modules``, this
module turns it into the user's project:

    1. Merge the template's manifest fragment into package.json
    2. Move an existing README.md out of the way (README.old.md)
    3. Copy the template's ``template/`` tree into the project root
    4. Point README commands at Yarn when Yarn is in use
    5. Install the template's own dependencies
    6. Uninstall the template package
    7. Print next steps

Template Package Layout
-----------------------
    cba-template-NAME/
    ├── package.json
    ├── template.json        # {"package": {...manifest fragment...}}
    └── template/            # copied verbatim into the project
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any

from rich.console import Console

from makebabel.errors import TemplateError
from makebabel.installer import install_template_dependencies, remove_package
from makebabel.manifest import (
    has_build_dependencies,
    merge_template_manifest,
    read_manifest,
    template_dependencies,
    to_yarn_command,
    write_manifest,
)
from makebabel.models import PackageManager, TemplateDescriptor
from makebabel.naming import BUILD_DEPENDENCIES, package_name_from_spec


logger = logging.getLogger(__name__)

console = Console()


# =============================================================================
# Template Resolution
# =============================================================================

def resolve_template_name(spec: str, app_package: dict[str, Any]) -> str:
    """
    Find the package name the template was installed under.

    Registry specs carry the name directly. For ``file:``, URL and tarball
    specs the name is only known from what the package manager recorded in
    package.json.

    Raises
    ------
    TemplateError
        If the name cannot be determined.
    """
    name = package_name_from_spec(spec)
    if name is not None:
        return name

    dependencies: dict[str, str] = app_package.get("dependencies") or {}
    for dep_name, dep_version in dependencies.items():
        if dep_version == spec:
            return dep_name

    candidates = [dep for dep in dependencies if dep not in BUILD_DEPENDENCIES]
    if len(candidates) == 1:
        return candidates[0]

    raise TemplateError(f"Could not determine the package name of template {spec}")


def resolve_template_path(root: Path, template_name: str) -> Path:
    """
    Directory of the installed template package.

    Raises
    ------
    TemplateError
        If the package isn't in ``root/node_modules``.
    """
    template_path = root / "node_modules" / template_name
    if not (template_path / "package.json").is_file():
        raise TemplateError(f"Could not find installed template package {template_name}")
    return template_path


# =============================================================================
# Template Initialization
# =============================================================================

def copy_template_files(template_path: Path, app_path: Path) -> None:
    """
    Copy ``template_path/template`` into the project root.

    Raises
    ------
    TemplateError
        If the template package has no ``template/`` directory.
    """
    template_dir = template_path / "template"
    if not template_dir.is_dir():
        raise TemplateError(f"Could not locate supplied template: {template_dir}")

    shutil.copytree(template_dir, app_path, dirs_exist_ok=True)


def initialize_template(
    app_path: Path,
    app_name: str,
    template_spec: str,
    manager: PackageManager,
    *,
    verbose: bool = False,
    original_directory: Path | None = None,
) -> None:
    """
    Apply an installed template package to the project.

    Parameters
    ----------
    app_path : Path
        Project root.

    app_name : str
        Project name, used in the success message.

    template_spec : str
        The spec the template was installed from.

    manager : PackageManager
        Package manager used for the remaining installs.

    verbose : bool, default=False
        Pass ``--verbose`` to npm.

    original_directory : Path | None
        Directory the user started in; decides the ``cd`` hint.

    Raises
    ------
    TemplateError
        If the template can't be found or has no file tree.
    InstallError
        If installing template dependencies or removing the template fails.
    """
    manifest_path = app_path / "package.json"
    app_package = read_manifest(manifest_path)

    template_name = resolve_template_name(template_spec, app_package)
    template_path = resolve_template_path(app_path, template_name)
    logger.debug("Using template %s from %s", template_name, template_path)

    template_package = TemplateDescriptor.from_file(template_path / "template.json").package

    app_package = merge_template_manifest(
        app_package,
        template_package,
        use_yarn=manager is PackageManager.YARN,
    )
    write_manifest(manifest_path, app_package)

    readme = app_path / "README.md"
    if readme.exists():
        readme.rename(app_path / "README.old.md")

    copy_template_files(template_path, app_path)

    if manager is PackageManager.YARN and readme.is_file():
        readme.write_text(
            to_yarn_command(readme.read_text(encoding="utf-8"), count=0),
            encoding="utf-8",
        )

    dependencies = template_dependencies(template_package)
    if not has_build_dependencies(app_package, BUILD_DEPENDENCIES):
        dependencies.extend(BUILD_DEPENDENCIES)

    if dependencies:
        console.print()
        console.print(f"Installing template dependencies using {manager.executable}...")
        console.print()
        install_template_dependencies(app_path, manager, dependencies, verbose=verbose)

    console.print(f"Removing template package using {manager.executable}...")
    remove_package(app_path, manager, template_name)

    print_success(app_path, app_name, manager, original_directory)


def print_success(
    app_path: Path,
    app_name: str,
    manager: PackageManager,
    original_directory: Path | None = None,
) -> None:
    """Tell the user where the app is and how to start it."""
    if (
        original_directory is not None
        and (original_directory / app_name).resolve() == app_path.resolve()
    ):
        cd_path = app_name
    else:
        cd_path = str(app_path)

    console.print()
    console.print(f"[green]Success![/] Created {app_name} at {app_path}")
    console.print("Inside that directory, you can run several commands:")
    console.print()
    console.print(f"  [cyan]{manager.run_command} start[/]")
    console.print("    Starts the development server.")
    console.print()
    console.print("We suggest that you begin by typing:")
    console.print()
    console.print(f"  [cyan]cd[/] {cd_path}")
    console.print(f"  [cyan]{manager.run_command} start[/]")
    console.print()
    console.print("Happy hacking!")
