"""
makebabel.installer - Package Manager Process Boundary
======================================================

Everything make-babel asks of npm or Yarn goes through here. Each call
spawns exactly one child process, inherits our standard streams so the user
sees the package manager's own progress output, and waits for it to exit.

A non-zero exit status becomes :class:`~makebabel.errors.InstallError`
carrying the full command line, which the generator prints before cleaning
up.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

from makebabel.errors import InstallError
from makebabel.models import PackageManager


logger = logging.getLogger(__name__)


# =============================================================================
# Command Construction
# =============================================================================

def build_install_command(
    root: Path,
    manager: PackageManager,
    dependencies: Sequence[str],
    *,
    verbose: bool = False,
) -> list[str]:
    """
    Command line that installs ``dependencies`` pinned to exact versions.

    Yarn is pointed at ``root`` with ``--cwd``; npm has no equivalent, which
    is why the generator checks :func:`~makebabel.directory.can_npm_read_cwd`
    up front instead.

    Examples
    --------
    >>> build_install_command(Path("/w/app"), PackageManager.NPM, ["a", "b"])
    ['npm', 'install', '--no-audit', '--save-exact', '--loglevel', 'error', 'a', 'b']
    >>> build_install_command(Path("/w/app"), PackageManager.YARN, ["a"], verbose=True)
    ['yarnpkg', 'add', '--exact', 'a', '--cwd', '/w/app', '--verbose']
    """
    if manager is PackageManager.YARN:
        args = ["add", "--exact", *dependencies, "--cwd", str(root)]
    else:
        args = ["install", "--no-audit", "--save-exact", "--loglevel", "error", *dependencies]

    if verbose:
        args.append("--verbose")

    return [manager.executable, *args]


def build_add_command(
    manager: PackageManager,
    dependencies: Sequence[str],
    *,
    verbose: bool = False,
) -> list[str]:
    """Command line that adds template dependencies with their declared ranges."""
    if manager is PackageManager.YARN:
        return [manager.executable, "add", *dependencies]

    args = ["install", "--no-audit", "--save"]
    if verbose:
        args.append("--verbose")
    return [manager.executable, *args, *dependencies]


def build_remove_command(manager: PackageManager, package: str) -> list[str]:
    """Command line that removes ``package`` from the project."""
    return [manager.executable, manager.remove_verb, package]


# =============================================================================
# Execution
# =============================================================================

def run_command(command: Sequence[str], cwd: Path) -> None:
    """
    Run a package-manager command to completion.

    The executable is looked up on PATH first so that Windows ``.cmd``
    shims resolve. Standard streams are inherited.

    Raises
    ------
    InstallError
        If the executable is missing or exits with a non-zero status.
    """
    display = " ".join(command)
    executable = shutil.which(command[0])
    if executable is None:
        raise InstallError(display)

    logger.debug("Running %s in %s", display, cwd)

    try:
        proc = subprocess.run([executable, *command[1:]], cwd=cwd, check=False)
    except OSError as e:
        raise InstallError(display) from e

    if proc.returncode != 0:
        raise InstallError(display, proc.returncode)


def install(
    root: Path,
    manager: PackageManager,
    dependencies: Sequence[str],
    *,
    verbose: bool = False,
) -> None:
    """
    Install ``dependencies`` into the project at ``root``.

    Raises
    ------
    InstallError
        If the package manager fails.
    """
    run_command(build_install_command(root, manager, dependencies, verbose=verbose), root)


def install_template_dependencies(
    root: Path,
    manager: PackageManager,
    dependencies: Sequence[str],
    *,
    verbose: bool = False,
) -> None:
    """
    Install the extra dependencies a template declares.

    Does nothing when ``dependencies`` is empty.
    """
    if not dependencies:
        return
    run_command(build_add_command(manager, dependencies, verbose=verbose), root)


def remove_package(root: Path, manager: PackageManager, package: str) -> None:
    """Uninstall ``package`` from the project at ``root``."""
    run_command(build_remove_command(manager, package), root)
