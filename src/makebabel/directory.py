"""
makebabel.directory - Target Directory Checks and Cleanup
=========================================================

make-babel may reuse an existing directory as long as nothing in it could be
clobbered by the scaffold: version-control metadata, editor settings, a
README or a LICENSE are fine; source files are not.

This module also owns the reverse operation, removing what a failed run
generated so the user can simply try again.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from pathlib import Path

from rich.console import Console


logger = logging.getLogger(__name__)

console = Console()


# =============================================================================
# Constants
# =============================================================================

# Entries that may already exist in the target directory.
VALID_FILES: frozenset[str] = frozenset({
    ".DS_Store",
    ".git",
    ".gitattributes",
    ".gitignore",
    ".gitlab-ci.yml",
    ".hg",
    ".hgcheck",
    ".hgignore",
    ".idea",
    ".npmignore",
    ".travis.yml",
    "docs",
    "LICENSE",
    "README.md",
    "mkdocs.yml",
    "Thumbs.db",
})

# Left behind by a failed install; tolerated, then removed on the next run.
ERROR_LOG_PATTERNS: tuple[str, ...] = (
    "npm-debug.log",
    "yarn-error.log",
    "yarn-debug.log",
)

# Removed from the project when an install step fails.
KNOWN_GENERATED_FILES: tuple[str, ...] = (
    "package.json",
    "package-lock.json",
    "yarn.lock",
    "node_modules",
)

NPM_CWD_PREFIX = "; cwd = "


# =============================================================================
# Conflict Detection
# =============================================================================

def is_error_log(filename: str) -> bool:
    """Whether ``filename`` is a package-manager debug/error log."""
    return filename.startswith(ERROR_LOG_PATTERNS)


def find_conflicts(root: Path) -> list[str]:
    """
    List entries of ``root`` that could conflict with the scaffold.

    IntelliJ module files (``*.iml``) and error logs from a previous run
    are not conflicts.

    Parameters
    ----------
    root : Path
        Existing target directory.

    Returns
    -------
    list[str]
        Conflicting entry names, sorted.
    """
    return sorted(
        entry.name
        for entry in root.iterdir()
        if entry.name not in VALID_FILES
        and not entry.name.endswith(".iml")
        and not is_error_log(entry.name)
    )


def is_safe_to_create_project_in(root: Path, name: str) -> bool:
    """
    Check ``root`` for conflicts and clear out stale error logs.

    Prints the conflicting entries (directories with a trailing slash) when
    there are any.

    Parameters
    ----------
    root : Path
        Target directory; must exist.

    name : str
        Directory name as shown to the user.

    Returns
    -------
    bool
        True if the scaffold can be written into ``root``.
    """
    conflicts = find_conflicts(root)

    if conflicts:
        console.print(f"The directory [green]{name}[/] contains files that could conflict:")
        console.print()
        for entry in conflicts:
            path = root / entry
            if path.is_dir() and not path.is_symlink():
                console.print(f"  [blue]{entry}/[/]")
            else:
                console.print(f"  {entry}")
        console.print()
        console.print(
            "Either try using a new directory name, or remove the files listed above."
        )
        return False

    for entry in root.iterdir():
        if is_error_log(entry.name):
            logger.debug("Removing stale log %s", entry)
            _remove(entry)

    return True


# =============================================================================
# npm Working Directory Check
# =============================================================================

def can_npm_read_cwd(root: Path) -> bool:
    """
    Verify that an npm child process starts in ``root``.

    A shell AutoRun entry on Windows (or an odd profile elsewhere) can make
    every spawned process start somewhere else, and npm has no flag to
    override it. ``npm config list`` reports the directory it runs in, so
    we compare that against ``root``.

    Returns
    -------
    bool
        True if npm reports ``root`` as its working directory.
    """
    executable = shutil.which("npm") or "npm"

    try:
        proc = subprocess.run(
            [executable, "config", "list"],
            cwd=root,
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError as e:
        logger.debug("Could not run npm config list: %s", e)
        return False

    output = (proc.stdout or "") + (proc.stderr or "")
    npm_cwd = next(
        (
            line[len(NPM_CWD_PREFIX):].strip()
            for line in output.splitlines()
            if line.startswith(NPM_CWD_PREFIX)
        ),
        None,
    )
    if npm_cwd is None:
        return False

    if Path(npm_cwd).resolve() == root.resolve():
        return True

    console.print(
        "[red]Could not start an npm process in the right directory.\n\n"
        f"The current directory is: [bold]{root}[/bold]\n"
        f"However, a newly started npm process runs in: [bold]{npm_cwd}[/bold]\n\n"
        "This is probably caused by a misconfigured system terminal shell.[/]"
    )
    if sys.platform == "win32":
        console.print(
            "[red]On Windows, this can usually be fixed by running:[/]\n\n"
            '  [cyan]reg[/] delete "HKCU\\Software\\Microsoft\\Command Processor" /v AutoRun /f\n'
            '  [cyan]reg[/] delete "HKLM\\Software\\Microsoft\\Command Processor" /v AutoRun /f\n\n'
            "[red]Try to run the above two lines in the terminal.[/]"
        )
    return False


# =============================================================================
# Failure Cleanup
# =============================================================================

def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def remove_generated_files(root: Path, app_name: str) -> list[str]:
    """
    Delete what a failed run generated in ``root``.

    Only the entries in ``KNOWN_GENERATED_FILES`` are touched. The directory
    itself is removed afterwards if nothing else is left in it.

    Parameters
    ----------
    root : Path
        Project directory.

    app_name : str
        Directory name as shown to the user.

    Returns
    -------
    list[str]
        Names of the entries that were deleted.
    """
    removed: list[str] = []

    if not root.is_dir():
        return removed

    for entry in sorted(root.iterdir()):
        if entry.name in KNOWN_GENERATED_FILES:
            console.print(f"Deleting generated file... [cyan]{entry.name}[/]")
            _remove(entry)
            removed.append(entry.name)

    if not any(root.iterdir()):
        console.print(f"Deleting [cyan]{app_name}/[/] from [cyan]{root.parent}[/]")
        root.rmdir()

    return removed
