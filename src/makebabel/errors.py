"""
makebabel.errors - Exception Hierarchy
======================================

Every failure that should end a make-babel run with exit status 1 derives
from :class:`MakeBabelError`. Library code raises these; only the CLI turns
them into process exit codes.
"""

from __future__ import annotations


class MakeBabelError(Exception):
    """Base class for all make-babel errors."""


class InvalidProjectNameError(MakeBabelError):
    """
    The project name cannot be used as an npm package name.

    Attributes
    ----------
    name : str
        The rejected name.

    problems : list[str]
        Every naming error and warning that applied.

    reserved : list[str]
        Dependency names that clash with the project name (empty unless the
        name matches one of them).
    """

    def __init__(
        self,
        name: str,
        problems: list[str] | None = None,
        reserved: list[str] | None = None,
    ) -> None:
        self.name = name
        self.problems = problems or []
        self.reserved = reserved or []
        if self.reserved:
            message = (
                f'Cannot create a project named "{name}" because a dependency '
                "with the same name exists."
            )
        else:
            message = f'Cannot create a project named "{name}" because of npm naming restrictions.'
        super().__init__(message)


class DirectoryConflictError(MakeBabelError):
    """The target directory holds entries that could be overwritten."""

    def __init__(self, name: str, conflicts: list[str]) -> None:
        self.name = name
        self.conflicts = conflicts
        super().__init__(
            f"The directory {name} contains files that could conflict: "
            + ", ".join(conflicts)
        )


class NpmCwdError(MakeBabelError):
    """npm starts in a different directory than the one we asked for."""


class InstallError(MakeBabelError):
    """
    A package-manager process exited unsuccessfully.

    Attributes
    ----------
    command : str
        The full command line that failed.
    """

    def __init__(self, command: str, returncode: int | None = None) -> None:
        self.command = command
        self.returncode = returncode
        super().__init__(f"{command} has failed.")


class TemplateError(MakeBabelError):
    """The template package could not be located or applied."""
