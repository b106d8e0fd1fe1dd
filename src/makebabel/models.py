"""
makebabel.models - Pydantic Models for Scaffolding Configuration
================================================================

This module defines the data models used throughout make-babel. Pydantic
gives us validation of user input, JSON serialization of package.json
records, and self-documenting field descriptions.

Architecture Notes
------------------
    ScaffoldConfig (one run of the tool)
    ├── PackageManager (enum)
    └── template / verbose / original_directory

    UserSettings (optional TOML defaults)

    PackageManifest (package.json written into the new project)
    TemplateDescriptor (template.json shipped by a template package)
    NameValidation (outcome of npm package-name rules)

Usage Example
-------------
>>> from makebabel.models import ScaffoldConfig, PackageManager
>>> config = ScaffoldConfig(project_dir="my-app", package_manager=PackageManager.YARN)
>>> config.app_name
'my-app'
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Enumerations
# =============================================================================

class PackageManager(str, Enum):
    """
    External package managers make-babel can drive.

    Attributes
    ----------
    NPM : str
        The npm CLI. Default when nothing else is selected.

    YARN : str
        Yarn classic, invoked through its ``yarnpkg`` alias.

    Examples
    --------
    >>> PackageManager.YARN.executable
    'yarnpkg'
    >>> PackageManager.NPM.remove_verb
    'uninstall'
    """

    NPM = "npm"
    YARN = "yarn"

    @property
    def executable(self) -> str:
        """Name of the executable looked up on PATH."""
        return "yarnpkg" if self is PackageManager.YARN else "npm"

    @property
    def display_name(self) -> str:
        """Name shown to the user in progress output."""
        return "Yarn" if self is PackageManager.YARN else "NPM"

    @property
    def remove_verb(self) -> str:
        """Subcommand that uninstalls a package."""
        return "remove" if self is PackageManager.YARN else "uninstall"

    @property
    def run_command(self) -> str:
        """Command users type to run package scripts."""
        return "yarn" if self is PackageManager.YARN else "npm"

    @classmethod
    def from_user_agent(cls, user_agent: str | None) -> PackageManager:
        """
        Detect the package manager that launched us.

        Both npm and Yarn export ``npm_config_user_agent`` to child
        processes; Yarn's value starts with ``yarn``.

        Parameters
        ----------
        user_agent : str | None
            Value of the ``npm_config_user_agent`` environment variable.

        Returns
        -------
        PackageManager
            YARN when the agent string starts with "yarn", otherwise NPM.
        """
        if (user_agent or "").startswith("yarn"):
            return cls.YARN
        return cls.NPM


# =============================================================================
# package.json / template.json Records
# =============================================================================

class PackageManifest(BaseModel):
    """
    The package.json written into a freshly created project.

    Only the fields make-babel sets itself are declared; any other key a
    template contributes is kept as an extra field.

    Examples
    --------
    >>> PackageManifest(name="my-app").to_json_dict()
    {'name': 'my-app', 'version': '1.0.0', 'private': True}
    """

    model_config = ConfigDict(extra="allow")

    name: str = Field(description="Package name, taken from the directory name")
    version: str = Field(default="1.0.0", description="Initial package version")
    private: bool = Field(default=True, description="Prevents accidental publishing")
    dependencies: dict[str, str] | None = Field(default=None)
    scripts: dict[str, str] | None = Field(default=None)

    def to_json_dict(self) -> dict[str, Any]:
        """Dump the manifest, leaving out fields that were never set."""
        return self.model_dump(exclude_none=True)


class TemplateDescriptor(BaseModel):
    """
    Contents of a template package's ``template.json``.

    Attributes
    ----------
    package : dict
        Manifest fragment to merge into the new project's package.json.
    """

    model_config = ConfigDict(extra="ignore")

    package: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_file(cls, path: Path) -> TemplateDescriptor:
        """
        Load a descriptor, treating a missing file as an empty fragment.

        Raises
        ------
        pydantic.ValidationError
            If the file is not valid JSON or ``package`` is not an object.
        """
        if not path.exists():
            return cls()
        return cls.model_validate_json(path.read_text(encoding="utf-8"))


class NameValidation(BaseModel):
    """
    Outcome of checking a name against npm's package-name rules.

    Errors make a name unusable for any package; warnings only rule it out
    for new packages.
    """

    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def valid_for_new_packages(self) -> bool:
        return not self.errors and not self.warnings


# =============================================================================
# Configuration
# =============================================================================

class UserSettings(BaseModel):
    """
    Defaults loaded from a TOML settings file.

    Every field is optional; command-line flags win over anything set here.

    Examples
    --------
    A settings file::

        template = "typescript"
        package_manager = "yarn"
        verbose = true
    """

    model_config = ConfigDict(extra="forbid")

    template: str | None = Field(default=None, description="Default template identifier")
    package_manager: PackageManager | None = Field(default=None)
    verbose: bool | None = Field(default=None)

    @classmethod
    def from_toml(cls, path: Path) -> UserSettings:
        """
        Load settings from a TOML file.

        Raises
        ------
        FileNotFoundError
            If the settings file doesn't exist.
        tomli.TOMLDecodeError
            If the file is not valid TOML.
        ValidationError
            If the file has unknown keys or invalid values.
        """
        import tomli

        with open(path, "rb") as f:
            data = tomli.load(f)

        return cls(**data)


class ScaffoldConfig(BaseModel):
    """
    Complete configuration for one make-babel run.

    Attributes
    ----------
    project_dir : Path
        Target directory as given on the command line, relative to
        ``original_directory`` unless absolute.

    template : str | None
        Template identifier as typed by the user. None selects the default
        template.

    package_manager : PackageManager
        Which package manager performs the installs.

    verbose : bool
        Pass ``--verbose`` to the package manager and log debug output.

    original_directory : Path
        Working directory the tool was started from. ``file:`` templates
        and the final ``cd`` hint are relative to it.

    Examples
    --------
    >>> config = ScaffoldConfig(project_dir="apps/web", original_directory="/work")
    >>> config.root
    PosixPath('/work/apps/web')
    >>> config.app_name
    'web'
    """

    project_dir: Path = Field(description="Directory to create the app in")
    template: str | None = Field(default=None, description="Template identifier")
    package_manager: PackageManager = Field(default=PackageManager.NPM)
    verbose: bool = Field(default=False)
    original_directory: Path = Field(default_factory=Path.cwd)

    @field_validator("project_dir", mode="before")
    @classmethod
    def validate_project_dir(cls, v: Any) -> Any:
        """Reject blank directory names before they become Path('.')."""
        if isinstance(v, str) and not v.strip():
            msg = "Project directory must not be empty."
            raise ValueError(msg)
        return v

    @field_validator("template")
    @classmethod
    def normalize_template(cls, v: str | None) -> str | None:
        """Treat a blank template identifier as "use the default"."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @property
    def root(self) -> Path:
        """Absolute path of the project directory."""
        return (self.original_directory / self.project_dir).resolve()

    @property
    def app_name(self) -> str:
        """Package name of the new app: the last component of ``root``."""
        return self.root.name
