"""
make-babel - Babel App Scaffolding
==================================

A CLI tool that creates a new Babel app: it writes a package.json, installs
``@babel/core`` and ``@babel/preset-env`` with npm or Yarn, then lays a
template package's file tree over the new project.

Quick Start
-----------
```bash
# Create an app from the default template
make-babel my-app

# Use a named template and Yarn
make-babel my-app --template typescript --yarn
```

Example
-------
>>> from makebabel import ScaffoldConfig, create_app
>>> result = create_app(ScaffoldConfig(project_dir="my-app"))
>>> result.success
True

Architecture
------------
- ``cli``: Typer-based command line interface
- ``generator``: Orchestrates the create/install/initialize pipeline
- ``naming``: Package-name validation and template-name normalization
- ``directory``: Target directory safety checks and failure cleanup
- ``installer``: npm / Yarn process boundary
- ``template``: Template resolution, manifest merge and file copy
- ``manifest``: package.json reading, writing and merging
- ``models``: Pydantic models for configuration
- ``errors``: Exception hierarchy

License
-------
MIT License - see LICENSE file for details.
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.1.0"
__author__ = "Technical-1"
__license__ = "MIT"

# =============================================================================
# Public API Exports
# =============================================================================

from makebabel.errors import (
    DirectoryConflictError,
    InstallError,
    InvalidProjectNameError,
    MakeBabelError,
    NpmCwdError,
    TemplateError,
)
from makebabel.generator import GenerationResult, create_app
from makebabel.models import PackageManager, ScaffoldConfig, UserSettings
from makebabel.naming import get_template_install_package, validate_package_name


__all__ = [
    "DirectoryConflictError",
    "GenerationResult",
    "InstallError",
    "InvalidProjectNameError",
    "MakeBabelError",
    "NpmCwdError",
    "PackageManager",
    "ScaffoldConfig",
    "TemplateError",
    "UserSettings",
    "__author__",
    "__version__",
    "create_app",
    "get_template_install_package",
    "validate_package_name",
]
