"""
makebabel.manifest - package.json Reading, Writing and Merging
==============================================================

A template package ships a manifest fragment under the ``package`` key of its
``template.json``. When the template is applied, the fragment is folded into
the new app's package.json:

- ``scripts`` are merged, template entries winning;
- keys describing the template package itself (name, version, license, ...)
  are ignored;
- every other key replaces whatever the app manifest had.

``dependencies`` and ``devDependencies`` from the fragment are not copied
verbatim; they are installed through the package manager so that the
lockfile stays consistent (see :func:`template_dependencies`).
"""

from __future__ import annotations

import copy
import json
import re
from pathlib import Path
from typing import Any


# =============================================================================
# Merge Rules
# =============================================================================

# Template keys that never reach the app manifest.
TEMPLATE_PACKAGE_EXCLUDE: frozenset[str] = frozenset({
    "name",
    "version",
    "description",
    "keywords",
    "bugs",
    "license",
    "author",
    "contributors",
    "files",
    "browser",
    "bin",
    "man",
    "directories",
    "repository",
    "peerDependencies",
    "bundledDependencies",
    "optionalDependencies",
    "engineStrict",
    "os",
    "cpu",
    "preferGlobal",
    "private",
    "publishConfig",
})

# Template keys merged into the app's entry rather than replacing it.
TEMPLATE_PACKAGE_MERGE: frozenset[str] = frozenset({"dependencies", "scripts"})

_NPM_COMMAND = re.compile(r"(npm run |npm )")


# =============================================================================
# File I/O
# =============================================================================

def read_manifest(path: Path) -> dict[str, Any]:
    """Load a package.json file."""
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def write_manifest(path: Path, data: dict[str, Any]) -> None:
    """Write a package.json file the way npm formats it."""
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


# =============================================================================
# Merging
# =============================================================================

def to_yarn_command(command: str, count: int = 1) -> str:
    """
    Rewrite npm invocations in a command string for Yarn users.

    Parameters
    ----------
    command : str
        Script body or README text.

    count : int, default=1
        Maximum number of replacements; 0 replaces every occurrence.

    Examples
    --------
    >>> to_yarn_command("npm run build && npm test")
    'yarn build && npm test'
    >>> to_yarn_command("npm run build && npm test", count=0)
    'yarn build && yarn test'
    """
    return _NPM_COMMAND.sub("yarn ", command, count=count)


def merge_template_manifest(
    app_package: dict[str, Any],
    template_package: dict[str, Any],
    *,
    use_yarn: bool = False,
) -> dict[str, Any]:
    """
    Fold a template's manifest fragment into the app manifest.

    Neither argument is modified.

    Parameters
    ----------
    app_package : dict
        Current contents of the app's package.json.

    template_package : dict
        The ``package`` object from the template's template.json.

    use_yarn : bool, default=False
        Rewrite ``npm run``/``npm`` in scripts to ``yarn``.

    Returns
    -------
    dict
        The merged manifest, in the app manifest's key order with new keys
        appended.

    Examples
    --------
    >>> merge_template_manifest(
    ...     {"name": "app", "version": "1.0.0"},
    ...     {"name": "tpl", "scripts": {"start": "babel-node src"}, "browserslist": ["defaults"]},
    ... )
    {'name': 'app', 'version': '1.0.0', 'dependencies': {}, 'scripts': {'start': 'babel-node src'}, 'browserslist': ['defaults']}
    """
    merged = copy.deepcopy(app_package)

    merged["dependencies"] = merged.get("dependencies") or {}

    scripts = {**(merged.get("scripts") or {}), **(template_package.get("scripts") or {})}
    if use_yarn:
        scripts = {key: to_yarn_command(value) for key, value in scripts.items()}
    merged["scripts"] = scripts

    for key, value in template_package.items():
        if key in TEMPLATE_PACKAGE_EXCLUDE or key in TEMPLATE_PACKAGE_MERGE:
            continue
        merged[key] = copy.deepcopy(value)

    return merged


def template_dependencies(template_package: dict[str, Any]) -> list[str]:
    """
    Installable ``name@version`` specs declared by a template.

    ``devDependencies`` win over ``dependencies`` for the same package.

    Examples
    --------
    >>> template_dependencies({"dependencies": {"a": "1.0.0"}, "devDependencies": {"b": "^2"}})
    ['a@1.0.0', 'b@^2']
    """
    combined = {
        **(template_package.get("dependencies") or {}),
        **(template_package.get("devDependencies") or {}),
    }
    return [f"{name}@{version}" for name, version in combined.items()]


def has_build_dependencies(app_package: dict[str, Any], build_dependencies: tuple[str, ...]) -> bool:
    """Whether every build dependency is already recorded in the manifest."""
    dependencies = app_package.get("dependencies") or {}
    return all(name in dependencies for name in build_dependencies)
