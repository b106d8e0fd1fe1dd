"""
makebabel.naming - Package Names and Template Identifiers
=========================================================

Two pure string concerns live here:

1. Deciding whether a directory name can become an npm package name.
2. Turning whatever the user typed after ``--template`` into something the
   package manager can install.

Template Identifiers
--------------------
Template packages are conventionally named ``cba-template-<name>``. Users may
type the short form and we splice the prefix in, keeping any scope and
version:

    =========================  =================================
    Input                      Installed package
    =========================  =================================
    (nothing)                  @hackermans/cba-template
    typescript                 cba-template-typescript
    typescript@1.2.0           cba-template-typescript@1.2.0
    @acme/starter              @acme/cba-template-starter
    @acme                      @acme/cba-template
    @acme/cba-template-x@2     @acme/cba-template-x@2 (unchanged)
    file:../my-template        file:/abs/path/to/my-template
    https://host/t.tgz         https://host/t.tgz (unchanged)
    =========================  =================================
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from urllib.parse import quote

from makebabel.errors import InvalidProjectNameError
from makebabel.models import NameValidation


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Installed into every new app; also names the app must not take.
BUILD_DEPENDENCIES: tuple[str, ...] = ("@babel/core", "@babel/preset-env")

TEMPLATE_PREFIX = "cba-template"
DEFAULT_TEMPLATE = "@hackermans/cba-template"

MAX_PACKAGE_NAME_LENGTH = 214

BLOCKLISTED_NAMES = frozenset({"node_modules", "favicon.ico"})

# Node.js built-in module names; npm warns against reusing them.
NODE_BUILTIN_MODULES = frozenset({
    "assert", "async_hooks", "buffer", "child_process", "cluster", "console",
    "constants", "crypto", "dgram", "diagnostics_channel", "dns", "domain",
    "events", "fs", "http", "http2", "https", "inspector", "module", "net",
    "os", "path", "perf_hooks", "process", "punycode", "querystring",
    "readline", "repl", "stream", "string_decoder", "sys", "timers", "tls",
    "trace_events", "tty", "url", "util", "v8", "vm", "wasi",
    "worker_threads", "zlib",
})

_SCOPED_NAME = re.compile(r"^(?:@([^/]+?)/)?([^/]+?)$")
_SPECIAL_CHARACTERS = re.compile(r"[~'!()*]")
_TEMPLATE_SPEC = re.compile(r"^(@[^/]+/)?([^@]+)?(@.+)?$")
_TARBALL = re.compile(r"^.+\.(tgz|tar\.gz)$")

# Characters encodeURIComponent leaves alone.
_URL_SAFE = "-_.!~*'()"


# =============================================================================
# Project Names
# =============================================================================

def _is_url_friendly(value: str) -> bool:
    return quote(value, safe=_URL_SAFE) == value


def validate_package_name(name: str) -> NameValidation:
    """
    Check a name against npm's package-name rules.

    Parameters
    ----------
    name : str
        Candidate package name.

    Returns
    -------
    NameValidation
        Errors (never valid) and warnings (invalid for new packages).

    Examples
    --------
    >>> validate_package_name("my-app").valid_for_new_packages
    True
    >>> validate_package_name("My-App").warnings
    ['name can no longer contain capital letters']
    >>> validate_package_name(".hidden").errors
    ['name cannot start with a period']
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not name:
        errors.append("name length must be greater than zero")

    if name.startswith("."):
        errors.append("name cannot start with a period")

    if name.startswith("_"):
        errors.append("name cannot start with an underscore")

    if name.strip() != name:
        errors.append("name cannot contain leading or trailing spaces")

    if name.lower() in BLOCKLISTED_NAMES:
        errors.append(f"{name} is a blacklisted name")

    if name in NODE_BUILTIN_MODULES:
        warnings.append(f"{name} is a core module name")

    if len(name) > MAX_PACKAGE_NAME_LENGTH:
        warnings.append(
            f"name can no longer contain more than {MAX_PACKAGE_NAME_LENGTH} characters"
        )

    if name.lower() != name:
        warnings.append("name can no longer contain capital letters")

    if _SPECIAL_CHARACTERS.search(name.split("/")[-1]):
        warnings.append("name can no longer contain special characters (\"~'!()*\")")

    if not _is_url_friendly(name):
        match = _SCOPED_NAME.match(name)
        scoped_ok = (
            match is not None
            and match.group(1) is not None
            and _is_url_friendly(match.group(1))
            and _is_url_friendly(match.group(2))
        )
        if not scoped_ok:
            errors.append("name can only contain URL-friendly characters")

    return NameValidation(errors=errors, warnings=warnings)


def check_app_name(app_name: str) -> None:
    """
    Make sure ``app_name`` can be used for a new app.

    Raises
    ------
    InvalidProjectNameError
        If npm would reject the name, or if it equals one of the build
        dependencies (npm refuses to install a package into itself).
    """
    result = validate_package_name(app_name)
    if not result.valid_for_new_packages:
        logger.debug("Rejected name %r: %s", app_name, result)
        raise InvalidProjectNameError(app_name, problems=[*result.errors, *result.warnings])

    if app_name in BUILD_DEPENDENCIES:
        raise InvalidProjectNameError(app_name, reserved=sorted(BUILD_DEPENDENCIES))


# =============================================================================
# Template Identifiers
# =============================================================================

def get_template_install_package(
    template: str | None,
    original_directory: Path,
) -> str:
    """
    Resolve a user-supplied template identifier to an installable spec.

    Parameters
    ----------
    template : str | None
        What the user passed to ``--template``; None selects the default.

    original_directory : Path
        Directory ``file:`` paths are resolved against.

    Returns
    -------
    str
        A package spec for ``npm install`` / ``yarn add``. Input that doesn't
        look like a package name is returned unchanged.

    Examples
    --------
    >>> get_template_install_package("typescript", Path("."))
    'cba-template-typescript'
    >>> get_template_install_package("@acme/starter@1.0.0", Path("."))
    '@acme/cba-template-starter@1.0.0'
    >>> get_template_install_package("@acme/cba-template", Path("."))
    '@acme/cba-template'
    """
    if not template:
        return DEFAULT_TEMPLATE

    if template.startswith("file:"):
        return f"file:{(original_directory / template[len('file:'):]).resolve()}"

    if "://" in template or _TARBALL.match(template):
        return template

    match = _TEMPLATE_SPEC.match(template)
    if match is None:
        return template

    scope = match.group(1) or ""
    name = match.group(2) or ""
    version = match.group(3) or ""

    if name == TEMPLATE_PREFIX or name.startswith(f"{TEMPLATE_PREFIX}-"):
        return f"{scope}{name}{version}"

    if version and not scope and not name:
        # "@scope" alone parses as a bare version suffix
        return f"{version}/{TEMPLATE_PREFIX}"

    return f"{scope}{TEMPLATE_PREFIX}-{name}{version}"


def package_name_from_spec(spec: str) -> str | None:
    """
    Strip the version from a registry package spec.

    Returns
    -------
    str | None
        The bare package name, or None for ``file:``, URL and tarball specs
        whose package name is only known after installation.

    Examples
    --------
    >>> package_name_from_spec("@acme/cba-template-x@2.0.0")
    '@acme/cba-template-x'
    >>> package_name_from_spec("file:/tmp/t") is None
    True
    """
    if spec.startswith("file:") or "://" in spec or _TARBALL.match(spec):
        return None

    match = _TEMPLATE_SPEC.match(spec)
    if match is None or not match.group(2):
        return None

    return f"{match.group(1) or ''}{match.group(2)}"
