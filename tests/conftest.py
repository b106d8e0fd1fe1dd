"""
pytest configuration and shared fixtures for make-babel tests.

Fixtures
--------
work_dir : Path
    An empty directory to create apps in.

fake_package_manager : FakePackageManager
    Stand-in for ``subprocess.run`` that mimics npm/Yarn installs on disk.
"""

import json
import shutil
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from makebabel.naming import package_name_from_spec


DEFAULT_TEMPLATE_FILES = {
    "README.md": "# My App\n\nRun `npm start` or `npm run build`.\n",
    "src/index.js": "console.log('Babel.JS is working!');\n",
    ".babelrc": '{"presets": ["@babel/preset-env"]}\n',
}

DEFAULT_TEMPLATE_JSON = {
    "package": {
        "name": "should-be-ignored",
        "scripts": {"start": "npm run build && babel-node src/index.js", "build": "babel src -d dist"},
        "dependencies": {"core-js": "^3.0.0"},
        "devDependencies": {"nodemon": "^2.0.0"},
        "browserslist": ["defaults"],
    },
}


class FakePackageManager:
    """
    Callable replacing ``subprocess.run`` for package-manager commands.

    ``install``/``add`` record every package in package.json and create its
    directory under node_modules; packages whose name contains
    ``cba-template`` also get a template.json and a template/ tree.
    ``uninstall``/``remove`` undo that. ``fail_on`` makes the given
    subcommand exit with status 1 after creating node_modules.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.fail_on: str | None = None
        self.template_files: dict[str, str] = dict(DEFAULT_TEMPLATE_FILES)
        self.template_json: dict | None = DEFAULT_TEMPLATE_JSON
        self.file_template_name = "cba-template-local"

    def __call__(self, args, cwd=None, check=False, **kwargs):
        args = list(args)
        self.calls.append(args)
        cwd = Path(cwd)
        verb = args[1]

        if verb in ("install", "add"):
            (cwd / "node_modules").mkdir(exist_ok=True)
            if self.fail_on == verb:
                return subprocess.CompletedProcess(args, 1)
            self._install(cwd, self._packages(args))
        elif verb in ("uninstall", "remove"):
            if self.fail_on == verb:
                return subprocess.CompletedProcess(args, 1)
            self._uninstall(cwd, args[2])

        return subprocess.CompletedProcess(args, 0)

    @staticmethod
    def _packages(args: list[str]) -> list[str]:
        packages = []
        skip = False
        for arg in args[2:]:
            if skip:
                skip = False
                continue
            if arg == "--cwd":
                skip = True
                continue
            if arg.startswith("-") or arg == "error":
                continue
            packages.append(arg)
        return packages

    def _install(self, cwd: Path, packages: list[str]) -> None:
        manifest_path = cwd / "package.json"
        manifest = json.loads(manifest_path.read_text())
        dependencies = manifest.setdefault("dependencies", {})

        for spec in packages:
            name = package_name_from_spec(spec) or self.file_template_name
            version = spec if name == self.file_template_name else "1.0.0"
            dependencies[name] = version

            package_dir = cwd / "node_modules" / name
            package_dir.mkdir(parents=True, exist_ok=True)
            (package_dir / "package.json").write_text(json.dumps({"name": name}))

            if "cba-template" in name:
                if self.template_json is not None:
                    (package_dir / "template.json").write_text(json.dumps(self.template_json))
                for relative, content in self.template_files.items():
                    target = package_dir / "template" / relative
                    target.parent.mkdir(parents=True, exist_ok=True)
                    target.write_text(content)

        manifest_path.write_text(json.dumps(manifest, indent=2) + "\n")

    def _uninstall(self, cwd: Path, name: str) -> None:
        manifest_path = cwd / "package.json"
        manifest = json.loads(manifest_path.read_text())
        manifest.get("dependencies", {}).pop(name, None)
        manifest_path.write_text(json.dumps(manifest, indent=2) + "\n")

        package_dir = cwd / "node_modules" / name
        if package_dir.exists():
            shutil.rmtree(package_dir)

    def verbs(self) -> list[str]:
        return [call[1] for call in self.calls]


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """Create a clean directory to scaffold apps into."""
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def fake_package_manager():
    """
    Patch the installer so package-manager commands hit FakePackageManager.

    Also pretends every executable is on PATH and that npm starts in the
    right directory.
    """
    fake = FakePackageManager()
    with (
        patch("makebabel.installer.shutil.which", side_effect=lambda name: name),
        patch("makebabel.installer.subprocess.run", side_effect=fake),
        patch("makebabel.generator.can_npm_read_cwd", return_value=True),
    ):
        yield fake

