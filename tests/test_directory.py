"""
Tests for makebabel.directory
=============================

Test Organization
-----------------
- TestFindConflicts: allow-list handling
- TestIsSafeToCreateProjectIn: conflict reporting and log cleanup
- TestCanNpmReadCwd: npm working-directory check
- TestRemoveGeneratedFiles: failure cleanup
"""

import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from makebabel.directory import (
    can_npm_read_cwd,
    find_conflicts,
    is_safe_to_create_project_in,
    remove_generated_files,
)


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """An existing, empty target directory."""
    path = tmp_path / "my-app"
    path.mkdir()
    return path


# =============================================================================
# find_conflicts Tests
# =============================================================================

class TestFindConflicts:
    """Tests for find_conflicts."""

    def test_empty_directory(self, root: Path) -> None:
        assert find_conflicts(root) == []

    def test_allow_listed_entries(self, root: Path) -> None:
        (root / ".git").mkdir()
        (root / "docs").mkdir()
        (root / "README.md").write_text("# hi")
        (root / "LICENSE").write_text("MIT")
        (root / ".gitignore").write_text("node_modules")

        assert find_conflicts(root) == []

    def test_iml_and_error_logs_ignored(self, root: Path) -> None:
        (root / "my-app.iml").write_text("")
        (root / "npm-debug.log").write_text("")
        (root / "yarn-error.log.1").write_text("")

        assert find_conflicts(root) == []

    def test_reports_disallowed_entries(self, root: Path) -> None:
        (root / "index.js").write_text("")
        (root / "src").mkdir()
        (root / "README.md").write_text("")

        assert find_conflicts(root) == ["index.js", "src"]


# =============================================================================
# is_safe_to_create_project_in Tests
# =============================================================================

class TestIsSafeToCreateProjectIn:
    """Tests for is_safe_to_create_project_in."""

    def test_safe_directory_loses_error_logs(self, root: Path) -> None:
        (root / "README.md").write_text("")
        (root / "yarn-debug.log").write_text("")

        assert is_safe_to_create_project_in(root, "my-app") is True
        assert not (root / "yarn-debug.log").exists()
        assert (root / "README.md").exists()

    def test_conflicts_are_listed(self, root: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (root / "package.json").write_text("{}")
        (root / "src").mkdir()
        (root / "npm-debug.log").write_text("")

        assert is_safe_to_create_project_in(root, "my-app") is False

        out = capsys.readouterr().out
        assert "could conflict" in out
        assert "package.json" in out
        assert "src/" in out
        # Nothing is removed when the directory is rejected
        assert (root / "npm-debug.log").exists()


# =============================================================================
# can_npm_read_cwd Tests
# =============================================================================

class TestCanNpmReadCwd:
    """Tests for can_npm_read_cwd."""

    @staticmethod
    def _npm_output(cwd: str) -> subprocess.CompletedProcess:
        stdout = f'; "user" config from /home/u/.npmrc\n\n; node bin location = /usr/bin/node\n; cwd = {cwd}\n'
        return subprocess.CompletedProcess(["npm", "config", "list"], 0, stdout=stdout, stderr="")

    def test_matching_cwd(self, root: Path) -> None:
        with patch("makebabel.directory.subprocess.run", return_value=self._npm_output(str(root))):
            assert can_npm_read_cwd(root) is True

    def test_mismatched_cwd(self, root: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("makebabel.directory.subprocess.run", return_value=self._npm_output("/somewhere/else")):
            assert can_npm_read_cwd(root) is False

        assert "Could not start an npm process" in capsys.readouterr().out

    def test_missing_cwd_line(self, root: Path) -> None:
        proc = subprocess.CompletedProcess(["npm"], 0, stdout="; nothing here\n", stderr="")
        with patch("makebabel.directory.subprocess.run", return_value=proc):
            assert can_npm_read_cwd(root) is False

    def test_npm_not_runnable(self, root: Path) -> None:
        with patch("makebabel.directory.subprocess.run", side_effect=FileNotFoundError("npm")):
            assert can_npm_read_cwd(root) is False

    @pytest.mark.skipif(sys.platform == "win32", reason="uses a POSIX shell script as npm")
    def test_undecodable_output(self, root: Path, tmp_path: Path) -> None:
        npm = tmp_path / "npm"
        npm.write_text(
            "#!/bin/sh\n"
            "printf '; userconfig = /home/\\377\\376\\n'\n"
            "printf '; cwd = %s\\n' \"$(pwd)\"\n"
        )
        npm.chmod(0o755)

        with patch("makebabel.directory.shutil.which", return_value=str(npm)):
            assert can_npm_read_cwd(root) is True


# =============================================================================
# remove_generated_files Tests
# =============================================================================

class TestRemoveGeneratedFiles:
    """Tests for remove_generated_files."""

    def test_removes_generated_files_and_empty_directory(self, root: Path) -> None:
        (root / "package.json").write_text("{}")
        (root / "package-lock.json").write_text("{}")
        (root / "yarn.lock").write_text("# yarn lockfile v1\n")
        (root / "node_modules" / "@babel" / "core").mkdir(parents=True)

        removed = remove_generated_files(root, "my-app")

        assert removed == ["node_modules", "package-lock.json", "package.json", "yarn.lock"]
        assert not root.exists()

    def test_keeps_directory_with_other_files(self, root: Path) -> None:
        (root / "package.json").write_text("{}")
        (root / "README.md").write_text("# keep me")
        (root / ".git").mkdir()

        removed = remove_generated_files(root, "my-app")

        assert removed == ["package.json"]
        assert root.exists()
        assert (root / "README.md").read_text() == "# keep me"
        assert (root / ".git").is_dir()

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert remove_generated_files(tmp_path / "gone", "gone") == []
