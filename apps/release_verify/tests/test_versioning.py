from __future__ import annotations

from pathlib import Path

import pytest

from release_verify.versioning import VersioningError, next_version, parse_release_type, read_current_version
from release_verify.workspace import WorkspaceError, missing_artifacts, verify_workspace


@pytest.mark.parametrize(
    ("current", "release_type", "expected"),
    [
        ("1.2.3", "patch", "1.2.4"),
        ("1.2.3", "minor", "1.3.0"),
        ("1.2.3", "major", "2.0.0"),
        ("1.2", "patch", "1.2.1"),
        ("1.2.3rc1", "patch", "1.2.3"),
        ("1!1.0.0", "major", "1!2.0.0"),
    ],
)
def test_next_version(current: str, release_type: str, expected: str) -> None:
    assert next_version(current, release_type) == expected


def test_next_version_rejects_invalid_input() -> None:
    with pytest.raises(VersioningError):
        next_version("not-a-version", "patch")
    with pytest.raises(VersioningError) as excinfo:
        parse_release_type("hotfix")
    assert "patch | minor | major" in str(excinfo.value)


def test_read_current_version_prefers_package_json(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\nversion = "0.9.0"\n', encoding="utf-8")
    assert read_current_version(tmp_path) == ("0.9.0", tmp_path / "pyproject.toml")

    (tmp_path / "package.json").write_text('{"name": "x", "version": "1.4.0"}\n', encoding="utf-8")
    assert read_current_version(tmp_path) == ("1.4.0", tmp_path / "package.json")


def test_read_current_version_requires_a_version(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text('{"name": "x"}\n', encoding="utf-8")
    with pytest.raises(VersioningError):
        read_current_version(tmp_path)


def test_verify_workspace_lists_missing_artifacts(tmp_path: Path) -> None:
    (tmp_path / "bin").mkdir()
    (tmp_path / "bin" / "cli.mjs").write_text("", encoding="utf-8")
    assert missing_artifacts(tmp_path, ["bin/cli.mjs", "dist/utils.mjs"]) == ["dist/utils.mjs"]

    verify_workspace(tmp_path, ["bin/cli.mjs"])
    with pytest.raises(WorkspaceError) as excinfo:
        verify_workspace(tmp_path, ["bin/cli.mjs", "dist/utils.mjs"])
    assert "- dist/utils.mjs" in str(excinfo.value)
