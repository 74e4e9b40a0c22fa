from __future__ import annotations

import json
import tomllib
from pathlib import Path

from packaging.version import InvalidVersion, Version

RELEASE_TYPES: tuple[str, ...] = ("patch", "minor", "major")


class VersioningError(ValueError):
    pass


def parse_release_type(value: str) -> str:
    if value not in RELEASE_TYPES:
        raise VersioningError(
            f"invalid release type {value!r}\n"
            f"-> expected one of: {' | '.join(RELEASE_TYPES)}\n"
            "-> example: release-verify patch"
        )
    return value


def _version_from_package_json(path: Path) -> str | None:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise VersioningError(f"Failed to parse {path}: {e}") from e
    version = data.get("version") if isinstance(data, dict) else None
    return version if isinstance(version, str) and version.strip() else None


def _version_from_pyproject(path: Path) -> str | None:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise VersioningError(f"Failed to parse {path}: {e}") from e
    project = data.get("project")
    if not isinstance(project, dict):
        return None
    version = project.get("version")
    return version if isinstance(version, str) and version.strip() else None


def read_current_version(repo_root: Path) -> tuple[str, Path]:
    readers = (
        ("package.json", _version_from_package_json),
        ("pyproject.toml", _version_from_pyproject),
    )
    for filename, reader in readers:
        path = repo_root / filename
        if not path.is_file():
            continue
        version = reader(path)
        if version is not None:
            return version, path
    raise VersioningError(
        f"No version found in {repo_root} (expected package.json `version` or pyproject.toml [project].version)."
    )


def next_version(current: str, release_type: str) -> str:
    parse_release_type(release_type)
    try:
        base = Version(current)
    except InvalidVersion as e:
        raise VersioningError(f"Invalid version {current!r}: {e}") from e

    major, minor, patch = (list(base.release) + [0, 0])[:3]
    if release_type == "major":
        major, minor, patch = major + 1, 0, 0
    elif release_type == "minor":
        minor, patch = minor + 1, 0
    elif base.is_prerelease or base.is_devrelease:
        # 1.2.3rc1 releases as 1.2.3
        pass
    else:
        patch += 1

    prefix = f"{base.epoch}!" if base.epoch else ""
    return f"{prefix}{major}.{minor}.{patch}"
