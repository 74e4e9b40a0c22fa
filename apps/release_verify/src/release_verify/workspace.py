from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

DEFAULT_REQUIRED_ARTIFACTS: tuple[str, ...] = ("bin/github-release.mjs",)


class WorkspaceError(RuntimeError):
    pass


def missing_artifacts(repo_root: Path, artifacts: Sequence[str]) -> list[str]:
    return [rel for rel in artifacts if not (repo_root / rel).exists()]


def verify_workspace(repo_root: Path, artifacts: Sequence[str] = DEFAULT_REQUIRED_ARTIFACTS) -> None:
    print("-> verifying workspace state")
    missing = missing_artifacts(repo_root, artifacts)
    if missing:
        pretty = "\n".join(f"- {rel}" for rel in missing)
        raise WorkspaceError(
            f"required build artifacts are missing:\n{pretty}\n-> run the build before releasing"
        )
    print("   workspace verified")
