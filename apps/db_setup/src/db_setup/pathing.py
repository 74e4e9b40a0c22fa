from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

_WORKSPACE_MARKER = "pnpm-workspace.yaml"


def find_project_root(start: Path | None = None) -> Path:
    """Return the closest parent that looks like a pnpm monorepo root.

    A root has `pnpm-workspace.yaml` next to an `apps/` or `packages/`
    directory. Falls back to the starting directory when none is found.
    """
    cur = (start or Path.cwd()).resolve()
    for candidate in [cur, *cur.parents]:
        if not (candidate / _WORKSPACE_MARKER).exists():
            continue
        if (candidate / "apps").is_dir() or (candidate / "packages").is_dir():
            return candidate
    return cur


def find_config_file(names: Sequence[str], start: Path) -> Path | None:
    cur = start.resolve()
    for candidate in [cur, *cur.parents]:
        for name in names:
            path = candidate / name
            if path.is_file():
                return path
    return None
