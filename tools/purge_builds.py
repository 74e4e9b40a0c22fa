from __future__ import annotations

import argparse
import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path

DELETE_DIR_NAMES = frozenset({".turbo", ".tsup", "dist", "node_modules", ".pnpm"})
DELETE_FILE_NAMES = frozenset({"pnpm-lock.yaml"})
DELETE_FILE_SUFFIXES = (".tsbuildinfo",)

_PROTECTED_NAMES = frozenset({".git", "src", "package.json"})


class PurgeError(RuntimeError):
    pass


@dataclass(frozen=True)
class PurgeTarget:
    path: Path
    kind: str  # "file" | "directory"
    size: int


def _is_protected(name: str) -> bool:
    return name in _PROTECTED_NAMES or name == ".env" or name.startswith(".env.")


def should_delete(path: Path) -> bool:
    name = path.name
    if _is_protected(name) or path.is_symlink():
        return False
    if path.is_dir():
        return name in DELETE_DIR_NAMES
    return name in DELETE_FILE_NAMES or name.endswith(DELETE_FILE_SUFFIXES)


def _size_of(path: Path) -> int:
    if path.is_file():
        return path.stat().st_size
    total = 0
    for dirpath, _dirnames, filenames in os.walk(path):
        for filename in filenames:
            try:
                total += (Path(dirpath) / filename).lstat().st_size
            except OSError:
                continue
    return total


def _target(path: Path) -> PurgeTarget:
    kind = "directory" if path.is_dir() else "file"
    return PurgeTarget(path=path, kind=kind, size=_size_of(path))


def find_targets(root: Path, *, recursive: bool) -> list[PurgeTarget]:
    """List build artifacts under ``root``.

    Non-recursive mode only looks at the immediate children of ``root``.
    Matched directories are never descended into, and neither is `.git`.
    """
    if not root.is_dir():
        raise PurgeError(f"Not a directory: {root}")

    out: list[PurgeTarget] = []
    pending = [root]
    while pending:
        cur = pending.pop(0)
        try:
            children = sorted(cur.iterdir())
        except OSError as e:
            raise PurgeError(f"Failed to list {cur}: {e}") from e
        for child in children:
            if should_delete(child):
                out.append(_target(child))
                continue
            if recursive and child.is_dir() and not child.is_symlink() and child.name != ".git":
                pending.append(child)
    return out


def format_size(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def purge(targets: list[PurgeTarget], *, dry_run: bool) -> list[Path]:
    deleted: list[Path] = []
    for target in targets:
        if dry_run:
            continue
        try:
            if target.kind == "directory":
                shutil.rmtree(target.path)
            else:
                target.path.unlink()
        except OSError as e:
            raise PurgeError(f"Failed to delete {target.path}: {e}") from e
        deleted.append(target.path)
    return deleted


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="purge_builds",
        description="Delete build artifacts and installed dependencies from a monorepo checkout.",
    )
    parser.add_argument("--root", type=Path, default=None, help="Directory to clean (default: cwd).")
    parser.add_argument("-d", "--dry-run", action="store_true", help="Show what would be deleted.")
    parser.add_argument("-v", "--verbose", action="store_true", help="List every matched path.")
    parser.add_argument("-r", "--recursive", action="store_true", help="Walk the whole tree, not just the root level.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    root = (args.root or Path.cwd()).resolve()

    mode = "recursive" if args.recursive else "root level only"
    print(f"==> purge builds ({mode}{', dry-run' if args.dry_run else ''})")
    print(f"    root: {root}")

    try:
        targets = find_targets(root, recursive=bool(args.recursive))
        if not targets:
            print("    nothing to delete")
            return 0

        total = sum(t.size for t in targets)
        if args.verbose or args.dry_run:
            for t in targets:
                rel = t.path.relative_to(root)
                print(f"  - {rel}{'/' if t.kind == 'directory' else ''} ({format_size(t.size)})")

        deleted = purge(targets, dry_run=bool(args.dry_run))
    except PurgeError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    if args.dry_run:
        print(f"dry-run: would delete {len(targets)} item(s), {format_size(total)}")
    else:
        print(f"deleted {len(deleted)} item(s), {format_size(total)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
