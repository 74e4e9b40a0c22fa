#!/usr/bin/env python
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from release_verify.git_checks import DEFAULT_RELEASE_BRANCH, GitStateError, verify_git
from release_verify.versioning import (
    RELEASE_TYPES,
    VersioningError,
    next_version,
    parse_release_type,
    read_current_version,
)
from release_verify.workspace import DEFAULT_REQUIRED_ARTIFACTS, WorkspaceError, verify_workspace


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="release-verify",
        description="Verify that the workspace and git state are ready for a release.",
    )
    parser.add_argument("release_type", help=f"One of: {', '.join(RELEASE_TYPES)}.")
    parser.add_argument("--repo-root", type=Path, default=None, help="Repository root (default: cwd).")
    parser.add_argument(
        "--branch",
        default=DEFAULT_RELEASE_BRANCH,
        help=f"Release branch (default: {DEFAULT_RELEASE_BRANCH}).",
    )
    parser.add_argument(
        "--artifact",
        dest="artifacts",
        action="append",
        default=[],
        help="Build artifact that must exist, relative to the repo root (repeatable).",
    )
    parser.add_argument("--skip-git", action="store_true", help="Only verify workspace artifacts and version.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    repo_root = (args.repo_root or Path.cwd()).resolve()
    try:
        release_type = parse_release_type(args.release_type)
        print(f"==> release verification ({release_type})")
        print(f"    repo_root: {repo_root}")

        verify_workspace(repo_root, args.artifacts or DEFAULT_REQUIRED_ARTIFACTS)
        if not args.skip_git:
            verify_git(repo_root, branch=args.branch)

        current, source = read_current_version(repo_root)
        planned = next_version(current, release_type)
        print(f"    version: {current} -> {planned} (from {source.name})")
    except (GitStateError, VersioningError, WorkspaceError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    print("OK: release checks passed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
