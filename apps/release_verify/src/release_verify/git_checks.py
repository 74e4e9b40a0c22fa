from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

DEFAULT_RELEASE_BRANCH = "master"


class GitStateError(RuntimeError):
    pass


@dataclass(frozen=True)
class CommandResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


def _git(args: list[str], *, cwd: Path) -> CommandResult:
    argv = ["git", *args]
    try:
        proc = subprocess.run(
            argv,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise GitStateError("git executable not found on PATH") from e
    return CommandResult(argv=argv, returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)


def assert_git_repo(repo_root: Path) -> None:
    result = _git(["rev-parse", "--is-inside-work-tree"], cwd=repo_root)
    if result.returncode != 0 or result.stdout.strip() != "true":
        raise GitStateError("not inside a git repository")


def assert_not_detached_head(repo_root: Path) -> None:
    result = _git(["symbolic-ref", "--quiet", "HEAD"], cwd=repo_root)
    if result.returncode != 0:
        raise GitStateError("detached HEAD detected\n-> checkout a branch before running a release")


def assert_clean_working_tree(repo_root: Path) -> None:
    result = _git(["status", "--porcelain"], cwd=repo_root)
    if result.returncode != 0:
        raise GitStateError(f"git status failed: {result.stderr.strip()}")
    if result.stdout.strip():
        raise GitStateError("working tree is not clean\n-> commit or stash your changes before releasing")


def current_branch(repo_root: Path) -> str:
    result = _git(["branch", "--show-current"], cwd=repo_root)
    if result.returncode != 0:
        raise GitStateError(f"failed to determine current branch: {result.stderr.strip()}")
    return result.stdout.strip()


def assert_on_release_branch(repo_root: Path, branch: str) -> None:
    current = current_branch(repo_root)
    if current != branch:
        raise GitStateError(f"not on release branch ({branch})\n-> current branch: {current}")


def assert_upstream_exists(repo_root: Path) -> None:
    result = _git(["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}"], cwd=repo_root)
    if result.returncode != 0:
        raise GitStateError(
            "no upstream branch configured\n-> run: git push --set-upstream origin <branch>"
        )


def assert_no_unpushed_commits(repo_root: Path) -> None:
    result = _git(["rev-list", "--count", "@{u}..HEAD"], cwd=repo_root)
    if result.returncode != 0:
        raise GitStateError(f"failed to determine unpushed commit count: {result.stderr.strip()}")
    try:
        count = int(result.stdout.strip())
    except ValueError as e:
        raise GitStateError("failed to determine unpushed commit count") from e
    if count > 0:
        raise GitStateError(f"unpushed commits detected ({count})\n-> run: git push")


def verify_git(repo_root: Path, *, branch: str = DEFAULT_RELEASE_BRANCH) -> None:
    """Check that ``repo_root`` is ready to release from ``branch``.

    Checks run in order and the first failure raises `GitStateError`:
    work tree, attached HEAD, clean tree, branch, upstream, nothing unpushed.
    """
    print("-> verifying git state")
    assert_git_repo(repo_root)
    assert_not_detached_head(repo_root)
    assert_clean_working_tree(repo_root)
    assert_on_release_branch(repo_root, branch)
    assert_upstream_exists(repo_root)
    assert_no_unpushed_commits(repo_root)
    print("   git state verified")
