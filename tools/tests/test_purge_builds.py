from __future__ import annotations

import importlib.util
import sys
from pathlib import Path
from types import ModuleType

import pytest


def _load_module() -> ModuleType:
    module_path = Path(__file__).resolve().parents[1] / "purge_builds.py"
    spec = importlib.util.spec_from_file_location("purge_builds", module_path)
    assert spec is not None
    assert spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)
    return module


def _touch(path: Path, text: str = "x") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture()
def repo(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    _touch(root / "package.json", "{}")
    _touch(root / "pnpm-lock.yaml")
    _touch(root / ".env.development", "A=1")
    _touch(root / "node_modules" / "left-pad" / "index.js", "0123456789")
    _touch(root / ".git" / "dist" / "keep")
    _touch(root / "apps" / "server" / "dist" / "index.js")
    _touch(root / "apps" / "server" / "tsconfig.tsbuildinfo")
    _touch(root / "apps" / "server" / "src" / "index.ts")
    _touch(root / "packages" / "ui" / ".turbo" / "log")
    return root


def test_root_level_only_by_default(repo: Path) -> None:
    module = _load_module()
    targets = module.find_targets(repo, recursive=False)
    assert [t.path.relative_to(repo).as_posix() for t in targets] == ["node_modules", "pnpm-lock.yaml"]
    node_modules = targets[0]
    assert node_modules.kind == "directory"
    assert node_modules.size == 10


def test_recursive_skips_git_and_protected_paths(repo: Path) -> None:
    module = _load_module()
    rels = sorted(t.path.relative_to(repo).as_posix() for t in module.find_targets(repo, recursive=True))
    assert rels == [
        "apps/server/dist",
        "apps/server/tsconfig.tsbuildinfo",
        "node_modules",
        "packages/ui/.turbo",
        "pnpm-lock.yaml",
    ]


def test_dry_run_deletes_nothing(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    module = _load_module()
    assert module.main(["--root", str(repo), "--recursive", "--dry-run"]) == 0
    out = capsys.readouterr().out
    assert "would delete 5 item(s)" in out
    assert (repo / "node_modules").exists()
    assert (repo / "apps" / "server" / "dist").exists()


def test_purge_deletes_targets_and_keeps_sources(repo: Path) -> None:
    module = _load_module()
    assert module.main(["--root", str(repo), "--recursive"]) == 0
    assert not (repo / "node_modules").exists()
    assert not (repo / "pnpm-lock.yaml").exists()
    assert not (repo / "apps" / "server" / "dist").exists()
    assert not (repo / "apps" / "server" / "tsconfig.tsbuildinfo").exists()
    assert (repo / "apps" / "server" / "src" / "index.ts").exists()
    assert (repo / ".git" / "dist" / "keep").exists()
    assert (repo / ".env.development").exists()
    assert (repo / "package.json").exists()


def test_missing_root_is_an_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    module = _load_module()
    assert module.main(["--root", str(tmp_path / "missing")]) == 2
    assert "Not a directory" in capsys.readouterr().err


def test_format_size() -> None:
    module = _load_module()
    assert module.format_size(512) == "512 B"
    assert module.format_size(2048) == "2.0 KB"
    assert module.format_size(5 * 1024 * 1024) == "5.0 MB"


def test_unreadable_directory_is_reported(
    repo: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    module = _load_module()
    original_iterdir = Path.iterdir

    def iterdir(self: Path):
        if self.name == "ui" and self.parent.name == "packages":
            raise PermissionError(13, "Permission denied", str(self))
        return original_iterdir(self)

    monkeypatch.setattr(Path, "iterdir", iterdir)

    assert module.main(["--root", str(repo), "--recursive"]) == 2
    err = capsys.readouterr().err
    assert "Failed to list" in err
    assert "Permission denied" in err
    assert (repo / "node_modules").exists()
