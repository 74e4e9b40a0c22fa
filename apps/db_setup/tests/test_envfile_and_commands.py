from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from db_setup.commands import CommandError, Step, build_steps, render_command, run_steps, seed_name
from db_setup.config import DEFAULT_COMMANDS
from db_setup.envfile import EnvFileError, load_env_file, parse_env_text, resolve_node_env


def test_resolve_node_env_defaults_and_falls_back(capsys: pytest.CaptureFixture[str]) -> None:
    assert resolve_node_env({}) == "development"
    assert resolve_node_env({"NODE_ENV": "test"}) == "test"
    assert resolve_node_env({"NODE_ENV": "staging"}) == "development"
    assert "unexpected NODE_ENV 'staging'" in capsys.readouterr().err


def test_parse_env_text_handles_comments_quotes_and_export() -> None:
    text = "\n".join(
        [
            "# comment",
            "DATABASE_URL = file:dev.db",
            "export API_KEY='abc=123'",
            'GREETING="hello world"',
            "not a pair",
            "",
        ]
    )
    assert parse_env_text(text) == {
        "DATABASE_URL": "file:dev.db",
        "API_KEY": "abc=123",
        "GREETING": "hello world",
    }


def test_load_env_file_reads_node_env_file(tmp_path: Path) -> None:
    (tmp_path / ".env.test").write_text("A=1\n", encoding="utf-8")
    assert load_env_file(tmp_path, "test") == {"A": "1"}
    with pytest.raises(EnvFileError):
        load_env_file(tmp_path, "production")


def test_seed_name_strips_auth_prefix() -> None:
    assert seed_name("auth_account") == "account"
    assert seed_name("drink_types") == "drink_types"


def test_render_command_rejects_bad_templates() -> None:
    assert render_command("pnpm seed {name}", name="a b") == ["pnpm", "seed", "a", "b"]
    with pytest.raises(CommandError):
        render_command("pnpm seed {schema}", name="x")
    with pytest.raises(CommandError):
        render_command("   ")


def test_build_steps_follows_fixed_operation_order() -> None:
    steps = build_steps(
        ["views", "seed", "migrate"],
        commands=DEFAULT_COMMANDS,
        schemas=["drink_types", "auth_session"],
        views=["drinks_readable"],
    )
    assert [s.label for s in steps] == [
        "run migrations",
        "seed drink_types",
        "seed auth_session",
        "create view drinks_readable",
    ]
    assert steps[2].argv[-1] == "session"


class _FakeRunner:
    def __init__(self, fail_on: str | None = None) -> None:
        self.calls: list[list[str]] = []
        self.fail_on = fail_on

    def __call__(self, argv: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        self.calls.append(list(argv))
        rc = 1 if self.fail_on is not None and self.fail_on in argv else 0
        return subprocess.CompletedProcess(argv, rc)


def test_run_steps_halts_on_failure(tmp_path: Path) -> None:
    steps = [
        Step(label="seed a", argv=["seed", "a"]),
        Step(label="seed b", argv=["seed", "b"]),
        Step(label="seed c", argv=["seed", "c"]),
    ]
    runner = _FakeRunner(fail_on="b")
    with pytest.raises(CommandError) as excinfo:
        run_steps(steps, cwd=tmp_path, env={}, runner=runner)
    assert excinfo.value.returncode == 1
    assert runner.calls == [["seed", "a"], ["seed", "b"]]


def test_run_steps_counts_executed(tmp_path: Path) -> None:
    runner = _FakeRunner()
    steps = [Step(label="generate migrations", argv=["gen"])]
    assert run_steps(steps, cwd=tmp_path, env={"A": "1"}, runner=runner) == 1
