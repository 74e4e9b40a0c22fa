from __future__ import annotations

import shlex
import subprocess
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path


class CommandError(RuntimeError):
    def __init__(self, message: str, *, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


@dataclass(frozen=True)
class Step:
    label: str
    argv: list[str]


def seed_name(schema: str) -> str:
    return schema.removeprefix("auth_")


def render_command(template: str, *, name: str | None = None) -> list[str]:
    try:
        rendered = template.format(name=name) if name is not None else template
        argv = shlex.split(rendered)
    except (KeyError, IndexError, ValueError) as e:
        raise CommandError(f"Invalid command template {template!r}: {e}") from e
    if not argv:
        raise CommandError(f"Command template renders to an empty command: {template!r}")
    return argv


def build_steps(
    operations: Sequence[str],
    *,
    commands: Mapping[str, str],
    schemas: Sequence[str],
    views: Sequence[str],
) -> list[Step]:
    """Expand operations into concrete steps, one external process each.

    Operations always run in the fixed order generate, migrate, seed, views.
    Seed and view steps follow the resolved order of ``schemas``/``views``.
    """
    steps: list[Step] = []
    if "generate" in operations:
        steps.append(Step(label="generate migrations", argv=render_command(commands["generate"])))
    if "migrate" in operations:
        steps.append(Step(label="run migrations", argv=render_command(commands["migrate"])))
    if "seed" in operations:
        for schema in schemas:
            argv = render_command(commands["seed"], name=seed_name(schema))
            steps.append(Step(label=f"seed {schema}", argv=argv))
    if "views" in operations:
        for view in views:
            steps.append(Step(label=f"create view {view}", argv=render_command(commands["view"], name=view)))
    return steps


Runner = Callable[..., "subprocess.CompletedProcess[str]"]


def run_steps(
    steps: Sequence[Step],
    *,
    cwd: Path,
    env: Mapping[str, str],
    runner: Runner = subprocess.run,
) -> int:
    executed = 0
    for step in steps:
        print(f"\n==> {step.label}")
        print(f"    $ {shlex.join(step.argv)}")
        try:
            proc = runner(step.argv, cwd=str(cwd), env=dict(env), text=True, check=False)
        except FileNotFoundError as e:
            raise CommandError(f"Command not found for {step.label}: {step.argv[0]}") from e
        if proc.returncode != 0:
            raise CommandError(
                f"Command failed (exit {proc.returncode}) during {step.label}: {shlex.join(step.argv)}",
                returncode=proc.returncode,
            )
        print(f"    ok: {step.label}")
        executed += 1
    return executed
