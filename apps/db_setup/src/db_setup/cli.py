#!/usr/bin/env python
from __future__ import annotations

import argparse
import os
import shlex
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from dep_resolver import ConfigEntry, ResolverError, resolve_order

from db_setup.commands import CommandError, Step, build_steps, run_steps
from db_setup.config import ConfigError, DbSetupConfig, load_config
from db_setup.envfile import EnvFileError, load_env_file, resolve_node_env
from db_setup.pathing import find_project_root

OPERATIONS: tuple[str, ...] = ("generate", "migrate", "seed", "views")
DEFAULT_OPERATIONS: tuple[str, ...] = ("seed", "views")


@dataclass(frozen=True)
class Plan:
    project_root: Path
    config: DbSetupConfig
    node_env: str
    env: dict[str, str]
    schemas: list[str]
    views: list[str]


def _log(message: str) -> None:
    print(f"[db-setup] {message}")


def _print_list(title: str, names: Sequence[str]) -> None:
    print(f"{title} ({len(names)}):")
    if not names:
        print("  (none)")
    for idx, name in enumerate(names, start=1):
        print(f"  {idx}. {name}")


def _resolve(collection: Sequence[ConfigEntry], selection: Sequence[str], *, kind: str) -> list[str]:
    if not selection:
        return []
    try:
        return resolve_order(collection, selection)
    except ResolverError as e:
        raise ResolverError(f"Invalid {kind} selection. {e}") from e


def _select_schemas(config: DbSetupConfig, args: argparse.Namespace) -> list[str]:
    if args.schemas:
        return list(dict.fromkeys(args.schemas))
    if getattr(args, "yes", False):
        return config.schema_names()
    return config.selectable_schemas()


def _select_views(config: DbSetupConfig, args: argparse.Namespace) -> list[str]:
    if args.views:
        return list(dict.fromkeys(args.views))
    return config.view_names()


def _build_env(args: argparse.Namespace, project_root: Path) -> tuple[str, dict[str, str]]:
    env = dict(os.environ)
    node_env = resolve_node_env(env)
    _log(f"NODE_ENV: {node_env}")
    if args.no_env_file:
        return node_env, env
    env_dir = args.env_dir.resolve() if args.env_dir is not None else project_root
    loaded = load_env_file(env_dir, node_env)
    _log(f"Loaded env config ({len(loaded)} values) from {env_dir / f'.env.{node_env}'}")
    env.update(loaded)
    return node_env, env


def _prepare(args: argparse.Namespace, *, with_schemas: bool = True, with_views: bool = True) -> Plan:
    project_root = (
        args.project_root.resolve() if args.project_root is not None else find_project_root()
    )
    _log(f"Project root: {project_root}")

    node_env, env = _build_env(args, project_root)

    config = load_config(project_root, config_path=args.config)
    _log(f"Loaded config: {config.source_path}")

    schemas: list[str] = []
    if with_schemas:
        schemas = _resolve(config.schemas, _select_schemas(config, args), kind="schema")
    views: list[str] = []
    if with_views:
        views = _resolve(config.views, _select_views(config, args), kind="view")
    return Plan(
        project_root=project_root,
        config=config,
        node_env=node_env,
        env=env,
        schemas=schemas,
        views=views,
    )


def _cmd_plan(args: argparse.Namespace) -> int:
    plan = _prepare(args)
    print("")
    _print_list("schemas (seed order)", plan.schemas)
    _print_list("views (creation order)", plan.views)
    return 0


def _print_steps(steps: Sequence[Step]) -> None:
    print("")
    print(f"dry-run: would execute {len(steps)} command(s):")
    for step in steps:
        print(f"  - {step.label}: {shlex.join(step.argv)}")


def _cmd_run(args: argparse.Namespace) -> int:
    operations = list(dict.fromkeys(args.operations or DEFAULT_OPERATIONS))
    if "seed" in operations and not args.schemas and not args.yes:
        raise ConfigError(
            "Refusing to seed without an explicit selection. "
            "Pass --schema NAME (repeatable) or --yes to process every configured schema."
        )

    _log(f"Operations selected: {', '.join(operations)}")

    plan = _prepare(args, with_schemas="seed" in operations, with_views="views" in operations)
    if "seed" in operations:
        _print_list("schemas (seed order)", plan.schemas)
    if "views" in operations:
        _print_list("views (creation order)", plan.views)

    steps = build_steps(
        operations,
        commands=plan.config.commands,
        schemas=plan.schemas,
        views=plan.views,
    )
    if args.dry_run:
        _print_steps(steps)
        return 0

    executed = run_steps(steps, cwd=plan.project_root, env=plan.env)
    print("")
    _log(f"Finished: {executed} command(s) executed.")
    return 0


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--project-root", type=Path, help="Monorepo root (auto-detected if omitted).")
    p.add_argument("--config", type=Path, help="Explicit db-setup YAML config path.")
    p.add_argument("--env-dir", type=Path, help="Directory holding .env.<NODE_ENV> (default: project root).")
    p.add_argument("--no-env-file", action="store_true", help="Do not require or load a .env.<NODE_ENV> file.")
    p.add_argument(
        "--schema",
        dest="schemas",
        action="append",
        default=[],
        help="Schema to process (repeatable). Default: every non-blocklisted schema; with --yes every schema.",
    )
    p.add_argument(
        "--view",
        dest="views",
        action="append",
        default=[],
        help="View to create (repeatable). Default: every configured view.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="db-setup",
        description="Seed and migrate a monorepo database in dependency order.",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    plan_p = sub.add_parser("plan", help="Validate the selection and print the resolved order.")
    _add_common_args(plan_p)
    plan_p.set_defaults(func=_cmd_plan)

    run_p = sub.add_parser("run", help="Execute migration/seed/view commands in resolved order.")
    _add_common_args(run_p)
    run_p.add_argument(
        "--op",
        dest="operations",
        action="append",
        choices=list(OPERATIONS),
        default=[],
        help="Operation to perform (repeatable). Default: seed and views.",
    )
    run_p.add_argument("-y", "--yes", action="store_true", help="Process every configured schema.")
    run_p.add_argument("--dry-run", action="store_true", help="Print the commands instead of running them.")
    run_p.set_defaults(func=_cmd_run)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return int(args.func(args))
    except (ConfigError, EnvFileError, ResolverError, CommandError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
