from __future__ import annotations

import re
import sys
from collections.abc import Mapping
from pathlib import Path

KNOWN_NODE_ENVS: tuple[str, ...] = ("development", "test", "production")
DEFAULT_NODE_ENV = "development"

_LINE_RE = re.compile(r"^([^=#]+)=(.*)$")


class EnvFileError(RuntimeError):
    pass


def resolve_node_env(env: Mapping[str, str]) -> str:
    node_env = env.get("NODE_ENV") or DEFAULT_NODE_ENV
    if node_env not in KNOWN_NODE_ENVS:
        print(
            f"[db-setup] WARNING: unexpected NODE_ENV {node_env!r}, defaulting to {DEFAULT_NODE_ENV}",
            file=sys.stderr,
        )
        return DEFAULT_NODE_ENV
    return node_env


def parse_env_text(text: str) -> dict[str, str]:
    values: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        match = _LINE_RE.match(line)
        if match is None:
            continue
        key = match.group(1).strip()
        value = match.group(2).strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        values[key] = value
    return values


def env_file_path(env_dir: Path, node_env: str) -> Path:
    return env_dir / f".env.{node_env}"


def load_env_file(env_dir: Path, node_env: str) -> dict[str, str]:
    path = env_file_path(env_dir, node_env)
    if not path.is_file():
        raise EnvFileError(f"Environment file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise EnvFileError(f"Failed to read {path}: {e}") from e
    return parse_env_text(text)
