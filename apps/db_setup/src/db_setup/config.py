from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from dep_resolver import ConfigEntry
from db_setup.pathing import find_config_file

CONFIG_FILE_NAMES: tuple[str, ...] = (
    "scripts/db-setup.yaml",
    "config/db-setup.yaml",
    "db-setup.yaml",
)

DEFAULT_BLOCKLIST: tuple[str, ...] = ("auth_account", "auth_session", "auth_verification")

DEFAULT_COMMANDS: dict[str, str] = {
    "generate": "pnpm --filter @workspace/server db.migrations.generate",
    "migrate": "pnpm --filter @workspace/server db.migrations.run",
    "seed": "pnpm --filter @workspace/server db.migrations.seed {name}",
    "view": "pnpm --filter @workspace/server db.views.create {name}",
}

_TOP_LEVEL_KEYS = {"schemas", "views", "blocklist", "commands"}
_ENTRY_KEYS = {"name", "description", "dependencies"}


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class DbSetupConfig:
    schemas: tuple[ConfigEntry, ...]
    views: tuple[ConfigEntry, ...] = ()
    blocklist: tuple[str, ...] = DEFAULT_BLOCKLIST
    commands: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COMMANDS))
    source_path: Path | None = None

    def selectable_schemas(self) -> list[str]:
        blocked = set(self.blocklist)
        return [entry.name for entry in self.schemas if entry.name not in blocked]

    def schema_names(self) -> list[str]:
        return [entry.name for entry in self.schemas]

    def view_names(self) -> list[str]:
        return [entry.name for entry in self.views]


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML in {path}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(raw).__name__}.")
    return raw


def _ensure_no_unknown_keys(*, data: dict[str, Any], allowed: set[str], where: str) -> None:
    unknown = set(data) - allowed
    if not unknown:
        return
    unknown_list = ", ".join(sorted(str(k) for k in unknown))
    allowed_list = ", ".join(sorted(allowed))
    raise ConfigError(f"Unknown keys in {where}: {unknown_list}. Allowed: {allowed_list}.")


def _parse_entries(value: Any, *, section: str, path: Path) -> tuple[ConfigEntry, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ConfigError(f"Expected list for {section} in {path}.")

    out: list[ConfigEntry] = []
    seen: set[str] = set()
    for idx, item in enumerate(value):
        where = f"{section}[{idx}] in {path}"
        if not isinstance(item, dict):
            raise ConfigError(f"Expected mapping for {where}.")
        _ensure_no_unknown_keys(data=item, allowed=_ENTRY_KEYS, where=where)

        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ConfigError(f"Missing/invalid name for {where}.")
        if name in seen:
            raise ConfigError(f"Duplicate name {name!r} in {section} ({path}).")
        seen.add(name)

        description = item.get("description")
        if description is not None and not isinstance(description, str):
            raise ConfigError(f"Expected string description for {where}.")

        deps = item.get("dependencies")
        if deps is None:
            deps = []
        if not isinstance(deps, list) or not all(isinstance(d, str) and d.strip() for d in deps):
            raise ConfigError(f"Expected list of names for {where}.dependencies.")

        out.append(ConfigEntry(name=name, description=description, dependencies=tuple(deps)))
    return tuple(out)


def _parse_blocklist(value: Any, *, path: Path) -> tuple[str, ...]:
    if value is None:
        return DEFAULT_BLOCKLIST
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"Expected list of strings for blocklist in {path}.")
    return tuple(value)


def _parse_commands(value: Any, *, path: Path) -> dict[str, str]:
    commands = dict(DEFAULT_COMMANDS)
    if value is None:
        return commands
    if not isinstance(value, dict):
        raise ConfigError(f"Expected mapping for commands in {path}.")
    _ensure_no_unknown_keys(data=value, allowed=set(DEFAULT_COMMANDS), where=f"commands in {path}")
    for key, template in value.items():
        if not isinstance(template, str) or not template.strip():
            raise ConfigError(f"Expected non-empty string for commands.{key} in {path}.")
        commands[key] = template
    return commands


def parse_config(data: dict[str, Any], *, path: Path) -> DbSetupConfig:
    _ensure_no_unknown_keys(data=data, allowed=_TOP_LEVEL_KEYS, where=str(path))
    schemas = _parse_entries(data.get("schemas"), section="schemas", path=path)
    if not schemas:
        raise ConfigError(f"No schemas configured in {path}.")
    return DbSetupConfig(
        schemas=schemas,
        views=_parse_entries(data.get("views"), section="views", path=path),
        blocklist=_parse_blocklist(data.get("blocklist"), path=path),
        commands=_parse_commands(data.get("commands"), path=path),
        source_path=path,
    )


def load_config(project_root: Path, *, config_path: Path | None = None) -> DbSetupConfig:
    if config_path is None:
        config_path = find_config_file(CONFIG_FILE_NAMES, project_root)
    if config_path is None:
        raise ConfigError(
            f"No config file found! Please create one of: {', '.join(CONFIG_FILE_NAMES)}"
        )
    return parse_config(_load_yaml_mapping(config_path), path=config_path)
