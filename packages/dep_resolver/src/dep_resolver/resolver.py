from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ConfigEntry:
    name: str
    description: str | None = None
    dependencies: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class MissingDependency:
    schema: str
    dependencies: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {"schema": self.schema, "dependencies": list(self.dependencies)}


class ResolverError(ValueError):
    pass


class UnknownNameError(ResolverError):
    def __init__(self, name: str, *, referenced_by: str | None = None) -> None:
        if referenced_by is None:
            message = f"Unknown entry {name!r}: not present in the configuration."
        else:
            message = f"Unknown dependency {name!r} declared by {referenced_by!r}: not present in the configuration."
        super().__init__(message)
        self.name = name
        self.referenced_by = referenced_by


class MissingDependenciesError(ResolverError):
    def __init__(self, missing: Sequence[MissingDependency]) -> None:
        lines = [f"  {m.schema} requires: {', '.join(m.dependencies)}" for m in missing]
        super().__init__("Missing dependencies:\n" + "\n".join(lines))
        self.missing = list(missing)


class CyclicDependencyError(ResolverError):
    def __init__(self, cycle: Sequence[str]) -> None:
        pretty = " -> ".join([*cycle, cycle[0]])
        super().__init__(f"Dependency cycle detected: {pretty}")
        self.cycle = list(cycle)


def build_index(collection: Iterable[ConfigEntry]) -> dict[str, ConfigEntry]:
    index: dict[str, ConfigEntry] = {}
    for entry in collection:
        # first match wins, same as a linear scan
        index.setdefault(entry.name, entry)
    return index


def find_missing_dependencies(
    collection: Sequence[ConfigEntry], selection: Sequence[str]
) -> list[MissingDependency]:
    """Report selected entries whose declared dependencies are not selected.

    Names that do not exist in ``collection`` are treated as having no
    dependencies. Never raises; an empty list means the selection is complete.
    """
    index = build_index(collection)
    selected = set(selection)

    out: list[MissingDependency] = []
    for name in selection:
        entry = index.get(name)
        if entry is None or not entry.dependencies:
            continue
        missing = [dep for dep in entry.dependencies if dep not in selected]
        if missing:
            out.append(MissingDependency(schema=name, dependencies=missing))
    return out


def topological_order(collection: Sequence[ConfigEntry], selection: Sequence[str]) -> list[str]:
    """Order ``selection`` so every selected dependency precedes its dependents.

    Depth-first post-order driven by the selection order. A visited set stops
    re-entry, so cyclic input terminates with some permutation instead of an
    error; use `resolve_order` when cycles must be rejected.
    """
    index = build_index(collection)
    selected = set(selection)
    visited: set[str] = set()
    result: list[str] = []

    def deps_of(name: str) -> Iterator[str]:
        entry = index.get(name)
        if entry is None:
            return iter(())
        return (dep for dep in entry.dependencies if dep in selected)

    for root in selection:
        if root in visited:
            continue
        visited.add(root)
        frames: list[tuple[str, Iterator[str]]] = [(root, deps_of(root))]
        while frames:
            name, deps = frames[-1]
            for dep in deps:
                if dep not in visited:
                    visited.add(dep)
                    frames.append((dep, deps_of(dep)))
                    break
            else:
                frames.pop()
                result.append(name)
    return result


def check_unknown_names(collection: Sequence[ConfigEntry], selection: Sequence[str]) -> None:
    index = build_index(collection)
    for name in selection:
        entry = index.get(name)
        if entry is None:
            raise UnknownNameError(name)
        for dep in entry.dependencies:
            if dep not in index:
                raise UnknownNameError(dep, referenced_by=name)


_IN_PROGRESS = 1
_DONE = 2


def resolve_order(collection: Sequence[ConfigEntry], selection: Sequence[str]) -> list[str]:
    """Strict variant of `topological_order`.

    Raises `UnknownNameError` for names absent from the collection,
    `MissingDependenciesError` when the selection is incomplete and
    `CyclicDependencyError` (with the cycle path) on cyclic input.
    """
    check_unknown_names(collection, selection)
    missing = find_missing_dependencies(collection, selection)
    if missing:
        raise MissingDependenciesError(missing)

    index = build_index(collection)
    selected = set(selection)
    state: dict[str, int] = {}
    result: list[str] = []

    def deps_of(name: str) -> Iterator[str]:
        return (dep for dep in index[name].dependencies if dep in selected)

    for root in selection:
        if state.get(root) == _DONE:
            continue
        state[root] = _IN_PROGRESS
        # stack mirrors frames and holds the current path for cycle reports
        stack: list[str] = [root]
        frames: list[tuple[str, Iterator[str]]] = [(root, deps_of(root))]
        while frames:
            name, deps = frames[-1]
            for dep in deps:
                current = state.get(dep)
                if current == _DONE:
                    continue
                if current == _IN_PROGRESS:
                    raise CyclicDependencyError(stack[stack.index(dep) :])
                state[dep] = _IN_PROGRESS
                stack.append(dep)
                frames.append((dep, deps_of(dep)))
                break
            else:
                frames.pop()
                stack.pop()
                state[name] = _DONE
                result.append(name)
    return result
