from dep_resolver.resolver import (
    ConfigEntry,
    CyclicDependencyError,
    MissingDependenciesError,
    MissingDependency,
    ResolverError,
    UnknownNameError,
    build_index,
    check_unknown_names,
    find_missing_dependencies,
    resolve_order,
    topological_order,
)

__all__ = [
    "ConfigEntry",
    "CyclicDependencyError",
    "MissingDependenciesError",
    "MissingDependency",
    "ResolverError",
    "UnknownNameError",
    "build_index",
    "check_unknown_names",
    "find_missing_dependencies",
    "resolve_order",
    "topological_order",
]
