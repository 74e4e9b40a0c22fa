from release_verify.git_checks import GitStateError, verify_git
from release_verify.versioning import RELEASE_TYPES, VersioningError, next_version, read_current_version
from release_verify.workspace import WorkspaceError, verify_workspace

__all__ = [
    "GitStateError",
    "RELEASE_TYPES",
    "VersioningError",
    "WorkspaceError",
    "next_version",
    "read_current_version",
    "verify_git",
    "verify_workspace",
]
