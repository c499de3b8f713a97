"""Custom exceptions for git-revision.

Every failure that must abort a build derives from RevisionError. Absence of
the metadata snapshot or of an enclosing repository is never an exception;
those are ordinary outcomes handled by the resolver.
"""

from pathlib import Path
from typing import Optional, Sequence


class RevisionError(RuntimeError):
    """Base class for all revision-resolution errors."""

    kind = "RevisionError"


# Metadata Errors
class CorruptMetadataError(RevisionError):
    """Published metadata snapshot exists but cannot be parsed."""

    kind = "CorruptMetadata"

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(
            f"Metadata snapshot {path} is corrupt: {reason}. "
            f"Expected an object with git.sha1 and optional path_in_vcs."
        )


# Repository Errors
class RepositoryQueryError(RevisionError):
    """A repository was found but querying it failed."""

    kind = "RepositoryQueryError"

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.command = list(command) if command else None
        self.returncode = returncode
        self.stderr = stderr
        detail = message
        if self.command:
            detail += f" (command: {' '.join(self.command)}"
            if returncode is not None:
                detail += f", exit {returncode}"
            detail += ")"
        if stderr:
            detail += f"\n  {stderr}"
        super().__init__(detail)


# Resolution Errors
class NoRevisionAvailableError(RevisionError):
    """Neither a snapshot nor a repository could supply a commit id."""

    kind = "NoRevisionAvailable"

    def __init__(self, package_root: Path):
        self.package_root = package_root
        super().__init__(
            f"No revision available for {package_root}: no metadata snapshot "
            f"and not inside a git repository."
        )


# Configuration Errors
class ConfigError(RevisionError):
    """Invalid configuration file or environment override."""

    kind = "ConfigError"
