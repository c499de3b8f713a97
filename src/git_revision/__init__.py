"""Resolve the git revision of a package at build time."""

from .constants import PACKAGE_VERSION as __version__
from .core import ResolutionSource, ResolvedRevision, RepositoryState, VcsSnapshot
from .errors import (
    ConfigError,
    CorruptMetadataError,
    NoRevisionAvailableError,
    RepositoryQueryError,
    RevisionError,
)
from .git import GitCliQuerier, RepositoryQuerier
from .resolver import resolve_revision, resolve_revision_string

__all__ = [
    "__version__",
    "ConfigError",
    "CorruptMetadataError",
    "GitCliQuerier",
    "NoRevisionAvailableError",
    "RepositoryQuerier",
    "RepositoryQueryError",
    "RepositoryState",
    "ResolutionSource",
    "ResolvedRevision",
    "RevisionError",
    "VcsSnapshot",
    "resolve_revision",
    "resolve_revision_string",
]
