"""Core data models for git-revision.

Resolution Sources:
-------------------
A revision comes from one of two places, or a combination of both:

1. Published snapshot: the package was built from an archive carrying
   .vcs_info.json and no repository encloses it. The snapshot is used verbatim
   and is always clean.
2. Live repository: no snapshot exists, the repository's HEAD and working
   tree are authoritative.
3. Snapshot plus live dirty check: both exist. The snapshot names the commit,
   the repository only contributes dirtiness, and only when its HEAD is the
   same commit.
"""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .constants import DIRTY_SUFFIX


# ============= Sources =============

class VcsSnapshot(BaseModel):
    """Commit a published package was built from (read from .vcs_info.json)."""

    model_config = ConfigDict(frozen=True)

    commit_hash: str = Field(..., min_length=1)
    source_path: Optional[str] = None  # path_in_vcs, POSIX, relative to repo root


class RepositoryState(BaseModel):
    """Live repository condition at resolution time. Never cached."""

    model_config = ConfigDict(frozen=True)

    head_commit: str = Field(..., min_length=1)
    is_dirty: bool
    root: Path
    git_dir: Optional[Path] = None


# ============= Resolution =============

class ResolutionSource(str, Enum):
    """Which sources produced a revision."""

    PUBLISHED_SNAPSHOT = "published_snapshot"
    LIVE_REPOSITORY = "live_repository"
    SNAPSHOT_PLUS_LIVE_DIRTY_CHECK = "snapshot_plus_live_dirty_check"


class ResolvedRevision(BaseModel):
    """Final answer of a resolution."""

    model_config = ConfigDict(frozen=True)

    commit_hash: str = Field(..., min_length=1)
    dirty: bool = False
    source: ResolutionSource

    def format(self) -> str:
        """Commit hash, with the -dirty suffix when the tree is dirty."""
        if self.dirty:
            return f"{self.commit_hash}{DIRTY_SUFFIX}"
        return self.commit_hash

    def __str__(self) -> str:
        return self.format()
