"""Revision resolution: snapshot and live repository reconciliation.

Precedence
----------
1. Read the metadata snapshot. A corrupt snapshot aborts resolution.
2. Inspect the enclosing repository. A failed query aborts resolution;
   no repository at all is a normal outcome.
3. Reconcile:

   ==========  ==========  ===============================================
   snapshot    repository  result
   ==========  ==========  ===============================================
   no          no          NoRevisionAvailableError
   no          yes         HEAD, dirty from the working tree
   yes         no          snapshot commit, clean
   yes         yes         snapshot commit, dirty from the working tree
                           only if HEAD is the snapshot commit
   ==========  ==========  ===============================================

A repository whose HEAD differs from the snapshot is an unrelated checkout
the package was copied into, so its working tree says nothing about the
published commit.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from .config import RevisionConfig, load_config
from .core import RepositoryState, ResolutionSource, ResolvedRevision, VcsSnapshot
from .context import path_in_repository
from .errors import NoRevisionAvailableError
from .git import GitCliQuerier, RepositoryQuerier, inspect_repository
from .snapshot import read_snapshot

logger = logging.getLogger(__name__)


def _same_commit(a: str, b: str) -> bool:
    return a.strip().lower() == b.strip().lower()


def _check_source_path(package_root: Path, snapshot: VcsSnapshot, repo: RepositoryState) -> None:
    """Warn when the package sits elsewhere in the repository than it was published from."""
    if snapshot.source_path is None:
        return
    rel = path_in_repository(package_root, repo.root)
    if rel != snapshot.source_path.strip("/"):
        logger.warning(
            "Snapshot path_in_vcs %r does not match package location %r in %s",
            snapshot.source_path, rel, repo.root,
        )


def reconcile(
    package_root: Path,
    snapshot: Optional[VcsSnapshot],
    repo: Optional[RepositoryState],
) -> ResolvedRevision:
    """Combine the two sources into one revision.

    Raises:
        NoRevisionAvailableError: If neither source exists
    """
    if snapshot is None and repo is None:
        raise NoRevisionAvailableError(package_root)

    if snapshot is None:
        logger.debug("Using live repository %s at %s", repo.root, repo.head_commit)
        return ResolvedRevision(
            commit_hash=repo.head_commit,
            dirty=repo.is_dirty,
            source=ResolutionSource.LIVE_REPOSITORY,
        )

    if repo is None:
        logger.debug("Using published snapshot %s", snapshot.commit_hash)
        return ResolvedRevision(
            commit_hash=snapshot.commit_hash,
            dirty=False,
            source=ResolutionSource.PUBLISHED_SNAPSHOT,
        )

    _check_source_path(package_root, snapshot, repo)
    if _same_commit(repo.head_commit, snapshot.commit_hash):
        dirty = repo.is_dirty
    else:
        logger.warning(
            "Repository %s HEAD %s differs from published commit %s; treating package as clean",
            repo.root, repo.head_commit, snapshot.commit_hash,
        )
        dirty = False
    return ResolvedRevision(
        commit_hash=snapshot.commit_hash,
        dirty=dirty,
        source=ResolutionSource.SNAPSHOT_PLUS_LIVE_DIRTY_CHECK,
    )


def resolve_revision(
    package_root: Union[str, Path],
    querier: Optional[RepositoryQuerier] = None,
    config: Optional[RevisionConfig] = None,
    exclude: Sequence[str] = (),
) -> ResolvedRevision:
    """Resolve the revision of the package rooted at package_root.

    Args:
        package_root: Package root directory
        querier: Repository query implementation (default: git CLI)
        config: Resolution settings (default: loaded from package_root)
        exclude: Package-relative paths ignored by the dirtiness check.
            A snapshot file that was read is always ignored as well.

    Returns:
        ResolvedRevision; str() of it is the GIT_REVISION value

    Raises:
        NotADirectoryError: package_root is not a directory
        CorruptMetadataError: Snapshot present but malformed
        RepositoryQueryError: Repository present but a query failed
        NoRevisionAvailableError: No snapshot and no repository
        ConfigError: Invalid configuration
    """
    root = Path(package_root).resolve()
    if not root.is_dir():
        raise NotADirectoryError(f"Package root {root} is not a directory")
    if config is None:
        config = load_config(root)
    if querier is None:
        querier = GitCliQuerier(config.git_executable, config.timeout)

    snapshot = read_snapshot(root, config.metadata_file)
    exclude = list(exclude)
    if snapshot is not None:
        # Published metadata is never committed
        exclude.append(Path(config.metadata_file).as_posix())
    repo = inspect_repository(root, querier, exclude=exclude, max_ascent=config.max_ascent)
    revision = reconcile(root, snapshot, repo)
    logger.debug("Resolved %s to %s via %s", root, revision, revision.source.value)
    return revision


def resolve_revision_string(
    package_root: Union[str, Path],
    querier: Optional[RepositoryQuerier] = None,
    config: Optional[RevisionConfig] = None,
) -> str:
    """Resolve and format the revision of the package rooted at package_root."""
    return resolve_revision(package_root, querier=querier, config=config).format()
