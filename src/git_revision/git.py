"""Repository inspection through the git command line."""

import logging
import os
import re
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from .constants import DEFAULT_GIT_EXECUTABLE, DEFAULT_GIT_TIMEOUT, MAX_ASCENT
from .context import find_repository_root, resolve_git_dir
from .core import RepositoryState
from .errors import RepositoryQueryError

logger = logging.getLogger(__name__)

_COMMIT_ID = re.compile(r"^[0-9a-f]{40}(?:[0-9a-f]{24})?$")


class RepositoryQuerier(Protocol):
    """
    Protocol for repository query implementations.

    Both operations take a directory inside the working tree. Failures are
    reported as RepositoryQueryError, never as a default value.
    """

    def head_commit(self, directory: Path) -> str:
        """
        Commit id at HEAD.

        Raises:
            RepositoryQueryError: If HEAD is unborn or cannot be resolved
        """
        ...

    def is_dirty(self, directory: Path, exclude: Sequence[str] = ()) -> bool:
        """
        Whether the subtree rooted at directory has changes.

        Modified, staged, deleted and untracked (non-ignored) files count.
        Files outside directory never do.

        Args:
            directory: Subtree to check
            exclude: Paths relative to directory that never count
        """
        ...


class GitCliQuerier:
    """RepositoryQuerier backed by the git executable."""

    def __init__(self, executable: str = DEFAULT_GIT_EXECUTABLE, timeout: float = DEFAULT_GIT_TIMEOUT):
        self.executable = executable
        self.timeout = timeout

    def _run(self, directory: Path, args: List[str]) -> str:
        command = [self.executable, *args]
        logger.debug("Running %s in %s", " ".join(command), directory)

        # Read-only: keep git status from refreshing and locking the index
        env = dict(os.environ, GIT_OPTIONAL_LOCKS="0", LC_ALL="C")
        try:
            result = subprocess.run(
                command,
                cwd=str(directory),
                env=env,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self.timeout,
                check=False,  # Handle errors manually for better diagnostics
            )
        except FileNotFoundError as e:
            if not Path(directory).is_dir():
                raise RepositoryQueryError(
                    f"Directory {directory} does not exist", command=command
                ) from e
            raise RepositoryQueryError(
                f"git executable '{self.executable}' not found", command=command
            ) from e
        except subprocess.TimeoutExpired as e:
            raise RepositoryQueryError(
                f"git did not finish within {self.timeout:g}s", command=command
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise RepositoryQueryError(f"Failed to run git: {e}", command=command) from e

        if result.returncode != 0:
            raise RepositoryQueryError(
                "git query failed",
                command=command,
                returncode=result.returncode,
                stderr=result.stderr.strip(),
            )
        return result.stdout

    def head_commit(self, directory: Path) -> str:
        args = ["rev-parse", "--verify", "--quiet", "HEAD^{commit}"]
        try:
            out = self._run(directory, args).strip()
        except RepositoryQueryError as e:
            if e.returncode is None:
                raise
            raise RepositoryQueryError(
                f"HEAD is unborn or unresolvable in {directory}",
                command=e.command,
                returncode=e.returncode,
                stderr=e.stderr,
            ) from e

        if not _COMMIT_ID.match(out):
            raise RepositoryQueryError(
                f"Unexpected output for HEAD: {out!r}", command=[self.executable, *args]
            )
        return out

    def is_dirty(self, directory: Path, exclude: Sequence[str] = ()) -> bool:
        args = ["status", "--porcelain", "--untracked-files=normal", "--", "."]
        args.extend(f":(exclude,literal){Path(p).as_posix()}" for p in exclude)
        out = self._run(directory, args)

        changes = [line for line in out.splitlines() if line]
        for line in changes:
            # Porcelain v1: "XY <path>"
            if len(line) < 4 or line[2] != " ":
                raise RepositoryQueryError(
                    f"Unexpected git status line: {line!r}", command=[self.executable, *args]
                )
        if changes:
            logger.debug("%d changed path(s) under %s, first: %s", len(changes), directory, changes[0][3:])
        return bool(changes)


def inspect_repository(
    start: Path,
    querier: RepositoryQuerier,
    exclude: Sequence[str] = (),
    max_ascent: int = MAX_ASCENT,
) -> Optional[RepositoryState]:
    """Inspect the repository enclosing start, if any.

    Args:
        start: Package root; dirtiness is limited to this subtree
        querier: Query implementation
        exclude: Paths relative to start ignored by the dirtiness check
        max_ascent: Bound on the parent-directory search

    Returns:
        RepositoryState, or None if no repository encloses start

    Raises:
        RepositoryQueryError: If a repository was found but a query failed
    """
    start = start.resolve()
    root = find_repository_root(start, max_ascent=max_ascent)
    if root is None:
        return None

    head = querier.head_commit(start)
    dirty = querier.is_dirty(start, exclude)
    return RepositoryState(
        head_commit=head,
        is_dirty=dirty,
        root=root,
        git_dir=resolve_git_dir(root),
    )
