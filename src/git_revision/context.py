"""Package context: package root, enclosing repository discovery and paths."""

import logging
from pathlib import Path
from typing import Optional, Set, Union

from .constants import GIT_DIR, MAX_ASCENT, REVISION_MODULE, VCS_INFO_FILE

logger = logging.getLogger(__name__)


def find_repository_root(start: Path, max_ascent: int = MAX_ASCENT) -> Optional[Path]:
    """Walk up directory tree to find the first directory containing .git.

    Args:
        start: Directory to start searching from (inclusive)
        max_ascent: Maximum number of parent directories to visit

    Returns:
        Repository root, or None if the filesystem root is reached first
    """
    current = start.resolve()
    visited: Set[Path] = set()

    for _ in range(max_ascent + 1):
        if current in visited:
            break
        visited.add(current)

        if (current / GIT_DIR).exists():
            logger.debug("Found repository root %s", current)
            return current

        if current == current.parent:
            break
        current = current.parent.resolve()

    logger.debug("No repository encloses %s", start)
    return None


def resolve_git_dir(repo_root: Path) -> Optional[Path]:
    """Locate the directory holding HEAD for a repository root.

    Worktrees and submodules use a `.git` file containing `gitdir: <path>`
    instead of a directory.
    """
    entry = repo_root / GIT_DIR
    if entry.is_dir():
        return entry
    if not entry.is_file():
        return None

    try:
        first = entry.read_text(encoding="utf-8").splitlines()[0]
    except (OSError, UnicodeDecodeError, IndexError):
        return None
    if not first.startswith("gitdir:"):
        return None

    target = Path(first[len("gitdir:"):].strip())
    if not target.is_absolute():
        target = repo_root / target
    return target.resolve()


def resolve_common_dir(git_dir: Path) -> Path:
    """Locate the directory holding refs shared by all worktrees.

    A linked worktree's git dir names it in a `commondir` file; any other
    git dir is its own common dir.
    """
    pointer = git_dir / "commondir"
    try:
        value = pointer.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        return git_dir
    if not value:
        return git_dir

    target = Path(value)
    if not target.is_absolute():
        target = git_dir / target
    return target.resolve()


def path_in_repository(path: Path, repo_root: Path) -> str:
    """Path relative to the repository root, POSIX ('' at the top)."""
    rel = path.relative_to(repo_root).as_posix()
    return "" if rel == "." else rel


class PackageContext:
    """Manages package root and enclosing repository paths."""

    def __init__(self, root: Union[str, Path, None] = None, max_ascent: int = MAX_ASCENT):
        """Initialize context for a package directory.

        Args:
            root: Package root directory (default: current directory)
            max_ascent: Bound on the repository search
        """
        self.root = Path(root or Path.cwd()).resolve()
        if not self.root.is_dir():
            raise NotADirectoryError(f"Package root {self.root} is not a directory")
        self.repo_root = find_repository_root(self.root, max_ascent=max_ascent)

    @property
    def git_dir(self) -> Optional[Path]:
        """Get the git control directory, if inside a repository."""
        if self.repo_root is None:
            return None
        return resolve_git_dir(self.repo_root)

    @property
    def common_dir(self) -> Optional[Path]:
        """Get the directory holding branch refs (differs from git_dir in worktrees)."""
        git_dir = self.git_dir
        return resolve_common_dir(git_dir) if git_dir is not None else None

    def resolve(self, path: Union[str, Path]) -> Path:
        """Convert any path to package-relative path."""
        p = Path(path)
        absolute = p if p.is_absolute() else (self.root / p)
        try:
            return absolute.resolve().relative_to(self.root)
        except ValueError:
            raise ValueError(f"Path {p} is outside package {self.root}")

    def snapshot_path(self, filename: str = VCS_INFO_FILE) -> Path:
        """Get path to the metadata snapshot file."""
        return self.root / filename

    def module_path(self, module_name: str = REVISION_MODULE) -> Path:
        """Get default path of the generated revision module."""
        return self.root / module_name
