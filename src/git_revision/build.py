"""Build integration: expose the resolved revision to a package's build output."""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from .config import RevisionConfig, load_config
from .constants import REVISION_CONSTANT
from .context import PackageContext
from .core import ResolvedRevision
from .git import RepositoryQuerier
from .resolver import resolve_revision

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Outcome of stamping a package."""
    revision: ResolvedRevision
    module_path: Path
    watch_paths: List[Path] = field(default_factory=list)


def render_revision_module(revision: Union[ResolvedRevision, str]) -> str:
    """Render Python source defining GIT_REVISION."""
    value = revision.format() if isinstance(revision, ResolvedRevision) else revision
    if not value:
        raise ValueError("Refusing to render an empty revision")
    return (
        "# Generated by git-revision at build time. Do not edit.\n"
        f"{REVISION_CONSTANT} = {value!r}\n"
    )


def _atomic_write_text(path: Path, text: str) -> None:
    """Atomically write text to file.

    Writes to a temp file in the same directory, fsyncs it, then renames it
    over the target.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        delete=False,
        dir=path.parent,
        prefix=f".{path.name}.tmp-",
        suffix="",
    ) as f:
        f.write(text)
        f.flush()
        os.fsync(f.fileno())
        tmp = Path(f.name)

    try:
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def write_revision_module(target: Path, revision: Union[ResolvedRevision, str]) -> Path:
    """Write the generated module, leaving it untouched if already current.

    Returns:
        Path of the module
    """
    text = render_revision_module(revision)
    if target.exists() and target.read_text(encoding="utf-8") == text:
        logger.debug("%s already up to date", target)
        return target
    _atomic_write_text(target, text)
    logger.debug("Wrote %s", target)
    return target


def watch_paths(ctx: PackageContext, config: Optional[RevisionConfig] = None) -> List[Path]:
    """Files whose change can alter the resolved revision.

    Build tools can use these to decide when to re-run stamping:
      - the metadata snapshot
      - <git dir>/index: staged changes, and so dirtiness
      - <git dir>/HEAD: the checked-out ref or commit
      - <common dir>/refs, <common dir>/packed-refs: the commit a symbolic
        HEAD points to

    The common dir is the git dir itself except in a linked worktree.
    """
    config = config or RevisionConfig()
    paths = [ctx.snapshot_path(config.metadata_file)]
    git_dir = ctx.git_dir
    if git_dir is not None:
        common_dir = ctx.common_dir
        paths.extend([
            git_dir / "index",
            git_dir / "HEAD",
            common_dir / "refs",
            common_dir / "packed-refs",
        ])
    return paths


def stamp(
    package_root: Union[str, Path, None] = None,
    target: Optional[Path] = None,
    querier: Optional[RepositoryQuerier] = None,
    config: Optional[RevisionConfig] = None,
) -> BuildResult:
    """Resolve the revision and write it as a module into the package.

    The generated module is excluded from the dirtiness check, so stamping
    twice in a row yields the same revision.

    Args:
        package_root: Package root (default: current directory)
        target: Module to write (default: <package_root>/_revision.py)
        querier: Repository query implementation (default: git CLI)
        config: Resolution settings (default: loaded from package_root)

    Raises:
        RevisionError: Any resolution failure; nothing is written then
    """
    root = Path(package_root or Path.cwd()).resolve()
    if config is None:
        config = load_config(root)
    ctx = PackageContext(root, max_ascent=config.max_ascent)
    target = Path(target) if target is not None else ctx.module_path(config.module_name)
    if not target.is_absolute():
        target = ctx.root / target

    exclude = []
    try:
        exclude.append(ctx.resolve(target).as_posix())
    except ValueError:
        pass  # outside the package, cannot dirty it

    revision = resolve_revision(ctx.root, querier=querier, config=config, exclude=exclude)
    module_path = write_revision_module(target, revision)
    return BuildResult(
        revision=revision,
        module_path=module_path,
        watch_paths=watch_paths(ctx, config),
    )
