"""Published metadata snapshot reader."""

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import VCS_INFO_FILE
from .core import VcsSnapshot
from .errors import CorruptMetadataError

logger = logging.getLogger(__name__)


class VcsInfoGit(BaseModel):
    """The `git` object of a metadata file."""

    model_config = ConfigDict(extra="allow", str_strip_whitespace=True)

    sha1: str = Field(..., min_length=1)


class VcsInfoFile(BaseModel):
    """
    On-disk shape of the metadata file:

        {"git": {"sha1": "<commit>"}, "path_in_vcs": "<subdir>"}

    Extra keys (e.g. git.dirty) are tolerated and ignored.
    """

    model_config = ConfigDict(extra="allow")

    git: VcsInfoGit
    path_in_vcs: Optional[str] = None

    def to_snapshot(self) -> VcsSnapshot:
        return VcsSnapshot(commit_hash=self.git.sha1, source_path=self.path_in_vcs)


def _describe(exc: ValidationError) -> str:
    """Condense pydantic errors into one line."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def read_snapshot(package_root: Path, filename: str = VCS_INFO_FILE) -> Optional[VcsSnapshot]:
    """Read the metadata snapshot in package_root.

    Args:
        package_root: Package root directory
        filename: Snapshot file name inside package_root

    Returns:
        VcsSnapshot, or None if the file does not exist

    Raises:
        CorruptMetadataError: If the file exists but is unreadable or malformed
    """
    path = package_root / filename
    if not path.exists():
        logger.debug("No metadata snapshot at %s", path)
        return None

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CorruptMetadataError(path, f"unreadable ({e})") from e

    try:
        info = VcsInfoFile.model_validate_json(raw)
    except ValidationError as e:
        raise CorruptMetadataError(path, _describe(e)) from e

    snapshot = info.to_snapshot()
    logger.debug("Metadata snapshot %s records commit %s", path, snapshot.commit_hash)
    return snapshot
