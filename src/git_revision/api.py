"""Stable API for git-revision.

This module provides a minimal, stable API surface for build backends and
build scripts. The primary consumer is a package's build hook, which needs
the revision of the directory being built, either as a string or as a
generated `_revision.py` module exposing GIT_REVISION.

Example build hook:

    from git_revision.api import stamp_dir
    stamp_dir("src/mypkg")

and in the package:

    from ._revision import GIT_REVISION
"""

from pathlib import Path
from typing import Optional, Union

from .build import stamp
from .resolver import resolve_revision_string


def get_revision(path: Union[str, Path] = ".") -> str:
    """Return the formatted revision of the package at path.

    Raises:
        RevisionError: If no trustworthy revision can be resolved
    """
    return resolve_revision_string(path)


def stamp_dir(path: Union[str, Path] = ".", target: Optional[Union[str, Path]] = None) -> str:
    """Write the revision module for the package at path and return the revision.

    Args:
        path: Package root directory
        target: Module to write (default: <path>/_revision.py)

    Raises:
        RevisionError: If no trustworthy revision can be resolved
    """
    result = stamp(path, target=Path(target) if target is not None else None)
    return result.revision.format()
