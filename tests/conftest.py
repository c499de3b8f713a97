"""Shared test fixtures and utilities."""

from pathlib import Path
from typing import Optional, Tuple

import pytest

from git_revision.config import RevisionConfig
from git_revision.errors import RepositoryQueryError

from tests.fixtures.repos import SHA_A, FakeQuerier, init_git_repo, snapshot_text


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's git and git-revision settings out of tests."""
    for var in (
        "GIT_DIR",
        "GIT_WORK_TREE",
        "GIT_INDEX_FILE",
        "GIT_CEILING_DIRECTORIES",
        "GIT_REVISION_GIT",
        "GIT_REVISION_TIMEOUT",
        "GIT_REVISION_METADATA_FILE",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def isolated_config():
    """Config that only looks for .git in the package root itself.

    tmp_path could sit below an unrelated repository; this keeps
    "no repository" tests independent of the machine layout.
    """
    return RevisionConfig(max_ascent=0)


@pytest.fixture
def fake_querier():
    """Factory fixture for FakeQuerier."""
    def _make(head: str = SHA_A, dirty: bool = False, error: Optional[Exception] = None):
        return FakeQuerier(head=head, dirty=dirty, error=error)
    return _make


@pytest.fixture
def failing_querier():
    return FakeQuerier(error=RepositoryQueryError("git query failed", command=["git", "status"], returncode=128))


@pytest.fixture
def git_repo(tmp_path):
    """Factory fixture creating committed repositories under tmp_path."""
    def _make(name: str = "repo", files: Optional[dict] = None) -> Tuple[Path, str]:
        root = tmp_path / name
        sha = init_git_repo(root, files)
        return root, sha
    return _make


@pytest.fixture
def write_snapshot():
    """Factory fixture writing .vcs_info.json into a directory."""
    def _write(directory: Path, sha1: str = SHA_A, path_in_vcs: Optional[str] = "") -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / ".vcs_info.json"
        path.write_text(snapshot_text(sha1, path_in_vcs))
        return path
    return _write
