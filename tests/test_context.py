"""Tests for package context and repository discovery."""

import os
from pathlib import Path

import pytest

from git_revision.context import (
    PackageContext,
    find_repository_root,
    path_in_repository,
    resolve_common_dir,
    resolve_git_dir,
)


class TestFindRepositoryRoot:
    """Test the upward search for a repository root."""

    def test_root_itself(self, tmp_path):
        (tmp_path / ".git").mkdir()

        assert find_repository_root(tmp_path) == tmp_path.resolve()

    def test_nested_package(self, tmp_path):
        """Repository root several levels above the package."""
        (tmp_path / ".git").mkdir()
        pkg = tmp_path / "crates" / "deep" / "pkg"
        pkg.mkdir(parents=True)

        assert find_repository_root(pkg) == tmp_path.resolve()

    def test_nearest_wins(self, tmp_path):
        """A nested repository shadows the outer one."""
        (tmp_path / ".git").mkdir()
        inner = tmp_path / "vendor" / "inner"
        (inner / ".git").mkdir(parents=True)
        pkg = inner / "pkg"
        pkg.mkdir()

        assert find_repository_root(pkg) == inner.resolve()

    def test_git_file(self, tmp_path):
        """Worktrees and submodules have a .git file."""
        (tmp_path / ".git").write_text("gitdir: /elsewhere/.git/worktrees/x\n")

        assert find_repository_root(tmp_path) == tmp_path.resolve()

    def test_no_repository(self, tmp_path):
        pkg = tmp_path / "pkg"
        pkg.mkdir()

        assert find_repository_root(pkg, max_ascent=1) is None

    def test_max_ascent_bounds_search(self, tmp_path):
        (tmp_path / ".git").mkdir()
        pkg = tmp_path / "a" / "b" / "c"
        pkg.mkdir(parents=True)

        assert find_repository_root(pkg, max_ascent=2) is None
        assert find_repository_root(pkg, max_ascent=3) == tmp_path.resolve()

    def test_terminates_at_filesystem_root(self):
        """The walk stops at / even with a generous bound."""
        root = Path(os.path.abspath(os.sep))
        result = find_repository_root(root, max_ascent=10_000)
        assert result is None or result == root

    def test_symlinked_package(self, tmp_path):
        """Symlinks are resolved before ascending."""
        repo = tmp_path / "repo"
        (repo / ".git").mkdir(parents=True)
        pkg = repo / "pkg"
        pkg.mkdir()
        link = tmp_path / "link"
        try:
            link.symlink_to(pkg, target_is_directory=True)
        except OSError:
            pytest.skip("symlinks not supported")

        assert find_repository_root(link, max_ascent=2) == repo.resolve()


class TestResolveGitDir:
    """Test locating the control directory."""

    def test_directory(self, tmp_path):
        (tmp_path / ".git").mkdir()

        assert resolve_git_dir(tmp_path) == tmp_path / ".git"

    def test_relative_gitdir_file(self, tmp_path):
        real = tmp_path / "main" / ".git" / "worktrees" / "wt"
        real.mkdir(parents=True)
        wt = tmp_path / "wt"
        wt.mkdir()
        (wt / ".git").write_text("gitdir: ../main/.git/worktrees/wt\n")

        assert resolve_git_dir(wt) == real.resolve()

    def test_absolute_gitdir_file(self, tmp_path):
        real = tmp_path / "modules" / "sub"
        real.mkdir(parents=True)
        (tmp_path / ".git").write_text(f"gitdir: {real}\n")

        assert resolve_git_dir(tmp_path) == real.resolve()

    def test_garbage_file(self, tmp_path):
        (tmp_path / ".git").write_text("not a pointer\n")

        assert resolve_git_dir(tmp_path) is None

    def test_missing(self, tmp_path):
        assert resolve_git_dir(tmp_path) is None


class TestResolveCommonDir:
    """Test locating the refs shared by linked worktrees."""

    def test_plain_repository(self, tmp_path):
        assert resolve_common_dir(tmp_path) == tmp_path

    def test_relative_commondir(self, tmp_path):
        wt_git = tmp_path / ".git" / "worktrees" / "wt"
        wt_git.mkdir(parents=True)
        (wt_git / "commondir").write_text("../..\n")

        assert resolve_common_dir(wt_git) == (tmp_path / ".git").resolve()

    def test_absolute_commondir(self, tmp_path):
        common = tmp_path / "common"
        common.mkdir()
        (tmp_path / "commondir").write_text(f"{common}\n")

        assert resolve_common_dir(tmp_path) == common.resolve()

    def test_empty_commondir(self, tmp_path):
        (tmp_path / "commondir").write_text("\n")

        assert resolve_common_dir(tmp_path) == tmp_path


@pytest.mark.parametrize("rel, expected", [
    (".", ""),
    ("pkg", "pkg"),
    ("libs/pkg", "libs/pkg"),
])
def test_path_in_repository(tmp_path, rel, expected):
    assert path_in_repository(tmp_path / rel, tmp_path) == expected


class TestPackageContext:
    """Test package context paths."""

    def test_defaults_to_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        ctx = PackageContext(max_ascent=0)

        assert ctx.root == tmp_path.resolve()
        assert ctx.repo_root is None
        assert ctx.git_dir is None
        assert ctx.common_dir is None

    def test_nested_package(self, tmp_path):
        (tmp_path / ".git").mkdir()
        pkg = tmp_path / "libs" / "pkg"
        pkg.mkdir(parents=True)

        ctx = PackageContext(pkg)

        assert ctx.repo_root == tmp_path.resolve()
        assert ctx.git_dir == tmp_path.resolve() / ".git"
        assert ctx.common_dir == tmp_path.resolve() / ".git"

    def test_not_a_directory(self, tmp_path):
        f = tmp_path / "file.txt"
        f.write_text("x")

        with pytest.raises(NotADirectoryError):
            PackageContext(f)

    def test_resolve(self, tmp_path):
        ctx = PackageContext(tmp_path, max_ascent=0)

        assert ctx.resolve("sub/_revision.py") == Path("sub/_revision.py")
        assert ctx.resolve(tmp_path / "_revision.py") == Path("_revision.py")
        with pytest.raises(ValueError, match="outside package"):
            ctx.resolve(tmp_path.parent / "elsewhere.py")

    def test_paths(self, tmp_path):
        ctx = PackageContext(tmp_path, max_ascent=0)

        assert ctx.snapshot_path() == tmp_path.resolve() / ".vcs_info.json"
        assert ctx.snapshot_path("x.json") == tmp_path.resolve() / "x.json"
        assert ctx.module_path() == tmp_path.resolve() / "_revision.py"
