"""Tests for directory expansion."""

import os

import pytest

from ctx_cli.errors import FilesystemError
from ctx_cli.files import DirectoryExpander
from ctx_cli.files import WalkAction
from ctx_cli.files import expand_directory
from ctx_cli.files import walk_tree
from ctx_cli.models import ExcludeRule


class TestDirectoryExpander:
    def test_node_modules_pruned(self, tmp_path):
        root = tmp_path / "root"
        (root / "node_modules" / "pkg").mkdir(parents=True)
        (root / "node_modules" / "pkg" / "index.js").write_text("x")
        (root / "src").mkdir()
        (root / "src" / "main.go").write_text("package main\n")

        rule = ExcludeRule(name="r", patterns=["**/node_modules/**"])

        assert expand_directory(str(root), rule) == [str(root / "src" / "main.go")]

    def test_default_rule_filters_tree(self, project):
        files = expand_directory(str(project), ExcludeRule.default())

        assert files == [
            str(project / "README.md"),
            str(project / "src" / "main.py"),
            str(project / "src" / "util.py"),
        ]

    def test_no_rule_returns_everything(self, project):
        files = DirectoryExpander().expand(str(project))

        assert str(project / ".env") in files
        assert str(project / "node_modules" / "pkg" / "index.js") in files
        assert str(project / ".git" / "config") in files
        assert len(files) == 7

    def test_paths_are_absolute(self, project, monkeypatch):
        monkeypatch.chdir(project.parent)
        files = expand_directory("proj", ExcludeRule.default())

        assert files
        assert all(os.path.isabs(f) for f in files)

    def test_excluded_directories_are_never_read(self, project, monkeypatch):
        scanned = []
        real_scandir = os.scandir

        def spy(path):
            scanned.append(str(path))
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", spy)
        expand_directory(str(project), ExcludeRule.default())

        assert str(project) in scanned
        assert not any("node_modules" in p for p in scanned)
        assert not any(".git" in p for p in scanned)

    def test_excluded_root_yields_nothing(self, project):
        rule = ExcludeRule(name="all", patterns=["proj"])
        assert expand_directory(str(project), rule) == []

    def test_missing_root(self, tmp_path):
        with pytest.raises(FilesystemError, match="not a directory"):
            expand_directory(str(tmp_path / "nope"))

    def test_file_root(self, project):
        with pytest.raises(FilesystemError):
            expand_directory(str(project / "README.md"))

    def test_unreadable_subdirectory_fails_whole_expansion(self, project, monkeypatch):
        real_scandir = os.scandir
        blocked = str(project / "src")

        def failing(path):
            if str(path) == blocked:
                raise PermissionError(13, "Permission denied", blocked)
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", failing)

        with pytest.raises(FilesystemError) as exc_info:
            expand_directory(str(project), ExcludeRule.default())
        assert exc_info.value.path == blocked

    def test_symlinked_directory_is_not_followed(self, project, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_text("s\n")
        os.symlink(outside, project / "link")

        files = expand_directory(str(project), ExcludeRule.default())

        assert not any("secret.txt" in f for f in files)


class TestWalkTree:
    def test_visits_root_first_then_name_order(self, project):
        visited = []

        def visit(path, is_dir):
            visited.append((os.path.relpath(path, project), is_dir))
            return WalkAction.CONTINUE

        walk_tree(str(project), visit)

        assert visited[0] == (".", True)
        names = [p for p, _ in visited]
        assert names.index("src") < names.index(os.path.join("src", "main.py"))
        assert names.index(os.path.join("src", "main.py")) < names.index(os.path.join("src", "util.py"))

    def test_skip_subtree(self, project):
        visited = []

        def visit(path, is_dir):
            visited.append(path)
            if is_dir and path.endswith("src"):
                return WalkAction.SKIP_SUBTREE
            return WalkAction.CONTINUE

        walk_tree(str(project), visit)

        assert str(project / "src") in visited
        assert str(project / "src" / "main.py") not in visited
