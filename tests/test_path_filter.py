"""Tests for glob-based path exclusion."""

import pytest

from ctx_cli.files import PathFilter
from ctx_cli.files import matches
from ctx_cli.files import should_exclude
from ctx_cli.models import ExcludeRule


class TestMatches:
    @pytest.mark.parametrize(
        ("pattern", "path"),
        [
            ("**/node_modules/**", "/home/u/proj/node_modules/pkg/index.js"),
            ("**/node_modules/**", "/home/u/proj/node_modules"),
            ("**/.env.*", "/srv/app/.env.local"),
            ("**/*.env", "/srv/app/prod.env"),
            ("**/src/*.py", "/home/u/proj/src/main.py"),
            ("*.py", "main.py"),
            ("**", "/anything/at/all"),
            ("**/**/yarn.lock", "/p/yarn.lock"),
            ("/a/?.txt", "/a/b.txt"),
            ("/a/[bc].txt", "/a/c.txt"),
        ],
    )
    def test_matching(self, pattern, path):
        assert matches(pattern, path)

    @pytest.mark.parametrize(
        ("pattern", "path"),
        [
            ("*.py", "/home/u/main.py"),
            ("**/.env.*", "/srv/app/.envrc"),
            ("**/.git/**", "/p/.github/workflows/ci.yml"),
            ("src/*.py", "/home/u/proj/src/main.py"),
            ("**/src/*.py", "/home/u/proj/src/pkg/main.py"),
            ("/a/?.txt", "/a/bb.txt"),
        ],
    )
    def test_not_matching(self, pattern, path):
        assert not matches(pattern, path)

    def test_empty_pattern_never_matches(self):
        assert not matches("", "/a/b")

    def test_malformed_pattern_does_not_raise(self):
        assert not matches("[", "/a/b")
        assert not matches("**/[z-a]", "/a/b")


class TestPathFilter:
    def test_base_name_is_checked(self):
        rule = ExcludeRule(name="r", patterns=["*.lock"])
        assert PathFilter(rule).should_exclude("/p/deep/dir/Cargo.lock")

    def test_trailing_slash_base_name(self):
        rule = ExcludeRule(name="r", patterns=["build"])
        assert PathFilter(rule).should_exclude("/p/build/")

    def test_no_rule_excludes_nothing(self):
        assert not PathFilter(None).should_exclude("/p/.env")
        assert not should_exclude("/p/.env", ExcludeRule(name="empty"))

    @pytest.mark.parametrize(
        "path",
        [
            "/p/.env",
            "/p/.env.production",
            "/p/app.env",
            "/p/package-lock.json",
            "/p/web/pnpm-lock.yaml",
            "/p/yarn.lock",
            "/p/.git",
            "/p/.git/HEAD",
            "/p/node_modules",
            "/p/a/node_modules/b/c.js",
        ],
    )
    def test_default_rule_excludes(self, path):
        assert should_exclude(path, ExcludeRule.default())

    @pytest.mark.parametrize("path", ["/p/main.py", "/p/.github/ci.yml", "/p/env.py", "/p/src"])
    def test_default_rule_keeps(self, path):
        assert not should_exclude(path, ExcludeRule.default())
