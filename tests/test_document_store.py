"""Tests for the YAML document store."""

import pytest
import yaml

from ctx_cli.errors import NotFoundError
from ctx_cli.errors import PersistenceError
from ctx_cli.models import Context
from ctx_cli.storage import DocumentStore
from ctx_cli.storage import read_yaml
from ctx_cli.storage import write_yaml


@pytest.fixture
def store(tmp_path):
    store = DocumentStore(tmp_path / "home")
    store.ensure_dirs()
    return store


class TestDocumentStore:
    def test_context_roundtrip(self, store):
        ctx = Context(
            name="web",
            project_root="/home/u/web",
            project_context="Line one\nline two: with colon\n",
            request="Ünïcode request",
            files=["/home/u/web/a.py", "/home/u/web/[weird] name.py"],
        )

        store.save("context", "web", ctx.to_record())
        loaded = Context.model_validate(store.load("context", "web"))

        assert loaded == ctx

    def test_layout(self, store):
        store.save("context", "a", {"name": "a"})
        store.save("exclude", "b", {"name": "b", "patterns": []})

        assert (store.home / "contexts" / "a.yaml").is_file()
        assert (store.home / "excludes" / "b.yaml").is_file()

    def test_keys_written_in_model_order(self, store):
        store.save("context", "a", Context(name="a").to_record())
        text = (store.home / "contexts" / "a.yaml").read_text()
        assert text.index("name:") < text.index("files:")

    def test_list_sorted(self, store):
        for name in ("zeta", "alpha", "mid"):
            store.save("context", name, {"name": name})
        (store.home / "contexts" / "stray.txt").write_text("x")

        assert store.list("context") == ["alpha", "mid", "zeta"]
        assert store.list("exclude") == []

    def test_load_missing(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            store.load("context", "ghost")
        assert str(exc_info.value) == "context 'ghost' not found"

    def test_delete(self, store):
        store.save("context", "tmp", {"name": "tmp"})
        store.delete("context", "tmp")

        assert not store.exists("context", "tmp")
        with pytest.raises(NotFoundError):
            store.delete("context", "tmp")

    @pytest.mark.parametrize("name", ["", "../escape", "a/b", "a\\b", ".", ".."])
    def test_invalid_names(self, store, name):
        with pytest.raises(ValueError):
            store.save("context", name, {})
        assert not store.exists("context", name)

    def test_unknown_kind(self, store):
        with pytest.raises(ValueError):
            store.load("profile", "x")

    def test_config_roundtrip(self, store):
        assert not store.has_config()
        store.save_config({"active_context": "web", "skip_prefixes": ["src"]})

        assert store.has_config()
        assert store.load_config() == {"active_context": "web", "skip_prefixes": ["src"]}


class TestYamlIO:
    def test_no_temp_files_left_behind(self, tmp_path):
        target = tmp_path / "doc.yaml"
        write_yaml(target, {"a": 1})
        write_yaml(target, {"a": 2})

        assert read_yaml(target) == {"a": 2}
        assert [p.name for p in tmp_path.iterdir()] == ["doc.yaml"]

    def test_empty_file_reads_as_empty_mapping(self, tmp_path):
        target = tmp_path / "empty.yaml"
        target.write_text("")
        assert read_yaml(target) == {}

    def test_corrupt_yaml(self, tmp_path):
        target = tmp_path / "bad.yaml"
        target.write_text("key: [unclosed\n")
        with pytest.raises(PersistenceError):
            read_yaml(target)

    def test_non_mapping(self, tmp_path):
        target = tmp_path / "list.yaml"
        target.write_text(yaml.safe_dump(["a", "b"]))
        with pytest.raises(PersistenceError):
            read_yaml(target)

    def test_missing_file_propagates(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_yaml(tmp_path / "nope.yaml")

    def test_unwritable_target(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(PersistenceError):
            write_yaml(blocker / "child.yaml", {"a": 1})
