"""Tests for ctx path policy."""

from pathlib import Path

import pytest

from ctx_cli.paths import default_log_path
from ctx_cli.paths import get_ctx_home
from ctx_cli.paths import validate_record_name


def test_home_defaults_to_dot_ctx(monkeypatch, tmp_path):
    monkeypatch.delenv("CTX_HOME", raising=False)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    assert get_ctx_home() == tmp_path / ".ctx"


def test_home_override(monkeypatch, tmp_path):
    monkeypatch.setenv("CTX_HOME", str(tmp_path / "custom"))
    assert get_ctx_home() == tmp_path / "custom"


def test_log_path(monkeypatch, tmp_path):
    monkeypatch.delenv("CTX_LOG_PATH", raising=False)
    assert default_log_path(tmp_path) == tmp_path / "ctx.log.jsonl"

    monkeypatch.setenv("CTX_LOG_PATH", str(tmp_path / "other.jsonl"))
    assert default_log_path(tmp_path) == tmp_path / "other.jsonl"


@pytest.mark.parametrize("name", ["web", "my-app_2", "Ünï"])
def test_valid_names(name):
    assert validate_record_name(name) == name


@pytest.mark.parametrize("name", ["", "  ", "a/b", "a\\b", ".", ".."])
def test_invalid_names(name):
    with pytest.raises(ValueError):
        validate_record_name(name)
