"""Pytest configuration for ctx tests."""

import logging
from datetime import UTC
from datetime import datetime
from datetime import timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ctx_cli.clipboard import ClipboardSink
from ctx_cli.session import Session


class FakeClock:
    """Clock returning a fixed instant until advanced."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int = 1) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def ctx_home(tmp_path, monkeypatch):
    """Isolated ctx home so tests never touch ~/.ctx."""
    home = tmp_path / "ctx_home"
    monkeypatch.setenv("CTX_HOME", str(home))
    monkeypatch.setenv("CTX_LOG_PATH", str(tmp_path / "logs" / "ctx.log.jsonl"))
    return home


@pytest.fixture
def clipboard():
    sink = MagicMock(spec=ClipboardSink)
    sink.copy.return_value = "pyperclip"
    return sink


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 12, 30, 0, tzinfo=UTC))


@pytest.fixture
def session(ctx_home, clipboard, clock):
    return Session.open(ctx_home, clipboard=clipboard, clock=clock)


@pytest.fixture
def project(tmp_path) -> Path:
    """Small project tree with a few files the default exclude rule drops."""
    root = tmp_path / "proj"
    (root / "src").mkdir(parents=True)
    (root / "src" / "main.py").write_text("print('hi')\n")
    (root / "src" / "util.py").write_text("x = 1")
    (root / "README.md").write_text("# proj\n")
    (root / ".env").write_text("SECRET=1\n")
    (root / "package-lock.json").write_text("{}\n")
    (root / "node_modules" / "pkg").mkdir(parents=True)
    (root / "node_modules" / "pkg" / "index.js").write_text("module.exports = 1;\n")
    (root / ".git").mkdir()
    (root / ".git" / "config").write_text("[core]\n")
    return root


@pytest.fixture
def restore_root_logger():
    """Drop handlers a test added to the root logger and restore its level."""
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
