"""Tests for the JSONL logging sink."""

import json
import logging

import ctx_cli.logging_setup as logging_setup
from ctx_cli.logging_setup import JsonlHandler
from ctx_cli.logging_setup import init_json_logging


def read_lines(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


def test_writes_one_json_object_per_record(tmp_path, restore_root_logger):
    log_path = tmp_path / "logs" / "ctx.log.jsonl"
    init_json_logging(log_path, "INFO")

    logging.getLogger("ctx_cli.test").info("Added 3 files", extra={"context": "web"})
    logging.getLogger("ctx_cli.test").debug("not written")

    [record] = read_lines(log_path)
    assert record["lvl"] == "INFO"
    assert record["logger"] == "ctx_cli.test"
    assert record["message"] == "Added 3 files"
    assert record["context"] == "web"
    assert record["schema"]["name"] == "ctx.log"


def test_reinit_replaces_handler(tmp_path, restore_root_logger):
    init_json_logging(tmp_path / "a.jsonl", "DEBUG")
    init_json_logging(tmp_path / "b.jsonl", "DEBUG")

    handlers = [h for h in logging.getLogger().handlers if isinstance(h, JsonlHandler)]
    assert len(handlers) == 1
    assert handlers[0].path == tmp_path / "b.jsonl"


def test_exception_info_included(tmp_path, restore_root_logger):
    log_path = tmp_path / "ctx.log.jsonl"
    init_json_logging(log_path, "DEBUG")

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logging.getLogger("ctx_cli.test").exception("Failed")

    [record] = read_lines(log_path)
    assert "RuntimeError: boom" in record["exc"]


def test_level_from_environment(tmp_path, monkeypatch, restore_root_logger):
    monkeypatch.setattr(logging_setup, "DEFAULT_LEVEL", "WARNING")
    init_json_logging(tmp_path / "ctx.log.jsonl")

    assert logging.getLogger().level == logging.WARNING


def test_write_failure_is_silent(tmp_path, capsys):
    log_dir = tmp_path / "ctx.log.jsonl"
    log_dir.mkdir()
    handler = JsonlHandler(log_dir)

    handler.emit(logging.LogRecord("ctx_cli.test", logging.INFO, __file__, 1, "Added", None, None))

    assert capsys.readouterr().err == ""
