from __future__ import annotations

import logging
from pathlib import Path

import pytest

import mergeflow.core.logger as core_logger
from mergeflow_io.utils.log import resolve_log_dir


@pytest.fixture
def fresh_logger():
    core_logger.reset_logger()
    yield
    core_logger.reset_logger()


def test_app_logger_writes_rotating_file(tmp_path: Path, fresh_logger) -> None:
    logger = core_logger.get_logger(tmp_path / "logs")

    logger.info("merge started")
    for handler in logger.handlers:
        handler.flush()

    assert logger.name == "mergeflow"
    assert core_logger.get_logger() is logger
    assert "merge started" in (tmp_path / "logs" / "app.log").read_text(encoding="utf-8")


def test_set_level_by_name(tmp_path: Path, fresh_logger) -> None:
    core_logger.get_logger(tmp_path)

    assert core_logger.set_level("debug").level == logging.DEBUG

    with pytest.raises(ValueError):
        core_logger.set_level("LOUD")


def test_reset_detaches_handlers(tmp_path: Path, fresh_logger) -> None:
    logger = core_logger.get_logger(tmp_path)
    assert logger.handlers

    core_logger.reset_logger()

    assert logging.getLogger("mergeflow").handlers == []


def test_log_dir_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MERGEFLOW_LOG_DIR", str(tmp_path / "env-logs"))

    assert resolve_log_dir() == tmp_path / "env-logs"
    assert (tmp_path / "env-logs").is_dir()
    assert resolve_log_dir(tmp_path / "explicit") == tmp_path / "explicit"
