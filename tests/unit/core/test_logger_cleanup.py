"""Tests for logger cleanup cascade via BaseCloseable."""

import pytest

from conflux.core.config import Config
from conflux.core.log import ConsoleSink, FileSink, Logger


def file_logger(path):
    return Logger(
        console=ConsoleSink(enabled=False),
        file=FileSink(enabled=True, path=str(path)),
    )


def test_logger_closes_file_via_context_manager(tmp_path, restore_logger):
    logger = file_logger(tmp_path / "test.log")
    logger.setup(log_root=tmp_path, session_name="test")

    assert logger.file._file is not None
    assert not logger.file._file.closed

    with logger:
        logger.info("test message")

    assert logger.file._file.closed


def test_logger_closes_on_exception(tmp_path, restore_logger):
    logger = file_logger(tmp_path / "test.log")
    logger.setup(log_root=tmp_path, session_name="test")

    with pytest.raises(ValueError), logger:
        logger.info("before exception")
        raise ValueError("test exception")

    assert logger.file._file.closed


def test_config_cascade_closes_logger(tmp_path, restore_logger):
    config = Config(
        logger=file_logger(tmp_path / "cascade.log"),
        log_root=tmp_path,
        session_name="cascade",
    )
    assert not config.logger.file._file.closed

    config.close()

    assert config.logger.file._file.closed


def test_file_written_and_flushed_on_close(tmp_path, restore_logger):
    log_file = tmp_path / "written.log"
    logger = file_logger(log_file)
    logger.setup(log_root=tmp_path, session_name="write-test")

    with logger:
        logger.info("test message to file")

    assert "test message to file" in log_file.read_text()


def test_sink_level_inherits_logger_level():
    logger = Logger(level="warn", file=FileSink(level="debug"))

    assert logger.console.level == "warn"
    assert logger.file.level == "debug"
