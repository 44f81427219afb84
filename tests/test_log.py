from __future__ import annotations

from pathlib import Path

from loguru import logger

from configdoc.log import LogConfigurator, configure_logging, reset_logging
from configdoc.settings import LoggingSettings


def test_file_sink_receives_records(tmp_path: Path, clean_logging: None) -> None:
    log_file = tmp_path / "logs" / "configdoc.log"
    configure_logging(LoggingSettings(level="debug", file_path=log_file))
    logger.debug("walking {}", "Config")

    reset_logging()
    content = log_file.read_text(encoding="utf-8")
    assert "walking Config" in content
    assert "DEBUG" in content


def test_configure_is_applied_once(tmp_path: Path, clean_logging: None) -> None:
    configurator = LogConfigurator()
    configurator.configure(LoggingSettings(file_path=tmp_path / "first.log"))
    configurator.configure(LoggingSettings(file_path=tmp_path / "second.log"))
    assert configurator.log_file_path == tmp_path / "first.log"
    configurator.reset()
    assert not configurator.is_configured
    assert not (tmp_path / "second.log").exists()


def test_level_filters_console_records(capsys, clean_logging: None) -> None:
    configure_logging(LoggingSettings(level="WARNING"))
    logger.info("quiet")
    logger.warning("loud")
    captured = capsys.readouterr()
    assert "quiet" not in captured.err
    assert "loud" in captured.err
