import logging
import logging.handlers

import pytest

from timesaver.config import SolverConfig, parse_sidings
from timesaver.core.errors import ConfigurationError
from timesaver.logging_config import KeyValueFormatter, get_logger, setup_logging


def test_parse_sidings():
    assert parse_sidings("A=2, B=3,C=1") == {"A": 2, "B": 3, "C": 1}
    assert parse_sidings("") == {}
    with pytest.raises(ConfigurationError):
        parse_sidings("A2")
    with pytest.raises(ConfigurationError):
        parse_sidings("A=two")


def test_default_config_sidings_parse():
    cfg = SolverConfig(sidings="A=2,B=3,C=1,D=2,E=1")
    assert cfg.siding_lengths == {"A": 2, "B": 3, "C": 1, "D": 2, "E": 1}


def test_formatter_appends_structured_extra():
    record = logging.LogRecord("timesaver.test", logging.INFO, __file__, 1, "Search finished", None, None)
    record.extra_info = {"steps": 12, "status": "solved"}
    line = KeyValueFormatter().format(record)
    assert "[timesaver.test] Search finished | steps=12 | status=solved" in line


def test_structured_logger_moves_extra(caplog):
    log = get_logger("timesaver.test")
    with caplog.at_level(logging.INFO, logger="timesaver.test"):
        log.info("hello", extra={"k": "v"})
    assert caplog.records[-1].extra_info == {"k": "v"}


def test_setup_logging_twice_closes_file_handler(tmp_path):
    root = logging.getLogger()
    saved_level, saved = root.level, list(root.handlers)
    for h in saved:
        root.removeHandler(h)
    try:
        setup_logging("INFO", tmp_path / "a.log")
        first = [h for h in root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(first) == 1
        setup_logging("INFO", tmp_path / "b.log")
        assert first[0].stream is None
        files = [h for h in root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(files) == 1 and files[0] is not first[0]
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved:
            root.addHandler(h)
        root.setLevel(saved_level)
