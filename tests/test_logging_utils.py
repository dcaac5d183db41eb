"""
Tests for the per-module console loggers.
"""

import logging

from utils.logging_utils import get_logger, setup_logger


class _Collector(logging.Handler):

    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


class TestLoggers:

    def test_logger_does_not_propagate_to_root(self):
        logger = get_logger("tests.logging.propagate")
        assert logger.propagate is False

        root = logging.getLogger()
        collector = _Collector()
        root.addHandler(collector)
        try:
            logger.info("only once")
        finally:
            root.removeHandler(collector)
        assert collector.records == []

    def test_repeated_setup_keeps_one_handler(self):
        for _ in range(3):
            logger = get_logger("tests.logging.repeat")
        assert len(logger.handlers) == 1

    def test_level_follows_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        assert get_logger("tests.logging.level").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        assert setup_logger("tests.logging.unknown", "chatty").level == logging.INFO
