# tests/test_logging.py
"""
Test the structured JSON log format.
"""

import json
import logging

import pytest

from flightwatch.logging import StructuredLogFormatter, configure_logging, get_logger


class Capture(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


class TestStructuredLogging:

    def test_fields_are_merged_into_json(self):
        logger = get_logger("flightwatch.tests.logging")
        handler = Capture()
        logging.getLogger(logger.name).addHandler(handler)
        logging.getLogger(logger.name).setLevel(logging.DEBUG)
        try:
            logger.info("flight_checked", flight_id="f1", new_color="RED")
        finally:
            logging.getLogger(logger.name).removeHandler(handler)

        line = json.loads(StructuredLogFormatter().format(handler.records[0]))
        assert line["message"] == "flight_checked"
        assert line["flight_id"] == "f1"
        assert line["new_color"] == "RED"
        assert line["level"] == "INFO"

    def test_errors_carry_source(self):
        record = logging.LogRecord("x", logging.ERROR, "scheduler.py", 10, "boom", None, None)
        line = json.loads(StructuredLogFormatter().format(record))
        assert line["source"]["line"] == 10

    def test_bound_context_is_merged(self):
        logger = get_logger("flightwatch.tests.bound").bind(flight_id="f9", run="r1")
        handler = Capture()
        logging.getLogger(logger.name).addHandler(handler)
        logging.getLogger(logger.name).setLevel(logging.DEBUG)
        try:
            logger.warning("alert_not_delivered", run="r2")
        finally:
            logging.getLogger(logger.name).removeHandler(handler)

        line = json.loads(StructuredLogFormatter().format(handler.records[0]))
        assert line["flight_id"] == "f9"
        assert line["run"] == "r2"
        assert line["service"] == "flightwatch"

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError):
            configure_logging("LOUD", force=True)
