import json
import logging

import structlog

from cartola_ingest.logging_config import configure_logging


def test_configure_logging_json(capsys):
    """JSON mode renders one JSON object per event on stderr."""
    configure_logging(level="DEBUG", json_output=True)
    logger = structlog.get_logger("cartola_ingest.tests")
    logger.info("statement_parsed", file_name="a.xlsx", transactions=3)

    captured = capsys.readouterr()
    assert captured.out == ""
    event = json.loads(captured.err.strip().splitlines()[-1])
    assert event["event"] == "statement_parsed"
    assert event["transactions"] == 3
    assert event["level"] == "info"


def test_configure_logging_console_sets_level():
    configure_logging(level="warning", json_output=False)
    assert logging.getLogger().level == logging.WARNING
    assert structlog.get_logger() is not None
