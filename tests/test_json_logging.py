import io
import json
import logging

import pytest

from four_seasons_catalog.log import LOGGER_PREFIX, configure_logging, get_logger


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    logger = logging.getLogger(LOGGER_PREFIX)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def test_get_logger_is_namespaced():
    assert get_logger("cms").name == "fsc.cms"


def test_json_lines_include_extra_fields():
    stream = io.StringIO()
    configure_logging("info", json_lines=True, stream=stream)

    get_logger("cms").info("fetched %s", "developer", extra={"status": 200})

    event = json.loads(stream.getvalue().strip())
    assert event["level"] == "INFO"
    assert event["logger"] == "fsc.cms"
    assert event["msg"] == "fetched developer"
    assert event["status"] == 200
    assert "ts" in event


def test_exceptions_are_serialized():
    stream = io.StringIO()
    configure_logging("error", json_lines=True, stream=stream)

    try:
        raise ValueError("bad payload")
    except ValueError:
        get_logger("search").exception("Error filtering compounds")

    event = json.loads(stream.getvalue().strip())
    assert "ValueError: bad payload" in event["exc"]


def test_default_level_hides_info():
    stream = io.StringIO()
    configure_logging(stream=stream)
    get_logger("cms").info("quiet")
    get_logger("cms").warning("loud")
    assert "quiet" not in stream.getvalue()
    assert "loud" in stream.getvalue()


def test_reconfiguring_replaces_handlers():
    configure_logging(stream=io.StringIO())
    logger = configure_logging(stream=io.StringIO())
    assert len(logger.handlers) == 1
    assert logger.propagate is False
