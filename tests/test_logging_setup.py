"""Tests for logging configuration."""

import json
import logging

import pytest

from location_resolver.config import ObservabilityConfig
from location_resolver.logging_setup import JSONFormatter, KeyValueFormatter, configure_logging


def make_record(**extra):
    record = logging.LogRecord(
        name="location_resolver.services.location_resolver",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg="Source call failed, falling back",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    line = JSONFormatter().format(make_record(source="database", error="timeout"))

    entry = json.loads(line)
    assert entry["level"] == "WARNING"
    assert entry["message"] == "Source call failed, falling back"
    assert entry["source"] == "database"
    assert entry["error"] == "timeout"


def test_json_formatter_stringifies_unserializable_values():
    entry = json.loads(JSONFormatter().format(make_record(payload={1, 2})))

    assert isinstance(entry["payload"], str)


def test_key_value_formatter_appends_extra_fields():
    formatter = KeyValueFormatter("%(levelname)s %(message)s")

    line = formatter.format(make_record(source="external"))

    assert line == "WARNING Source call failed, falling back {source=external}"


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize("structured,formatter_type", [(True, JSONFormatter), (False, KeyValueFormatter)])
def test_configure_logging_installs_handler(restore_root_logger, structured, formatter_type):
    configure_logging(ObservabilityConfig(level="DEBUG", structured=structured))

    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, formatter_type)
