"""Tests for centralized logging."""

import json
import logging
import sys

from tierplan.infrastructure.logging import (
    ContextFormatter,
    JSONFormatter,
    configure_logging,
    level_from_name,
)


class TestConfigureLogging:
    def test_default_level(self):
        configure_logging(level=logging.INFO)
        logger = logging.getLogger("tierplan")
        assert logger.level == logging.INFO

    def test_debug_level(self):
        configure_logging(level=logging.DEBUG)
        logger = logging.getLogger("tierplan")
        assert logger.level == logging.DEBUG

    def test_json_format(self):
        configure_logging(level=logging.INFO, json_format=True)
        logger = logging.getLogger("tierplan")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_human_format(self):
        configure_logging(level=logging.INFO, json_format=False)
        logger = logging.getLogger("tierplan")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, ContextFormatter)

    def test_replaces_handlers(self):
        configure_logging(level=logging.INFO)
        configure_logging(level=logging.WARNING)
        logger = logging.getLogger("tierplan")
        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING


class TestLevelFromName:
    def test_known_names(self):
        assert level_from_name("DEBUG") == logging.DEBUG
        assert level_from_name("info") == logging.INFO

    def test_unknown_name_falls_back(self):
        assert level_from_name("LOUD") == logging.WARNING
        assert level_from_name("", default=logging.ERROR) == logging.ERROR


class TestJSONFormatter:
    def test_format_basic(self):
        formatter = JSONFormatter()
        record = logging.LogRecord(
            name="tierplan.domain.services.topology_expander",
            level=logging.DEBUG,
            pathname="topology_expander.py",
            lineno=1,
            msg="Expanded %s: %d topology element(s)",
            args=("elasticsearch", 5),
            exc_info=None,
        )
        data = json.loads(formatter.format(record))
        assert data["message"] == "Expanded elasticsearch: 5 topology element(s)"
        assert data["level"] == "DEBUG"
        assert data["logger"] == "tierplan.domain.services.topology_expander"
        assert "timestamp" in data

    def test_format_with_exception(self):
        formatter = JSONFormatter()
        try:
            raise ValueError("test error")
        except ValueError:
            exc_info = sys.exc_info()

        record = logging.LogRecord(
            name="test",
            level=logging.ERROR,
            pathname="test.py",
            lineno=1,
            msg="error occurred",
            args=(),
            exc_info=exc_info,
        )
        data = json.loads(formatter.format(record))
        assert "exception" in data
        assert "ValueError" in data["exception"]

    def test_format_with_context(self):
        record = logging.makeLogRecord(
            {
                "name": "tierplan.domain.services.dedicated_tier_controller",
                "levelno": logging.DEBUG,
                "levelname": "DEBUG",
                "msg": "Disabling master tier",
                "component": "elasticsearch",
                "tier": "master",
            }
        )
        data = json.loads(JSONFormatter().format(record))
        assert data["component"] == "elasticsearch"
        assert data["tier"] == "master"
        assert "deployment_id" not in data


class TestContextFormatter:
    def _record(self, **context):
        return logging.makeLogRecord(
            {
                "name": "tierplan.domain.services.topology_projector",
                "levelno": logging.DEBUG,
                "levelname": "DEBUG",
                "msg": "Suppressing zero-size element",
                **context,
            }
        )

    def test_component_and_tier_suffix(self):
        line = ContextFormatter().format(self._record(component="elasticsearch", tier="warm"))
        assert line.endswith("Suppressing zero-size element [elasticsearch/warm]")

    def test_component_only(self):
        line = ContextFormatter().format(self._record(component="kibana"))
        assert line.endswith("[kibana]")

    def test_no_context(self):
        line = ContextFormatter().format(self._record())
        assert line.endswith("Suppressing zero-size element")

