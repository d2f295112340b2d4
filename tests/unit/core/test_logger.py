"""Tests for logging configuration and the activity formatter."""

import logging
from datetime import datetime, timezone

import pytest

from gatekeeper.core.audit import ActivityObject, ActivityRecord, LoggingAuditSink
from gatekeeper.core.config import Settings
from gatekeeper.core.logger import (
    AUDIT_LOGGER,
    PACKAGE_LOGGER,
    ActivityFormatter,
    activity_fields,
    configure_from_settings,
    configure_logging,
    parse_level,
)
from gatekeeper.core.rbac import Actor, ActivityType


@pytest.fixture(autouse=True)
def restore_loggers():
    """Remove handlers added by a test and restore levels."""
    loggers = [logging.getLogger(PACKAGE_LOGGER), logging.getLogger(AUDIT_LOGGER)]
    saved = [(logger, list(logger.handlers), logger.level) for logger in loggers]
    yield
    for logger, handlers, level in saved:
        for handler in logger.handlers:
            if handler not in handlers:
                handler.close()
        logger.handlers = handlers
        logger.setLevel(level)


def make_activity():
    return ActivityRecord(
        actor=Actor(id=2),
        object=ActivityObject(id=7, type="users"),
        resource="userrole",
        target=ActivityObject(id="admin", type="role"),
        timestamp=datetime.now(timezone.utc),
        took=4,
        type=ActivityType.ADD,
    ).model_dump(mode="json")


def make_log_record(**extra):
    record = logging.LogRecord(AUDIT_LOGGER, logging.INFO, __file__, 1, "[add] message", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestParseLevel:
    """Test level name validation."""

    def test_known_levels(self):
        assert parse_level("debug") == logging.DEBUG
        assert parse_level("WARNING") == logging.WARNING

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            parse_level("verbose")


class TestActivityFormatter:
    """Test rendering of the activity extra."""

    def test_activity_fields(self):
        assert activity_fields(make_activity()) == {
            "type": "add",
            "actor": "Person:2",
            "resource": "userrole",
            "object": "users:7",
            "target": "role:admin",
            "took": 4,
        }

    def test_missing_parts_are_left_out(self):
        activity = make_activity()
        activity["target"] = None
        assert "target" not in activity_fields(activity)

    def test_audit_line_gets_pairs(self):
        line = ActivityFormatter().format(make_log_record(activity=make_activity()))
        assert "[INFO] [gatekeeper.audit] [add] message | type=add actor=Person:2" in line
        assert line.endswith("target=role:admin took=4")

    def test_plain_line_is_unchanged(self):
        line = ActivityFormatter().format(make_log_record())
        assert line.endswith("[gatekeeper.audit] [add] message")


class TestConfigureLogging:
    """Test handler setup for the package and audit loggers."""

    def test_reconfiguring_does_not_duplicate_handlers(self):
        configure_logging(level="INFO")
        configure_logging(level="DEBUG")
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        assert len([h for h in package_logger.handlers if isinstance(h.formatter, ActivityFormatter)]) == 1
        assert package_logger.level == logging.DEBUG

    def test_invalid_level_raises(self):
        with pytest.raises(ValueError):
            configure_logging(level="loud")

    def test_audit_records_survive_a_strict_package_level(self):
        configure_logging(level="ERROR", console_logging=False)
        assert logging.getLogger(AUDIT_LOGGER).isEnabledFor(logging.INFO)
        assert not logging.getLogger(PACKAGE_LOGGER).isEnabledFor(logging.INFO)

    def test_file_logging_splits_audit_lines(self, tmp_path):
        configure_logging(level="INFO", log_dir=str(tmp_path), file_logging=True, console_logging=False)

        logging.getLogger("gatekeeper.services").info("service started")
        record = ActivityRecord(
            actor=Actor(id=1),
            object=ActivityObject(id="user", type="role"),
            resource="role",
            timestamp=datetime.now(timezone.utc),
            took=3,
            type=ActivityType.READ,
        )
        LoggingAuditSink()("read", record)
        for handler in logging.getLogger(PACKAGE_LOGGER).handlers + logging.getLogger(AUDIT_LOGGER).handlers:
            handler.flush()

        audit_log = (tmp_path / "audit.log").read_text()
        package_log = (tmp_path / "gatekeeper.log").read_text()
        assert "service started" not in audit_log
        assert "actor=Person:1 resource=role object=role:user took=3" in audit_log
        assert "service started" in package_log
        assert "[read] read role by Person:1" in package_log

    def test_configure_from_settings(self, tmp_path):
        settings = Settings(_env_file=None, log_level="WARNING", log_dir=str(tmp_path), log_to_file=True)
        logger = configure_from_settings(settings)
        assert logger.name == PACKAGE_LOGGER
        assert logger.level == logging.WARNING
        assert (tmp_path / "audit.log").exists()
