"""Audit emission for Gatekeeper.

Every granted operation produces exactly one :class:`ActivityRecord`,
published on an :class:`EventChannel` that is created at startup and
handed to each resource handler.
"""

from .events import ActivityObject, ActivityRecord, redact_sensitive
from .channel import EventChannel
from .sinks import LoggingAuditSink, RecordingSink, RedisAuditSink

__all__ = [
    "ActivityObject",
    "ActivityRecord",
    "redact_sensitive",
    "EventChannel",
    "LoggingAuditSink",
    "RecordingSink",
    "RedisAuditSink",
]
