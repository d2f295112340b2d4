"""Audit sinks: subscribers that consume activity records."""

import json
import logging
from typing import List, Optional, Tuple

from gatekeeper.core.logger import AUDIT_LOGGER

from .events import ActivityRecord, redact_sensitive


class LoggingAuditSink:
    """Writes one log line per activity record.

    The record itself travels as the ``activity`` extra; see
    :class:`gatekeeper.core.logger.ActivityFormatter`.
    """

    def __init__(self, logger_name: str = AUDIT_LOGGER, level: int = logging.INFO):
        self.logger = logging.getLogger(logger_name)
        self.level = level

    def __call__(self, event_type: str, record: ActivityRecord) -> None:
        self.logger.log(
            self.level,
            f"[{event_type}] {record}",
            extra={"activity": record.model_dump(mode="json")},
        )


class RedisAuditSink:
    """Publishes activity records as JSON on a Redis pub/sub channel."""

    def __init__(self, client, channel: str):
        """
        Args:
            client: A ``redis.asyncio.Redis`` client (or compatible)
            channel: Pub/sub channel name
        """
        self.client = client
        self.channel = channel

    @classmethod
    def from_url(cls, url: str, channel: str) -> "RedisAuditSink":
        import redis.asyncio as redis

        return cls(redis.from_url(url, decode_responses=True), channel)

    @staticmethod
    def serialize(event_type: str, record: ActivityRecord) -> str:
        return json.dumps({
            "type": event_type,
            "record": redact_sensitive(record.model_dump(mode="json")),
        })

    async def __call__(self, event_type: str, record: ActivityRecord) -> None:
        await self.client.publish(self.channel, self.serialize(event_type, record))

    async def close(self) -> None:
        await self.client.aclose()


class RecordingSink:
    """Keeps every received record in memory, in delivery order."""

    def __init__(self, event_type: Optional[str] = None):
        self.event_type = event_type
        self.events: List[Tuple[str, ActivityRecord]] = []

    def __call__(self, event_type: str, record: ActivityRecord) -> None:
        if self.event_type is None or event_type == self.event_type:
            self.events.append((event_type, record))

    @property
    def records(self) -> List[ActivityRecord]:
        return [record for _, record in self.events]

    def clear(self) -> None:
        self.events.clear()
