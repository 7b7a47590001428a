from __future__ import annotations

import logging
from typing import Optional, Protocol

from ..core.constants import DEDUP_KEY_MESSAGE_CHARS
from ..core.enums import ClockEventType
from ..overtime.model import OvertimeResult
from .dedup_cache import TTLDedupCache

logger = logging.getLogger("driver_ledger.notifications")


class MessageSink(Protocol):
    def send(self, env: str, message: str) -> None:
        raise NotImplementedError


class LoggingSink(MessageSink):
    """Default sink: writes the message to the log instead of a chat group."""

    def send(self, env: str, message: str) -> None:
        logger.info("[%s] %s", env, message)


class Notifier:
    def __init__(self, sink: MessageSink, cache: TTLDedupCache, *, env: str = "dev"):
        self._sink = sink
        self._cache = cache
        self._env = env

    def notify(self, message: str) -> bool:
        """Send unless the same message went out recently. True when sent."""
        if not message:
            return False
        key = f"{self._env}-{message[:DEDUP_KEY_MESSAGE_CHARS]}"
        if self._cache.seen_recently(key):
            logger.info("Duplicate notification skipped: %s", key)
            return False
        self._sink.send(self._env, message)
        return True

    def clock_event(
        self,
        *,
        driver_name: str,
        date_text: str,
        event: ClockEventType,
        time_text: str,
        overtime: Optional[OvertimeResult] = None,
    ) -> bool:
        label = "Clock In" if event is ClockEventType.CLOCK_IN else "Clock Out"
        lines = [f"{driver_name}", f"{date_text} {label}: {time_text}"]
        if overtime is not None and not overtime.disabled:
            lines.append(f"OT {overtime.start}-{overtime.end} ({overtime.hours_text} h)")
        return self.notify("\n".join(lines))
