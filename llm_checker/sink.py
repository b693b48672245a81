"""Append-only activity trail shown in the terminal log view."""

import itertools
import logging
import uuid
from collections.abc import Iterator

from llm_checker.records import LogEvent, LogLevel, LogModule

logger = logging.getLogger(__name__)

_PY_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.SUCCESS: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class LogSink:
    """Ordered buffer of ``LogEvent`` objects.

    Events are only ever appended.  Each event gets a unique id and is also
    mirrored to the ``logging`` module.  There is no retention cap.
    """

    def __init__(self) -> None:
        self._events: list[LogEvent] = []
        self._seq = itertools.count(1)

    def append(self, level: LogLevel, module: LogModule, message: str) -> LogEvent:
        event = LogEvent(
            id=f"{next(self._seq):06d}-{uuid.uuid4().hex[:8]}",
            level=level,
            module=module,
            message=message,
        )
        self._events.append(event)
        logger.log(_PY_LEVELS[level], "[%s] %s %s", module.value, level.value, message)
        return event

    def since(self, index: int) -> list[LogEvent]:
        """Events appended after the first *index* events."""
        return self._events[index:]

    @property
    def events(self) -> tuple[LogEvent, ...]:
        return tuple(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[LogEvent]:
        return iter(tuple(self._events))
