"""Ring buffer of recent service log records, served by GET /api/logs."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

DEFAULT_MAXLEN = 200

# Loggers whose records feed the buffer
TARGET_LOGGERS = (
    "livescores.main",
    "livescores.scores.service",
    "livescores.scores.updater",
    "livescores.scores.store",
    "livescores.ingestion.provider",
    "livescores.ingestion.apisports_client",
    "livescores.settings",
)


@dataclass(frozen=True)
class LogRecordView:
    at_utc: str
    level: str
    levelno: int
    source: str
    message: str
    exception: str | None = None


def _parse_level(level: str | int | None) -> int:
    if level is None:
        return logging.NOTSET
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.NOTSET


class BufferHandler(logging.Handler):
    """Keeps the newest *maxlen* records; older ones fall off the front."""

    def __init__(self, maxlen: int = DEFAULT_MAXLEN) -> None:
        super().__init__()
        self._records: deque[LogRecordView] = deque(maxlen=maxlen)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            exception = self._format_exception(record.exc_info) if record.exc_info else None
            self._records.append(
                LogRecordView(
                    at_utc=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
                    level=record.levelname,
                    levelno=record.levelno,
                    source=record.name,
                    message=record.getMessage(),
                    exception=exception,
                )
            )
        except Exception:
            self.handleError(record)

    def _format_exception(self, exc_info) -> str:
        formatter = self.formatter or logging.Formatter()
        return formatter.formatException(exc_info)

    def entries(self, limit: int = 100, *, min_level: str | int | None = None) -> list[dict]:
        """Newest-first entries at or above *min_level*, at most *limit* of them."""
        if limit <= 0:
            return []
        threshold = _parse_level(min_level)
        selected: list[dict] = []
        for view in reversed(self._records):
            if view.levelno < threshold:
                continue
            selected.append(asdict(view))
            if len(selected) >= limit:
                break
        return selected

    def clear(self) -> None:
        self._records.clear()


_handler: BufferHandler | None = None


def get_buffer_handler() -> BufferHandler:
    global _handler
    if _handler is None:
        _handler = BufferHandler()
        _handler.setLevel(logging.INFO)
    return _handler


def install_buffer_handler() -> BufferHandler:
    """Attach the shared handler to the service loggers. Safe to call repeatedly."""
    handler = get_buffer_handler()
    for name in TARGET_LOGGERS:
        target = logging.getLogger(name)
        if handler not in target.handlers:
            target.addHandler(handler)
        if target.level == logging.NOTSET or target.level > logging.INFO:
            target.setLevel(logging.INFO)
    return handler
