"""
Level-filtered dispatch of formatted entries to a destination stream.
"""

import logging
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Protocol, Union

from logstash_hook.entry import Entry
from logstash_hook.errors import EncodingError, WriteError
from logstash_hook.formatter import EntryFormatter, LogstashFormatter
from logstash_hook.levels import ALL_LEVELS, Level


class Stream(Protocol):
    """Anything that accepts bytes"""

    def write(self, data: bytes) -> Any:
        ...


class LogstashHook(logging.Handler):
    """
    Logging handler that writes Logstash documents to a stream.

    The hook only declares interest in the levels of its level set; records
    at other levels are rejected by ``filter`` before ``emit`` runs. The
    stream belongs to the caller and is never closed by the hook.

    Note that ``set_level``/``remove_level`` manage the level set and are
    unrelated to ``logging.Handler.setLevel``, which stays a plain threshold.
    """

    def __init__(
        self,
        stream: Stream,
        formatter: Optional[EntryFormatter] = None,
        levels: Optional[Iterable[Union[Level, str]]] = None,
    ):
        super().__init__()
        self.stream = stream
        self.setFormatter(formatter)
        if levels is None:
            levels = ALL_LEVELS
        self._levels = {Level.parse(level) for level in levels}

    def setFormatter(self, fmt: Optional[EntryFormatter]) -> None:
        """
        Set the entry formatter; None restores the default Logstash formatter.

        Raises:
            TypeError: If the formatter has no ``format_entry`` method
        """
        if fmt is None:
            fmt = LogstashFormatter()
        if not callable(getattr(fmt, 'format_entry', None)):
            raise TypeError(f"Formatter {fmt!r} must provide format_entry(entry)")
        self.formatter = fmt

    def levels(self) -> FrozenSet[Level]:
        """Snapshot of the levels this hook acts on"""
        return frozenset(self._levels)

    def set_level(self, level: Union[Level, str]) -> None:
        """Enable a level; no-op if already enabled"""
        self._levels.add(Level.parse(level))

    def remove_level(self, level: Union[Level, str]) -> None:
        """Disable a level; no-op if not enabled"""
        self._levels.discard(Level.parse(level))

    def fire(self, entry: Entry) -> None:
        """
        Format an entry and write it to the stream in a single call.

        Entries outside the level set are skipped. Nothing is retried.

        Raises:
            EncodingError: If the formatter fails; nothing is written
            WriteError: If the stream write fails or is short
        """
        if entry.level not in self._levels:
            return

        try:
            data = self.formatter.format_entry(entry)
        except EncodingError:
            raise
        except Exception as e:
            raise EncodingError(f"Failed to format entry: {e}") from e

        try:
            written = self.stream.write(data)
        except Exception as e:
            raise WriteError(f"Failed to write entry: {e}") from e

        if isinstance(written, int) and written < len(data):
            raise WriteError(f"Short write: {written} of {len(data)} bytes")

    def filter(self, record: logging.LogRecord) -> bool:
        if Level.from_levelno(record.levelno) not in self._levels:
            return False
        return bool(super().filter(record))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.fire(Entry.from_record(record))
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        flush = getattr(self.stream, 'flush', None)
        if flush is not None:
            self.acquire()
            try:
                flush()
            finally:
                self.release()


def new_hook(
    stream: Stream,
    fields: Optional[Mapping[str, Any]] = None,
    levels: Optional[Iterable[Union[Level, str]]] = None,
) -> LogstashHook:
    """Hook using a Logstash formatter with the given extra fields"""
    return LogstashHook(stream, LogstashFormatter(fields), levels)


def get_logger(
    name: str,
    stream: Stream,
    fields: Optional[Mapping[str, Any]] = None,
    levels: Optional[Iterable[Union[Level, str]]] = None,
    level: int = logging.DEBUG,
) -> logging.Logger:
    """
    Get a logger that ships its records to ``stream`` as Logstash JSON.

    Args:
        name: Logger name (typically __name__)
        stream: Destination stream, e.g. from ``transport.dial``
        fields: Extra fields merged into every document
        levels: Enabled levels (default: all)
        level: Logger threshold (default: DEBUG)

    Returns:
        Configured logger instance

    Example:
        logger = get_logger(__name__, dial('tcp', 'logstash:5000'), {'service': 'billing'})
        logger.warning("Quota exceeded", extra={'context': {'user_id': 123}})
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid stacking hooks on the same stream across repeated calls
    has_hook = any(isinstance(h, LogstashHook) and h.stream is stream
                   for h in logger.handlers)
    if not has_hook:
        logger.addHandler(new_hook(stream, fields, levels))

    return logger
