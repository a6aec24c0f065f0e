"""
Logstash JSON formatter.

Output format (one line per entry):
{
    "@version": "1",
    "type": "log",
    "service": "billing",        # extra fields
    "user_id": 123,              # entry fields
    "message": "User logged in",
    "level": "info",
    "@timestamp": "2026-10-19T08:30:00.123456+02:00"
}
"""

import json
import logging
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Protocol

from logstash_hook.entry import Entry
from logstash_hook.errors import EncodingError

MESSAGE_KEY = 'message'
LEVEL_KEY = 'level'
TIMESTAMP_KEY = '@timestamp'
CLASH_PREFIX = 'fields.'

# Defaults that extra or entry fields may override
LOGSTASH_FIELDS: Mapping[str, Any] = MappingProxyType({'@version': '1', 'type': 'log'})


class EntryFormatter(Protocol):
    """Anything that can turn an entry into bytes"""

    def format_entry(self, entry: Entry) -> bytes:
        ...


def format_timestamp(value: datetime) -> str:
    """RFC 3339 with microseconds; naive datetimes are taken as local time"""
    if value.tzinfo is None:
        value = value.astimezone()
    return value.isoformat(timespec='microseconds')


def _encode_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, BaseException):
        return str(value)
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class LogstashFormatter(logging.Formatter):
    """
    Formats entries as Logstash JSON documents.

    Extra fields are copied at construction time and merged into every
    document. Entry fields win over extra fields for the call they belong to;
    the formatter's own copy is never modified.
    """

    def __init__(self, fields: Optional[Mapping[str, Any]] = None):
        super().__init__()
        self._fields = MappingProxyType(dict(fields or {}))

    @property
    def fields(self) -> Mapping[str, Any]:
        """Read-only view of the extra fields"""
        return self._fields

    def build_document(self, entry: Entry) -> Dict[str, Any]:
        """Merge defaults, extra fields and entry fields with the metadata keys"""
        document: Dict[str, Any] = dict(LOGSTASH_FIELDS)
        document.update(self._fields)
        document.update(entry.data)

        # Keep computed keys authoritative, like logrus' prefixFieldClashes
        for key in (MESSAGE_KEY, LEVEL_KEY, TIMESTAMP_KEY):
            if key in document:
                document[CLASH_PREFIX + key] = document.pop(key)

        document[MESSAGE_KEY] = entry.message
        document[LEVEL_KEY] = entry.level.label
        document[TIMESTAMP_KEY] = format_timestamp(entry.time)
        return document

    def _dumps(self, entry: Entry) -> str:
        try:
            return json.dumps(
                self.build_document(entry),
                default=_encode_default,
                separators=(',', ':'),
                ensure_ascii=False,
                allow_nan=False,
            )
        except (TypeError, ValueError, RecursionError) as e:
            raise EncodingError(f"Failed to encode entry {entry.message!r}: {e}") from e

    def format_entry(self, entry: Entry) -> bytes:
        """Render one entry as newline-terminated UTF-8 JSON"""
        return (self._dumps(entry) + '\n').encode('utf-8')

    def format(self, record: logging.LogRecord) -> str:
        """Format a standard library record, for use with any logging handler"""
        return self._dumps(Entry.from_record(record))


def default_formatter(fields: Optional[Mapping[str, Any]] = None) -> LogstashFormatter:
    """Logstash formatter with the given extra fields (possibly none)"""
    return LogstashFormatter(fields)
