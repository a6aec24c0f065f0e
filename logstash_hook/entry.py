"""
Immutable log entry handed to formatters.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional

from logstash_hook.errors import EncodingError
from logstash_hook.levels import Level

ERROR_KEY = 'error'


@dataclass(frozen=True)
class Entry:
    """One structured log event"""
    message: str = ''
    level: Level = Level.INFO
    time: datetime = field(default_factory=lambda: datetime.now().astimezone())
    data: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        # Own a read-only copy so callers can't change the entry afterwards
        object.__setattr__(self, 'data', MappingProxyType(dict(self.data)))

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> 'Entry':
        """
        Build an entry from a standard library log record.

        Structured context is taken from ``record.context``, set with
        ``logger.info(..., extra={'context': {...}})``. Exception info, when
        present, is added under the ``error`` key.

        Raises:
            EncodingError: If the context is not a mapping
        """
        data = {}
        context: Optional[Mapping[str, Any]] = getattr(record, 'context', None)
        if context is not None and not isinstance(context, Mapping):
            raise EncodingError(f"Record context must be a mapping, got {type(context).__name__}")
        if context:
            data.update(context)

        if record.exc_info and record.exc_info[1] is not None:
            data.setdefault(ERROR_KEY, str(record.exc_info[1]))

        return cls(
            message=record.getMessage(),
            level=Level.from_levelno(record.levelno),
            time=datetime.fromtimestamp(record.created).astimezone(),
            data=data,
        )
