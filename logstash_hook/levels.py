"""
Severity levels understood by the hook.
"""

import enum
import logging
from typing import Union


class Level(enum.IntEnum):
    """Ordered severity levels, lowest first"""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    FATAL = 50
    PANIC = 60

    @property
    def label(self) -> str:
        """Lowercase name used in formatted documents"""
        return self.name.lower()

    def __str__(self) -> str:
        return self.label

    @classmethod
    def parse(cls, value: Union['Level', str]) -> 'Level':
        """
        Resolve a level from a Level member or its name.

        Accepts lowercase or uppercase names plus the aliases ``warn`` and
        ``critical``.

        Raises:
            ValueError: If the name is not a known level
        """
        if isinstance(value, cls):
            return value
        name = str(value).strip().upper()
        name = _ALIASES.get(name, name)
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Unknown level: {value!r}") from None

    @classmethod
    def from_levelno(cls, levelno: int) -> 'Level':
        """Map a standard library level number onto the closest level"""
        if levelno <= logging.DEBUG:
            return cls.DEBUG
        if levelno <= logging.INFO:
            return cls.INFO
        if levelno <= logging.WARNING:
            return cls.WARNING
        if levelno <= logging.ERROR:
            return cls.ERROR
        if levelno <= logging.CRITICAL:
            return cls.FATAL
        return cls.PANIC


_ALIASES = {'WARN': 'WARNING', 'CRITICAL': 'FATAL'}

ALL_LEVELS = tuple(Level)
