"""
logstash_hook: Logstash JSON formatting and level-filtered dispatch

Formats structured log entries into Logstash-style JSON documents and writes
them to a caller-supplied stream from a standard library logging handler.
"""

from logstash_hook.entry import Entry
from logstash_hook.errors import ConfigError, EncodingError, HookError, WriteError
from logstash_hook.formatter import LogstashFormatter, default_formatter
from logstash_hook.hook import LogstashHook, get_logger, new_hook
from logstash_hook.levels import ALL_LEVELS, Level

__all__ = [
    'ALL_LEVELS',
    'ConfigError',
    'EncodingError',
    'Entry',
    'HookError',
    'Level',
    'LogstashFormatter',
    'LogstashHook',
    'WriteError',
    'default_formatter',
    'get_logger',
    'new_hook',
]
__version__ = '1.0.0'
