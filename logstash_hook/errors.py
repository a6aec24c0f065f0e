"""
Exceptions raised by logstash_hook.
"""


class HookError(Exception):
    """Base class for errors surfaced while dispatching an entry"""
    pass


class EncodingError(HookError):
    """Entry plus extra fields could not be serialized to JSON"""
    pass


class WriteError(HookError):
    """Destination stream rejected or failed the write"""
    pass


class ConfigError(Exception):
    """Configuration validation error"""
    pass
