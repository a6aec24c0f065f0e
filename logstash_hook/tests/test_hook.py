"""
Unit tests for the dispatch hook.
"""

import io
import json
import logging
import uuid
from unittest.mock import Mock

import pytest

from logstash_hook.entry import Entry
from logstash_hook.errors import EncodingError, WriteError
from logstash_hook.formatter import LogstashFormatter
from logstash_hook.hook import LogstashHook, get_logger, new_hook
from logstash_hook.levels import ALL_LEVELS, Level


class SimpleFormatter:
    def format_entry(self, entry):
        return f'msg: "{entry.message}"'.encode('utf-8')


class FailFormatter:
    def format_entry(self, entry):
        raise RuntimeError('cannot format')


class FailWriter:
    def write(self, data):
        raise OSError('connection reset')


class ShortWriter:
    def write(self, data):
        return len(data) - 1


class TestFire:
    """Test LogstashHook.fire"""

    def test_fire_writes_formatted_entry(self):
        """Should write the formatter output to the stream"""
        buffer = io.BytesIO()
        hook = LogstashHook(buffer, SimpleFormatter())

        hook.fire(Entry(message='my message', data={}))

        assert buffer.getvalue() == b'msg: "my message"'

    def test_fire_format_error(self):
        """Should raise EncodingError and not write"""
        stream = Mock()
        hook = LogstashHook(stream, FailFormatter())

        with pytest.raises(EncodingError):
            hook.fire(Entry(data={}))

        stream.write.assert_not_called()

    def test_fire_encoding_error_from_default_formatter(self):
        """Should pass EncodingError from the Logstash formatter through"""
        stream = Mock()
        hook = LogstashHook(stream)

        with pytest.raises(EncodingError):
            hook.fire(Entry(data={'obj': object()}))

        stream.write.assert_not_called()

    def test_fire_write_error(self):
        """Should raise WriteError when the stream fails"""
        hook = LogstashHook(FailWriter(), LogstashFormatter())

        with pytest.raises(WriteError):
            hook.fire(Entry(data={}))

    def test_fire_sink_runtime_error(self):
        """Should wrap any stream failure in WriteError"""
        stream = Mock()
        stream.write.side_effect = RuntimeError('sink down')
        hook = LogstashHook(stream, SimpleFormatter())

        with pytest.raises(WriteError):
            hook.fire(Entry(message='dropped'))

    def test_fire_text_stream(self):
        """Should raise WriteError when the stream only accepts text"""
        hook = LogstashHook(io.StringIO())

        with pytest.raises(WriteError):
            hook.fire(Entry(message='bytes into text'))

    def test_fire_short_write(self):
        """Should raise WriteError on a short write"""
        hook = LogstashHook(ShortWriter(), SimpleFormatter())

        with pytest.raises(WriteError):
            hook.fire(Entry(message='partial'))

    def test_fire_closed_stream(self):
        """Should raise WriteError when writing to a closed stream"""
        buffer = io.BytesIO()
        buffer.close()
        hook = LogstashHook(buffer, SimpleFormatter())

        with pytest.raises(WriteError):
            hook.fire(Entry(message='late'))

    def test_fire_single_write_call(self):
        """Should write each entry in exactly one call"""
        stream = Mock()
        stream.write.return_value = None
        hook = LogstashHook(stream)

        hook.fire(Entry(message='once'))

        assert stream.write.call_count == 1
        assert json.loads(stream.write.call_args[0][0])['message'] == 'once'

    def test_fire_with_levels(self):
        """Should skip entries outside the level set"""
        buffer = io.BytesIO()
        hook = LogstashHook(buffer, SimpleFormatter(), levels=[])
        for level in (Level.WARNING, Level.ERROR, Level.FATAL, Level.PANIC):
            hook.set_level(level)

        hook.fire(Entry(message='debug', level=Level.DEBUG))
        assert buffer.getvalue() == b''

        hook.fire(Entry(message='warn', level=Level.WARNING))
        assert buffer.getvalue() == b'msg: "warn"'


class TestLevels:
    """Test level set management"""

    def test_default_all_levels(self):
        hook = LogstashHook(io.BytesIO())

        assert hook.levels() == frozenset(ALL_LEVELS)

    def test_remove_level(self):
        """Should end with an empty set after removing every level"""
        hook = LogstashHook(io.BytesIO())

        for level in ALL_LEVELS:
            hook.remove_level(level)
            assert level not in hook.levels()

        assert hook.levels() == frozenset()

    def test_remove_absent_level_is_noop(self):
        hook = LogstashHook(io.BytesIO(), levels=[Level.ERROR])

        hook.remove_level(Level.DEBUG)

        assert hook.levels() == {Level.ERROR}

    def test_set_level(self):
        """Should add every level exactly once"""
        hook = LogstashHook(io.BytesIO(), levels=[])

        for level in ALL_LEVELS:
            hook.set_level(level)
            hook.set_level(level)
            assert level in hook.levels()

        assert hook.levels() == frozenset(ALL_LEVELS)
        assert len(hook.levels()) == len(ALL_LEVELS)

    def test_levels_by_name(self):
        """Should accept level names"""
        hook = LogstashHook(io.BytesIO(), levels=['warn', 'error'])
        hook.set_level('fatal')
        hook.remove_level('ERROR')

        assert hook.levels() == {Level.WARNING, Level.FATAL}

    def test_levels_returns_snapshot(self):
        """Should not expose the internal set"""
        hook = LogstashHook(io.BytesIO(), levels=[Level.INFO])
        snapshot = hook.levels()

        hook.set_level(Level.ERROR)

        assert snapshot == {Level.INFO}


class TestLoggingIntegration:
    """Test the hook attached to standard library loggers"""

    def _logger(self, hook):
        logger = logging.getLogger(f'test_hook_{uuid.uuid4().hex[:8]}')
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        logger.addHandler(hook)
        return logger

    def test_logger_ships_json(self):
        """Should write one Logstash document per record"""
        buffer = io.BytesIO()
        logger = self._logger(new_hook(buffer, {'service': 'billing'}))

        logger.info('User action', extra={'context': {'user_id': 456}})

        data = json.loads(buffer.getvalue())
        assert data['message'] == 'User action'
        assert data['level'] == 'info'
        assert data['user_id'] == 456
        assert data['service'] == 'billing'

    def test_logger_filters_by_level_set(self):
        """Should not call write for levels outside the set"""
        stream = Mock()
        logger = self._logger(LogstashHook(stream, SimpleFormatter(), levels=['warning', 'error']))

        logger.debug('debug')
        stream.write.assert_not_called()

        logger.warning('warn')
        stream.write.assert_called_once_with(b'msg: "warn"')

    def test_critical_maps_to_fatal(self):
        buffer = io.BytesIO()
        logger = self._logger(LogstashHook(buffer, levels=[Level.FATAL]))

        logger.error('not shipped')
        logger.critical('shipped')

        data = json.loads(buffer.getvalue())
        assert data['message'] == 'shipped'
        assert data['level'] == 'fatal'

    def test_write_error_goes_to_handle_error(self):
        """Should hand failures to handleError instead of raising"""
        hook = LogstashHook(FailWriter())
        hook.handleError = Mock()
        logger = self._logger(hook)

        logger.error('lost')

        hook.handleError.assert_called_once()

    def test_bad_format_args_go_to_handle_error(self):
        """Should not raise into the caller when the message can't be built"""
        stream = Mock()
        hook = LogstashHook(stream)
        hook.handleError = Mock()
        logger = self._logger(hook)

        logger.info('%d items', 'x')

        hook.handleError.assert_called_once()
        stream.write.assert_not_called()

    def test_non_mapping_context_goes_to_handle_error(self):
        """Should report a context that is not a mapping via handleError"""
        stream = Mock()
        hook = LogstashHook(stream)
        hook.handleError = Mock()
        logger = self._logger(hook)

        logger.info('m', extra={'context': 'oops'})

        hook.handleError.assert_called_once()
        stream.write.assert_not_called()

    def test_set_formatter_is_used(self):
        """Should format with the formatter set through setFormatter"""
        buffer = io.BytesIO()
        hook = LogstashHook(buffer)
        hook.setFormatter(LogstashFormatter({'service': 'api'}))
        logger = self._logger(hook)

        logger.warning('w')

        data = json.loads(buffer.getvalue())
        assert data['message'] == 'w'
        assert data['service'] == 'api'

    def test_close_does_not_close_stream(self):
        buffer = io.BytesIO()
        hook = LogstashHook(buffer)

        hook.flush()
        hook.close()

        assert not buffer.closed


class TestGetLogger:
    """Test get_logger function"""

    def test_get_logger_attaches_hook(self):
        buffer = io.BytesIO()
        logger = get_logger('test_get_logger_attach', buffer, fields={'ID': 1})

        assert logger.level == logging.DEBUG
        assert any(isinstance(h, LogstashHook) for h in logger.handlers)

    def test_get_logger_no_duplicate_hooks(self):
        """Should not add a second hook for the same stream"""
        buffer = io.BytesIO()
        logger1 = get_logger('test_get_logger_dup', buffer)
        count1 = len(logger1.handlers)

        logger2 = get_logger('test_get_logger_dup', buffer)

        assert logger1 is logger2
        assert len(logger2.handlers) == count1


class TestSetFormatter:
    """Test LogstashHook.setFormatter"""

    def test_constructor_formatter_is_handler_formatter(self):
        formatter = SimpleFormatter()
        hook = LogstashHook(io.BytesIO(), formatter)

        assert hook.formatter is formatter

    def test_none_restores_default(self):
        hook = LogstashHook(io.BytesIO(), SimpleFormatter())

        hook.setFormatter(None)

        assert isinstance(hook.formatter, LogstashFormatter)

    def test_rejects_plain_formatter(self):
        """Should refuse formatters that can't render entries"""
        hook = LogstashHook(io.BytesIO())

        with pytest.raises(TypeError):
            hook.setFormatter(logging.Formatter('%(message)s'))
