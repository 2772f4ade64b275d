import io
import logging
import os
from pathlib import Path

import pytest


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)


class ShortReader(io.RawIOBase):
    """File-like object that never returns more than 'step' bytes per read(),
    like a socket or a pipe would do."""

    def __init__(self, data, step=1):
        self._data = data
        self._offset = 0
        self._step = step

    def readable(self):
        return True

    def read(self, n=-1):
        if n < 0:
            n = len(self._data)
        chunk = self._data[self._offset:self._offset + min(n, self._step)]
        self._offset += len(chunk)
        return chunk


class ShortWriter(io.RawIOBase):
    """File-like object accepting at most 'step' bytes per write()."""

    def __init__(self, step=1):
        self.data = bytearray()
        self._step = step

    def writable(self):
        return True

    def write(self, b):
        chunk = bytes(b[:self._step])
        self.data += chunk
        return len(chunk)


class FaultyReader(io.RawIOBase):
    """Transport that breaks after the given amount of bytes."""

    def __init__(self, data, fail_after):
        self._stream = io.BytesIO(data[:fail_after])

    def readable(self):
        return True

    def read(self, n=-1):
        chunk = self._stream.read(n)
        if not chunk:
            raise ConnectionResetError('connection reset by peer')
        return chunk


class FaultyWriter(io.RawIOBase):
    """Transport accepting 'fail_after' bytes, then raising error or,
    when error is None, refusing data by returning 0."""

    def __init__(self, fail_after, error=BrokenPipeError):
        self.data = bytearray()
        self._fail_after = fail_after
        self._error = error

    def writable(self):
        return True

    def write(self, b):
        chunk = bytes(b[:self._fail_after - len(self.data)])
        if not chunk:
            if self._error is None:
                return 0
            raise self._error('broken pipe')
        self.data += chunk
        return len(chunk)


@pytest.fixture
def test_root_dir():
    return Path(__file__).parent


@pytest.fixture
def reference_bytes():
    """The stream of a FlowFile with two attributes and 'content' as content."""
    return (
        b'NiFiFF3' +
        b'\x00\x02' +
        b'\x00\x04' + b'key1' +
        b'\x00\x06' + b'value1' +
        b'\x00\x04' + b'key2' +
        b'\x00\x06' + b'value2' +
        b'\x00\x00\x00\x00\x00\x00\x00\x07' +
        b'content'
    )
