import io
import logging
import os
from contextlib import contextmanager

from .exceptions import TruncatedInputError


logger = logging.getLogger(__name__)

# upper bound for a single read() issued to the underlying object
READ_CHUNK_SIZE = 1 << 16


class Stream(object):
    '''This is a simple wrapper around bytes/path/file objects to
    uniform their properties: mainly we need reads that return exactly
    the amount of data requested, since a single read() on a pipe or a
    socket can legitimately return less than asked even when more data
    is on its way.

    Only the objects opened by the wrapper itself are closed by it.'''
    def __init__(self, obj, flags='rb'):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        if isinstance(obj, os.PathLike):
            obj = os.fspath(obj)

        self._type = type(obj)
        self.flags = flags
        self.obj = obj
        self._owned = False
        self._pending = b''

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, self.init_file)

        init_method()

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.obj)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def init_str(self):
        '''We think this is a path'''
        logger.debug('opening path \'%s\'' % self.obj)
        self.obj = open(self.obj, self.flags)
        self._owned = True

    def init_bytes(self):
        '''We think these are raw bytes, they can only be read'''
        if 'w' in self.flags:
            raise TypeError('\'%s\' can\'t be written in place, use a file-like object' % self._type.__name__)
        self.obj = io.BytesIO(self.obj)

    init_bytearray = init_bytes
    init_memoryview = init_bytes

    def init_file(self):
        '''Anything else must quack like a file'''
        if not (hasattr(self.obj, 'read') or hasattr(self.obj, 'write')):
            raise TypeError('\'%s\' is not a valid stream' % self._type.__name__)

    def close(self):
        if self._owned:
            self.obj.close()

    def read_exactly(self, n):
        '''Read exactly n bytes looping over the underlying object.

        If the object is exhausted before n bytes are obtained
        TruncatedInputError is raised.'''
        chunks = [self._pending[:n]]
        self._pending = self._pending[n:]
        received = len(chunks[0])

        while received < n:
            chunk = self.obj.read(min(n - received, READ_CHUNK_SIZE))
            if not chunk:
                break
            chunks.append(chunk)
            received += len(chunk)

        if received < n:
            logger.debug('stream exhausted after %d bytes of %d' % (received, n))
            raise TruncatedInputError(chain=[], expected=n, received=received)

        return b''.join(chunks)

    def at_eof(self):
        '''Check for the end of the stream without losing data.'''
        if self._pending:
            return False

        self._pending = self.obj.read(1) or b''

        return not self._pending

    def write(self, data):
        '''Write all the data, looping over partial writes.'''
        view = memoryview(data)
        total = 0
        while total < len(view):
            written = self.obj.write(view[total:])
            # objects returning None write everything
            if written is None:
                break
            if written == 0:
                raise OSError('the underlying object refused to accept more data')
            total += written

        return len(view)


@contextmanager
def open_stream(obj, flags='rb'):
    '''Use obj as it is if it's already a Stream, otherwise wrap it
    for the duration of the block.'''
    if isinstance(obj, Stream):
        yield obj
        return

    stream = Stream(obj, flags=flags)
    try:
        yield stream
    finally:
        stream.close()
