class FlowFileException(Exception):
    '''Base class to extend in order to throw exception in flowfile.

    It takes as first argument the chain of the layers that caused the exception;
    each chunk the exception passes through prepends its own field name.
    '''

    def __init__(self, chain, message=None):
        self.chain = chain
        self.message = message
        super().__init__(message)

    def __str__(self):
        msg = self.message or self.__class__.__name__
        if self.chain:
            msg = '%s (at %s)' % (msg, '.'.join(self.chain))

        return msg


class UnpackException(FlowFileException):
    pass


class FormatMismatchError(UnpackException):
    '''The magic was read in full but it's not the one expected.'''
    pass


class TruncatedInputError(UnpackException, EOFError):
    '''The stream ended before a field could be completely read.'''

    def __init__(self, chain, expected=None, received=None, message=None):
        self.expected = expected
        self.received = received
        if message is None and expected is not None:
            message = 'expected %d bytes, got %d' % (expected, received)
        super().__init__(chain, message=message)


class PackException(FlowFileException, ValueError):
    '''The value of a field can't be represented on the wire.'''
    pass
