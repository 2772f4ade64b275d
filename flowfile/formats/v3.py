'''
# FlowFile v3

Format used to move a FlowFile, attributes and content, as a single stream of bytes.

  .---------------------------------------------.
  | magic "NiFiFF3"                   7 bytes   |
  | number of attributes              VarLen    |
  | key 1 length (VarLen) + key 1 bytes         |
  | value 1 length (VarLen) + value 1 bytes     |
    ...
  | key N length (VarLen) + key N bytes         |
  | value N length (VarLen) + value N bytes     |
  | content length                    8 bytes   |
  | content                                     |
  '---------------------------------------------'

Every integer is big endian; VarLen is described in fields.VarLenField. The content
length instead is always a fixed 8 bytes unsigned integer.

There is nothing more: no version besides the magic, no checksum, no compression.

The attributes are written in the iteration order of the mapping they come from, so
two FlowFiles with the same attributes can have different binary representations.

More FlowFiles can be written one after the other in the same stream.
'''
import logging
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple

from ..core import Chunk
from .. import fields
from ..properties import Dependency
from ..streams import open_stream
from . import FlowFile


logger = logging.getLogger(__name__)

MAGIC = b'NiFiFF3'

# keys and values are opaque bytes on the wire: with surrogateescape
# whatever is read can be written back unchanged
ENCODING = 'utf-8'
ENCODING_ERRORS = 'surrogateescape'


def _encode(value: str) -> bytes:
    if not isinstance(value, str):
        raise TypeError(f'attributes must be strings, not {value.__class__.__name__}')

    return value.encode(ENCODING, ENCODING_ERRORS)


def _decode(value: bytes) -> str:
    return value.decode(ENCODING, ENCODING_ERRORS)


class VarLenString(Chunk):
    '''Bytes preceded by their length.'''
    length = fields.VarLenField()
    data   = fields.StringField(Dependency('.length'))

    def _get_value(self):
        return self.data.value

    def _set_value(self, value):
        self.data.value = value


class AttributeEntry(Chunk):
    key = VarLenString()
    val = VarLenString()


class AttributeMap(Chunk):
    '''The attributes are exposed as a dictionary: if the same key appears more
    than once in the stream, the last one wins.'''
    count   = fields.VarLenField()
    entries = fields.ArrayField(AttributeEntry(), n=Dependency('.count'))

    def _get_value(self) -> Dict[str, str]:
        attributes = {}
        for entry in self.entries:
            attributes[_decode(entry.key.value)] = _decode(entry.val.value)

        return attributes

    def _set_value(self, attributes: Mapping[str, str]):
        entries = []
        for key, value in attributes.items():
            entry = self.entries.instance_element()
            entry.key.value = _encode(key)
            entry.val.value = _encode(value)
            entries.append(entry)

        self.entries.value = entries

    def unpack(self, stream):
        super().unpack(stream)

        if len(self.entries) != len(self.value):
            self.logger.debug('dropping duplicated keys')
            self.value = self.value


class Content(Chunk):
    length = fields.StructField('Q')
    data   = fields.StringField(Dependency('.length'))

    def _get_value(self):
        return self.data.value

    def _set_value(self, value):
        self.data.value = value


class FlowFileV3(Chunk):
    '''FlowFile with attributes and content serialized in the v3 format.

    Pass a source (bytes, path or file-like object) to deserialize it directly.

    Deserializing is not atomic: magic, attributes and content are assigned
    in this order as soon as each of them is decoded, so a failure while reading
    the content leaves the new attributes with the old content.
    '''
    magic      = fields.StringField(len(MAGIC), default=MAGIC, is_magic=True)
    attributes = AttributeMap()
    content    = Content()

    def __eq__(self, other):
        if not isinstance(other, FlowFile):
            return NotImplemented

        return self.get_attributes() == other.get_attributes() and self.get_content() == other.get_content()

    def get_attribute(self, key: str) -> Tuple[Optional[str], bool]:
        attributes = self.attributes.value
        if key in attributes:
            return attributes[key], True

        return None, False

    def get_attributes(self) -> Dict[str, str]:
        '''Returns a copy: changing it doesn't change the FlowFile.'''
        return self.attributes.value

    def set_attributes(self, attributes: Mapping[str, str]) -> "FlowFileV3":
        self.attributes.value = attributes
        return self

    def get_content(self) -> bytes:
        return self.content.value

    def set_content(self, content: bytes) -> "FlowFileV3":
        self.content.value = content
        return self

    def serialize(self, sink) -> int:
        '''Write the FlowFile into sink, returns the number of bytes written.

        On failure the bytes already written are left there and the sink
        should be discarded.'''
        with open_stream(sink, flags='wb') as stream:
            return self.pack(stream)

    def deserialize(self, source) -> "FlowFileV3":
        with open_stream(source) as stream:
            self.unpack(stream)

        return self


def iter_flowfiles(source) -> Iterator[FlowFileV3]:
    '''Yield the FlowFiles written one after the other in source until
    it's exhausted; a FlowFile cut in the middle raises TruncatedInputError.'''
    with open_stream(source) as stream:
        idx = 0
        while not stream.at_eof():
            logger.debug('unpacking FlowFile #%d' % idx)
            yield FlowFileV3(stream)
            idx += 1


def write_flowfiles(flowfiles: Iterable[FlowFile], sink) -> int:
    '''Write the FlowFiles one after the other into sink.'''
    size = 0
    with open_stream(sink, flags='wb') as stream:
        for flowfile in flowfiles:
            size += flowfile.serialize(stream)

    return size
