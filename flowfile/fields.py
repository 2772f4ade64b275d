"""
A Field is "fundamental" datatype from the format point of view, something directly
packable/unpackable on its own.
"""
import logging
import struct
from typing import Dict

from bitstring import Bits

from .meta import FieldBase, Endianess
from .properties import Dependency, ChunkPhase, PropertyDescriptor
from .exceptions import FlowFileException, PackException, FormatMismatchError


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, *, name=None, father=None, default=None,
                 endianess=Endianess.BIG_ENDIAN, is_magic=False):
        super().__init__()
        self._phase = ChunkPhase.INIT
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.father = father
        self.default = default
        self.endianess = endianess
        self.is_magic = is_magic

        self.init()

    def init(self):
        self.value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.value)

    def get_dependencies(self) -> Dict[str, Dependency]:
        """Return the dictionary containing as key the property with a Dependency"""
        instance_dict = self.__dict__
        return {_k: _v for _k, _v in instance_dict.items() if isinstance(_v, Dependency)}

    @property
    def phase(self):
        return self._phase

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    def _get_value(self):
        return self._value

    def _set_value(self, value):
        self._value = value

    def _get_size(self):
        return len(self.raw)

    size = property(
        fget=lambda self: self._get_size(),
    )

    def _get_raw(self) -> bytes:
        raise NotImplementedError(f"method {self.__class__.__name__}._get_raw() not implemented")

    raw = property(
        fget=lambda self: self._get_raw(),
    )

    def _update_value(self):
        '''This is used to update the dependencies before packing'''
        pass

    def pack(self, stream, update=True):
        '''Write the field into the stream, returns the number of bytes written.

        With update set the dependencies are refreshed before writing.'''
        if update:
            self._update_value()

        return stream.write(self.raw)

    def unpack(self, stream):
        raise NotImplementedError('you need to implement this in the subclass')


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.
    """

    def __init__(self, format, default=0, **kw):
        self.format = format
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, hex(self.value))

    def get_format(self):
        prefix = {
            Endianess.LITTLE_ENDIAN: '<',
            Endianess.BIG_ENDIAN: '>',
        }[self.endianess]
        return '%s%s' % (prefix, self.format)

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _get_raw(self) -> bytes:
        try:
            return struct.pack(self.get_format(), self.value)
        except struct.error as e:
            raise PackException(chain=[], message=f'{self.value!r} does not fit \'{self.format}\': {e}')

    def unpack(self, stream):
        raw = stream.read_exactly(self.size)
        value = struct.unpack(self.get_format(), raw)[0]

        if self.is_magic and value != self.default:
            self.logger.warning(f'the magic doesn\'t correspond')
            raise FormatMismatchError(chain=[], message=f'expected magic {self.default:#x}, found {value:#x}')

        self.value = value


class StringField(Field):
    """Represent a contiguous chunk of bytes.

    The length can be fixed or a Dependency to another field that contains it."""

    length = PropertyDescriptor('length', int)

    def __init__(self, n=None, **kw):
        if n is None and kw.get('default') is None:
            raise ValueError(f"StringField must have 'n' or 'default' indicated!")

        self.length = n if n is not None else len(kw['default'])

        super().__init__(**kw)

    def __len__(self):
        return self.length

    def is_dependent(self):
        return 'length' in self.get_dependencies()

    def value_from_default(self):
        if self.default is not None:
            return self.default

        return b'' if self.is_dependent() else b'\x00' * self.length

    def _set_value(self, value) -> None:
        """The StringField has the size as a parameter and we must follow that indication
        unless it's a Dependency, in that case we are going to write back the value where necessary."""
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"'{self.__class__.__name__}' accepts only bytes, not {value.__class__.__name__}")

        value = bytes(value)
        length = len(value)

        if not self.is_dependent() and length != self.length:
            raise ValueError(f'you are trying to set a value with the wrong size (that is {self.length} bytes)')

        self._value = value

        if self.is_dependent():
            self.length = length

    def _get_size(self):
        return len(self.value)

    def _get_raw(self):
        return self.value

    def _update_value(self):
        if self.is_dependent():
            self.length = len(self.value)

    def unpack(self, stream):
        length = self.length
        self.logger.debug('reading %d bytes' % length)
        raw = stream.read_exactly(length)

        if self.is_magic and raw != self.default:
            self.logger.warning(f'the magic doesn\'t correspond')
            raise FormatMismatchError(chain=[], message=f'expected magic {self.default!r}, found {raw!r}')

        self._value = raw


class VarLenField(Field):
    """Unsigned integer encoded in one of two forms:

     - short: 2 bytes big endian, for values below 0xffff
     - long: the 2 bytes escape 0xffff followed by the value as 4 bytes big endian

    0xffff itself can't be written in the short form since it's the escape. When
    reading, once the escape is found the 4 bytes are authoritative, whatever
    value they contain.
    """
    ESCAPE = 0xffff
    MAXIMUM = 0xffffffff

    def __init__(self, default=0, **kw):
        super().__init__(default=default, **kw)

    def _set_value(self, value):
        if not isinstance(value, int):
            raise TypeError(f"'{self.__class__.__name__}' accepts only integers, not {value.__class__.__name__}")

        self._value = value

    def _get_raw(self) -> bytes:
        value = self.value

        if not 0 <= value <= self.MAXIMUM:
            raise PackException(chain=[], message=f'{value} is outside the range [0, {self.MAXIMUM:#x}]')

        if value < self.ESCAPE:
            return Bits(uintbe=value, length=16).bytes

        return Bits(uintbe=self.ESCAPE, length=16).bytes + Bits(uintbe=value, length=32).bytes

    def unpack(self, stream):
        value = Bits(stream.read_exactly(2)).uintbe

        if value == self.ESCAPE:
            self.logger.debug('found escape, reading long form')
            value = Bits(stream.read_exactly(4)).uintbe

        self.value = value


class ArrayField(Field):
    '''Un/Pack an array of Chunks.

    You indicate the number of elements via the parameter named "n", it
    can be a Dependency so that the count lives in another field.

    field_prototype is an instance that is copied for each element.
    '''

    n = PropertyDescriptor('n', int)

    def __init__(self, field_prototype, n=0, **kw):
        self.field_prototype = field_prototype
        self.n = n
        super().__init__(**kw)

    def __getitem__(self, item):
        return self.value[item]

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def is_dependent(self):
        return 'n' in self.get_dependencies()

    def value_from_default(self):
        if self.default is not None:
            return list(self.default)

        return [] if self.is_dependent() else [self.instance_element() for _ in range(self.n)]

    def _set_value(self, value):
        self._value = list(value)
        for element in self._value:
            element.father = self

        self.n = len(self._value)

    def instance_element(self):
        return self.field_prototype.create(father=self)  # pass the father so that we don't lose the hierarchy

    def append(self, element):
        element.father = self
        self.value.append(element)
        self.n = len(self.value)

    def clear(self):
        self.value.clear()
        self.n = 0

    def _get_raw(self):
        return b''.join([element.raw for element in self.value])

    def _update_value(self):
        for element in self.value:
            element._update_value()

        self.n = len(self.value)

    def pack(self, stream, update=True):
        if update:
            self._update_value()

        size = 0
        for idx, element in enumerate(self.value):
            try:
                size += element.pack(stream, update=False)
            except FlowFileException as e:
                e.chain.insert(0, str(idx))
                raise

        return size

    def unpack(self, stream):
        n = self.n
        self.logger.debug('unpacking %d elements' % n)

        elements = []
        for idx in range(n):
            element = self.instance_element()
            try:
                element.unpack(stream)
            except FlowFileException as e:
                e.chain.insert(0, str(idx))
                raise
            elements.append(element)

        self._value = elements
