import io

import pytest

from flowfile.core import Chunk
from flowfile.exceptions import TruncatedInputError, PackException
from flowfile.fields import StructField, StringField, VarLenField, ArrayField
from flowfile.properties import Dependency, ChunkPhase
from flowfile.streams import Stream


class Example(Chunk):
    sz = VarLenField()
    data = StringField(Dependency('.sz'), default=b'kebab')


class ExampleList(Chunk):
    n = StructField('B')
    examples = ArrayField(Example(), n=Dependency('.n'))


def test_chunk():
    """Check that building a Chunk from fields behaves correctly."""
    class Dummy(Chunk):
        a = StructField('I', default=0xbad)
        b = StringField(0x10)
        c = StructField('I', default=0xdeadbeef)

    dummy = Dummy()

    assert dummy.a.size == 4
    assert dummy.a.raw == b'\x00\x00\x0b\xad'
    assert dummy.a.father == dummy

    assert dummy.b.size == 0x10
    assert dummy.b.raw == b'\x00' * 0x10

    assert dummy.size == 0x18
    assert len(dummy.raw) == dummy.size
    assert dummy.raw == (
        b'\x00\x00\x0b\xad' +
        b'\x00' * 0x10 +
        b'\xde\xad\xbe\xef'
    )


def test_meta():
    class Dummy(Chunk):
        field = StructField('i')

    d = Dummy()

    assert Dummy._meta.fields == ['field']
    assert isinstance(d.field, StructField)
    # each instance has its own copy of the fields
    assert Dummy().field is not d.field


def test_inheritance():
    '''subclasses inherit fields'''
    class Father(Chunk):
        field_a = StringField(0x4)
        field_b = StructField('I')

    class Son(Father):
        field_c = StringField(0x2)

    son = Son(b'AAAA' + b'\x01\x02\x03\x04' + b'CC')

    assert son.get_ordered_fields_name() == ['field_a', 'field_b', 'field_c']
    assert son.field_b.value == 0x01020304
    assert son.field_c.value == b'CC'


def test_duplicated_field_name():
    with pytest.raises(AttributeError):
        class Wrong(Chunk):
            value = StructField('I')


def test_chunk_w_dependencies():
    example = Example()

    assert list(example.get_dependencies().keys()) == [
        'data.length',
    ]

    assert example.sz.father == example
    assert example.sz.value == 5
    assert example.data.value == b'kebab'
    assert example.raw == b'\x00\x05kebab'

    example.data.value = b'miao'

    assert example.sz.value == 4
    assert example.raw == b'\x00\x04miao'


def test_chunk_unpack():
    example = Example(b'\x00\x03abc')

    assert example.sz.value == 3
    assert example.data.value == b'abc'
    assert example.phase == ChunkPhase.DONE


def test_chunk_pack():
    example = Example()
    stream = Stream(io.BytesIO())

    size = example.pack(stream)

    assert size == 7
    assert stream.getvalue() == b'\x00\x05kebab'


def test_chunk_pack_updates_dependencies():
    """Dependencies are refreshed before writing, even if someone messed with them."""
    example = Example()
    example.sz.value = 42
    stream = Stream(io.BytesIO())

    example.pack(stream)

    assert stream.getvalue() == b'\x00\x05kebab'


def test_chunk_unpack_failure_chain():
    example = Example()

    with pytest.raises(TruncatedInputError) as excinfo:
        example.unpack(Stream(b'\x00\x10abc'))

    assert excinfo.value.chain == ['data']
    assert 'data' in str(excinfo.value)
    assert example.phase == ChunkPhase.ERROR


def test_chunk_unpack_assigns_completed_fields():
    """The fields decoded completely before the failing one are assigned."""
    class Couple(Chunk):
        first = StructField('H')
        second = StructField('H')

    couple = Couple(b'\x00\x01\x00\x02')

    with pytest.raises(TruncatedInputError):
        couple.unpack(Stream(b'\x00\x03\x00'))

    assert couple.first.value == 3
    assert couple.second.value == 2


def test_arrayfield():
    examples = ExampleList(b'\x02' + b'\x00\x01a' + b'\x00\x02bc')

    assert len(examples.examples) == 2
    assert [_.data.value for _ in examples.examples] == [b'a', b'bc']
    assert examples.examples[1].father is examples.examples


def test_arrayfield_pack():
    examples = ExampleList()

    element = examples.examples.instance_element()
    element.data.value = b'x'
    examples.examples.append(element)
    examples.examples.append(examples.examples.instance_element())

    assert examples.n.value == 2
    assert examples.raw == b'\x02' + b'\x00\x01x' + b'\x00\x05kebab'

    examples.examples.clear()

    assert examples.n.value == 0
    assert examples.raw == b'\x00'


def test_arrayfield_failure_chain():
    examples = ExampleList()

    with pytest.raises(TruncatedInputError) as excinfo:
        examples.unpack(Stream(b'\x02' + b'\x00\x01a' + b'\x00\x02b'))

    assert excinfo.value.chain == ['examples', '1', 'data']
    assert len(examples.examples) == 0


def test_pack_failure_chain():
    examples = ExampleList()
    element = examples.examples.instance_element()
    element.sz.value = -1
    examples.examples.append(element)

    with pytest.raises(PackException) as excinfo:
        examples.pack(Stream(io.BytesIO()), update=False)

    assert excinfo.value.chain == ['examples', '0', 'sz']


def test_dependency_from_root():
    class Header(Chunk):
        payload_size = StructField('B')

    class Packet(Chunk):
        header = Header()
        payload = StringField(Dependency('header.payload_size'))

    packet = Packet(b'\x02ab')

    assert packet.header.root is packet
    assert packet.payload.value == b'ab'

    packet.payload.value = b'kebab'

    assert packet.header.payload_size.value == 5
    assert packet.raw == b'\x05kebab'
