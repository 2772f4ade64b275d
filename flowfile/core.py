"""
Core module for the abstraction of a file format

"""
from typing import Tuple, List, Dict

from .fields import Field
from .meta import MetaChunk
from .streams import open_stream
from .exceptions import FlowFileException
from .properties import (
    get_root_from_chunk,
    Dependency,
    ChunkPhase,
)


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: a Chunk is an
    ordered sequence of fields, packed and unpacked one after the other.

    A Chunk can contain sub-chunks.

    When unpacking, each field is decoded into a fresh copy and assigned to the
    chunk only once it's complete: if something goes wrong in the middle, the
    fields before the failing one are already updated while the failing one
    and the ones after it keep their previous value.
    """

    def __init__(self, source=None, **kwargs):
        super().__init__(**kwargs)

        # now we have setup all the fields necessary and we can unpack if
        # some data is passed with the constructor
        if source is not None:
            self.logger.debug('unpacking \'%s\' from %s' % (self.__class__.__name__, source.__class__.__name__))
            with open_stream(source) as stream:
                self.unpack(stream)

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def get_dependencies(self) -> Dict[str, Dependency]:
        dep = super().get_dependencies()

        for field_name, field in self.get_fields():
            for key, value in field.get_dependencies().items():
                dep.update({f'{field_name}.{key}': value})

        return dep

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields():
            msg += '%s: %s\n' % (field_name, repr(field))
        return msg

    def init(self):
        for _, field in self.get_fields():
            field.init()

    @property
    def root(self):
        '''Obtain the final father of this chunk'''
        return get_root_from_chunk(self)

    def _get_value(self):
        return {name: field.value for name, field in self.get_fields()}

    def _set_value(self, value):
        for name, field_value in value.items():
            setattr(self, name, field_value)

    def _get_size(self):
        '''the size MUST be derived from the subchunks'''
        size = 0
        for _, field in self.get_fields():
            size += field.size

        return size

    def _get_raw(self):
        return b''.join([field.raw for _, field in self.get_fields()])

    def _update_value(self):
        for _, field in self.get_fields():
            field._update_value()

    def pack(self, stream, update=True):
        '''Encode the chunk into the stream, field by field; it returns
        the number of bytes written.

        If an error happens the bytes already written are not reverted.'''
        self._phase = ChunkPhase.PACKING
        if update:
            self._update_value()

        size = 0
        for field_name, field_instance in self.get_fields():
            self.logger.debug('packing %s.%s' % (self.__class__.__name__, field_name))

            try:
                size += field_instance.pack(stream, update=False)
            except FlowFileException as e:
                self._phase = ChunkPhase.ERROR
                e.chain.insert(0, field_name)
                raise

        self._phase = ChunkPhase.DONE

        return size

    def unpack(self, stream):
        '''This is one of the main APIs to take care of: its aim is to take a binary
        data and transform in the representation given by the class this method
        is implemented.

        The stream is consumed linearly, no seeking is involved.
        '''
        self._phase = ChunkPhase.UNPACKING
        for field_name in self.get_ordered_fields_name():
            self.logger.debug('unpacking %s.%s' % (self.__class__.__name__, field_name))

            field = self._meta.prototypes[field_name].create(father=self)

            try:
                field.unpack(stream)
            except FlowFileException as e:
                self._phase = ChunkPhase.ERROR
                e.chain.insert(0, field_name)
                raise

            setattr(self, field_name, field)

        self._phase = ChunkPhase.DONE
