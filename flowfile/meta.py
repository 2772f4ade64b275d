import copy
import logging
from enum import Enum, auto


class Endianess(Enum):
    LITTLE_ENDIAN = auto()
    BIG_ENDIAN    = auto()


class FieldDescriptor(object):
    """Gives each chunk instance its own copy of a declared field."""

    def __init__(self, prototype: "Field", field_name: str):
        self.logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")
        self.prototype = prototype
        self.prototype.name = field_name

    @property
    def name(self):
        return self.prototype.name

    def __get__(self, chunk, owner=None):
        if chunk is None:
            return self

        try:
            return chunk.__dict__[self.name]
        except KeyError:
            self.logger.debug("instancing field '%s' for %s", self.name, chunk.__class__.__name__)
            field = chunk.__dict__[self.name] = self.prototype.create(father=chunk)
            return field

    def __set__(self, chunk, value):
        # a whole field replaces the current one, anything else is its new value
        if isinstance(value, self.prototype.__class__):
            value.father = chunk
            value.name = self.name
            chunk.__dict__[self.name] = value
        else:
            self.__get__(chunk).value = value


class FieldBase(object):

    def contribute_to_chunk(self, cls, name):
        if getattr(cls, name, None) is not None:
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')

        setattr(cls, name, FieldDescriptor(self, name))
        cls._meta.add(name, self)

    def create(self, father):
        '''Return a brand new copy of this field attached to father.

        It must be called only on the prototype (the instance living in the class
        definition) otherwise the whole hierarchy above it would be copied too.'''
        instance = copy.deepcopy(self)
        instance.father = father
        return instance


class Meta(object):
    """Fields of a chunk, in declaration order, with their prototypes"""

    def __init__(self):
        self.fields = []
        self.prototypes = {}

    def add(self, name, prototype):
        self.fields.append(name)
        self.prototypes[name] = prototype


class MetaChunk(type):
    '''Collects the fields declared in the class body (parents' first) so that
    they can be packed/unpacked in order.'''
    logger = logging.getLogger(__name__)

    def __new__(cls, name, bases, attrs):
        declared = [(_k, _v) for _k, _v in attrs.items() if isinstance(_v, FieldBase)]
        namespace = {_k: _v for _k, _v in attrs.items() if not isinstance(_v, FieldBase)}

        new_cls = super().__new__(cls, name, bases, namespace)
        new_cls._meta = Meta()

        for parent in bases:
            if not isinstance(parent, MetaChunk):
                continue
            for field_name in parent._meta.fields:
                new_cls._meta.add(field_name, parent._meta.prototypes[field_name])

        for field_name, prototype in declared:
            cls.logger.debug('declaring field \'%s\' in %s' % (field_name, name))
            prototype.contribute_to_chunk(new_cls, field_name)

        return new_cls
