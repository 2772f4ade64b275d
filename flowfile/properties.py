import logging
from enum import Enum, auto


class ChunkPhase(Enum):
    '''Enum to state the actual phase of a chunk'''
    INIT      = 0
    PACKING   = auto()
    UNPACKING = auto()
    DONE      = auto()
    ERROR     = auto()


def get_root_from_chunk(instance):
    return get_instance_from_chunk(instance, condition=lambda x: x.father is None)


def get_instance_from_chunk(instance, condition):
    while not condition(instance):
        instance = instance.father

    return instance


class Dependency:
    '''This makes the relation between fields possible.

    In practice this class allows to write something like

        class Simple(Chunk):
            length = fields.VarLenField()
            data = fields.StringField(Dependency('.length'))

    and have the (internal) length of the string contained in the field named 'data'
    strictly connected to the field named 'length': reading 'data' uses the value
    of 'length', setting 'data' writes back its length into 'length'.

    The syntax for defining the expression is inspired from module resolution:

     - '.' as first char indicates we refer to a field at the same level
     - otherwise the first component is a field of the root chunk
    '''
    def __init__(self, expression):
        self.expression = expression
        self.logger = logging.getLogger(__name__)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    def resolve_field(self, instance):
        self.logger.debug('trying to resolve \'%s\' for \'%s\'' % (
            self.expression,
            instance.__class__.__name__,
        ))

        fields_path = self.expression.split('.')
        # '.miao'.split(".") -> ['', 'miao']
        # 'miao'.split(".") -> ['miao']

        if fields_path[0] != '':
            field = get_root_from_chunk(instance)
            self.logger.debug(' resolve from root: \'%s\'' % field.__class__.__name__)
        else:  # we have a relative dependency
            field = instance.father
            self.logger.debug(' resolve from father: \'%s\'' % field.__class__.__name__)
            fields_path = fields_path[1:]  # skip the first one that is empty

        for component_name in fields_path:
            field = getattr(field, component_name)

        self.logger.debug(' resolved as field %s' % field.__class__.__name__)

        return field

    def resolve(self, instance):
        '''With this method we resolve the attribute with respect to the instance
        passed as argument.'''
        value = self.resolve_field(instance).value

        self.logger.debug(' resolved with value %s' % value)

        return value

    def resolve_and_set(self, instance, value):
        real_field = self.resolve_field(instance)
        if not hasattr(real_field, 'value'):
            raise ValueError(f'something is wrong with the Dependency resolution!')
        real_field.value = value


class PropertyDescriptor(object):
    """This the glue for dependency management.

    While the field has no father the dependency can't be resolved, so the value
    is cached into the instance itself."""

    def __init__(self, name: str, _type: type):
        self.name = name
        self.type = _type
        self.cache_name = f'_{name}_cache'

    def __get__(self, instance: "Field", owner):
        if instance is None:
            return self

        data = instance.__dict__
        if self.name not in data:
            raise AttributeError(f"no '{self.name}' here!")

        value = data[self.name]

        if isinstance(value, Dependency):
            if instance.father is None:
                return data.get(self.cache_name)

            return value.resolve(instance)

        return value

    def __set__(self, instance: "Field", value):
        if not isinstance(value, (self.type, Dependency)):
            raise ValueError(f"A property must be of type {self.type} or a Dependency")

        data = instance.__dict__

        # the first time we add without thinking much
        if self.name not in data:
            data[self.name] = value
            return

        attribute = data[self.name]

        if not isinstance(attribute, Dependency):
            data[self.name] = value
            return

        if instance.father is None:
            data[self.cache_name] = value
            return

        attribute.resolve_and_set(instance, value)
