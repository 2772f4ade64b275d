'''
# FlowFile formats

A FlowFile is the unit of data moving between processing nodes: a set of string
attributes describing it together with an opaque content.

Every format able to serialize it exposes the same capabilities, listed by FlowFile,
so that whoever moves FlowFiles around doesn't need to know the actual format:
implementing the methods is enough, no inheritance is required.
'''
from typing import BinaryIO, Dict, Mapping, Optional, Protocol, Tuple, runtime_checkable


@runtime_checkable
class FlowFile(Protocol):

    def get_attribute(self, key: str) -> Tuple[Optional[str], bool]:
        '''Return the value for the attribute and whether it was found.'''
        ...

    def get_attributes(self) -> Dict[str, str]:
        ...

    def set_attributes(self, attributes: Mapping[str, str]) -> "FlowFile":
        ...

    def get_content(self) -> bytes:
        ...

    def set_content(self, content: bytes) -> "FlowFile":
        ...

    def serialize(self, sink: BinaryIO) -> int:
        ...

    def deserialize(self, source: BinaryIO) -> "FlowFile":
        ...
