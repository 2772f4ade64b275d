"""
# FlowFile serialization.

A FlowFile bundles an opaque content together with a set of string attributes
(its metadata), so that both can move between processing nodes as a single unit.

The formats are described declaratively: a Chunk is an ordered sequence of fields,
where a field is something with a direct binary representation (an integer, a run
of bytes) or another Chunk. The relation between fields (e.g. a length and the
bytes it measures) is expressed with a Dependency.

Two basic operations are defined for a format and its sub components:

 1. unpack(): read the binary data from a stream and build the high-level
    representation of it; the stream is consumed linearly.

 2. pack(): encode the high-level representation into a stream.

An instance of a chunk is in one of the following phases

 1. INIT
 2. PACKING
 3. UNPACKING
 4. DONE
 5. ERROR

"""
from .core import Chunk
from .exceptions import (
    FlowFileException,
    UnpackException,
    FormatMismatchError,
    TruncatedInputError,
    PackException,
)
from .streams import Stream
from .formats import FlowFile
from .formats.v3 import (
    MAGIC,
    FlowFileV3,
    iter_flowfiles,
    write_flowfiles,
)
