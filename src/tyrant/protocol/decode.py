""" Response decoding for the Tyrant binary protocol. A response is a
    single status byte, zero for success, followed by a payload whose shape
    is fixed by the command that was sent; the server never sends a payload
    after a non-zero status.

    Responses arrive over a stream in arbitrarily sized chunks. The
    :class:`Reassembler` owns the bytes received so far for one exchange and
    hands out exactly as many as each field declares, pulling more chunks
    from the transport when it runs short. Fixed-width header fields go
    through the same path as blobs, so a field split across two deliveries
    is handled identically to one that arrived whole.
"""

from __future__ import annotations

import enum
import logging
import struct
import time
from typing import List, Optional, Tuple

from ..transport.base import TransportClosed, TransportTimeout


logger = logging.getLogger(__name__)

_uint32 = struct.Struct('>I')
_int32 = struct.Struct('>i')
_uint64 = struct.Struct('>Q')
_int64 = struct.Struct('>q')


class StatusError(Exception):
    """ The server answered with a non-zero status byte. The meaning of the
        code is defined by the server; it is passed through unchanged as
        :attr:`code`.
    """

    def __init__(self, code: int, operation: Optional[str] = None):
        self.code = code
        self.operation = operation

        if operation is None:
            message = 'server returned status %d' % (code)
        else:
            message = '%s: server returned status %d' % (operation, code)

        Exception.__init__(self, message)


class Shape(enum.Enum):
    """ The payload layouts a successful response can take. """

    NONE = 'none'
    UINT32 = 'uint32'
    INT32 = 'int32'
    UINT64 = 'uint64'
    INT64_PAIR = 'int64 pair'
    BLOB = 'blob'
    BLOB_LIST = 'blob list'
    PAIR_LIST = 'pair list'


class Reassembler:
    """ Accumulate response bytes for a single exchange. The *timeout*, in
        seconds, is a deadline for the exchange as a whole: each wait on the
        transport is given only the time remaining. A timeout of None waits
        forever.

        An instance is never reused; once a response is parsed, or the
        exchange fails, it is discarded along with any bytes it holds.
    """

    def __init__(self, transport, timeout: Optional[float] = None):

        self.transport = transport
        self.buffer = bytearray()
        self.received = 0

        if timeout is None:
            self.deadline = None
        else:
            self.deadline = time.monotonic() + timeout


    def remaining(self) -> Optional[float]:

        if self.deadline is None:
            return None

        left = self.deadline - time.monotonic()
        if left <= 0:
            raise TransportTimeout('no response before the deadline elapsed')

        return left


    def fill(self) -> None:
        """ Block until the transport delivers another chunk, and append it
            to the buffer.
        """

        chunk = self.transport.recv(self.remaining())

        if not chunk:
            raise TransportClosed('connection closed mid-response')

        self.buffer += chunk
        self.received += len(chunk)


    def read(self, length: int) -> bytes:
        """ Return exactly *length* bytes, waiting for as many deliveries as
            it takes to accumulate them.
        """

        buffer = self.buffer

        while len(buffer) < length:
            self.fill()

        data = bytes(buffer[:length])
        del buffer[:length]
        return data


    def uint32(self) -> int:
        return _uint32.unpack(self.read(4))[0]


    def int32(self) -> int:
        return _int32.unpack(self.read(4))[0]


    def uint64(self) -> int:
        return _uint64.unpack(self.read(8))[0]


    def int64(self) -> int:
        return _int64.unpack(self.read(8))[0]


    def status(self, operation: Optional[str] = None) -> None:
        """ Consume the leading status byte. A non-zero status raises
            :class:`StatusError` immediately; nothing after it is read.
        """

        code = self.read(1)[0]
        if code != 0:
            raise StatusError(code, operation)


    def blob(self) -> bytes:
        length = self.uint32()
        return self.read(length)


    def pair(self) -> Tuple[bytes, bytes]:
        key_length = self.uint32()
        value_length = self.uint32()
        key = self.read(key_length)
        value = self.read(value_length)
        return (key, value)


    def records(self, record) -> list:
        """ Read a 32-bit count followed by that many records, in order. """

        count = self.uint32()
        if count == 0:
            return []

        return [record() for number in range(count)]


# end of class Reassembler



def _none(reader):
    return None


def _int64_pair(reader):
    return (reader.int64(), reader.int64())


def _blob_list(reader) -> List[bytes]:
    return reader.records(reader.blob)


def _pair_list(reader) -> List[Tuple[bytes, bytes]]:
    return reader.records(reader.pair)


_readers = {
    Shape.NONE: _none,
    Shape.UINT32: Reassembler.uint32,
    Shape.INT32: Reassembler.int32,
    Shape.UINT64: Reassembler.uint64,
    Shape.INT64_PAIR: _int64_pair,
    Shape.BLOB: Reassembler.blob,
    Shape.BLOB_LIST: _blob_list,
    Shape.PAIR_LIST: _pair_list,
}


def receive(transport, shape: Shape, timeout: Optional[float] = None, operation: Optional[str] = None):
    """ Read one complete response of the given *shape* from *transport*
        and return the decoded payload. Nothing is returned until the whole
        frame has been parsed; a failure part way through raises, it never
        yields a truncated result.
    """

    reader = Reassembler(transport, timeout)
    reader.status(operation)

    result = _readers[shape](reader)

    if reader.buffer:
        logger.warning("%s: discarding %d unexpected trailing bytes",
                       operation or shape.value, len(reader.buffer))

    logger.debug("%s: %d byte response decoded as %s",
                 operation or shape.value, reader.received, shape.value)

    return result


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
