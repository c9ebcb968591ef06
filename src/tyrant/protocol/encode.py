""" Request encoding for the Tyrant binary protocol. Every request is a
    16-bit operation code followed by fixed-width big-endian integer fields
    and then the variable-length blobs those fields describe; there are no
    delimiters anywhere, so blobs may contain arbitrary bytes, including
    none at all.

    The functions here are pure: they return a list of byte buffers whose
    concatenation is the request, suitable for a vectored write via
    :func:`tyrant.transport.base.Transport.send`. There is one function per
    argument shape, and one thin helper per operation binding the code to
    its shape.
"""

from __future__ import annotations

import struct
from typing import Iterable, List, Sequence, Union

from . import fields


Blob = Union[bytes, bytearray, memoryview, str, Sequence]

_code = struct.Struct('>H')
_uint32 = struct.Struct('>I')
_int32 = struct.Struct('>i')
_int64 = struct.Struct('>q')
_uint64 = struct.Struct('>Q')


def flatten(blob: Blob) -> bytes:
    """ Collapse a blob argument into a single bytes object. A blob is
        bytes-like, a string (encoded as UTF-8), or an arbitrarily nested
        sequence of those fragments, which are concatenated in order.
    """

    if isinstance(blob, bytes):
        return blob

    if isinstance(blob, (bytearray, memoryview)):
        return bytes(blob)

    if isinstance(blob, str):
        return blob.encode('utf-8')

    if isinstance(blob, (list, tuple)):
        return b''.join(flatten(fragment) for fragment in blob)

    raise TypeError('expected bytes, str, or a sequence of fragments, not ' + type(blob).__name__)


def _pack(packer: struct.Struct, value: int, name: str) -> bytes:

    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError('%s must be an integer, not %s' % (name, type(value).__name__))

    try:
        return packer.pack(value)
    except struct.error:
        raise ValueError('%s out of range: %d' % (name, value)) from None


def _header(code: int, *lengths: int) -> bytes:
    parts = [_pack(_code, code, 'operation code')]
    parts.extend(_pack(_uint32, length, 'length') for length in lengths)
    return b''.join(parts)


def is_small_integer(value) -> bool:
    """ True if *value* qualifies for the fixed 4-byte integer form. """

    if isinstance(value, bool) or not isinstance(value, int):
        return False

    return 0 <= value < fields.INTEGER_LIMIT


# Argument shapes.

def zero(code: int) -> List[bytes]:
    return [_header(code)]


def blob(code: int, key: Blob) -> List[bytes]:
    key = flatten(key)
    return [_header(code, len(key)), key]


def key_value(code: int, key: Blob, value: Blob) -> List[bytes]:
    key = flatten(key)
    value = flatten(value)
    return [_header(code, len(key), len(value)), key, value]


def key_integer(code: int, key: Blob, value: int) -> List[bytes]:
    """ Same layout as :func:`key_value`, with the value sent as a 4-byte
        big-endian unsigned integer.
    """

    if not is_small_integer(value):
        if isinstance(value, int) and not isinstance(value, bool):
            raise ValueError('integer value out of range: %d' % (value))
        raise TypeError('expected an integer value, not ' + type(value).__name__)

    key = flatten(key)
    return [_header(code, len(key), 4), key, _uint32.pack(value)]


def key_value_width(code: int, key: Blob, value: Blob, width: int) -> List[bytes]:
    key = flatten(key)
    value = flatten(value)
    header = _header(code, len(key), len(value)) + _pack(_uint32, width, 'width')
    return [header, key, value]


def key_list(code: int, keys: Iterable[Blob]) -> List[bytes]:

    if isinstance(keys, (str, bytes, bytearray, memoryview)):
        raise TypeError('expected a sequence of keys, not a single key')

    buffers = list()
    for key in keys:
        key = flatten(key)
        buffers.append(_uint32.pack(len(key)))
        buffers.append(key)

    count = len(buffers) // 2
    return [_header(code, count)] + buffers


def prefix_limit(code: int, prefix: Blob, limit: int) -> List[bytes]:
    """ A negative *limit* means no limit; the server treats -1 as such. """

    prefix = flatten(prefix)
    if isinstance(limit, int) and not isinstance(limit, bool) and limit < 0:
        limit = _int32.pack(-1)
    else:
        limit = _pack(_uint32, limit, 'limit')

    return [_header(code, len(prefix)) + limit, prefix]


def key_delta(code: int, key: Blob, delta: int) -> List[bytes]:
    key = flatten(key)
    header = _header(code, len(key)) + _pack(_int32, delta, 'delta')
    return [header, key]


def key_double(code: int, key: Blob, integral: int, fractional: int) -> List[bytes]:
    key = flatten(key)
    header = _header(code, len(key))
    header += _pack(_int64, integral, 'integral part')
    header += _pack(_int64, fractional, 'fractional part')
    return [header, key]


def blob_timestamp(code: int, path: Blob, timestamp: int) -> List[bytes]:
    path = flatten(path)
    header = _header(code, len(path)) + _pack(_uint64, timestamp, 'timestamp')
    return [header, path]


def blob_port(code: int, host: Blob, port: int) -> List[bytes]:
    host = flatten(host)
    header = _header(code, len(host)) + _pack(_uint32, port, 'port')
    return [header, host]


def extension(code: int, func: Blob, opts: int, key: Blob, value: Blob) -> List[bytes]:
    func = flatten(func)
    key = flatten(key)
    value = flatten(value)

    header = _header(code, len(func))
    header += _pack(_uint32, opts, 'options')
    header += _uint32.pack(len(key)) + _uint32.pack(len(value))
    return [header, func, key, value]


def arguments(args: Sequence) -> List[bytes]:
    """ Encode the argument list of a misc() call. Arguments are taken
        pairwise; the second member of each pair is sent in the 4-byte
        integer form if it is a small enough non-negative integer. An
        unpaired trailing argument is a plain blob.
    """

    buffers = list()

    for index, arg in enumerate(args):
        if index % 2 == 1 and is_small_integer(arg):
            buffers.append(_uint32.pack(4))
            buffers.append(_uint32.pack(arg))
        else:
            arg = flatten(arg)
            buffers.append(_uint32.pack(len(arg)))
            buffers.append(arg)

    return buffers


def miscellaneous(code: int, func: Blob, flags: int, args: Sequence = ()) -> List[bytes]:

    if isinstance(args, (str, bytes, bytearray, memoryview)):
        raise TypeError('expected a sequence of arguments, not a single argument')

    args = list(args)
    func = flatten(func)

    header = _header(code, len(func))
    header += _pack(_uint32, flags, 'flags')
    header += _uint32.pack(len(args))
    return [header, func] + arguments(args)


# Operations. Each command has exactly one argument shape.

def put(key, value):
    if is_small_integer(value):
        return key_integer(fields.PUT, key, value)
    if isinstance(value, int) and not isinstance(value, bool):
        raise ValueError('integer value out of range: %d' % (value))
    return key_value(fields.PUT, key, value)


def putkeep(key, value):
    return key_value(fields.PUTKEEP, key, value)


def putcat(key, value):
    return key_value(fields.PUTCAT, key, value)


def putshl(key, value, width):
    return key_value_width(fields.PUTSHL, key, value, width)


def putnr(key, value):
    return key_value(fields.PUTNR, key, value)


def out(key):
    return blob(fields.OUT, key)


def get(key):
    return blob(fields.GET, key)


def mget(keys):
    return key_list(fields.MGET, keys)


def vsiz(key):
    return blob(fields.VSIZ, key)


def iterinit():
    return zero(fields.ITERINIT)


def iternext():
    return zero(fields.ITERNEXT)


def fwmkeys(prefix, limit):
    return prefix_limit(fields.FWMKEYS, prefix, limit)


def addint(key, delta):
    return key_delta(fields.ADDINT, key, delta)


def adddouble(key, integral, fractional):
    return key_double(fields.ADDDOUBLE, key, integral, fractional)


def ext(func, opts, key, value):
    return extension(fields.EXT, func, opts, key, value)


def sync():
    return zero(fields.SYNC)


def optimize(params=b''):
    return blob(fields.OPTIMIZE, params)


def vanish():
    return zero(fields.VANISH)


def copy(path):
    return blob(fields.COPY, path)


def restore(path, timestamp):
    return blob_timestamp(fields.RESTORE, path, timestamp)


def setmst(host, port):
    return blob_port(fields.SETMST, host, port)


def rnum():
    return zero(fields.RNUM)


def size():
    return zero(fields.SIZE)


def stat():
    return zero(fields.STAT)


def misc(func, args=(), update=True):
    flags = 0 if update else fields.MONOULOG
    return miscellaneous(fields.MISC, func, flags, args)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
