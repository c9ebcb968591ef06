"""
Tyrant Protocol Layer
=====================

This package defines the binary request/response protocol spoken by a
Tokyo Tyrant server (protocol 0.91). It is transport-agnostic: requests are
produced as lists of byte buffers, and responses are reassembled from
whatever chunks a transport delivers.

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

User Code
    │
    ▼
Connection (tyrant.connection)
    One method per server command
    Serializes exchanges, one in flight per connection

    │
    ▼
Request Encoder (encode.py)
    Operation + typed arguments -> byte buffers
    Pure, stateless, no I/O

Response Decoder (decode.py)
    Chunked byte stream -> typed result or StatusError
    Reassembly of length-prefixed fields across deliveries

    │
    ▼
Field Vocabulary (fields.py)
    Operation codes and option flags

---------------------------------------------------------------------

Below the Protocol Layer
------------------------

Transport Layer (tyrant.transport)
    Moves bytes
    - plain TCP sockets
    - ZeroMQ STREAM sockets

---------------------------------------------------------------------

Wire Layout
-----------

All integers are big-endian. Every variable-length field is preceded by
its exact byte length; there are no delimiters.

    request:   code(16) [fixed-width fields] [blobs]
    response:  status(8) [payload, only when status is zero]

---------------------------------------------------------------------
"""

from . import fields
from . import encode
from . import decode

from .decode import Reassembler, Shape, StatusError, receive


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
