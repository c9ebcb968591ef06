""" Python client for the Tokyo Tyrant network database protocol. The
    protocol codec lives in :mod:`tyrant.protocol`, the byte-stream
    transports in :mod:`tyrant.transport`, and the user-facing
    :class:`Connection` in :mod:`tyrant.connection`.

    Requires a Tyrant server speaking protocol version 0.91 (Tyrant 1.1.23
    and later).
"""

# Submodules used by multiple other components.

from . import config
from . import protocol
from . import transport

# Primary public-facing interfaces.

from . import connection
connect = connection.connect

from .config import Configuration
from .connection import Connection, parse_stat
from .protocol import StatusError
from .transport import (
    TransportError,
    TransportTimeout,
    TransportClosed,
    TransportConnectionError,
)

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
