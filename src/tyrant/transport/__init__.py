"""Transport layer implementations."""

from .base import (
    Transport,
    TransportError,
    TransportTimeout,
    TransportClosed,
    TransportConnectionError,
)

from . import tcp
from . import zmq


backends = {
    "tcp": tcp.Transport,
    "zmq": zmq.stream.Transport,
}


def create(config) -> Transport:
    """Instantiate, but do not open, the transport named by *config*."""

    try:
        backend = backends[config.transport]
    except KeyError:
        raise ValueError(f"unknown transport backend: {config.transport!r}") from None

    if backend is tcp.Transport:
        return backend(config.host, config.port, timeout=config.timeout,
                       nodelay=config.nodelay, keepalive=config.keepalive)

    return backend(config.host, config.port, timeout=config.timeout)
