"""Transport interface.

This is the (small) contract that transport implementations should follow.
It lives outside :mod:`tyrant.protocol` so the codec remains transport-agnostic:
the protocol layer only needs something that accepts an ordered sequence of
byte buffers and hands back the next chunk of bytes, or fails.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence


# Transport agnostic exceptions

class TransportError(Exception):
    """Base class for all transport-layer errors."""


class TransportTimeout(TransportError):
    """No data arrived before the deadline elapsed."""


class TransportClosed(TransportError):
    """The stream ended before a complete response was read."""


class TransportConnectionError(TransportError):
    """The transport could not establish or maintain a connection."""


class Transport(ABC):
    """Minimal contract for a byte-stream transport."""

    @abstractmethod
    def open(self) -> None:
        """Establish the underlying connection/socket."""

    @abstractmethod
    def close(self) -> None:
        """Tear down the underlying connection/socket."""

    @abstractmethod
    def send(self, buffers: Sequence[bytes]) -> None:
        """Write the buffers, in order, to the stream."""

    @abstractmethod
    def recv(self, timeout: Optional[float] = None) -> bytes:
        """Return the next non-empty chunk of bytes from the stream.

        Raises :class:`TransportTimeout` if nothing arrives within *timeout*
        seconds, :class:`TransportClosed` if the peer closed the stream, and
        :class:`TransportConnectionError` for any other stream fault.
        """

    @property
    def is_open(self) -> bool:
        """Whether the transport is currently connected."""
        return False

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *exc_info):
        self.close()
