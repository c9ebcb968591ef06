"""Plain TCP socket transport."""

from __future__ import annotations

import logging
import socket
from typing import Optional, Sequence

from . import base


logger = logging.getLogger(__name__)


class Transport(base.Transport):
    """Byte-stream transport over a connected TCP socket."""

    chunk_size = 65536

    def __init__(self, address: str, port: int, *, timeout: Optional[float] = None,
                 nodelay: bool = True, keepalive: bool = True):
        self.address = address
        self.port = int(port)
        self.timeout = timeout
        self.nodelay = nodelay
        self.keepalive = keepalive
        self.socket: Optional[socket.socket] = None

    def __repr__(self) -> str:
        return f"<tcp.Transport {self.address}:{self.port}>"

    def open(self) -> None:
        if self.socket is not None:
            return

        try:
            sock = socket.create_connection((self.address, self.port), timeout=self.timeout)
        except socket.timeout as exc:
            raise base.TransportConnectionError(
                f"{self.address}:{self.port}: no connection in {self.timeout:.2f} sec"
            ) from exc
        except OSError as exc:
            raise base.TransportConnectionError(
                f"{self.address}:{self.port}: {exc}"
            ) from exc

        if self.nodelay:
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        if self.keepalive:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)

        self.socket = sock
        logger.debug("connected to %s:%d", self.address, self.port)

    def close(self) -> None:
        sock = self.socket
        if sock is None:
            return

        # Shutting down first wakes a recv() blocked in another thread.

        self.socket = None
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            logger.debug("%s:%d: peer already gone at close", self.address, self.port)
        sock.close()
        logger.debug("closed connection to %s:%d", self.address, self.port)

    @property
    def is_open(self) -> bool:
        return self.socket is not None

    def _connected(self) -> socket.socket:
        if self.socket is None:
            raise base.TransportConnectionError(f"{self.address}:{self.port}: not connected")
        return self.socket

    def send(self, buffers: Sequence[bytes]) -> None:
        sock = self._connected()
        sock.settimeout(self.timeout)

        try:
            sock.sendall(b"".join(buffers))
        except socket.timeout as exc:
            raise base.TransportTimeout(
                f"{self.address}:{self.port}: send did not complete in {self.timeout:.2f} sec"
            ) from exc
        except OSError as exc:
            raise base.TransportConnectionError(f"{self.address}:{self.port}: {exc}") from exc

    def recv(self, timeout: Optional[float] = None) -> bytes:
        sock = self._connected()
        sock.settimeout(timeout)

        try:
            chunk = sock.recv(self.chunk_size)
        except socket.timeout as exc:
            raise base.TransportTimeout(
                f"{self.address}:{self.port}: no data in {timeout:.2f} sec"
            ) from exc
        except OSError as exc:
            if self.socket is None:
                raise base.TransportClosed(f"{self.address}:{self.port}: connection closed locally") from exc
            raise base.TransportConnectionError(f"{self.address}:{self.port}: {exc}") from exc

        if not chunk:
            if self.socket is None:
                raise base.TransportClosed(f"{self.address}:{self.port}: connection closed locally")
            raise base.TransportClosed(f"{self.address}:{self.port}: connection closed by peer")

        return chunk
