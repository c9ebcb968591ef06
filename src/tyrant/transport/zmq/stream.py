"""ZeroMQ STREAM transport.

A ZMQ_STREAM socket speaks raw TCP to a peer that knows nothing about
ZeroMQ, which is exactly what a Tyrant server is. Every message on the
socket is two frames:

    routing_id, data

An empty data frame is a notification rather than payload: the first one
announces the connection (and tells us the peer's routing id), any later
one means the peer closed the connection. Sending an empty data frame to
the peer closes the connection from our side.

ZeroMQ sockets are not thread-safe, so close() never touches the STREAM
socket while another thread is waiting on it; it signals the waiting
thread over an inproc PAIR socket and tears down once that thread lets go.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional, Sequence

import zmq

from .. import base


logger = logging.getLogger(__name__)
zmq_context = zmq.Context()


def _milliseconds(timeout: Optional[float]) -> Optional[int]:
    if timeout is None:
        return None
    return max(0, int(timeout * 1000))


class Transport(base.Transport):
    """Byte-stream transport over a ZeroMQ STREAM socket."""

    def __init__(self, address: str, port: int, *, timeout: Optional[float] = None):
        self.address = address
        self.port = int(port)
        self.timeout = timeout
        self.socket = None
        self.peer: Optional[bytes] = None
        self._closed = False
        self._closing = False
        self._lock = threading.Lock()
        self._signal_rx = None
        self._signal_tx = None

    def __repr__(self) -> str:
        return f"<zmq.stream.Transport {self.address}:{self.port}>"

    def open(self) -> None:
        if self.socket is not None:
            return

        server = f"tcp://{self.address}:{self.port}"
        sock = zmq_context.socket(zmq.STREAM)
        sock.setsockopt(zmq.LINGER, 0)

        try:
            sock.connect(server)
        except zmq.ZMQError as exc:
            sock.close()
            raise base.TransportConnectionError(f"{server}: {exc}") from exc

        # The connection is not usable until the notification arrives;
        # anything sent before then is dropped on the floor.

        if not sock.poll(_milliseconds(self.timeout), zmq.POLLIN):
            sock.close()
            raise base.TransportConnectionError(f"{server}: no connection established")

        peer, data = sock.recv_multipart()
        if data:
            sock.close()
            raise base.TransportConnectionError(f"{server}: data received before the connection notification")

        internal = f"inproc://stream.Transport:signal:{id(self)}"
        self._signal_rx = zmq_context.socket(zmq.PAIR)
        self._signal_rx.bind(internal)
        self._signal_tx = zmq_context.socket(zmq.PAIR)
        self._signal_tx.connect(internal)

        self.socket = sock
        self.peer = peer
        self._closed = False
        self._closing = False
        logger.debug("connected to %s", server)

    def close(self) -> None:
        if self.socket is None or self._closing:
            return

        self._closing = True
        self._signal_tx.send(b"")

        with self._lock:
            sock = self.socket

            if not self._closed:
                try:
                    sock.send_multipart((self.peer, b""), flags=zmq.NOBLOCK)
                except zmq.ZMQError:
                    logger.debug("%s:%d: peer already gone at close", self.address, self.port)

            self.socket = None
            self.peer = None
            sock.close()
            self._signal_rx.close()
            self._signal_tx.close()
            self._signal_rx = None
            self._signal_tx = None

        logger.debug("closed connection to %s:%d", self.address, self.port)

    @property
    def is_open(self) -> bool:
        return self.socket is not None and not self._closed and not self._closing

    def _connected(self):
        if self.socket is None or self._closing:
            raise base.TransportConnectionError(f"{self.address}:{self.port}: not connected")
        if self._closed:
            raise base.TransportClosed(f"{self.address}:{self.port}: connection closed by peer")
        return self.socket

    def send(self, buffers: Sequence[bytes]) -> None:
        with self._lock:
            sock = self._connected()

            try:
                sock.send_multipart((self.peer, b"".join(buffers)))
            except zmq.ZMQError as exc:
                raise base.TransportConnectionError(f"{self.address}:{self.port}: {exc}") from exc

    def recv(self, timeout: Optional[float] = None) -> bytes:
        with self._lock:
            sock = self._connected()
            return self._recv(sock, timeout)

    def _recv(self, sock, timeout: Optional[float]) -> bytes:
        if timeout is None:
            deadline = None
        else:
            deadline = time.monotonic() + timeout

        poller = zmq.Poller()
        poller.register(sock, zmq.POLLIN)
        poller.register(self._signal_rx, zmq.POLLIN)

        while True:
            if deadline is None:
                wait = None
            else:
                wait = deadline - time.monotonic()
                if wait <= 0:
                    break

            try:
                ready = dict(poller.poll(_milliseconds(wait)))
                if not ready:
                    break

                if self._signal_rx in ready:
                    raise base.TransportClosed(f"{self.address}:{self.port}: connection closed locally")

                peer, data = sock.recv_multipart()
            except zmq.ZMQError as exc:
                raise base.TransportConnectionError(f"{self.address}:{self.port}: {exc}") from exc

            if peer != self.peer:
                continue

            if not data:
                self._closed = True
                raise base.TransportClosed(f"{self.address}:{self.port}: connection closed by peer")

            return data

        raise base.TransportTimeout(f"{self.address}:{self.port}: no data in {timeout:.2f} sec")
