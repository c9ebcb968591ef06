import os
import sys

import pytest

import tyrant

# unitserver.py lives alongside the tests.
sys.path.insert(0, os.path.dirname(__file__))

import unitserver


class ScriptedTransport(tyrant.transport.Transport):
    """ An in-memory transport that delivers a fixed sequence of chunks,
        one per recv() call. An exception instance in the sequence is
        raised instead of delivered; running out of chunks behaves like the
        peer closing the connection.
    """

    def __init__(self, chunks=()):
        self.chunks = list(chunks)
        self.sent = list()
        self.recv_calls = 0
        self.timeouts = list()
        self.opened = False

    def open(self):
        self.opened = True

    def close(self):
        self.opened = False

    @property
    def is_open(self):
        return self.opened

    def send(self, buffers):
        self.sent.append(b''.join(buffers))

    def recv(self, timeout=None):
        self.recv_calls += 1
        self.timeouts.append(timeout)

        if not self.chunks:
            raise tyrant.TransportClosed('script exhausted')

        chunk = self.chunks.pop(0)
        if isinstance(chunk, Exception):
            raise chunk

        return chunk


def _split(data, size):
    """ Break *data* into chunks of at most *size* bytes. """

    return [data[offset:offset + size] for offset in range(0, len(data), size)]


@pytest.fixture
def scripted():
    return ScriptedTransport


@pytest.fixture
def split():
    return _split


@pytest.fixture
def run_unitserver():

    server = unitserver.Server()

    yield server

    server.stop()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
