"""ZeroMQ transport implementations."""

from . import stream
