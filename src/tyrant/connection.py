""" The :class:`Connection` is the principal interface for talking to a
    Tyrant server: one method per server command, each of which performs a
    single complete exchange (write the request, read and decode the whole
    response) before returning.

    The protocol has no request identifiers, so a connection can only have
    one exchange in flight; a lock held for the duration of each exchange
    enforces that for callers sharing a connection between threads.
    Independent connections share nothing and may be used concurrently.
"""

import logging
import threading

from . import config as configuration
from . import protocol
from . import transport as transports
from .protocol import encode, fields
from .protocol.decode import Shape, StatusError
from .transport import TransportConnectionError, TransportError


logger = logging.getLogger(__name__)


def parse_stat(blob):
    """ Interpret the blob returned by the stat command: one ``name\\tvalue``
        pair per line. The result is a dictionary of strings.
    """

    if isinstance(blob, bytes):
        blob = blob.decode('utf-8', errors='replace')

    status = dict()

    for line in blob.split('\n'):
        if line == '':
            continue

        try:
            name, value = line.split('\t', 1)
        except ValueError:
            name = line
            value = ''

        status[name] = value

    return status



class Connection:
    """ A client for one Tyrant server, talking over an already constructed
        *transport*. The *timeout*, in seconds, bounds each exchange as a
        whole; if it elapses the connection is considered unusable, because
        the position in the response stream is no longer known, and every
        subsequent call raises :class:`TransportConnectionError`. The same
        applies after any other transport failure. A :class:`StatusError`
        leaves the connection intact, the status byte being the complete
        response.

        Keys, values, and other blob arguments may be bytes, strings (sent
        as UTF-8), or sequences of such fragments. Blob results are always
        bytes.
    """

    def __init__(self, transport, timeout=None):

        self.transport = transport
        self.timeout = timeout
        self.broken = None
        self._lock = threading.Lock()


    def __repr__(self):
        return '<Connection %r>' % (self.transport,)


    def __enter__(self):
        return self


    def __exit__(self, *exc_info):
        self.close()


    def __len__(self):
        return self.rnum()


    def close(self):
        """ Close the underlying transport. This does not wait for an
            exchange in progress on another thread; that exchange is
            interrupted and fails with a transport error.
        """

        if self.broken is None:
            self.broken = 'connection closed'

        self.transport.close()


    def _send(self, operation, buffers):

        if self.broken is not None:
            raise TransportConnectionError('%s: connection unusable: %s' % (operation, self.broken))

        logger.debug("%s: sending %d byte request",
                     operation, sum(len(buffer) for buffer in buffers))

        try:
            self.transport.send(buffers)
        except TransportError as e:
            self.broken = str(e)
            raise


    def _exchange(self, buffers, shape):
        """ Send one request and return its decoded response. """

        code = int.from_bytes(buffers[0][:2], 'big')
        operation = fields.names.get(code, hex(code))

        with self._lock:
            self._send(operation, buffers)

            try:
                return protocol.receive(self.transport, shape, self.timeout, operation)
            except TransportError as e:
                if self.broken is None:
                    self.broken = str(e)
                raise


    # Record operations.

    def put(self, key, value):
        """ Store *value* under *key*, replacing any existing value. A
            non-negative integer below 2**32 is stored in its 4-byte
            big-endian form.
        """

        self._exchange(encode.put(key, value), Shape.NONE)


    def putkeep(self, key, value):
        """ Store *value* only if *key* is not already present; the server
            reports an existing key with a non-zero status.
        """

        self._exchange(encode.putkeep(key, value), Shape.NONE)


    def putcat(self, key, value):
        """ Append *value* to the existing value for *key*, which behaves
            like :func:`put` if the key does not exist.
        """

        self._exchange(encode.putcat(key, value), Shape.NONE)


    def putshl(self, key, value, width):
        """ Append *value* and shift the result left so that it is at most
            *width* bytes long.
        """

        self._exchange(encode.putshl(key, value, width), Shape.NONE)


    def putnr(self, key, value):
        """ Store *value* under *key* without waiting for, or reading, any
            response from the server.
        """

        buffers = encode.putnr(key, value)

        with self._lock:
            self._send('PUTNR', buffers)


    def out(self, key):
        """ Remove *key*. A missing key is reported with a non-zero status. """

        self._exchange(encode.out(key), Shape.NONE)


    def get(self, key):
        return self._exchange(encode.get(key), Shape.BLOB)


    def mget(self, keys):
        """ Retrieve several keys at once. Returns a list of (key, value)
            tuples for the keys that exist.
        """

        return self._exchange(encode.mget(keys), Shape.PAIR_LIST)


    def vsiz(self, key):
        return self._exchange(encode.vsiz(key), Shape.UINT32)


    # Iteration.

    def iterinit(self):
        """ Reset the server-side iterator. The iterator is shared by every
            client of the server; concurrent iteration is not coordinated.
        """

        self._exchange(encode.iterinit(), Shape.NONE)


    def iternext(self):
        """ Return the next key from the server-side iterator. The end of
            the iteration is reported with a non-zero status.
        """

        return self._exchange(encode.iternext(), Shape.BLOB)


    def keys(self):
        """ Generator yielding every key in the database, by way of
            :func:`iterinit` and :func:`iternext`.
        """

        self.iterinit()

        while True:
            try:
                key = self.iternext()
            except StatusError:
                return

            yield key


    def fwmkeys(self, prefix, limit=-1):
        """ Return up to *limit* keys beginning with *prefix*; a negative
            *limit* returns every match.
        """

        return self._exchange(encode.fwmkeys(prefix, limit), Shape.BLOB_LIST)


    # Arithmetic.

    def addint(self, key, delta):
        """ Add *delta* to the integer stored at *key*, returning the sum. """

        return self._exchange(encode.addint(key, delta), Shape.INT32)


    def adddouble(self, key, integral, fractional):
        """ Add a real number to the value stored at *key*. The number is
            given, and returned, as an (integral, fractional) pair, the
            fractional part expressed in units of 10**-12.
        """

        buffers = encode.adddouble(key, integral, fractional)
        return self._exchange(buffers, Shape.INT64_PAIR)


    # Extensions.

    def ext(self, func, key=b'', value=b'', opts=0):
        """ Call the server-side script function *func*. The *opts* are a
            combination of :data:`fields.XOLCKREC` and
            :data:`fields.XOLCKGLB`. Returns the function's result.
        """

        return self._exchange(encode.ext(func, opts, key, value), Shape.BLOB)


    def misc(self, func, args=()):
        """ Call a database-specific function, for example 'putlist',
            'outlist', or 'getlist', recording it in the update log.
            Returns the list of result blobs.
        """

        return self._exchange(encode.misc(func, args), Shape.BLOB_LIST)


    def misc_no_update(self, func, args=()):
        """ Same as :func:`misc`, without writing to the update log. """

        return self._exchange(encode.misc(func, args, update=False), Shape.BLOB_LIST)


    # Database administration.

    def sync(self):
        self._exchange(encode.sync(), Shape.NONE)


    def optimize(self, params=b''):
        self._exchange(encode.optimize(params), Shape.NONE)


    def vanish(self):
        """ Remove every record from the database. """

        self._exchange(encode.vanish(), Shape.NONE)


    def copy(self, path):
        """ Copy the database file to *path* on the server host. """

        self._exchange(encode.copy(path), Shape.NONE)


    def restore(self, path, timestamp):
        """ Replay the update log at *path* from *timestamp*, expressed in
            microseconds.
        """

        self._exchange(encode.restore(path, timestamp), Shape.NONE)


    def setmst(self, host, port):
        """ Set the replication master of the server. """

        self._exchange(encode.setmst(host, port), Shape.NONE)


    def rnum(self):
        """ Return the number of records in the database. """

        return self._exchange(encode.rnum(), Shape.UINT64)


    def size(self):
        """ Return the size of the database, in bytes. """

        return self._exchange(encode.size(), Shape.UINT64)


    def stat(self, raw=False):
        """ Return the server status as a dictionary of strings, or as the
            unparsed blob if *raw* is True.
        """

        blob = self._exchange(encode.stat(), Shape.BLOB)

        if raw:
            return blob

        return parse_stat(blob)


# end of class Connection



def connect(config=None, **kwargs):
    """ Open a :class:`Connection` described by *config*, a
        :class:`tyrant.config.Configuration`. If no *config* is provided one
        is built from the environment; keyword arguments override individual
        settings either way.
    """

    if config is None:
        config = configuration.Configuration.from_environment(**kwargs)
    elif kwargs:
        config = config.replace(**kwargs)

    transport = transports.create(config)
    transport.open()

    logger.debug("connected: %r", config)
    return Connection(transport, config.timeout)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
