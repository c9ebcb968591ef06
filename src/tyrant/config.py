""" Connection configuration. A :class:`Configuration` is handed to
    :func:`tyrant.connect` to describe where the server lives and how long
    any one exchange is allowed to take; nothing in the protocol layer
    consults module-level defaults.
"""

import os


class Configuration:
    """ Settings for a single connection. Any of the keyword arguments may
        be omitted, in which case the class attribute of the same name is
        used.

        :ivar host: Hostname or address of the Tyrant server.
        :ivar port: TCP port of the Tyrant server.
        :ivar timeout: Seconds allowed for connecting, and for each exchange.
        :ivar transport: Name of the transport backend, 'tcp' or 'zmq'.
        :ivar nodelay: Whether to disable Nagle's algorithm (tcp only).
        :ivar keepalive: Whether to enable TCP keepalive (tcp only).
    """

    host = 'localhost'
    port = 1978
    timeout = 5.0
    transport = 'zmq'
    nodelay = True
    keepalive = True

    settings = ('host', 'port', 'timeout', 'transport', 'nodelay', 'keepalive')

    # Environment variables consulted by from_environment().

    environment = {
        'host': 'TYRANT_HOST',
        'port': 'TYRANT_PORT',
        'timeout': 'TYRANT_TIMEOUT',
        'transport': 'TYRANT_TRANSPORT',
    }

    def __init__(self, **kwargs):

        for name, value in kwargs.items():
            if name not in self.settings:
                raise TypeError('unknown configuration setting: ' + repr(name))
            setattr(self, name, value)

        self.validate()


    def __repr__(self):
        return '<Configuration %s:%d timeout=%r transport=%r>' % (self.host, self.port, self.timeout, self.transport)


    @classmethod
    def from_environment(cls, environ=None, **kwargs):
        """ Build a :class:`Configuration` from the TYRANT_* environment
            variables. Explicit keyword arguments take precedence over the
            environment.
        """

        if environ is None:
            environ = os.environ

        settings = dict()

        for name, variable in cls.environment.items():
            try:
                settings[name] = environ[variable]
            except KeyError:
                pass

        settings.update(kwargs)
        return cls(**settings)


    def replace(self, **kwargs):
        """ Return a copy of this :class:`Configuration` with the provided
            settings changed.
        """

        settings = dict((name, getattr(self, name)) for name in self.settings)
        settings.update(kwargs)
        return Configuration(**settings)


    def validate(self):
        """ Normalize the settings, raising ValueError for anything that
            cannot be used to establish a connection.
        """

        self.host = str(self.host)
        if self.host == '':
            raise ValueError('host must not be empty')

        try:
            self.port = int(self.port)
        except (TypeError, ValueError):
            raise ValueError('port must be an integer: ' + repr(self.port)) from None

        if self.port < 1 or self.port > 65535:
            raise ValueError('port out of range: ' + str(self.port))

        if self.timeout is not None:
            try:
                self.timeout = float(self.timeout)
            except (TypeError, ValueError):
                raise ValueError('timeout must be a number: ' + repr(self.timeout)) from None

            if self.timeout <= 0:
                raise ValueError('timeout must be positive: ' + str(self.timeout))

        self.transport = str(self.transport).lower()
        if self.transport not in ('tcp', 'zmq'):
            raise ValueError('unknown transport: ' + repr(self.transport))

        self.nodelay = bool(self.nodelay)
        self.keepalive = bool(self.keepalive)


# end of class Configuration


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
