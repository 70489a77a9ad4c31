"""listenfds.errors

Exception classes used by listenfds
"""

# Error kinds.  Every ActivationError carries one of these as its 'kind'
# attribute so callers can branch on it without comparing classes.
MALFORMED_ENVIRONMENT = 'malformed-environment'
PID_MISMATCH = 'pid-mismatch'
LISTENER_CONVERSION = 'listener-conversion'
NOT_FOUND = 'not-found'


class ActivationError(OSError):
    """ActivationError exceptions are raised when inherited sockets
    cannot be recovered from the process environment.  It is a subclass
    of OSError so that servers can treat "no socket could be obtained"
    the same way they treat a failed bind().

    Applications usually react to a structural error (a malformed
    environment or a PID mismatch) by logging it and exiting, since
    socket activation is normally mandatory once it is configured.
    """

    kind = None
    description = "Socket activation failed."

    def __init__(self, msg=None):
        OSError.__init__(self, msg or self.description)
        self.msg = msg or self.description

    def __str__(self):
        return self.msg


class MalformedEnvironmentError(ActivationError):
    """
    Raised when LISTEN_PID or LISTEN_FDS is not a decimal number, or when
    LISTEN_FDNAMES names a different number of descriptors than
    LISTEN_FDS declares.  Usually a typo in the supervisor configuration.
    """

    kind = MALFORMED_ENVIRONMENT
    description = "Invalid socket activation environment."


class PIDMismatchError(ActivationError):
    """
    Raised when LISTEN_PID names a process other than ourselves.  This
    normally means the activation variables leaked through an exec()
    or into a subprocess, rather than a configuration mistake.
    """

    kind = PID_MISMATCH
    description = "$LISTEN_PID != our PID"

    def __init__(self, listen_pid=None, pid=None):
        if listen_pid is None:
            msg = None
        else:
            msg = '%s (LISTEN_PID=%s, pid=%s)' % (self.description,
                                                 listen_pid, pid)
        ActivationError.__init__(self, msg)
        self.listen_pid = listen_pid
        self.pid = pid


class ListenerConversionError(ActivationError):
    """
    Raised when an inherited descriptor is valid but cannot be used as a
    listening socket (eg. it is a datagram socket, or not a socket at
    all).  Other descriptors are unaffected.

    Instance attributes:

      fd : int | None
        the descriptor that failed, if the error is about a single one
      failures : [(fd : int, name : str, error : Exception)]
        every descriptor that failed conversion
      listeners : {str : [socket]} | None
        the listeners that were created successfully, when raised by
        ActivationRegistry.listeners()
    """

    kind = LISTENER_CONVERSION
    description = "Inherited descriptor is not a listening socket."

    def __init__(self, msg=None, fd=None, failures=None, listeners=None):
        ActivationError.__init__(self, msg)
        self.fd = fd
        self.failures = failures or []
        self.listeners = listeners


class NotFoundError(ActivationError):
    """
    Raised by ActivationRegistry.listen() when the requested socket name
    was not passed to us.  Callers may recover by binding a default
    address instead.
    """

    kind = NOT_FOUND
    description = "Inherited socket not found."

    def __init__(self, name=None):
        if name is None:
            msg = None
        else:
            msg = 'inherited socket %r not found' % name
        ActivationError.__init__(self, msg)
        self.name = name
