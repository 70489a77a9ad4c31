"""Inherit listening sockets from a process supervisor.

This implements the receiving side of socket activation, see the systemd
man pages for sd_listen_fds() and sd_listen_fds_with_names().  The
supervisor binds the sockets, passes them to us as descriptors starting
at 3 and describes them in $LISTEN_PID, $LISTEN_FDS and $LISTEN_FDNAMES.

Create one ActivationRegistry at startup and pass it to whatever needs
inherited sockets:

    registry = ActivationRegistry()
    for sock in registry.listeners().get('web', []):
        serve(sock)

The environment is parsed the first time any accessor is called and
never again; later calls return the same objects (or raise the same
error).
"""
import os
import re
import threading
from listenfds import environ as _environ
from listenfds.config import Config
from listenfds.errors import (
    ActivationError,
    MalformedEnvironmentError,
    PIDMismatchError,
    ListenerConversionError,
    NotFoundError,
)
from listenfds.logger import create_logger
from listenfds.net import set_close_on_exec, socket_from_fd, bind_listener

_decimal_re = re.compile(r'[0-9]+\Z')


class InheritedFile:
    """
    An open descriptor passed to us by the supervisor.

    Instance attributes:

      fd : int
        the descriptor number, owned by this object
      name : str
        the name given to the descriptor (FileDescriptorName= in a
        systemd socket unit), '' if it was not named
      label : str
        a name for diagnostics, encoding 'fd' and 'name'
    """

    def __init__(self, fd, name=''):
        self.fd = fd
        self.name = name
        self.label = '[listen-fd-%d-%s]' % (fd, name)
        self.closed = False

    def fileno(self):
        if self.closed:
            raise ValueError('I/O operation on closed file %s' % self.label)
        return self.fd

    def close(self):
        if not self.closed:
            self.closed = True
            os.close(self.fd)

    def to_socket(self):
        """Return a new listening socket object for this descriptor.  The
        socket uses its own copy of the descriptor.
        """
        return socket_from_fd(self.fileno())

    def __repr__(self):
        state = ' closed' if self.closed else ''
        return '<%s %s%s>' % (self.__class__.__name__, self.label, state)


def _parse_decimal(variable, value):
    if not _decimal_re.match(value):
        raise MalformedEnvironmentError(
            'error converting $%s=%r: not a decimal number' %
            (variable, value))
    return int(value)


def _copy_groups(groups):
    return dict((name, list(items)) for name, items in groups.items())


class ActivationRegistry:
    """
    Holds the descriptors and listening sockets inherited from the
    supervisor.  All methods are thread-safe.

    Instance attributes:

      config : Config
      environment : ProcessEnvironment | DictEnvironment
        where the activation variables are read from (and erased)
      logger : DefaultLogger
    """

    def __init__(self, config=None, environment=None, logger=None):
        if config is None:
            config = Config()
        if environment is None:
            environment = _environ.ProcessEnvironment()
        if logger is None:
            logger = create_logger(config)
        self.config = config
        self.environment = environment
        self.logger = logger
        self._lock = threading.Lock()
        self._parsed = False
        self._files = None
        self._listeners = None
        self._parse_error = None
        self._failures = []

    def _parse(self):
        # This messes with descriptors and the environment, so it must
        # only run once.  Callers hold self._lock.
        if self._parsed:
            return
        self._parsed = True
        env = self.environment
        pid_str = env.get(_environ.LISTEN_PID)
        nfds_str = env.get(_environ.LISTEN_FDS)
        names_str = env.get(_environ.LISTEN_FDNAMES)

        # Nothing to do if the variables are not set.
        if not pid_str or not nfds_str:
            self._files = {}
            self._listeners = {}
            return

        try:
            pid = _parse_decimal(_environ.LISTEN_PID, pid_str)
            if pid != env.getpid():
                raise PIDMismatchError(pid, env.getpid())
            nfds = _parse_decimal(_environ.LISTEN_FDS, nfds_str)
            names = self._resolve_names(nfds, names_str)
        except ActivationError as err:
            self._parse_error = err
            return

        files = {}
        listeners = {}
        start = self.config.listen_fds_start
        for i in range(nfds):
            fd = start + i
            name = names[i]
            try:
                # children must not inherit these
                set_close_on_exec(fd)
            except OSError as err:
                self.logger.log('cannot set close-on-exec on fd %d: %s' %
                                (fd, err))
            f = InheritedFile(fd, name)
            files.setdefault(name, []).append(f)
            try:
                sock = socket_from_fd(fd)
            except ListenerConversionError as err:
                # a datagram socket is still a good file
                self.logger.log('%s: %s' % (f.label, err))
                self._failures.append((fd, name, err))
            else:
                listeners.setdefault(name, []).append(sock)
        self._files = files
        self._listeners = listeners

        # Prevent accidental reuse by us or child processes.
        if self.config.unset_environment:
            for name in _environ.ACTIVATION_VARIABLES:
                env.unset(name)
        self.logger.debug('inherited %d descriptor(s): %s' %
                          (nfds, ' '.join(f.label for f in self._all_files())))

    def _resolve_names(self, nfds, names_str):
        # If LISTEN_FDNAMES is set at all, it should have as many names as
        # we have descriptors.  If it isn't set, they all get the name ''.
        if not names_str:
            return [''] * nfds
        names = names_str.split(':')
        if nfds == 0:
            # zero descriptors need no names, whatever LISTEN_FDNAMES says
            self.logger.debug('ignoring $LISTEN_FDNAMES=%r, no descriptors '
                              'were passed' % names_str)
        elif len(names) != nfds:
            raise MalformedEnvironmentError(
                'incorrect $LISTEN_FDNAMES: %d names for %d descriptors, '
                'have you set FileDescriptorName?' % (len(names), nfds))
        return names

    def _all_files(self):
        for items in self._files.values():
            for f in items:
                yield f

    def _check_parse(self):
        self._parse()
        if self._parse_error is not None:
            raise self._parse_error.with_traceback(None)

    def files(self):
        """() -> {str : [InheritedFile]}

        Return the descriptors passed by the supervisor, grouped by name
        in descriptor order.  Unnamed descriptors are under ''.

        This succeeds even if some descriptors could not be turned into
        listening sockets, which is useful for datagram sockets or when
        you need finer control over socket creation.
        """
        with self._lock:
            self._check_parse()
            return _copy_groups(self._files)

    def listeners(self):
        """() -> {str : [socket]}

        Return listening sockets for the descriptors passed by the
        supervisor, grouped by name in descriptor order.  Multiple
        sockets can share a name, hence the list for each name.

        Raises ListenerConversionError if some descriptor could not be
        turned into a listening socket; the sockets that could be created
        are in its 'listeners' attribute.
        """
        with self._lock:
            self._check_parse()
            if self._failures:
                fd, _, err = self._failures[0]
                raise ListenerConversionError(
                    str(err), fd=fd, failures=list(self._failures),
                    listeners=_copy_groups(self._listeners))
            return _copy_groups(self._listeners)

    def one_listener(self, name):
        """(name : str) -> socket | None

        Return the first listening socket passed with the given name, or
        None if there is none.  Raises ListenerConversionError only if a
        descriptor with that name could not be used as a listener.
        """
        with self._lock:
            self._check_parse()
            failures = [item for item in self._failures if item[1] == name]
            if failures:
                fd, _, err = failures[0]
                raise ListenerConversionError(str(err), fd=fd,
                                              failures=failures)
            items = self._listeners.get(name)
            if not items:
                return None
            return items[0]

    def listen(self, network, address, backlog=None):
        """(network : str, address : str, backlog : int | None) -> socket

        Return a listening socket for 'address'.  If the address starts
        with the listen marker ("&" by default) the rest is the name of
        an inherited socket, eg. "&http" for the socket passed with
        FileDescriptorName=http.  Otherwise a new socket is bound, see
        listenfds.net.bind_listener().

        This lets users configure either "use the inherited socket" or a
        normal address with a single setting.
        """
        marker = self.config.listen_marker
        if address.startswith(marker):
            name = address[len(marker):]
            sock = self.one_listener(name)
            if sock is None:
                raise NotFoundError(name)
            return sock
        if backlog is None:
            backlog = self.config.listen_backlog
        return bind_listener(network, address, backlog)

    def listen_fds(self):
        """Return the number of descriptors passed by the supervisor,
        zero if there are none.
        """
        with self._lock:
            self._check_parse()
            return sum(len(items) for items in self._files.values())

    def get_inherited_socket(self):
        """Return the inherited listening socket, if there is one.  If
        not, return None.  For servers that only support one socket.
        """
        count = self.listen_fds()
        if not count:
            return None
        if count > 1:
            raise MalformedEnvironmentError(
                'only one inherited socket supported, got %d' % count)
        with self._lock:
            for items in self._listeners.values():
                return items[0]
            fd, _, err = self._failures[0]
            raise ListenerConversionError(str(err), fd=fd,
                                          failures=list(self._failures))
