"""Environment access for the activation parser.

The parser reads and erases LISTEN_PID, LISTEN_FDS and LISTEN_FDNAMES
through one of these objects, so tests can hand it a synthetic
environment instead of mutating the real one.
"""
import os

LISTEN_PID = 'LISTEN_PID'
LISTEN_FDS = 'LISTEN_FDS'
LISTEN_FDNAMES = 'LISTEN_FDNAMES'

ACTIVATION_VARIABLES = (LISTEN_PID, LISTEN_FDS, LISTEN_FDNAMES)


class ProcessEnvironment:
    """The environment of the running process (os.environ)."""

    def get(self, name):
        return os.environ.get(name, '')

    def unset(self, name):
        # os.environ.pop() also calls unsetenv()
        os.environ.pop(name, None)

    def getpid(self):
        return os.getpid()


class DictEnvironment:
    """
    An environment backed by a plain dictionary.

    Instance attributes:

      variables : {str : str}
        the environment variables; unset() removes keys from it
      pid : int
        the process id reported by getpid(), defaults to our own
    """

    def __init__(self, variables=None, pid=None):
        if variables is None:
            variables = {}
        self.variables = variables
        if pid is None:
            pid = os.getpid()
        self.pid = pid

    def get(self, name):
        return self.variables.get(name, '')

    def unset(self, name):
        self.variables.pop(name, None)

    def getpid(self):
        return self.pid

    def __repr__(self):
        return '<%s %r pid=%s>' % (self.__class__.__name__, self.variables,
                                   self.pid)


def activation_environ(pid, fds, names=None):
    """Return a dictionary holding activation variables, the way a
    supervisor would set them.  'names' is a list of descriptor names or
    None to leave LISTEN_FDNAMES unset.
    """
    env = {LISTEN_PID: str(pid), LISTEN_FDS: str(fds)}
    if names is not None:
        env[LISTEN_FDNAMES] = ':'.join(names)
    return env
