"""
listenfds configuration information.  This module provides both the
default configuration values, and the Config class used to override
them.  You should not edit the configuration values in this file; pass
keyword arguments to Config() or write a config file and load it with
Config.read_file() instead.
"""
import socket


# The defaults below match what a supervisor implementing the
# sd_listen_fds() protocol does.  Usually only ERROR_LOG and VERBOSE need
# changing.


# The first inherited descriptor.  The protocol fixes it to 3, the first
# descriptor after stdin, stdout and stderr; only change it for testing.
LISTEN_FDS_START = 3

# Addresses starting with this string are taken to name an inherited
# socket rather than an address to bind.  For example "&http" selects
# the socket passed with FileDescriptorName=http.
LISTEN_MARKER = '&'

# If true, LISTEN_PID, LISTEN_FDS and LISTEN_FDNAMES are removed from the
# environment once they have been read, so that child processes do not
# try to use descriptors that are not theirs.
UNSET_ENVIRONMENT = True

# Backlog used when a fresh listening socket has to be bound.
LISTEN_BACKLOG = socket.SOMAXCONN

# Filename for logging error messages; if None, everything will be sent
# to standard error.
ERROR_LOG = None

# If true, also log informational messages about the inherited sockets.
VERBOSE = False


# -- End config variables ----------------------------------------------
# (no user serviceable parts after this point)

class Config:
    """Holds all listenfds configuration variables -- see above for
    documentation of them.  The naming convention is simple:
    downcase the above variables to get the names of instance
    attributes of this class.
    """

    config_vars = [
        'listen_fds_start',
        'listen_marker',
        'unset_environment',
        'listen_backlog',
        'error_log',
        'verbose',
        ]

    def __init__(self, **kwargs):
        self.set_from_dict(globals()) # set defaults
        for name, value in kwargs.items():
            if name not in self.config_vars:
                raise ValueError('unknown config variable %r' % name)
            setattr(self, name, value)

    def set_from_dict(self, config_vars):
        for name, value in config_vars.items():
            if name.isupper():
                name = name.lower()
                if name not in self.config_vars:
                    raise ValueError('unknown config variable %r' % name)
                setattr(self, name, value)

    def read_file(self, filename):
        """Read configuration from a file.  Any variables already
        defined in this Config instance, but not in the file, are
        unchanged, so you can use this to build up a configuration
        by accumulating data from several config files.
        """
        # The config file is Python code -- makes life easy.
        config_vars = {}
        with open(filename, 'r') as f:
            exec(f.read(), config_vars)
        self.set_from_dict(config_vars)

    def __repr__(self):
        items = ', '.join('%s=%r' % (name, getattr(self, name))
                          for name in self.config_vars)
        return '<Config %s>' % items
