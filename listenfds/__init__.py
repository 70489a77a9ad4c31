"""listenfds

Receive listening sockets from a process supervisor (systemd socket
activation, sd_listen_fds() and sd_listen_fds_with_names()).
"""

__version__ = '1.0'

# These are frequently needed by applications.
from listenfds.activation import ActivationRegistry, InheritedFile  # noqa: F401
from listenfds.config import Config  # noqa: F401
from listenfds.environ import ProcessEnvironment, DictEnvironment  # noqa: F401
from listenfds.errors import (  # noqa: F401
    ActivationError,
    MalformedEnvironmentError,
    PIDMismatchError,
    ListenerConversionError,
    NotFoundError,
)
