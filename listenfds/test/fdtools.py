"""Helpers for tests that pretend to be a supervisor passing descriptors."""
import os
import fcntl
import socket
from listenfds.activation import ActivationRegistry
from listenfds.config import Config
from listenfds.environ import DictEnvironment
from listenfds.errors import ListenerConversionError


class ListLogger:
    """A logger that remembers messages instead of writing them."""

    def __init__(self):
        self.messages = []

    def log(self, msg):
        self.messages.append(msg)

    def debug(self, msg):
        self.messages.append(msg)


def new_listener(host='127.0.0.1'):
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind((host, 0))
    sock.listen()
    return sock


def fd_is_open(fd):
    try:
        fcntl.fcntl(fd, fcntl.F_GETFD)
    except OSError:
        return False
    return True


def close_on_exec(fd):
    return bool(fcntl.fcntl(fd, fcntl.F_GETFD) & fcntl.FD_CLOEXEC)


def pass_fds(*objs):
    """Copy the descriptors of 'objs' into a block of contiguous unused
    descriptors, the way a supervisor lays them out from 3 upwards.
    Return the first descriptor of the block.  The copies do not have
    close-on-exec set.
    """
    start = 100
    while any(fd_is_open(start + i) for i in range(len(objs))):
        start += 1
    for i, obj in enumerate(objs):
        os.dup2(obj.fileno(), start + i)
    return start


def make_registry(variables, start=3, pid=None, **kwargs):
    config = Config(listen_fds_start=start, **kwargs)
    environment = DictEnvironment(variables, pid=pid)
    return ActivationRegistry(config, environment, ListLogger())


def close_registry(registry):
    """Close every descriptor a successfully parsed registry handed out."""
    try:
        listeners = registry.listeners()
    except ListenerConversionError as err:
        listeners = err.listeners
    for items in listeners.values():
        for sock in items:
            sock.close()
    for items in registry.files().values():
        for f in items:
            f.close()
