"""Descriptor and socket helpers.

Setting close-on-exec on inherited descriptors, turning a raw descriptor
into a listening socket object, and binding a fresh listening socket from
an address string.
"""
import os
import socket
import fcntl
from listenfds.errors import ListenerConversionError

LISTENER_FAMILIES = (socket.AF_INET, socket.AF_INET6, socket.AF_UNIX)

# network name -> address family passed to getaddrinfo()
TCP_NETWORKS = {
    'tcp': socket.AF_UNSPEC,
    'tcp4': socket.AF_INET,
    'tcp6': socket.AF_INET6,
}


def set_close_on_exec(fd):
    """Mark 'fd' so that it is not inherited by programs we exec."""
    flags = fcntl.fcntl(fd, fcntl.F_GETFD)
    fcntl.fcntl(fd, fcntl.F_SETFD, flags | fcntl.FD_CLOEXEC)


def socket_from_fd(fd):
    """(fd : int) -> socket

    Return a listening socket object for the descriptor 'fd'.  The socket
    owns a duplicate of 'fd', so closing one does not close the other.
    Raise ListenerConversionError if 'fd' is not a listening stream
    socket.
    """
    try:
        newfd = os.dup(fd)
    except OSError as err:
        raise ListenerConversionError(
            'error making listener out of fd %d: %s' % (fd, err), fd=fd)
    try:
        # family and type are read back from the kernel
        sock = socket.socket(fileno=newfd)
    except OSError as err:
        os.close(newfd)
        raise ListenerConversionError(
            'error making listener out of fd %d: %s' % (fd, err), fd=fd)
    try:
        _check_listener(sock, fd)
        # the supervisor may have left O_NONBLOCK set; make the socket
        # agree with its (blocking) timeout
        sock.setblocking(True)
    except ListenerConversionError:
        sock.close()
        raise
    except OSError as err:
        sock.close()
        raise ListenerConversionError(
            'error making listener out of fd %d: %s' % (fd, err), fd=fd)
    return sock


def _check_listener(sock, fd):
    if sock.type != socket.SOCK_STREAM:
        raise ListenerConversionError(
            'fd %d is not a stream socket (type %s)' % (fd, sock.type),
            fd=fd)
    if sock.family not in LISTENER_FAMILIES:
        raise ListenerConversionError(
            'fd %d has unsupported address family %s' % (fd, sock.family),
            fd=fd)
    acceptconn = getattr(socket, 'SO_ACCEPTCONN', None)
    if acceptconn is not None:
        if not sock.getsockopt(socket.SOL_SOCKET, acceptconn):
            raise ListenerConversionError(
                'fd %d is not a listening socket' % fd, fd=fd)


def split_host_port(address):
    """(address : str) -> (host : str, port : int)

    Split "host:port", "[v6host]:port" or ":port".  An empty host means
    all interfaces.  The port may be a number or a service name.
    """
    host, sep, port = address.rpartition(':')
    if not sep:
        raise ValueError('missing port in address %r' % address)
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    elif ':' in host:
        raise ValueError('too many colons in address %r' % address)
    if port.isdigit():
        port = int(port)
    elif port:
        try:
            port = socket.getservbyname(port, 'tcp')
        except OSError:
            raise ValueError('unknown port %r in address %r' %
                             (port, address))
    else:
        raise ValueError('missing port in address %r' % address)
    return host, port


def bind_listener(network, address, backlog=None):
    """(network : str, address : str, backlog : int | None) -> socket

    Create a new listening socket.  'network' is one of "tcp", "tcp4",
    "tcp6" (with 'address' of the form "host:port") or "unix" (with
    'address' a filesystem path).  Port 0 picks an ephemeral port.
    """
    if network == 'unix':
        return _bind_unix(address, backlog)
    if network not in TCP_NETWORKS:
        raise ValueError('unknown network %r' % network)
    host, port = split_host_port(address)
    infos = socket.getaddrinfo(host or None, port, TCP_NETWORKS[network],
                               socket.SOCK_STREAM, 0, socket.AI_PASSIVE)
    error = None
    for family, socktype, proto, canonname, sockaddr in infos:
        sock = None
        try:
            sock = socket.socket(family, socktype, proto)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            if network == 'tcp6':
                sock.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 1)
            sock.bind(sockaddr)
            _listen(sock, backlog)
            return sock
        except OSError as err:
            error = err
            if sock is not None:
                sock.close()
    if error is None:
        error = OSError('no addresses found for %r' % address)
    raise error


def _bind_unix(path, backlog):
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.bind(path)
        _listen(sock, backlog)
    except OSError:
        sock.close()
        raise
    return sock


def _listen(sock, backlog):
    if backlog is None:
        sock.listen()
    else:
        sock.listen(backlog)
