"""HTTP servers that listen on an inherited socket when there is one.

The address given to these servers goes through
ActivationRegistry.listen(), so "&web" uses the socket the supervisor
passed with the name "web" and "localhost:8080" binds a new one.
"""
import sys
import socket
from http.server import HTTPServer
from socketserver import BaseServer, ThreadingMixIn


class ActivatedHTTPServer(HTTPServer):
    """An HTTPServer whose socket comes from an ActivationRegistry.

    The socket is already bound and listening, so server_bind() and
    server_activate() only record its address.
    """

    def __init__(self, registry, address, handler, network='tcp'):
        # We have to re-implement HTTPServer.__init__ since the socket
        # is not created by us.
        BaseServer.__init__(self, address, handler)
        self.registry = registry
        sock = registry.listen(network, address)
        self.socket = sock
        self.address_family = sock.family
        try:
            self.server_bind()
        except OSError:
            self.server_close()
            raise

    def server_bind(self):
        self.server_address = self.socket.getsockname()
        if self.address_family == socket.AF_UNIX:
            self.server_name = 'localhost'
            self.server_port = 0
        else:
            host, port = self.server_address[:2]
            self.server_name = socket.getfqdn(host)
            self.server_port = port

    def server_activate(self):
        pass


class ThreadingActivatedHTTPServer(ThreadingMixIn, ActivatedHTTPServer):
    daemon_threads = True


def run(registry, address, handler, network='tcp', threaded=False):
    """Serve HTTP requests with 'handler' on 'address' until interrupted.
    """
    if threaded:
        server_class = ThreadingActivatedHTTPServer
    else:
        server_class = ActivatedHTTPServer
    httpd = server_class(registry, address, handler, network=network)
    registry.logger.log('serving HTTP on %s' % (httpd.server_address,))

    def handle_error(request, client_address):
        HTTPServer.handle_error(httpd, request, client_address)
        if sys.exc_info()[0] is SystemExit:
            raise
    httpd.handle_error = handle_error
    try:
        httpd.serve_forever()
    finally:
        httpd.server_close()
