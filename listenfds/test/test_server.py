import os
import threading
import http.client
from http.server import BaseHTTPRequestHandler
from listenfds.environ import activation_environ
from listenfds.errors import NotFoundError
from listenfds.server import (
    ActivatedHTTPServer,
    ThreadingActivatedHTTPServer,
    run,
)
from listenfds.test.fdtools import (
    new_listener,
    pass_fds,
    make_registry,
    close_registry,
)
from listenfds.test.utest import UTest, raises


class HelloHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        body = b'hello, world'
        self.send_response(200)
        self.send_header('Content-Type', 'text/plain')
        self.send_header('Content-Length', str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


class StopHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        raise SystemExit


def fetch(httpd):
    host, port = httpd.server_address[:2]
    thread = threading.Thread(target=httpd.serve_forever)
    thread.start()
    try:
        conn = http.client.HTTPConnection(host, port, timeout=10)
        conn.request('GET', '/')
        body = conn.getresponse().read()
        conn.close()
        return body
    finally:
        httpd.shutdown()
        thread.join()
        httpd.server_close()


class ActivatedHTTPServerTest(UTest):
    def check_fresh_address(self):
        registry = make_registry({})
        httpd = ActivatedHTTPServer(registry, '127.0.0.1:0', HelloHandler)
        assert httpd.server_address[0] == '127.0.0.1'
        assert httpd.server_port != 0
        assert fetch(httpd) == b'hello, world'

    def check_inherited(self):
        orig = new_listener()
        start = pass_fds(orig)
        variables = activation_environ(os.getpid(), 1, ['web'])
        registry = make_registry(variables, start)
        httpd = ThreadingActivatedHTTPServer(registry, '&web', HelloHandler)
        assert httpd.server_address == orig.getsockname()
        assert httpd.socket is registry.one_listener('web')
        assert fetch(httpd) == b'hello, world'
        close_registry(registry)
        orig.close()

    def check_not_inherited(self):
        registry = make_registry(activation_environ(os.getpid(), 0))
        raises(NotFoundError, ActivatedHTTPServer, registry, '&web',
               HelloHandler)

    def check_run(self):
        orig = new_listener()
        start = pass_fds(orig)
        variables = activation_environ(os.getpid(), 1, ['web'])
        registry = make_registry(variables, start)
        thread = threading.Thread(target=run,
                                  args=(registry, '&web', StopHandler))
        thread.start()
        conn = http.client.HTTPConnection(*orig.getsockname(), timeout=10)
        try:
            conn.request('GET', '/')
            conn.getresponse()
        except (http.client.HTTPException, OSError):
            pass  # the handler stopped the server
        conn.close()
        thread.join(10)
        assert not thread.is_alive()
        assert registry.logger.messages[-1].startswith('serving HTTP on')
        close_registry(registry)
        orig.close()


def test_all():
    ActivatedHTTPServerTest()


if __name__ == "__main__":
    test_all()
