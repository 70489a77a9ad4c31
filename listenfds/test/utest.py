# Minimal Sancho style test class that works with py.test.
import types


class UTest:
    """Run every check_* method on construction, calling _pre() before
    and _post() after each one.
    """

    def __init__(self):
        print('Running %s:' % self.__class__.__name__)
        for name in sorted(dir(self)):
            # Find all methods starting with check_, call them.
            if name.startswith('check_'):
                method = getattr(self, name)
                if isinstance(method, types.MethodType):
                    print('  ', name)
                    self._pre()
                    try:
                        method()
                    finally:
                        self._post()

    def _pre(self):
        pass

    def _post(self):
        pass


def raises(exc_class, func, *args, **kwargs):
    """Call func and return the exc_class instance it raised.  Fail if it
    did not raise.
    """
    try:
        func(*args, **kwargs)
    except exc_class as exc:
        return exc
    raise AssertionError('%s not raised by %s' % (exc_class.__name__,
                                                  func.__name__))
