import sys
import os
import time


class DefaultLogger:
    """
    This is the default logger object used by ActivationRegistry.  It
    writes time stamped messages to an error log.  You may provide your
    own object if you wish to have different behavior; it needs log()
    and debug() methods.

    Instance attributes:

      error_log : file
        file to which problems with inherited descriptors are logged.
        Set to sys.stderr by default.
      verbose : bool
        if true then debug() messages are written as well
    """

    def __init__(self, error_log=None, verbose=False):
        if error_log is None:
            self.error_log = sys.stderr
        else:
            self.error_log = self._open_log(error_log)
        self.verbose = verbose

    def _open_log(self, filename):
        return open(filename, 'a', encoding='utf-8', buffering=1,
                    errors='backslashreplace')

    def log(self, msg):
        """
        Write an message to the error log with a time stamp.
        """
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S",
                                  time.localtime(time.time()))
        self.error_log.write("[%s] %s%s" % (timestamp, msg, os.linesep))

    def debug(self, msg):
        """
        Like log() but only writes if the logger is verbose.
        """
        if self.verbose:
            self.log(msg)

    def close(self):
        if self.error_log not in (sys.stderr, sys.__stderr__):
            self.error_log.close()


def create_logger(config):
    """Return a DefaultLogger set up from a Config instance."""
    return DefaultLogger(error_log=config.error_log, verbose=config.verbose)
