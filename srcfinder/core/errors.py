class FatalScanError(RuntimeError):
    """
    A configured root (or the working directory) cannot be established or read.
    The host process is expected to abort when it sees this.
    """


class CacheIOError(OSError):
    """The on-disk cache could not be read or written."""


class ListWriteError(OSError):
    """A module list file could not be compared or written."""
