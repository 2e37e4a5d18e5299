"""
Exception taxonomy.

Endpoint-local failures (ConnectTimeout, ConnectError) are caught inside
RelayPool and turned into status transitions. QueryError is logged and skipped
by the aggregator. NoConnectionsAvailable is the only failure that reaches the
caller of a fetch cycle; it is retryable.
"""


class ReaderError(Exception):
    """Base class for everything raised by the reader."""


class ConnectTimeout(ReaderError):
    def __init__(self, url: str, timeout_s: float):
        super().__init__(f"connect to {url} timed out after {timeout_s:g}s")
        self.url = url
        self.timeout_s = timeout_s


class ConnectError(ReaderError):
    def __init__(self, url: str, reason: str):
        super().__init__(f"connect to {url} failed: {reason}")
        self.url = url
        self.reason = reason


class QueryError(ReaderError):
    """A filter could not be run, or a relay refused it."""


class NoConnectionsAvailable(ReaderError):
    def __init__(self, message: str = "No connected relays available"):
        super().__init__(message)


class RefreshInProgress(ReaderError):
    def __init__(self, message: str = "A fetch cycle is already running"):
        super().__init__(message)
