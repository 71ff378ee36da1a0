"""
Logging for the mock agent.

Usage:
    from ddmock.internal.logger import get_logger
    log = get_logger(__name__)

    log.warning("failed to parse trace count %r", header)

A misbehaving client repeats the same mistake on every request, so records are rate limited
per call site (pathname/lineno): one record goes through every ``DD_MOCK_AGENT_LOGGING_RATE``
seconds (default 60) and the next one that does reports how many were dropped, e.g.::

    WARNING [ddmock.internal.receiver] trace count not passed as a header [3 skipped]

A rate of 0 disables the limit, as does setting the logger to DEBUG.
"""
import logging
import threading
import time
from typing import Dict
from typing import Tuple

import attr

from ddmock.settings import config


@attr.s(slots=True)
class CallSiteWindow(object):
    """Start of the current rate limit window of a call site and records dropped in it."""

    started_at = attr.ib(type=float, default=float("-inf"))
    skipped = attr.ib(type=int, default=0)


class RateLimitFilter(logging.Filter):
    """Let one record per call site through every ``rate`` seconds.

    Records let through carry the number of records dropped since the previous one as
    ``record.skipped``.
    """

    def __init__(self, rate):
        # type: (float) -> None
        super(RateLimitFilter, self).__init__()
        self.rate = rate
        self.windows = {}  # type: Dict[Tuple[str, int], CallSiteWindow]
        self._lock = threading.Lock()

    def reset(self):
        # type: () -> None
        with self._lock:
            self.windows.clear()

    def filter(self, record):
        # type: (logging.LogRecord) -> bool
        if not self.rate or logging.getLogger(record.name).getEffectiveLevel() <= logging.DEBUG:
            return True

        now = time.monotonic()
        with self._lock:
            window = self.windows.setdefault((record.pathname, record.lineno), CallSiteWindow())
            if now - window.started_at < self.rate:
                window.skipped += 1
                return False
            record.skipped = window.skipped
            window.started_at = now
            window.skipped = 0
        return True


rate_limit_filter = RateLimitFilter(config.logging_rate)


def get_logger(name):
    # type: (str) -> logging.Logger
    """Return the named logger with the rate limit filter installed."""
    logger = logging.getLogger(name)
    # addFilter is a no-op when the filter is already installed
    logger.addFilter(rate_limit_filter)
    return logger


class DDMockFormatter(logging.Formatter):
    def format(self, record):
        # type: (logging.LogRecord) -> str
        message = "%s %s" % (record.levelname, super(DDMockFormatter, self).format(record))
        skipped = getattr(record, "skipped", 0)
        if skipped:
            message += " [%d skipped]" % skipped
        return message


_package_logger = logging.getLogger("ddmock")
if not _package_logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(DDMockFormatter("[%(name)s] %(message)s"))
    _package_logger.addHandler(_handler)
