import time
from types import TracebackType
from typing import Optional
from typing import Type  # noqa:F401


class StopWatch(object):
    """Measures elapsed time on the monotonic clock.

    Usable as a context manager, in which case the watch stops when the block exits::

        with StopWatch() as sw:
            agent.wait_for_span("web.request")
        sw.elapsed()

    A watch must not be shared between threads.
    """

    def __init__(self):
        # type: () -> None
        self._started_at = None  # type: Optional[float]
        self._stopped_at = None  # type: Optional[float]

    def start(self):
        # type: () -> StopWatch
        self._started_at = time.monotonic()
        self._stopped_at = None
        return self

    def stop(self):
        # type: () -> StopWatch
        if self._started_at is None:
            raise RuntimeError("Can not stop a stopwatch that has not been started")
        self._stopped_at = time.monotonic()
        return self

    def elapsed(self):
        # type: () -> float
        """Seconds since the watch was started, up to when it was stopped if it was."""
        if self._started_at is None:
            raise RuntimeError("Can not get the elapsed time of a stopwatch that has not been started")
        end = time.monotonic() if self._stopped_at is None else self._stopped_at
        return end - self._started_at

    def remaining(self, duration):
        # type: (float) -> float
        """Seconds left before ``duration`` seconds have elapsed, never negative."""
        return max(0.0, duration - self.elapsed())

    def __enter__(self):
        # type: () -> StopWatch
        return self.start()

    def __exit__(self, tp, value, traceback):
        # type: (Optional[Type[BaseException]], Optional[BaseException], Optional[TracebackType]) -> None
        self.stop()
