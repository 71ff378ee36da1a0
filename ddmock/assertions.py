"""
Synchronous assertions over the spans received by the mock agent.

Two shapes of wait are provided:

- *wait until true* (:meth:`SpanAssertions.wait_for_span`): the condition is evaluated at
  once, then again after every index update (or every poll interval at the latest) until it
  holds or the duration elapses, in which case the assertion fails.
- *confirm absence* (:meth:`SpanAssertions.expect_no_span`): the forbidden condition is
  evaluated at once and after every update; the assertion fails the first time it is
  observed and passes once the duration elapses.

Every failure raises :class:`SpanAssertionError`, an ``AssertionError``, so the calling test
stops right away.
"""
from typing import Any
from typing import Callable
from typing import Optional

from ddmock.internal.index import SpanIndex
from ddmock.internal.index import SpanIndexView
from ddmock.internal.logger import get_logger
from ddmock.internal.utils.time import StopWatch
from ddmock.span import Span


log = get_logger(__name__)


class SpanAssertionError(AssertionError):
    pass


def _check_parents(view, span, parents):
    # type: (SpanIndexView, Span, tuple) -> None
    """Walk up from ``span`` and require each ancestor name to match ``parents`` in order."""
    current = span
    for parent in parents:
        p = view.lookup_by_id(current.parent_id)
        if p is None:
            raise SpanAssertionError("parent span for %r not found" % current.name)
        if p.name != parent:
            raise SpanAssertionError("parent span %r did not match expected span %r" % (p.name, parent))
        current = p


class SpanAssertions(object):
    """Assertion API bound to a :class:`SpanIndex`.

    :param index: the index receiving spans
    :param wait_timeout: default seconds :meth:`wait_for_span` waits for
    :param no_span_timeout: default seconds :meth:`expect_no_span` watches for
    :param poll_interval: upper bound in seconds between two evaluations of a condition
    """

    def __init__(self, index, wait_timeout, no_span_timeout, poll_interval):
        # type: (SpanIndex, float, float, float) -> None
        self._index = index
        self.wait_timeout = wait_timeout
        self.no_span_timeout = no_span_timeout
        self.poll_interval = poll_interval

    def span_names(self):
        """Return the names of every received span, sorted."""
        return self._index.names()

    def _span_exists(self, name, parents):
        # type: (str, tuple) -> bool
        with self._index.view() as view:
            span = view.lookup(name)
            if span is None:
                return False
            _check_parents(view, span, parents)
            return True

    def _wait(self, duration, evaluate):
        # type: (float, Callable[[], bool]) -> bool
        """Evaluate ``evaluate`` until it returns true or ``duration`` seconds elapse."""
        sw = StopWatch().start()
        while True:
            generation = self._index.generation
            if evaluate():
                return True
            remaining = sw.remaining(duration)
            if remaining <= 0:
                return False
            self._index.wait_for_update(generation, min(remaining, self.poll_interval) or remaining)

    def wait_for_span(self, name, *parents):
        # type: (str, str) -> None
        """Wait for the named span, optionally checking its ancestors' names, nearest first."""
        self.wait_duration_for_span(self.wait_timeout, name, *parents)

    def wait_duration_for_span(self, duration, name, *parents):
        # type: (float, str, str) -> None
        """Same as :meth:`wait_for_span` with an explicit ``duration`` in seconds."""
        if not self._wait(duration, lambda: self._span_exists(name, parents)):
            raise SpanAssertionError(
                "unable to find span %r in given time, received spans: %r" % (name, self._index.names())
            )

    def expect_no_span(self, name):
        # type: (str) -> None
        """Ensure the named span is not received within the default absence duration."""
        self.expect_duration_no_span(self.no_span_timeout, name)

    def expect_duration_no_span(self, duration, name):
        # type: (float, str) -> None
        """Ensure the named span is not received within ``duration`` seconds."""

        def found():
            # type: () -> bool
            return self._index.lookup(name) is not None

        if self._wait(duration, found):
            raise SpanAssertionError("unexpected span %r found" % name)

    def _get_span(self, view, name):
        # type: (SpanIndexView, str) -> Span
        span = view.lookup(name)
        if span is None:
            raise SpanAssertionError("span named %r not found in spans: %r" % (name, view.names()))
        return span

    def expect_span(self, name, *parents):
        # type: (str, str) -> None
        """Expect the named span, with the given ancestors, to have already been received."""
        with self._index.view() as view:
            _check_parents(view, self._get_span(view, name), parents)

    def expect_span_fn(self, name, fn, msg, *args):
        # type: (str, Callable[[Span], Any], str, Any) -> None
        """Expect the named span to have been received and ``fn(span)`` to be truthy.

        On failure the assertion message is ``msg % args``.
        """
        with self._index.view() as view:
            span = self._get_span(view, name)
        if not fn(span):
            raise SpanAssertionError(msg % args if args else msg)

    def get_span(self, name):
        # type: (str) -> Optional[Span]
        """Return the most recently received span with this name, if any."""
        return self._index.lookup(name)

    def reset(self):
        # type: () -> None
        """Forget every received span."""
        self._index.reset()
        log.debug("received spans reset")
