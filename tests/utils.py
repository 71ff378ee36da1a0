import contextlib
import http.client as httplib
import itertools
import os
from typing import List  # noqa:F401
from typing import Optional  # noqa:F401
from unittest import TestCase
from urllib import parse

from ddmock.constants import DEFAULT_TRACE_PATH
from ddmock.constants import TRACE_COUNT_HEADER
from ddmock.internal.encoding import encode_batch
from ddmock.span import Span


_span_ids = itertools.count(1)


@contextlib.contextmanager
def override_env(env, replace_os_env=False):
    """
    Temporarily override ``os.environ`` with provided values::

        >>> with self.override_env(dict(DD_MOCK_AGENT_PORT="8126")):
            # Your test
    """
    # Copy the full original environment
    original = dict(os.environ)

    # We allow callers to clear out the environment to prevent leaking variables into the test
    if replace_os_env:
        os.environ.clear()

    # Update based on the passed in arguments
    os.environ.update(env)
    try:
        yield
    finally:
        # Full clear the environment out and reset back to the original
        os.environ.clear()
        os.environ.update(original)


def gen_span(name, parent=None, **kwargs):
    # type: (str, Optional[Span], ...) -> Span
    """Build a span with a fresh span id, child of ``parent`` when given."""
    kwargs.setdefault("service", "test-service")
    kwargs.setdefault("resource", name)
    kwargs.setdefault("span_id", next(_span_ids))
    if parent is not None:
        kwargs.setdefault("trace_id", parent.trace_id)
        kwargs.setdefault("parent_id", parent.span_id)
    else:
        kwargs.setdefault("trace_id", kwargs["span_id"])
    return Span(name=name, **kwargs)


def gen_chain(*names):
    # type: (str) -> List[Span]
    """Build a trace where each span is the child of the previous one."""
    trace = []  # type: List[Span]
    parent = None
    for name in names:
        parent = gen_span(name, parent=parent)
        trace.append(parent)
    return trace


def send_payload(url, body, trace_count=None, path=DEFAULT_TRACE_PATH, method="PUT", headers=None):
    """Send a raw payload to the agent at ``url`` and return the HTTP status."""
    parsed = parse.urlparse(url)
    headers = dict(headers or {})
    headers.setdefault("Content-Type", "application/msgpack")
    if trace_count is not None:
        headers[TRACE_COUNT_HEADER] = str(trace_count)
    conn = httplib.HTTPConnection(parsed.hostname, parsed.port, timeout=2)
    try:
        conn.request(method, path, body=body, headers=headers)
        resp = conn.getresponse()
        resp.read()
        return resp.status
    finally:
        conn.close()


def send_traces(url, traces, path=DEFAULT_TRACE_PATH):
    """Encode ``traces`` and send them the way the tracer's agent writer does."""
    return send_payload(url, encode_batch(traces), trace_count=len(traces), path=path)


class BaseTestCase(TestCase):
    """
    BaseTestCase extends ``unittest.TestCase`` to provide some useful helpers/assertions


    Example::

        from tests.utils import BaseTestCase


        class MyTestCase(BaseTestCase):
            def test_case(self):
                with self.override_env(dict(DD_MOCK_AGENT_WAIT_TIMEOUT="1")):
                    pass
    """

    override_env = staticmethod(override_env)
