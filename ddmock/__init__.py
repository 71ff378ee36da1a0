"""
A mock Datadog agent for tests.

The mock agent accepts the trace payloads a tracing client sends to ``/v0.4/traces`` and
lets tests assert on the spans received::

    import ddmock

    agent = ddmock.start()  # DD_TRACE_AGENT_URL now points at the mock agent
    ...
    agent.wait_for_span("web.request")
    agent.expect_span("db.query", "web.request")
    agent.reset()
    ddmock.stop()
"""
from .agent import MockAgent
from .agent import MockAgentAlreadyStarted
from .agent import get_agent
from .agent import start
from .agent import stop
from .assertions import SpanAssertionError
from .internal.encoding import DecodeError
from .internal.encoding import decode_batch
from .internal.encoding import encode_batch
from .settings import config
from .span import Batch
from .span import Span
from .span import Trace


__version__ = "0.1.0"

__all__ = [
    "Batch",
    "DecodeError",
    "MockAgent",
    "MockAgentAlreadyStarted",
    "Span",
    "SpanAssertionError",
    "Trace",
    "config",
    "decode_batch",
    "encode_batch",
    "get_agent",
    "start",
    "stop",
]
