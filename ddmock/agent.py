import os
import threading
from typing import Optional

from ddmock.assertions import SpanAssertions
from ddmock.internal.index import SpanIndex
from ddmock.internal.logger import get_logger
from ddmock.internal.receiver import TraceReceiver
from ddmock.internal.receiver import make_server
from ddmock.internal.service import ServerService
from ddmock.internal.service import ServiceAlreadyRunning
from ddmock.internal.service import ServiceStatus
from ddmock.settings import config


log = get_logger(__name__)


class MockAgentAlreadyStarted(ServiceAlreadyRunning):
    pass


# Only one agent at a time may own the process-wide agent URL
_environment_lock = threading.Lock()
_environment_owner = None  # type: Optional[MockAgent]

# Agent started through the module level start()/stop() helpers
_agent = None  # type: Optional[MockAgent]


def _or(value, default):
    return default if value is None else value


class MockAgent(ServerService, SpanAssertions):
    """A fake Datadog agent collecting the traces sent to it.

    The agent exposes the assertion API of :class:`ddmock.assertions.SpanAssertions`::

        with MockAgent() as agent:
            ...  # code under test sends traces to agent.url
            agent.wait_for_span("web.request")
            agent.expect_span("db.query", "web.request")

    Unless ``rewire_environment`` is false, starting the agent points the tracing client's
    agent URL environment variable (``DD_TRACE_AGENT_URL`` by default) at it and stopping
    it restores the previous value. Since this is process-wide state only one such agent
    may run at a time; starting a second one raises :class:`MockAgentAlreadyStarted`.
    Agents started with ``rewire_environment=False`` are plain handles: pass ``agent.url``
    to the code under test.

    Parameters left to ``None`` are taken from :data:`ddmock.settings.config`.
    """

    def __init__(
        self,
        hostname=None,  # type: Optional[str]
        port=None,  # type: Optional[int]
        trace_path=None,  # type: Optional[str]
        wait_timeout=None,  # type: Optional[float]
        no_span_timeout=None,  # type: Optional[float]
        poll_interval=None,  # type: Optional[float]
        request_timeout=None,  # type: Optional[float]
        rewire_environment=True,  # type: bool
    ):
        # type: (...) -> None
        ServerService.__init__(self)
        index = SpanIndex()
        SpanAssertions.__init__(
            self,
            index,
            wait_timeout=_or(wait_timeout, config.wait_timeout),
            no_span_timeout=_or(no_span_timeout, config.no_span_timeout),
            poll_interval=_or(poll_interval, config.poll_interval),
        )
        self._address = (_or(hostname, config.hostname), _or(port, config.port))
        self._request_timeout = _or(request_timeout, config.request_timeout)
        self._receiver = TraceReceiver(index, _or(trace_path, config.trace_path))
        self._rewire_environment = rewire_environment
        self._url_env_var = config.url_env_var
        self._previous_url = None  # type: Optional[str]

    def __repr__(self):
        return "%s(url=%r, trace_path=%r, status=%s)" % (
            self.__class__.__name__,
            self.url if self.status == ServiceStatus.RUNNING else None,
            self.trace_path,
            self.status.value,
        )

    @property
    def url(self):
        # type: () -> str
        """Base URL of the running agent, e.g. ``http://127.0.0.1:51234``."""
        host, port = self.server_address[:2]
        if ":" in host:
            host = "[%s]" % host
        return "http://%s:%d" % (host, port)

    @property
    def trace_path(self):
        # type: () -> str
        return self._receiver.trace_path

    def set_trace_path(self, path):
        # type: (str) -> None
        """Change the URL path on which trace payloads are accepted."""
        if not path.startswith("/"):
            raise ValueError("trace path must start with '/': %r" % path)
        self._receiver.trace_path = path

    def _acquire_environment(self):
        # type: () -> None
        global _environment_owner

        with _environment_lock:
            if _environment_owner is not None:
                raise MockAgentAlreadyStarted("Mocking the Datadog agent is only allowed once at a time")
            _environment_owner = self

    def _release_environment(self):
        # type: () -> None
        global _environment_owner

        with _environment_lock:
            if _environment_owner is self:
                _environment_owner = None

    def _make_server(self):
        if self._rewire_environment:
            self._acquire_environment()
        try:
            return make_server(self._address, self._receiver, timeout=self._request_timeout)
        except Exception:
            if self._rewire_environment:
                self._release_environment()
            raise

    def _on_start(self):
        # type: () -> None
        if self._rewire_environment:
            self._previous_url = os.environ.get(self._url_env_var)
            os.environ[self._url_env_var] = self.url
        log.debug("mock agent listening on %s%s", self.url, self.trace_path)

    def _on_stop(self):
        # type: () -> None
        if self._rewire_environment:
            if self._previous_url is None:
                os.environ.pop(self._url_env_var, None)
            else:
                os.environ[self._url_env_var] = self._previous_url
            self._previous_url = None
            self._release_environment()
        log.debug("mock agent stopped")


def start(**kwargs):
    # type: (...) -> MockAgent
    """Start the process-wide mock agent.

    Keyword arguments are passed to :class:`MockAgent`. The tracing client's agent URL
    environment variable points at the new agent until :func:`stop` is called.

    :raises MockAgentAlreadyStarted: if an agent already owns the agent URL
    """
    global _agent

    agent = MockAgent(**kwargs)
    agent.start()
    _agent = agent
    return agent


def stop():
    # type: () -> None
    """Stop the agent started with :func:`start`, if any."""
    global _agent

    agent, _agent = _agent, None
    if agent is not None:
        agent.stop()


def get_agent():
    # type: () -> Optional[MockAgent]
    """Return the agent started with :func:`start`, if it is still running."""
    return _agent
