import pytest

from ddmock.agent import MockAgent
from ddmock.internal.index import SpanIndex


@pytest.fixture
def index():
    return SpanIndex()


@pytest.fixture
def agent():
    # Independent handle, does not touch DD_TRACE_AGENT_URL
    agent = MockAgent(rewire_environment=False, wait_timeout=1.0, no_span_timeout=0.1)
    with agent:
        yield agent


@pytest.fixture(scope="module")
def module_agent():
    with MockAgent(rewire_environment=False, wait_timeout=1.0) as agent:
        yield agent


@pytest.fixture
def shared_agent(module_agent):
    module_agent.reset()
    yield module_agent
