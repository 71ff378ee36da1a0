import pytest

import ddmock
from ddmock.internal.logger import get_logger


log = get_logger(__name__)

HELP_MSG = "Start a mock Datadog agent for the test session."


def is_enabled(config):
    """Check if the ddmock plugin is enabled."""
    return bool(config.getoption("ddmock") or config.getini("ddmock"))


def pytest_addoption(parser):
    group = parser.getgroup("ddmock")
    group.addoption("--ddmock", action="store_true", dest="ddmock", default=False, help=HELP_MSG)
    parser.addini("ddmock", HELP_MSG, type="bool")


def pytest_configure(config):
    config.addinivalue_line("markers", "ddmock: tests using the mock Datadog agent")
    if is_enabled(config):
        agent = ddmock.start()
        log.debug("ddmock agent started for the session at %s", agent.url)


def pytest_unconfigure(config):
    if is_enabled(config):
        ddmock.stop()


@pytest.fixture(scope="session")
def ddmock_agent(pytestconfig):
    agent = ddmock.get_agent()
    if agent is None:
        pytest.skip("the mock agent is disabled, enable it with --ddmock")
    return agent


@pytest.fixture
def ddmock_spans(ddmock_agent):
    ddmock_agent.reset()
    yield ddmock_agent
