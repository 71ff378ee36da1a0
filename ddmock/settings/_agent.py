from envier import En

from ddmock.constants import AGENT_URL_ENV_VAR
from ddmock.constants import DEFAULT_HOSTNAME
from ddmock.constants import DEFAULT_NO_SPAN_TIMEOUT
from ddmock.constants import DEFAULT_POLL_INTERVAL
from ddmock.constants import DEFAULT_REQUEST_TIMEOUT
from ddmock.constants import DEFAULT_TRACE_PATH
from ddmock.constants import DEFAULT_WAIT_TIMEOUT


def _validate_path(path):
    # type: (str) -> None
    if not path.startswith("/"):
        raise ValueError("trace path must start with '/': %r" % path)


def _validate_non_negative(value):
    # type: (float) -> None
    if value < 0:
        raise ValueError("value must not be negative: %r" % value)


def _validate_positive(value):
    # type: (float) -> None
    if value <= 0:
        raise ValueError("value must be positive: %r" % value)


class MockAgentConfig(En):
    __prefix__ = "dd.mock_agent"

    hostname = En.v(
        str,
        "hostname",
        default=DEFAULT_HOSTNAME,
        help_type="String",
        help="Address the mock agent binds to",
    )

    port = En.v(
        int,
        "port",
        default=0,
        help_type="Int",
        help="Port the mock agent binds to, 0 picks a free ephemeral port",
    )

    trace_path = En.v(
        str,
        "trace_path",
        default=DEFAULT_TRACE_PATH,
        validator=_validate_path,
        help_type="String",
        help="URL path on which trace payloads are accepted",
    )

    wait_timeout = En.v(
        float,
        "wait_timeout",
        default=DEFAULT_WAIT_TIMEOUT,
        validator=_validate_non_negative,
        help_type="Float",
        help="Default number of seconds to wait for a span to be received",
    )

    no_span_timeout = En.v(
        float,
        "no_span_timeout",
        default=DEFAULT_NO_SPAN_TIMEOUT,
        validator=_validate_non_negative,
        help_type="Float",
        help="Default number of seconds during which a span must not be received",
    )

    poll_interval = En.v(
        float,
        "poll_interval",
        default=DEFAULT_POLL_INTERVAL,
        validator=_validate_non_negative,
        help_type="Float",
        help="Maximum number of seconds between two evaluations of a waited condition",
    )

    request_timeout = En.v(
        float,
        "request_timeout",
        default=DEFAULT_REQUEST_TIMEOUT,
        validator=_validate_positive,
        help_type="Float",
        help="Seconds a client connection may stay silent before the mock agent drops it",
    )

    logging_rate = En.v(
        int,
        "logging_rate",
        default=60,
        validator=_validate_non_negative,
        help_type="Int",
        help="Seconds between two records logged from the same line, 0 disables the rate limit",
    )

    url_env_var = En.v(
        str,
        "url_env_var",
        default=AGENT_URL_ENV_VAR,
        help_type="String",
        help="Environment variable pointed at the mock agent URL while it runs",
    )


config = MockAgentConfig()
