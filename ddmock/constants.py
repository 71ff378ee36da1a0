TRACE_COUNT_HEADER = "X-Datadog-Trace-Count"
DEFAULT_TRACE_PATH = "/v0.4/traces"
DEFAULT_HOSTNAME = "127.0.0.1"
AGENT_URL_ENV_VAR = "DD_TRACE_AGENT_URL"

# seconds
DEFAULT_WAIT_TIMEOUT = 0.01
DEFAULT_NO_SPAN_TIMEOUT = 0.1
DEFAULT_POLL_INTERVAL = 0.001
DEFAULT_REQUEST_TIMEOUT = 10.0

MAX_UINT_64BITS = (1 << 64) - 1
MIN_INT_32BITS = -(1 << 31)
MAX_INT_32BITS = (1 << 31) - 1
