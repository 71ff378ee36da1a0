"""
The pytest plugin runs one mock agent for the whole test session.

Enabling
~~~~~~~~

The plugin is registered automatically when ``ddmock`` is installed, but the agent is only
started when enabled with ``pytest --ddmock`` or in any configuration file read by pytest::

    [pytest]
    ddmock = 1

Fixtures
~~~~~~~~

``ddmock_agent``
   The session-wide :class:`ddmock.MockAgent`. ``DD_TRACE_AGENT_URL`` points at it for the
   duration of the session.

``ddmock_spans``
   The same agent, with every received span forgotten before the test runs.
"""
