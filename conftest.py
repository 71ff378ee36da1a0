"""
Local pytest plugin for the ddmock test suite.

Local plugins: https://docs.pytest.org/en/stable/how-to/writing_plugins.html#local-conftest-plugins
"""
import hypothesis


# DEV: Enable the "pytester" fixture used by the plugin tests
pytest_plugins = ("pytester",)

# Disable the "too slow" health checks. We are ok if data generation is slow
hypothesis.settings.register_profile("default", suppress_health_check=(hypothesis.HealthCheck.too_slow,))
hypothesis.settings.load_profile("default")
