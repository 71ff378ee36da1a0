import logging
import time

import mock

from ddmock.internal.logger import CallSiteWindow
from ddmock.internal.logger import DDMockFormatter
from ddmock.internal.logger import RateLimitFilter
from ddmock.internal.logger import get_logger
from ddmock.internal.logger import rate_limit_filter
from tests.utils import BaseTestCase


ALL_LEVEL_NAMES = ("debug", "info", "warning", "error", "exception", "critical")


class LoggerTestCase(BaseTestCase):
    def setUp(self):
        super(LoggerTestCase, self).setUp()
        self.log = get_logger("test.ddmock.logger")
        self._rate = rate_limit_filter.rate
        rate_limit_filter.rate = 60
        rate_limit_filter.reset()

    def tearDown(self):
        self.log.setLevel(logging.NOTSET)
        rate_limit_filter.rate = self._rate
        rate_limit_filter.reset()
        super(LoggerTestCase, self).tearDown()

    def _make_record(self, msg="test", level=logging.INFO, fn="module.py", lno=5):
        return self.log.makeRecord(self.log.name, level, fn, lno, msg, (), None)

    def test_get_logger(self):
        """
        When using `get_logger` to get a logger
            We return a logging.Logger with the rate limit filter installed once
        """
        self.assertIsInstance(self.log, logging.Logger)
        self.assertEqual(self.log.name, "test.ddmock.logger")
        assert rate_limit_filter in self.log.filters

        same_log = get_logger("test.ddmock.logger")
        self.assertIs(self.log, same_log)
        self.assertEqual(self.log.filters.count(rate_limit_filter), 1)

    @mock.patch("logging.Logger.callHandlers")
    def test_no_limit(self, call_handlers):
        """
        When the rate is 0
            Every record reaches the handlers
        """
        self.log.setLevel(logging.INFO)
        rate_limit_filter.rate = 0

        for _ in range(1000):
            self.log.info("test")

        self.assertEqual(call_handlers.call_count, 1000)
        self.assertEqual(rate_limit_filter.windows, dict())

    @mock.patch("logging.Logger.callHandlers")
    def test_debug_level_is_not_limited(self, call_handlers):
        """
        When the effective level is DEBUG
            Every record reaches the handlers
        """
        self.log.setLevel(logging.DEBUG)

        for level in ALL_LEVEL_NAMES:
            log_fn = getattr(self.log, level)
            for _ in range(100):
                log_fn("test")

        self.assertEqual(call_handlers.call_count, 100 * len(ALL_LEVEL_NAMES))
        self.assertEqual(rate_limit_filter.windows, dict())

    @mock.patch("logging.Logger.callHandlers")
    def test_call_site_limited(self, call_handlers):
        """
        When many records come from the same call site in a single window
            Only the first one reaches the handlers
            The others are counted as skipped
        """
        self.log.setLevel(logging.INFO)

        first_time = time.monotonic()
        for _ in range(100):
            self.log.handle(self._make_record())
        second_time = time.monotonic()

        self.assertEqual(call_handlers.call_count, 1)

        window = rate_limit_filter.windows[("module.py", 5)]
        self.assertIsInstance(window, CallSiteWindow)
        assert first_time <= window.started_at <= second_time
        self.assertEqual(window.skipped, 99)

    @mock.patch("logging.Logger.callHandlers")
    def test_call_sites_are_independent(self, call_handlers):
        self.log.setLevel(logging.INFO)

        self.log.handle(self._make_record(lno=1))
        self.log.handle(self._make_record(lno=2))
        self.log.handle(self._make_record(fn="other.py", lno=1))

        self.assertEqual(call_handlers.call_count, 3)
        self.assertEqual(len(rate_limit_filter.windows), 3)

    def test_new_window_reports_skipped(self):
        self.log.setLevel(logging.INFO)
        log_filter = RateLimitFilter(0.01)
        log_filter.windows[("module.py", 5)] = CallSiteWindow(started_at=time.monotonic() - 1, skipped=3)
        record = self._make_record()

        assert log_filter.filter(record)
        self.assertEqual(record.skipped, 3)
        self.assertEqual(log_filter.windows[("module.py", 5)].skipped, 0)
        self.assertEqual(DDMockFormatter().format(record), "INFO test [3 skipped]")

    def test_formatter_without_skipped(self):
        formatter = DDMockFormatter("[%(name)s] %(message)s")
        self.assertEqual(formatter.format(self._make_record()), "INFO [test.ddmock.logger] test")
