"""
Unit tests for the global error handler.
"""

import logging
import pytest
from unittest.mock import patch

from dining_watch.utils.error_handler import ErrorSeverity, GlobalErrorHandler, handle_errors


class TestGlobalErrorHandler:

    def test_report_error_updates_counts(self):
        handler = GlobalErrorHandler(logging.getLogger("test"))

        try:
            raise ValueError("bad record")
        except ValueError as e:
            report = handler.report_error(e, component="poller", context={"venue": "A1"})

        assert report.error_type == "ValueError"
        assert "bad record" in report.stack_trace
        assert handler.error_counts['total'] == 1
        assert handler.error_counts['by_component'] == {"poller": 1}
        assert handler.error_counts['by_severity']['medium'] == 1

    def test_error_summary(self):
        handler = GlobalErrorHandler(max_reports=2)

        for i in range(3):
            handler.report_error(RuntimeError(f"fail {i}"), component="notifications.sms",
                                 severity=ErrorSeverity.LOW)

        summary = handler.get_error_summary(hours=1)

        assert summary['total_errors'] == 2
        assert summary['by_component'] == {"notifications.sms": 2}
        assert summary['by_type'] == {"RuntimeError": 2}
        assert handler.error_counts['total'] == 3

    def test_loop_handler_reports_exceptions(self):
        handler = GlobalErrorHandler()

        class FakeLoop:
            def set_exception_handler(self, func):
                self.func = func

        loop = FakeLoop()
        handler.install_loop_handler(loop)
        loop.func(loop, {"message": "Task exception was never retrieved", "exception": KeyError("x")})

        assert handler.error_counts['by_component'] == {"event_loop": 1}


class TestHandleErrors:

    def test_sync_reraise(self):
        handler = GlobalErrorHandler()

        @handle_errors("audio")
        def broken():
            raise OSError("disk full")

        with patch('dining_watch.utils.error_handler.get_error_handler', return_value=handler):
            with pytest.raises(OSError):
                broken()

        assert handler.error_counts['by_component'] == {"audio": 1}

    def test_sync_swallow(self):
        handler = GlobalErrorHandler()

        @handle_errors("audio", severity=ErrorSeverity.LOW, reraise=False)
        def broken():
            raise OSError("disk full")

        with patch('dining_watch.utils.error_handler.get_error_handler', return_value=handler):
            assert broken() is None

        assert handler.error_counts['by_severity']['low'] == 1

    @pytest.mark.asyncio
    async def test_async_wrapper(self):
        handler = GlobalErrorHandler()

        @handle_errors("poller", reraise=False)
        async def broken():
            raise RuntimeError("timeout")

        with patch('dining_watch.utils.error_handler.get_error_handler', return_value=handler):
            assert await broken() is None

        assert handler.error_counts['total'] == 1
