"""Test logging setup and the match failures report"""

import logging

from spot_resolver.core.logger import (
    ErrorOnlyFilter,
    get_logger,
    log_match_failure,
    setup_logging,
    shutdown_logging,
)


class TestSetupLogging:
    """Test setup_logging() outputs"""

    def test_console_only_without_log_dir(self, temp_dir):
        """Test no files are created without a log directory"""
        try:
            setup_logging()
            get_logger("spot_resolver.test").info("hello")
        finally:
            shutdown_logging()

        assert list(temp_dir.iterdir()) == []

    def test_log_files_created(self, temp_dir):
        """Test full, error and match failures logs are written"""
        log_dir = temp_dir / "logs"
        logger = get_logger("spot_resolver.test")

        try:
            setup_logging(log_dir)
            logger.info("token renewed")
            logger.error("renewal failed")
            log_match_failure(
                logger,
                track_name="Song Title",
                artist="Artist Name",
                query="ytsearch:Artist Name - Song Title",
                reason="No matches found",
            )
        finally:
            shutdown_logging()

        full_log = next(log_dir.glob("log_full_*.log")).read_text(encoding="utf-8")
        error_log = next(log_dir.glob("log_errors_*.log")).read_text(encoding="utf-8")
        report = next(log_dir.glob("match_failures_*.log")).read_text(encoding="utf-8")

        assert "token renewed" in full_log
        assert "renewal failed" in error_log
        assert "token renewed" not in error_log
        assert report == (
            "Artist Name - Song Title\n"
            "Query: ytsearch:Artist Name - Song Title\n"
            "Reason: No matches found\n\n"
        )


class TestErrorOnlyFilter:
    """Test ErrorOnlyFilter"""

    def test_levels(self):
        """Test only ERROR and above pass"""
        log_filter = ErrorOnlyFilter()

        def record(level):
            return logging.LogRecord("x", level, __file__, 1, "msg", None, None)

        assert not log_filter.filter(record(logging.WARNING))
        assert log_filter.filter(record(logging.ERROR))
        assert log_filter.filter(record(logging.CRITICAL))
