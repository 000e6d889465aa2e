"""
Tests for logger functionality.
"""

from portability.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["jobs_created"] == 0

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_log_with_context(self, tmp_path):
        """Context is appended to the message as JSON."""
        logger = StructuredLogger(
            name="test-context",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Job created", data_type="PHOTOS", payload=b"\x00")

        for handler in logger.logger.handlers:
            handler.flush()
        log_files = list(tmp_path.glob("portability_*.log"))
        assert len(log_files) == 1
        content = log_files[0].read_text(encoding="utf-8")
        assert "Job created" in content
        assert '"data_type": "PHOTOS"' in content

    def test_metrics_tracking(self, tmp_path):
        """Metrics should be tracked correctly."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.record_job_created()
        logger.record_job_created()
        logger.record_job_updated()
        logger.record_lookup(found=True)
        logger.record_lookup(found=False)
        logger.record_failure("InvalidArgument")
        logger.record_failure("InvalidArgument")
        logger.record_failure("OSError")

        metrics = logger.get_metrics()

        assert metrics["jobs_created"] == 2
        assert metrics["jobs_updated"] == 1
        assert metrics["lookups"] == 2
        assert metrics["lookups_missed"] == 1
        assert metrics["lookup_hit_rate"] == 0.5
        assert metrics["failures"] == 3
        assert metrics["errors_by_type"] == {"InvalidArgument": 2, "OSError": 1}

    def test_get_metrics_returns_copy(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        logger.record_failure("OSError")
        logger.get_metrics()["errors_by_type"]["OSError"] = 99
        assert logger.metrics["errors_by_type"]["OSError"] == 1

    def test_no_hit_rate_without_lookups(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        assert "lookup_hit_rate" not in logger.get_metrics()

    def test_log_metrics_summary(self, tmp_path):
        """Summary logging should not raise."""
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        logger.record_job_created()
        logger.record_failure("OSError")
        logger.log_metrics_summary()

    def test_file_disabled(self, tmp_path):
        StructuredLogger(name="test", log_dir=tmp_path, enable_file=False, enable_console=False)
        assert list(tmp_path.iterdir()) == []


class TestGlobalLogger:
    """Test the process-wide logger."""

    def test_get_logger_returns_same_instance(self, tmp_path):
        first = get_logger(log_dir=tmp_path, enable_console=False)
        second = get_logger()
        assert first is second

    def test_reset_logger(self, tmp_path):
        first = get_logger(log_dir=tmp_path, enable_console=False)
        reset_logger()
        second = get_logger(log_dir=tmp_path, enable_console=False)
        assert first is not second
