"""
Tests for logger functionality.
"""

import pytest
from collegematrix.logger import StructuredLogger, get_logger, reset_logger


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
        assert logger.metrics["saves_attempted"] == 0

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        # Should not raise exceptions
        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_context_is_serialized(self, tmp_path):
        """Context values that are not JSON types fall back to str()."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Saved", user_id="user-1", path=tmp_path)

        log_content = next(tmp_path.glob("*.log")).read_text()
        assert '"user_id": "user-1"' in log_content
        assert str(tmp_path) in log_content

    def test_metrics_tracking(self, tmp_path):
        """Metrics should be tracked correctly."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.record_load(found=True)
        logger.record_load(found=False)
        for _ in range(4):
            logger.record_save_attempt()
        logger.record_save_written()
        logger.record_save_written()
        logger.record_save_refused()
        logger.record_failure("TransportError")
        logger.record_save_coalesced()

        metrics = logger.get_metrics()

        assert metrics["loads"] == 2
        assert metrics["loads_not_found"] == 1
        assert metrics["saves_written"] == 2
        assert metrics["saves_refused"] == 1
        assert metrics["saves_failed"] == 1
        assert metrics["saves_coalesced"] == 1
        assert metrics["errors_by_type"]["TransportError"] == 1
        assert metrics["save_success_rate"] == 0.5

    def test_success_rate_calculation(self, tmp_path):
        """Success rate should be calculated correctly."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        # 3 attempts, 2 written = 66.7% success rate
        for _ in range(3):
            logger.record_save_attempt()
        logger.record_save_written()
        logger.record_save_written()

        assert logger.get_metrics()["save_success_rate"] == pytest.approx(0.667, rel=0.01)

    def test_get_metrics_returns_copy(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        metrics = logger.get_metrics()
        metrics["errors_by_type"]["Boom"] = 1

        assert logger.metrics["errors_by_type"] == {}

    def test_log_file_creation(self, tmp_path):
        """Log file should be created in specified directory."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Test message")

        log_files = list(tmp_path.glob("*.log"))
        assert len(log_files) == 1
        assert log_files[0].name.startswith("collegematrix_")
        assert "Test message" in log_files[0].read_text()

    def test_metrics_summary(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        logger.record_save_attempt()
        logger.record_failure("TransportError")

        logger.log_metrics_summary()

        log_content = next(tmp_path.glob("*.log")).read_text()
        assert "Persistence Metrics" in log_content
        assert "TransportError: 1" in log_content


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        """get_logger should return same instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        """reset_logger should create new instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_save_attempt()

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)

        assert logger2.metrics["saves_attempted"] == 0
