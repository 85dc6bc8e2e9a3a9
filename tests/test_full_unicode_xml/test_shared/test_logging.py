"""Tests for correlation logging."""

import logging

from full_unicode_xml.shared.logging import CorrelationLogger, get_logger


class TestCorrelationLogger:
    """Test suite for CorrelationLogger."""

    def test_component_defaults_to_module_name(self):
        """Test the component is derived from the logger name."""
        logger = CorrelationLogger("full_unicode_xml.api.reader")

        assert logger.component == "reader"
        assert logger.correlation_id is None

    def test_records_carry_correlation_info(self, caplog):
        """Test every record includes component and correlation ID."""
        logger = get_logger("full_unicode_xml.test", "req-42", "tester")

        with caplog.at_level(logging.WARNING, logger="full_unicode_xml.test"):
            logger.warning("Hello", extra={"answer": 42})

        record = caplog.records[-1]
        assert record.getMessage() == "Hello"
        assert record.component == "tester"
        assert record.correlation_id == "req-42"
        assert record.answer == 42

    def test_is_enabled_for(self):
        """Test level checks delegate to the wrapped logger."""
        logger = get_logger("full_unicode_xml.level_check")
        logger.logger.setLevel(logging.WARNING)

        assert logger.is_enabled_for(logging.ERROR) is True
        assert logger.is_enabled_for(logging.DEBUG) is False

    def test_debug_records_suppressed_above_level(self, caplog):
        """Test debug records follow the wrapped logger's level."""
        logger = get_logger("full_unicode_xml.quiet", component="quiet")

        with caplog.at_level(logging.INFO, logger="full_unicode_xml.quiet"):
            logger.debug("Hidden")
            logger.warning("Shown")

        assert [r.getMessage() for r in caplog.records] == ["Shown"]
        assert caplog.records[0].component == "quiet"
