"""Tests for logging setup and PII masking."""

import logging

import pytest

from invoice_parser.config import get_settings
from invoice_parser.core.logging import PIIFilter, filter_pii, setup_logging


class TestFilterPII:
    """Test suite for filter_pii."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("card 4111 1111 1111 1111 used", "card [CARD] used"),
            ("CARTÃO 5364****3145", "CARTÃO [CARD]"),
            ("mail joao@example.com now", "mail [EMAIL] now"),
            ("CPF 123.456.789-09", "CPF [CPF]"),
            ("nothing sensitive", "nothing sensitive"),
            ("", ""),
        ],
    )
    def test_patterns(self, text, expected):
        """Test each PII pattern."""
        assert filter_pii(text) == expected


class TestPIIFilter:
    """Test suite for PIIFilter."""

    def test_masks_formatted_message(self):
        """Test arguments are masked after formatting."""
        record = logging.LogRecord(
            "test", logging.INFO, __file__, 1, "Card %s parsed", ("5364****3145",), None
        )

        assert PIIFilter().filter(record) is True
        assert record.getMessage() == "Card [CARD] parsed"

    def test_leaves_clean_records(self):
        """Test records without PII keep their arguments."""
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "Parsed %d", (3,), None)

        PIIFilter().filter(record)

        assert record.args == (3,)


class TestSetupLogging:
    """Test suite for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers = handlers
        root.setLevel(level)

    def test_console_handler_with_filter(self):
        """Test a console handler with PII filtering is installed."""
        before = len(logging.getLogger().handlers)

        setup_logging("DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == before + 1
        assert any(isinstance(f, PIIFilter) for f in root.handlers[-1].filters)

    def test_file_handler(self, tmp_path):
        """Test records written to the log file are masked."""
        log_file = tmp_path / "logs" / "parser.log"

        setup_logging("INFO", log_file=str(log_file))
        logging.getLogger("invoice_parser.test").info("Card %s", "5364****3145")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text()
        assert "[CARD]" in content
        assert "5364****3145" not in content

    def test_level_from_settings(self, monkeypatch):
        """Test INVOICE_PARSER_LOG_LEVEL is used when no level is passed."""
        monkeypatch.setenv("INVOICE_PARSER_LOG_LEVEL", "WARNING")
        get_settings.cache_clear()
        try:
            setup_logging()
        finally:
            get_settings.cache_clear()

        assert logging.getLogger().level == logging.WARNING

    def test_repeated_setup_does_not_duplicate_output(self):
        """Test a second call replaces the handlers of the first."""
        before = len(logging.getLogger().handlers)

        setup_logging("INFO")
        setup_logging("DEBUG")

        root = logging.getLogger()
        pii_handlers = [
            h for h in root.handlers if any(isinstance(f, PIIFilter) for f in h.filters)
        ]
        assert len(root.handlers) == before + 1
        assert len(pii_handlers) == 1
        assert root.level == logging.DEBUG
