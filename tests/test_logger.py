"""Tests for logging setup and the batch tracker."""

import logging
from pathlib import Path

import pytest

from logger import LOGGER_NAME, ConversionTracker, format_duration, resolve_level, setup_logging
from models import ConversionStatus, ConversionWarning, DocumentOutcome, WarningKind


class TestResolveLevel:

    @pytest.mark.parametrize('verbosity, expected', [
        (0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG),
    ])
    def test_verbosity(self, verbosity, expected):
        """Test mapping -v counts to levels."""
        assert resolve_level(verbosity) == expected

    def test_explicit_level_wins(self):
        """Test that an explicit level overrides verbosity."""
        assert resolve_level(2, 'error') == logging.ERROR

    def test_invalid_level(self):
        """Test that an unknown level name is rejected."""
        with pytest.raises(ValueError):
            resolve_level(level='chatty')


class TestSetupLogging:

    def test_file_handler(self, tmp_path):
        """Test logging to a file."""
        log_file = tmp_path / "porter.log"

        logger = setup_logging(verbosity=1, log_file=str(log_file))
        logger.info("hello from the test")
        for handler in logger.handlers:
            handler.flush()

        assert logger.name == LOGGER_NAME
        assert logger.level == logging.INFO
        assert "hello from the test" in log_file.read_text(encoding='utf-8')

        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def test_repeated_setup_replaces_handlers(self):
        """Test that repeated setup replaces handlers."""
        setup_logging()
        logger = setup_logging()

        assert len(logger.handlers) == 1
        logger.handlers.clear()


class TestConversionTracker:

    def test_counts_outcomes(self):
        """Test counting document outcomes."""
        ok = DocumentOutcome(Path("a.html"), ConversionStatus.SUCCESS, warnings=[
            ConversionWarning(WarningKind.MISSING_ASSET, "File not found: x.png")
        ])
        bad = DocumentOutcome(Path("b.html"), ConversionStatus.READ_FAILED)

        with ConversionTracker(2) as tracker:
            tracker.record(ok)
            tracker.record(bad)

        stats = tracker.stats()
        assert stats['converted'] == 1
        assert stats['failed'] == 1
        assert stats['warnings'] == 1
        assert tracker.processed == 2

    def test_summary_logged_as_error_when_everything_failed(self, caplog):
        """Test that the summary is an error when every document failed."""
        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            with ConversionTracker(1) as tracker:
                tracker.record(DocumentOutcome(Path("b.html"), ConversionStatus.WRITE_FAILED))

        summary = [r for r in caplog.records if 'Batch finished' in r.getMessage()]
        assert len(summary) == 1
        assert summary[0].levelno == logging.ERROR


@pytest.mark.parametrize('seconds, expected', [
    (1.5, '1.5s'),
    (75, '1m 15s'),
    (3700, '1h 1m 40s'),
])
def test_format_duration(seconds, expected):
    """Test human-readable durations."""
    assert format_duration(seconds) == expected
