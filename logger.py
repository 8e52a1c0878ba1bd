"""Logging setup for the porter plus a batch tracker that summarizes document outcomes."""

import logging
import logging.handlers
import time
from typing import Any, Dict, Optional

import colorlog

LOGGER_NAME = 'html_markdown_porter'

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

LOG_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}

VERBOSITY_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def resolve_level(verbosity: int = 0, level: Optional[str] = None) -> int:
    """
    Map -v counts (or an explicit level name) to a logging level.

    Raises:
        ValueError: If level is not a standard level name
    """
    if level:
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Invalid log level '{level}'")
        return numeric
    return VERBOSITY_LEVELS[min(max(verbosity, 0), len(VERBOSITY_LEVELS) - 1)]


def setup_logging(
    verbosity: int = 0,
    log_file: Optional[str] = None,
    level: Optional[str] = None,
    log_format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT
) -> logging.Logger:
    """
    Configure the package logger: colored console output and an optional rotating log file.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2+=DEBUG
        log_file: Also write plain-text records here
        level: Explicit level name, overrides verbosity
        log_format: Record format shared by both handlers
        date_format: Timestamp format

    Returns:
        The 'html_markdown_porter' logger
    """
    log_level = resolve_level(verbosity, level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    logger.handlers.clear()

    console = colorlog.StreamHandler()
    console.setLevel(log_level)
    console.setFormatter(colorlog.ColoredFormatter(
        fmt='%(log_color)s' + log_format,
        datefmt=date_format,
        log_colors=LOG_COLORS
    ))
    logger.addHandler(console)

    if log_file:
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding='utf-8'
            )
        except OSError as e:
            logger.warning(f"Could not open log file {log_file}: {e}")
        else:
            file_handler.setLevel(log_level)
            file_handler.setFormatter(logging.Formatter(fmt=log_format, datefmt=date_format))
            logger.addHandler(file_handler)
            logger.info(f"Writing log to {log_file}")

    logger.debug(f"Log level set to {logging.getLevelName(log_level)}")
    return logger


class ConversionTracker:
    """
    Context manager counting document outcomes during a batch.

    Logs a line every ``report_every`` documents and for each failure, then
    a summary when the batch ends. The summary is logged at ERROR when
    nothing converted and at WARNING when some documents failed.
    """

    def __init__(self, total: int, report_every: int = 10):
        self.total = total
        self.report_every = report_every
        self.converted = 0
        self.failed = 0
        self.warnings = 0
        self.started: Optional[float] = None
        self.logger = logging.getLogger(LOGGER_NAME)

    def __enter__(self) -> 'ConversionTracker':
        self.started = time.monotonic()
        self.logger.info(f"Converting {self.total} document(s)")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.started is None:
            return

        if self.failed and not self.converted:
            emit = self.logger.error
        elif self.failed:
            emit = self.logger.warning
        else:
            emit = self.logger.info

        emit(
            f"Batch finished in {format_duration(self.elapsed)}: "
            f"{self.converted} converted, {self.failed} failed, {self.warnings} warning(s)"
        )

    @property
    def processed(self) -> int:
        return self.converted + self.failed

    @property
    def elapsed(self) -> float:
        return 0.0 if self.started is None else time.monotonic() - self.started

    def record(self, outcome) -> None:
        """Count one DocumentOutcome."""
        if outcome.succeeded:
            self.converted += 1
        else:
            self.failed += 1
            self.logger.info(f"{outcome.source_path}: {outcome.status.value}")
        self.warnings += len(outcome.warnings)

        if self.processed % self.report_every == 0:
            self.logger.info(f"Processed {self.processed}/{self.total} document(s)")

    def stats(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'converted': self.converted,
            'failed': self.failed,
            'warnings': self.warnings,
            'elapsed': self.elapsed,
        }


def format_duration(seconds: float) -> str:
    """1.5 -> '1.5s', 75 -> '1m 15s', 3700 -> '1h 1m 40s'"""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"


def log_section(title: str) -> None:
    """Log a banner line around a section title."""
    logger = logging.getLogger(LOGGER_NAME)
    banner = "=" * 60
    logger.info(banner)
    logger.info(f"  {title.upper()}")
    logger.info(banner)


CONFIG_LABELS = [
    ('input_folder', 'Input folder'),
    ('output_folder', 'Output folder'),
    ('image_folder', 'Asset folder'),
    ('link_prefix', 'Link prefix'),
    ('asset_prefix', 'Asset prefix'),
    ('ignore_tags', 'Ignored tags'),
    ('ignore_meta', 'Ignored meta fields'),
    ('organizing_tag', 'Organizing tag'),
    ('unnest_tags', 'Unnest tags'),
    ('italics_to_alt', 'Captions as alt text'),
    ('max_workers', 'Workers'),
]


def log_config(config: Dict[str, Any]) -> None:
    """Log the effective settings from ConverterConfig.to_dict()."""
    logger = logging.getLogger(LOGGER_NAME)
    log_section("Configuration")

    for key, label in CONFIG_LABELS:
        value = config.get(key)
        if isinstance(value, list):
            value = ', '.join(value)
        if value in (None, ''):
            value = '(none)'
        logger.info(f"{label}: {value}")


__all__ = [
    'setup_logging',
    'resolve_level',
    'ConversionTracker',
    'format_duration',
    'log_section',
    'log_config',
    'LOGGER_NAME',
]
