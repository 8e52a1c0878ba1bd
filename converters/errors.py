"""Exception hierarchy for the conversion pipeline."""


class ConversionError(Exception):
    """Base class for all porter errors; per-document subclasses carry the offending path."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class DocumentReadError(ConversionError):
    """The source document could not be read."""


class DocumentWriteError(ConversionError):
    """The converted document could not be written."""


class ConfigurationError(ConversionError, ValueError):
    """Invalid configuration value."""


__all__ = [
    'ConversionError',
    'DocumentReadError',
    'DocumentWriteError',
    'ConfigurationError',
]
