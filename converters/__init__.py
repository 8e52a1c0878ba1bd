"""Converters package for HTML to Markdown conversion with front matter."""

import logging

from .content_sanitizer import ContentSanitizer
from .document_converter import DocumentConverter
from .errors import ConfigurationError, ConversionError, DocumentReadError, DocumentWriteError
from .front_matter import FrontMatterBuilder
from .markdown_converter import MarkdownRenderer, RenderRule
from .metadata_extractor import MetadataExtractor
from .reference_rewriter import ReferenceRewriter
from .utils import slugify

logger = logging.getLogger('html_markdown_porter.converters')


def convert_html(html_content, source_path='document.html', config=None, asset_store=None, clock=None, logger=None):
    """
    Convenience function to convert one HTML document.

    This runs the full pipeline:
    1. Metadata extraction (meta fields, title, description, lead image)
    2. Sanitizing (head removal, hashtag extraction, caption to alt text)
    3. Link and asset reference rewriting
    4. Markdown rendering with the custom rules
    5. Front matter assembly

    Args:
        html_content: Raw HTML text
        source_path: Path the HTML was read from (for resolving assets)
        config: Optional ConverterConfig
        asset_store: Optional object with exists(path)
        clock: Optional callable returning the current datetime
        logger: Optional logger instance (uses module logger if not provided)

    Returns:
        ConversionResult

    Example:
        >>> from converters import convert_html
        >>> result = convert_html('<html><head><title>Hi</title></head><body><p>Text</p></body></html>')
        >>> print(result.document.to_text())
    """
    if logger is None:
        logger = logging.getLogger('html_markdown_porter.converters')

    converter = DocumentConverter(config=config, asset_store=asset_store, clock=clock, logger=logger)
    return converter.convert(html_content, source_path)


__all__ = [
    'convert_html',
    'DocumentConverter',
    'MetadataExtractor',
    'ContentSanitizer',
    'ReferenceRewriter',
    'MarkdownRenderer',
    'RenderRule',
    'FrontMatterBuilder',
    'slugify',
    'ConversionError',
    'ConfigurationError',
    'DocumentReadError',
    'DocumentWriteError',
]
