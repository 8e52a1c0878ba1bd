"""Document converter orchestrating the HTML to Markdown pipeline for one document."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from bs4 import BeautifulSoup

from models import ConversionResult, ConverterConfig
from .content_sanitizer import ContentSanitizer
from .front_matter import FrontMatterBuilder
from .markdown_converter import MarkdownRenderer
from .metadata_extractor import MetadataExtractor
from .reference_rewriter import ReferenceRewriter
from .utils import slugify

logger = logging.getLogger('html_markdown_porter.converters.document_converter')


class DocumentConverter:
    """
    Converts one HTML document into Markdown with front matter.

    Stages run strictly in order on a tree owned by a single convert() call:
    1. Parse HTML (BeautifulSoup + lxml)
    2. Extract metadata while the head is still present
    3. Sanitize: drop non-content regions, pull hashtags, infer alt text
    4. Rewrite page links and asset references
    5. Render Markdown
    6. Build the front matter
    """

    def __init__(
        self,
        config: Optional[ConverterConfig] = None,
        asset_store=None,
        clock: Optional[Callable[[], datetime]] = None,
        logger: logging.Logger = None
    ):
        """
        Initialize document converter.

        Args:
            config: Conversion settings (defaults apply when omitted)
            asset_store: Object with exists(path); defaults to the local filesystem
            clock: Source of the created/modified fallback timestamps
            logger: Logger instance
        """
        self.config = config or ConverterConfig()
        self.asset_store = asset_store
        self.clock = clock
        self.logger = logger or logging.getLogger('html_markdown_porter.converters.document_converter')

    def convert(self, html_content: str, source_path: Union[str, Path]) -> ConversionResult:
        """
        Run the full pipeline on one document.

        Args:
            html_content: Raw HTML text
            source_path: Where the HTML came from; relative assets resolve against its directory

        Returns:
            ConversionResult with the rendered document, asset copy requests and warnings
        """
        source_path = Path(source_path)
        self.logger.info(f"Converting {source_path}")

        soup = self._parse_html(html_content)

        extractor = MetadataExtractor(
            ignore_meta=self.config.ignore_meta,
            asset_prefix=self.config.asset_prefix,
            clock=self.clock,
            logger=self.logger.getChild('metadata')
        )
        extracted = extractor.extract(soup)

        sanitizer = ContentSanitizer(
            ignore_tags=self.config.ignore_tags,
            organizing_tag=self.config.organizing_tag,
            unnest_tags=self.config.unnest_tags,
            italics_to_alt=self.config.italics_to_alt,
            logger=self.logger.getChild('sanitizer')
        )
        tags = sanitizer.sanitize(soup)

        rewriter = ReferenceRewriter(
            link_prefix=self.config.link_prefix,
            asset_prefix=self.config.asset_prefix,
            asset_store=self.asset_store,
            logger=self.logger.getChild('references')
        )
        assets, warnings = rewriter.rewrite(soup, source_path)

        renderer = MarkdownRenderer(logger=self.logger.getChild('renderer'))
        body = renderer.render(soup)

        document = FrontMatterBuilder(logger=self.logger.getChild('front_matter')).build(extracted, tags, body)

        self.logger.debug(
            f"Converted {source_path}: title={extracted.title!r}, {len(tags)} tag(s), "
            f"{len(assets)} asset(s), {len(warnings)} warning(s)"
        )
        return ConversionResult(source_path=source_path, document=document, assets=assets, warnings=warnings)

    def convert_standalone_html(self, html_content: str, source_path: Union[str, Path] = 'document.html') -> str:
        """Convert an HTML string and return the final file content."""
        return self.convert(html_content, source_path).document.to_text()

    @staticmethod
    def output_name(source_path: Union[str, Path]) -> str:
        """Output file name: slugified input stem plus .md"""
        return f"{slugify(Path(source_path).stem)}.md"

    def _parse_html(self, html_content: str) -> BeautifulSoup:
        """Parse HTML content with BeautifulSoup."""
        return BeautifulSoup(html_content, 'lxml')


__all__ = ['DocumentConverter']
