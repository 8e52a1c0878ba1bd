"""Metadata extraction from the document head and leading content."""

import logging
import posixpath
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Optional

from bs4 import BeautifulSoup

from models import ExtractedMetadata
from .utils import is_absolute_reference, is_embedded_data

logger = logging.getLogger('html_markdown_porter.converters.metadata_extractor')

UNTITLED = "Untitled"


def utc_now() -> datetime:
    """Default clock for the created/modified fallbacks."""
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime('%Y-%m-%dT%H:%M:%S.') + f"{moment.microsecond // 1000:03d}Z"


class MetadataExtractor:
    """Reads <meta> fields and derives title, description and lead image."""

    def __init__(
        self,
        ignore_meta: Optional[Iterable[str]] = None,
        asset_prefix: str = "",
        clock: Optional[Callable[[], datetime]] = None,
        logger: logging.Logger = None
    ):
        self.ignore_meta = {name.strip().lower() for name in (ignore_meta or []) if name.strip()}
        self.asset_prefix = asset_prefix
        self.clock = clock or utc_now
        self.logger = logger or logging.getLogger('html_markdown_porter.converters.metadata_extractor')

    def extract(self, soup: BeautifulSoup) -> ExtractedMetadata:
        """
        Capture document metadata. Does not modify the tree.

        Args:
            soup: Parsed document, still containing its <head>

        Returns:
            ExtractedMetadata with the ordered field mapping and derived values
        """
        metadata = self._read_meta_fields(soup)

        timestamp = None
        for key in ('created', 'modified'):
            if not metadata.get(key):
                if timestamp is None:
                    timestamp = format_timestamp(self.clock())
                self.logger.debug(f"No '{key}' metadata, defaulting to {timestamp}")
                metadata[key] = timestamp

        title = metadata.get('title') or self._element_text(soup, 'title') or self._element_text(soup, 'h1')
        if not title:
            title = UNTITLED

        description = metadata.get('description') or self._element_text(soup, 'p') or ""

        return ExtractedMetadata(
            metadata=metadata,
            title=title,
            description=description,
            first_image_path=self._first_image_path(soup)
        )

    def _read_meta_fields(self, soup: BeautifulSoup) -> Dict[str, str]:
        metadata: Dict[str, str] = {}
        for meta in soup.find_all('meta', attrs={'name': True}):
            name = meta['name'].strip().lower()
            if not name or name in self.ignore_meta:
                continue
            # Later declarations overwrite earlier ones but keep their first position
            metadata[name] = meta.get('content', '')
        return metadata

    @staticmethod
    def _element_text(soup: BeautifulSoup, tag_name: str) -> str:
        element = soup.find(tag_name)
        if element is None:
            return ""
        return element.get_text().strip()

    def _first_image_path(self, soup: BeautifulSoup) -> str:
        img = soup.find('img')
        if img is None:
            return ""
        src = img.get('src', '')
        if not src or is_absolute_reference(src) or is_embedded_data(src):
            return ""
        return self.asset_prefix + posixpath.basename(src)


__all__ = ['MetadataExtractor', 'format_timestamp', 'utc_now', 'UNTITLED']
