"""Content sanitizer: strips non-content regions, extracts hashtags, infers alt text."""

import logging
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import Comment

logger = logging.getLogger('html_markdown_porter.converters.content_sanitizer')

NON_CONTENT_TAGS = ['head', 'script', 'style', 'noscript', 'template']
HASHTAG_CLASS = 'hashtag'
ITALIC_TAGS = {'i', 'em'}


class ContentSanitizer:
    """Prepares a parsed document for rendering by removing what must not be rendered."""

    def __init__(
        self,
        ignore_tags: Optional[Iterable[str]] = None,
        organizing_tag: Optional[str] = None,
        unnest_tags: bool = False,
        italics_to_alt: bool = False,
        logger: logging.Logger = None
    ):
        self.ignore_tags = {tag.strip().lower() for tag in (ignore_tags or []) if tag.strip()}
        if organizing_tag and organizing_tag.strip():
            self.ignore_tags.add(organizing_tag.strip().lstrip('#').lower())
        self.unnest_tags = unnest_tags
        self.italics_to_alt = italics_to_alt
        self.logger = logger or logging.getLogger('html_markdown_porter.converters.content_sanitizer')

    def sanitize(self, soup: BeautifulSoup) -> List[str]:
        """
        Main entry point: mutate the tree in place and return the extracted tags.

        Args:
            soup: Parsed document (metadata must already be captured)

        Returns:
            Ordered list of distinct tags
        """
        self._remove_non_content(soup)
        tags = self._extract_tags(soup)
        if self.italics_to_alt:
            self._infer_alt_text(soup)
        self.logger.debug(f"Sanitized document, {len(tags)} tag(s) extracted")
        return tags

    def _remove_non_content(self, soup: BeautifulSoup) -> None:
        for element in soup.find_all(NON_CONTENT_TAGS):
            element.decompose()

    def clean_tag(self, raw: str) -> Optional[str]:
        """Normalize one hashtag marker's text; None when it should be dropped."""
        tag = raw.strip()
        if tag.startswith('#'):
            tag = tag[1:]

        if self.unnest_tags and '/' in tag:
            tag = tag.split('/')[-1]

        tag = tag.strip()
        if not tag:
            return None
        if tag.lower() in self.ignore_tags:
            self.logger.debug(f"Ignoring tag '{tag}'")
            return None
        return tag

    def _extract_tags(self, soup: BeautifulSoup) -> List[str]:
        tags: List[str] = []
        markers = soup.find_all(class_=HASHTAG_CLASS)

        for marker in markers:
            tag = self.clean_tag(marker.get_text())
            if tag and tag not in tags:
                tags.append(tag)

        for marker in markers:
            # A marker nested in an already removed marker is already gone
            if not marker.decomposed:
                marker.decompose()

        return tags

    def _infer_alt_text(self, soup: BeautifulSoup) -> None:
        """Use an italic caption that follows an image as the image's alt text."""
        for img in soup.find_all('img'):
            caption = self._find_caption(img)
            if caption is None:
                continue

            caption_text = caption.get_text().strip()
            if not caption_text:
                continue

            img['alt'] = caption_text
            caption.decompose()

            sibling = img.next_sibling
            while sibling is not None and (_is_line_break(sibling) or _is_blank_text(sibling)):
                following = sibling.next_sibling
                sibling.extract()
                sibling = following

            self.logger.debug(f"Inferred alt text for image {img.get('src', '')!r}: {caption_text!r}")

    @staticmethod
    def _find_caption(img: Tag) -> Optional[Tag]:
        """Skip whitespace and <br>, then match an italic element or stop."""
        node = img.next_sibling
        while node is not None:
            if _is_blank_text(node) or _is_line_break(node):
                node = node.next_sibling
                continue
            if isinstance(node, Tag) and node.name in ITALIC_TAGS:
                return node
            return None
        return None


def _is_blank_text(node) -> bool:
    return isinstance(node, NavigableString) and not isinstance(node, Comment) and not node.strip()


def _is_line_break(node) -> bool:
    return isinstance(node, Tag) and node.name == 'br'


__all__ = ['ContentSanitizer', 'NON_CONTENT_TAGS', 'HASHTAG_CLASS']
