"""Front matter header assembly."""

import logging
from typing import Iterable, List, Tuple

from models import ExtractedMetadata, RenderedDocument

logger = logging.getLogger('html_markdown_porter.converters.front_matter')

# Emitted up front, never repeated in the metadata pass
RESERVED_KEYS = ('title', 'description', 'tags')


def format_tag_list(tags: Iterable[str]) -> str:
    """Render tags as a quoted inline array: ["a", "b"]."""
    return '[' + ', '.join(f'"{tag}"' for tag in tags) + ']'


class FrontMatterBuilder:
    """Merges extracted metadata, computed fields and tags into a RenderedDocument.

    Values are written as-is; quotes and colons inside values are not escaped.
    """

    def __init__(self, logger: logging.Logger = None):
        self.logger = logger or logging.getLogger('html_markdown_porter.converters.front_matter')

    def build(self, extracted: ExtractedMetadata, tags: List[str], body: str) -> RenderedDocument:
        fields: List[Tuple[str, str]] = [
            ('title', f'"{extracted.title}"'),
            ('description', f'"{extracted.description}"'),
        ]

        skipped = set(RESERVED_KEYS)
        if extracted.first_image_path:
            fields.append(('image', f'"{extracted.first_image_path}"'))
            skipped.add('image')

        fields.append(('tags', format_tag_list(tags)))

        for key, value in extracted.metadata.items():
            if key in skipped:
                continue
            fields.append((key, value))

        self.logger.debug(f"Front matter has {len(fields)} field(s)")
        return RenderedDocument(front_matter=tuple(fields), tags=tuple(tags), body=body)


__all__ = ['FrontMatterBuilder', 'format_tag_list', 'RESERVED_KEYS']
