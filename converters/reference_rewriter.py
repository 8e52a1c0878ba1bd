"""Rewrites internal page links and local asset references for the target layout."""

import logging
import os
import posixpath
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from urllib.parse import unquote

from bs4 import BeautifulSoup, Tag

from models import AssetReference, ConversionWarning, WarningKind
from .utils import is_local_reference, slugify

logger = logging.getLogger('html_markdown_porter.converters.reference_rewriter')

_QUERY_OR_FRAGMENT_RE = re.compile(r'[?#]')

MARKUP_EXTENSIONS = ('.html', '.htm')

ASSET_EXTENSIONS = frozenset([
    # documents
    '.pdf', '.doc', '.docx', '.odt', '.rtf', '.txt',
    # spreadsheets
    '.xls', '.xlsx', '.ods', '.csv',
    # presentations
    '.ppt', '.pptx', '.odp',
    # archives
    '.zip', '.tar', '.gz', '.tgz', '.7z', '.rar',
    # images
    '.png', '.jpg', '.jpeg', '.gif', '.svg', '.webp', '.bmp', '.tif', '.tiff', '.ico',
])


class ReferenceRewriter:
    """
    Rewrites hyperlinks and asset references in a parsed document.

    This rewriter:
    1. Points links to sibling HTML pages at their slugified public names
    2. Resolves local images and attachments against the source directory
    3. Records an AssetReference for every asset found on disk
    4. Leaves missing assets untouched and reports a warning
    """

    def __init__(
        self,
        link_prefix: str = "",
        asset_prefix: str = "",
        asset_store=None,
        logger: logging.Logger = None
    ):
        """
        Initialize the reference rewriter.

        Args:
            link_prefix: Prefix for rewritten page links
            asset_prefix: Prefix for rewritten asset references
            asset_store: Object with an exists(path) method; defaults to the local filesystem
            logger: Logger instance
        """
        self.link_prefix = link_prefix
        self.asset_prefix = asset_prefix
        self.asset_store = asset_store
        self.logger = logger or logging.getLogger('html_markdown_porter.converters.reference_rewriter')

    def rewrite(
        self,
        soup: BeautifulSoup,
        source_path: Path
    ) -> Tuple[List[AssetReference], List[ConversionWarning]]:
        """
        Rewrite links and assets in place.

        Args:
            soup: Sanitized document tree
            source_path: Path of the HTML file the tree was parsed from

        Returns:
            Tuple of (asset references to copy, recoverable warnings)
        """
        links_rewritten = self._rewrite_page_links(soup)

        base_dir = Path(source_path).parent
        assets: Dict[Path, AssetReference] = {}
        warnings: List[ConversionWarning] = []

        for element, attr_name in self._asset_candidates(soup):
            reference = self._rewrite_asset(element, attr_name, base_dir, warnings)
            if reference is not None and reference.resolved_path not in assets:
                assets[reference.resolved_path] = reference

        self.logger.debug(
            f"Rewrote {links_rewritten} page link(s), found {len(assets)} asset(s), "
            f"{len(warnings)} missing"
        )
        return list(assets.values()), warnings

    def rewrite_page_link(self, href: str) -> Optional[str]:
        """Return the rewritten target for a link to another HTML page, or None."""
        if not is_local_reference(href):
            return None

        path, sep, fragment = href.partition('#')
        if not path.lower().endswith(MARKUP_EXTENSIONS):
            return None

        decoded = unquote(path)
        stem = posixpath.splitext(posixpath.basename(decoded))[0]
        target = self.link_prefix + slugify(stem)
        if sep and fragment:
            target += '#' + fragment
        return target

    def _rewrite_page_links(self, soup: BeautifulSoup) -> int:
        rewritten = 0
        for a in soup.find_all('a', href=True):
            target = self.rewrite_page_link(a['href'])
            if target is not None:
                a['href'] = target
                rewritten += 1
        return rewritten

    @staticmethod
    def _asset_candidates(soup: BeautifulSoup) -> List[Tuple[Tag, str]]:
        candidates = []
        for element in soup.find_all(['img', 'a']):
            attr_name = 'src' if element.name == 'img' else 'href'
            value = element.get(attr_name)
            if not value or not is_local_reference(value):
                continue
            if element.name == 'a' and not has_asset_extension(value):
                continue
            candidates.append((element, attr_name))
        return candidates

    def _rewrite_asset(
        self,
        element: Tag,
        attr_name: str,
        base_dir: Path,
        warnings: List[ConversionWarning]
    ) -> Optional[AssetReference]:
        original = element[attr_name]
        path_part, suffix = split_reference(original)
        decoded = unquote(path_part)

        candidate = Path(decoded)
        resolved = candidate if candidate.is_absolute() else base_dir / candidate
        resolved = Path(os.path.normpath(resolved.absolute()))

        if not self._exists(resolved):
            message = f"File not found: {resolved}"
            self.logger.warning(f"Warning: {message}")
            warnings.append(ConversionWarning(WarningKind.MISSING_ASSET, message, str(resolved)))
            return None

        public_path = self.asset_prefix + posixpath.basename(path_part) + suffix
        element[attr_name] = public_path
        return AssetReference(original_path=original, resolved_path=resolved, public_path=public_path)

    def _exists(self, path: Path) -> bool:
        if self.asset_store is not None:
            return self.asset_store.exists(path)
        return path.is_file()


def split_reference(reference: str) -> Tuple[str, str]:
    """'a/b.pdf?x=1#p' -> ('a/b.pdf', '?x=1#p')"""
    match = _QUERY_OR_FRAGMENT_RE.search(reference)
    if match is None:
        return reference, ''
    return reference[:match.start()], reference[match.start():]


def has_asset_extension(reference: str) -> bool:
    """Check whether a reference names a binary asset (query and fragment ignored)."""
    path, _ = split_reference(reference)
    return posixpath.splitext(path)[1].lower() in ASSET_EXTENSIONS


__all__ = ['ReferenceRewriter', 'has_asset_extension', 'split_reference', 'ASSET_EXTENSIONS', 'MARKUP_EXTENSIONS']
