"""Slug and reference helpers shared by the converters."""

import re

_WHITESPACE_RE = re.compile(r'\s+')
_NON_WORD_RE = re.compile(r'[^\w\-]+')
_MULTI_HYPHEN_RE = re.compile(r'\-\-+')
_SCHEME_RE = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.\-]*:')


def slugify(text) -> str:
    """
    Convert arbitrary text into a URL and filename safe identifier.

    Lower-cases, turns whitespace runs into hyphens, drops anything that is
    not a word character or hyphen, collapses repeated hyphens and trims
    hyphens at both ends. Idempotent.

    Args:
        text: Text to slugify (converted with str())

    Returns:
        Slug string, possibly empty
    """
    slug = str(text).lower()
    slug = _WHITESPACE_RE.sub('-', slug)
    slug = _NON_WORD_RE.sub('', slug)
    slug = _MULTI_HYPHEN_RE.sub('-', slug)
    return slug.strip('-')


def is_absolute_reference(reference: str) -> bool:
    """Check for scheme-prefixed (http:, mailto:, ...) or protocol-relative references."""
    if not reference:
        return False
    return reference.startswith('//') or bool(_SCHEME_RE.match(reference))


def is_embedded_data(reference: str) -> bool:
    """Check for inline data: URIs."""
    return bool(reference) and reference[:5].lower() == 'data:'


def is_fragment_reference(reference: str) -> bool:
    """Check for same-page (#fragment) references."""
    return bool(reference) and reference.startswith('#')


def is_local_reference(reference: str) -> bool:
    """A non-empty reference that points at a file relative to the document."""
    return (
        bool(reference)
        and not is_absolute_reference(reference)
        and not is_embedded_data(reference)
        and not is_fragment_reference(reference)
    )


__all__ = [
    'slugify',
    'is_absolute_reference',
    'is_embedded_data',
    'is_fragment_reference',
    'is_local_reference',
]
