"""Markdown renderer: markdownify structural conversion plus ordered custom rules."""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from bs4 import BeautifulSoup, Tag
from markdownify import MarkdownConverter as MarkdownifyConverter

from .utils import is_fragment_reference

logger = logging.getLogger('html_markdown_porter.converters.markdown_converter')

HEADING_RE = re.compile(r'^h([1-6])$')
BRACKETED_NUMBER_RE = re.compile(r'^\[\d+\]$')
NUMERIC_SUFFIX_RE = re.compile(r'(\d+)$')
BACK_REFERENCE_RE = re.compile(r'#[\w\-:.]*ref[\w\-:.]*', re.IGNORECASE)
LIST_ITEM_PREFIX_RE = re.compile(r'^(\s*(?:[-*+]|\d+\.)\s+)', re.DOTALL)

FRAME_TAGS = {'iframe', 'embed', 'object'}
FRAME_ATTRIBUTES = ('width', 'height', 'title')

# Containers whose Markdown structure breaks when wrapped in an inline span
STRUCTURAL_BLOCKS = {'ul', 'ol', 'dl', 'table', 'pre', 'blockquote', 'hr'}

TABLE_SECTIONS = {'tr', 'thead', 'tbody', 'tfoot'}
TABLE_CELLS = {'td', 'th'}
TABLE_ROW_START_RE = re.compile(r'^\s*\| ?')

FOOTNOTE_REFERENCE_CLASSES = {'footnote-ref', 'footnote-reference', 'noteref', 'fnref'}
FOOTNOTE_REFERENCE_ROLES = {'doc-noteref'}
FOOTNOTE_REFERENCE_TYPES = {'noteref'}
FOOTNOTE_BODY_CLASSES = {'footnote', 'footnote-item', 'footnote-body', 'endnote'}
FOOTNOTE_BODY_ROLES = {'doc-footnote', 'doc-endnote'}
FOOTNOTE_BODY_TYPES = {'footnote', 'endnote', 'rearnote'}

SYNTHESIZED_BACK_REFERENCE = '[↩](#fnref{number})'


@dataclass(frozen=True)
class RenderRule:
    """A named predicate/transform pair; the first matching rule renders the element."""

    name: str
    predicate: Callable[[Tag], bool]
    transform: Callable[..., str]

    def matches(self, el: Tag) -> bool:
        return self.predicate(el)


def _attr(value) -> str:
    """Attribute value for raw HTML output."""
    if isinstance(value, (list, tuple)):
        value = ' '.join(value)
    return str(value).replace('"', '&quot;')


def _wrap_core(text: str, identifier: str) -> str:
    """Wrap the non-blank part of text in an id span, keeping surrounding whitespace outside."""
    core = text.strip()
    start = text.find(core) if core else len(text)
    return f'{text[:start]}<span id="{identifier}">{core}</span>{text[start + len(core):]}'

def _classes(el: Tag) -> set:
    return {str(cls).lower() for cls in el.get('class', []) or []}


def _tokens(el: Tag, attribute: str) -> set:
    value = el.get(attribute) or ''
    if isinstance(value, (list, tuple)):
        value = ' '.join(value)
    return {token.lower() for token in str(value).split()}


def _has_marker(el: Tag, classes: set, roles: set, types: set) -> bool:
    return bool(
        _classes(el) & classes
        or _tokens(el, 'role') & roles
        or _tokens(el, 'epub:type') & types
    )


def is_image(el: Tag) -> bool:
    return el.name == 'img'


def is_embedded_frame(el: Tag) -> bool:
    return el.name in FRAME_TAGS


def _fragment_link(el: Tag) -> Optional[Tag]:
    if el.name == 'a':
        return el if is_fragment_reference(el.get('href', '')) else None
    for link in el.find_all('a', href=True):
        if is_fragment_reference(link['href']):
            return link
    return None


def is_footnote_reference(el: Tag) -> bool:
    """Links or superscripts that point at a footnote body."""
    if el.name not in ('a', 'sup'):
        return False
    if _has_marker(el, FOOTNOTE_REFERENCE_CLASSES, FOOTNOTE_REFERENCE_ROLES, FOOTNOTE_REFERENCE_TYPES):
        return True
    if BRACKETED_NUMBER_RE.match(el.get_text().strip()):
        return _fragment_link(el) is not None
    return False


def is_footnote_body(el: Tag) -> bool:
    """Blocks holding the text of a footnote."""
    if el.name in ('a', 'sup'):
        return False
    return _has_marker(el, FOOTNOTE_BODY_CLASSES, FOOTNOTE_BODY_ROLES, FOOTNOTE_BODY_TYPES)


def has_identifier(el: Tag) -> bool:
    """Elements carrying an id, excluding footnote parts which have their own rules."""
    if not el.get('id'):
        return False
    return not (is_footnote_reference(el) or is_footnote_body(el))


class MarkdownRenderer(MarkdownifyConverter):
    """
    Converts a sanitized, rewritten document tree to Markdown.

    Every tag conversion goes through an ordered list of RenderRule objects.
    The first rule whose predicate matches produces the output; elements no
    rule claims fall through to markdownify's structural conversion
    (headings, lists, emphasis, fenced code, tables, blockquotes).
    """

    def __init__(self, rules: Optional[Iterable[RenderRule]] = None, logger: logging.Logger = None, **kwargs):
        """Initialize renderer with an optional custom rule list."""
        markdownify_options = {
            'heading_style': 'ATX',
            'bullets': '-',
            'escape_asterisks': False,
            'escape_underscores': False,
            'escape_misc': False,
            'wrap': False,
        }
        markdownify_options.update(kwargs)
        super().__init__(**markdownify_options)

        self.logger = logger or logging.getLogger('html_markdown_porter.converters.markdown_converter')
        self.rules: List[RenderRule] = list(rules) if rules is not None else self.default_rules()
        self._structural_fn_cache = {}

    def default_rules(self) -> List[RenderRule]:
        """Custom rules in precedence order."""
        return [
            RenderRule('image', is_image, self.convert_image_rule),
            RenderRule('embedded_frame', is_embedded_frame, self.convert_frame_rule),
            RenderRule('identifier', has_identifier, self.convert_identifier_rule),
            RenderRule('footnote_reference', is_footnote_reference, self.convert_footnote_reference_rule),
            RenderRule('footnote_body', is_footnote_body, self.convert_footnote_body_rule),
        ]

    def render(self, soup: BeautifulSoup) -> str:
        """Render the whole tree; a pure function of the tree."""
        self.logger.debug("Rendering document to markdown")
        markdown = self.convert_soup(soup)
        return self._final_cleanup(markdown)

    def match_rule(self, el: Tag) -> Optional[RenderRule]:
        """Return the first rule claiming this element, or None."""
        if el.name == '[document]':
            return None
        for rule in self.rules:
            if rule.matches(el):
                return rule
        return None

    def get_conv_fn(self, tag_name):
        """Route every tag through the rule list before the structural conversion."""
        def convert(el, text, parent_tags=None, **kwargs):
            parent_tags = parent_tags if parent_tags is not None else set()
            rule = self.match_rule(el)
            if rule is not None:
                return rule.transform(el, text, parent_tags)
            return self.convert_structural(el, text, parent_tags)

        return convert

    def convert_structural(self, el: Tag, text: str, parent_tags: set) -> str:
        """markdownify's own conversion for this element (children text if it has none)."""
        tag_name = el.name
        if tag_name not in self._structural_fn_cache:
            self._structural_fn_cache[tag_name] = super().get_conv_fn(tag_name)
        convert_fn = self._structural_fn_cache[tag_name]
        if convert_fn is None:
            return text
        return convert_fn(el, text, parent_tags=parent_tags)

    def convert_image_rule(self, el, text, parent_tags=None):
        alt = el.get('alt', '') or ''
        src = el.get('src', '') or ''
        title = el.get('title', '') or ''
        title_part = f' "{title}"' if title else ''
        return f'![{alt}]({src}{title_part})' if src else ''

    def convert_frame_rule(self, el, text, parent_tags=None):
        src = el.get('src', '') or ''
        if not src and el.name == 'object':
            src = el.get('data', '') or ''

        attributes = [f'{name}="{_attr(el[name])}"' for name in FRAME_ATTRIBUTES if el.get(name)]
        attribute_string = ' ' + ' '.join(attributes) if attributes else ''

        return f'\n\n<iframe src="{_attr(src)}"{attribute_string}></iframe>\n\n'

    def convert_identifier_rule(self, el, text, parent_tags=None):
        parent_tags = parent_tags if parent_tags is not None else set()
        identifier = _attr(el['id'])

        if HEADING_RE.match(el.name or ''):
            rendered = self.convert_structural(el, text, parent_tags)
            body = rendered.rstrip()
            if not body.strip():
                return rendered
            return f'{body} {{#{identifier}}}' + rendered[len(body):]

        anchor = f'<span id="{identifier}"></span>'

        # Raw HTML would show up literally inside code blocks
        if '_noformat' in parent_tags:
            return self.convert_structural(el, text, parent_tags)

        if el.name in TABLE_CELLS:
            # Cell text must stay between the pipes
            return self.convert_structural(el, _wrap_core(text, identifier), parent_tags)

        if el.name in TABLE_SECTIONS:
            rendered = self.convert_structural(el, text, parent_tags)
            match = TABLE_ROW_START_RE.match(rendered)
            if match is None:
                return anchor + rendered
            return rendered[:match.end()] + anchor + rendered[match.end():]

        if el.name == 'li':
            return self._wrap_list_item(el, text, parent_tags, identifier)

        rendered = self.convert_structural(el, text, parent_tags)
        core = rendered.strip()
        if el.name in STRUCTURAL_BLOCKS or '\n' in core:
            if rendered.startswith('\n'):
                return f'\n\n{anchor}{rendered}'
            return anchor + rendered
        if not core:
            return anchor + rendered
        return _wrap_core(rendered, identifier)

    def _wrap_list_item(self, el, text, parent_tags, identifier):
        rendered = self.convert_structural(el, text, parent_tags)
        match = LIST_ITEM_PREFIX_RE.match(rendered)
        if not match:
            return f'<span id="{identifier}"></span>' + rendered
        prefix = match.group(1)
        rest = rendered[len(prefix):]
        first_line, newline, remainder = rest.partition('\n')
        return f'{prefix}<span id="{identifier}">{first_line}</span>{newline}{remainder}'

    def convert_footnote_reference_rule(self, el, text, parent_tags=None):
        if el.name == 'a':
            return self._footnote_anchor(el)

        link = _fragment_link(el)
        inner = self._footnote_anchor(link) if link is not None else el.get_text().strip()
        id_part = f' id="{_attr(el["id"])}"' if el.get('id') else ''
        return f'<sup{id_part}>{inner}</sup>'

    def _footnote_anchor(self, link: Tag) -> str:
        label = link.get_text().strip()
        if link.find('sup') is not None:
            label = f'<sup>{label}</sup>'
        attributes = [f'href="{_attr(link.get("href", ""))}"']
        if link.get('id'):
            attributes.append(f'id="{_attr(link["id"])}"')
        return f'<a {" ".join(attributes)}>{label}</a>'

    def convert_footnote_body_rule(self, el, text, parent_tags=None):
        identifier = el.get('id', '') or ''
        match = NUMERIC_SUFFIX_RE.search(identifier)
        number = match.group(1) if match else None

        body = text.strip()
        if not BACK_REFERENCE_RE.search(body) and number:
            back_reference = SYNTHESIZED_BACK_REFERENCE.format(number=number)
            body = f'{body} {back_reference}' if body else back_reference

        open_tag = f'<div id="{_attr(identifier)}">' if identifier else '<div>'
        return f'\n\n{open_tag}\n\n{body}\n\n</div>\n\n'

    def convert_pre(self, el, text, parent_tags=None, **kwargs):
        """Fenced code blocks with the language taken from class hints."""
        code_el = el.find('code')
        language = self._extract_code_language(code_el if code_el is not None else el)
        code_text = (code_el if code_el is not None else el).get_text()
        code_text = code_text.strip('\n')
        return f"\n\n```{language}\n{code_text}\n```\n\n"

    def _extract_code_language(self, element) -> str:
        """Extract programming language from code element or its pre parent."""
        candidates = [element]
        if element.parent is not None and element.parent.name == 'pre':
            candidates.append(element.parent)

        for candidate in candidates:
            for cls in candidate.get('class', []) or []:
                cls = str(cls)
                if cls.startswith('language-'):
                    return cls[len('language-'):]
                if cls.startswith('lang-'):
                    return cls[len('lang-'):]
            lang = candidate.get('data-language') or candidate.get('data-lang')
            if lang:
                return lang

        return ''

    def _final_cleanup(self, markdown: str) -> str:
        """Collapse runs of blank lines outside fenced code and trim the document."""
        result = []
        in_code_block = False
        blank_run = 0

        for line in markdown.split('\n'):
            if line.strip().startswith('```'):
                in_code_block = not in_code_block
                blank_run = 0
                result.append(line)
                continue

            if not in_code_block and not line.strip():
                blank_run += 1
                if blank_run > 1:
                    continue
                result.append('')
                continue

            blank_run = 0
            result.append(line)

        return '\n'.join(result).strip('\n')


__all__ = [
    'MarkdownRenderer',
    'RenderRule',
    'is_image',
    'is_embedded_frame',
    'has_identifier',
    'is_footnote_reference',
    'is_footnote_body',
]
