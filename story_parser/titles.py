"""
Title/Slug Resolver.

Pipeline position: Stage 6 of 7.

Title fallback chain, first success wins:
  1. the first ``header`` block (its ``title``, else its ``text``)
  2. a legacy ``title:`` line in loose content, ahead of any ``type:`` record
  3. best effort from the export's markup: <title> (minus the word
     processor's suffix), then the first <h1>
  4. nothing: a warning; the caller decides on a synthetic title

The markup step is intentionally shallow. Style-based guesses (large or
bold runs of text) are unreliable on word-processor exports and are not
attempted.
"""

import re
import time
import unicodedata
from typing import Optional

from bs4 import BeautifulSoup

from .entities import decode_entities
from .formatting import collapse_whitespace, strip_tags
from .schemas import Block
from .field_tables import TYPE_FIELD
from .tokenizer import mask_markup, scan
from .logger import get_module_logger, record_warning

logger = get_module_logger("titles")

LEGACY_TITLE = re.compile(r'(?<![\w-])title:')
LEGACY_TITLE_VALUE = re.compile(r'[^\S\n]*([^\n<]*)')
EXPORT_SUFFIX = re.compile(r'\s*-\s*(?:Google\s*(?:Docs|Drive)|Documentos\s*Google)\s*$', re.IGNORECASE)

NON_SLUG_RUN = re.compile(r'[^a-z0-9]+')
SLUG_MAX_LENGTH = 50


def slugify(title: Optional[str], max_length: int = SLUG_MAX_LENGTH) -> str:
    """
    URL-safe identifier: lower-case ASCII letters, digits and single hyphens.

    Accents are decomposed and dropped ("Eleições" -> "eleicoes"). Returns
    an empty string when nothing sluggable is left.
    """
    if not title:
        return ''
    text = unicodedata.normalize('NFD', title.lower())
    text = ''.join(c for c in text if not unicodedata.combining(c))
    slug = NON_SLUG_RUN.sub('-', text).strip('-')
    # Truncation can end on a hyphen
    return slug[:max_length].rstrip('-')


def fallback_slug() -> str:
    """Low-collision slug for documents without a usable title."""
    return f"doc-{int(time.time() * 1000)}"


def _make_soup(html: str) -> BeautifulSoup:
    # Parser fallback chain: html5lib → lxml → html.parser
    for parser in ('html5lib', 'lxml'):
        try:
            return BeautifulSoup(html, parser)
        except Exception as e:
            logger.debug(f"{parser} unavailable for title lookup: {e}")
    return BeautifulSoup(html, 'html.parser')


class TitleResolver:
    """Determines the document title."""

    def __init__(self, title_from_markup: bool = True):
        self.title_from_markup = title_from_markup

    def resolve(
        self,
        blocks: list[Block],
        loose_texts: list[str],
        raw_html: str,
        warnings: list[str]
    ) -> Optional[str]:
        """
        Run the fallback chain.

        Args:
            blocks: Ordered blocks, header not yet promoted
            loose_texts: Loose content segments, in source order
            raw_html: The export before preprocessing (its <head> holds <title>)
            warnings: Accumulator for this parse

        Returns:
            The title, or None when every step failed
        """
        title = self.from_header(blocks)
        if title:
            logger.debug(f"Title from header block: {title!r}")
            return title

        title = self.from_legacy_declaration(loose_texts)
        if title:
            logger.info(f"Title from legacy title: declaration: {title!r}")
            return title

        if self.title_from_markup:
            title = self.from_markup(raw_html)
            if title:
                logger.info(f"Title from export markup: {title!r}")
                return title

        record_warning(logger, warnings, "No title found in document")
        return None

    @staticmethod
    def from_header(blocks: list[Block]) -> Optional[str]:
        for block in blocks:
            if block.type != 'header':
                continue
            # Typed attribute on HeaderBlock, extra on a block that fell back to Block
            title = getattr(block, 'title', None)
            if not title:
                title = strip_tags(getattr(block, 'text', None) or '')
            return title or None
        return None

    @staticmethod
    def from_legacy_declaration(loose_texts: list[str]) -> Optional[str]:
        for text in loose_texts:
            # Only text ahead of the first record; a title: after it is a block field
            starts = [span.start for span in scan(text) if span.name == TYPE_FIELD]
            end = starts[0] if starts else len(text)
            marker = LEGACY_TITLE.search(mask_markup(text), 0, end)
            if marker is None:
                continue
            value = LEGACY_TITLE_VALUE.match(text[:end], marker.end()).group(1)
            title = collapse_whitespace(decode_entities(value))
            if title:
                return title
        return None

    @staticmethod
    def from_markup(raw_html: str) -> Optional[str]:
        soup = _make_soup(raw_html)

        title_tag = soup.find('title')
        if title_tag is not None:
            title = EXPORT_SUFFIX.sub('', collapse_whitespace(title_tag.get_text()))
            if title:
                return title

        h1 = soup.find('h1')
        if h1 is not None:
            title = collapse_whitespace(h1.get_text(' '))
            if title:
                return title

        return None
