"""
Text cleanup for values surfaced to the document.

Two flavors:
  clean_and_format_html(): rich text: keeps inline formatting, turns the
                            export's paragraph soup into <br>-separated text
  strip_tags()           : plain text: drops every tag

Google Docs exports never use <b>/<i>; bold and italic live in inline
``style`` attributes on <span> elements. Those spans are rewritten to
semantic tags before the remaining spans are dropped, otherwise the
formatting would be lost.
"""

import re

from .entities import decode_entities

TAG_PATTERN = re.compile(r'<[^>]*>')
WHITESPACE_PATTERN = re.compile(r'\s+')

# Innermost styled span: its content holds no further <span
BOLD_SPAN = re.compile(
    r'<span[^>]*style="[^"]*font-weight:\s*(?:bold|[7-9]00)[^"]*"[^>]*>((?:(?!<span).)*?)</span>',
    re.IGNORECASE | re.DOTALL
)
ITALIC_SPAN = re.compile(
    r'<span[^>]*style="[^"]*font-style:\s*italic[^"]*"[^>]*>((?:(?!<span).)*?)</span>',
    re.IGNORECASE | re.DOTALL
)
UNDERLINE_SPAN = re.compile(
    r'<span[^>]*style="[^"]*text-decoration:[^"]*underline[^"]*"[^>]*>((?:(?!<span).)*?)</span>',
    re.IGNORECASE | re.DOTALL
)
ANCHOR_PATTERN = re.compile(r'<a\s[^>]*?href="([^"]*)"[^>]*>', re.IGNORECASE)

SPAN_TAG = re.compile(r'</?span[^>]*>', re.IGNORECASE)
BLOCK_OPEN_TAG = re.compile(r'<(?:p|div)(?:\s[^>]*)?>', re.IGNORECASE)
BLOCK_CLOSE_TAG = re.compile(r'</(?:p|div)\s*>', re.IGNORECASE)
BR_RUN = re.compile(r'(?:<br\s*/?>\s*){3,}', re.IGNORECASE)
LEADING_BR = re.compile(r'^(?:\s*<br\s*/?>)+\s*', re.IGNORECASE)
TRAILING_BR = re.compile(r'\s*(?:<br\s*/?>\s*)+$', re.IGNORECASE)

# Nested styled spans resolve from the inside out, one level per pass
MAX_SPAN_PASSES = 5


def collapse_whitespace(text: str) -> str:
    return WHITESPACE_PATTERN.sub(' ', text).strip()


def strip_tags(html: str) -> str:
    """Plain text: tags become spaces, entities decoded, whitespace collapsed."""
    if not html:
        return ''
    return collapse_whitespace(decode_entities(TAG_PATTERN.sub(' ', html)))


def _semantic_spans(html: str) -> str:
    previous = None
    passes = 0
    while html != previous and passes < MAX_SPAN_PASSES:
        previous = html
        html = BOLD_SPAN.sub(r'<strong>\1</strong>', html)
        html = ITALIC_SPAN.sub(r'<em>\1</em>', html)
        html = UNDERLINE_SPAN.sub(r'<u>\1</u>', html)
        passes += 1
    return html


def clean_and_format_html(html: str) -> str:
    """
    Block-level normalization for rich text.

    Keeps inline tags (<b>, <strong>, <em>, <a href>), replaces paragraph and
    div boundaries with <br>, and trims the result so an empty paragraph at
    either end of the value leaves no stray break.
    """
    if not html:
        return ''

    html = html.replace('&nbsp;', ' ')
    html = decode_entities(html)
    html = _semantic_spans(html)
    html = ANCHOR_PATTERN.sub(r'<a href="\1">', html)
    html = SPAN_TAG.sub('', html)
    html = BLOCK_OPEN_TAG.sub('', html)
    html = BLOCK_CLOSE_TAG.sub('<br>', html)
    html = collapse_whitespace(html)
    html = BR_RUN.sub('<br><br>', html)
    html = LEADING_BR.sub('', html)
    html = TRAILING_BR.sub('', html)
    return html.strip()
