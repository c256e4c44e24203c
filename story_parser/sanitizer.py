"""
JSON Field Sanitizer.

Authors type list fields (``steps``, ``images``, ``items``...) by hand in the
word processor, so what reaches us is JSON-ish text wrapped in <span> tags,
with curly quotes, non-breaking spaces, single-quoted strings, unquoted keys
and trailing commas. Sanitization, in order:

  1. strip tags
  2. decode entities (&nbsp; becomes a plain space)
  3. collapse whitespace runs, newlines included
  4. fold every double-quote-like character to ", every single-quote-like one to '
  5. rewrite single-quoted strings as double-quoted ones
  6. outside string literals: drop trailing commas, quote bare keys,
     tighten the whitespace around ':' and ','

then a strict ``json.loads``. A field that still fails resolves to [] and a
warning naming the field; one malformed list never aborts the document.
"""

import json
import re
from typing import Any, Optional

from .entities import decode_entities
from .exceptions import FieldParseError
from .formatting import TAG_PATTERN, WHITESPACE_PATTERN, clean_and_format_html
from .logger import get_module_logger, record_warning

logger = get_module_logger("sanitizer")

DOUBLE_QUOTES = re.compile(r'[“”„‟«»″‶ʺ＂]')
SINGLE_QUOTES = re.compile(r'[‘’‚‛‹›′‵ʼ＇]')

DOUBLE_QUOTED = re.compile(r'"(?:[^"\\]|\\.)*"')
# A single-quoted literal sits between JSON punctuation, which keeps
# apostrophes inside words ("it's") out of the match
SINGLE_QUOTED = re.compile(r"""(?<=[\[{:,])(\s*)'((?:[^'\\]|\\.)*)'(?=\s*[,}\]:])""")

TRAILING_COMMA = re.compile(r',\s*([\]}])')
BARE_KEY = re.compile(r'([{,]\s*)([A-Za-z_$][\w$-]*)\s*:')
SEPARATOR_SPACE = re.compile(r'\s*([:,])\s*')

# Object properties that carry author-formatted text
RICH_PROPERTIES = ('text', 'caption', 'content')


def _outside_strings(text: str, fix) -> str:
    """Apply fix to everything except double-quoted string literals."""
    parts = []
    pos = 0
    for literal in DOUBLE_QUOTED.finditer(text):
        parts.append(fix(text[pos:literal.start()]))
        parts.append(literal.group(0))
        pos = literal.end()
    parts.append(fix(text[pos:]))
    return ''.join(parts)


def _requote(match: re.Match) -> str:
    inner = match.group(2).replace("\\'", "'").replace('"', '\\"')
    return f'{match.group(1)}"{inner}"'


def _fix_structure(segment: str) -> str:
    segment = TRAILING_COMMA.sub(r'\1', segment)
    segment = BARE_KEY.sub(r'\1"\2":', segment)
    return SEPARATOR_SPACE.sub(r'\1', segment)


def sanitize_json_text(raw: str) -> str:
    """Turn hand-typed JSON-ish text into strict JSON text (best effort)."""
    text = TAG_PATTERN.sub('', raw)
    text = decode_entities(text.replace('&nbsp;', ' '))
    text = WHITESPACE_PATTERN.sub(' ', text)
    text = DOUBLE_QUOTES.sub('"', text)
    text = SINGLE_QUOTES.sub("'", text)
    text = _outside_strings(text, lambda segment: SINGLE_QUOTED.sub(_requote, segment))
    text = _outside_strings(text, _fix_structure)
    return text.strip()


def _normalize_item(item: dict) -> dict:
    for key, value in item.items():
        if not isinstance(value, str):
            continue
        value = decode_entities(value)
        if key in RICH_PROPERTIES:
            value = clean_and_format_html(value)
        item[key] = value
    return item


def load_json_field(raw: str, field_name: str) -> Any:
    """
    Strict variant: sanitize, parse, normalize.

    Raises:
        FieldParseError: the text is not valid JSON even after sanitization
    """
    cleaned = sanitize_json_text(raw)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise FieldParseError(
            f"Could not parse '{field_name}': {e.msg} (column {e.colno})",
            field_name=field_name,
            raw=cleaned,
            details={"error": str(e)}
        )

    if isinstance(parsed, list):
        return [_normalize_item(item) if isinstance(item, dict) else item for item in parsed]
    if isinstance(parsed, dict):
        return _normalize_item(parsed)
    return parsed


def parse_json_field(raw: str, field_name: str, warnings: Optional[list[str]] = None) -> Any:
    """Lenient variant used by the extractor: failures resolve to []."""
    try:
        return load_json_field(raw, field_name)
    except FieldParseError as e:
        record_warning(logger, warnings, e.message)
        return []
