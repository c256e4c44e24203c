"""
Record scanner: splits a region into block records and a record into fields.

Pipeline position: Stage 4 of 7 (and the scanning half of stage 5).
Input:  raw text of a structural region or of the loose content
Output: one raw string per block record, each starting at ``type:``;
        per record, the span of every known field

Markers (``type:`` and known field names) are only recognized in text
content. Tags are masked first, so CSS such as ``style="width: 602px"``
never opens a field; masking keeps offsets, so values are sliced from the
unmasked text with their markup intact.

Scanner states:
  OUTSIDE_BLOCK: before the first ``type:``; everything here is discarded
  IN_BLOCK     : just after a ``type:``; the type value is being read
  IN_FIELD     : inside a field value, which ends at the next marker

A JSON-shaped field consumes its whole bracket span, so names and ``type:``
declarations nested inside ``children: [...]`` stay part of that value.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .field_tables import JSON_FIELDS, KNOWN_FIELDS, TYPE_FIELD
from .logger import get_module_logger

logger = get_module_logger("tokenizer")

MARKUP_PATTERN = re.compile(r'<!--.*?-->|<[^>]*>', re.DOTALL)

# A marker is not part of a longer identifier: videoSrc: is not src:,
# line-height: is not height:
TYPE_MARKER = re.compile(r'(?<![\w-])(?P<name>type):')
FIELD_MARKER = re.compile(
    r'(?<![\w-])(?P<name>' + '|'.join(re.escape(name) for name in KNOWN_FIELDS) + r'):'
)
# Spaces between a marker and its value, on the marker's own line
VALUE_LEAD = re.compile(r'[^\S\n]*')


class ScanState(Enum):
    OUTSIDE_BLOCK = "outside_block"
    IN_BLOCK = "in_block"
    IN_FIELD = "in_field"


@dataclass
class FieldSpan:
    """Where one marker and its value sit in the scanned text."""
    name: str
    start: int          # Offset of the marker itself
    value_start: int    # First character of the value, past leading spaces
    value_end: Optional[int] = None


def mask_markup(text: str) -> str:
    """Blank out tags and comments, keeping every offset in place."""
    return MARKUP_PATTERN.sub(lambda m: ' ' * len(m.group(0)), text)


def _bracket_end(masked: str, pos: int) -> Optional[int]:
    """
    End offset (exclusive) of the bracket span starting at or after pos.

    Nesting-aware. An unbalanced span falls back to the first closing
    bracket; no closing bracket at all, or no opening bracket right after
    the marker, gives None.
    """
    i = pos
    while i < len(masked) and masked[i].isspace():
        i += 1
    if i >= len(masked) or masked[i] != '[':
        return None

    depth = 0
    for j in range(i, len(masked)):
        if masked[j] == '[':
            depth += 1
        elif masked[j] == ']':
            depth -= 1
            if depth == 0:
                return j + 1

    first_close = masked.find(']', i)
    return first_close + 1 if first_close != -1 else None


def scan(text: str) -> list[FieldSpan]:
    """
    Walk the text once and return every top-level marker span in order.

    The scan starts OUTSIDE_BLOCK and only looks for ``type:`` until the
    first one is seen; from then on every known name is a marker.
    """
    masked = mask_markup(text)
    spans: list[FieldSpan] = []
    state = ScanState.OUTSIDE_BLOCK
    pos = 0

    while True:
        pattern = TYPE_MARKER if state is ScanState.OUTSIDE_BLOCK else FIELD_MARKER
        match = pattern.search(masked, pos)
        if match is None:
            break

        # The previous value ends where this marker begins
        if spans and spans[-1].value_end is None:
            spans[-1].value_end = match.start()

        name = match.group('name')
        # Skip real spaces only; masked tags keep their markup in the value
        value_start = VALUE_LEAD.match(text, match.end()).end()
        span = FieldSpan(name=name, start=match.start(), value_start=value_start)
        spans.append(span)
        pos = match.end()

        if name == TYPE_FIELD:
            state = ScanState.IN_BLOCK
            continue

        state = ScanState.IN_FIELD
        if name in JSON_FIELDS:
            end = _bracket_end(masked, match.end())
            if end is not None:
                span.value_end = end
                pos = end

    if spans and spans[-1].value_end is None:
        spans[-1].value_end = len(text)

    return spans


def split_records(region: str) -> list[str]:
    """
    Split a region into block records, one per top-level ``type:``.

    Text before the first ``type:`` is not addressable and is dropped.
    """
    starts = [span.start for span in scan(region) if span.name == TYPE_FIELD]
    if not starts:
        return []

    bounds = starts[1:] + [len(region)]
    records = [region[start:end] for start, end in zip(starts, bounds)]
    logger.debug(f"Split region into {len(records)} record(s)")
    return records


def scan_fields(record: str) -> dict[str, str]:
    """
    Raw value of every known field declared in one record.

    The first declaration of a name wins, so re-running the scan on the
    same record always yields the same map. ``type`` is not included.
    """
    fields: dict[str, str] = {}
    for span in scan(record):
        if span.name == TYPE_FIELD or span.name in fields:
            continue
        fields[span.name] = record[span.value_start:span.value_end]
    return fields
