"""
Field Extractor: turns one block record into a Block.

Pipeline position: Stage 5 of 7.
Input:  raw record text starting at ``type:`` (from the tokenizer)
Output: Block (or a typed subclass), or None when the record has no type

Extraction order for a record:
  1. type     : ``type:`` up to newline or '<', decoded, lower-cased
  2. text     : rich types keep inline formatting, the rest is stripped
  3. scalars  : every generic name in SCALAR_FIELDS
  4. lists    : JSON_FIELDS through the sanitizer
  5. extended : the registry entry for the normalized type, if any

The extractor never raises: a missing field is absent, a malformed list is
[], and a typed block that fails validation falls back to a plain Block.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import ValidationError

from .entities import decode_entities
from .field_tables import (
    HEADER_FIELDS, HEADER_TYPES, JSON_FIELDS, RICH_SCALAR_FIELDS, SCALAR_FIELDS,
    SECTION_FIELDS, SECTION_TYPES, TEXT_FIELD, VIDEO_SCROLL_FIELDS, VIDEO_SCROLL_TYPES,
)
from .formatting import clean_and_format_html, strip_tags
from .sanitizer import parse_json_field
from .schemas import Block, HeaderBlock, ParseHints, SectionBlock, VideoScrollBlock
from .tokenizer import mask_markup, scan_fields, split_records
from .logger import get_module_logger, record_warning

logger = get_module_logger("fields")

TYPE_VALUE = re.compile(r'type:[^\S\n]*([^\n<]*)')
REGION_TEXT = re.compile(r'(?<![\w-])text:')
LEADING_INT = re.compile(r'^\s*[+-]?\d+')
LEADING_FLOAT = re.compile(r'^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')

TRUE_WORDS = ('true', 'sim', 'yes', '1')
FALSE_WORDS = ('false', 'nao', 'não', 'no', '0')


# --- Scalar conversions (leading-number semantics: "12px" -> 12) ---

def to_int(value: str, default: Optional[int] = None) -> Optional[int]:
    m = LEADING_INT.match(value or '')
    return int(m.group(0)) if m else default


def to_float(value: str, default: Optional[float] = None) -> Optional[float]:
    m = LEADING_FLOAT.match(value or '')
    return float(m.group(0)) if m else default


def to_bool(value: str) -> Optional[bool]:
    word = (value or '').strip().lower()
    if word in TRUE_WORDS:
        return True
    if word in FALSE_WORDS:
        return False
    return None


# --- Per-type registry ---

@dataclass(frozen=True)
class BlockType:
    """Typed shape and extended-field extractor for one normalized type."""
    model: type
    field_names: tuple
    extract: Callable[[dict[str, str]], dict[str, Any]]


BLOCK_REGISTRY: dict[str, BlockType] = {}


def register_block_type(*names: str, model: type, field_names: tuple):
    """Register an extractor for the given type names (and synonyms)."""
    def decorator(func):
        for name in names:
            BLOCK_REGISTRY[name] = BlockType(model=model, field_names=field_names, extract=func)
        return func
    return decorator


def _plain(raw: dict[str, str], name: str) -> Optional[str]:
    if name not in raw:
        return None
    return strip_tags(raw[name]) or None


def _plain_fields(raw: dict[str, str], names: tuple) -> dict[str, Any]:
    fields = {}
    for name in names:
        value = _plain(raw, name)
        if value is not None:
            fields[name] = value
    return fields


@register_block_type(*VIDEO_SCROLL_TYPES, model=VideoScrollBlock, field_names=VIDEO_SCROLL_FIELDS)
def extract_video_scroll(raw: dict[str, str]) -> dict[str, Any]:
    """Frame/time boundaries and image-sequence naming for the mobile fallback."""
    fields: dict[str, Any] = {}

    # name -> (converter, default when the value does not parse)
    numeric = {
        'frameStart': (to_int, 1),
        'frameStop': (to_int, 100),
        'frameStartSeconds': (to_float, 0.0),
        'frameStopSeconds': (to_float, 10.0),
        'scrollSmoothness': (to_float, 0.05),
        'preloadFrames': (to_int, 8),
        'frameRate': (to_int, 30),
        'totalFrames': (to_int, None),
    }
    for name, (convert, default) in numeric.items():
        value = _plain(raw, name)
        if value is None:
            continue
        converted = convert(value, default)
        if converted is not None:
            fields[name] = converted

    for name in ('imagePrefix', 'imageSuffix', 'imagePrefixMobile', 'imageSuffixMobile'):
        value = _plain(raw, name)
        if value is not None:
            fields[name] = value

    full_width = to_bool(_plain(raw, 'fullWidth') or '')
    if full_width is not None:
        fields['fullWidth'] = full_width

    return fields


@register_block_type(*SECTION_TYPES, model=SectionBlock, field_names=SECTION_FIELDS)
def extract_section(raw: dict[str, str]) -> dict[str, Any]:
    """Layout fields of a section wrapper."""
    return _plain_fields(raw, SECTION_FIELDS)


@register_block_type(*HEADER_TYPES, model=HeaderBlock, field_names=HEADER_FIELDS)
def extract_header(raw: dict[str, str]) -> dict[str, Any]:
    """Story metadata carried by the header block."""
    return _plain_fields(raw, HEADER_FIELDS)


class FieldExtractor:
    """Extracts typed field maps from block records."""

    def __init__(self, hints: Optional[ParseHints] = None):
        self.hints = hints or ParseHints()

    def extract(self, record: str, warnings: list[str]) -> Optional[Block]:
        """
        Build a Block from one record.

        Returns None when the record has no usable ``type:`` value.
        """
        type_match = TYPE_VALUE.match(record)
        block_type = decode_entities(type_match.group(1)).strip().lower() if type_match else ''
        if not block_type:
            logger.debug("Discarding record without a type value")
            return None

        raw = scan_fields(record)
        fields: dict[str, Any] = {'type': block_type}

        if TEXT_FIELD in raw:
            if block_type in self.hints.rich_text_types:
                text = clean_and_format_html(raw[TEXT_FIELD])
            else:
                text = strip_tags(raw[TEXT_FIELD])
            if text:
                fields[TEXT_FIELD] = text

        for name in SCALAR_FIELDS:
            if name in raw:
                value = self._scalar(name, raw[name])
                if value != '':
                    fields[name] = value

        for name in JSON_FIELDS:
            if name in raw:
                fields[name] = parse_json_field(raw[name], name, warnings)

        model = Block
        registered = BLOCK_REGISTRY.get(block_type)
        if registered is not None:
            # The typed extractor owns its names; generic string values are replaced
            for name in registered.field_names:
                fields.pop(name, None)
            fields.update(registered.extract(raw))
            model = registered.model

        return self._build(model, fields, warnings)

    def extract_all(self, region: str, warnings: list[str]) -> list[Block]:
        """Tokenize a region and extract every record, in source order."""
        blocks = []
        for record in split_records(region):
            block = self.extract(record, warnings)
            if block is not None:
                blocks.append(block)
        return blocks

    def extract_region_text(self, region: str) -> str:
        """
        Text of an [intro] or [credits] region.

        Everything after its ``text:`` marker, or the whole region when the
        author left the marker out.
        """
        marker = REGION_TEXT.search(mask_markup(region))
        body = region[marker.end():] if marker else region
        return clean_and_format_html(body)

    def _scalar(self, name: str, raw_value: str) -> Any:
        if name in RICH_SCALAR_FIELDS:
            return clean_and_format_html(raw_value)

        value = strip_tags(raw_value)
        if self.hints.coerce_booleans and value in ('true', 'false'):
            return value == 'true'
        return value

    @staticmethod
    def _build(model: type, fields: dict[str, Any], warnings: list[str]) -> Block:
        try:
            return model.model_validate(fields)
        except ValidationError as e:
            message = (
                f"Block '{fields['type']}' does not fit {model.__name__} "
                f"({e.error_count()} error(s)), keeping it untyped"
            )
            record_warning(logger, warnings, message)
            return Block.model_validate(fields)
