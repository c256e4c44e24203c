"""
Story Parser

Converts a word-processor HTML export (loose sections, free text and inline
``name: value`` declarations) into an ordered, typed document model for the
story builder.
- Preprocessor: strips style/script/head
- Segmenter: [paragraphs] / [intro] / [credits] regions and loose content
- FieldExtractor: one Block per ``type:`` record
- TitleResolver + DocumentAssembler: title, slug, header/intro promotion

Public API surface:
  Orchestrator: StoryParser, parse_story, parse_story_file
  Pipeline stages  : Preprocessor, Segmenter, FieldExtractor, TitleResolver, DocumentAssembler
  Data models : Document, Block, HeaderBlock, VideoScrollBlock, SectionBlock,
                      TextRegion, ParseHints, ParseResult
  Text helpers: decode_entities, slugify
  Error types : FetchError (fatal), FieldParseError (partial)
  Fetching    : fetch_export
"""

# --- Orchestrator ---
from .main import StoryParser, parse_story, parse_story_file

# --- Pipeline stage classes ---
from .preprocessor import Preprocessor
from .segmenter import Segmenter
from .fields import FieldExtractor, register_block_type
from .titles import TitleResolver, slugify
from .assembler import DocumentAssembler

# --- Data models ---
from .schemas import (
    Block, HeaderBlock, VideoScrollBlock, SectionBlock,
    TextRegion, Document, ParseHints, ParseResult,
)

# --- Helpers ---
from .entities import decode_entities
from .fetcher import fetch_export

# --- Exceptions ---
from .exceptions import StoryParserError, FetchError, FieldParseError

__version__ = "0.1.0"
__all__ = [
    "StoryParser",
    "parse_story",
    "parse_story_file",
    "Preprocessor",
    "Segmenter",
    "FieldExtractor",
    "register_block_type",
    "TitleResolver",
    "slugify",
    "DocumentAssembler",
    "Block",
    "HeaderBlock",
    "VideoScrollBlock",
    "SectionBlock",
    "TextRegion",
    "Document",
    "ParseHints",
    "ParseResult",
    "decode_entities",
    "fetch_export",
    "StoryParserError",
    "FetchError",
    "FieldParseError",
]
