"""
Pydantic schemas defining the parsed story document.

Block: one renderable unit, discriminated by its free-form ``type``
Document: the final product handed to the builder and the media pipelines

Data flow through the pipeline:
  Segmenter/Tokenizer → raw records → FieldExtractor produces Block
  Block list + title/slug → DocumentAssembler → Document

Output JSON uses camelCase keys (``videoSrc``, ``imagePrefix``) because the
builder and the media scripts read those names; Python code uses the
snake_case attribute names.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny
from pydantic.alias_generators import to_camel


# Rich-text block types keep inline formatting in their ``text`` field
DEFAULT_RICH_TEXT_TYPES = ["texto", "frase", "intro", "citacao"]


class Block(BaseModel):
    """
    A discriminated record describing one renderable unit.

    Only ``type`` is required. Every field the parser extracts but has no
    typed attribute for is kept as an extra (see ``extensions``), so new
    component fields survive the parse without a schema change.
    """
    model_config = ConfigDict(
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    type: str = Field(min_length=1, description="Lower-cased component tag")

    @property
    def extensions(self) -> dict[str, Any]:
        """Fields carried without a typed attribute (live view)."""
        return self.model_extra if self.model_extra is not None else {}


# --- Known extended shapes ---

class HeaderBlock(Block):
    """Leading metadata block; promoted to the document's top level."""
    title: Optional[str] = None
    subtitle: Optional[str] = None
    author: Optional[str] = None
    date: Optional[str] = None
    theme: Optional[str] = None
    text: Optional[str] = None


class VideoScrollBlock(Block):
    """
    Scroll-driven video / frame sequence.

    Desktop plays ``video_src`` between the two *_seconds bounds; mobile
    swaps to an image sequence built from ``image_prefix`` + frame number +
    ``image_suffix``. The media pipeline later fills ``image_prefix`` and
    ``total_frames`` in place.
    """
    video_src: Optional[str] = None
    video_src_mobile: Optional[str] = None
    frame_start: Optional[int] = None
    frame_stop: Optional[int] = None
    image_prefix: Optional[str] = None
    image_suffix: Optional[str] = None
    image_prefix_mobile: Optional[str] = None
    image_suffix_mobile: Optional[str] = None
    frame_start_seconds: Optional[float] = None
    frame_stop_seconds: Optional[float] = None
    scroll_smoothness: Optional[float] = None
    preload_frames: Optional[int] = None
    frame_rate: Optional[int] = None
    total_frames: Optional[int] = None
    full_width: Optional[bool] = None
    steps: Optional[list] = None


class SectionBlock(Block):
    """Layout wrapper (background + spacing) around the following blocks."""
    id: Optional[str] = None
    background_image: Optional[str] = None
    background_image_mobile: Optional[str] = None
    height: Optional[str] = None
    padding: Optional[str] = None


class TextRegion(BaseModel):
    """Opening (intro) or closing (credits) text of the story."""
    text: str


# --- Final product ---

class Document(BaseModel):
    """Output of the parser: one per raw export."""
    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    slug: str
    subtitle: Optional[str] = None
    author: Optional[str] = None
    date: Optional[str] = None
    theme: Optional[str] = None
    intro: Optional[TextRegion] = None
    # SerializeAsAny: dump each block as its runtime subclass, not as Block
    paragraphs: list[SerializeAsAny[Block]] = Field(default_factory=list)
    credits: Optional[TextRegion] = None

    def to_dict(self) -> dict:
        """Plain-data form with camelCase block keys and no null fields."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self, indent: int = 2) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)


class ParseHints(BaseModel):
    """Options for the parser."""
    rich_text_types: list[str] = Field(default_factory=lambda: list(DEFAULT_RICH_TEXT_TYPES))
    slug_max_length: int = 50
    title_from_markup: bool = True    # Fall back to <title>/<h1> when no title: is declared
    coerce_booleans: bool = True      # "true"/"false" scalars become JSON booleans


class ParseResult(BaseModel):
    """Document plus every diagnostic emitted while producing it."""
    document: Document
    warnings: list[str] = Field(default_factory=list)
