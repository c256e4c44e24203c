"""
Document Assembler.

Pipeline position: Stage 7 of 7.
Input:  flat ordered Block list, resolved title/slug, credits region text
Output: Document

  (a) the first ``header`` block leaves the list; its fields become
      top-level metadata
  (b) the first ``intro`` block leaves the list; its text becomes
      ``document.intro``
  (c) everything else stays in ``paragraphs``, in source order
  (d) credits are attached as ``document.credits``, never as a block
"""

from typing import Any, Optional

from .schemas import Block, Document, TextRegion
from .logger import get_module_logger

logger = get_module_logger("assembler")

# Header fields that never become document metadata
HEADER_EXCLUDED = ('type', 'text', 'title')
# Document keys a header field must not overwrite
RESERVED_KEYS = ('slug', 'intro', 'paragraphs', 'credits')


def _take_first(blocks: list[Block], block_type: str) -> Optional[Block]:
    for i, block in enumerate(blocks):
        if block.type == block_type:
            return blocks.pop(i)
    return None


def _header_metadata(header: Block) -> dict[str, Any]:
    metadata = {}
    for key, value in header.model_dump(by_alias=True, exclude_none=True).items():
        if key in HEADER_EXCLUDED or key in RESERVED_KEYS:
            continue
        metadata[key] = value
    return metadata


class DocumentAssembler:
    """Reorders extracted blocks into the final Document."""

    def assemble(
        self,
        blocks: list[Block],
        title: Optional[str],
        slug: str,
        credits: Optional[str] = None
    ) -> Document:
        paragraphs = list(blocks)
        fields: dict[str, Any] = {}

        header = _take_first(paragraphs, 'header')
        if header is not None:
            fields.update(_header_metadata(header))

        intro = _take_first(paragraphs, 'intro')
        if intro is not None:
            intro_text = getattr(intro, 'text', None)
            if intro_text:
                fields['intro'] = TextRegion(text=intro_text)

        if credits:
            fields['credits'] = TextRegion(text=credits)

        document = Document(title=title, slug=slug, paragraphs=paragraphs, **fields)
        logger.debug(
            f"Assembled document: header={'yes' if header else 'no'}, "
            f"intro={'yes' if document.intro else 'no'}, {len(paragraphs)} paragraph(s)"
        )
        return document


def assemble(blocks: list[Block], title: Optional[str], slug: str,
             credits: Optional[str] = None) -> Document:
    """Convenience function to assemble a Document."""
    return DocumentAssembler().assemble(blocks, title, slug, credits)
