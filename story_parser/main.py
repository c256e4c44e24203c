"""
Main orchestrator for the story parser.

Wires the stages together, strictly forward:
  Preprocessor → Segmenter → Tokenizer/FieldExtractor → TitleResolver → DocumentAssembler

Every call gets its own warnings accumulator and returns a fresh Document;
nothing is shared between calls, so independent exports can be parsed
concurrently with separate StoryParser instances or the same one.
"""

from pathlib import Path
from typing import Optional, Union

from .preprocessor import Preprocessor
from .segmenter import LOOSE, Segmenter
from .fields import FieldExtractor
from .titles import TitleResolver, fallback_slug, slugify
from .assembler import DocumentAssembler
from .schemas import Block, Document, ParseHints, ParseResult
from .logger import get_module_logger, record_warning, setup_logger

logger = get_module_logger("main")


class StoryParser:
    """
    Main orchestrator.

    Converts one raw word-processor export into a Document:
    1. Preprocessor: drops style/script/head
    2. Segmenter: body → loose content + [paragraphs]/[intro]/[credits]
    3. FieldExtractor: records → Blocks
    4. TitleResolver: title + slug
    5. DocumentAssembler: header/intro promotion
    """

    def __init__(self, hints: Optional[ParseHints] = None, log_level: Optional[int] = None):
        if log_level is not None:
            setup_logger(level=log_level)

        self.hints = hints or ParseHints()
        self.preprocessor = Preprocessor()
        self.segmenter = Segmenter()
        self.extractor = FieldExtractor(self.hints)
        self.title_resolver = TitleResolver(title_from_markup=self.hints.title_from_markup)
        self.assembler = DocumentAssembler()

    def parse(self, html: str) -> ParseResult:
        """
        Parse a raw export.

        Args:
            html: Raw HTML export

        Returns:
            ParseResult with the Document and every warning emitted on the way
        """
        warnings: list[str] = []
        logger.info("Starting parse")

        # Stage 1-3: clean, isolate the body, split into regions
        cleaned = self.preprocessor.process(html)
        body = self.segmenter.extract_body(cleaned, warnings)
        segments = self.segmenter.segment(body, warnings)

        # Stage 4-5: one ordered block list across loose content and regions
        blocks: list[Block] = []
        loose_texts: list[str] = []
        credits: Optional[str] = None

        for segment in segments:
            if segment.kind in (LOOSE, 'paragraphs'):
                if segment.kind == LOOSE:
                    loose_texts.append(segment.text)
                blocks.extend(self.extractor.extract_all(segment.text, warnings))

            elif segment.kind == 'intro':
                intro_text = self.extractor.extract_region_text(segment.text)
                if intro_text:
                    blocks.append(Block(type='intro', text=intro_text))
                else:
                    record_warning(logger, warnings, "Empty [intro] region ignored")

            elif segment.kind == 'credits':
                if credits is not None:
                    record_warning(logger, warnings, "Multiple [credits] regions, keeping the last one")
                credits = self.extractor.extract_region_text(segment.text) or None

        if not blocks:
            record_warning(logger, warnings, "No blocks with a type: declaration found")

        # Stage 6: title, then slug
        title = self.title_resolver.resolve(blocks, loose_texts, html, warnings)
        slug = slugify(title, self.hints.slug_max_length)
        if not slug:
            slug = fallback_slug()
            record_warning(logger, warnings, f"No usable title for a slug, using {slug}")

        # Stage 7
        document = self.assembler.assemble(blocks, title, slug, credits)

        logger.info(f"Complete: {len(document.paragraphs)} paragraphs, {len(warnings)} warning(s)")
        return ParseResult(document=document, warnings=warnings)

    def parse_file(self, file_path: Union[str, Path]) -> ParseResult:
        """Parse a saved export, decoding it with its declared charset."""
        file_path = Path(file_path)
        raw_bytes = file_path.read_bytes()
        charset = Preprocessor.detect_charset_from_bytes(raw_bytes)
        try:
            html = raw_bytes.decode(charset, errors='replace')
        except LookupError:
            logger.warning(f"Unknown charset '{charset}' in {file_path.name}, decoding as UTF-8")
            html = raw_bytes.decode('utf-8', errors='replace')
        return self.parse(html)

    @staticmethod
    def save(document: Document, output_dir: Union[str, Path]) -> Path:
        """Write ``<slug>.json`` into output_dir and return its path."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        output_file = output_dir / f"{document.slug}.json"
        output_file.write_text(document.to_json(), encoding='utf-8')
        logger.info(f"Saved {output_file}")
        return output_file


def parse_story(html: str, hints: Optional[ParseHints] = None) -> Document:
    """Convenience function to parse a raw export into a Document."""
    return StoryParser(hints=hints).parse(html).document


def parse_story_file(file_path: Union[str, Path], hints: Optional[ParseHints] = None) -> Document:
    """Convenience function to parse a saved export."""
    return StoryParser(hints=hints).parse_file(file_path).document
