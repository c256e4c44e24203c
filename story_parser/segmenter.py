"""
Block Segmenter: splits the document body into structural regions.

Pipeline position: Stage 3 of 7.
Input:  preprocessed HTML
Output: ordered list of Segment: delimited regions ([paragraphs], [intro],
        [credits]) and the "loose" content found between them

Delimiters are paired: ``[tag] ... [tag]``, the opening one optionally
carrying a modifier character (``[+paragraphs]``). The first bare ``[tag]``
after an opening closes it. An opening without a close is unterminated and
runs to the end of the input.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .tokenizer import mask_markup
from .logger import get_module_logger, record_warning

logger = get_module_logger("segmenter")

REGION_TAGS = ('paragraphs', 'intro', 'credits')

REGION_OPEN = re.compile(r'\[(?P<modifier>[+.])?(?P<tag>' + '|'.join(REGION_TAGS) + r')\]')
BODY_OPEN = re.compile(r'<body\b[^>]*>', re.IGNORECASE)
BODY_CLOSE = re.compile(r'</body\s*>', re.IGNORECASE)

LOOSE = 'loose'


@dataclass
class Segment:
    """One slice of the body, in source order."""
    kind: str                   # 'loose' or one of REGION_TAGS
    text: str
    modifier: Optional[str] = None
    terminated: bool = True


class Segmenter:
    """Splits a document body into loose content and delimited regions."""

    def extract_body(self, html: str, warnings: list[str]) -> str:
        """
        Content of the <body> element.

        Without a <body> wrapper the whole text is used; a <body> that is
        never closed runs to the end of the input.
        """
        opening = BODY_OPEN.search(html)
        if opening is None:
            record_warning(logger, warnings, "No <body> tag found, parsing the full document")
            return html

        closing = BODY_CLOSE.search(html, opening.end())
        end = closing.start() if closing else len(html)
        return html[opening.end():end]

    def segment(self, body: str, warnings: list[str]) -> list[Segment]:
        """
        Split the body into segments, preserving source order.

        Whitespace-only loose content between regions is dropped.
        """
        # Search the masked copy so a bracket inside a tag attribute never counts
        masked = mask_markup(body)
        segments: list[Segment] = []
        pos = 0

        while True:
            opening = REGION_OPEN.search(masked, pos)
            if opening is None:
                break

            self._add_loose(segments, body[pos:opening.start()])

            tag = opening.group('tag')
            closing = masked.find(f'[{tag}]', opening.end())
            if closing == -1:
                record_warning(logger, warnings, f"Unterminated [{tag}] region, reading to end of document")
                segments.append(Segment(
                    kind=tag,
                    text=body[opening.end():],
                    modifier=opening.group('modifier'),
                    terminated=False
                ))
                pos = len(body)
                break

            segments.append(Segment(
                kind=tag,
                text=body[opening.end():closing],
                modifier=opening.group('modifier')
            ))
            pos = closing + len(tag) + 2

        self._add_loose(segments, body[pos:])

        logger.debug(
            f"Segmented body: {sum(1 for s in segments if s.kind != LOOSE)} region(s), "
            f"{sum(1 for s in segments if s.kind == LOOSE)} loose segment(s)"
        )
        return segments

    @staticmethod
    def _add_loose(segments: list[Segment], text: str) -> None:
        if text.strip():
            segments.append(Segment(kind=LOOSE, text=text))


def segment(body: str, warnings: Optional[list[str]] = None) -> list[Segment]:
    """Convenience function to segment a body."""
    return Segmenter().segment(body, warnings if warnings is not None else [])
