"""
Custom exceptions for the story parser.

Error philosophy:
  - FetchError      → FAIL HARD: the export could not be downloaded, nothing to parse.
  - FieldParseError → PARTIAL RETURN: the field resolves to [], the block and
                      the rest of the document are kept, a warning is logged.

The parse core itself never raises on malformed input. Structural anomalies
(missing <body>, unterminated region delimiters) and missing titles are
recovered locally and only reported as warnings.
"""

from typing import Optional


class StoryParserError(Exception):
    """Base exception for all story parser errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- FAIL HARD: raised by the fetch collaborator only ---

class FetchError(StoryParserError):
    """Raised when the raw export cannot be downloaded."""

    def __init__(
        self,
        message: str,
        doc_id: str,
        status_code: Optional[int] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.doc_id = doc_id
        self.status_code = status_code


# --- PARTIAL RETURN: the offending field degrades to an empty list ---

class FieldParseError(StoryParserError):
    """
    Raised when a JSON-shaped field is still unparsable after sanitization.

    Carries the field name and the sanitized text so the warning can point
    at the exact declaration the author has to fix.
    """

    def __init__(
        self,
        message: str,
        field_name: str,
        raw: str = "",
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.field_name = field_name
        self.raw = raw
