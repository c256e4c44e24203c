"""
Preprocessor: removes non-content regions from the raw export.

Pipeline position: Stage 1 of 7.
Input:  raw HTML string as exported by the word processor
Output: the same string without its <style>, <script> and <head> regions

Nothing else is touched: later stages slice field values straight out of
this text, so whitespace and inline markup must survive as exported.
"""

import re

from .logger import get_module_logger

logger = get_module_logger("preprocessor")


class Preprocessor:
    """Strips style/script/head regions, case-insensitively, content included."""

    # \b keeps <header> and <headline> out of the <head> pattern
    REGION_PATTERNS = {
        'style': re.compile(r'<style\b[^>]*>.*?</style\s*>', re.IGNORECASE | re.DOTALL),
        'script': re.compile(r'<script\b[^>]*>.*?</script\s*>', re.IGNORECASE | re.DOTALL),
        'head': re.compile(r'<head\b[^>]*>.*?</head\s*>', re.IGNORECASE | re.DOTALL),
    }

    # WHATWG encoding spec: browsers silently remap these charsets.
    # https://encoding.spec.whatwg.org/#names-and-labels
    WHATWG_CHARSET_MAP = {
        'iso-8859-1': 'windows-1252',
        'iso8859-1': 'windows-1252',
        'latin-1': 'windows-1252',
        'latin1': 'windows-1252',
        'us-ascii': 'windows-1252',
        'ascii': 'windows-1252',
    }

    @staticmethod
    def detect_charset_from_bytes(raw_bytes: bytes) -> str:
        """
        Detect the declared charset of a saved export.

        Scans the first 2048 bytes for <meta charset=...> or the legacy
        http-equiv form and applies the WHATWG remapping. Defaults to
        'utf-8', which is what the word processor writes.
        """
        head_str = raw_bytes[:2048].decode('ascii', errors='ignore')

        m = re.search(r'<meta[^>]+charset=["\']?\s*([^\s"\';>]+)', head_str, re.IGNORECASE)
        if not m:
            return 'utf-8'

        charset = m.group(1).strip().lower()
        return Preprocessor.WHATWG_CHARSET_MAP.get(charset, charset)

    def process(self, html: str) -> str:
        """
        Remove non-content regions.

        Idempotent; input without any of the regions comes back unchanged.
        """
        for name, pattern in self.REGION_PATTERNS.items():
            html, count = pattern.subn('', html)
            if count:
                logger.debug(f"Removed {count} <{name}> region(s)")
        return html


def preprocess(html: str) -> str:
    """Convenience function to preprocess a raw export."""
    return Preprocessor().process(html)
