"""
Character entity decoding.

Pipeline position: Stage 2 of 7, used by every later stage that surfaces
text (titles, field values, list items).

Three passes, in this order, each touching only the ``&...;`` sequences
left by the previous one:
  1. named entities from ENTITIES
  2. decimal references  (&#8217;)
  3. hexadecimal references (&#x2019;)
An entity that is in none of them passes through unchanged.

The passes repeat until nothing changes, so an escaped reference such as
``&amp;lt;`` resolves fully to "<" and decoding is idempotent.
"""

import re

# Entities seen in word-processor HTML exports: markup escapes, Portuguese
# and Spanish accents, typographic quotes and dashes.
ENTITIES = {
    '&amp;': '&', '&lt;': '<', '&gt;': '>', '&quot;': '"', '&apos;': "'",
    '&nbsp;': '\u00a0',
    '&aacute;': 'á', '&agrave;': 'à', '&acirc;': 'â', '&atilde;': 'ã', '&auml;': 'ä',
    '&eacute;': 'é', '&egrave;': 'è', '&ecirc;': 'ê', '&euml;': 'ë',
    '&iacute;': 'í', '&igrave;': 'ì', '&icirc;': 'î', '&iuml;': 'ï',
    '&oacute;': 'ó', '&ograve;': 'ò', '&ocirc;': 'ô', '&otilde;': 'õ', '&ouml;': 'ö',
    '&uacute;': 'ú', '&ugrave;': 'ù', '&ucirc;': 'û', '&uuml;': 'ü',
    '&ccedil;': 'ç', '&ntilde;': 'ñ',
    '&Aacute;': 'Á', '&Agrave;': 'À', '&Acirc;': 'Â', '&Atilde;': 'Ã', '&Auml;': 'Ä',
    '&Eacute;': 'É', '&Egrave;': 'È', '&Ecirc;': 'Ê', '&Euml;': 'Ë',
    '&Iacute;': 'Í', '&Igrave;': 'Ì', '&Icirc;': 'Î', '&Iuml;': 'Ï',
    '&Oacute;': 'Ó', '&Ograve;': 'Ò', '&Ocirc;': 'Ô', '&Otilde;': 'Õ', '&Ouml;': 'Ö',
    '&Uacute;': 'Ú', '&Ugrave;': 'Ù', '&Ucirc;': 'Û', '&Uuml;': 'Ü',
    '&Ccedil;': 'Ç', '&Ntilde;': 'Ñ',
    '&lsquo;': '‘', '&rsquo;': '’', '&sbquo;': '‚',
    '&ldquo;': '“', '&rdquo;': '”', '&bdquo;': '„',
    '&laquo;': '«', '&raquo;': '»', '&lsaquo;': '‹', '&rsaquo;': '›',
    '&ndash;': '–', '&mdash;': '—', '&hellip;': '…',
    '&bull;': '•', '&middot;': '·',
    '&ordm;': 'º', '&ordf;': 'ª', '&deg;': '°',
    '&copy;': '©', '&reg;': '®', '&trade;': '™', '&euro;': '€',
    '&iexcl;': '¡', '&iquest;': '¿',
}

NAMED_ENTITY_PATTERN = re.compile(r'&[a-zA-Z][a-zA-Z0-9]*;')
DECIMAL_ENTITY_PATTERN = re.compile(r'&#([0-9]+);')
HEX_ENTITY_PATTERN = re.compile(r'&#[xX]([0-9a-fA-F]+);')


def _code_point(value: int, original: str) -> str:
    # Out-of-range and surrogate references stay as written
    if 0 < value <= 0x10FFFF and not 0xD800 <= value <= 0xDFFF:
        return chr(value)
    return original


def decode_entities(text: str) -> str:
    """Resolve named, decimal and hexadecimal character references."""
    if not text or '&' not in text:
        return text or ''

    previous = None
    # Every replacement shortens the text, so this reaches a fixed point
    while text != previous:
        previous = text
        text = NAMED_ENTITY_PATTERN.sub(lambda m: ENTITIES.get(m.group(0), m.group(0)), text)
        text = DECIMAL_ENTITY_PATTERN.sub(lambda m: _code_point(int(m.group(1)), m.group(0)), text)
        text = HEX_ENTITY_PATTERN.sub(lambda m: _code_point(int(m.group(1), 16), m.group(0)), text)
    return text
