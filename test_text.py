"""
Tests for the text-level stages: entities, formatting, slugs, preprocessing,
segmentation, assembly and the export fetcher.
"""

import re

import pytest
import requests

from story_parser import fetcher
from story_parser.assembler import DocumentAssembler
from story_parser.entities import decode_entities
from story_parser.exceptions import FetchError
from story_parser.formatting import clean_and_format_html, strip_tags
from story_parser.preprocessor import Preprocessor, preprocess
from story_parser.schemas import Block, HeaderBlock
from story_parser.segmenter import LOOSE, Segmenter
from story_parser.titles import slugify


# --- Entities ---

def test_decode_named_and_numeric():
    assert decode_entities("Caf&eacute; &amp; P&atilde;o &#8212; &#x2019;") == "Café & Pão — ’"


def test_unknown_entities_pass_through():
    assert decode_entities("&foo; e &#xZZ; e &#1114112;") == "&foo; e &#xZZ; e &#1114112;"


@pytest.mark.parametrize("text", [
    "Elei&ccedil;&otilde;es",
    "&ldquo;aspas&rdquo; &mdash; &hellip;",
    "sem entidades",
    "&amp;lt;b&amp;gt; e &amp;#233;",
])
def test_decode_is_idempotent(text):
    once = decode_entities(text)
    assert decode_entities(once) == once


def test_escaped_references_decode_fully():
    assert decode_entities("&amp;lt;b&amp;gt;") == "<b>"
    assert decode_entities("AT&amp;T") == "AT&T"


def test_nbsp_decodes_to_non_breaking_space():
    assert decode_entities("a&nbsp;b") == "a\u00a0b"


# --- Formatting ---

def test_paragraphs_become_breaks():
    html = '<p class="c1"><span class="c0">Linha 1</span></p><p class="c1"><span class="c0">Linha 2</span></p>'
    assert clean_and_format_html(html) == "Linha 1<br>Linha 2"


def test_break_runs_are_capped():
    assert clean_and_format_html("A</p><p></p><p></p><p></p>B") == "A<br><br>B"


def test_styled_spans_become_semantic_tags():
    html = (
        '<span style="font-weight:700">forte</span> '
        '<span style="font-style:italic">leve</span> '
        '<span style="text-decoration:underline">sublinhado</span>'
    )
    assert clean_and_format_html(html) == "<strong>forte</strong> <em>leve</em> <u>sublinhado</u>"


def test_anchors_keep_only_href():
    html = '<a class="c3" href="https://example.com">link</a>'
    assert clean_and_format_html(html) == '<a href="https://example.com">link</a>'


def test_nbsp_becomes_plain_space_in_rich_text():
    assert clean_and_format_html("A&nbsp;B") == "A B"


def test_strip_tags():
    assert strip_tags("<p>Foto <b>linda</b> &amp; cia</p>") == "Foto linda & cia"
    assert strip_tags("") == ""


# --- Slugs ---

@pytest.mark.parametrize("title,expected", [
    ("Eleições 2024: O Que Mudou?", "eleicoes-2024-o-que-mudou"),
    ("My Story", "my-story"),
    ("  --Olá,   Mundo!--  ", "ola-mundo"),
    ("???", ""),
    ("", ""),
    (None, ""),
])
def test_slugify(title, expected):
    assert slugify(title) == expected


def test_slug_truncation_never_ends_with_hyphen():
    assert slugify("x" * 49 + " yy") == "x" * 49


@pytest.mark.parametrize("title", [
    "Ação, reação & emoção: o ano em que tudo mudou na política brasileira",
    "a" * 30 + " " + "b" * 30,
    "Çà—ñ 2024 / ¿Qué?",
])
def test_slug_shape(title):
    slug = slugify(title)
    assert len(slug) <= 50
    assert re.fullmatch(r"[a-z0-9]+(-[a-z0-9]+)*", slug)


def test_slug_max_length():
    assert slugify("uma frase bem longa", max_length=8) == "uma-fras"


# --- Preprocessor ---

def test_preprocessor_removes_non_content_regions():
    html = (
        '<HEAD><title>x</title></HEAD><body><header>h</header>'
        '<STYLE>p{color:red}</STYLE><script src="a.js"></script>ok</body>'
    )
    assert preprocess(html) == "<body><header>h</header>ok</body>"


def test_preprocessor_is_idempotent():
    html = "<head><style>a{}</style></head><body>type: texto</body>"
    once = preprocess(html)
    assert preprocess(once) == once


def test_charset_detection():
    assert Preprocessor.detect_charset_from_bytes(b'<meta charset="ISO-8859-1">') == "windows-1252"
    assert Preprocessor.detect_charset_from_bytes(
        b'<meta content="text/html; charset=UTF-8" http-equiv="content-type">'
    ) == "utf-8"
    assert Preprocessor.detect_charset_from_bytes(b"<html>") == "utf-8"


# --- Segmenter ---

@pytest.fixture
def segmenter():
    return Segmenter()


def test_segments_keep_source_order(segmenter):
    body = (
        "type: header\ntitle: T\n"
        "[intro]text: I[intro]\n"
        "type: texto\ntext: solto\n"
        "[+paragraphs]type: frase\ntext: F[paragraphs]"
    )
    segments = segmenter.segment(body, [])
    assert [s.kind for s in segments] == [LOOSE, "intro", LOOSE, "paragraphs"]
    assert segments[1].text == "text: I"
    assert segments[3].modifier == "+"


def test_unterminated_region(segmenter):
    warnings = []
    segments = segmenter.segment("antes [credits]text: Fulana", warnings)
    assert [s.kind for s in segments] == [LOOSE, "credits"]
    assert segments[1].terminated is False
    assert segments[1].text == "text: Fulana"
    assert warnings == ["Unterminated [credits] region, reading to end of document"]


def test_delimiters_inside_attributes_are_ignored(segmenter):
    segments = segmenter.segment('<span title="[intro]">type: texto</span>', [])
    assert [s.kind for s in segments] == [LOOSE]


def test_extract_body(segmenter):
    warnings = []
    assert segmenter.extract_body('<html><BODY class="c5">conteúdo</BODY></html>', warnings) == "conteúdo"
    assert segmenter.extract_body("<body>sem fim", warnings) == "sem fim"
    assert warnings == []

    assert segmenter.extract_body("sem body", warnings) == "sem body"
    assert len(warnings) == 1


# --- Assembler ---

def test_assembler_promotes_header_and_intro():
    blocks = [
        Block(type="texto", text="A"),
        HeaderBlock(type="header", title="T", subtitle="S", author="Fulana", slug="ignorado"),
        Block(type="intro", text="Abertura"),
        Block(type="intro", text="Outra"),
    ]
    document = DocumentAssembler().assemble(blocks, "T", "t", credits="Créditos")

    assert document.subtitle == "S"
    assert document.author == "Fulana"
    assert document.slug == "t"
    assert document.intro.text == "Abertura"
    assert document.credits.text == "Créditos"
    assert [(b.type, b.text) for b in document.paragraphs] == [("texto", "A"), ("intro", "Outra")]
    assert len(blocks) == 4


def test_assembler_without_header():
    document = DocumentAssembler().assemble([Block(type="texto", text="A")], None, "doc-1")
    assert document.title is None
    assert document.intro is None and document.credits is None
    assert document.to_dict() == {"slug": "doc-1", "paragraphs": [{"type": "texto", "text": "A"}]}


# --- Fetcher ---

class FakeResponse:
    def __init__(self, status_code, text="", headers=None):
        self.status_code = status_code
        self.text = text
        self.headers = headers or {}
        self.encoding = None


def test_fetch_export(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return FakeResponse(200, "  <html>ok</html>\n", {"content-type": "text/html"})

    monkeypatch.setattr(fetcher.requests, "get", fake_get)
    monkeypatch.delenv("STORY_EXPORT_URL", raising=False)

    assert fetcher.fetch_export("abc", timeout=5) == "<html>ok</html>"
    assert calls == [("https://docs.google.com/document/d/abc/export?format=html", 5)]


def test_fetch_export_url_override(monkeypatch):
    monkeypatch.setenv("STORY_EXPORT_URL", "http://localhost:8000/{doc_id}.html")
    assert fetcher.export_url("abc") == "http://localhost:8000/abc.html"


def test_fetch_export_not_found(monkeypatch):
    monkeypatch.setattr(fetcher.requests, "get", lambda url, timeout: FakeResponse(404))

    with pytest.raises(FetchError) as exc_info:
        fetcher.fetch_export("missing")
    assert exc_info.value.status_code == 404
    assert exc_info.value.doc_id == "missing"


def test_fetch_export_network_error(monkeypatch):
    def fake_get(url, timeout):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(fetcher.requests, "get", fake_get)

    with pytest.raises(FetchError) as exc_info:
        fetcher.fetch_export("abc")
    assert exc_info.value.status_code is None
