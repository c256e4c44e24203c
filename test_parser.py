"""
End-to-end tests for the story parser.

Runs whole exports through StoryParser and checks the assembled Document:
header/intro promotion, paragraph order, credits, title fallbacks, and the
CLI that writes ``<slug>.json``.
"""

import json
import re
import sys

import pytest

import run_parser
from story_parser import StoryParser, parse_story
from story_parser.schemas import Block, HeaderBlock, VideoScrollBlock


# Shaped like a real word-processor export: every line in its own <p><span>
GOOGLE_DOC_EXPORT = """<html><head>
<meta content="text/html; charset=UTF-8" http-equiv="content-type">
<title>Rascunho - Google Docs</title>
<style type="text/css">.c1{padding-top:0pt;height:11pt}.c0{font-weight:400}</style>
</head>
<body class="c5">
<p class="c1"><span class="c0">type: header</span></p>
<p class="c1"><span class="c0">title: Elei&ccedil;&otilde;es 2024: O Que Mudou?</span></p>
<p class="c1"><span class="c0">subtitle: Um guia</span></p>
<p class="c1"><span class="c0">[+intro]</span></p>
<p class="c1"><span class="c0">text: Era uma vez</span></p>
<p class="c1"><span class="c0">[intro]</span></p>
<p class="c1"><span class="c0">[+paragraphs]</span></p>
<p><span>type: texto</span></p><p><span>text: Primeiro <span style="font-weight:700">par&aacute;grafo</span></span></p>
<p><span>type: imagem</span></p><p><span>src: https://cdn.example.com/a.jpg</span></p><p><span>caption: Legenda</span></p><p><span>fullWidth: true</span></p>
<p><span>type: videoscrollytelling</span></p><p><span>videoSrc: https://cdn.example.com/v.mp4</span></p><p><span>frameStart: 1</span></p><p><span>frameStop: 120</span></p><p><span>frameStopSeconds: 8.5</span></p><p><span>imagePrefix: frames/frame_</span></p><p><span>steps: [{&quot;time&quot;: 1, &quot;text&quot;: &quot;Passo um&quot;},]</span></p>
<p><span>[paragraphs]</span></p>
<p><span>[credits]</span></p><p><span>text: Reportagem: Fulana</span></p><p><span>[credits]</span></p>
</body></html>"""


@pytest.fixture
def parser():
    return StoryParser()


@pytest.fixture
def export_result(parser):
    return parser.parse(GOOGLE_DOC_EXPORT)


def test_header_is_promoted_to_metadata(export_result):
    document = export_result.document
    assert document.title == "Eleições 2024: O Que Mudou?"
    assert document.slug == "eleicoes-2024-o-que-mudou"
    assert document.subtitle == "Um guia"
    assert all(block.type != "header" for block in document.paragraphs)


def test_intro_and_credits_are_top_level(export_result):
    document = export_result.document
    assert document.intro.text == "Era uma vez"
    assert document.credits.text == "Reportagem: Fulana"
    assert all(block.type != "intro" for block in document.paragraphs)


def test_paragraphs_keep_source_order(export_result):
    types = [block.type for block in export_result.document.paragraphs]
    assert types == ["texto", "imagem", "videoscrollytelling"]


def test_rich_text_keeps_bold_formatting(export_result):
    texto = export_result.document.paragraphs[0]
    assert texto.text == "Primeiro <strong>parágrafo</strong>"


def test_generic_block_fields(export_result):
    imagem = export_result.document.paragraphs[1]
    assert imagem.extensions == {
        "src": "https://cdn.example.com/a.jpg",
        "caption": "Legenda",
        "fullWidth": True,
    }


def test_video_scroll_block_is_typed(export_result):
    video = export_result.document.paragraphs[2]
    assert isinstance(video, VideoScrollBlock)
    assert video.video_src == "https://cdn.example.com/v.mp4"
    assert video.frame_start == 1
    assert video.frame_stop == 120
    assert video.frame_stop_seconds == 8.5
    assert video.image_prefix == "frames/frame_"
    assert video.steps == [{"time": 1, "text": "Passo um"}]


def test_export_parses_without_warnings(export_result):
    assert export_result.warnings == []


def test_serialized_document_uses_camel_case(export_result):
    data = export_result.document.to_dict()
    assert list(data)[:2] == ["title", "slug"]
    video = data["paragraphs"][2]
    assert video["videoSrc"] == "https://cdn.example.com/v.mp4"
    assert video["frameStop"] == 120
    assert "imageSuffix" not in video  # None fields are omitted
    assert json.loads(export_result.document.to_json()) == data


def test_blocks_can_be_updated_after_parsing(export_result):
    video = export_result.document.paragraphs[2]
    video.image_prefix = "https://cdn.example.com/frames/v_"
    video.total_frames = 240

    dumped = export_result.document.to_dict()["paragraphs"][2]
    assert dumped["imagePrefix"] == "https://cdn.example.com/frames/v_"
    assert dumped["totalFrames"] == 240


# --- Scenarios from the block grammar ---

def test_rich_text_scenario_preserves_tags():
    document = parse_story("type: texto\ntext: Hello <b>World</b>")
    assert len(document.paragraphs) == 1
    assert document.paragraphs[0].model_dump() == {"type": "texto", "text": "Hello <b>World</b>"}


def test_header_then_paragraphs_scenario():
    document = parse_story("type: header\ntitle: My Story\n[paragraphs] type: texto\ntext: Body [paragraphs]")
    assert document.title == "My Story"
    assert document.slug == "my-story"
    assert [block.type for block in document.paragraphs] == ["texto"]
    assert document.paragraphs[0].text == "Body"


def test_loose_and_delimited_content_in_source_order():
    html = (
        "<body>type: header\ntitle: T\n"
        "[intro]text: I[intro]\n"
        "type: texto\ntext: solto\n"
        "[+paragraphs]type: frase\ntext: F[paragraphs]</body>"
    )
    document = parse_story(html)
    assert document.title == "T"
    assert document.intro.text == "I"
    assert [(b.type, b.text) for b in document.paragraphs] == [("texto", "solto"), ("frase", "F")]


def test_only_first_header_is_promoted():
    html = "type: header\ntitle: Primeiro\ntype: texto\ntext: A\ntype: header\ntitle: Segundo"
    document = parse_story(html)
    assert document.title == "Primeiro"
    assert [block.type for block in document.paragraphs] == ["texto", "header"]
    assert isinstance(document.paragraphs[1], HeaderBlock)


def test_missing_body_is_recovered_with_warning(parser):
    result = parser.parse("type: texto\ntext: sem body")
    assert result.document.paragraphs[0].text == "sem body"
    assert any("<body>" in warning for warning in result.warnings)


def test_unterminated_region_reads_to_end(parser):
    result = parser.parse("<body>[paragraphs]type: texto\ntext: A\ntype: frase\ntext: B</body>")
    assert [b.text for b in result.document.paragraphs] == ["A", "B"]
    assert any("Unterminated [paragraphs]" in warning for warning in result.warnings)


def test_malformed_list_does_not_drop_the_document(parser):
    html = (
        "<body>[paragraphs]type: texto\ntext: antes\n"
        "type: galeria\nimages: [{\"src\": \"a.jpg\" \"alt\": }]\ncaption: Legenda\n"
        "type: texto\ntext: depois[paragraphs]</body>"
    )
    result = parser.parse(html)
    galeria = result.document.paragraphs[1]
    assert galeria.images == []
    assert galeria.caption == "Legenda"
    assert [b.type for b in result.document.paragraphs] == ["texto", "galeria", "texto"]
    assert any("'images'" in warning for warning in result.warnings)


def test_records_without_type_are_discarded():
    document = parse_story("<body>texto solto sem declaração\ntype: texto\ntext: A\ntype: \ntext: B</body>")
    assert [b.text for b in document.paragraphs] == ["A"]


# --- Title fallbacks ---

def test_title_from_legacy_declaration():
    document = parse_story("<body>title: Legado\n[paragraphs]type: texto\ntext: x[paragraphs]</body>")
    assert document.title == "Legado"
    assert document.slug == "legado"


def test_title_field_of_a_block_is_not_the_document_title():
    document = parse_story("<body>type: imagem\ntitle: Foto\n[paragraphs]type: texto\ntext: y[paragraphs]</body>")
    assert document.title is None
    assert document.paragraphs[0].model_dump() == {"type": "imagem", "title": "Foto"}


def test_legacy_title_ahead_of_blocks_in_same_segment():
    document = parse_story("<body>title: Antes\ntype: imagem\ntitle: Foto</body>")
    assert document.title == "Antes"
    assert document.paragraphs[0].title == "Foto"


def test_title_from_export_title_tag():
    html = "<html><head><title>Minha Hist&oacute;ria - Google Docs</title></head><body>type: texto\ntext: oi</body></html>"
    document = parse_story(html)
    assert document.title == "Minha História"
    assert document.slug == "minha-historia"


def test_title_from_first_h1():
    document = parse_story("<body><h1>Grande <span>Título</span></h1>type: texto\ntext: oi</body>")
    assert document.title == "Grande Título"


def test_missing_title_gets_synthetic_slug(parser):
    result = parser.parse("<body>type: texto\ntext: oi</body>")
    assert result.document.title is None
    assert re.fullmatch(r"doc-\d+", result.document.slug)
    assert any("No title" in warning for warning in result.warnings)


def test_markup_title_fallback_can_be_disabled():
    from story_parser.schemas import ParseHints

    html = "<html><head><title>Ignorado</title></head><body>type: texto\ntext: oi</body></html>"
    document = parse_story(html, hints=ParseHints(title_from_markup=False))
    assert document.title is None


def test_parser_instances_do_not_share_state(parser):
    first = parser.parse("type: header\ntitle: Um\ntype: texto\ntext: A").document
    second = parser.parse("type: header\ntitle: Dois\ntype: frase\ntext: B").document
    assert first.title == "Um" and second.title == "Dois"
    assert [b.type for b in first.paragraphs] == ["texto"]
    assert [b.type for b in second.paragraphs] == ["frase"]
    assert first.paragraphs[0] is not second.paragraphs[0]
    assert isinstance(first.paragraphs[0], Block)


# --- Files and CLI ---

def test_parse_file_and_save(tmp_path, parser):
    source = tmp_path / "export.html"
    source.write_text(GOOGLE_DOC_EXPORT, encoding="utf-8")

    result = parser.parse_file(source)
    output = parser.save(result.document, tmp_path / "data")

    assert output.name == "eleicoes-2024-o-que-mudou.json"
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["title"] == "Eleições 2024: O Que Mudou?"
    assert len(data["paragraphs"]) == 3


def test_cli_writes_slug_json(tmp_path, monkeypatch):
    source = tmp_path / "export.html"
    source.write_text(GOOGLE_DOC_EXPORT, encoding="utf-8")
    output_dir = tmp_path / "out"
    monkeypatch.setattr(sys, "argv", ["run_parser.py", str(source), "--output-dir", str(output_dir)])

    assert run_parser.main() == 0
    data = json.loads((output_dir / "eleicoes-2024-o-que-mudou.json").read_text(encoding="utf-8"))
    assert data["credits"] == {"text": "Reportagem: Fulana"}


def test_cli_reports_missing_file(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["run_parser.py", str(tmp_path / "nope.html"), "--stdout"])
    assert run_parser.main() == 1
