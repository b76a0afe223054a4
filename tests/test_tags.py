from __future__ import annotations

import re
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from sitesmith.core.tags import (
    default_output_pattern,
    detect_tags,
    generate_file_name,
    generate_page_content,
    slugify,
    split_highlighted,
    template_preview_text,
)


def test_detect_tags_dedups_in_first_seen_order() -> None:
    assert detect_tags("{a}{b}{a}") == ["a", "b"]


def test_detect_tags_ignores_non_identifier_braces() -> None:
    html = "<style>a { color: red; }</style><p>{ spaced } {1st} {cidade_2}</p>"
    assert detect_tags(html) == ["cidade_2"]
    assert detect_tags("") == []


def test_slugify_strips_accents_and_punctuation() -> None:
    assert slugify("São Paulo") == "sao-paulo"
    assert slugify("  Rio de Janeiro!! ") == "rio-de-janeiro"
    assert slugify("centro") == "centro"
    assert slugify("???") == ""


def test_generate_page_content_keeps_raw_values() -> None:
    template = "<h1>Bem-vindo a {cidade}</h1><p>{Cidade} - {CIDADE}</p>"
    result = generate_page_content(template, {"cidade": "São Paulo"})
    assert result == "<h1>Bem-vindo a São Paulo</h1><p>São Paulo - São Paulo</p>"


def test_generate_page_content_leaves_missing_tags_literal() -> None:
    assert generate_page_content("{a} and {b}", {"a": "x"}) == "x and {b}"


def test_substituted_values_are_not_rescanned() -> None:
    result = generate_page_content("{a}-{b}", {"a": "{b}", "b": "B"})
    assert result == "{b}-B"


def test_generate_file_name_is_always_safe() -> None:
    samples = ["São Paulo", "Rua 25 de Março", "  ", "a/b\\c", "Ünïcödé & Co."]
    for value in samples:
        name = generate_file_name("{x}.html", {"x": value})
        assert re.fullmatch(r"[a-z0-9-]*\.html", name)
    assert generate_file_name("servico-{cidade}.html", {"cidade": "Rio de Janeiro"}) == "servico-rio-de-janeiro.html"


def test_default_output_pattern_uses_first_tag() -> None:
    assert default_output_pattern("servico.html", ["cidade", "bairro"]) == "servico-{cidade}.html"
    assert default_output_pattern("servico.html", []) == "{slug}.html"


def test_template_preview_text_drops_scripts_and_collapses_space() -> None:
    html = """<html><head><title>T</title></head><body>
    <script>var x = 1;</script><style>p { color: red; }</style>
    <h1>Bem-vindo   a {cidade}</h1>
    </body></html>"""
    assert template_preview_text(html) == "Bem-vindo a {cidade}"
    long_text = template_preview_text("<p>" + "x" * 600 + "</p>")
    assert long_text.endswith("...")
    assert len(long_text) == 503


def test_split_highlighted_marks_tag_tokens() -> None:
    assert split_highlighted("Hi {name}!") == [("Hi ", False), ("{name}", True), ("!", False)]
