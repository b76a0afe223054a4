from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from sitesmith.core.compiler import (
    NAVIGATION_SCRIPT,
    compile_preview,
    component_map,
    normalize_page_path,
    resolve_placeholders,
)
from sitesmith.core.models import ProjectFile


def _file(path: str, content: str, kind: str = "") -> ProjectFile:
    if not kind:
        kind = {"css": "css", "js": "js"}.get(path.rsplit(".", 1)[-1], "html")
    return ProjectFile(path=path, name=path.rsplit("/", 1)[-1], kind=kind, content=content)


def test_nothing_to_resolve_returns_empty_string() -> None:
    assert compile_preview([], "missing.html") == ""
    assert compile_preview([_file("about.html", "<p>About</p>")], "missing.html") == ""


def test_missing_entry_falls_back_to_index() -> None:
    files = [_file("index.html", "<p>Home</p>")]
    assert "<p>Home</p>" in compile_preview(files, "missing.html")


def test_both_placeholder_forms_are_replaced() -> None:
    files = [
        _file("index.html", '<body>{{ header }}<main></main><div id="header-placeholder"></div></body>'),
        _file("components/header.html", "<nav>H</nav>"),
    ]
    result = compile_preview(files, "index.html")
    assert result.count("<nav>H</nav>") == 2
    assert "{{ header }}" not in result
    assert "header-placeholder" not in result


def test_unknown_placeholders_are_left_alone() -> None:
    html = "{{ footer }}<p>x</p>"
    assert resolve_placeholders(html, {"header": "<nav></nav>"}) == html


def test_component_map_strips_html_suffix() -> None:
    files = [_file("components/hero.html", "<h1></h1>"), _file("index.html", "")]
    assert component_map(files) == {"hero": "<h1></h1>"}


def test_complete_document_keeps_its_structure() -> None:
    page = (
        "<!DOCTYPE html>\n<html lang=\"en\">\n<head><title>T</title></head>\n"
        "<body class=\"home\"><p>Hi</p></body>\n</html>"
    )
    files = [
        _file("index.html", page),
        _file("style.css", "p { color: red; }"),
        _file("app.js", "console.log(1);"),
    ]
    result = compile_preview(files, "index.html")
    assert result.count("<style>") == 1
    assert result.count("<script>") == 1
    assert result.count("<head>") == 1
    assert result.count("</body>") == 1
    assert '<html lang="en">' in result
    assert '<body class="home">' in result
    assert result.index("p { color: red; }") < result.index("</head>")
    assert result.index("</head>") < result.index("<p>Hi</p>") < result.index("console.log(1);") < result.index("</body>")
    assert "/* style.css */" in result


def test_fragment_gets_wrapped_in_a_document() -> None:
    files = [_file("index.html", "<h1>Fragment</h1>"), _file("style.css", "h1 {}")]
    result = compile_preview(files, "index.html")
    assert result.startswith("<!DOCTYPE html>")
    assert '<meta name="viewport" content="width=device-width, initial-scale=1.0">' in result
    body = result[result.index("<body>"):result.index("</body>")]
    assert "<h1>Fragment</h1>" in body


def test_partial_document_preserves_head_and_body_contents() -> None:
    files = [_file("index.html", "<html><head><title>Old</title></head><body><p>B</p></body></html>")]
    result = compile_preview(files, "index.html")
    assert "<title>Old</title>" in result
    assert result.count("<body>") == 1
    assert "<p>B</p>" in result


def test_inlined_content_cannot_close_its_block() -> None:
    files = [_file("index.html", "<p></p>"), _file("app.js", 'var s = "</script>";')]
    result = compile_preview(files, "index.html")
    assert result.count("</script>") == 1
    assert '"<\\/script>"' in result


def test_navigation_script_only_when_requested() -> None:
    files = [_file("index.html", "<p>x</p>")]
    assert NAVIGATION_SCRIPT not in compile_preview(files, "index.html")
    assert NAVIGATION_SCRIPT in compile_preview(files, "index.html", on_navigate=lambda page: None)


def test_compile_is_deterministic() -> None:
    files = [_file("index.html", "<p>x</p>"), _file("a.css", "a{}"), _file("b.js", "b()")]
    assert compile_preview(files, "index.html") == compile_preview(files, "index.html")


def test_normalize_page_path() -> None:
    assert normalize_page_path("./servico.html") == "servico.html"
    assert normalize_page_path("././a/b.html") == "a/b.html"
    assert normalize_page_path("servico.html") == "servico.html"


def test_placeholders_match_case_and_attribute_variants() -> None:
    components = component_map([_file("components/header.html", "<nav>H</nav>")])
    html = (
        "{{HEADER}}|"
        "<div class=\"x\" ID='header-placeholder' data-a=\"1\">  </div>|"
        '<div id="header-placeholder">keep</div>'
    )
    assert resolve_placeholders(html, components) == (
        '<nav>H</nav>|<nav>H</nav>|<div id="header-placeholder">keep</div>'
    )


def test_complete_document_with_placeholder_is_not_rewrapped() -> None:
    page = "<!DOCTYPE html><html lang=\"en\"><head><title>T</title></head><body>{{ header }}</body></html>"
    files = [_file("index.html", page), _file("components/header.html", "<nav>H</nav>")]
    result = compile_preview(files, "index.html")
    assert "<body><nav>H</nav>" in result
    assert result.count("<!DOCTYPE") == 1
    assert result.count("<html") == 1
    assert 'lang="pt-BR"' not in result
    assert "viewport" not in result


def test_complete_document_without_head_or_body_uses_fallbacks() -> None:
    extras = [_file("s.css", "a{}"), _file("b.js", "b()")]
    with_html_close = compile_preview(
        [_file("index.html", '<!DOCTYPE html><html lang="en"><p>x</p></html>')] + extras, "index.html")
    assert with_html_close.startswith('<!DOCTYPE html><html lang="en"><style>\n/* s.css */\na{}\n</style>\n<p>x</p>')
    assert with_html_close.endswith("b()\n</script>\n</html>")

    unterminated = compile_preview(
        [_file("index.html", "<!DOCTYPE html><html><p>x</p>")] + extras, "index.html")
    assert unterminated.startswith("<!DOCTYPE html><html><style>")
    assert unterminated.endswith("<p>x</p><script>\n/* b.js */\nb()\n</script>\n")
