from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from sitesmith.core.layout import SECTION_TEMPLATES, render_layout, render_section
from sitesmith.core.models import GlobalStyles, LayoutTree, Section, SectionKind


def test_every_section_kind_has_a_template() -> None:
    for kind in SectionKind:
        assert f"{kind.value}.html" in SECTION_TEMPLATES
        html = render_section(Section(id="s", type=kind.value), GlobalStyles())
        assert "Component not found" not in html


def test_unknown_kind_renders_visible_fallback() -> None:
    html = render_section(Section(id="s", type="carousel"), GlobalStyles())
    assert "Component not found: carousel" in html


def test_section_content_is_escaped() -> None:
    section = Section(id="s", type="hero", content={"title": "<script>x</script>"})
    html = render_section(section, GlobalStyles())
    assert "<script>x</script>" not in html
    assert "&lt;script&gt;" in html


def test_render_layout_uses_homepage() -> None:
    tree = LayoutTree.from_dict({
        "id": "t",
        "name": "Site",
        "globalStyles": {"primaryColor": "#ff0000"},
        "pages": [
            {"id": "2", "name": "Other", "slug": "other", "sections": [
                {"id": "x", "type": "about", "content": {"title": "Not me"}}]},
            {"id": "1", "name": "Home", "slug": "", "isHomepage": True, "sections": [
                {"id": "a", "type": "hero", "content": {"title": "Olá"}},
                {"id": "b", "type": "faq", "content": {"items": [{"question": "Q?", "answer": "A."}]}},
            ]},
        ],
    })
    html = render_layout(tree)
    assert "Olá" in html
    assert "<summary>Q?</summary>" in html
    assert "Not me" not in html
    assert "#ff0000" in html
    assert "<section" in html


def test_render_layout_without_homepage() -> None:
    assert "No homepage found" in render_layout(LayoutTree(id="t", name="Empty"))
