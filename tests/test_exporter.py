from __future__ import annotations

import sys
import zipfile
from datetime import date
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from sitesmith.core.compiler import NAVIGATION_SCRIPT
from sitesmith.core.exporter import ExportError, ExportOptions, export_zip, sitemap_pages
from sitesmith.core.models import ProjectFile


def _files() -> list[ProjectFile]:
    return [
        ProjectFile(path="index.html", name="index.html", kind="html", content="<body>{{ header }}<p>Home</p></body>"),
        ProjectFile(path="pages/centro.html", name="centro.html", kind="html", content="<p>Centro</p>"),
        ProjectFile(path="components/header.html", name="header.html", kind="html", content="<nav>H</nav>"),
        ProjectFile(path="style.css", name="style.css", kind="css", content="p { margin: 0; }"),
    ]


def test_export_writes_sources_and_extras(tmp_path: Path) -> None:
    target = tmp_path / "out" / "site.zip"
    result = export_zip(_files(), "Clínica Sorriso", target, today=date(2024, 5, 1))
    assert result.folder == "clinica-sorriso"

    with zipfile.ZipFile(target) as archive:
        names = set(archive.namelist())
        index = archive.read("clinica-sorriso/index.html").decode("utf-8")
        compiled = archive.read("clinica-sorriso/compiled.html").decode("utf-8")
        sitemap = archive.read("clinica-sorriso/sitemap.xml").decode("utf-8")
        robots = archive.read("clinica-sorriso/robots.txt").decode("utf-8")

    assert {
        "clinica-sorriso/index.html",
        "clinica-sorriso/pages/centro.html",
        "clinica-sorriso/components/header.html",
        "clinica-sorriso/style.css",
        "clinica-sorriso/compiled.html",
        "clinica-sorriso/robots.txt",
        "clinica-sorriso/sitemap.xml",
        "clinica-sorriso/.htaccess",
        "clinica-sorriso/favicon.svg",
        "clinica-sorriso/README.md",
    } == names
    assert "<nav>H</nav>" in index
    assert "{{ header }}" not in index
    assert "p { margin: 0; }" in compiled
    assert NAVIGATION_SCRIPT not in compiled
    assert "<loc>https://example.com/</loc>" in sitemap
    assert "<loc>https://example.com/pages/centro.html</loc>" in sitemap
    assert "<lastmod>2024-05-01</lastmod>" in sitemap
    assert "Sitemap: https://example.com/sitemap.xml" in robots


def test_export_options_toggle_extras(tmp_path: Path) -> None:
    options = ExportOptions(
        include_readme=False,
        include_htaccess=False,
        include_sitemap=False,
        include_compiled=False,
        include_favicon=False,
    )
    result = export_zip(_files(), "", tmp_path / "bare.zip", options)
    assert result.folder == "website"
    assert sorted(result.entries) == sorted(f.path for f in _files())


def test_export_without_files_fails(tmp_path: Path) -> None:
    with pytest.raises(ExportError):
        export_zip([], "Empty", tmp_path / "empty.zip")


def test_sitemap_pages_priorities() -> None:
    assert sitemap_pages(_files()) == [
        {"loc": "", "priority": "1.0"},
        {"loc": "pages/centro.html", "priority": "0.8"},
    ]
