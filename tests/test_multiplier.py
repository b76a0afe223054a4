from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from sitesmith.core.models import ProjectFile
from sitesmith.core.multiplier import MultiplyError, multiply, output_path, plan_pages
from sitesmith.core.storage import MemoryProjectStore


def _template(content: str) -> ProjectFile:
    return ProjectFile(path="servico.html", name="servico.html", kind="html", content=content)


def test_multiply_writes_one_page_per_variation() -> None:
    store = MemoryProjectStore()
    project = store.create_project("Demo")
    pages = multiply(
        store,
        project.id,
        _template("<h1>Bem-vindo a {cidade}</h1>"),
        ["cidade"],
        [{"cidade": "São Paulo"}, {"cidade": "Rio de Janeiro"}],
        "pagina-{cidade}.html",
        "pages",
    )
    assert [p.file_path for p in pages] == [
        "pages/pagina-sao-paulo.html",
        "pages/pagina-rio-de-janeiro.html",
    ]
    stored = {f.path: f for f in store.list_files(project.id)}
    assert set(stored) == {"pages/pagina-sao-paulo.html", "pages/pagina-rio-de-janeiro.html"}
    assert stored["pages/pagina-sao-paulo.html"].content == "<h1>Bem-vindo a São Paulo</h1>"
    assert stored["pages/pagina-rio-de-janeiro.html"].content == "<h1>Bem-vindo a Rio de Janeiro</h1>"
    assert stored["pages/pagina-sao-paulo.html"].name == "pagina-sao-paulo.html"
    assert stored["pages/pagina-sao-paulo.html"].kind == "html"


def test_multiply_overwrites_existing_paths() -> None:
    store = MemoryProjectStore()
    project = store.create_project("Demo")
    store.upsert_file(project.id, "centro.html", {"kind": "html", "content": "old"})
    multiply(store, project.id, _template("new {b}"), ["b"], [{"b": "Centro"}], "{b}.html", "")
    files = store.list_files(project.id)
    assert len(files) == 1
    assert files[0].content == "new Centro"


def test_colliding_file_names_last_row_wins() -> None:
    store = MemoryProjectStore()
    project = store.create_project("Demo")
    pages = multiply(
        store, project.id, _template("{x}"), ["x"],
        [{"x": "São Paulo"}, {"x": "sao paulo"}], "{x}.html", "pages",
    )
    assert len(pages) == 2
    files = store.list_files(project.id)
    assert [f.content for f in files] == ["sao paulo"]


def test_multiply_reports_progress() -> None:
    store = MemoryProjectStore()
    project = store.create_project("Demo")
    calls = []
    multiply(
        store, project.id, _template("{n}"), ["n"],
        [{"n": "a"}, {"n": "b"}, {"n": "c"}], "{n}.html", "out",
        progress_callback=lambda current, total: calls.append((current, total)),
    )
    assert calls == [(1, 3), (2, 3), (3, 3)]


class _FlakyStore:
    def __init__(self, fail_at: int) -> None:
        self.fail_at = fail_at
        self.paths = []

    def list_files(self, project_id):
        return []

    def upsert_file(self, project_id, path, fields):
        if len(self.paths) == self.fail_at:
            raise OSError("disk full")
        self.paths.append(path)

    def delete_all_files(self, project_id):
        self.paths.clear()


def test_failure_keeps_committed_prefix() -> None:
    store = _FlakyStore(fail_at=2)
    with pytest.raises(MultiplyError) as info:
        multiply(
            store, "p", _template("{n}"), ["n"],
            [{"n": "a"}, {"n": "b"}, {"n": "c"}, {"n": "d"}], "{n}.html", "pages",
        )
    error = info.value
    assert error.failed_index == 2
    assert [p.file_path for p in error.committed] == ["pages/a.html", "pages/b.html"]
    assert store.paths == ["pages/a.html", "pages/b.html"]
    assert isinstance(error.__cause__, OSError)


def test_output_path_trims_folder_slashes() -> None:
    assert output_path("a.html", "/pages/") == "pages/a.html"
    assert output_path("a.html", "  ") == "a.html"


def test_plan_pages_does_not_touch_storage() -> None:
    pages = plan_pages(_template("{a}"), [{"a": "X"}], "{a}.html", "")
    assert pages[0].file_name == "x.html"
    assert pages[0].content == "X"
