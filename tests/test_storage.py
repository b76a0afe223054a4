from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from sitesmith.core.models import PageTemplate, ProjectFile
from sitesmith.core.storage import JsonProjectStore, MemoryProjectStore, StorageError, _BaseStore


def test_json_store_round_trips_files(tmp_path: Path) -> None:
    store = JsonProjectStore(tmp_path)
    project = store.create_project("Clínica")
    store.upsert_file(project.id, "style.css", {"kind": "css", "content": "body {}"})
    store.upsert_file(project.id, "index.html", {"kind": "html", "content": "<p>oi</p>"})

    reopened = JsonProjectStore(tmp_path)
    files = reopened.list_files(project.id)
    assert [f.path for f in files] == ["index.html", "style.css"]
    assert files[0].name == "index.html"
    assert [p.name for p in reopened.list_projects()] == ["Clínica"]


def test_upsert_updates_only_given_fields(tmp_path: Path) -> None:
    store = JsonProjectStore(tmp_path)
    project = store.create_project("Demo")
    store.upsert_file(project.id, "pages/a.html", {"kind": "html", "content": "one"})
    updated = store.upsert_file(project.id, "pages/a.html", {"content": "two"})
    assert updated.kind == "html"
    assert updated.name == "a.html"
    assert [f.content for f in store.list_files(project.id)] == ["two"]


def test_delete_all_and_replace_files() -> None:
    store = MemoryProjectStore()
    project = store.create_project("Demo")
    store.upsert_file(project.id, "old.html", {"kind": "html", "content": ""})
    store.replace_files(project.id, [
        ProjectFile(path="index.html", name="index.html", kind="html", content="new"),
    ])
    assert [f.path for f in store.list_files(project.id)] == ["index.html"]
    store.delete_all_files(project.id)
    assert store.list_files(project.id) == []


def test_corrupt_project_raises_storage_error(tmp_path: Path) -> None:
    store = JsonProjectStore(tmp_path)
    project = store.create_project("Demo")
    store.path_for(project.id).write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        store.list_files(project.id)
    with pytest.raises(StorageError):
        store.list_files("missing")


def test_templates_are_saved_listed_and_deleted(tmp_path: Path) -> None:
    store = JsonProjectStore(tmp_path)
    project = store.create_project("Demo")
    saved = store.save_template(project.id, PageTemplate(
        name="Cidades",
        source_file_path="servico.html",
        tags=["cidade"],
        output_pattern="servico-{cidade}.html",
        variations=[{"cidade": "Recife"}],
    ))
    assert saved.id and saved.created_at and saved.updated_at

    saved.variations.append({"cidade": "Natal"})
    store.save_template(project.id, saved)
    templates = store.list_templates(project.id)
    assert len(templates) == 1
    assert templates[0].variations == [{"cidade": "Recife"}, {"cidade": "Natal"}]
    assert templates[0].output_folder == "pages"

    store.delete_template(project.id, saved.id)
    assert store.list_templates(project.id) == []


def test_memory_store_isolates_callers() -> None:
    store = MemoryProjectStore()
    project = store.create_project("Demo")
    store.upsert_file(project.id, "a.html", {"content": "x"})
    files = store.list_files(project.id)
    files[0].content = "mutated"
    assert store.list_files(project.id)[0].content == "x"
    with pytest.raises(StorageError):
        store.upsert_file("nope", "a.html", {})


def test_failed_write_leaves_no_temp_file(tmp_path: Path, monkeypatch) -> None:
    store = JsonProjectStore(tmp_path)
    project = store.create_project("Demo")

    def fail_replace(src, dst):
        raise OSError("read-only")

    monkeypatch.setattr(os, "replace", fail_replace)
    with pytest.raises(StorageError):
        store.upsert_file(project.id, "index.html", {"content": "x"})
    assert [p.name for p in tmp_path.iterdir()] == [store.path_for(project.id).name]


def test_base_store_cannot_be_instantiated() -> None:
    with pytest.raises(TypeError):
        _BaseStore()
