"""File listing helpers for the explorer and the page selector."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Dict, Iterable, List, Optional

from .compiler import normalize_page_path
from .models import FileKind, FileTreeItem, ProjectFile

_KIND_BY_SUFFIX: Dict[str, FileKind] = {
    ".html": "html",
    ".htm": "html",
    ".php": "html",
    ".css": "css",
    ".js": "js",
    ".mjs": "js",
}


def file_kind_for(path: str) -> FileKind:
    return _KIND_BY_SUFFIX.get(PurePosixPath(path).suffix.lower(), "other")


def is_page(project_file: ProjectFile) -> bool:
    return (
        project_file.kind == "html"
        and not project_file.is_component
        and "/components/" not in project_file.path
    )


def list_pages(files: Iterable[ProjectFile]) -> List[ProjectFile]:
    """Navigable pages, ``index.html`` first and the rest by file name."""

    pages = [f for f in files if is_page(f)]
    return sorted(pages, key=lambda f: (f.name != "index.html", f.name.lower(), f.path))


def build_file_tree(files: Iterable[ProjectFile]) -> List[FileTreeItem]:
    root: List[FileTreeItem] = []
    folders: Dict[str, FileTreeItem] = {}

    for project_file in sorted(files, key=lambda f: f.path):
        parts = project_file.path.split("/")
        level = root
        current = ""
        for folder_name in parts[:-1]:
            current = f"{current}/{folder_name}" if current else folder_name
            folder = folders.get(current)
            if folder is None:
                folder = FileTreeItem(name=folder_name, path=current, type="folder")
                folders[current] = folder
                level.append(folder)
            level = folder.children
        level.append(FileTreeItem(
            name=project_file.name,
            path=project_file.path,
            type="file",
            kind=project_file.kind,
        ))
    return root


def find_page(files: Iterable[ProjectFile], path: str) -> Optional[ProjectFile]:
    """The page stored at ``path``, or None for components and unknown paths."""

    path = normalize_page_path(path)
    for project_file in files:
        if project_file.path == path:
            return project_file if is_page(project_file) else None
    return None
