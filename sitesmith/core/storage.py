"""Project persistence: files and saved page templates."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from .models import FILE_KINDS, PageTemplate, ProjectFile

logger = logging.getLogger(__name__)

PROJECT_SUFFIX = ".siteproj"
STORE_VERSION = 1


class StorageError(Exception):
    """Raised when a project document cannot be read or written."""


@dataclass
class ProjectInfo:
    id: str
    name: str


class ProjectStore(Protocol):
    def list_files(self, project_id: str) -> List[ProjectFile]: ...

    def upsert_file(self, project_id: str, path: str, fields: dict) -> ProjectFile: ...

    def delete_all_files(self, project_id: str) -> None: ...


def _now() -> str:
    return datetime.now().isoformat(timespec="seconds")


def _file_from_fields(path: str, fields: dict, previous: Optional[ProjectFile] = None) -> ProjectFile:
    kind = fields.get("kind", previous.kind if previous else "other")
    if kind not in FILE_KINDS:
        kind = "other"
    return ProjectFile(
        path=path,
        name=fields.get("name") or (previous.name if previous else path.rsplit("/", 1)[-1]),
        kind=kind,
        content=fields.get("content", previous.content if previous else ""),
    )


class _BaseStore(ABC):
    """Shared CRUD over a per-project document ``{name, files, templates}``."""

    @abstractmethod
    def _read(self, project_id: str) -> dict:
        ...

    @abstractmethod
    def _write(self, project_id: str, data: dict) -> None:
        ...

    # ------------------------------------------------------------ Projects --
    def create_project(self, name: str) -> ProjectInfo:
        project_id = uuid.uuid4().hex
        self._write(project_id, {
            "version": STORE_VERSION,
            "id": project_id,
            "name": name,
            "files": [],
            "templates": [],
        })
        logger.info("Created project %s (%s)", name, project_id)
        return ProjectInfo(id=project_id, name=name)

    def project_info(self, project_id: str) -> ProjectInfo:
        data = self._read(project_id)
        return ProjectInfo(id=project_id, name=data.get("name", "Untitled"))

    # --------------------------------------------------------------- Files --
    def list_files(self, project_id: str) -> List[ProjectFile]:
        data = self._read(project_id)
        files = [ProjectFile.from_dict(f) for f in data.get("files", []) if isinstance(f, dict)]
        return sorted(files, key=lambda f: f.path)

    def upsert_file(self, project_id: str, path: str, fields: dict) -> ProjectFile:
        data = self._read(project_id)
        files: List[dict] = [f for f in data.get("files", []) if isinstance(f, dict)]
        for index, entry in enumerate(files):
            if entry.get("path") == path:
                updated = _file_from_fields(path, fields, ProjectFile.from_dict(entry))
                files[index] = updated.to_dict()
                break
        else:
            updated = _file_from_fields(path, fields)
            files.append(updated.to_dict())
        data["files"] = files
        self._write(project_id, data)
        return updated

    def delete_all_files(self, project_id: str) -> None:
        data = self._read(project_id)
        data["files"] = []
        self._write(project_id, data)
        logger.info("Deleted all files of project %s", project_id)

    def replace_files(self, project_id: str, files: List[ProjectFile]) -> None:
        """Bulk regeneration: drop every file then insert ``files``."""

        self.delete_all_files(project_id)
        for project_file in files:
            self.upsert_file(project_id, project_file.path, project_file.to_dict())

    # ----------------------------------------------------------- Templates --
    def list_templates(self, project_id: str) -> List[PageTemplate]:
        data = self._read(project_id)
        templates = [PageTemplate.from_dict(t) for t in data.get("templates", []) if isinstance(t, dict)]
        return sorted(templates, key=lambda t: t.created_at, reverse=True)

    def save_template(self, project_id: str, template: PageTemplate) -> PageTemplate:
        data = self._read(project_id)
        templates: List[dict] = [t for t in data.get("templates", []) if isinstance(t, dict)]
        stamp = _now()
        if not template.id:
            template.id = uuid.uuid4().hex
            template.created_at = stamp
        template.updated_at = stamp
        payload = template.to_dict()
        for index, entry in enumerate(templates):
            if entry.get("id") == template.id:
                templates[index] = payload
                break
        else:
            templates.append(payload)
        data["templates"] = templates
        self._write(project_id, data)
        return template

    def delete_template(self, project_id: str, template_id: str) -> None:
        data = self._read(project_id)
        data["templates"] = [t for t in data.get("templates", [])
                             if isinstance(t, dict) and t.get("id") != template_id]
        self._write(project_id, data)


class JsonProjectStore(_BaseStore):
    """One ``<id>.siteproj`` JSON document per project under ``root``."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, project_id: str) -> Path:
        return self.root / f"{project_id}{PROJECT_SUFFIX}"

    def list_projects(self) -> List[ProjectInfo]:
        projects: List[ProjectInfo] = []
        for path in sorted(self.root.glob(f"*{PROJECT_SUFFIX}")):
            if path.name.startswith("."):
                continue
            projects.append(self.project_info(path.stem))
        return projects

    def _read(self, project_id: str) -> dict:
        path = self.path_for(project_id)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise StorageError(f"Unknown project: {project_id}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Could not read {path.name}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Malformed project document: {path.name}")
        return data

    def _write(self, project_id: str, data: dict) -> None:
        path = self.path_for(project_id)
        payload = json.dumps(data, indent=2, ensure_ascii=False)
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=".tmp_", suffix=PROJECT_SUFFIX, dir=str(self.root))
        except OSError as exc:
            raise StorageError(f"Could not write {path.name}: {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Could not write {path.name}: {exc}") from exc


class MemoryProjectStore(_BaseStore):
    """Volatile store, handy for previews of unsaved work and for tests."""

    def __init__(self) -> None:
        self._projects: Dict[str, dict] = {}

    def list_projects(self) -> List[ProjectInfo]:
        return [ProjectInfo(id=pid, name=data.get("name", "Untitled")) for pid, data in self._projects.items()]

    def _read(self, project_id: str) -> dict:
        try:
            return json.loads(json.dumps(self._projects[project_id]))
        except KeyError as exc:
            raise StorageError(f"Unknown project: {project_id}") from exc

    def _write(self, project_id: str, data: dict) -> None:
        self._projects[project_id] = json.loads(json.dumps(data))
