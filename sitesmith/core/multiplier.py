"""Page multiplication: expand one template into many persisted pages."""

from __future__ import annotations

import logging
from typing import Callable, List, Sequence

from .models import GeneratedPage, ProjectFile, TemplateVariation
from .storage import ProjectStore
from .tags import generate_file_name, generate_page_content

logger = logging.getLogger(__name__)


class MultiplyError(Exception):
    """A persistence call failed partway through a multiplication run.

    ``committed`` holds the pages stored before the failure, in input order;
    rows from ``failed_index`` onwards were not written.
    """

    def __init__(self, message: str, committed: List[GeneratedPage], failed_index: int) -> None:
        super().__init__(message)
        self.committed = committed
        self.failed_index = failed_index


def output_path(file_name: str, output_folder: str) -> str:
    folder = (output_folder or "").strip().strip("/")
    return f"{folder}/{file_name}" if folder else file_name


def plan_pages(
    template: ProjectFile,
    variations: Sequence[TemplateVariation],
    output_pattern: str,
    output_folder: str,
) -> List[GeneratedPage]:
    """Compute the pages a run would write, without touching storage."""

    pages: List[GeneratedPage] = []
    for variation in variations:
        content = generate_page_content(template.content, variation)
        file_name = generate_file_name(output_pattern, variation)
        pages.append(GeneratedPage(
            file_name=file_name,
            file_path=output_path(file_name, output_folder),
            content=content,
        ))
    return pages


def multiply(
    store: ProjectStore,
    project_id: str,
    template: ProjectFile,
    tags: Sequence[str],
    variations: Sequence[TemplateVariation],
    output_pattern: str,
    output_folder: str,
    progress_callback: Callable[[int, int], None] | None = None,
) -> List[GeneratedPage]:
    """Generate and upsert one HTML page per variation, in order.

    The caller guarantees ``tags`` and ``variations`` are non-empty and that
    every variation is complete. Each page is stored by its own upsert call;
    a failure stops the run and raises :class:`MultiplyError` with the pages
    already stored.
    """

    total = len(variations)
    committed: List[GeneratedPage] = []
    logger.info(
        "Multiplying %s into %d page(s) with tags %s",
        template.path, total, ", ".join(tags),
    )
    for index, page in enumerate(plan_pages(template, variations, output_pattern, output_folder)):
        try:
            store.upsert_file(project_id, page.file_path, {
                "name": page.file_name,
                "kind": "html",
                "content": page.content,
            })
        except Exception as exc:
            logger.exception("Failed to store %s (row %d of %d)", page.file_path, index + 1, total)
            raise MultiplyError(
                f"Could not save {page.file_path}: {exc}", committed, index,
            ) from exc
        committed.append(page)
        logger.debug("Stored %s", page.file_path)
        if progress_callback is not None:
            progress_callback(index + 1, total)
    logger.info("Generated %d page(s) from %s", len(committed), template.path)
    return committed
