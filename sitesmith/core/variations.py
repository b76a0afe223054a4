"""In-memory table of template variations (one row per page to generate)."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .models import TemplateVariation

DEFAULT_DELIMITERS: tuple[str, ...] = (",", ";", "|", "\t")


def split_import_line(line: str, delimiters: Sequence[str] = DEFAULT_DELIMITERS) -> List[str]:
    """Split ``line`` on whichever delimiter occurs first in it."""

    positions = [(line.find(d), d) for d in delimiters if d and d in line]
    if not positions:
        return [line.strip()]
    _, delimiter = min(positions)
    return [token.strip() for token in line.split(delimiter)]


class VariationTable:
    """Ordered variation rows bound to the active tag list.

    A row's position is its only identity; removing a row shifts the later
    ones up.
    """

    def __init__(self, tags: Optional[Iterable[str]] = None,
                 rows: Optional[Iterable[TemplateVariation]] = None) -> None:
        self._tags: List[str] = list(tags or [])
        self._rows: List[TemplateVariation] = [dict(r) for r in (rows or [])]

    @property
    def tags(self) -> List[str]:
        return list(self._tags)

    @property
    def rows(self) -> List[TemplateVariation]:
        return [dict(r) for r in self._rows]

    def __len__(self) -> int:
        return len(self._rows)

    # ------------------------------------------------------------- Tags --
    def set_tags(self, tags: Iterable[str]) -> None:
        self._tags = list(dict.fromkeys(tags))

    def add_tag(self, tag: str) -> bool:
        tag = (tag or "").strip()
        if not tag or tag in self._tags:
            return False
        self._tags.append(tag)
        return True

    def remove_tag(self, tag: str) -> None:
        if tag in self._tags:
            self._tags.remove(tag)
        self._rows = [{k: v for k, v in row.items() if k != tag} for row in self._rows]

    # ------------------------------------------------------------- Rows --
    def add_row(self) -> TemplateVariation:
        row = {tag: "" for tag in self._tags}
        self._rows.append(row)
        return dict(row)

    def remove_row(self, index: int) -> None:
        del self._rows[index]

    def update_cell(self, index: int, tag: str, value: str) -> None:
        self._rows[index] = {**self._rows[index], tag: value}

    def value(self, index: int, tag: str) -> str:
        return self._rows[index].get(tag, "")

    def bulk_import(self, text: str, delimiters: Sequence[str] = DEFAULT_DELIMITERS) -> int:
        """Append one row per non-blank line of ``text``.

        Tokens are matched to tags by position; extra tokens are dropped and
        missing ones become empty strings. Returns the number of rows added.
        """

        if not (text or "").strip() or not self._tags:
            return 0
        lines = [line.strip() for line in text.splitlines()]
        added = 0
        for line in lines:
            if not line:
                continue
            tokens = split_import_line(line, delimiters)
            row = {tag: (tokens[i] if i < len(tokens) else "") for i, tag in enumerate(self._tags)}
            self._rows.append(row)
            added += 1
        return added

    # ------------------------------------------------------- Validation --
    def is_complete(self, index: int) -> bool:
        row = self._rows[index]
        return all((row.get(tag) or "").strip() for tag in self._tags)

    def incomplete_rows(self) -> List[int]:
        return [i for i in range(len(self._rows)) if not self.is_complete(i)]

    def can_generate(self) -> bool:
        return bool(self._tags) and bool(self._rows) and not self.incomplete_rows()
