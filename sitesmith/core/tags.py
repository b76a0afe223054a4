"""Template tags: detection and substitution.

A template is any text holding ``{name}`` placeholders. The same
substitution routine expands both page content and output file names; file
names additionally pass every value through :func:`slugify`.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Callable, Iterable, List, Mapping

from bs4 import BeautifulSoup

TAG_PATTERN = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")

PREVIEW_TEXT_LIMIT = 500


def detect_tags(content: str) -> List[str]:
    """Return the unique tag names in ``content``, in first-seen order."""

    seen: dict[str, None] = {}
    for match in TAG_PATTERN.finditer(content or ""):
        seen.setdefault(match.group(1), None)
    return list(seen)


def slugify(text: str) -> str:
    """Lowercase ASCII slug: accents stripped, other runs collapsed to ``-``."""

    decomposed = unicodedata.normalize("NFKD", str(text))
    ascii_text = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    ascii_text = ascii_text.encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "-", ascii_text.lower()).strip("-")


def _substitute(
    template: str,
    variation: Mapping[str, str],
    sanitize: Callable[[str], str],
) -> str:
    if not template or not variation:
        return template or ""
    values: dict[str, str] = {}
    for tag, value in variation.items():
        # first binding wins when two keys differ only by case
        values.setdefault(tag.lower(), sanitize(value if value is not None else ""))
    names = sorted(values, key=len, reverse=True)
    pattern = re.compile(
        r"\{(" + "|".join(re.escape(name) for name in names) + r")\}",
        re.IGNORECASE,
    )
    # One pass over the template, so substituted values are never rescanned.
    return pattern.sub(lambda m: values[m.group(1).lower()], template)


def generate_page_content(template: str, variation: Mapping[str, str]) -> str:
    """Replace every ``{tag}`` of ``variation`` in ``template`` with its raw value.

    Matching is case-insensitive. Tags without a value stay as literal text.
    """

    return _substitute(template, variation, str)


def generate_file_name(pattern: str, variation: Mapping[str, str]) -> str:
    """Expand an output pattern such as ``servico-{cidade}.html``."""

    return _substitute(pattern, variation, slugify)


def default_output_pattern(template_name: str, tags: Iterable[str]) -> str:
    """Suggest ``<basename>-{<first tag>}.html`` for a freshly selected template."""

    tags = list(tags)
    if not tags:
        return "{slug}.html"
    base = template_name.rsplit("/", 1)[-1]
    if base.lower().endswith(".html"):
        base = base[: -len(".html")]
    return f"{base}-{{{tags[0]}}}.html"


def template_preview_text(html: str, limit: int = PREVIEW_TEXT_LIMIT) -> str:
    """Readable text of a template, used for the tag-highlighting preview."""

    soup = BeautifulSoup(html or "", "html.parser")
    container = soup.body or soup
    for tag in container.find_all(["script", "style"]):
        tag.decompose()
    text = re.sub(r"\s+", " ", container.get_text(" ")).strip()
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def split_highlighted(text: str) -> List[tuple[str, bool]]:
    """Split ``text`` into ``(segment, is_tag)`` pairs for highlighting."""

    parts: List[tuple[str, bool]] = []
    last = 0
    for match in TAG_PATTERN.finditer(text):
        if match.start() > last:
            parts.append((text[last:match.start()], False))
        parts.append((match.group(0), True))
        last = match.end()
    if last < len(text):
        parts.append((text[last:], False))
    return parts
