"""Data models for the site builder application."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Literal, Optional

FileKind = Literal["html", "css", "js", "other"]

FILE_KINDS: tuple[str, ...] = ("html", "css", "js", "other")

COMPONENTS_PREFIX = "components/"

# One variation = one generated page: tag name -> literal value.
TemplateVariation = Dict[str, str]


@dataclass
class ProjectFile:
    """A single generated artifact, identified by its project-relative path."""

    path: str
    name: str
    kind: FileKind
    content: str

    @property
    def is_component(self) -> bool:
        return self.path.startswith(COMPONENTS_PREFIX)

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "name": self.name,
            "kind": self.kind,
            "content": self.content,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectFile":
        path = str(data.get("path", ""))
        kind = data.get("kind", "other")
        if kind not in FILE_KINDS:
            kind = "other"
        return cls(
            path=path,
            name=str(data.get("name") or path.rsplit("/", 1)[-1]),
            kind=kind,
            content=str(data.get("content", "")),
        )


@dataclass
class GeneratedPage:
    file_name: str
    file_path: str
    content: str


@dataclass
class PageTemplate:
    """A saved page-multiplication setup."""

    name: str
    source_file_path: str
    tags: List[str] = field(default_factory=list)
    output_pattern: str = "{slug}.html"
    output_folder: str = "pages"
    variations: List[TemplateVariation] = field(default_factory=list)
    id: str = ""
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "source_file_path": self.source_file_path,
            "tags": list(self.tags),
            "output_pattern": self.output_pattern,
            "output_folder": self.output_folder,
            "variations": [dict(v) for v in self.variations],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PageTemplate":
        variations: List[TemplateVariation] = []
        for row in data.get("variations", []):
            if isinstance(row, dict):
                variations.append({str(k): str(v) for k, v in row.items()})
        return cls(
            name=data.get("name", "Template"),
            source_file_path=data.get("source_file_path", ""),
            tags=[str(t) for t in data.get("tags", [])],
            output_pattern=data.get("output_pattern", "{slug}.html"),
            output_folder=data.get("output_folder", "pages"),
            variations=variations,
            id=data.get("id", ""),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )


@dataclass
class FileTreeItem:
    name: str
    path: str
    type: Literal["file", "folder"]
    kind: Optional[FileKind] = None
    children: List["FileTreeItem"] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Layout tree (section-based page description)
# ---------------------------------------------------------------------------


class SectionKind(str, Enum):
    HERO = "hero"
    SERVICES = "services"
    FEATURES = "features"
    ABOUT = "about"
    STATS = "stats"
    TESTIMONIALS = "testimonials"
    TEAM = "team"
    PRICING = "pricing"
    FAQ = "faq"
    GALLERY = "gallery"
    BLOG = "blog"
    CONTACT = "contact"
    CTA = "cta"
    FOOTER = "footer"


@dataclass
class GlobalStyles:
    primary_color: str = "#2563eb"
    secondary_color: str = "#0f172a"
    font_family: str = "Inter, system-ui, sans-serif"
    heading_font: str = "Inter, system-ui, sans-serif"

    @classmethod
    def from_dict(cls, data: dict) -> "GlobalStyles":
        defaults = cls()
        return cls(
            primary_color=data.get("primaryColor", defaults.primary_color),
            secondary_color=data.get("secondaryColor", defaults.secondary_color),
            font_family=data.get("fontFamily", defaults.font_family),
            heading_font=data.get("headingFont", defaults.heading_font),
        )


@dataclass
class Section:
    id: str
    type: str  # kept raw so unknown kinds survive loading
    content: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "Section":
        content = data.get("content")
        return cls(
            id=str(data.get("id", "")),
            type=str(data.get("type", "")),
            content=content if isinstance(content, dict) else {},
        )


@dataclass
class LayoutPage:
    id: str
    name: str
    slug: str
    is_homepage: bool = False
    sections: List[Section] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "LayoutPage":
        sections = [Section.from_dict(s) for s in data.get("sections", []) if isinstance(s, dict)]
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", "Page"),
            slug=data.get("slug", ""),
            is_homepage=bool(data.get("isHomepage", False)),
            sections=sections,
        )


@dataclass
class LayoutTree:
    id: str
    name: str
    pages: List[LayoutPage] = field(default_factory=list)
    global_styles: GlobalStyles = field(default_factory=GlobalStyles)

    @property
    def homepage(self) -> Optional[LayoutPage]:
        for page in self.pages:
            if page.is_homepage:
                return page
        return None

    @classmethod
    def from_dict(cls, data: dict) -> "LayoutTree":
        pages = [LayoutPage.from_dict(p) for p in data.get("pages", []) if isinstance(p, dict)]
        styles = data.get("globalStyles")
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", "Site"),
            pages=pages,
            global_styles=GlobalStyles.from_dict(styles) if isinstance(styles, dict) else GlobalStyles(),
        )
