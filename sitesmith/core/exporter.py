"""ZIP export of a project's files plus hosting helpers."""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import List, Optional, Sequence

from jinja2 import DictLoader, Environment, select_autoescape

from .compiler import DEFAULT_ENTRY, compile_preview, component_map, resolve_placeholders
from .filetree import is_page, list_pages
from .models import ProjectFile
from .tags import slugify

logger = logging.getLogger(__name__)

DEFAULT_SITE_URL = "https://example.com"

EXPORT_TEMPLATES = {
    "README.md.j2": """# {{ project_name }}

Static site exported with Sitesmith. The package holds {{ files_count }} file(s).

## Layout

```
{{ folder }}/
├── index.html        # Home page
{%- if include_compiled %}
├── compiled.html     # Single-file build (CSS/JS inline)
{%- endif %}
├── components/       # Reusable HTML fragments (already expanded in pages)
{%- if include_sitemap %}
├── robots.txt
├── sitemap.xml
{%- endif %}
{%- if include_htaccess %}
├── .htaccess         # Apache compression and caching
{%- endif %}
{%- if include_favicon %}
└── favicon.svg
{%- endif %}
```

## Deploying

Upload every file to the web root of any static host (shared hosting
`public_html`, Netlify, Vercel or GitHub Pages) with `index.html` at the top.
{% if include_sitemap %}
Replace `{{ site_url }}` in `sitemap.xml` and `robots.txt` with the real address.
{% endif %}
Exported on {{ today }}.
""",
    "robots.txt.j2": """User-agent: *
Allow: /

Sitemap: {{ site_url }}/sitemap.xml
""",
    "sitemap.xml.j2": """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
{%- for page in pages %}
  <url>
    <loc>{{ site_url }}/{{ page.loc }}</loc>
    <lastmod>{{ today }}</lastmod>
    <changefreq>monthly</changefreq>
    <priority>{{ page.priority }}</priority>
  </url>
{%- endfor %}
</urlset>
""",
    "htaccess.j2": """<IfModule mod_deflate.c>
  AddOutputFilterByType DEFLATE text/html text/css text/javascript application/javascript image/svg+xml
</IfModule>

<IfModule mod_expires.c>
  ExpiresActive On
  ExpiresByType text/html "access plus 1 hour"
  ExpiresByType text/css "access plus 1 month"
  ExpiresByType application/javascript "access plus 1 month"
  ExpiresByType image/svg+xml "access plus 1 year"
</IfModule>

Options -Indexes
""",
    "favicon.svg.j2": """<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <rect width="100" height="100" rx="20" fill="{{ color }}"/>
  <text x="50%" y="50%" text-anchor="middle" dy=".35em" font-family="system-ui, sans-serif" font-size="50" font-weight="600" fill="white">{{ initial }}</text>
</svg>
""",
}


class ExportError(Exception):
    """Raised when a project cannot be packaged."""


@dataclass(slots=True)
class ExportOptions:
    include_readme: bool = True
    include_htaccess: bool = True
    include_sitemap: bool = True
    include_compiled: bool = True
    include_favicon: bool = True
    site_url: str = DEFAULT_SITE_URL
    favicon_color: str = "#7C3AED"


@dataclass(slots=True)
class ExportResult:
    archive_path: Path
    folder: str
    entries: List[str] = field(default_factory=list)


def _env() -> Environment:
    return Environment(
        loader=DictLoader(EXPORT_TEMPLATES),
        autoescape=select_autoescape(["xml.j2", "svg.j2"]),
        keep_trailing_newline=True,
    )


def sitemap_pages(files: Sequence[ProjectFile]) -> List[dict]:
    entries = []
    for page in list_pages(files):
        if page.path == DEFAULT_ENTRY:
            entries.append({"loc": "", "priority": "1.0"})
        else:
            entries.append({"loc": page.path, "priority": "0.8"})
    return entries


def export_zip(
    files: Sequence[ProjectFile],
    project_name: str,
    destination: str | Path,
    options: Optional[ExportOptions] = None,
    today: Optional[date] = None,
) -> ExportResult:
    """Write ``files`` (pages with components expanded) and extras to a ZIP."""

    if not files:
        raise ExportError("No files found for this project")
    options = options or ExportOptions()
    today_text = (today or date.today()).isoformat()
    site_url = (options.site_url or DEFAULT_SITE_URL).rstrip("/")
    folder = slugify(project_name) or "website"
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    env = _env()
    components = component_map(files)
    context = {
        "project_name": project_name or "Website",
        "files_count": len(files),
        "folder": folder,
        "site_url": site_url,
        "today": today_text,
        "include_compiled": options.include_compiled,
        "include_sitemap": options.include_sitemap,
        "include_htaccess": options.include_htaccess,
        "include_favicon": options.include_favicon,
    }

    result = ExportResult(archive_path=destination, folder=folder)

    def add(name: str, content: str) -> None:
        archive.writestr(f"{folder}/{name}", content)
        result.entries.append(name)

    with zipfile.ZipFile(destination, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for project_file in files:
            content = project_file.content
            if is_page(project_file):
                content = resolve_placeholders(content, components)
            add(project_file.path, content)
        compiled = compile_preview(files, DEFAULT_ENTRY) if options.include_compiled else ""
        if compiled:
            add("compiled.html", compiled)
        if options.include_sitemap:
            add("robots.txt", env.get_template("robots.txt.j2").render(**context))
            add("sitemap.xml", env.get_template("sitemap.xml.j2").render(pages=sitemap_pages(files), **context))
        if options.include_htaccess:
            add(".htaccess", env.get_template("htaccess.j2").render())
        if options.include_favicon:
            initial = (project_name or "W").strip()[:1].upper() or "W"
            add("favicon.svg", env.get_template("favicon.svg.j2").render(color=options.favicon_color, initial=initial))
        if options.include_readme:
            add("README.md", env.get_template("README.md.j2").render(**context))

    logger.info("Exported %d entries to %s", len(result.entries), destination)
    return result
