"""Preview compiler: assemble one self-contained HTML document per page.

The compiler works on plain text with regular expressions. Structure
detection and head/body extraction are heuristics: markup that hides a
``<head>`` or ``</body>`` inside a string or comment can be misread. The
injection points stay fixed regardless (styles before ``</head>``, scripts
before ``</body>``), so a real HTML parser could replace the sniffing later
without changing the output contract.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, Optional, Sequence

from .models import ProjectFile

DEFAULT_ENTRY = "index.html"

DOCTYPE_RE = re.compile(r"<!DOCTYPE\s+html", re.IGNORECASE)
HTML_TAG_RE = re.compile(r"<html(?:\s[^>]*)?>", re.IGNORECASE)
HEAD_BLOCK_RE = re.compile(r"<head(?:\s[^>]*)?>([\s\S]*?)</head\s*>", re.IGNORECASE)
BODY_BLOCK_RE = re.compile(r"<body(?:\s[^>]*)?>([\s\S]*)</body\s*>", re.IGNORECASE)
HEAD_CLOSE_RE = re.compile(r"</head\s*>", re.IGNORECASE)
BODY_CLOSE_RE = re.compile(r"</body\s*>", re.IGNORECASE)
HTML_CLOSE_RE = re.compile(r"</html\s*>", re.IGNORECASE)
STRAY_STRUCTURE_RE = re.compile(
    r"<!DOCTYPE[^>]*>|<html(?:\s[^>]*)?>|</html\s*>|<head(?:\s[^>]*)?>[\s\S]*?</head\s*>"
    r"|<body(?:\s[^>]*)?>|</body\s*>",
    re.IGNORECASE,
)

NAVIGATION_SCRIPT = """(function () {
  document.addEventListener("click", function (event) {
    var node = event.target;
    while (node && node.nodeName !== "A") { node = node.parentNode; }
    if (!node || !node.getAttribute) { return; }
    var href = node.getAttribute("href") || "";
    if (href.indexOf("http") === 0 || href.indexOf("//") === 0) { return; }
    if (!/\\.(html|php)$/i.test(href)) { return; }
    event.preventDefault();
    window.parent.postMessage({ type: "navigate", page: href }, "*");
  }, true);
})();"""


def normalize_page_path(page: str) -> str:
    """``./servico.html`` and ``servico.html`` name the same page."""

    page = (page or "").strip()
    while page.startswith("./"):
        page = page[2:]
    return page


def resolve_entry(files: Sequence[ProjectFile], entry_path: str) -> Optional[ProjectFile]:
    by_path = {f.path: f for f in files}
    return by_path.get(entry_path) or by_path.get(DEFAULT_ENTRY)


def component_map(files: Iterable[ProjectFile]) -> Dict[str, str]:
    """Component name (file name minus ``.html``) -> component markup."""

    components: Dict[str, str] = {}
    for project_file in files:
        if not project_file.is_component:
            continue
        name = project_file.name
        if name.lower().endswith(".html"):
            name = name[: -len(".html")]
        components[name] = project_file.content
    return components


def resolve_placeholders(html: str, components: Dict[str, str]) -> str:
    """Replace ``{{ name }}`` and ``<div id="name-placeholder"></div>`` tokens."""

    for name, markup in components.items():
        escaped = re.escape(name)
        mustache = re.compile(r"\{\{\s*" + escaped + r"\s*\}\}", re.IGNORECASE)
        element = re.compile(
            r"<div[^>]*id=[\"']" + escaped + r"-placeholder[\"'][^>]*>\s*</div>",
            re.IGNORECASE,
        )
        html = mustache.sub(lambda _m, markup=markup: markup, html)
        html = element.sub(lambda _m, markup=markup: markup, html)
    return html


def is_complete_document(html: str) -> bool:
    return bool(DOCTYPE_RE.search(html)) and bool(HTML_TAG_RE.search(html))


def _bundle(files: Iterable[ProjectFile], kind: str, closing_tag: str) -> str:
    breaker = re.compile(re.escape(closing_tag), re.IGNORECASE)
    chunks = []
    for project_file in files:
        if project_file.kind != kind:
            continue
        content = breaker.sub(lambda m: "<\\/" + m.group(0)[2:], project_file.content)
        chunks.append(f"/* {project_file.path} */\n{content}\n")
    return "".join(chunks)


def _insert_before(pattern: re.Pattern[str], html: str, block: str, last: bool) -> Optional[str]:
    matches = list(pattern.finditer(html))
    if not matches:
        return None
    match = matches[-1] if last else matches[0]
    return html[:match.start()] + block + html[match.start():]


def _inject_into_document(html: str, css: str, js: str) -> str:
    style_block = f"<style>\n{css}</style>\n"
    script_block = f"<script>\n{js}</script>\n"

    with_style = _insert_before(HEAD_CLOSE_RE, html, style_block, last=False)
    if with_style is None:
        opening = HTML_TAG_RE.search(html)
        cut = opening.end() if opening else 0
        with_style = html[:cut] + style_block + html[cut:]

    result = _insert_before(BODY_CLOSE_RE, with_style, script_block, last=True)
    if result is None:
        result = _insert_before(HTML_CLOSE_RE, with_style, script_block, last=True)
    if result is None:
        result = with_style + script_block
    return result


def _synthesize_document(html: str, css: str, js: str) -> str:
    head_match = HEAD_BLOCK_RE.search(html)
    head = head_match.group(1).strip() if head_match else ""
    body_match = BODY_BLOCK_RE.search(html)
    if body_match:
        body = body_match.group(1).strip()
    else:
        body = STRAY_STRUCTURE_RE.sub("", html).strip()
    head_lines = [
        '  <meta charset="UTF-8">',
        '  <meta name="viewport" content="width=device-width, initial-scale=1.0">',
    ]
    if head:
        head_lines.append(head)
    return (
        "<!DOCTYPE html>\n"
        '<html lang="pt-BR">\n'
        "<head>\n"
        + "\n".join(head_lines) + "\n"
        f"<style>\n{css}</style>\n"
        "</head>\n"
        "<body>\n"
        f"{body}\n"
        f"<script>\n{js}</script>\n"
        "</body>\n"
        "</html>"
    )


def compile_preview(
    files: Sequence[ProjectFile],
    entry_path: str,
    on_navigate: Callable[[str], None] | None = None,
) -> str:
    """Compile ``entry_path`` (or ``index.html``) into one standalone document.

    Components are resolved, every CSS file is inlined into a ``<style>``
    block and every JS file into a ``<script>`` block. When ``on_navigate``
    is given, a click interceptor is appended that posts
    ``{type: "navigate", page}`` to the parent frame for local page links;
    the renderer that displays the document is what calls ``on_navigate``.

    Returns an empty string when neither the entry nor ``index.html`` exists.
    """

    entry = resolve_entry(files, entry_path)
    if entry is None:
        return ""

    html = resolve_placeholders(entry.content, component_map(files))
    others = [f for f in files if f.path != entry.path]
    css = _bundle(others, "css", "</style")
    js = _bundle(others, "js", "</script")
    if on_navigate is not None:
        js += NAVIGATION_SCRIPT + "\n"

    if is_complete_document(html):
        return _inject_into_document(html, css, js)
    return _synthesize_document(html, css, js)
