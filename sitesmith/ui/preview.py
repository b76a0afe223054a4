"""Live preview widgets: sandboxed renderer, viewport switcher, page picker."""

from __future__ import annotations

import html
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Sequence
from urllib.parse import unquote

from PyQt6 import QtCore, QtWidgets
from PyQt6.QtWebEngineCore import QWebEnginePage
from PyQt6.QtWebEngineWidgets import QWebEngineView

from ..core.compiler import DEFAULT_ENTRY, compile_preview
from ..core.filetree import find_page, list_pages
from ..core.models import ProjectFile

logger = logging.getLogger(__name__)

NAVIGATE_SCHEME = "sitesmith-nav"

VIEWPORTS: Dict[str, tuple[str, int]] = {
    "desktop": ("Desktop", 1200),
    "tablet": ("Tablet", 768),
    "mobile": ("Mobile", 375),
}

# The compiled document runs in a script-only sandboxed iframe; the host
# page relays its navigate messages to Qt through a sentinel URL.
HOST_PAGE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>html, body { margin: 0; height: 100%; } iframe { display: block; border: 0; width: 100%; height: 100%; }</style>
</head>
<body>
<iframe sandbox="allow-scripts" title="Preview" srcdoc="__SRCDOC__"></iframe>
<script>
window.addEventListener("message", function (event) {
  var data = event.data || {};
  if (data.type !== "navigate" || typeof data.page !== "string") { return; }
  window.location.href = "__SCHEME__:" + encodeURIComponent(data.page);
});
</script>
</body>
</html>"""

EMPTY_PAGE = """<!DOCTYPE html>
<html><body style="margin:0;height:100vh;display:flex;align-items:center;justify-content:center;font-family:system-ui,sans-serif;color:#64748b;">
<p style="font-size:14px;">Nothing to preview yet</p>
</body></html>"""


def host_document(compiled: str) -> str:
    if not compiled:
        return EMPTY_PAGE
    return (HOST_PAGE
            .replace("__SCHEME__", NAVIGATE_SCHEME)
            .replace("__SRCDOC__", html.escape(compiled, quote=True)))


class _PreviewPage(QWebEnginePage):
    navigation_requested = QtCore.pyqtSignal(str)

    def acceptNavigationRequest(self, url: QtCore.QUrl, nav_type, is_main_frame: bool) -> bool:  # noqa: N802 (Qt override)
        if url.scheme() == NAVIGATE_SCHEME:
            raw = url.toString()
            self.navigation_requested.emit(unquote(raw.split(":", 1)[1]))
            return False
        return super().acceptNavigationRequest(url, nav_type, is_main_frame)


class SandboxedPreview(QWebEngineView):
    """Shows a compiled document and reports in-site link clicks."""

    navigation_requested = QtCore.pyqtSignal(str)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._page = _PreviewPage(self)
        self.setPage(self._page)
        self._page.navigation_requested.connect(self.navigation_requested)
        self._tmp_dir: Optional[str] = None

    def show_document(self, compiled: str) -> None:
        # A file URL keeps large documents clear of the setHtml size cap.
        if self._tmp_dir is None:
            self._tmp_dir = tempfile.mkdtemp(prefix="sitesmith_preview_")
        host = Path(self._tmp_dir) / "preview.html"
        host.write_text(host_document(compiled), encoding="utf-8")
        self.setUrl(QtCore.QUrl.fromLocalFile(str(host)))

    def cleanup(self) -> None:
        try:
            self._page.navigation_requested.disconnect(self.navigation_requested)
        except TypeError:
            pass
        if self._tmp_dir:
            shutil.rmtree(self._tmp_dir, ignore_errors=True)
            self._tmp_dir = None


class PageSelector(QtWidgets.QWidget):
    page_selected = QtCore.pyqtSignal(str)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        layout = QtWidgets.QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.combo = QtWidgets.QComboBox(self)
        self.combo.setMinimumWidth(200)
        self.count_label = QtWidgets.QLabel(self)
        layout.addWidget(self.combo)
        layout.addWidget(self.count_label)
        self.combo.currentIndexChanged.connect(self._on_index_changed)
        self.setVisible(False)

    def set_pages(self, files: Sequence[ProjectFile], current: str) -> None:
        pages = list_pages(files)
        self.combo.blockSignals(True)
        self.combo.clear()
        for page in pages:
            label = f"⌂ {page.name}" if page.name == "index.html" else page.name
            self.combo.addItem(label, page.path)
        index = self.combo.findData(current)
        self.combo.setCurrentIndex(max(index, 0))
        self.combo.blockSignals(False)
        count = len(pages)
        self.count_label.setText(f"{count} {'page' if count == 1 else 'pages'}")
        self.setVisible(count > 1)

    def _on_index_changed(self, index: int) -> None:
        path = self.combo.itemData(index)
        if path:
            self.page_selected.emit(path)


class ResponsivePreview(QtWidgets.QWidget):
    """Viewport switcher around the renderer; owns the current page."""

    page_changed = QtCore.pyqtSignal(str)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None, viewport: str = "desktop") -> None:
        super().__init__(parent)
        self._files: List[ProjectFile] = []
        self._current_page = DEFAULT_ENTRY
        self._viewport = viewport if viewport in VIEWPORTS else "desktop"

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(6)

        bar = QtWidgets.QHBoxLayout()
        self.page_selector = PageSelector(self)
        bar.addWidget(self.page_selector)
        bar.addStretch(1)
        self._buttons = QtWidgets.QButtonGroup(self)
        self._buttons.setExclusive(True)
        for key, (label, _width) in VIEWPORTS.items():
            button = QtWidgets.QToolButton(self)
            button.setText(label)
            button.setCheckable(True)
            button.setChecked(key == self._viewport)
            button.clicked.connect(lambda checked=False, k=key: self.set_viewport(k))
            self._buttons.addButton(button)
            bar.addWidget(button)
        self.width_label = QtWidgets.QLabel(self)
        bar.addWidget(self.width_label)
        layout.addLayout(bar)

        frame = QtWidgets.QWidget(self)
        frame_layout = QtWidgets.QHBoxLayout(frame)
        frame_layout.setContentsMargins(0, 0, 0, 0)
        self.renderer = SandboxedPreview(frame)
        frame_layout.addStretch(1)
        frame_layout.addWidget(self.renderer, 100)
        frame_layout.addStretch(1)
        layout.addWidget(frame, 1)

        self.page_selector.page_selected.connect(self.set_page)
        self.renderer.navigation_requested.connect(self._on_navigate)
        self._apply_viewport()

    @property
    def current_page(self) -> str:
        return self._current_page

    @property
    def viewport(self) -> str:
        return self._viewport

    def set_files(self, files: Sequence[ProjectFile]) -> None:
        self._files = list(files)
        self.refresh()

    def set_page(self, path: str) -> None:
        page = find_page(self._files, path)
        if page is None:
            logger.debug("Ignoring non-page preview target %s", path)
            return
        if page.path == self._current_page:
            return
        self._current_page = page.path
        self.page_changed.emit(page.path)
        self.refresh()

    def set_viewport(self, key: str) -> None:
        if key not in VIEWPORTS:
            return
        self._viewport = key
        self._apply_viewport()

    def refresh(self) -> None:
        self.page_selector.set_pages(self._files, self._current_page)
        compiled = compile_preview(self._files, self._current_page, on_navigate=self._on_navigate)
        self.renderer.show_document(compiled)

    def _apply_viewport(self) -> None:
        _label, width = VIEWPORTS[self._viewport]
        if self._viewport == "desktop":
            self.renderer.setMinimumWidth(0)
            self.renderer.setMaximumWidth(width)
        else:
            self.renderer.setFixedWidth(width)
        self.width_label.setText(f"{width}px")

    def _on_navigate(self, page: str) -> None:
        logger.debug("Preview navigation to %s", page)
        self.set_page(page)

    def cleanup(self) -> None:
        self.renderer.cleanup()
