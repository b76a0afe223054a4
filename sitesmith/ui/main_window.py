"""Main application window for the site builder."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

from PyQt6 import QtCore, QtGui, QtWidgets
from PyQt6.QtWebEngineWidgets import QWebEngineView

from ..core.exporter import ExportError, ExportOptions, export_zip
from ..core.filetree import build_file_tree, file_kind_for, find_page
from ..core.layout import render_layout
from ..core.models import FileTreeItem, LayoutTree, ProjectFile
from ..core.settings import SettingsManager
from ..core.storage import JsonProjectStore, ProjectInfo, StorageError
from ..core.tags import slugify
from ..generation import GenerationError, SiteGenerator
from .multiplier_dialog import PageMultiplierDialog
from .preview import ResponsivePreview

logger = logging.getLogger(__name__)

APP_TITLE = "Sitesmith"
LAYOUT_FILE = "layout.json"

STARTER_INDEX = """<!DOCTYPE html>
<html lang="pt-BR">
<head>
  <meta charset="UTF-8">
  <title>New site</title>
  <link rel="stylesheet" href="style.css">
</head>
<body>
  {{ header }}
  <main class="hero">
    <h1>Welcome!</h1>
    <p>Your new site is ready. Edit this content or generate one from a briefing.</p>
  </main>
</body>
</html>
"""

STARTER_HEADER = """<header class="site-header">
  <a href="index.html">Home</a>
</header>
"""

STARTER_CSS = """body { font-family: system-ui, sans-serif; margin: 0; }
.site-header { padding: 1rem 2rem; border-bottom: 1px solid #e5e5e5; }
.hero { padding: 4rem 2rem; }
"""


class _GenerationWorker(QtCore.QObject):
    finished = QtCore.pyqtSignal(list)
    errored = QtCore.pyqtSignal(str)

    def __init__(self, generator: SiteGenerator, briefing: str, context: str) -> None:
        super().__init__()
        self.generator = generator
        self.briefing = briefing
        self.context = context

    def run(self) -> None:
        try:
            files = self.generator.generate(self.briefing, self.context)
        except GenerationError as exc:
            self.errored.emit(str(exc))
            return
        except Exception as exc:  # noqa: BLE001
            logger.exception("Site generation crashed")
            self.errored.emit(f"Unexpected error: {exc}")
            return
        self.finished.emit(files)


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, settings: SettingsManager, store: Optional[JsonProjectStore] = None) -> None:
        super().__init__()
        self.setWindowTitle(APP_TITLE)
        self.resize(1320, 840)

        self.settings = settings
        self.store = store or JsonProjectStore(settings.projects_dir)
        self.project: Optional[ProjectInfo] = None
        self.files: List[ProjectFile] = []
        self._current_path: Optional[str] = None
        self._threads: List[QtCore.QThread] = []
        self._workers: List[_GenerationWorker] = []

        self._debounce = QtCore.QTimer(self)
        self._debounce.setInterval(400)
        self._debounce.setSingleShot(True)
        self._debounce.timeout.connect(self.update_preview)

        self._build_ui()
        self._build_menu()
        self._bind_events()

        self.open_initial_project()

    # ------------------------------------------------------------------ UI --
    def _build_ui(self) -> None:
        splitter = QtWidgets.QSplitter(self)
        splitter.setOrientation(QtCore.Qt.Orientation.Horizontal)
        self.setCentralWidget(splitter)

        # Files panel
        left_panel = QtWidgets.QWidget(self)
        left_layout = QtWidgets.QVBoxLayout(left_panel)
        left_layout.setContentsMargins(6, 6, 6, 6)
        left_layout.setSpacing(6)
        self.file_tree = QtWidgets.QTreeWidget(left_panel)
        self.file_tree.setHeaderHidden(True)
        self.btn_new_file = QtWidgets.QPushButton("New File", left_panel)
        left_layout.addWidget(QtWidgets.QLabel("Files", left_panel))
        left_layout.addWidget(self.file_tree, 1)
        left_layout.addWidget(self.btn_new_file)

        # Editor
        mid_panel = QtWidgets.QWidget(self)
        mid_layout = QtWidgets.QVBoxLayout(mid_panel)
        mid_layout.setContentsMargins(6, 6, 6, 6)
        mid_layout.setSpacing(6)
        self.editor_label = QtWidgets.QLabel("No file selected", mid_panel)
        self.editor = QtWidgets.QPlainTextEdit(mid_panel)
        self.editor.setFont(QtGui.QFontDatabase.systemFont(QtGui.QFontDatabase.SystemFont.FixedFont))
        self.editor.setEnabled(False)
        self.btn_save = QtWidgets.QPushButton("Save", mid_panel)
        self.btn_save.setEnabled(False)
        mid_layout.addWidget(self.editor_label)
        mid_layout.addWidget(self.editor, 1)
        mid_layout.addWidget(self.btn_save, 0, QtCore.Qt.AlignmentFlag.AlignRight)

        # Preview
        self.preview_tabs = QtWidgets.QTabWidget(self)
        self.preview_tabs.setDocumentMode(True)
        self.preview = ResponsivePreview(self.preview_tabs, self.settings.get("default_viewport", "desktop"))
        self.layout_view = QWebEngineView(self.preview_tabs)
        self.preview_tabs.addTab(self.preview, "Preview")
        self.preview_tabs.addTab(self.layout_view, "Layout")

        splitter.addWidget(left_panel)
        splitter.addWidget(mid_panel)
        splitter.addWidget(self.preview_tabs)
        splitter.setSizes([240, 500, 580])

        self.status = self.statusBar()

    def _build_menu(self) -> None:
        bar = self.menuBar()
        if bar is None:
            bar = QtWidgets.QMenuBar(self)
            self.setMenuBar(bar)

        file_menu = bar.addMenu("&File")
        self.act_new = QtGui.QAction("New Project…", self)
        self.act_open = QtGui.QAction("Open Project…", self)
        self.act_export = QtGui.QAction("Export ZIP…", self)
        self.act_quit = QtGui.QAction("Quit", self)
        file_menu.addActions([self.act_new, self.act_open])
        file_menu.addSeparator()
        file_menu.addAction(self.act_export)
        file_menu.addSeparator()
        file_menu.addAction(self.act_quit)

        site_menu = bar.addMenu("&Site")
        self.act_generate = QtGui.QAction("Generate from Briefing…", self)
        self.act_multiply = QtGui.QAction("Page Multiplier…", self)
        self.act_delete_all = QtGui.QAction("Delete All Files", self)
        site_menu.addActions([self.act_generate, self.act_multiply])
        site_menu.addSeparator()
        site_menu.addAction(self.act_delete_all)

        help_menu = bar.addMenu("&Help")
        self.act_about = QtGui.QAction("About", self)
        help_menu.addAction(self.act_about)

    def _bind_events(self) -> None:
        self.act_new.triggered.connect(self.new_project)
        self.act_open.triggered.connect(self.open_project)
        self.act_export.triggered.connect(self.export_project)
        self.act_quit.triggered.connect(self.close)
        self.act_generate.triggered.connect(self.generate_from_briefing)
        self.act_multiply.triggered.connect(self.open_multiplier)
        self.act_delete_all.triggered.connect(self.delete_all_files)
        self.act_about.triggered.connect(self.show_about)

        self.file_tree.currentItemChanged.connect(self._on_tree_item_changed)
        self.btn_new_file.clicked.connect(self.new_file)
        self.editor.textChanged.connect(self._on_editor_changed)
        self.btn_save.clicked.connect(self.save_current_file)
        self.preview.page_changed.connect(self._on_preview_page_changed)

    # ------------------------------------------------------------- Projects --
    def open_initial_project(self) -> None:
        try:
            projects = self.store.list_projects()
        except StorageError as exc:
            self._warn("Projects", str(exc))
            projects = []
        if projects:
            self.load_project(projects[0])
        else:
            self._create_project("My Site")

    def new_project(self) -> None:
        name, ok = QtWidgets.QInputDialog.getText(self, "New Project", "Project name:")
        if ok and name.strip():
            self._create_project(name.strip())

    def _create_project(self, name: str) -> None:
        try:
            info = self.store.create_project(name)
            self.store.replace_files(info.id, [
                ProjectFile(path="index.html", name="index.html", kind="html", content=STARTER_INDEX),
                ProjectFile(path="components/header.html", name="header.html", kind="html", content=STARTER_HEADER),
                ProjectFile(path="style.css", name="style.css", kind="css", content=STARTER_CSS),
            ])
        except StorageError as exc:
            self._warn("New Project", str(exc))
            return
        self.load_project(info)

    def open_project(self) -> None:
        try:
            projects = self.store.list_projects()
        except StorageError as exc:
            self._warn("Open Project", str(exc))
            return
        if not projects:
            self.status.showMessage("No saved projects yet", 3000)
            return
        labels = [f"{p.name} ({p.id[:8]})" for p in projects]
        choice, ok = QtWidgets.QInputDialog.getItem(self, "Open Project", "Project:", labels, 0, False)
        if ok:
            self.load_project(projects[labels.index(choice)])

    def load_project(self, info: ProjectInfo) -> None:
        self.project = info
        self._current_path = None
        self.reload_files()
        self.update_window_title()
        self.status.showMessage(f"Opened {info.name}", 3000)

    def reload_files(self) -> None:
        if self.project is None:
            return
        try:
            self.files = self.store.list_files(self.project.id)
        except StorageError as exc:
            self._warn("Files", str(exc))
            self.files = []
        self._populate_tree()
        if self._current_path and not any(f.path == self._current_path for f in self.files):
            self._current_path = None
        self._load_file_into_editor(self._current_path)
        self.update_preview()
        self.update_layout_view()

    # ----------------------------------------------------------------- Tree --
    def _populate_tree(self) -> None:
        self.file_tree.blockSignals(True)
        self.file_tree.clear()

        def add(parent, item: FileTreeItem) -> None:
            node = QtWidgets.QTreeWidgetItem(parent, [item.name])
            if item.type == "folder":
                node.setExpanded(True)
                for child in item.children:
                    add(node, child)
            else:
                node.setData(0, QtCore.Qt.ItemDataRole.UserRole, item.path)
                if item.path == self._current_path:
                    self.file_tree.setCurrentItem(node)

        for item in build_file_tree(self.files):
            add(self.file_tree, item)
        self.file_tree.expandAll()
        self.file_tree.blockSignals(False)

    def _on_tree_item_changed(self, current: Optional[QtWidgets.QTreeWidgetItem], _previous) -> None:
        path = current.data(0, QtCore.Qt.ItemDataRole.UserRole) if current is not None else None
        if not path:
            return
        self._current_path = path
        self._load_file_into_editor(path)
        if find_page(self.files, path) is not None:
            self.preview.set_page(path)

    def new_file(self) -> None:
        if self.project is None:
            return
        path, ok = QtWidgets.QInputDialog.getText(self, "New File", "Path (e.g. about.html):")
        path = path.strip().lstrip("/") if ok else ""
        if not path:
            return
        try:
            self.store.upsert_file(self.project.id, path, {"kind": file_kind_for(path), "content": ""})
        except StorageError as exc:
            self._warn("New File", str(exc))
            return
        self._current_path = path
        self.reload_files()

    # --------------------------------------------------------------- Editor --
    def _load_file_into_editor(self, path: Optional[str]) -> None:
        project_file = next((f for f in self.files if f.path == path), None)
        self.editor.blockSignals(True)
        if project_file is None:
            self.editor.clear()
            self.editor.setEnabled(False)
            self.editor_label.setText("No file selected")
        else:
            self.editor.setPlainText(project_file.content)
            self.editor.setEnabled(True)
            self.editor_label.setText(project_file.path)
        self.editor.blockSignals(False)
        self.btn_save.setEnabled(False)

    def _on_editor_changed(self) -> None:
        for project_file in self.files:
            if project_file.path == self._current_path:
                project_file.content = self.editor.toPlainText()
                break
        self.btn_save.setEnabled(True)
        self._debounce.start()

    def save_current_file(self) -> None:
        if self.project is None or not self._current_path:
            return
        try:
            self.store.upsert_file(self.project.id, self._current_path, {"content": self.editor.toPlainText()})
        except StorageError as exc:
            self._warn("Save", str(exc))
            return
        self.btn_save.setEnabled(False)
        self.status.showMessage(f"Saved {self._current_path}", 2000)
        self.reload_files()

    # -------------------------------------------------------------- Preview --
    def update_preview(self) -> None:
        self.preview.set_files(self.files)
        if self._current_path == LAYOUT_FILE:
            self.update_layout_view()

    def update_layout_view(self) -> None:
        layout_file = next((f for f in self.files if f.path == LAYOUT_FILE), None)
        self.preview_tabs.setTabVisible(1, layout_file is not None)
        if layout_file is None:
            return
        try:
            tree = LayoutTree.from_dict(json.loads(layout_file.content or "{}"))
        except (json.JSONDecodeError, AttributeError, TypeError):
            self.status.showMessage(f"{LAYOUT_FILE} is not a valid layout", 3000)
            return
        self.layout_view.setHtml(render_layout(tree))

    def _on_preview_page_changed(self, path: str) -> None:
        self.status.showMessage(f"Previewing {path}", 2000)

    # -------------------------------------------------------------- Actions --
    def generate_from_briefing(self) -> None:
        if self.project is None:
            return
        briefing, ok = QtWidgets.QInputDialog.getMultiLineText(
            self, "Generate Site", "Describe the site you want:")
        if not ok or not briefing.strip():
            return
        if self.files and QtWidgets.QMessageBox.question(
            self, "Generate Site", "This replaces every file in the project. Continue?"
        ) != QtWidgets.QMessageBox.StandardButton.Yes:
            return

        generator = SiteGenerator(
            base_url=self.settings.get("api_base_url"),
            model=self.settings.get("model"),
        )
        context = f"Project name: {self.project.name}"
        thread = QtCore.QThread(self)
        worker = _GenerationWorker(generator, briefing.strip(), context)
        worker.moveToThread(thread)
        project_id = self.project.id

        def handle_finish(files: list) -> None:
            thread.quit()
            try:
                self.store.replace_files(project_id, files)
            except StorageError as exc:
                self._warn("Generate Site", str(exc))
                return
            self._current_path = None
            self.reload_files()
            self.status.showMessage(f"Generated {len(files)} file(s)", 4000)

        def handle_error(message: str) -> None:
            thread.quit()
            self._warn("Generate Site", message)

        def cleanup() -> None:
            if thread in self._threads:
                self._threads.remove(thread)
            if worker in self._workers:
                self._workers.remove(worker)
            worker.deleteLater()
            thread.deleteLater()
            self.act_generate.setEnabled(True)

        worker.finished.connect(handle_finish)
        worker.errored.connect(handle_error)
        thread.finished.connect(cleanup)
        thread.started.connect(worker.run)
        self._threads.append(thread)
        self._workers.append(worker)
        self.act_generate.setEnabled(False)
        self.status.showMessage("Generating site…")
        thread.start()

    def open_multiplier(self) -> None:
        if self.project is None:
            return
        if not any(f.kind == "html" for f in self.files):
            self.status.showMessage("Add an HTML page first", 3000)
            return
        dialog = PageMultiplierDialog(
            self.store,
            self.project.id,
            self.files,
            default_folder=self.settings.get("default_output_folder", "pages"),
            parent=self,
        )
        dialog.pages_generated.connect(lambda _count: self.reload_files())
        dialog.exec()

    def export_project(self) -> None:
        if self.project is None:
            return
        suggested = str(Path.home() / f"{slugify(self.project.name) or 'website'}.zip")
        target, _ = QtWidgets.QFileDialog.getSaveFileName(self, "Export ZIP", suggested, "ZIP archive (*.zip)")
        if not target:
            return
        options = ExportOptions(site_url=self.settings.get("site_url"))
        try:
            result = export_zip(self.files, self.project.name, target, options)
        except (ExportError, OSError) as exc:
            self._warn("Export", str(exc))
            return
        self.status.showMessage(f"Exported {len(result.entries)} file(s) to {result.archive_path}", 5000)

    def delete_all_files(self) -> None:
        if self.project is None:
            return
        if QtWidgets.QMessageBox.question(
            self, "Delete All Files", f"Delete every file in {self.project.name}?"
        ) != QtWidgets.QMessageBox.StandardButton.Yes:
            return
        try:
            self.store.delete_all_files(self.project.id)
        except StorageError as exc:
            self._warn("Delete All Files", str(exc))
            return
        self._current_path = None
        self.reload_files()

    # ---------------------------------------------------------------- Misc --
    def _warn(self, title: str, message: str) -> None:
        logger.warning("%s: %s", title, message)
        QtWidgets.QMessageBox.warning(self, title, message)

    def show_about(self) -> None:
        QtWidgets.QMessageBox.information(
            self,
            "About",
            f"{APP_TITLE}\n\nGenerate, multiply and preview static websites.",
        )

    def update_window_title(self) -> None:
        name = self.project.name if self.project else "Untitled"
        self.setWindowTitle(f"{APP_TITLE} - {name}")

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # noqa: N802 (Qt override)
        self.preview.cleanup()
        for thread in list(self._threads):
            thread.quit()
            thread.wait(2000)
        super().closeEvent(event)
