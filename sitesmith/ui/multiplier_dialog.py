"""Dialog that multiplies one HTML page into many through template tags."""

from __future__ import annotations

import html
import logging
from typing import Dict, List, Optional, Sequence

from PyQt6 import QtCore, QtWidgets

from ..core.models import GeneratedPage, PageTemplate, ProjectFile
from ..core.multiplier import MultiplyError, multiply, output_path
from ..core.storage import StorageError
from ..core.tags import (
    default_output_pattern,
    detect_tags,
    generate_file_name,
    split_highlighted,
    template_preview_text,
)
from ..core.variations import VariationTable

logger = logging.getLogger(__name__)

SUMMARY_LIMIT = 5


def _highlighted_html(text: str) -> str:
    parts = []
    for segment, is_tag in split_highlighted(text):
        escaped = html.escape(segment)
        if is_tag:
            parts.append(
                f'<span style="background:#dbeafe;color:#1d4ed8;border-radius:4px;padding:0 3px;">{escaped}</span>')
        else:
            parts.append(escaped)
    return "".join(parts)


class PageMultiplierDialog(QtWidgets.QDialog):
    """Pick a template, define variations and write one page per row."""

    pages_generated = QtCore.pyqtSignal(int)

    def __init__(
        self,
        store,
        project_id: str,
        files: Sequence[ProjectFile],
        default_folder: str = "pages",
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Page Multiplier")
        self.resize(860, 760)

        self.store = store
        self.project_id = project_id
        self.files = list(files)
        self.table_model = VariationTable()
        self.generated: List[GeneratedPage] = []
        self._template_id = ""
        self._saved: Dict[str, PageTemplate] = {}

        layout = QtWidgets.QVBoxLayout(self)

        # 1. Template
        template_box = QtWidgets.QGroupBox("1. Base page (template)", self)
        template_layout = QtWidgets.QVBoxLayout(template_box)
        self.template_combo = QtWidgets.QComboBox(template_box)
        self.template_combo.addItem("Select an HTML page…", "")
        for project_file in self.files:
            if project_file.kind == "html":
                self.template_combo.addItem(project_file.path, project_file.path)
        self.preview_text = QtWidgets.QTextBrowser(template_box)
        self.preview_text.setMaximumHeight(120)
        self.saved_combo = QtWidgets.QComboBox(template_box)
        self.saved_combo.addItem("Saved setups…", "")
        template_layout.addWidget(self.template_combo)
        template_layout.addWidget(self.preview_text)
        template_layout.addWidget(self.saved_combo)
        layout.addWidget(template_box)

        # 2. Tags
        tags_box = QtWidgets.QGroupBox("2. Tags", self)
        tags_layout = QtWidgets.QVBoxLayout(tags_box)
        self.tags_label = QtWidgets.QLabel(tags_box)
        self.tags_list = QtWidgets.QListWidget(tags_box)
        self.tags_list.setFlow(QtWidgets.QListView.Flow.LeftToRight)
        self.tags_list.setMaximumHeight(44)
        tag_row = QtWidgets.QHBoxLayout()
        self.tag_edit = QtWidgets.QLineEdit(tags_box)
        self.tag_edit.setPlaceholderText("Add a tag manually…")
        self.btn_add_tag = QtWidgets.QPushButton("Add", tags_box)
        self.btn_remove_tag = QtWidgets.QPushButton("Remove selected", tags_box)
        tag_row.addWidget(self.tag_edit, 1)
        tag_row.addWidget(self.btn_add_tag)
        tag_row.addWidget(self.btn_remove_tag)
        tags_layout.addWidget(self.tags_label)
        tags_layout.addWidget(self.tags_list)
        tags_layout.addLayout(tag_row)
        layout.addWidget(tags_box)

        # 3. Variations
        rows_box = QtWidgets.QGroupBox("3. Variations", self)
        rows_layout = QtWidgets.QVBoxLayout(rows_box)
        rows_buttons = QtWidgets.QHBoxLayout()
        self.btn_add_row = QtWidgets.QPushButton("Add row", rows_box)
        self.btn_remove_row = QtWidgets.QPushButton("Remove row", rows_box)
        self.btn_toggle_import = QtWidgets.QPushButton("Import list…", rows_box)
        self.btn_toggle_import.setCheckable(True)
        rows_buttons.addWidget(self.btn_add_row)
        rows_buttons.addWidget(self.btn_remove_row)
        rows_buttons.addStretch(1)
        rows_buttons.addWidget(self.btn_toggle_import)
        self.import_widget = QtWidgets.QWidget(rows_box)
        import_layout = QtWidgets.QVBoxLayout(self.import_widget)
        import_layout.setContentsMargins(0, 0, 0, 0)
        self.import_hint = QtWidgets.QLabel(self.import_widget)
        self.import_edit = QtWidgets.QPlainTextEdit(self.import_widget)
        self.import_edit.setPlaceholderText("Centro, São Paulo\nJardins, São Paulo")
        self.btn_import = QtWidgets.QPushButton("Import", self.import_widget)
        import_layout.addWidget(self.import_hint)
        import_layout.addWidget(self.import_edit)
        import_layout.addWidget(self.btn_import, 0, QtCore.Qt.AlignmentFlag.AlignRight)
        self.import_widget.setVisible(False)
        self.table = QtWidgets.QTableWidget(rows_box)
        self.table.horizontalHeader().setStretchLastSection(True)
        rows_layout.addLayout(rows_buttons)
        rows_layout.addWidget(self.import_widget)
        rows_layout.addWidget(self.table, 1)
        layout.addWidget(rows_box, 1)

        # 4. Output
        output_box = QtWidgets.QGroupBox("4. Output", self)
        output_layout = QtWidgets.QFormLayout(output_box)
        self.pattern_edit = QtWidgets.QLineEdit("{slug}.html", output_box)
        self.folder_edit = QtWidgets.QLineEdit(default_folder, output_box)
        self.sample_label = QtWidgets.QLabel(output_box)
        output_layout.addRow("File name pattern", self.pattern_edit)
        output_layout.addRow("Folder (empty = project root)", self.folder_edit)
        output_layout.addRow("First file", self.sample_label)
        layout.addWidget(output_box)

        # Generate
        self.progress = QtWidgets.QProgressBar(self)
        self.progress.setVisible(False)
        self.status_label = QtWidgets.QLabel(self)
        self.status_label.setWordWrap(True)
        buttons = QtWidgets.QHBoxLayout()
        self.btn_save_setup = QtWidgets.QPushButton("Save setup", self)
        self.btn_generate = QtWidgets.QPushButton("Generate pages", self)
        self.btn_close = QtWidgets.QPushButton("Close", self)
        buttons.addWidget(self.btn_save_setup)
        buttons.addStretch(1)
        buttons.addWidget(self.btn_generate)
        buttons.addWidget(self.btn_close)
        layout.addWidget(self.progress)
        layout.addWidget(self.status_label)
        layout.addLayout(buttons)

        self._bind_events()
        self._load_saved_setups()
        self._refresh_all()

    def _bind_events(self) -> None:
        self.template_combo.currentIndexChanged.connect(self._on_template_changed)
        self.saved_combo.activated.connect(self._on_saved_setup_chosen)
        self.btn_add_tag.clicked.connect(self._on_add_tag)
        self.tag_edit.returnPressed.connect(self._on_add_tag)
        self.btn_remove_tag.clicked.connect(self._on_remove_tag)
        self.btn_add_row.clicked.connect(self._on_add_row)
        self.btn_remove_row.clicked.connect(self._on_remove_row)
        self.btn_toggle_import.toggled.connect(self.import_widget.setVisible)
        self.btn_import.clicked.connect(self._on_bulk_import)
        self.table.cellChanged.connect(self._on_cell_changed)
        self.pattern_edit.textChanged.connect(lambda _text: self._refresh_state())
        self.folder_edit.textChanged.connect(lambda _text: self._refresh_state())
        self.btn_save_setup.clicked.connect(self._on_save_setup)
        self.btn_generate.clicked.connect(self.generate)
        self.btn_close.clicked.connect(self.accept)

    # ------------------------------------------------------------ Template --
    def selected_template(self) -> Optional[ProjectFile]:
        path = self.template_combo.currentData()
        for project_file in self.files:
            if project_file.path == path:
                return project_file
        return None

    def _on_template_changed(self, _index: int) -> None:
        template = self.selected_template()
        if template is None:
            self.table_model.set_tags([])
        else:
            tags = detect_tags(template.content)
            self.table_model.set_tags(tags)
            if tags:
                self.pattern_edit.setText(default_output_pattern(template.name, tags))
        self._template_id = ""
        self._refresh_all()

    # ----------------------------------------------------------------- Tags --
    def _on_add_tag(self) -> None:
        if self.table_model.add_tag(self.tag_edit.text()):
            self.tag_edit.clear()
            self._refresh_all()

    def _on_remove_tag(self) -> None:
        item = self.tags_list.currentItem()
        if item is None:
            return
        self.table_model.remove_tag(item.data(QtCore.Qt.ItemDataRole.UserRole))
        self._refresh_all()

    # ----------------------------------------------------------------- Rows --
    def _on_add_row(self) -> None:
        self.table_model.add_row()
        self._refresh_table()

    def _on_remove_row(self) -> None:
        row = self.table.currentRow()
        if 0 <= row < len(self.table_model):
            self.table_model.remove_row(row)
            self._refresh_table()

    def _on_bulk_import(self) -> None:
        added = self.table_model.bulk_import(self.import_edit.toPlainText())
        if added:
            self.import_edit.clear()
            self.btn_toggle_import.setChecked(False)
        self._refresh_table()

    def _on_cell_changed(self, row: int, column: int) -> None:
        tags = self.table_model.tags
        if 0 <= row < len(self.table_model) and 0 <= column < len(tags):
            item = self.table.item(row, column)
            self.table_model.update_cell(row, tags[column], item.text() if item else "")
            self._refresh_state()

    # -------------------------------------------------------------- Refresh --
    def _refresh_all(self) -> None:
        template = self.selected_template()
        tags = self.table_model.tags
        if template is None:
            self.preview_text.setPlainText("Select a template to see its preview.")
        else:
            self.preview_text.setHtml(_highlighted_html(template_preview_text(template.content)))
        self.tags_list.clear()
        for tag in tags:
            item = QtWidgets.QListWidgetItem(f"{{{tag}}}", self.tags_list)
            item.setData(QtCore.Qt.ItemDataRole.UserRole, tag)
        if tags:
            self.tags_label.setText(f"{len(tags)} tag(s) found")
        else:
            self.tags_label.setText("No tags found. Use the {tag} format in the template.")
        self.import_hint.setText(
            "One variation per line, values separated by comma, semicolon, pipe or tab.\n"
            "Column order: " + ", ".join(f"{{{t}}}" for t in tags))
        self._refresh_table()

    def _refresh_table(self) -> None:
        tags = self.table_model.tags
        rows = self.table_model.rows
        self.table.blockSignals(True)
        self.table.clear()
        self.table.setColumnCount(len(tags))
        self.table.setHorizontalHeaderLabels([f"{{{t}}}" for t in tags])
        self.table.setRowCount(len(rows))
        for r, row in enumerate(rows):
            for c, tag in enumerate(tags):
                self.table.setItem(r, c, QtWidgets.QTableWidgetItem(row.get(tag, "")))
        self.table.blockSignals(False)
        self._refresh_state()

    def _refresh_state(self) -> None:
        rows = self.table_model.rows
        can_generate = self.selected_template() is not None and self.table_model.can_generate()
        self.btn_generate.setEnabled(can_generate)
        self.btn_generate.setText(f"Generate {len(rows)} page{'s' if len(rows) != 1 else ''}")
        if rows:
            name = generate_file_name(self.pattern_edit.text(), rows[0])
            self.sample_label.setText(output_path(name, self.folder_edit.text()))
        else:
            self.sample_label.setText("(no rows yet)")
        if rows and not can_generate:
            self.status_label.setText("Fill in every variation to enable generation.")
        elif not self.generated:
            self.status_label.clear()

    # ------------------------------------------------------------ Generate --
    def generate(self) -> None:
        template = self.selected_template()
        if template is None or not self.table_model.can_generate():
            return
        rows = self.table_model.rows
        self.generated = []
        self.progress.setRange(0, 100)
        self.progress.setValue(0)
        self.progress.setVisible(True)
        self.btn_generate.setEnabled(False)

        def on_progress(current: int, total: int) -> None:
            self.progress.setValue(round(current / total * 100))
            QtCore.QCoreApplication.processEvents(QtCore.QEventLoop.ProcessEventsFlag.AllEvents, 50)

        try:
            self.generated = multiply(
                self.store,
                self.project_id,
                template,
                self.table_model.tags,
                rows,
                self.pattern_edit.text(),
                self.folder_edit.text(),
                progress_callback=on_progress,
            )
        except MultiplyError as exc:
            self.generated = exc.committed
            self.status_label.setText(
                f"Generation stopped at row {exc.failed_index + 1}; "
                f"{len(exc.committed)} page(s) were saved.")
            QtWidgets.QMessageBox.warning(self, "Page Multiplier", "Could not generate the pages.")
        else:
            self._show_summary()
        finally:
            self.progress.setVisible(False)
            self.btn_generate.setEnabled(self.table_model.can_generate())
        if self.generated:
            self.pages_generated.emit(len(self.generated))

    def _show_summary(self) -> None:
        paths = [page.file_path for page in self.generated[:SUMMARY_LIMIT]]
        if len(self.generated) > SUMMARY_LIMIT:
            paths.append(f"… and {len(self.generated) - SUMMARY_LIMIT} more")
        self.status_label.setText(
            f"{len(self.generated)} page(s) generated:\n" + "\n".join(f"• {p}" for p in paths))

    # ------------------------------------------------------- Saved setups --
    def _load_saved_setups(self) -> None:
        try:
            templates = self.store.list_templates(self.project_id)
        except StorageError:
            logger.exception("Could not list saved page templates")
            return
        self._saved = {t.id: t for t in templates}
        for template in templates:
            self.saved_combo.addItem(template.name, template.id)

    def _on_saved_setup_chosen(self, index: int) -> None:
        saved = self._saved.get(self.saved_combo.itemData(index) or "")
        if saved is None:
            return
        self.template_combo.blockSignals(True)
        self.template_combo.setCurrentIndex(max(self.template_combo.findData(saved.source_file_path), 0))
        self.template_combo.blockSignals(False)
        self.table_model = VariationTable(saved.tags, saved.variations)
        self.pattern_edit.setText(saved.output_pattern)
        self.folder_edit.setText(saved.output_folder)
        self._template_id = saved.id
        self._refresh_all()

    def _on_save_setup(self) -> None:
        template = self.selected_template()
        if template is None:
            return
        name, ok = QtWidgets.QInputDialog.getText(self, "Save setup", "Name:", text=template.name)
        if not ok or not name.strip():
            return
        record = PageTemplate(
            id=self._template_id,
            name=name.strip(),
            source_file_path=template.path,
            tags=self.table_model.tags,
            output_pattern=self.pattern_edit.text(),
            output_folder=self.folder_edit.text(),
            variations=self.table_model.rows,
        )
        if self._template_id:
            record.created_at = self._saved[self._template_id].created_at
        try:
            saved = self.store.save_template(self.project_id, record)
        except StorageError as exc:
            QtWidgets.QMessageBox.warning(self, "Save setup", str(exc))
            return
        if saved.id not in self._saved:
            self.saved_combo.addItem(saved.name, saved.id)
        self._saved[saved.id] = saved
        self._template_id = saved.id
