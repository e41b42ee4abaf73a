# ui/attachment_manager.py
"""
Tracked attachment list page.

Shows the store snapshot in a sortable table with per-row Edit, Copy and
Delete actions. All workflow decisions live in ``AttachmentEditor``.
"""

from typing import Tuple

from PyQt6.QtWidgets import (
    QAbstractItemView, QHBoxLayout, QHeaderView, QLabel, QMenu, QPushButton,
    QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget
)
from PyQt6.QtCore import Qt, pyqtSignal

from core.data.attachment_store import AttachmentStore
from core.data.models import EditorMode, TrackedAttachment
from core.utils.helpers import format_timestamp
from core.utils.logger import get_module_logger, log_ui_action
from engine.attachment_editor import AttachmentEditor
from ui.attachment_dialog import AttachmentDialog, standard_icon_for

logger = get_module_logger(__name__)

COLUMNS = ["Name", "Type", "Modified", "Actions"]
INDEX_ROLE = Qt.ItemDataRole.UserRole


class SortableItem(QTableWidgetItem):
    """Table item sorting on a separate key instead of its display text."""

    def __init__(self, text: str, sort_key):
        super().__init__(text)
        self.sort_key = sort_key

    def __lt__(self, other):
        if isinstance(other, SortableItem):
            return self.sort_key < other.sort_key
        return super().__lt__(other)


class TrackedAttachmentManager(QWidget):
    """List page for tracked attachments."""

    # Re-emits store reloads on the GUI thread
    snapshot_changed = pyqtSignal(object)
    count_changed = pyqtSignal(int)

    def __init__(self, store: AttachmentStore, editor: AttachmentEditor, parent=None):
        super().__init__(parent)
        self.store = store
        self.editor = editor

        self.setup_ui()
        self.dialog = AttachmentDialog(editor, self)

        self.snapshot_changed.connect(self.populate_table, Qt.ConnectionType.QueuedConnection)
        self.store.add_listener(self.snapshot_changed.emit)

        logger.info("Tracked attachment manager initialized")

    def setup_ui(self):
        """Setup the user interface."""
        layout = QVBoxLayout(self)

        header = QHBoxLayout()
        title = QLabel("<b>Tracked Attachments</b>")
        header.addWidget(title)
        header.addStretch()

        self.btn_new = QPushButton("New Tracked Attachment")
        self.btn_new.clicked.connect(self.new_attachment)
        header.addWidget(self.btn_new)

        self.btn_refresh = QPushButton("Refresh")
        self.btn_refresh.clicked.connect(self.load)
        header.addWidget(self.btn_refresh)
        layout.addLayout(header)

        self.status_label = QLabel("Loading...")
        self.status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.status_label)

        self.table = QTableWidget()
        self.table.setColumnCount(len(COLUMNS))
        self.table.setHorizontalHeaderLabels(COLUMNS)
        self.table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.table.customContextMenuRequested.connect(self.show_context_menu)
        self.table.cellDoubleClicked.connect(lambda row, column: self.edit_attachment(self._index_at(row)))
        self.table.verticalHeader().setVisible(False)

        header_view = self.table.horizontalHeader()
        header_view.setSectionResizeMode(QHeaderView.ResizeMode.Interactive)
        header_view.setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        header_view.resizeSection(1, 180)
        header_view.resizeSection(2, 220)
        header_view.resizeSection(3, 210)
        self.table.hide()
        layout.addWidget(self.table)

    # -- loading -----------------------------------------------------------

    def load(self):
        """Fetch the list from the server."""
        self.status_label.setText("Loading...")
        self.status_label.show()
        self.editor.refresh()

    def populate_table(self, snapshot: Tuple[TrackedAttachment, ...]):
        """Rebuild the table from one snapshot."""
        self.table.setSortingEnabled(False)
        self.table.setRowCount(0)

        if not snapshot:
            self.table.hide()
            self.status_label.setText(
                "No Tracked Attachments yet." if self.store.loaded else "Tracked attachments could not be loaded."
            )
            self.status_label.show()
            self.count_changed.emit(0)
            return

        self.table.setRowCount(len(snapshot))
        for index, attachment in enumerate(snapshot):
            name_item = SortableItem(attachment.name, attachment.name.lower())
            name_item.setData(INDEX_ROLE, index)
            self.table.setItem(index, 0, name_item)

            type_item = SortableItem(attachment.type, attachment.type)
            type_item.setIcon(standard_icon_for(self, attachment.icon))
            type_item.setToolTip(attachment.filename)
            self.table.setItem(index, 1, type_item)

            modified = attachment.modified_date
            modified_item = SortableItem(format_timestamp(modified), modified.timestamp() if modified else 0.0)
            self.table.setItem(index, 2, modified_item)

            self.table.setCellWidget(index, 3, self._action_buttons(index))

        self.table.setSortingEnabled(True)
        self.status_label.hide()
        self.table.show()
        self.count_changed.emit(len(snapshot))

    def _action_buttons(self, index: int) -> QWidget:
        cell = QWidget()
        row_layout = QHBoxLayout(cell)
        row_layout.setContentsMargins(2, 2, 2, 2)
        for label, handler in (("Edit", self.edit_attachment), ("Copy", self.copy_attachment),
                               ("Delete", self.delete_attachment)):
            button = QPushButton(label)
            button.clicked.connect(lambda checked=False, h=handler: h(index))
            row_layout.addWidget(button)
        return cell

    def _index_at(self, row: int) -> int:
        item = self.table.item(row, 0)
        return item.data(INDEX_ROLE) if item is not None else -1

    # -- row actions -------------------------------------------------------

    def new_attachment(self):
        self.dialog.open_for(EditorMode.create())

    def edit_attachment(self, index: int):
        if index < 0:
            return
        self.dialog.open_for(EditorMode.edit(index))

    def copy_attachment(self, index: int):
        if index < 0:
            return
        self.dialog.open_for(EditorMode.copy(index))

    def delete_attachment(self, index: int):
        if index < 0:
            return
        log_ui_action("delete tracked attachment", index=index)
        result = self.editor.delete(index)
        logger.debug("Delete finished", outcome=result.outcome.value)

    def show_context_menu(self, position):
        """Show context menu for a table row."""
        item = self.table.itemAt(position)
        if item is None:
            return
        index = self._index_at(item.row())
        menu = QMenu(self)
        menu.addAction("Edit", lambda: self.edit_attachment(index))
        menu.addAction("Copy", lambda: self.copy_attachment(index))
        menu.addAction("Delete", lambda: self.delete_attachment(index))
        menu.exec(self.table.viewport().mapToGlobal(position))

    # -- modal page lock ---------------------------------------------------

    def set_scroll_locked(self, locked: bool):
        """Freeze the list while a modal dialog is stacked over it."""
        self.table.verticalScrollBar().setEnabled(not locked)
        self.table.setEnabled(not locked)
