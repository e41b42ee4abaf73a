# ui/attachment_dialog.py
"""
Dialog for creating, editing and copying a tracked attachment.

The dialog only renders ``AttachmentEditor`` state and forwards input; it
never reads the draft back out of its widgets.
"""

from PyQt6.QtWidgets import (
    QDialog, QDialogButtonBox, QFileDialog, QFormLayout, QHBoxLayout, QLabel,
    QLineEdit, QMessageBox, QPushButton, QStyle, QVBoxLayout
)

from core.encoding.file_encoder import save_content
from core.utils.exceptions import TrackedAttachmentsException
from core.utils.logger import get_module_logger, log_ui_action
from engine.attachment_editor import AttachmentEditor, EditorState
from core.data.models import ModeKind

logger = get_module_logger(__name__)

TITLES = {
    ModeKind.CREATE: "New Tracked Attachment",
    ModeKind.EDIT: "Edit Tracked Attachment",
    ModeKind.COPY: "Copy Tracked Attachment",
}

# Font Awesome class -> closest Qt standard icon
STANDARD_ICONS = {
    "fa-file-image-o": QStyle.StandardPixmap.SP_FileDialogContentsView,
    "fa-file-text-o": QStyle.StandardPixmap.SP_FileDialogDetailedView,
    "fa-file-archive-o": QStyle.StandardPixmap.SP_DirIcon,
    "fa-file-pdf-o": QStyle.StandardPixmap.SP_FileDialogInfoView,
}


def standard_icon_for(widget, icon_class: str):
    pixmap = STANDARD_ICONS.get(icon_class, QStyle.StandardPixmap.SP_FileIcon)
    return widget.style().standardIcon(pixmap)


class AttachmentDialog(QDialog):
    """View over one AttachmentEditor."""

    def __init__(self, editor: AttachmentEditor, parent=None):
        super().__init__(parent)
        self.editor = editor
        self.setModal(True)
        self.resize(520, 260)
        self._rendering = False

        layout = QVBoxLayout(self)

        self.error_label = QLabel()
        self.error_label.setObjectName("modalFlashes")
        self.error_label.setStyleSheet("color: #a94442; background: #f2dede; padding: 6px;")
        self.error_label.setWordWrap(True)
        self.error_label.hide()
        layout.addWidget(self.error_label)

        form = QFormLayout()
        self.name_edit = QLineEdit()
        self.name_edit.setPlaceholderText("Tracked Attachment name")
        self.name_edit.textEdited.connect(self.editor.set_name)
        form.addRow("Name:", self.name_edit)

        file_row = QHBoxLayout()
        self.icon_label = QLabel()
        file_row.addWidget(self.icon_label)
        self.filename_label = QLabel()
        file_row.addWidget(self.filename_label, 1)
        self.browse_button = QPushButton("Browse...")
        self.browse_button.clicked.connect(self.browse_file)
        file_row.addWidget(self.browse_button)
        self.download_button = QPushButton("Download")
        self.download_button.clicked.connect(self.download_file)
        file_row.addWidget(self.download_button)
        form.addRow("File:", file_row)

        self.type_label = QLabel()
        form.addRow("Type:", self.type_label)
        layout.addLayout(form)

        self.buttons = QDialogButtonBox()
        self.submit_button = self.buttons.addButton("Save", QDialogButtonBox.ButtonRole.AcceptRole)
        self.close_button = self.buttons.addButton(QDialogButtonBox.StandardButton.Close)
        # One stable submit binding; the editor's mode decides create vs update
        self.submit_button.clicked.connect(self.editor.submit)
        self.close_button.clicked.connect(self.reject)
        layout.addWidget(self.buttons)

        self.editor.add_listener(self._render)

    def open_for(self, mode) -> None:
        """Open the editor in ``mode`` and show the dialog."""
        try:
            self.editor.open(mode)
        except TrackedAttachmentsException as e:
            QMessageBox.warning(self.parentWidget(), "Tracked Attachments", e.get_user_message())
            return
        log_ui_action("open tracked attachment dialog", mode=str(mode))
        self.show()
        self.raise_()
        self.name_edit.setFocus()

    def browse_file(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Select Attachment File", "", "All Files (*)")
        if path:
            self.editor.select_file(path)
            self._render(self.editor)

    def download_file(self) -> None:
        draft = self.editor.draft
        if not draft.has_file:
            return
        directory = QFileDialog.getExistingDirectory(self, "Save Attachment To")
        if not directory:
            return
        try:
            path = save_content(draft.content, directory, draft.filename or "attachment")
        except TrackedAttachmentsException as e:
            QMessageBox.warning(self, "Download Failed", e.get_user_message())
            return
        log_ui_action("download tracked attachment", path=path)

    def reject(self) -> None:
        if self.editor.state is EditorState.SUBMITTING:
            return
        super().reject()
        self.editor.close()

    def _render(self, editor: AttachmentEditor) -> None:
        if self._rendering:
            return
        self._rendering = True
        try:
            draft = editor.draft
            if editor.mode is not None:
                self.setWindowTitle(TITLES[editor.mode.kind])

            if self.name_edit.text() != draft.name:
                self.name_edit.setText(draft.name)
            self.filename_label.setText(draft.filename or "No file selected")
            self.type_label.setText(draft.type)
            self.icon_label.setPixmap(standard_icon_for(self, editor.preview_icon).pixmap(24, 24))
            self.icon_label.setToolTip(editor.preview_icon)
            self.download_button.setEnabled(draft.has_file)

            busy = editor.state is EditorState.SUBMITTING
            self.submit_button.setEnabled(not busy)
            self.close_button.setEnabled(not busy)
            self.browse_button.setEnabled(not busy and not editor.is_reading_file)

            if editor.error_message:
                self.error_label.setText(editor.error_message)
                self.error_label.show()
            else:
                self.error_label.clear()
                self.error_label.hide()

            if editor.state is EditorState.CLOSED and self.isVisible():
                super().accept()
        finally:
            self._rendering = False
