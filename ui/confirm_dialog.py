# ui/confirm_dialog.py
"""Destructive-action confirmation dialog."""

from typing import Any, Callable, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QDialog, QDialogButtonBox, QLabel, QPushButton, QVBoxLayout, QWidget
)

from core.utils.logger import get_module_logger
from engine.attachment_editor import ConfirmResult
from workers.task_worker import Executor

logger = get_module_logger(__name__)


class ConfirmDialog(QDialog):
    """
    Warning dialog whose confirm button runs an action in the background.

    The dialog stays open while the action runs. A failure is shown inside
    the dialog and the operator may retry or cancel.
    """

    def __init__(self, title: str, body: str, on_confirm: Callable[[], Any],
                 executor: Executor, confirm_label: str = "OK", parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setModal(True)
        self.setMinimumWidth(380)

        self._on_confirm = on_confirm
        self._executor = executor
        self.error_message: Optional[str] = None

        layout = QVBoxLayout(self)

        title_label = QLabel(f"<h3>{title}</h3>")
        title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(title_label)

        body_label = QLabel(body)
        body_label.setWordWrap(True)
        body_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(body_label)

        self.error_label = QLabel()
        self.error_label.setObjectName("confirmError")
        self.error_label.setStyleSheet("color: #a94442;")
        self.error_label.setWordWrap(True)
        self.error_label.hide()
        layout.addWidget(self.error_label)

        # Cancel on the left, confirm on the right
        self.buttons = QDialogButtonBox()
        self.cancel_button = self.buttons.addButton(QDialogButtonBox.StandardButton.Cancel)
        self.confirm_button = QPushButton(confirm_label)
        self.confirm_button.setDefault(True)
        self.buttons.addButton(self.confirm_button, QDialogButtonBox.ButtonRole.AcceptRole)
        self.cancel_button.clicked.connect(self.reject)
        self.confirm_button.clicked.connect(self._confirm_clicked)
        layout.addWidget(self.buttons)

    def _confirm_clicked(self) -> None:
        self._set_busy(True)
        self.error_label.hide()
        self._executor("confirm", self._on_confirm, self._confirm_finished)

    def _confirm_finished(self, result: Any, error: Optional[Exception]) -> None:
        self._set_busy(False)
        if error is not None:
            self.error_message = getattr(error, 'message', None) or str(error)
            self.error_label.setText(self.error_message)
            self.error_label.show()
            return
        self.accept()

    def _set_busy(self, busy: bool) -> None:
        self.confirm_button.setEnabled(not busy)
        self.cancel_button.setEnabled(not busy)

    def reject(self) -> None:
        # Never dismiss while the action is in flight
        if not self.cancel_button.isEnabled():
            return
        super().reject()


class QtConfirmer:
    """Confirmer implementation showing a ConfirmDialog."""

    def __init__(self, executor: Executor, parent: Optional[QWidget] = None,
                 on_dialog_created=None, on_dialog_finished=None):
        self._executor = executor
        self._parent = parent
        self._on_dialog_created = on_dialog_created
        self._on_dialog_finished = on_dialog_finished

    def confirm(self, title: str, body: str, on_confirm: Callable[[], Any],
                confirm_label: str = "OK") -> ConfirmResult:
        dialog = ConfirmDialog(title, body, on_confirm, self._executor, confirm_label, self._parent)
        if self._on_dialog_created is not None:
            self._on_dialog_created(dialog)
        accepted = dialog.exec() == QDialog.DialogCode.Accepted
        error_message = dialog.error_message
        logger.debug("Confirmation closed", title=title, accepted=accepted)

        if self._on_dialog_finished is not None:
            self._on_dialog_finished(dialog)
        dialog.deleteLater()
        return ConfirmResult(confirmed=accepted, error_message=error_message)
