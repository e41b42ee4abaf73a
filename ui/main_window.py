# ui/main_window.py
"""Main application window wiring the tracked attachment page together."""

from PyQt6.QtWidgets import QLabel, QMainWindow, QStatusBar
from PyQt6.QtCore import QTimer

from config.settings import get_config
from core.api.client import TrackedAttachmentsAPI
from core.data.attachment_store import AttachmentStore
from core.encoding.file_encoder import FileEncoder
from core.utils.logger import get_module_logger
from engine.attachment_editor import AttachmentEditor
from ui.attachment_manager import TrackedAttachmentManager
from ui.confirm_dialog import QtConfirmer
from ui.dialog_stack import DialogStack
from ui.task_bridge import TaskBridge

logger = get_module_logger(__name__)

SUCCESS_STYLE = "QStatusBar { background: #dff0d8; color: #3c763d; }"
ERROR_STYLE = "QStatusBar { background: #f2dede; color: #a94442; }"


class StatusBarNotifier:
    """Notifier showing transient notices in the window status bar."""

    def __init__(self, status_bar: QStatusBar, timeout_ms: int = 5000):
        self._status_bar = status_bar
        self._timeout_ms = timeout_ms
        self._clear_timer = QTimer(status_bar)
        self._clear_timer.setSingleShot(True)
        self._clear_timer.timeout.connect(lambda: self._status_bar.setStyleSheet(""))

    def success(self, message: str) -> None:
        logger.info("Notice", message=message)
        self._show(message, SUCCESS_STYLE)

    def error(self, message: str) -> None:
        logger.error("Notice", message=message)
        self._show(message, ERROR_STYLE)

    def _show(self, message: str, style: str) -> None:
        self._status_bar.setStyleSheet(style)
        self._status_bar.showMessage(message, self._timeout_ms)
        self._clear_timer.start(self._timeout_ms)


class MainWindow(QMainWindow):
    def __init__(self, config=None):
        super().__init__()
        self.config = config or get_config()
        self.setWindowTitle(self.config.get('app.name', 'Tracked Attachments Console'))
        self.resize(1000, 640)

        self.setStatusBar(QStatusBar(self))
        self.connection_label = QLabel()
        self.statusBar().addPermanentWidget(self.connection_label)

        self.bridge = TaskBridge(self)
        self.notifier = StatusBarNotifier(
            self.statusBar(), self.config.get('ui.notification_timeout_ms', 5000)
        )

        self.api = TrackedAttachmentsAPI.from_config(self.config)
        self.connection_label.setText(self.api.collection_url)
        self.store = AttachmentStore(self.api)

        self.dialog_stack = DialogStack(self)
        self.editor = AttachmentEditor(
            self.store,
            self.notifier,
            confirmer=QtConfirmer(self.bridge, self, on_dialog_created=self.dialog_stack.register,
                                   on_dialog_finished=self.dialog_stack.unregister),
            encoder=FileEncoder(executor=self.bridge),
            executor=self.bridge,
        )

        self.manager = TrackedAttachmentManager(self.store, self.editor, self)
        self.dialog_stack.register(self.manager.dialog)
        self.setCentralWidget(self.manager)

        self._initial_load_done = False
        logger.info("Main window initialized", api=self.api.collection_url)

    def showEvent(self, event):
        super().showEvent(event)
        if not self._initial_load_done:
            self._initial_load_done = True
            self.manager.load()

    def set_scroll_locked(self, locked: bool):
        self.manager.set_scroll_locked(locked)

    def closeEvent(self, event):
        self.editor.close()
        self.api.close()
        super().closeEvent(event)
