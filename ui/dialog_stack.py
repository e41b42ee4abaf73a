# ui/dialog_stack.py
"""
Qt binding for ModalStackController.

Registered dialogs are watched for Show/Hide events. Each stacked dialog
gets a translucent backdrop over the page, and dialogs plus backdrops are
raised in layer order. ``QApplication.focusChanged`` feeds the focus trap.
"""

from typing import Dict, Optional

from PyQt6.QtCore import QEvent, QObject, Qt
from PyQt6.QtWidgets import QApplication, QDialog, QWidget

from core.dialogs.modal_stack import FocusHandler, ModalStackController
from core.utils.logger import get_module_logger

logger = get_module_logger(__name__)


class ModalBackdrop(QWidget):
    """Dimmed overlay covering the page behind a dialog."""

    def __init__(self, page: QWidget):
        super().__init__(page)
        self.setObjectName("modalBackdrop")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setStyleSheet("#modalBackdrop { background-color: rgba(0, 0, 0, 128); }")
        self.hide()

    def cover(self) -> None:
        self.setGeometry(self.parentWidget().rect())
        self.show()


class QtStackedDialog:
    """StackableDialog adapter around a QDialog."""

    def __init__(self, dialog: QDialog, backdrop: Optional[ModalBackdrop] = None):
        self.dialog = dialog
        self.backdrop = backdrop
        self.layer = 0
        self.backdrop_layer = 0

    def set_layer(self, layer: int) -> None:
        self.layer = layer
        self.dialog.setProperty("stackLayer", layer)

    def set_backdrop_layer(self, layer: int) -> None:
        self.backdrop_layer = layer
        if self.backdrop is not None:
            self.backdrop.setProperty("stackLayer", layer)

    def focus(self) -> None:
        self.dialog.activateWindow()
        self.dialog.setFocus(Qt.FocusReason.OtherFocusReason)

    def contains(self, target) -> bool:
        # Walks across window boundaries so message boxes owned by the dialog count as inside
        widget = target if isinstance(target, QWidget) else None
        while widget is not None:
            if widget is self.dialog:
                return True
            widget = widget.parentWidget()
        return False


class QtFocusSource:
    """FocusSource over QApplication.focusChanged."""

    def __init__(self, app: QApplication):
        self._app = app
        self._slots: Dict[FocusHandler, object] = {}

    def connect(self, handler: FocusHandler) -> None:
        def slot(old, new):
            handler(new)
        self._slots[handler] = slot
        self._app.focusChanged.connect(slot)

    def disconnect(self, handler: FocusHandler) -> None:
        slot = self._slots.pop(handler, None)
        if slot is not None:
            self._app.focusChanged.disconnect(slot)


class DialogStack(QObject):
    """Installs the stacking controller on every registered dialog."""

    def __init__(self, page: QWidget, app: Optional[QApplication] = None):
        super().__init__(page)
        self._page = page
        app = app or QApplication.instance()
        self.controller = ModalStackController(
            focus_source=QtFocusSource(app) if app is not None else None,
            on_page_lock=self._lock_page,
        )
        self._adapters: Dict[QDialog, QtStackedDialog] = {}

    def register(self, dialog: QDialog) -> None:
        if dialog in self._adapters:
            return
        self._adapters[dialog] = QtStackedDialog(dialog, ModalBackdrop(self._page))
        dialog.installEventFilter(self)

    def is_registered(self, dialog: QDialog) -> bool:
        return dialog in self._adapters

    def unregister(self, dialog: QDialog) -> None:
        """Stop tracking ``dialog`` and delete its backdrop."""
        adapter = self._adapters.pop(dialog, None)
        if adapter is None:
            return
        dialog.removeEventFilter(self)
        if self.controller.is_stacked(adapter):
            self.controller.dialog_hidden(adapter)
            self._restack()
        if adapter.backdrop is not None:
            adapter.backdrop.hide()
            adapter.backdrop.deleteLater()

    def eventFilter(self, watched, event) -> bool:
        adapter = self._adapters.get(watched)
        if adapter is not None:
            if event.type() == QEvent.Type.Show:
                self.controller.dialog_shown(adapter)
                if adapter.backdrop is not None:
                    adapter.backdrop.cover()
                self._restack()
            elif event.type() == QEvent.Type.Hide:
                if adapter.backdrop is not None:
                    adapter.backdrop.hide()
                self.controller.dialog_hidden(adapter)
                self._restack()
        return super().eventFilter(watched, event)

    def _restack(self) -> None:
        for adapter in self.controller.dialogs_in_order():
            if adapter.backdrop is not None:
                adapter.backdrop.raise_()
            adapter.dialog.raise_()

    def _lock_page(self, locked: bool) -> None:
        self._page.setProperty("modalOpen", locked)
        lock = getattr(self._page, "set_scroll_locked", None)
        if lock is not None:
            lock(locked)
