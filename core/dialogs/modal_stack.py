"""
Stacking order and focus trapping for simultaneously open dialogs.

The controller is toolkit-free. A dialog is anything implementing
``StackableDialog``; the Qt binding lives in ui.dialog_stack.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

from core.utils.logger import get_module_logger

logger = get_module_logger(__name__)

BASE_LAYER = 1040
LAYER_STEP = 10
BACKDROP_OFFSET = 1

FocusHandler = Callable[[Any], None]


class StackableDialog(Protocol):
    """A dialog the controller can layer and focus."""

    def set_layer(self, layer: int) -> None: ...

    def set_backdrop_layer(self, layer: int) -> None: ...

    def focus(self) -> None: ...

    def contains(self, target: Any) -> bool:
        """True if ``target`` is the dialog itself or one of its descendants."""
        ...


class FocusSource(Protocol):
    """Global focus-change notifications."""

    def connect(self, handler: FocusHandler) -> None: ...

    def disconnect(self, handler: FocusHandler) -> None: ...


@dataclass(frozen=True)
class StackEntry:
    """Layering assigned to one stacked dialog."""
    layer: int
    backdrop_layer: int


def layer_for(open_count: int) -> int:
    return BASE_LAYER + LAYER_STEP * open_count


class ModalStackController:
    """
    Tracks open dialogs, assigns their layers and keeps focus inside the
    most recently engaged one.

    The open count is incremented on a dialog's first open transition and
    decremented on every close transition. It is never reset and never
    drops below zero.
    """

    def __init__(
        self,
        focus_source: Optional[FocusSource] = None,
        on_page_lock: Optional[Callable[[bool], None]] = None
    ):
        """
        Args:
            focus_source: Where the focus listener is installed
            on_page_lock: Called with True while any dialog is open and with
                False when the last one closes
        """
        self._focus_source = focus_source
        self._on_page_lock = on_page_lock
        self._open_count = 0
        self._stacked: Dict[Any, StackEntry] = {}
        self._focus_target: Optional[StackableDialog] = None
        self._installed_handler: Optional[FocusHandler] = None

    @property
    def open_count(self) -> int:
        return self._open_count

    @property
    def focus_target(self) -> Optional[StackableDialog]:
        return self._focus_target

    @property
    def focus_listener_installed(self) -> bool:
        return self._installed_handler is not None

    def is_stacked(self, dialog: StackableDialog) -> bool:
        return dialog in self._stacked

    def entry_for(self, dialog: StackableDialog) -> Optional[StackEntry]:
        return self._stacked.get(dialog)

    def dialogs_in_order(self):
        """Stacked dialogs from bottom to top."""
        return [d for d, _ in sorted(self._stacked.items(), key=lambda item: item[1].layer)]

    def dialog_shown(self, dialog: StackableDialog) -> StackEntry:
        """
        Open transition. Repeated calls for a stacked dialog change nothing.
        """
        existing = self._stacked.get(dialog)
        if existing is not None:
            return existing

        self._open_count += 1
        layer = layer_for(self._open_count)
        entry = StackEntry(layer=layer, backdrop_layer=layer - BACKDROP_OFFSET)
        self._stacked[dialog] = entry

        dialog.set_layer(entry.layer)
        dialog.set_backdrop_layer(entry.backdrop_layer)
        logger.debug("Dialog stacked", open_count=self._open_count, layer=entry.layer)

        self._set_page_lock(True)
        self.enforce_focus(dialog)
        return entry

    def dialog_hidden(self, dialog: StackableDialog) -> None:
        """Close transition."""
        self._open_count = max(0, self._open_count - 1)
        self._stacked.pop(dialog, None)
        logger.debug("Dialog unstacked", open_count=self._open_count)

        if self._focus_target is dialog:
            remaining = self.dialogs_in_order()
            if remaining:
                self.enforce_focus(remaining[-1])
            else:
                self._focus_target = None
                self._uninstall_focus_handler()

        self._set_page_lock(bool(self._stacked))

    def enforce_focus(self, dialog: StackableDialog) -> None:
        """
        Engage ``dialog`` and (re)install the single global focus listener.

        Installing again replaces the previous listener instead of adding a
        second one.
        """
        self._focus_target = dialog
        self._uninstall_focus_handler()
        if self._focus_source is None:
            return
        self._installed_handler = self.handle_focus_in
        self._focus_source.connect(self._installed_handler)

    def handle_focus_in(self, target: Any) -> bool:
        """
        Pull focus back into the engaged dialog.

        Returns:
            True if focus was redirected
        """
        dialog = self._focus_target
        if dialog is None or target is None:
            return False
        if target is dialog or dialog.contains(target):
            return False
        dialog.focus()
        return True

    def _uninstall_focus_handler(self) -> None:
        if self._installed_handler is not None and self._focus_source is not None:
            self._focus_source.disconnect(self._installed_handler)
        self._installed_handler = None

    def _set_page_lock(self, locked: bool) -> None:
        if self._on_page_lock is not None:
            self._on_page_lock(locked)
