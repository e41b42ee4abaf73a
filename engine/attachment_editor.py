"""
Create/edit/copy/delete workflow for tracked attachments.

One editor drives one dialog. The dialog renders ``editor.draft`` and
``editor.error_message`` and forwards operator input through ``set_name``,
``select_file``, ``submit`` and ``close``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol

from core.data.attachment_store import AttachmentStore
from core.data.models import AttachmentDraft, EditorMode, EncodedFile, ModeKind, TrackedAttachment, icon_for_type
from core.encoding.file_encoder import FileEncoder
from core.utils.exceptions import TrackedAttachmentsException, handle_exception
from core.utils.logger import get_module_logger
from workers.task_worker import Executor, run_inline

logger = get_module_logger(__name__)

ADDED_MESSAGE = "Tracked Attachment added successfully!"
EDITED_MESSAGE = "Tracked Attachment edited successfully!"
DELETED_MESSAGE = "This Tracked Attachment has been deleted!"
LOAD_ERROR_MESSAGE = "Error fetching tracked attachments"

DELETE_TITLE = "Are you sure?"
DELETE_BODY = "This will delete the Tracked Attachment. This can't be undone!"


class Notifier(Protocol):
    """Transient global notices."""

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


@dataclass
class ConfirmResult:
    """
    Outcome of a confirmation dialog.

    ``confirmed`` is True only when the operator confirmed and the confirm
    action succeeded. ``error_message`` holds the last failure shown in the
    dialog, if any.
    """
    confirmed: bool
    error_message: Optional[str] = None


class Confirmer(Protocol):
    """
    Destructive-action confirmation.

    ``on_confirm`` runs when the operator confirms. If it raises, the
    message is shown inside the confirmation dialog, which stays open so the
    operator can retry or cancel.
    """

    def confirm(
        self,
        title: str,
        body: str,
        on_confirm: Callable[[], Any],
        confirm_label: str = "OK"
    ) -> ConfirmResult: ...


class EditorState(Enum):
    """Dialog lifecycle."""
    CLOSED = "closed"
    OPENING = "opening"
    POPULATED = "populated"
    SUBMITTING = "submitting"


class DeleteOutcome(Enum):
    DELETED = "deleted"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class DeleteResult:
    outcome: DeleteOutcome
    message: str = ""

    @property
    def deleted(self) -> bool:
        return self.outcome is DeleteOutcome.DELETED


class AttachmentEditor:
    """
    State machine behind the attachment dialog.

    CLOSED -> OPENING -> POPULATED -> SUBMITTING, then CLOSED on success or
    back to POPULATED with the server's message on failure.
    """

    def __init__(
        self,
        store: AttachmentStore,
        notifier: Notifier,
        confirmer: Optional[Confirmer] = None,
        encoder: Optional[FileEncoder] = None,
        executor: Executor = run_inline
    ):
        """
        Args:
            store: Attachment snapshot and CRUD operations
            notifier: Global success/error notices
            confirmer: Confirmation surface for deletes
            encoder: File reader; defaults to one sharing ``executor``
            executor: Runs remote calls; results must come back on the
                caller's thread
        """
        self._store = store
        self._notifier = notifier
        self._confirmer = confirmer
        self._executor = executor
        self._encoder = encoder or FileEncoder(executor=executor)

        self._state = EditorState.CLOSED
        self._mode: Optional[EditorMode] = None
        self._draft = AttachmentDraft.blank()
        self._error_message: Optional[str] = None
        self._session = 0
        self._listeners: List[Callable[['AttachmentEditor'], None]] = []

    # -- observable state -------------------------------------------------

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def mode(self) -> Optional[EditorMode]:
        return self._mode

    @property
    def draft(self) -> AttachmentDraft:
        return self._draft

    @property
    def error_message(self) -> Optional[str]:
        """Form-scoped error shown inside the dialog."""
        return self._error_message

    @property
    def is_open(self) -> bool:
        return self._state is not EditorState.CLOSED

    @property
    def preview_icon(self) -> str:
        return icon_for_type(self._draft.type)

    @property
    def preview_uri(self) -> str:
        return self._draft.data_uri

    @property
    def is_reading_file(self) -> bool:
        return self._encoder.is_reading()

    def add_listener(self, listener: Callable[['AttachmentEditor'], None]) -> None:
        """Call ``listener(editor)`` after every state, draft or error change."""
        self._listeners.append(listener)

    # -- dialog workflow --------------------------------------------------

    def open(self, mode: EditorMode) -> AttachmentDraft:
        """
        Open the dialog in ``mode``.

        Create starts from a blank draft. Edit and Copy seed it from the
        snapshot entry at the mode's index; a copy never keeps the source id.

        Raises:
            NotFoundError: If the index no longer references an attachment
        """
        self._session += 1
        self._mode = mode
        self._error_message = None
        self._set_state(EditorState.OPENING)

        if mode.kind is ModeKind.CREATE:
            self._draft = AttachmentDraft.blank()
        else:
            try:
                source = self._store.get(mode.index)
            except TrackedAttachmentsException:
                self._reset()
                raise
            self._draft = AttachmentDraft.from_attachment(source, as_copy=mode.kind is ModeKind.COPY)

        logger.debug("Editor opened", mode=str(mode), session=self._session)
        self._set_state(EditorState.POPULATED)
        return self._draft

    def set_name(self, name: str) -> None:
        if not self.is_open:
            return
        self._draft.name = name
        self._changed()

    def apply_file(self, encoded: EncodedFile) -> None:
        """Take filename, type and content from one file read."""
        if not self.is_open:
            return
        self._draft = self._draft.with_file(encoded)
        self._changed()

    def select_file(self, path: str) -> bool:
        """
        Read ``path`` into the draft.

        Returns:
            False if the dialog is closed or a read is still in flight
        """
        if self._state is not EditorState.POPULATED:
            return False
        session = self._session

        def done(encoded: Optional[EncodedFile], error: Optional[Exception]) -> None:
            if error is not None:
                # Logged by the encoder; not shown to the operator
                return
            if session != self._session or not self.is_open:
                logger.debug("Discarding file read for a closed dialog", path=path)
                return
            self.apply_file(encoded)

        return self._encoder.encode(path, done)

    def submit(self) -> bool:
        """
        Send the draft to the store.

        Edit submits an update; Create and Copy submit a create.

        Returns:
            False if there is no populated dialog to submit
        """
        if self._state is not EditorState.POPULATED:
            logger.warning("Submit ignored", state=self._state.value)
            return False

        mode = self._mode
        attachment = self._draft.to_attachment()
        if mode.submits_update:
            operation = self._store.update
            success_message = EDITED_MESSAGE
        else:
            attachment.id = None
            operation = self._store.create
            success_message = ADDED_MESSAGE

        session = self._session
        self._error_message = None
        self._set_state(EditorState.SUBMITTING)
        logger.info("Submitting tracked attachment", mode=str(mode), name=attachment.name)

        def done(result: Optional[TrackedAttachment], error: Optional[Exception]) -> None:
            self._submitted(session, success_message, error)

        self._executor(f"submit-{mode.kind.value}", lambda: operation(attachment), done)
        return True

    def close(self) -> None:
        """Dismiss the dialog, discarding the draft and any error."""
        if self._state is EditorState.CLOSED and self._draft.is_empty and self._error_message is None:
            return
        self._session += 1
        self._reset()

    # -- list operations ---------------------------------------------------

    def delete(self, index: int) -> DeleteResult:
        """
        Confirm, then delete the attachment at ``index``.

        A remote failure is shown in the confirmation dialog, not in the list.
        A stale index is reported through the notifier without asking.
        """
        if self._confirmer is None:
            raise RuntimeError("No confirmation surface configured for deletes")

        try:
            attachment = self._store.get(index)
        except TrackedAttachmentsException as e:
            logger.warning("Delete target no longer in the list", index=index, error=e.message)
            self._notifier.error(e.message)
            return DeleteResult(DeleteOutcome.FAILED, e.message)
        attempts: List[str] = []

        def perform() -> None:
            try:
                self._store.delete(attachment.id)
            except Exception as e:
                error = handle_exception(e, {'operation': 'delete', 'id': attachment.id})
                attempts.append(error.message)
                raise error

        result = self._confirmer.confirm(
            DELETE_TITLE,
            DELETE_BODY,
            perform,
            confirm_label=f"Delete {attachment.name}",
        )

        if result.confirmed:
            logger.info("Tracked attachment deleted", id=attachment.id, name=attachment.name)
            self._notifier.success(DELETED_MESSAGE)
            self.refresh()
            return DeleteResult(DeleteOutcome.DELETED, DELETED_MESSAGE)

        if attempts:
            return DeleteResult(DeleteOutcome.FAILED, result.error_message or attempts[-1])
        return DeleteResult(DeleteOutcome.CANCELLED)

    def refresh(self) -> None:
        """Reload the list, reporting failure through the notifier."""
        def done(result: Any, error: Optional[Exception]) -> None:
            if error is not None:
                self._notifier.error(LOAD_ERROR_MESSAGE)

        self._executor("reload", self._store.reload, done)

    # -- internals ---------------------------------------------------------

    def _submitted(self, session: int, success_message: str, error: Optional[Exception]) -> None:
        if error is not None:
            message = getattr(error, 'message', None) or str(error)
            logger.warning("Tracked attachment submit failed", error=message)
            if session == self._session and self._state is EditorState.SUBMITTING:
                self._error_message = message
                self._set_state(EditorState.POPULATED)
            return

        self._notifier.success(success_message)
        self.refresh()
        if session == self._session:
            self.close()

    def _reset(self) -> None:
        self._mode = None
        self._draft = AttachmentDraft.blank()
        self._error_message = None
        self._set_state(EditorState.CLOSED)

    def _set_state(self, state: EditorState) -> None:
        self._state = state
        self._changed()

    def _changed(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.exception(e, "in editor listener")
