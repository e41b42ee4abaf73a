"""
Client-side snapshot of tracked attachments and the CRUD calls behind it.

The snapshot is only ever replaced wholesale by ``reload()``. Mutations go
straight to the API and leave the snapshot alone; callers reload after every
successful mutation.
"""

from typing import Callable, Iterator, List, Optional, Protocol, Tuple

from core.data.models import TrackedAttachment
from core.utils.exceptions import NotFoundError, ValidationError, handle_exception
from core.utils.logger import get_module_logger

logger = get_module_logger(__name__)

SnapshotListener = Callable[[Tuple[TrackedAttachment, ...]], None]


class AttachmentsAPI(Protocol):
    """What the store needs from an API client."""

    def list(self) -> List[TrackedAttachment]: ...

    def create(self, attachment: TrackedAttachment) -> TrackedAttachment: ...

    def update(self, attachment: TrackedAttachment) -> TrackedAttachment: ...

    def delete(self, attachment_id: int) -> str: ...


class AttachmentStore:
    """Owns the attachment snapshot and all remote CRUD calls."""

    def __init__(self, api: AttachmentsAPI):
        self._api = api
        self._snapshot: Tuple[TrackedAttachment, ...] = ()
        self._loaded = False
        self._listeners: List[SnapshotListener] = []

    @property
    def attachments(self) -> Tuple[TrackedAttachment, ...]:
        """The current snapshot."""
        return self._snapshot

    @property
    def loaded(self) -> bool:
        """False before the first reload and after a failed one."""
        return self._loaded

    def __len__(self) -> int:
        return len(self._snapshot)

    def __iter__(self) -> Iterator[TrackedAttachment]:
        return iter(self._snapshot)

    def get(self, index: int) -> TrackedAttachment:
        """
        Attachment at ``index`` in the snapshot.

        Raises:
            NotFoundError: If the index does not reference a snapshot entry
        """
        if index < 0 or index >= len(self._snapshot):
            raise NotFoundError(f"No tracked attachment at position {index}")
        return self._snapshot[index]

    def find(self, attachment_id: int) -> Optional[TrackedAttachment]:
        for attachment in self._snapshot:
            if attachment.id == attachment_id:
                return attachment
        return None

    def add_listener(self, listener: SnapshotListener) -> None:
        """Call ``listener(snapshot)`` after every reload, failed ones included."""
        self._listeners.append(listener)

    def remove_listener(self, listener: SnapshotListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def reload(self) -> Tuple[TrackedAttachment, ...]:
        """
        Replace the snapshot with the full remote list.

        On failure the previous snapshot is discarded and the error is raised.
        """
        try:
            with logger.timing_context("reload tracked attachments"):
                attachments = self._api.list()
        except Exception as e:
            error = handle_exception(e, {'operation': 'reload'})
            logger.error("Error fetching tracked attachments", error=error.message)
            self._replace((), loaded=False)
            if error is e:
                raise
            raise error from e

        self._replace(tuple(attachments), loaded=True)
        logger.info("Tracked attachments loaded", count=len(attachments))
        return self._snapshot

    def create(self, attachment: TrackedAttachment) -> TrackedAttachment:
        """Persist a new attachment; the remote system assigns the id."""
        if attachment.id is not None:
            raise ValidationError("A new tracked attachment cannot carry an id", field='id')

        with logger.timing_context("create tracked attachment"):
            created = self._api.create(attachment)
        logger.info("Tracked attachment created", id=created.id, name=created.name)
        return created

    def update(self, attachment: TrackedAttachment) -> TrackedAttachment:
        """Replace every field of an existing attachment."""
        if attachment.id is None:
            raise ValidationError("Only a persisted tracked attachment can be updated", field='id')

        with logger.timing_context("update tracked attachment"):
            updated = self._api.update(attachment)
        logger.info("Tracked attachment updated", id=attachment.id, name=attachment.name)
        return updated

    def delete(self, attachment_id: int) -> str:
        """Delete an attachment. Final; there is no undo."""
        with logger.timing_context("delete tracked attachment"):
            message = self._api.delete(attachment_id)
        logger.info("Tracked attachment deleted", id=attachment_id)
        return message

    def _replace(self, snapshot: Tuple[TrackedAttachment, ...], loaded: bool) -> None:
        self._snapshot = snapshot
        self._loaded = loaded
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.exception(e, "in snapshot listener")
