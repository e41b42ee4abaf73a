"""Shared pytest fixtures.

Provides in-memory stand-ins for everything outside the core:
- FakeAttachmentsAPI, an in-memory tracked attachments server
- RecordingNotifier capturing global notices
- FakeConfirmer answering confirmation dialogs
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import pytest

from core.data.attachment_store import AttachmentStore
from core.data.models import TrackedAttachment
from core.utils.exceptions import NotFoundError, TrackedAttachmentsException, ValidationError
from engine.attachment_editor import AttachmentEditor, ConfirmResult


@dataclass
class FakeAttachmentsAPI:
    """
    In-memory tracked attachments server.

    Validates the name like the real server, assigns ids and stamps
    modified_date. Set ``fail_next`` to an exception to make the next call
    raise it.
    """

    _records: Dict[int, TrackedAttachment] = field(default_factory=dict)
    _next_id: int = 1
    fail_next: Optional[Exception] = None
    calls: List[str] = field(default_factory=list)

    def seed(self, *names: str, type: str = "text/plain") -> List[TrackedAttachment]:
        created = []
        for name in names:
            created.append(self._store(TrackedAttachment(
                name=name, filename=f"{name.lower()}.txt", type=type, content="aGVsbG8="
            )))
        return created

    def _maybe_fail(self) -> None:
        if self.fail_next is not None:
            error, self.fail_next = self.fail_next, None
            raise error

    def _store(self, attachment: TrackedAttachment) -> TrackedAttachment:
        if attachment.id is None:
            attachment = replace(attachment, id=self._next_id)
            self._next_id += 1
        attachment = replace(attachment, modified_date=datetime.now(timezone.utc))
        self._records[attachment.id] = attachment
        return replace(attachment)

    def _validate(self, attachment: TrackedAttachment) -> None:
        if not attachment.name.strip():
            raise ValidationError("name is required", status_code=400, field='name')

    # --- AttachmentsAPI ----------------------------------------------------

    def list(self) -> List[TrackedAttachment]:
        self.calls.append('list')
        self._maybe_fail()
        return [replace(a) for a in sorted(self._records.values(), key=lambda a: a.id)]

    def get(self, attachment_id: int) -> TrackedAttachment:
        self.calls.append('get')
        self._maybe_fail()
        if attachment_id not in self._records:
            raise NotFoundError("Tracked attachment not found", status_code=404)
        return replace(self._records[attachment_id])

    def create(self, attachment: TrackedAttachment) -> TrackedAttachment:
        self.calls.append('create')
        self._maybe_fail()
        self._validate(attachment)
        return self._store(replace(attachment, id=None))

    def update(self, attachment: TrackedAttachment) -> TrackedAttachment:
        self.calls.append('update')
        self._maybe_fail()
        if attachment.id not in self._records:
            raise NotFoundError("Tracked attachment not found", status_code=404)
        self._validate(attachment)
        return self._store(attachment)

    def delete(self, attachment_id: int) -> str:
        self.calls.append('delete')
        self._maybe_fail()
        if self._records.pop(attachment_id, None) is None:
            raise NotFoundError("Tracked attachment not found", status_code=404)
        return "Tracked attachment deleted"

    @property
    def names(self) -> List[str]:
        return [a.name for a in sorted(self._records.values(), key=lambda a: a.id)]


@dataclass
class RecordingNotifier:
    successes: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


@dataclass
class FakeConfirmer:
    """
    Confirmation dialog double.

    With ``answer=True`` the confirm action runs up to ``max_attempts``
    times; a failure keeps the dialog "open" for another attempt and the
    operator cancels once the attempts run out.
    """

    answer: bool = True
    max_attempts: int = 1
    prompts: List[Dict[str, str]] = field(default_factory=list)

    def confirm(self, title: str, body: str, on_confirm: Callable[[], Any],
                confirm_label: str = "OK") -> ConfirmResult:
        self.prompts.append({'title': title, 'body': body, 'confirm_label': confirm_label})
        if not self.answer:
            return ConfirmResult(confirmed=False)

        error_message = None
        for _ in range(self.max_attempts):
            try:
                on_confirm()
            except TrackedAttachmentsException as e:
                error_message = e.message
                continue
            return ConfirmResult(confirmed=True)
        return ConfirmResult(confirmed=False, error_message=error_message)


@pytest.fixture
def api():
    return FakeAttachmentsAPI()


@pytest.fixture
def store(api):
    return AttachmentStore(api)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def confirmer():
    return FakeConfirmer()


@pytest.fixture
def editor(store, notifier, confirmer):
    return AttachmentEditor(store, notifier, confirmer=confirmer)


@pytest.fixture
def text_file(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_bytes(b"hello world")
    return str(path)
