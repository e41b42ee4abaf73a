#!/usr/bin/env python3
"""
Tests for the create/edit/copy/delete workflow.

Runs the editor against the in-memory API with the inline executor, so
every submit and reload completes before the call returns.
"""

import pytest

from core.data.models import EditorMode, EncodedFile, TrackedAttachment
from core.utils.exceptions import NetworkError, NotFoundError, ValidationError
from engine.attachment_editor import (
    ADDED_MESSAGE, DELETE_BODY, DELETE_TITLE, DELETED_MESSAGE, EDITED_MESSAGE, LOAD_ERROR_MESSAGE,
    AttachmentEditor, DeleteOutcome, EditorState
)
from conftest import FakeConfirmer


class DeferredExecutor:
    def __init__(self):
        self.pending = []

    def __call__(self, name, func, on_done):
        self.pending.append((func, on_done))

    def complete(self):
        func, on_done = self.pending.pop(0)
        try:
            result = func()
        except Exception as e:
            on_done(None, e)
            return
        on_done(result, None)


@pytest.fixture
def loaded(api, store):
    api.seed("Alpha", "Beta", "Gamma")
    store.reload()
    return store


def test_create_submits_and_closes(api, store, editor, notifier):
    editor.open(EditorMode.create())
    editor.set_name("Invoice")
    editor.apply_file(EncodedFile("application/pdf", "JVBERi0=", filename="invoice.pdf"))

    assert editor.submit()

    assert api.calls[:2] == ['create', 'list']
    assert [a.name for a in store.attachments] == ["Invoice"]
    created = store.get(0)
    assert (created.filename, created.type, created.content) == ("invoice.pdf", "application/pdf", "JVBERi0=")
    assert created.id is not None
    assert notifier.successes == [ADDED_MESSAGE]
    assert editor.state is EditorState.CLOSED
    assert editor.draft.is_empty


def test_open_create_always_starts_blank(loaded, editor):
    editor.open(EditorMode.edit(1))
    editor.set_name("half typed")

    draft = editor.open(EditorMode.create())

    assert draft.is_empty
    assert editor.error_message is None


def test_edit_prefills_and_updates(api, loaded, editor, notifier):
    target = loaded.get(1)

    draft = editor.open(EditorMode.edit(1))
    assert (draft.id, draft.name) == (target.id, "Beta")

    editor.set_name("Beta v2")
    editor.submit()

    assert 'update' in api.calls
    assert loaded.find(target.id).name == "Beta v2"
    assert len(loaded) == 3
    assert notifier.successes == [EDITED_MESSAGE]
    assert not editor.is_open


def test_copy_creates_new_record_with_prefixed_name(api, loaded, editor):
    source = loaded.get(0)

    draft = editor.open(EditorMode.copy(0))
    assert draft.id is None
    assert draft.name == "Copy of Alpha"
    assert (draft.filename, draft.type, draft.content) == (source.filename, source.type, source.content)

    editor.submit()

    assert 'create' in api.calls and 'update' not in api.calls
    assert api.names == ["Alpha", "Beta", "Gamma", "Copy of Alpha"]
    assert loaded.find(source.id).name == "Alpha"


def test_remote_validation_failure_keeps_dialog_open(api, editor, notifier):
    editor.open(EditorMode.create())
    editor.apply_file(EncodedFile("text/plain", "aGk=", filename="a.txt"))

    editor.submit()

    assert editor.state is EditorState.POPULATED
    assert editor.error_message == "name is required"
    assert editor.draft.filename == "a.txt"
    assert notifier.successes == []
    assert api.names == []


def test_error_clears_on_next_open(editor):
    editor.open(EditorMode.create())
    editor.submit()
    assert editor.error_message

    editor.open(EditorMode.create())
    assert editor.error_message is None


def test_submit_refused_unless_populated(store, notifier, editor):
    assert not editor.submit()

    executor = DeferredExecutor()
    busy = AttachmentEditor(store, notifier, executor=executor)
    busy.open(EditorMode.create())
    busy.set_name("x")
    assert busy.submit()
    assert busy.state is EditorState.SUBMITTING
    assert not busy.submit()
    assert len(executor.pending) == 1


def test_stale_submit_completion_does_not_touch_new_draft(api, store, notifier):
    executor = DeferredExecutor()
    editor = AttachmentEditor(store, notifier, executor=executor)

    editor.open(EditorMode.create())
    editor.submit()
    editor.close()
    editor.open(EditorMode.create())
    editor.set_name("Second draft")

    executor.complete()

    assert editor.state is EditorState.POPULATED
    assert editor.draft.name == "Second draft"
    assert editor.error_message is None


def test_open_stale_index_raises_and_stays_closed(loaded, editor):
    with pytest.raises(NotFoundError):
        editor.open(EditorMode.edit(10))
    assert editor.state is EditorState.CLOSED


def test_select_file_reads_into_draft(loaded, editor, text_file):
    editor.open(EditorMode.edit(2))

    assert editor.select_file(text_file)

    assert editor.draft.filename == "notes.txt"
    assert editor.draft.type == "text/plain"
    assert editor.preview_uri == "data:text/plain;base64,aGVsbG8gd29ybGQ="
    assert editor.draft.name == "Gamma"


def test_select_file_failure_leaves_draft(editor, tmp_path):
    editor.open(EditorMode.create())
    editor.select_file(str(tmp_path / "missing.pdf"))
    assert editor.draft.filename == ""
    assert editor.error_message is None


def test_select_file_ignored_when_closed(editor, text_file):
    assert not editor.select_file(text_file)


def test_preview_icon_follows_draft_type(api, store, editor):
    api.seed("Logo", type="image/png")
    api.seed("Odd", type="application/weird")
    store.reload()

    editor.open(EditorMode.edit(0))
    assert editor.preview_icon == "fa-file-image-o"

    editor.open(EditorMode.edit(1))
    assert editor.preview_icon == "fa-file-o"


def test_listeners_are_notified(editor):
    states = []
    editor.add_listener(lambda e: states.append(e.state))

    editor.open(EditorMode.create())
    editor.close()

    assert states == [EditorState.OPENING, EditorState.POPULATED, EditorState.CLOSED]


def test_delete_confirmed(api, loaded, editor, confirmer, notifier):
    target = loaded.get(1)

    result = editor.delete(1)

    assert result.deleted
    assert result.message == DELETED_MESSAGE
    assert confirmer.prompts == [{'title': DELETE_TITLE, 'body': DELETE_BODY, 'confirm_label': "Delete Beta"}]
    assert loaded.find(target.id) is None
    assert len(loaded) == 2
    assert notifier.successes == [DELETED_MESSAGE]


def test_delete_cancelled_calls_nothing(api, store, notifier):
    api.seed("Alpha")
    store.reload()
    editor = AttachmentEditor(store, notifier, confirmer=FakeConfirmer(answer=False))
    api.calls.clear()

    result = editor.delete(0)

    assert result.outcome is DeleteOutcome.CANCELLED
    assert api.calls == []
    assert notifier.successes == []


def test_delete_failure_is_reported_in_confirmation(api, store, notifier):
    api.seed("Alpha")
    store.reload()
    editor = AttachmentEditor(store, notifier, confirmer=FakeConfirmer(max_attempts=1))
    api.fail_next = ValidationError("attachment is used by a campaign", status_code=409)

    result = editor.delete(0)

    assert result.outcome is DeleteOutcome.FAILED
    assert result.message == "attachment is used by a campaign"
    assert api.names == ["Alpha"]
    assert notifier.successes == []


def test_delete_retry_after_failure(api, store, notifier):
    api.seed("Alpha")
    store.reload()
    editor = AttachmentEditor(store, notifier, confirmer=FakeConfirmer(max_attempts=2))
    api.fail_next = NetworkError("connection reset")

    assert editor.delete(0).deleted
    assert api.names == []


def test_delete_without_confirmer_is_an_error(loaded, store, notifier):
    with pytest.raises(RuntimeError):
        AttachmentEditor(store, notifier).delete(0)


def test_refresh_failure_notifies(api, editor, notifier):
    api.fail_next = NetworkError("down")

    editor.refresh()

    assert notifier.errors == [LOAD_ERROR_MESSAGE]


def test_create_then_reload_roundtrip(api, store, editor):
    editor.open(EditorMode.create())
    editor.set_name("Report")
    editor.apply_file(EncodedFile("application/pdf", "AAAA", filename="r.pdf"))
    editor.submit()

    matches = [a for a in store if a.name == "Report"]
    assert len(matches) == 1
    assert isinstance(matches[0], TrackedAttachment)
    assert matches[0].id is not None


def test_delete_stale_index_fails_without_prompting(api, store, notifier):
    api.seed("Alpha")
    store.reload()
    confirmer = FakeConfirmer()
    editor = AttachmentEditor(store, notifier, confirmer=confirmer)
    api.delete(store.get(0).id)
    store.reload()
    api.calls.clear()

    result = editor.delete(0)

    assert result.outcome is DeleteOutcome.FAILED
    assert result.message == "No tracked attachment at position 0"
    assert confirmer.prompts == []
    assert api.calls == []
    assert notifier.errors == ["No tracked attachment at position 0"]


def test_copy_stale_index_raises_and_stays_closed(loaded, editor):
    with pytest.raises(NotFoundError):
        editor.open(EditorMode.copy(3))
    assert editor.state is EditorState.CLOSED
    assert editor.draft.is_empty
