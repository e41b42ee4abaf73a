#!/usr/bin/env python3
"""
Tests for the attachment snapshot and its CRUD operations.
"""

import pytest

from core.data.models import TrackedAttachment
from core.utils.exceptions import NetworkError, NotFoundError, TrackedAttachmentsException, ValidationError


def test_starts_empty_and_unloaded(store):
    assert store.attachments == ()
    assert not store.loaded
    assert len(store) == 0


def test_reload_replaces_snapshot(api, store):
    api.seed("Alpha", "Beta")

    snapshot = store.reload()

    assert [a.name for a in snapshot] == ["Alpha", "Beta"]
    assert store.loaded
    assert store.get(1).name == "Beta"
    assert store.find(snapshot[0].id).name == "Alpha"
    assert store.find(999) is None


def test_snapshot_is_immutable_between_reloads(api, store):
    api.seed("Alpha")
    before = store.reload()

    api.seed("Beta")

    assert store.attachments is before
    assert len(store.reload()) == 2


def test_failed_reload_discards_snapshot_and_raises(api, store):
    api.seed("Alpha")
    store.reload()
    api.fail_next = NetworkError("connection refused")

    with pytest.raises(NetworkError):
        store.reload()

    assert store.attachments == ()
    assert not store.loaded


def test_listeners_see_every_reload(api, store):
    seen = []
    store.add_listener(seen.append)
    api.seed("Alpha")

    store.reload()
    api.fail_next = NetworkError("down")
    with pytest.raises(NetworkError):
        store.reload()

    assert [len(s) for s in seen] == [1, 0]

    store.remove_listener(seen.append)
    store.reload()
    assert len(seen) == 2


def test_broken_listener_does_not_break_reload(api, store):
    def broken(snapshot):
        raise RuntimeError("listener bug")

    store.add_listener(broken)
    api.seed("Alpha")

    assert len(store.reload()) == 1


def test_get_out_of_range_raises_not_found(store):
    with pytest.raises(NotFoundError):
        store.get(0)
    with pytest.raises(NotFoundError):
        store.get(-1)


def test_create_assigns_id_but_leaves_snapshot(api, store):
    created = store.create(TrackedAttachment(name="New", type="text/plain", content="aGk="))

    assert created.id is not None
    assert created.modified_date is not None
    assert store.attachments == ()
    assert api.names == ["New"]


def test_create_rejects_preassigned_id(store):
    with pytest.raises(ValidationError):
        store.create(TrackedAttachment(id=3, name="Existing"))


def test_update_requires_id(store):
    with pytest.raises(ValidationError):
        store.update(TrackedAttachment(name="Never saved"))


def test_update_and_delete(api, store):
    alpha, = api.seed("Alpha")

    store.update(TrackedAttachment(id=alpha.id, name="Renamed", filename=alpha.filename,
                                   type=alpha.type, content=alpha.content))
    assert api.names == ["Renamed"]

    assert store.delete(alpha.id) == "Tracked attachment deleted"
    assert api.names == []


def test_server_validation_error_propagates(store):
    with pytest.raises(ValidationError) as exc_info:
        store.create(TrackedAttachment(name=""))
    assert exc_info.value.message == "name is required"


def test_unexpected_reload_failure_also_discards_snapshot(api, store):
    api.seed("Alpha", "Beta")
    store.reload()
    seen = []
    store.add_listener(seen.append)
    api.fail_next = ValueError("invalid literal for int() with base 10: 'abc'")

    with pytest.raises(TrackedAttachmentsException) as exc_info:
        store.reload()

    assert isinstance(exc_info.value.original_exception, ValueError)
    assert store.attachments == ()
    assert not store.loaded
    assert seen == [()]
