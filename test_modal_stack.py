#!/usr/bin/env python3
"""
Tests for dialog stacking order and the focus trap.
"""

import pytest

from core.dialogs.modal_stack import BASE_LAYER, LAYER_STEP, ModalStackController, layer_for


class FakeDialog:
    def __init__(self, name):
        self.name = name
        self.layer = None
        self.backdrop_layer = None
        self.focus_calls = 0
        self.children = set()

    def set_layer(self, layer):
        self.layer = layer

    def set_backdrop_layer(self, layer):
        self.backdrop_layer = layer

    def focus(self):
        self.focus_calls += 1

    def contains(self, target):
        return target is self or target in self.children


class FakeFocusSource:
    def __init__(self):
        self.handlers = []

    def connect(self, handler):
        self.handlers.append(handler)

    def disconnect(self, handler):
        self.handlers.remove(handler)

    def move_focus(self, target):
        for handler in list(self.handlers):
            handler(target)


@pytest.fixture
def focus_source():
    return FakeFocusSource()


@pytest.fixture
def page_locks():
    return []


@pytest.fixture
def controller(focus_source, page_locks):
    return ModalStackController(focus_source=focus_source, on_page_lock=page_locks.append)


def test_layer_formula():
    assert layer_for(1) == BASE_LAYER + LAYER_STEP == 1050
    assert layer_for(3) == 1070


def test_first_dialog_layers(controller):
    dialog = FakeDialog("a")

    entry = controller.dialog_shown(dialog)

    assert controller.open_count == 1
    assert (dialog.layer, dialog.backdrop_layer) == (1050, 1049)
    assert entry.layer == 1050


def test_stacked_dialogs_get_increasing_layers(controller):
    dialogs = [FakeDialog(str(i)) for i in range(4)]

    for dialog in dialogs:
        controller.dialog_shown(dialog)

    layers = [d.layer for d in dialogs]
    assert layers == sorted(set(layers))
    assert all(d.backdrop_layer == d.layer - 1 for d in dialogs)
    assert controller.dialogs_in_order() == dialogs


def test_reopening_stacked_dialog_is_a_no_op(controller):
    dialog = FakeDialog("a")
    controller.dialog_shown(dialog)
    controller.dialog_shown(dialog)

    assert controller.open_count == 1
    assert dialog.layer == 1050


@pytest.mark.parametrize("close_order", [(0, 1, 2), (2, 1, 0), (1, 0, 2)])
def test_any_close_order_leaves_count_at_zero(controller, page_locks, close_order):
    dialogs = [FakeDialog(str(i)) for i in range(3)]
    for dialog in dialogs:
        controller.dialog_shown(dialog)

    for index in close_order:
        controller.dialog_hidden(dialogs[index])

    assert controller.open_count == 0
    assert page_locks[-1] is False
    assert not controller.focus_listener_installed


def test_count_never_goes_negative(controller):
    controller.dialog_hidden(FakeDialog("never shown"))
    assert controller.open_count == 0


def test_count_is_not_reset_between_openings(controller):
    first, second = FakeDialog("a"), FakeDialog("b")
    controller.dialog_shown(first)
    controller.dialog_shown(second)
    controller.dialog_hidden(first)

    third = FakeDialog("c")
    controller.dialog_shown(third)

    assert controller.open_count == 2
    assert third.layer == 1060


def test_page_lock_held_while_any_dialog_open(controller, page_locks):
    first, second = FakeDialog("a"), FakeDialog("b")
    controller.dialog_shown(first)
    controller.dialog_shown(second)
    controller.dialog_hidden(second)

    assert page_locks == [True, True, True]

    controller.dialog_hidden(first)
    assert page_locks[-1] is False


def test_focus_trap_pulls_focus_back(controller, focus_source):
    dialog = FakeDialog("a")
    inside = object()
    dialog.children.add(inside)
    controller.dialog_shown(dialog)

    focus_source.move_focus(inside)
    assert dialog.focus_calls == 0

    focus_source.move_focus(object())
    assert dialog.focus_calls == 1

    focus_source.move_focus(None)
    assert dialog.focus_calls == 1


def test_single_focus_listener_targets_top_dialog(controller, focus_source):
    lower, upper = FakeDialog("lower"), FakeDialog("upper")
    controller.dialog_shown(lower)
    controller.dialog_shown(upper)

    assert len(focus_source.handlers) == 1
    assert controller.focus_target is upper

    focus_source.move_focus(lower)
    assert upper.focus_calls == 1
    assert lower.focus_calls == 0


def test_closing_engaged_dialog_retargets_focus(controller, focus_source):
    lower, upper = FakeDialog("lower"), FakeDialog("upper")
    controller.dialog_shown(lower)
    controller.dialog_shown(upper)

    controller.dialog_hidden(upper)

    assert controller.focus_target is lower
    assert len(focus_source.handlers) == 1

    controller.dialog_hidden(lower)
    assert controller.focus_target is None
    assert focus_source.handlers == []


def test_works_without_focus_source():
    controller = ModalStackController()
    dialog = FakeDialog("a")
    controller.dialog_shown(dialog)
    assert controller.focus_target is dialog
    assert not controller.focus_listener_installed
    assert not controller.handle_focus_in(None)


def test_stack_membership(controller):
    dialog = FakeDialog("a")
    assert not controller.is_stacked(dialog)
    assert controller.entry_for(dialog) is None

    controller.dialog_shown(dialog)
    assert controller.is_stacked(dialog)
    assert controller.entry_for(dialog).backdrop_layer == 1049

    controller.dialog_hidden(dialog)
    assert not controller.is_stacked(dialog)
