import logging

import pytest

from barmods.workspace_manager import (
    PROTOCOL_STATE_ACTIVE,
    PROTOCOL_STATE_HIDDEN,
    PROTOCOL_STATE_URGENT,
    WorkspaceManager,
    WorkspaceState,
)


def _named(manager, group, names):
    result = []
    for name in names:
        ws = group.create_workspace()
        ws.handle_name(name)
        result.append(ws)
    return result


def test_default_sort_is_by_name():
    manager = WorkspaceManager({}, "eDP-1")
    group = manager.create_group("eDP-1")
    _named(manager, group, ["b", "c", "a"])
    assert [w.name for w in manager.sorted_workspaces()] == ["a", "b", "c"]


def test_sort_by_id_when_name_and_coordinates_disabled():
    manager = WorkspaceManager({"sort-by-name": False, "sort-by-coordinates": False})
    group = manager.create_group("x")
    created = _named(manager, group, ["b", "c", "a"])
    assert manager.sorted_workspaces() == created


def test_sort_by_number():
    manager = WorkspaceManager({"sort-by-number": True})
    group = manager.create_group()
    _named(manager, group, ["10", "9", "2"])
    assert [w.name for w in manager.sorted_workspaces()] == ["2", "9", "10"]


def test_sort_by_coordinates_breaks_name_ties():
    manager = WorkspaceManager({})
    group = manager.create_group()
    first, second = _named(manager, group, ["w", "w2"])
    second.handle_name("w")  # drops the first as a duplicate
    assert [w.id for w in group.workspaces] == [second.id]
    third = group.create_workspace()
    third.handle_name("v")
    second.handle_coordinates([1, 0])
    third.handle_coordinates([0, 1])
    assert manager.compare(third, second) is True
    assert manager.compare(second, third) is False


def test_coordinates_only_sort():
    manager = WorkspaceManager({"sort-by-name": False})
    group = manager.create_group()
    a, b = _named(manager, group, ["a", "b"])
    a.handle_coordinates([1, 0])
    b.handle_coordinates([0, 1])
    assert manager.sorted_workspaces() == [b, a]
    assert group.sort_workspaces() == [b, a]


def test_persistent_placeholders_and_duplicates():
    config = {"persistent_workspaces": {"3": [], "1": ["eDP-1"], "2": ["HDMI-A-1"]}}
    manager = WorkspaceManager(config, "eDP-1")
    group = manager.create_group("eDP-1")
    real = group.create_workspace()
    assert group.persistent_workspaces == ["1", "3"]
    assert [w.name for w in group.workspaces] == ["", "1", "3"]
    assert all(w.is_empty for w in group.workspaces[1:])
    real.handle_name("1")
    assert [w.name for w in group.workspaces] == ["1", "3"]
    assert real.persistent is True
    real.handle_remove()
    assert real in group.workspaces
    assert real.state == WorkspaceState.EMPTY
    assert "persistent" in real.classes


def test_persistent_ignored_with_all_outputs():
    manager = WorkspaceManager({"all-outputs": True, "persistent_workspaces": {"1": []}})
    group = manager.create_group("any")
    group.create_workspace()
    assert group.persistent_workspaces == []
    assert len(group.workspaces) == 1


def test_non_persistent_remove():
    manager = WorkspaceManager({})
    group = manager.create_group()
    ws = group.create_workspace()
    ws.handle_name("a")
    ws.handle_remove()
    assert group.workspaces == []


def test_handle_state_flags():
    manager = WorkspaceManager({})
    group = manager.create_group()
    ws = group.create_workspace()
    ws.handle_state([PROTOCOL_STATE_ACTIVE, PROTOCOL_STATE_HIDDEN, 77])
    assert ws.is_active and ws.is_hidden
    assert not ws.is_urgent and not ws.is_empty
    assert ws.classes == frozenset({"active", "hidden"})
    ws.handle_state([PROTOCOL_STATE_URGENT])
    assert ws.state == WorkspaceState.URGENT


def test_need_to_sort_on_changes():
    manager = WorkspaceManager({})
    group = manager.create_group()
    ws = group.create_workspace()
    group.need_to_sort = False
    ws.handle_name("")
    assert group.need_to_sort is False
    ws.handle_coordinates([3])
    assert group.need_to_sort is True
    group.sort_workspaces()
    assert group.need_to_sort is False


def test_icons_and_label():
    config = {"format": "{icon}", "format-icons": {"active": "A", "default": "D", "web": "W"}}
    manager = WorkspaceManager(config)
    group = manager.create_group()
    web, other = _named(manager, group, ["web", "other"])
    assert web.label() == "W"
    assert other.label() == "D"
    web.handle_state([PROTOCOL_STATE_ACTIVE])
    assert web.label() == "A"


def test_icon_falls_back_to_name_and_default_format():
    manager = WorkspaceManager({})
    group = manager.create_group()
    (ws,) = _named(manager, group, ["mail"])
    assert ws.icon() == "mail"
    assert ws.label() == "mail"


def test_click_actions(caplog):
    config = {"on-click": "activate", "on-click-right": "close", "on-click-middle": "bogus"}
    manager = WorkspaceManager(config)
    ws = manager.create_group().create_workspace()
    assert ws.click_action(1) == "activate"
    assert ws.click_action(3) == "close"
    with caplog.at_level(logging.WARNING):
        assert ws.click_action(2) is None
    assert "Unknown action bogus" in caplog.text
    assert ws.click_action(8) is None


def test_active_only_and_visibility():
    manager = WorkspaceManager({"active-only": True}, "eDP-1")
    assert manager.creation_delayed is True
    group = manager.create_group("eDP-1")
    a, b = _named(manager, group, ["a", "b"])
    b.handle_state([PROTOCOL_STATE_ACTIVE])
    assert manager.sorted_workspaces() == [b]
    assert b.shown and not a.shown
    group.handle_output_leave()
    assert not b.shown


def test_group_visibility_depends_on_output():
    manager = WorkspaceManager({}, "eDP-1")
    group = manager.create_group("HDMI-A-1")
    assert group.is_visible is False
    group.handle_output_enter("eDP-1")
    assert group.is_visible is True


def test_remove_group(caplog):
    manager = WorkspaceManager({})
    first = manager.create_group()
    second = manager.create_group()
    assert first.id < second.id
    first.handle_remove()
    assert manager.groups == [second]
    with caplog.at_level(logging.WARNING):
        manager.remove_group(first.id)
    assert "Can't find group" in caplog.text
    assert manager.groups == [second]


@pytest.mark.parametrize("count", [1, 3, 5])
def test_workspace_ids_unique_and_increasing(count):
    manager = WorkspaceManager({})
    groups = [manager.create_group(), manager.create_group()]
    ids = [g.create_workspace().id for _ in range(count) for g in groups]
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)