import json

import pytest

from barmods.workspaces import (
    NO_AUTO_BACK_AND_FORTH,
    SwayWorkspaces,
    convert_workspace_name_to_num,
    trim_workspace_name,
)


@pytest.mark.parametrize(
    "name, expected",
    [("1", 1), ("12:web", 12), ("web", -1), ("", -1), ("99999999999", -1), ("0", 0)],
)
def test_convert_workspace_name_to_num(name, expected):
    assert convert_workspace_name_to_num(name) == expected


def test_trim_workspace_name():
    assert trim_workspace_name("1:web") == "web"
    assert trim_workspace_name("web") == "web"
    assert trim_workspace_name("1:a:b") == "a:b"


def _payload():
    return [
        {"name": "2", "num": 2, "output": "eDP-1", "focused": True},
        {"name": "1", "num": 1, "output": "eDP-1"},
        {"name": "web", "num": -1, "output": "eDP-1"},
        {"name": "x", "num": 1, "output": "HDMI-A-1"},
    ]


def _names(workspaces):
    return [ws["name"] for ws in workspaces]


def test_filters_by_output_and_sorts():
    mod = SwayWorkspaces({}, "eDP-1")
    result = mod.on_workspaces(_payload())
    assert _names(result) == ["1", "2", "web"]


def test_accepts_json_text():
    mod = SwayWorkspaces({}, "eDP-1")
    assert _names(mod.on_workspaces(json.dumps(_payload()))) == ["1", "2", "web"]


def test_all_outputs_keeps_every_workspace():
    mod = SwayWorkspaces({"all-outputs": True}, "eDP-1")
    names = _names(mod.on_workspaces(_payload()))
    assert sorted(names) == ["1", "2", "web", "x"]
    assert names[-1] == "web"


def test_persistent_workspaces_inserted():
    config = {"persistent_workspaces": {"3": [], "5": ["HDMI-A-1"], "4": ["eDP-1"], "1": []}}
    mod = SwayWorkspaces(config, "eDP-1")
    result = mod.on_workspaces(_payload())
    assert _names(result) == ["1", "2", "3", "4", "web"]
    by_name = {ws["name"]: ws for ws in result}
    assert by_name["3"]["target_output"] == ""
    assert by_name["4"]["target_output"] == "eDP-1"
    assert "target_output" not in by_name["1"]


def test_alphabetical_sort():
    payload = [
        {"name": "b", "num": -1, "output": "o"},
        {"name": "c", "num": -1, "output": "o"},
        {"name": "a", "num": -1, "output": "o"},
    ]
    mod = SwayWorkspaces({"alphabetical_sort": True}, "o")
    assert _names(mod.on_workspaces(payload)) == ["a", "b", "c"]
    plain = SwayWorkspaces({}, "o")
    assert _names(plain.on_workspaces(payload)) == ["b", "c", "a"]


def _three(config=None):
    mod = SwayWorkspaces(config or {}, "o")
    mod.on_workspaces([{"name": str(n), "num": n, "output": "o"} for n in (1, 2, 3)])
    return mod


def test_cycle_wraps_around():
    mod = _three()
    assert mod.cycle_workspace(0, True) == "3"
    assert mod.cycle_workspace(2, False) == "1"
    assert mod.cycle_workspace(1, True) == "1"
    assert mod.cycle_workspace(1, False) == "3"


def test_cycle_without_wraparound():
    mod = _three({"disable-scroll-wraparound": True})
    assert mod.cycle_workspace(0, True) == "1"
    assert mod.cycle_workspace(2, False) == "3"


def test_scroll_command():
    mod = SwayWorkspaces({}, "o")
    mod.on_workspaces([
        {"name": "1", "num": 1, "output": "o", "focused": True},
        {"name": "2", "num": 2, "output": "o"},
    ])
    down = mod.scroll_command("down")
    assert NO_AUTO_BACK_AND_FORTH in down
    assert down.endswith('"2"')
    assert mod.scroll_command("up").endswith('"2"')
    assert mod.scroll_command("sideways") is None


def test_scroll_command_none_without_focus_or_change():
    mod = SwayWorkspaces({"disable-scroll-wraparound": True}, "o")
    mod.on_workspaces([{"name": "1", "num": 1, "output": "o", "focused": True}])
    assert mod.scroll_command("down") is None
    empty = SwayWorkspaces({}, "o")
    empty.on_workspaces([{"name": "1", "num": 1, "output": "o"}])
    assert empty.scroll_command("down") is None


def test_click_command():
    mod = SwayWorkspaces({}, "o")
    plain = mod.click_command({"name": "2"})
    assert plain.endswith('"2"')
    assert NO_AUTO_BACK_AND_FORTH not in plain
    persistent = mod.click_command({"name": "4", "target_output": "eDP-1"})
    assert '"eDP-1"' in persistent
    assert persistent.count(NO_AUTO_BACK_AND_FORTH) == 2
    forced = SwayWorkspaces({"disable-auto-back-and-forth": True}, "o")
    assert NO_AUTO_BACK_AND_FORTH in forced.click_command({"name": "2"})
    assert SwayWorkspaces({"disable-click": True}, "o").click_command({"name": "2"}) is None


def test_icon_for():
    config = {"format-icons": {"1": "one", "focused": "F", "default": "D", "web": "W"}}
    mod = SwayWorkspaces(config, "o")
    assert mod.icon_for("1", {}) == "one"
    assert mod.icon_for("3", {"focused": True}) == "F"
    assert mod.icon_for("3", {}) == "D"
    assert mod.icon_for("2:web", {}) == "W"
    assert SwayWorkspaces({}, "o").icon_for("7", {}) == "7"


def test_labels_format_and_classes():
    config = {"format": "{index}|{name}|{value}", "format-icons": {}}
    mod = SwayWorkspaces(config, "o")
    mod.on_workspaces([
        {"name": "1:web", "num": 1, "output": "o", "focused": True, "urgent": True},
        {"name": "2", "num": 2, "output": "o", "visible": True},
    ])
    labels = mod.labels()
    assert [entry["label"] for entry in labels] == ["1|web|1:web", "2|2|2"]
    assert labels[0]["classes"] == {"focused", "urgent", "current_output"}
    assert labels[1]["classes"] == {"visible", "current_output"}
    assert all(entry["markup"] and entry["visible"] for entry in labels)


def test_labels_current_only():
    mod = SwayWorkspaces({"current-only": True, "disable-markup": True}, "o")
    mod.on_workspaces([
        {"name": "1", "num": 1, "output": "o", "focused": True},
        {"name": "2", "num": 2, "output": "o"},
    ])
    assert [entry["visible"] for entry in mod.labels()] == [True, False]
    assert not any(entry["markup"] for entry in mod.labels())