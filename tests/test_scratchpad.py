from barmods.scratchpad import Scratchpad


def tree(*windows):
    return {"nodes": [{"nodes": [{"floating_nodes": list(windows)}]}]}


WIN_A = {"app_id": "foot", "name": "shell"}
WIN_B = {"app_id": "firefox", "name": "web"}


def test_counts_floating_nodes():
    pad = Scratchpad({"format": "{count}"})
    pad.on_tree(tree(WIN_A, WIN_B))
    assert pad.count == 2
    assert pad.render() == "2"
    assert not pad.is_empty


def test_tooltip_lists_windows():
    pad = Scratchpad()
    pad.on_tree(tree(WIN_A, WIN_B))
    assert pad.tooltip == "foot: shell\nfirefox: web"


def test_hidden_when_empty():
    pad = Scratchpad()
    pad.on_tree(tree())
    assert pad.render() is None
    assert pad.is_empty
    assert pad.tooltip is None


def test_show_empty():
    pad = Scratchpad({"show-empty": True, "format": "{count}"})
    pad.on_tree(tree())
    assert pad.render() == "0"


def test_icons_indexed_by_count():
    pad = Scratchpad({"format-icons": ["", "one", "many"]})
    pad.on_tree(tree(WIN_A))
    assert pad.render() == "one 1"
    pad.on_tree(tree(WIN_A, WIN_B, WIN_A, WIN_B))
    assert pad.render() == "many 4"


def test_missing_structure_counts_zero():
    pad = Scratchpad()
    pad.on_tree('{"nodes": []}')
    assert pad.count == 0


def test_tooltip_disabled():
    pad = Scratchpad({"tooltip": False})
    pad.on_tree(tree(WIN_A))
    assert pad.tooltip is None
    assert pad.tooltip_text == ""


def test_custom_tooltip_format():
    pad = Scratchpad({"tooltip-format": "{title} ({app})"})
    pad.on_tree(tree(WIN_A))
    assert pad.tooltip == "shell (foot)"