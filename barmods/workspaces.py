"""Workspace buttons driven by the compositor's workspace list."""

from __future__ import annotations

import json
import logging
import re
import string
import threading
from functools import cmp_to_key
from typing import Any, Dict, List, Mapping, Optional

log = logging.getLogger(__name__)

INT32_MAX = 2**31 - 1
NO_AUTO_BACK_AND_FORTH = "--no-auto-back-and-forth"
WORKSPACE_SWITCH_CMD = 'workspace {} "{}"'
PERSISTENT_WORKSPACE_SWITCH_CMD = (
    'workspace {} "{}"; move workspace to output "{}"; workspace {} "{}"'
)
_LEADING_DIGITS = re.compile(r"[0-9]+")
_NEXT_DIRECTIONS = ("down", "right")
_PREV_DIRECTIONS = ("up", "left")


def convert_workspace_name_to_num(name: str) -> int:
    """Number of a workspace from its leading digits, or -1 if it has none."""
    if not name or name[0] not in string.digits:
        return -1
    match = _LEADING_DIGITS.match(name)
    if match is None:
        return -1
    number = int(match.group())
    if number > INT32_MAX:
        return -1
    return number


def trim_workspace_name(name: str) -> str:
    """Drop everything up to and including the first colon."""
    _, sep, rest = name.partition(":")
    return rest if sep else name


def _truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return False


def _as_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    return 0


class SwayWorkspaces:
    """Keeps the ordered workspace list of one output and builds its buttons."""

    def __init__(self, config: Optional[Mapping[str, Any]] = None, output_name: str = "") -> None:
        self.config = dict(config or {})
        self.output_name = output_name
        self.workspaces: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def _icons(self, key: str) -> Mapping[str, Any]:
        icons = self.config.get(key)
        return icons if isinstance(icons, Mapping) else {}

    def _persistent(self, payload: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        p_workspaces = self.config.get("persistent_workspaces")
        if not isinstance(p_workspaces, Mapping):
            return []
        added = []
        present = {_as_string(node.get("name")) for node in payload}
        for p_w_name in sorted(p_workspaces):
            if p_w_name in present:
                continue  # already displayed by some bar
            outputs = p_workspaces[p_w_name]
            if isinstance(outputs, list) and outputs:
                if any(_as_string(o) == self.output_name for o in outputs):
                    added.append({
                        "name": p_w_name,
                        "target_output": self.output_name,
                        "num": convert_workspace_name_to_num(p_w_name),
                    })
            else:
                added.append({
                    "name": p_w_name,
                    "target_output": "",
                    "num": convert_workspace_name_to_num(p_w_name),
                })
        return added

    def _less(self, lhs: Mapping[str, Any], rhs: Mapping[str, Any]) -> bool:
        lname, rname = _as_string(lhs.get("name")), _as_string(rhs.get("name"))
        left, right = lhs["sort"], rhs["sort"]
        if left == right or _truthy(self.config.get("alphabetical_sort")):
            return lname < rname
        return left < right

    def _compare(self, lhs: Mapping[str, Any], rhs: Mapping[str, Any]) -> int:
        if self._less(lhs, rhs):
            return -1
        if self._less(rhs, lhs):
            return 1
        return 0

    def on_workspaces(self, payload: Any) -> List[Dict[str, Any]]:
        """Rebuild the ordered list from a GET_WORKSPACES reply and return it."""
        try:
            data = json.loads(payload) if isinstance(payload, (str, bytes)) else payload
            all_outputs = _truthy(self.config.get("all-outputs"))
            with self._lock:
                workspaces = [
                    dict(ws) for ws in data
                    if all_outputs or _as_string(ws.get("output")) == self.output_name
                ]
                workspaces.extend(self._persistent(data))
                max_num = max([-1] + [_as_int(ws.get("num")) for ws in workspaces])
                for ws in workspaces:
                    num = _as_int(ws.get("num"))
                    if num > -1:
                        ws["sort"] = num
                    else:
                        max_num += 1
                        ws["sort"] = max_num
                workspaces.sort(key=cmp_to_key(self._compare))
                self.workspaces = workspaces
        except (ValueError, TypeError, AttributeError, KeyError) as exc:
            log.error("Workspaces: %s", exc)
        return list(self.workspaces)

    def icon_for(self, name: str, node: Mapping[str, Any]) -> str:
        """Icon for a workspace, looked up in format-icons."""
        icons = self._icons("format-icons")
        legacy = self._icons("format_icons")
        for key in (name, "urgent", "focused", "visible", "default"):
            if key in ("focused", "visible", "urgent"):
                if isinstance(icons.get(key), str) and _truthy(node.get(key)):
                    return icons[key]
            elif isinstance(legacy.get("persistent"), str) and isinstance(
                node.get("target_output"), str
            ):
                return _as_string(icons.get("persistent"))
            elif isinstance(icons.get(key), str):
                return icons[key]
            elif isinstance(icons.get(trim_workspace_name(key)), str):
                return icons[trim_workspace_name(key)]
        return name

    def cycle_workspace(self, index: int, prev: bool) -> str:
        """Name of the workspace before or after the one at ``index``."""
        workspaces = self.workspaces
        wrap_disabled = _truthy(self.config.get("disable-scroll-wraparound"))
        if prev and index == 0 and not wrap_disabled:
            return _as_string(workspaces[-1].get("name"))
        if prev and index != 0:
            index -= 1
        elif not prev and index != len(workspaces):
            index += 1
        if not prev and index == len(workspaces):
            if wrap_disabled:
                index -= 1
            else:
                return _as_string(workspaces[0].get("name"))
        return _as_string(workspaces[index].get("name"))

    def scroll_command(self, direction: str) -> Optional[str]:
        """IPC command to switch workspace on a scroll, or None if nothing to do."""
        if direction in _NEXT_DIRECTIONS:
            prev = False
        elif direction in _PREV_DIRECTIONS:
            prev = True
        else:
            return None
        with self._lock:
            index = next(
                (i for i, ws in enumerate(self.workspaces) if _truthy(ws.get("focused"))), None
            )
            if index is None:
                return None
            name = self.cycle_workspace(index, prev)
            if name == _as_string(self.workspaces[index].get("name")):
                return None
        return WORKSPACE_SWITCH_CMD.format(NO_AUTO_BACK_AND_FORTH, name)

    def click_command(self, node: Mapping[str, Any]) -> Optional[str]:
        """IPC command run when a workspace button is pressed, or None if disabled."""
        if _truthy(self.config.get("disable-click")):
            return None
        name = _as_string(node.get("name"))
        target = node.get("target_output")
        if isinstance(target, str):
            return PERSISTENT_WORKSPACE_SWITCH_CMD.format(
                NO_AUTO_BACK_AND_FORTH, name, target, NO_AUTO_BACK_AND_FORTH, name
            )
        flag = NO_AUTO_BACK_AND_FORTH if _truthy(self.config.get("disable-auto-back-and-forth")) else ""
        return WORKSPACE_SWITCH_CMD.format(flag, name)

    def _classes(self, ws: Mapping[str, Any]) -> frozenset:
        classes = {key for key in ("focused", "visible", "urgent") if _truthy(ws.get(key))}
        if isinstance(ws.get("target_output"), str):
            classes.add("persistent")
        output = ws.get("output")
        if isinstance(output, str) and output == self.output_name:
            classes.add("current_output")
        return frozenset(classes)

    def labels(self) -> List[Dict[str, Any]]:
        """One entry per button in display order: name, label, classes, markup, visible."""
        fmt = self.config.get("format")
        markup = not _truthy(self.config.get("disable-markup"))
        current_only = _truthy(self.config.get("current-only"))
        result = []
        with self._lock:
            for ws in self.workspaces:
                name = _as_string(ws.get("name"))
                text = name
                if isinstance(fmt, str):
                    text = fmt.format(
                        icon=self.icon_for(name, ws),
                        value=name,
                        name=trim_workspace_name(name),
                        index=_as_string(ws.get("num")),
                    )
                result.append({
                    "name": name,
                    "label": text,
                    "classes": self._classes(ws),
                    "markup": markup,
                    "visible": _truthy(ws.get("focused")) if current_only else True,
                })
        return result