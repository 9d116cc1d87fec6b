"""Workspace groups and workspaces announced by the compositor's workspace protocol."""

from __future__ import annotations

import itertools
import logging
import re
from enum import IntFlag
from functools import cmp_to_key
from typing import Any, Dict, Iterable, List, Mapping, Optional

log = logging.getLogger(__name__)

DEFAULT_FORMAT = "{name}"
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_CLICK_KEYS = {1: "on-click", 2: "on-click-middle", 3: "on-click-right"}
_KNOWN_ACTIONS = ("activate", "close")


class WorkspaceState(IntFlag):
    """State bits of a workspace."""

    NONE = 0
    ACTIVE = 1
    URGENT = 2
    HIDDEN = 4
    EMPTY = 8


# State values as they arrive on the wire.
PROTOCOL_STATE_ACTIVE = 0
PROTOCOL_STATE_URGENT = 1
PROTOCOL_STATE_HIDDEN = 2
_PROTOCOL_STATES = {
    PROTOCOL_STATE_ACTIVE: WorkspaceState.ACTIVE,
    PROTOCOL_STATE_URGENT: WorkspaceState.URGENT,
    PROTOCOL_STATE_HIDDEN: WorkspaceState.HIDDEN,
}


def _as_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _leading_int(text: str) -> Optional[int]:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else None


def _bool_setting(config: Mapping[str, Any], key: str) -> bool:
    value = config.get(key)
    return value if isinstance(value, bool) else False


class Workspace:
    """One workspace; those without a protocol handle are persistent placeholders."""

    def __init__(
        self,
        group: "WorkspaceGroup",
        workspace_id: int,
        name: str = "",
        has_handle: bool = True,
    ) -> None:
        self.group = group
        self.id = workspace_id
        self.name = name
        self.has_handle = has_handle
        self.state = WorkspaceState.NONE if has_handle else WorkspaceState.EMPTY
        self.coordinates: List[int] = []
        self.persistent = False
        fmt = group.manager.config.get("format")
        self.format = fmt if isinstance(fmt, str) else DEFAULT_FORMAT
        self.with_icon = "{icon}" in self.format

    def __repr__(self) -> str:
        return f"Workspace(id={self.id}, name={self.name!r}, state={self.state!r})"

    @property
    def is_active(self) -> bool:
        return bool(self.state & WorkspaceState.ACTIVE)

    @property
    def is_urgent(self) -> bool:
        return bool(self.state & WorkspaceState.URGENT)

    @property
    def is_hidden(self) -> bool:
        return bool(self.state & WorkspaceState.HIDDEN)

    @property
    def is_empty(self) -> bool:
        return bool(self.state & WorkspaceState.EMPTY)

    @property
    def classes(self) -> frozenset:
        """Style classes of the workspace button."""
        flags = (
            (self.is_active, "active"),
            (self.is_urgent, "urgent"),
            (self.is_hidden, "hidden"),
            (self.is_empty, "persistent"),
        )
        return frozenset(name for on, name in flags if on)

    @property
    def shown(self) -> bool:
        """Whether the button is shown on this bar."""
        if not self.group.is_visible:
            return False
        if self.group.manager.active_only:
            return self.is_active or self.is_urgent
        return True

    def handle_name(self, name: str) -> None:
        """Take a new name; adopt persistence and drop a same-named placeholder."""
        if self.name != name:
            self.group.need_to_sort = True
        self.name = name
        log.debug("Workspace %s added to group %s", name, self.group.id)
        if name in self.group.persistent_workspaces:
            self.persistent = True
        duplicate = next(
            (w for w in self.group.workspaces if w.name == name and w.id != self.id), None
        )
        if duplicate is not None:
            self.group.remove_workspace(duplicate.id)

    def handle_state(self, states: Iterable[int]) -> WorkspaceState:
        """Replace the state from protocol state values; unknown values are ignored."""
        state = WorkspaceState.NONE
        for entry in states:
            state |= _PROTOCOL_STATES.get(entry, WorkspaceState.NONE)
        self.state = state
        return state

    def handle_coordinates(self, coordinates: Iterable[int]) -> None:
        coords = list(coordinates)
        if self.coordinates != coords:
            self.group.need_to_sort = True
        self.coordinates = coords

    def handle_remove(self) -> None:
        """The compositor removed the workspace; persistent ones stay as empty."""
        self.has_handle = False
        if not self.persistent:
            self.group.remove_workspace(self.id)
        else:
            self.state = WorkspaceState.EMPTY

    def icon(self) -> str:
        icons = self.group.manager.icons
        if self.is_active and "active" in icons:
            return icons["active"]
        if self.name in icons:
            return icons[self.name]
        if "default" in icons:
            return icons["default"]
        return self.name

    def label(self) -> str:
        """Button markup."""
        return self.format.format(name=self.name, icon=self.icon() if self.with_icon else "")

    def click_action(self, button: int) -> Optional[str]:
        """Request to send for a mouse button: "activate", "close" or None."""
        key = _CLICK_KEYS.get(button)
        action = self.group.manager.config.get(key) if key else None
        if not isinstance(action, str) or not action:
            return None
        if action in _KNOWN_ACTIONS:
            return action
        log.warning("Unknown action %s", action)
        return None


class WorkspaceGroup:
    """Workspaces that share one output."""

    def __init__(self, manager: "WorkspaceManager", group_id: int, output: Optional[str] = None) -> None:
        self.manager = manager
        self.id = group_id
        self.output = output
        self.workspaces: List[Workspace] = []
        self.persistent_workspaces: List[str] = []
        self.persistent_created = False
        self.need_to_sort = False

    @property
    def is_visible(self) -> bool:
        return self.output is not None and (
            self.manager.all_outputs or self.output == self.manager.output_name
        )

    def handle_output_enter(self, output: str) -> None:
        log.debug("Output %s assigned to %s group", output, self.id)
        self.output = output

    def handle_output_leave(self) -> None:
        log.debug("Output %s remove from %s group", self.output, self.id)
        self.output = None

    def handle_remove(self) -> None:
        self.manager.remove_group(self.id)

    def fill_persistent_workspaces(self) -> List[str]:
        """Collect configured persistent workspace names that belong to this bar."""
        config = self.manager.config.get("persistent_workspaces")
        if not isinstance(config, Mapping) or self.manager.all_outputs:
            return list(self.persistent_workspaces)
        for name in sorted(config):
            outputs = config[name]
            if isinstance(outputs, list) and outputs:
                if any(_as_string(o) == self.manager.output_name for o in outputs):
                    self.persistent_workspaces.append(name)
            else:
                self.persistent_workspaces.append(name)
        return list(self.persistent_workspaces)

    def create_workspace(self) -> Workspace:
        """A new workspace announced by the compositor; the first one adds placeholders."""
        workspace = Workspace(self, self.manager.next_workspace_id())
        self.workspaces.append(workspace)
        log.debug("Workspace %s created", workspace.id)
        if not self.persistent_created:
            self.fill_persistent_workspaces()
            for name in self.persistent_workspaces:
                placeholder = Workspace(self, self.manager.next_workspace_id(), name, has_handle=False)
                self.workspaces.append(placeholder)
                log.debug("Workspace %s created", placeholder.id)
            self.persistent_created = True
        return workspace

    def remove_workspace(self, workspace_id: int) -> None:
        for index, workspace in enumerate(self.workspaces):
            if workspace.id == workspace_id:
                del self.workspaces[index]
                return
        log.warning("Can't find workspace with id %s", workspace_id)

    def sort_workspaces(self) -> List[Workspace]:
        self.workspaces.sort(key=self.manager.sort_key)
        self.need_to_sort = False
        return list(self.workspaces)


class WorkspaceManager:
    """All workspace groups seen by one bar, with the configured ordering."""

    def __init__(self, config: Optional[Mapping[str, Any]] = None, output_name: str = "") -> None:
        self.config = dict(config or {})
        self.output_name = output_name
        self.sort_by_name = self.config.get("sort-by-name", True) is not False
        self.sort_by_coordinates = self.config.get("sort-by-coordinates", True) is not False
        self.sort_by_number = _bool_setting(self.config, "sort-by-number")
        self.all_outputs = _bool_setting(self.config, "all-outputs")
        self.active_only = _bool_setting(self.config, "active-only")
        self.creation_delayed = self.active_only
        self.groups: List[WorkspaceGroup] = []
        icons = self.config.get("format-icons")
        self.icons: Dict[str, str] = (
            {str(k): _as_string(v) for k, v in icons.items()} if isinstance(icons, Mapping) else {}
        )
        self._group_ids = itertools.count(1)
        self._workspace_ids = itertools.count(1)

    def next_workspace_id(self) -> int:
        return next(self._workspace_ids)

    def create_group(self, output: Optional[str] = None) -> WorkspaceGroup:
        group = WorkspaceGroup(self, next(self._group_ids), output)
        self.groups.append(group)
        log.debug("Workspace group %s created", group.id)
        return group

    def remove_group(self, group_id: int) -> None:
        for index, group in enumerate(self.groups):
            if group.id == group_id:
                del self.groups[index]
                return
        log.warning("Can't find group with id %s", group_id)

    def compare(self, lhs: Workspace, rhs: Workspace) -> bool:
        """True when ``lhs`` sorts before ``rhs``."""
        if self.sort_by_number:
            left, right = _leading_int(lhs.name), _leading_int(rhs.name)
            if left is not None and right is not None:
                return left < right
        if self.sort_by_name:
            if self.sort_by_coordinates and lhs.name == rhs.name:
                return lhs.coordinates < rhs.coordinates
            return lhs.name < rhs.name
        if self.sort_by_coordinates:
            return lhs.coordinates < rhs.coordinates
        return lhs.id < rhs.id

    def _cmp(self, lhs: Workspace, rhs: Workspace) -> int:
        if self.compare(lhs, rhs):
            return -1
        if self.compare(rhs, lhs):
            return 1
        return 0

    @property
    def sort_key(self):
        return cmp_to_key(self._cmp)

    def sorted_workspaces(self) -> List[Workspace]:
        """Workspaces of all groups in display order (active ones only if so configured)."""
        result = [
            w
            for group in self.groups
            for w in group.workspaces
            if not self.active_only or w.is_active
        ]
        result.sort(key=self.sort_key)
        return result