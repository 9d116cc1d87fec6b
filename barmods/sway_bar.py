"""Visibility logic for a bar driven by the compositor's bar IPC events."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional

from barmods.ipc import IpcError, IpcType

log = logging.getLogger(__name__)

MODE_INVISIBLE = "invisible"
_SECTIONS = ("modules-left", "modules-center", "modules-right")


@dataclass
class SwaybarConfig:
    """Bar settings reported by the compositor."""

    id: str = ""
    mode: str = ""
    hidden_state: str = ""


def _as_json(payload: Any) -> Any:
    if isinstance(payload, (str, bytes)):
        return json.loads(payload)
    return payload


def parse_config(payload: Mapping[str, Any]) -> SwaybarConfig:
    """Pick the string fields id, mode and hidden_state out of a payload."""
    conf = SwaybarConfig()
    for field in ("id", "mode", "hidden_state"):
        value = payload.get(field)
        if isinstance(value, str):
            setattr(conf, field, value)
    return conf


def is_module_enabled(bar_config: Mapping[str, Any], name: str) -> bool:
    """True if any configured module name starts with ``name``."""
    for section in _SECTIONS:
        modules = bar_config.get(section)
        if isinstance(modules, list):
            if any(isinstance(m, str) and m.startswith(name) for m in modules):
                return True
    return False


def subscription_events(bar_config: Mapping[str, Any]) -> List[str]:
    """Events the bar must subscribe to, given the configured modules."""
    events = ["bar_state_update", "barconfig_update"]
    has_mode = is_module_enabled(bar_config, "sway/mode")
    has_workspaces = is_module_enabled(bar_config, "sway/workspaces")
    if has_mode:
        events.append("mode")
    if has_workspaces:
        events.append("workspace")
    if has_mode or has_workspaces:
        events.append("binding")
    return events


class BarVisibility:
    """Tracks why a hidden bar should be shown and derives its mode."""

    def __init__(
        self,
        bar_id: str,
        bar_config: Optional[Mapping[str, Any]] = None,
        set_mode: Optional[Callable[[str], None]] = None,
        request_workspaces: Optional[Callable[[], None]] = None,
    ) -> None:
        self.bar_id = bar_id
        self.bar_config = dict(bar_config or {})
        self.modifier_reset = str(self.bar_config.get("modifier-reset", "press"))
        self.config = SwaybarConfig()
        self.visible_by_modifier = False
        self.visible_by_mode = False
        self.visible_by_urgency = False
        self.modifier_no_action = False
        self.mode = ""
        self._set_mode = set_mode
        self._request_workspaces = request_workspaces

    def on_initial_config(self, payload: Any) -> str:
        """Apply the reply to the initial bar config request."""
        data = _as_json(payload)
        if not data.get("success", True):
            raise IpcError(str(data.get("error", "Unknown error")))
        return self.on_config_update(parse_config(data))

    def on_ipc_event(self, event_type: int, payload: Any) -> None:
        """React to one subscribed event; errors are logged, not raised."""
        try:
            data = _as_json(payload)
            self._dispatch(int(event_type), data)
        except (ValueError, TypeError, AttributeError, KeyError) as exc:
            log.error("BarIpcClient::onEvent %s", exc)

    def _dispatch(self, event_type: int, data: Any) -> None:
        if event_type == IpcType.EVENT_WORKSPACE:
            if "change" in data:
                if data["change"] == "urgent":
                    current = data.get("current") or {}
                    if current.get("urgent"):
                        self.on_urgency_update(True)
                    elif self.visible_by_urgency and self._request_workspaces:
                        self._request_workspaces()
                self.modifier_no_action = False
        elif event_type == IpcType.EVENT_MODE:
            if "change" in data:
                self.on_mode_update(data["change"] != "default")
                self.modifier_no_action = False
        elif event_type == IpcType.EVENT_BINDING:
            self.modifier_no_action = False
        elif event_type in (IpcType.EVENT_BAR_STATE_UPDATE, IpcType.EVENT_BARCONFIG_UPDATE):
            bar_id = data.get("id")
            if isinstance(bar_id, str) and bar_id != self.bar_id:
                log.debug("swaybar ipc: ignore event for %s", bar_id)
                return
            if "visible_by_modifier" in data:
                self.on_visibility_update(bool(data["visible_by_modifier"]))
            else:
                self.on_config_update(parse_config(data))

    def on_workspaces(self, payload: Any) -> str:
        """Handle a workspace list: keep the bar shown while any is urgent."""
        workspaces = _as_json(payload)
        urgent = any(ws.get("urgent") for ws in workspaces)
        return self.on_urgency_update(urgent)

    def on_config_update(self, config: SwaybarConfig) -> str:
        log.info(
            "config update for %s: id %s, mode %s, hidden_state %s",
            self.bar_id, config.id, config.mode, config.hidden_state,
        )
        self.config = config
        return self.update()

    def on_mode_update(self, visible_by_mode: bool) -> str:
        self.visible_by_mode = visible_by_mode
        return self.update()

    def on_visibility_update(self, visible_by_modifier: bool) -> str:
        self.visible_by_modifier = visible_by_modifier
        if visible_by_modifier:
            self.modifier_no_action = True
        if (self.modifier_reset == "press" and self.visible_by_modifier) or (
            self.modifier_reset == "release"
            and not self.visible_by_modifier
            and self.modifier_no_action
        ):
            self.visible_by_urgency = False
            self.visible_by_mode = False
        return self.update()

    def on_urgency_update(self, visible_by_urgency: bool) -> str:
        self.visible_by_urgency = visible_by_urgency
        return self.update()

    def update(self) -> str:
        """Recompute the bar mode, pass it on and return it."""
        visible = self.visible_by_modifier or self.visible_by_mode or self.visible_by_urgency
        if self.config.mode == "invisible":
            visible = False
        elif self.config.mode != "hide" or self.config.hidden_state != "hide":
            visible = True
        self.mode = self.config.mode if visible else MODE_INVISIBLE
        if self._set_mode is not None:
            self._set_mode(self.mode)
        return self.mode