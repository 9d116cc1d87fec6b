"""Keyboard layout label fed by the compositor's input events."""

from __future__ import annotations

import json
import logging
import os
import threading
import xml.etree.ElementTree as ElementTree
from dataclasses import dataclass, replace
from enum import IntFlag
from typing import Any, Dict, Iterable, List, Mapping, Optional

log = logging.getLogger(__name__)

XKB_LAYOUT_NAMES_KEY = "xkb_layout_names"
XKB_ACTIVE_LAYOUT_NAME_KEY = "xkb_active_layout_name"
DEFAULT_RULES = "/usr/share/X11/xkb/rules/evdev.xml"
EXOTIC_RULES = "/usr/share/X11/xkb/rules/evdev.extras.xml"


@dataclass
class Layout:
    """One keyboard layout as listed by the XKB registry."""

    full_name: str = ""
    short_name: str = ""
    variant: str = ""
    short_description: str = ""

    def country_flag(self) -> str:
        """Regional-indicator flag for a two-letter lowercase short name, else ""."""
        raw = self.short_name.encode("utf-8")
        if len(raw) != 2:
            return ""
        letters = [(byte + 0x45) & 0xFF for byte in raw]
        if any(value < 0xA6 or value > 0xBF for value in letters):
            return ""
        return "".join(chr(0x1F1E6 + value - 0xA6) for value in letters)


class _Shown(IntFlag):
    SHORT_NAME = 1
    SHORT_DESCRIPTION = 2


def _text(item: Optional[ElementTree.Element], tag: str) -> Optional[str]:
    if item is None:
        return None
    found = item.find(tag)
    return None if found is None or found.text is None else found.text.strip()


def _parse_rules(path: str, briefs: Dict[str, str]) -> List[Layout]:
    root = ElementTree.parse(path).getroot()
    layouts = []
    for layout_el in root.findall("./layoutList/layout"):
        item = layout_el.find("configItem")
        name = _text(item, "name") or ""
        brief = _text(item, "shortDescription")
        if brief is not None:
            briefs.setdefault(name, brief)
        layouts.append(Layout(_text(item, "description") or "", name, "",
                              brief if brief is not None else briefs.get(name, "")))
        for variant_el in layout_el.findall("./variantList/variant"):
            vitem = variant_el.find("configItem")
            vbrief = _text(vitem, "shortDescription")
            layouts.append(Layout(_text(vitem, "description") or "", name,
                                  _text(vitem, "name") or "",
                                  vbrief if vbrief is not None else briefs.get(name, "")))
    return layouts


def load_layouts(path: Optional[str] = None) -> List[Layout]:
    """Read layouts from an XKB rules XML file, or from the system rules."""
    briefs: Dict[str, str] = {}
    if path is not None:
        return _parse_rules(path, briefs)
    layouts = _parse_rules(DEFAULT_RULES, briefs)
    if os.path.exists(EXOTIC_RULES):
        layouts.extend(_parse_rules(EXOTIC_RULES, briefs))
    return layouts


def _as_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class LanguageLabel:
    """Tracks the active keyboard layout and renders it."""

    def __init__(self, config: Optional[Mapping[str, Any]] = None) -> None:
        self.config = dict(config or {})
        fmt = self.config.get("format")
        self.format = fmt if isinstance(fmt, str) else "{}"
        self.is_variant_displayed = "{variant}" in self.format
        self.displayed_short_flag = _Shown(0)
        if "{}" in self.format or "{short}" in self.format:
            self.displayed_short_flag |= _Shown.SHORT_NAME
        if "{shortDescription}" in self.format:
            self.displayed_short_flag |= _Shown.SHORT_DESCRIPTION
        self.tooltip_format = (
            _as_string(self.config["tooltip-format"]) if "tooltip-format" in self.config else ""
        )
        tooltip = self.config.get("tooltip")
        self.tooltip_enabled = tooltip if isinstance(tooltip, bool) else True
        self.layouts_map: Dict[str, Layout] = {}
        self.layout = Layout()
        self.style_class = ""
        self._lock = threading.Lock()

    def init_layouts_map(self, used_layouts: List[str], layouts: Iterable[Layout]) -> None:
        """Collect the used layouts, numbering short names shared by several of them."""
        found_by_short_names: Dict[str, List[Layout]] = {}
        for layout in layouts:
            if layout.full_name not in used_layouts:
                continue
            if not self.is_variant_displayed:
                found_by_short_names.setdefault(layout.short_name, []).append(layout)
            self.layouts_map.setdefault(layout.full_name, replace(layout))

        if self.is_variant_displayed or not found_by_short_names:
            return

        numbers: Dict[str, int] = {}
        for used_name in used_layouts:
            used = self.layouts_map.get(used_name)
            if used is None:
                continue
            if len(found_by_short_names.get(used.short_name, [])) < 2:
                continue
            numbers.setdefault(used.short_name, 1)
            if self.displayed_short_flag:
                number = numbers[used.short_name]
                numbers[used.short_name] = number + 1
                used.short_name = f"{used.short_name}{number}"
                used.short_description = f"{used.short_description}{number}"

    def set_current_layout(self, current_layout: str) -> None:
        self.layout = self.layouts_map.setdefault(current_layout, Layout())
        self.style_class = self.layout.short_name

    def on_inputs(self, payload: Any, layouts: Optional[Iterable[Layout]] = None) -> None:
        """Handle a GET_INPUTS reply, using the device with the most layouts."""
        try:
            data = json.loads(payload) if isinstance(payload, (str, bytes)) else payload
            with self._lock:
                devices = list(data)
                max_id, max_size = 0, 0
                for index, device in enumerate(devices):
                    size = len(device.get(XKB_LAYOUT_NAMES_KEY) or [])
                    if size > max_size:
                        max_id, max_size = index, size
                device = devices[max_id] if devices else {}
                used = [_as_string(n) for n in device.get(XKB_LAYOUT_NAMES_KEY) or []]
                self.init_layouts_map(used, layouts if layouts is not None else load_layouts())
                self.set_current_layout(_as_string(device.get(XKB_ACTIVE_LAYOUT_NAME_KEY)))
        except (ValueError, TypeError, AttributeError, KeyError, OSError,
                ElementTree.ParseError) as exc:
            log.error("Language: %s", exc)

    def on_event(self, payload: Any) -> None:
        """Handle an input event; keyboards switch the current layout."""
        try:
            data = json.loads(payload) if isinstance(payload, (str, bytes)) else payload
            with self._lock:
                device = data.get("input") or {}
                if _as_string(device.get("type")) == "keyboard":
                    self.set_current_layout(_as_string(device.get(XKB_ACTIVE_LAYOUT_NAME_KEY)))
        except (ValueError, AttributeError) as exc:
            log.error("Language: %s", exc)

    def _format(self, template: str) -> str:
        layout = self.layout
        values = (layout.short_name, layout.short_description, layout.full_name,
                  layout.variant, layout.country_flag())
        return template.format(
            *values,
            short=values[0], shortDescription=values[1], long=values[2],
            variant=values[3], flag=values[4],
        ).strip()

    @property
    def tooltip(self) -> Optional[str]:
        """Tooltip markup, or None when tooltips are disabled."""
        if not self.tooltip_enabled:
            return None
        with self._lock:
            return self._format(self.tooltip_format or self.format)

    def render(self) -> str:
        """Label markup for the current layout."""
        with self._lock:
            return self._format(self.format)