"""Label counting the windows in the scratchpad."""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, List, Mapping, Optional

log = logging.getLogger(__name__)


def _as_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _child(node: Any, index: int) -> Any:
    if isinstance(node, Mapping):
        children = node.get("nodes")
        if isinstance(children, list) and len(children) > index:
            return children[index]
    return None


def _floating_nodes(tree: Any) -> List[Any]:
    scratch = _child(_child(tree, 0), 0)
    if isinstance(scratch, Mapping):
        nodes = scratch.get("floating_nodes")
        if isinstance(nodes, list):
            return nodes
    return []


class Scratchpad:
    """Counts scratchpad windows from a tree reply and renders a label."""

    def __init__(self, config: Optional[Mapping[str, Any]] = None) -> None:
        self.config = dict(config or {})
        fmt = self.config.get("format")
        self.format = fmt if isinstance(fmt, str) else "{icon} {count}"
        tfmt = self.config.get("tooltip-format")
        self.tooltip_format = tfmt if isinstance(tfmt, str) else "{app}: {title}"
        show_empty = self.config.get("show-empty")
        self.show_empty = show_empty if isinstance(show_empty, bool) else False
        tooltip = self.config.get("tooltip")
        self.tooltip_enabled = tooltip if isinstance(tooltip, bool) else True
        self.tooltip_text = ""
        self.count = 0
        self._lock = threading.Lock()

    def on_tree(self, tree: Any) -> None:
        """Update the count and tooltip from a GET_TREE reply."""
        try:
            data = json.loads(tree) if isinstance(tree, (str, bytes)) else tree
            windows = _floating_nodes(data)
            with self._lock:
                self.count = len(windows)
                if self.tooltip_enabled:
                    self.tooltip_text = "\n".join(
                        self.tooltip_format.format(
                            app=_as_string(w.get("app_id")), title=_as_string(w.get("name"))
                        )
                        for w in windows
                    )
        except (ValueError, KeyError, IndexError, AttributeError) as exc:
            log.error("Scratchpad: %s", exc)

    def _icon(self) -> str:
        icons = self.config.get("format-icons")
        if isinstance(icons, Mapping):
            icons = icons.get("default")
        if isinstance(icons, list) and icons:
            return _as_string(icons[min(self.count, len(icons) - 1)])
        if isinstance(icons, str):
            return icons
        return ""

    @property
    def is_empty(self) -> bool:
        """True when the scratchpad holds no windows (the "empty" style class)."""
        return self.count == 0

    @property
    def tooltip(self) -> Optional[str]:
        """Tooltip markup, or None when hidden or disabled."""
        if not (self.count or self.show_empty) or not self.tooltip_enabled:
            return None
        return self.tooltip_text

    def render(self) -> Optional[str]:
        """Label markup, or None when the label is hidden."""
        with self._lock:
            if not (self.count or self.show_empty):
                return None
            return self.format.format(icon=self._icon(), count=self.count)