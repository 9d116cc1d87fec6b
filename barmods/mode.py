"""Label showing the compositor's current binding mode."""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Mapping, Optional

log = logging.getLogger(__name__)

_MARKUP_ESCAPES = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", "'": "&apos;", '"': "&quot;"}
)


def _escape_markup(text: str) -> str:
    return text.translate(_MARKUP_ESCAPES)


class ModeLabel:
    """Keeps the active binding mode and renders it with a format string."""

    def __init__(self, config: Optional[Mapping[str, Any]] = None) -> None:
        self.config = dict(config or {})
        fmt = self.config.get("format")
        self.format = fmt if isinstance(fmt, str) else "{}"
        tooltip = self.config.get("tooltip")
        self.tooltip_enabled = tooltip if isinstance(tooltip, bool) else True
        self.mode = ""
        self._lock = threading.Lock()

    def on_event(self, payload: Any) -> None:
        """Handle a mode event; malformed payloads are logged."""
        try:
            data = json.loads(payload) if isinstance(payload, (str, bytes)) else payload
            with self._lock:
                change = data.get("change")
                if change != "default":
                    change = "" if change is None else str(change)
                    self.mode = change if data.get("pango_markup") else _escape_markup(change)
                else:
                    self.mode = ""
        except (ValueError, AttributeError) as exc:
            log.error("Mode: %s", exc)

    @property
    def tooltip(self) -> Optional[str]:
        """Tooltip text, or None when hidden or disabled."""
        if not self.mode or not self.tooltip_enabled:
            return None
        return self.mode

    def render(self) -> Optional[str]:
        """Label markup, or None when no mode is active and the label is hidden."""
        with self._lock:
            if not self.mode:
                return None
            return self.format.format(self.mode)