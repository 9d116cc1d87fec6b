"""Tray host that tracks registered items, and the tray that lays them out."""

from __future__ import annotations

import itertools
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Tuple

log = logging.getLogger(__name__)

DEFAULT_ITEM_PATH = "/StatusNotifierItem"
DEFAULT_ICON_SIZE = 16


def split_service(service: str) -> Tuple[str, str]:
    """Split a registered service into bus name and object path."""
    index = service.find("/")
    if index != -1:
        return service[:index], service[index:]
    return service, DEFAULT_ITEM_PATH


def _is_uint(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


@dataclass
class TrayItem:
    """One item shown in the tray, with the settings it takes from the config."""

    bus_name: str
    object_path: str
    icon_size: int = DEFAULT_ICON_SIZE
    scroll_threshold: float = 0.0
    show_passive: bool = False

    @classmethod
    def from_config(cls, bus_name: str, object_path: str, config: Mapping[str, Any]) -> "TrayItem":
        item = cls(bus_name, object_path)
        if _is_uint(config.get("icon-size")):
            item.icon_size = config["icon-size"]
        threshold = config.get("smooth-scrolling-threshold")
        if isinstance(threshold, (int, float)) and not isinstance(threshold, bool):
            item.scroll_threshold = float(threshold)
        if isinstance(config.get("show-passive-items"), bool):
            item.show_passive = config["show-passive-items"]
        return item


class TrayHost:
    """Keeps the items announced by the watcher and reports additions and removals."""

    def __init__(
        self,
        host_id: int,
        config: Optional[Mapping[str, Any]] = None,
        on_add: Optional[Callable[[TrayItem], None]] = None,
        on_remove: Optional[Callable[[TrayItem], None]] = None,
        pid: Optional[int] = None,
    ) -> None:
        pid = os.getpid() if pid is None else pid
        self.id = host_id
        self.bus_name = f"org.kde.StatusNotifierHost-{pid}-{host_id}"
        self.object_path = f"/StatusNotifierHost/{host_id}"
        self.config = dict(config or {})
        self.items: List[TrayItem] = []
        self._on_add = on_add
        self._on_remove = on_remove

    def _find(self, bus_name: str, object_path: str) -> Optional[TrayItem]:
        return next(
            (i for i in self.items if i.bus_name == bus_name and i.object_path == object_path),
            None,
        )

    def add_registered_item(self, service: str) -> Optional[TrayItem]:
        """Add an item unless it is already known; return the new item or None."""
        bus_name, object_path = split_service(service)
        if self._find(bus_name, object_path) is not None:
            return None
        item = TrayItem.from_config(bus_name, object_path, self.config)
        self.items.append(item)
        if self._on_add is not None:
            self._on_add(item)
        return item

    def item_unregistered(self, service: str) -> Optional[TrayItem]:
        """Remove the item for ``service``; return it, or None if unknown."""
        item = self._find(*split_service(service))
        if item is None:
            return None
        if self._on_remove is not None:
            self._on_remove(item)
        self.items.remove(item)
        return item

    def name_vanished(self) -> None:
        """The watcher went away: forget every item."""
        self.items.clear()


class Tray:
    """A box of tray items, shown only while it holds any."""

    _host_ids = itertools.count(0)

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        vertical: bool = False,
        pid: Optional[int] = None,
    ) -> None:
        self.config = dict(config or {})
        self.vertical = vertical
        self.spacing = self.config["spacing"] if _is_uint(self.config.get("spacing")) else 0
        self.children: List[TrayItem] = []
        self.host = TrayHost(next(Tray._host_ids), self.config, self.on_add, self.on_remove, pid)

    def on_add(self, item: TrayItem) -> None:
        if self.config.get("reverse-direction") is True:
            self.children.insert(0, item)
        else:
            self.children.append(item)

    def on_remove(self, item: TrayItem) -> None:
        if item in self.children:
            self.children.remove(item)

    def visible(self) -> bool:
        """The tray is shown only when it has items."""
        return bool(self.children)