"""Registry of tray hosts and items that announce themselves on the session bus."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

log = logging.getLogger(__name__)

WATCHER_BUS_NAME = "org.kde.StatusNotifierWatcher"
WATCHER_OBJECT_PATH = "/StatusNotifierWatcher"
DEFAULT_HOST_PATH = "/StatusNotifierHost"
DEFAULT_ITEM_PATH = "/StatusNotifierItem"
MAX_NAME_LENGTH = 255

_UNIQUE_ELEMENT = re.compile(r"[A-Za-z0-9_-]+")
_WELL_KNOWN_ELEMENT = re.compile(r"[A-Za-z_-][A-Za-z0-9_-]*")


class WatcherError(ValueError):
    """A registration request was refused."""


class WatchKind(Enum):
    HOST = "host"
    ITEM = "item"


@dataclass(frozen=True)
class Watch:
    """One registered host or item."""

    kind: WatchKind
    service: str
    bus_name: str
    object_path: str

    @property
    def address(self) -> str:
        return self.bus_name + self.object_path


def is_bus_name(name: str) -> bool:
    """Whether ``name`` is a valid unique or well-known bus name."""
    if not name or len(name) > MAX_NAME_LENGTH:
        return False
    if name.startswith(":"):
        elements = name[1:].split(".")
        pattern = _UNIQUE_ELEMENT
    else:
        elements = name.split(".")
        pattern = _WELL_KNOWN_ELEMENT
    if len(elements) < 2:
        return False
    return all(pattern.fullmatch(element) for element in elements)


def _resolve(service: str, sender: Optional[str], default_path: str) -> tuple:
    if service.startswith("/"):
        return sender or "", service
    return service, default_path


class StatusNotifierWatcher:
    """Keeps the registered hosts and items and announces changes through callbacks."""

    def __init__(
        self,
        on_host_registered: Optional[Callable[[], None]] = None,
        on_item_registered: Optional[Callable[[str], None]] = None,
        on_item_unregistered: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.hosts: List[Watch] = []
        self.items: List[Watch] = []
        self.is_host_registered = False
        self._on_host_registered = on_host_registered
        self._on_item_registered = on_item_registered
        self._on_item_unregistered = on_item_unregistered

    @staticmethod
    def _find(watches: List[Watch], bus_name: str, object_path: str) -> Optional[Watch]:
        return next(
            (w for w in watches if w.bus_name == bus_name and w.object_path == object_path),
            None,
        )

    def _emit_host_registered(self) -> None:
        if self._on_host_registered is not None:
            self._on_host_registered()

    def register_host(self, service: str, sender: Optional[str] = None) -> Watch:
        """Register a host; a service starting with "/" is a path on ``sender``."""
        bus_name, object_path = _resolve(service, sender, DEFAULT_HOST_PATH)
        if not is_bus_name(bus_name):
            raise WatcherError(f"D-Bus bus name '{bus_name}' is not valid")
        if self._find(self.hosts, bus_name, object_path) is not None:
            raise WatcherError(
                f"Status Notifier Host with bus name '{bus_name}' and object path "
                f"'{object_path}' is already registered"
            )
        watch = Watch(WatchKind.HOST, service, bus_name, object_path)
        self.hosts.insert(0, watch)
        if not self.is_host_registered:
            self.is_host_registered = True
            self._emit_host_registered()
        return watch

    def register_item(self, service: str, sender: Optional[str] = None) -> Watch:
        """Register an item; registering the same one twice only logs a warning."""
        bus_name, object_path = _resolve(service, sender, DEFAULT_ITEM_PATH)
        if not is_bus_name(bus_name):
            raise WatcherError(f"D-Bus bus name '{bus_name}' is not valid")
        existing = self._find(self.items, bus_name, object_path)
        if existing is not None:
            log.warning(
                "Status Notifier Item with bus name '%s' and object path '%s' is already registered",
                bus_name,
                object_path,
            )
            return existing
        watch = Watch(WatchKind.ITEM, service, bus_name, object_path)
        self.items.insert(0, watch)
        if self._on_item_registered is not None:
            self._on_item_registered(watch.address)
        return watch

    def name_vanished(self, bus_name: str) -> List[Watch]:
        """Drop every host and item owned by ``bus_name``; return what was dropped."""
        removed = [w for w in self.hosts + self.items if w.bus_name == bus_name]
        for watch in removed:
            if watch.kind is WatchKind.HOST:
                self.hosts.remove(watch)
                if not self.hosts:
                    self.is_host_registered = False
                    self._emit_host_registered()
            else:
                self.items.remove(watch)
                if self._on_item_unregistered is not None:
                    self._on_item_unregistered(watch.address)
        return removed

    def registered_items(self) -> List[str]:
        """Addresses of the registered items, most recent first."""
        return [w.address for w in self.items]