"""Temperature label read from a thermal zone or hwmon sensor file."""

from __future__ import annotations

import logging
import math
import os
import re
from typing import Any, Dict, Mapping, Optional

log = logging.getLogger(__name__)

DEFAULT_FORMAT = "{temperatureC}°C"
DEFAULT_INTERVAL = 10
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def resolve_sensor_path(config: Mapping[str, Any]) -> str:
    """Path of the file holding the temperature in millidegrees Celsius."""
    hwmon = config.get("hwmon-path")
    if isinstance(hwmon, str):
        return hwmon
    hwmon_abs = config.get("hwmon-path-abs")
    filename = config.get("input-filename")
    if isinstance(hwmon_abs, str) and isinstance(filename, str):
        try:
            entries = sorted(os.listdir(hwmon_abs))
        except OSError as exc:
            raise RuntimeError(f"Can't open {hwmon_abs}") from exc
        if not entries:
            raise RuntimeError(f"Can't open {hwmon_abs}")
        return os.path.join(hwmon_abs, entries[0]) + "/" + filename
    zone = config.get("thermal-zone")
    zone = zone if _is_int(zone) else 0
    return f"/sys/class/thermal/thermal_zone{zone}/temp"


def read_temperature(path: str) -> float:
    """Read a sensor file and return degrees Celsius."""
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            line = handle.readline()
    except OSError as exc:
        raise RuntimeError(f"Can't open {path}") from exc
    match = _LEADING_INT.match(line)
    return (int(match.group(1)) if match else 0) / 1000.0


def _to_u16(value: float) -> int:
    rounded = math.floor(abs(value) + 0.5)
    return int(math.copysign(rounded, value)) % 0x10000


class Temperature:
    """A temperature sensor with its label settings."""

    def __init__(self, config: Optional[Mapping[str, Any]] = None) -> None:
        self.config = dict(config or {})
        self.path = resolve_sensor_path(self.config)
        try:
            with open(self.path, "rb"):
                pass
        except OSError as exc:
            raise RuntimeError(f"Can't open {self.path}") from exc
        fmt = self.config.get("format")
        self.format = fmt if isinstance(fmt, str) else DEFAULT_FORMAT
        interval = self.config.get("interval")
        self.interval = interval if _is_int(interval) else DEFAULT_INTERVAL
        tooltip = self.config.get("tooltip")
        self.tooltip_enabled = tooltip if isinstance(tooltip, bool) else True

    def read(self) -> float:
        """Current temperature in degrees Celsius."""
        return read_temperature(self.path)

    def is_critical(self, temperature_c: int) -> bool:
        threshold = self.config.get("critical-threshold")
        return _is_int(threshold) and temperature_c >= threshold

    def _icon(self, value: int, max_value: int) -> str:
        icons = self.config.get("format-icons")
        if isinstance(icons, Mapping):
            icons = icons.get("default")
        if isinstance(icons, list) and icons:
            top = max_value if max_value else 100
            index = int(value / (top / len(icons)))
            index = min(max(index, 0), len(icons) - 1)
            item = icons[index]
            return item if isinstance(item, str) else str(item)
        if isinstance(icons, str):
            return icons
        return ""

    def render(self, temperature: float) -> Dict[str, Any]:
        """Label, tooltip and critical flag for a temperature in degrees Celsius.

        The label is None when the format in effect is empty and the label is hidden.
        """
        values = {
            "temperatureC": _to_u16(temperature),
            "temperatureF": _to_u16(temperature * 1.8 + 32),
            "temperatureK": _to_u16(temperature + 273.15),
        }
        critical = self.is_critical(values["temperatureC"])
        fmt = self.format
        if critical:
            critical_fmt = self.config.get("format-critical")
            if isinstance(critical_fmt, str):
                fmt = critical_fmt
        if not fmt:
            return {"label": None, "tooltip": None, "critical": critical}

        threshold = self.config.get("critical-threshold")
        max_temp = threshold if _is_int(threshold) else 0
        label = fmt.format(icon=self._icon(values["temperatureC"], max_temp), **values)
        tooltip = None
        if self.tooltip_enabled:
            tooltip_fmt = self.config.get("tooltip-format")
            tooltip_fmt = tooltip_fmt if isinstance(tooltip_fmt, str) else DEFAULT_FORMAT
            tooltip = tooltip_fmt.format(**values)
        return {"label": label, "tooltip": tooltip, "critical": critical}