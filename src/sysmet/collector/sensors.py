"""Temperature sensor collector."""

from __future__ import annotations

import psutil

from .base import BaseCollector


class TemperatureCollector(BaseCollector):
    """Collects every temperature sensor reading in degrees Celsius.

    Labels are ``<chip>`` or ``<chip>/<label>`` so sensors sharing a chip
    stay distinct. Platforms without sensor support yield an empty mapping.
    """

    @property
    def name(self) -> str:
        return "temperatures"

    def collect(self) -> dict[str, float]:
        if not hasattr(psutil, "sensors_temperatures"):
            return {}
        result: dict[str, float] = {}
        for chip, entries in (psutil.sensors_temperatures() or {}).items():
            for idx, entry in enumerate(entries):
                label = f"{chip}/{entry.label}" if entry.label else chip
                if label in result:
                    label = f"{label}#{idx}"
                result[label] = float(entry.current)
        return result
