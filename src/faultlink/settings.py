"""Tunable numbers of the connection search.

Three settings, addressed by dotted key:

``selector.equiv_dist``
    km band within which candidate distances count as equal and the scalar
    value decides (default selector chain).
``threads.max``
    Upper bound on worker threads for :meth:`build_connections`.
``threads.reserved_cpus``
    CPUs left free for the calling process.

>>> from faultlink.settings import DEFAULT_SETTINGS
>>> DEFAULT_SETTINGS["selector.equiv_dist"]
2.0
>>> DEFAULT_SETTINGS.replace({"selector.equiv_dist": 0.5})["selector.equiv_dist"]
0.5
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Optional

__all__ = [
    "SettingsRegistry",
    "DEFAULT_SETTINGS",
]


class SettingsRegistry:
    """Read-only set of connection-search settings.

    Only the keys present at construction exist; :meth:`replace` derives a
    modified copy and rejects keys it does not know.
    """

    def __init__(self, values: Mapping[str, float], *, name: str = "custom"):
        self._values = MappingProxyType({k: float(v) for k, v in values.items()})
        self.name = name

    def __getitem__(self, key: str) -> float:
        return self._values[key]

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def get(self, key: str, default: Optional[float] = None) -> Optional[float]:
        return self._values.get(key, default)

    def __setitem__(self, key: str, value: float):
        raise TypeError(f"Settings are read-only; use replace({{{key!r}: ...}})")

    def replace(self, overrides: Mapping[str, float], *,
                name: Optional[str] = None) -> "SettingsRegistry":
        unknown = sorted(set(overrides) - set(self._values))
        if unknown:
            raise KeyError(f"Unknown setting(s) {unknown}; known: {sorted(self._values)}")
        merged: Dict[str, float] = dict(self._values)
        merged.update(overrides)
        return SettingsRegistry(merged, name=name or f"{self.name}+")

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v:g}" for k, v in self._values.items())
        return f"SettingsRegistry({self.name!r}: {body})"


DEFAULT_SETTINGS = SettingsRegistry(
    {
        "selector.equiv_dist": 2.0,
        "threads.max": 31,
        "threads.reserved_cpus": 2,
    },
    name="production",
)
