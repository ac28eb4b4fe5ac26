"""Local mirror of one hood's capability values."""
from __future__ import annotations

from typing import Dict, Mapping, Optional


class CapabilityShadow:
    """Last-known integer value per capability key.

    Reads of unset keys fall back to the per-key default given at
    construction, then to 0. ``last_nonzero`` remembers the most recent
    nonzero value of the tracked key, whether it came from an intent or a
    poll, so it can be restored after the value drops to 0.
    """

    def __init__(
        self,
        initial: Optional[Mapping[str, int]] = None,
        *,
        defaults: Optional[Mapping[str, int]] = None,
        track_key: Optional[str] = None,
        track_default: int = 0,
    ) -> None:
        self._values: Dict[str, int] = {}
        self._defaults: Dict[str, int] = dict(defaults or {})
        self._track_key = track_key
        self.last_nonzero = track_default
        if initial:
            self.merge(initial)

    def get(self, key: str, default: Optional[int] = None) -> int:
        if key in self._values:
            return self._values[key]
        if default is not None:
            return default
        return self._defaults.get(key, 0)

    def set(self, key: str, value: int) -> None:
        value = int(value)
        self._values[key] = value
        if key == self._track_key and value:
            self.last_nonzero = value

    def merge(self, partial: Mapping[str, int]) -> None:
        for key, value in partial.items():
            self.set(key, value)

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def as_dict(self) -> Dict[str, int]:
        return dict(self._values)
