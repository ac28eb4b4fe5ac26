"""Models for the Pando hood integration."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .const import KEY_FAN_SPEED, KEY_POWER


@dataclass
class PandoThing:
    """One device ("thing") as listed by the PGA IoT cloud."""

    uid: str
    description: str = ""
    enabled: bool = True
    online: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)
    capabilities: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "PandoThing":
        capabilities: Dict[str, int] = {}
        for key, value in (raw.get("capabilities") or {}).items():
            try:
                capabilities[key] = int(value)
            except (TypeError, ValueError):
                # non-numeric capability values are not mirrored
                continue
        return cls(
            uid=str(raw["uid"]),
            description=raw.get("description") or "",
            enabled=bool(raw.get("enabled", True)),
            online=bool(raw.get("online", False)),
            metadata=dict(raw.get("metadata") or {}),
            capabilities=capabilities,
        )

    def meta_prop(self, key: str) -> Optional[str]:
        """Return a string property from the metadata.

        Property entries look like ``{"value": "..."}`` while capability
        entries carry ``data_type``/``min_value``/``max_value`` instead.
        """
        entry = self.metadata.get(key)
        if isinstance(entry, str):
            return entry
        if isinstance(entry, dict) and isinstance(entry.get("value"), str):
            return entry["value"]
        return None

    @property
    def display_name(self) -> str:
        return self.meta_prop("property.device_name") or self.uid

    @property
    def model(self) -> Optional[str]:
        model = self.metadata.get("model")
        return model if isinstance(model, str) else None

    @property
    def firmware(self) -> str:
        return self.meta_prop("property.device.fw.version") or "1.0"

    @property
    def looks_like_hood(self) -> bool:
        model = (self.model or "").lower()
        device_type = (self.meta_prop("property.device.type") or "").lower()
        return (
            "hood" in model
            or "hood" in device_type
            or KEY_FAN_SPEED in self.capabilities
            or KEY_POWER in self.capabilities
        )


def filter_hoods(things: List[PandoThing]) -> List[PandoThing]:
    """Keep hood-like things; the PGA cloud only serves hoods, so fall back to all."""
    hoods = [thing for thing in things if thing.looks_like_hood]
    return hoods or list(things)
