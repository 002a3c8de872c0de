from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Classroom:
    """Domain entity: a bookable physical or virtual room."""

    classroom_id: int
    name: str
    capacity: int
    devices: tuple[Mapping[str, Any], ...] = field(default_factory=tuple)
    location: Optional[str] = None

    def device_types(self) -> set[str]:
        return {str(d.get("type", "unknown")) for d in self.devices}
