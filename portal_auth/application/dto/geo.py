from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class GeoIpRecord:
    country: str | None
    region: str | None
    city: str | None
    latitude: float | None
    longitude: float | None
    raw: dict[str, Any] = field(default_factory=dict)
