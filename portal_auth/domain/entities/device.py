from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class UserAgentInfo:
    browser_name: str
    browser_version: str
    os_name: str
    device_type: str
    device_vendor: str
    device_model: str


@dataclass(frozen=True)
class GeoLocation:
    country: str | None = None
    province: str | None = None
    district: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    geo: dict[str, Any] | None = None


@dataclass(frozen=True)
class DeviceFingerprint:
    device_id: str
    device_name: str
    user_agent: str | None
    ip_address: str | None
    metadata: dict[str, Any]
    location: GeoLocation = field(default_factory=GeoLocation)
