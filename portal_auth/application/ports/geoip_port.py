from __future__ import annotations

from typing import Protocol

from portal_auth.application.dto.geo import GeoIpRecord


class GeoIpPort(Protocol):
    def lookup(self, ip: str) -> GeoIpRecord | None:
        ...
