"""
IP-to-location lookups backed by a MaxMind GeoLite2 City database.
"""

from __future__ import annotations

import logging

import geoip2.database
import geoip2.errors

from portal_auth.application.dto.geo import GeoIpRecord
from portal_auth.application.ports.geoip_port import GeoIpPort


logger = logging.getLogger(__name__)


class MaxMindGeoIpClient(GeoIpPort):
    def __init__(self, *, database_path: str):
        self._database_path = database_path
        self._reader = geoip2.database.Reader(database_path)
        logger.info("geoip_client: database loaded from %s", database_path)

    def lookup(self, ip: str) -> GeoIpRecord | None:
        try:
            response = self._reader.city(ip)
        except (geoip2.errors.AddressNotFoundError, ValueError):
            logger.debug("geoip_client: no record for ip=%s", ip)
            return None

        subdivision = response.subdivisions.most_specific
        return GeoIpRecord(
            country=response.country.iso_code,
            region=subdivision.iso_code or subdivision.name,
            city=response.city.name,
            latitude=response.location.latitude,
            longitude=response.location.longitude,
            raw={
                "country": response.country.iso_code,
                "country_name": response.country.name,
                "region": subdivision.iso_code,
                "city": response.city.name,
                "ll": [response.location.latitude, response.location.longitude],
                "time_zone": response.location.time_zone,
                "accuracy_radius": response.location.accuracy_radius,
            },
        )
