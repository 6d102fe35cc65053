from __future__ import annotations

import logging

from portal_auth.application.dto.auth import DeviceContext
from portal_auth.application.ports.geoip_port import GeoIpPort
from portal_auth.domain.entities.device import DeviceFingerprint, GeoLocation, UserAgentInfo
from portal_auth.domain.services.device_fingerprint import (
    MAX_DEVICE_ID_LENGTH,
    MAX_DEVICE_NAME_LENGTH,
    build_device_metadata,
    derive_device_id,
    derive_device_name,
    is_geolocatable,
    normalize_ip,
)
from portal_auth.domain.services.user_agent import UNKNOWN_BROWSER, UNKNOWN_OS, parse_user_agent


logger = logging.getLogger(__name__)

_FALLBACK_USER_AGENT = UserAgentInfo(
    browser_name=UNKNOWN_BROWSER,
    browser_version="",
    os_name=UNKNOWN_OS,
    device_type="desktop",
    device_vendor="",
    device_model="",
)


class DeviceFingerprinter:
    def __init__(self, *, geoip_port: GeoIpPort | None):
        self._geoip_port = geoip_port

    def lookup_geo_location(self, ip: str | None) -> GeoLocation:
        if not is_geolocatable(ip) or self._geoip_port is None:
            return GeoLocation()
        try:
            record = self._geoip_port.lookup(ip.strip())
        except Exception as exc:
            logger.warning("device_fingerprinter: geoip lookup failed ip=%s error=%s", ip, exc)
            return GeoLocation()
        if record is None:
            return GeoLocation()
        return GeoLocation(
            country=record.country,
            province=record.region,
            district=record.city,
            latitude=record.latitude,
            longitude=record.longitude,
            geo=dict(record.raw) or None,
        )

    def fingerprint(self, context: DeviceContext, *, location: GeoLocation | None = None) -> DeviceFingerprint:
        try:
            info = parse_user_agent(context.user_agent)
        except Exception as exc:
            logger.warning("device_fingerprinter: user agent parsing failed error=%s", exc)
            info = _FALLBACK_USER_AGENT

        ip_address = normalize_ip(context.ip)
        device_id = (context.device_id or "").strip()
        if not device_id or len(device_id) > MAX_DEVICE_ID_LENGTH:
            device_id = derive_device_id(
                user_agent=context.user_agent,
                ip_address=ip_address,
                info=info,
            )
        device_name = (context.device_name or "").strip() or derive_device_name(info)
        return DeviceFingerprint(
            device_id=device_id,
            device_name=device_name[:MAX_DEVICE_NAME_LENGTH],
            user_agent=context.user_agent,
            ip_address=ip_address,
            metadata=build_device_metadata(user_agent=context.user_agent, info=info),
            location=location if location is not None else GeoLocation(),
        )
