from __future__ import annotations

import hashlib
import ipaddress
from typing import Any

from portal_auth.domain.entities.device import UserAgentInfo


DEVICE_ID_LENGTH = 32
MAX_DEVICE_ID_LENGTH = 128
MAX_DEVICE_NAME_LENGTH = 255
MAX_IP_ADDRESS_LENGTH = 64

_NON_ROUTABLE_NETWORKS = (
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fc00::/7"),
    ipaddress.ip_network("fe80::/10"),
)


def derive_device_id(*, user_agent: str | None, ip_address: str | None, info: UserAgentInfo) -> str:
    source = "|".join(
        (
            user_agent or "",
            ip_address or "",
            info.device_vendor,
            info.device_model,
            info.browser_name,
            info.os_name,
        )
    )
    return hashlib.sha256(source.encode("utf-8")).hexdigest()[:DEVICE_ID_LENGTH]


def derive_device_name(info: UserAgentInfo) -> str:
    hardware = " ".join(part for part in (info.device_vendor, info.device_model) if part)
    if hardware:
        return hardware
    return f"{info.browser_name} on {info.os_name}"


def build_device_metadata(*, user_agent: str | None, info: UserAgentInfo) -> dict[str, Any]:
    return {
        "browser": {"name": info.browser_name, "version": info.browser_version},
        "os": {"name": info.os_name},
        "device": {
            "vendor": info.device_vendor,
            "model": info.device_model,
            "type": info.device_type,
        },
        "raw": {"user_agent": user_agent},
    }


def normalize_ip(ip: str | None) -> str | None:
    """Canonical form of a client address, or None when it does not parse."""
    if not ip:
        return None
    try:
        normalized = str(ipaddress.ip_address(ip.strip()))
    except ValueError:
        return None
    # IPv6 scope ids are unbounded
    if len(normalized) > MAX_IP_ADDRESS_LENGTH:
        return None
    return normalized


def is_geolocatable(ip: str | None) -> bool:
    """False for empty, unparsable, loopback and private-range addresses."""
    normalized = normalize_ip(ip)
    if normalized is None:
        return False
    address = ipaddress.ip_address(normalized)
    return not any(
        address.version == network.version and address in network
        for network in _NON_ROUTABLE_NETWORKS
    )
