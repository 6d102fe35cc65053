from __future__ import annotations

import re

from portal_auth.domain.entities.device import UserAgentInfo


UNKNOWN_BROWSER = "UnknownBrowser"
UNKNOWN_OS = "UnknownOS"

# Order matters: Edge and Opera UAs also carry "Chrome/", Chrome UAs carry "Safari".
_BROWSER_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("Edge", re.compile(r"Edg/([0-9.]+)")),
    ("Opera", re.compile(r"OPR/([0-9.]+)")),
    ("Chrome", re.compile(r"Chrome/([0-9.]+)")),
    ("Firefox", re.compile(r"Firefox/([0-9.]+)")),
    ("Safari", re.compile(r"Version/([0-9.]+)\s+(?:Mobile/\S+\s+)?Safari")),
    ("IE", re.compile(r"Trident.*rv:([0-9.]+)")),
)

_OS_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("Windows", re.compile(r"Windows NT [0-9.]+")),
    ("iOS", re.compile(r"iPhone OS [0-9_]+|iPad; CPU OS [0-9_]+")),
    ("macOS", re.compile(r"Mac OS X [0-9_]+")),
    ("Android", re.compile(r"Android [0-9.]+")),
    ("Linux", re.compile(r"Linux")),
)

_DEVICE_TYPE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("tablet", re.compile(r"Tablet|iPad", re.IGNORECASE)),
    ("mobile", re.compile(r"Mobi|Android", re.IGNORECASE)),
)

_MODEL_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("iPhone", re.compile(r"iPhone")),
    ("iPad", re.compile(r"iPad")),
    ("Android Device", re.compile(r"Android")),
)

_VENDOR_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("Apple", re.compile(r"Apple(?!WebKit)|iPhone|iPad")),
    ("Samsung", re.compile(r"Samsung|SM-[A-Z0-9]+", re.IGNORECASE)),
    ("Huawei", re.compile(r"Huawei", re.IGNORECASE)),
)


def _first_match(patterns, user_agent: str, default: str) -> str:
    for name, pattern in patterns:
        if pattern.search(user_agent):
            return name
    return default


def parse_user_agent(user_agent: str | None) -> UserAgentInfo:
    ua = user_agent or ""

    browser_name = UNKNOWN_BROWSER
    browser_version = ""
    for name, pattern in _BROWSER_PATTERNS:
        match = pattern.search(ua)
        if match:
            browser_name = name
            browser_version = match.group(1)
            break

    return UserAgentInfo(
        browser_name=browser_name,
        browser_version=browser_version,
        os_name=_first_match(_OS_PATTERNS, ua, UNKNOWN_OS),
        device_type=_first_match(_DEVICE_TYPE_PATTERNS, ua, "desktop"),
        device_vendor=_first_match(_VENDOR_PATTERNS, ua, ""),
        device_model=_first_match(_MODEL_PATTERNS, ua, ""),
    )
