from __future__ import annotations

from portal_auth.application.dto.auth import DeviceContext
from portal_auth.application.dto.geo import GeoIpRecord
from portal_auth.application.services.device_fingerprinter import DeviceFingerprinter
from portal_auth.domain.entities.device import GeoLocation
from portal_auth.domain.services.device_fingerprint import DEVICE_ID_LENGTH, is_geolocatable
from portal_auth.domain.services.user_agent import UNKNOWN_BROWSER, UNKNOWN_OS, parse_user_agent
from portal_auth.infrastructure.db.models.sessions import CustomerSessionModel
from tests.fakes import FakeGeoIpPort


CHROME_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)
EDGE_WINDOWS = CHROME_WINDOWS + " Edg/124.0.2478.51"
OPERA_MAC = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36 OPR/109.0.0.0"
)
SAFARI_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1"
)
SAFARI_IPAD = (
    "Mozilla/5.0 (iPad; CPU OS 17_4 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1"
)
SAMSUNG_ANDROID = (
    "Mozilla/5.0 (Linux; Android 14; SM-S918B) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Mobile Safari/537.36"
)
FIREFOX_LINUX = "Mozilla/5.0 (X11; Linux x86_64; rv:125.0) Gecko/20100101 Firefox/125.0"


def test_parse_desktop_browsers():
    chrome = parse_user_agent(CHROME_WINDOWS)
    assert (chrome.browser_name, chrome.browser_version) == ("Chrome", "124.0.0.0")
    assert chrome.os_name == "Windows"
    assert chrome.device_type == "desktop"
    assert chrome.device_vendor == ""

    assert parse_user_agent(EDGE_WINDOWS).browser_name == "Edge"
    assert parse_user_agent(OPERA_MAC).browser_name == "Opera"
    assert parse_user_agent(OPERA_MAC).os_name == "macOS"
    assert parse_user_agent(FIREFOX_LINUX).os_name == "Linux"


def test_parse_mobile_devices():
    iphone = parse_user_agent(SAFARI_IPHONE)
    assert (iphone.browser_name, iphone.os_name) == ("Safari", "iOS")
    assert (iphone.device_vendor, iphone.device_model, iphone.device_type) == ("Apple", "iPhone", "mobile")

    ipad = parse_user_agent(SAFARI_IPAD)
    assert (ipad.device_model, ipad.device_type) == ("iPad", "tablet")

    samsung = parse_user_agent(SAMSUNG_ANDROID)
    assert samsung.os_name == "Android"
    assert (samsung.device_vendor, samsung.device_model) == ("Samsung", "Android Device")


def test_parse_empty_user_agent():
    info = parse_user_agent(None)

    assert info.browser_name == UNKNOWN_BROWSER
    assert info.os_name == UNKNOWN_OS
    assert info.device_type == "desktop"


def test_device_id_is_deterministic_and_sensitive_to_inputs():
    fingerprinter = DeviceFingerprinter(geoip_port=None)

    first = fingerprinter.fingerprint(DeviceContext(user_agent=CHROME_WINDOWS, ip="203.0.113.7"))
    second = fingerprinter.fingerprint(DeviceContext(user_agent=CHROME_WINDOWS, ip="203.0.113.7"))
    other_ip = fingerprinter.fingerprint(DeviceContext(user_agent=CHROME_WINDOWS, ip="203.0.113.8"))
    other_ua = fingerprinter.fingerprint(DeviceContext(user_agent=FIREFOX_LINUX, ip="203.0.113.7"))

    assert first.device_id == second.device_id
    assert len(first.device_id) == DEVICE_ID_LENGTH
    assert first.device_id != other_ip.device_id
    assert first.device_id != other_ua.device_id


def test_device_id_derived_even_without_user_agent():
    fingerprint = DeviceFingerprinter(geoip_port=None).fingerprint(DeviceContext(user_agent=None, ip=None))

    assert len(fingerprint.device_id) == DEVICE_ID_LENGTH
    assert fingerprint.device_name == f"{UNKNOWN_BROWSER} on {UNKNOWN_OS}"


def test_device_name_prefers_hardware_then_browser():
    fingerprinter = DeviceFingerprinter(geoip_port=None)

    assert fingerprinter.fingerprint(DeviceContext(user_agent=SAFARI_IPHONE, ip=None)).device_name == "Apple iPhone"
    assert fingerprinter.fingerprint(DeviceContext(user_agent=CHROME_WINDOWS, ip=None)).device_name == "Chrome on Windows"


def test_client_supplied_device_identity_wins():
    fingerprint = DeviceFingerprinter(geoip_port=None).fingerprint(
        DeviceContext(user_agent=CHROME_WINDOWS, ip="203.0.113.7", device_id="app-123", device_name="My phone")
    )

    assert fingerprint.device_id == "app-123"
    assert fingerprint.device_name == "My phone"
    assert fingerprint.metadata["browser"]["name"] == "Chrome"
    assert fingerprint.metadata["raw"]["user_agent"] == CHROME_WINDOWS


def test_private_and_loopback_addresses_are_not_geolocated():
    geoip = FakeGeoIpPort(record=GeoIpRecord("BR", "SP", "Sao Paulo", -23.5, -46.6))
    fingerprinter = DeviceFingerprinter(geoip_port=geoip)

    for ip in ("127.0.0.1", "10.1.2.3", "172.16.5.4", "192.168.0.10", "::1", "fe80::1", "", None, "nope"):
        assert fingerprinter.lookup_geo_location(ip) == GeoLocation()

    assert geoip.calls == []


def test_public_172_address_is_geolocatable():
    assert is_geolocatable("172.217.0.46") is True
    assert is_geolocatable("172.31.255.255") is False


def test_public_address_is_mapped_from_geoip_record():
    geoip = FakeGeoIpPort(
        record=GeoIpRecord("BR", "SP", "Sao Paulo", -23.5, -46.6, raw={"country": "BR"}),
    )

    location = DeviceFingerprinter(geoip_port=geoip).lookup_geo_location(" 200.160.2.3 ")

    assert location.country == "BR"
    assert location.province == "SP"
    assert location.district == "Sao Paulo"
    assert (location.latitude, location.longitude) == (-23.5, -46.6)
    assert location.geo == {"country": "BR"}
    assert geoip.calls == ["200.160.2.3"]


def test_geoip_failure_yields_empty_location():
    fingerprinter = DeviceFingerprinter(geoip_port=FakeGeoIpPort(error=RuntimeError("db closed")))

    assert fingerprinter.lookup_geo_location("200.160.2.3") == GeoLocation()


def test_geoip_miss_yields_empty_location():
    fingerprinter = DeviceFingerprinter(geoip_port=FakeGeoIpPort(record=None))

    assert fingerprinter.lookup_geo_location("200.160.2.3") == GeoLocation()


def test_oversized_client_values_fit_session_columns():
    columns = CustomerSessionModel.__table__.c
    fingerprint = DeviceFingerprinter(geoip_port=None).fingerprint(
        DeviceContext(user_agent=CHROME_WINDOWS, ip="x" * 100, device_id="d" * 200, device_name="n" * 300)
    )

    assert fingerprint.ip_address is None
    assert len(fingerprint.device_id) == DEVICE_ID_LENGTH
    assert len(fingerprint.device_id) <= columns.device_id.type.length
    assert len(fingerprint.device_name) == columns.device_name.type.length


def test_client_ip_is_normalized_or_dropped():
    fingerprinter = DeviceFingerprinter(geoip_port=None)

    assert fingerprinter.fingerprint(DeviceContext(user_agent=None, ip=" 203.0.113.7 ")).ip_address == "203.0.113.7"
    assert fingerprinter.fingerprint(DeviceContext(user_agent=None, ip="2001:DB8::1")).ip_address == "2001:db8::1"
    assert fingerprinter.fingerprint(DeviceContext(user_agent=None, ip="fe80::1%" + "e" * 80)).ip_address is None
    assert fingerprinter.fingerprint(DeviceContext(user_agent=None, ip="unknown")).ip_address is None
