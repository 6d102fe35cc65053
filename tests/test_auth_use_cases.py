from __future__ import annotations

from datetime import timedelta

import pytest

from portal_auth.application.dto.auth import (
    DeviceContext,
    LoginCustomerInput,
    LoginUserInput,
    RefreshCustomerTokenInput,
)
from portal_auth.application.dto.geo import GeoIpRecord
from portal_auth.application.dto.session import RevokeSessionInput
from portal_auth.application.services.device_fingerprinter import DeviceFingerprinter
from portal_auth.application.services.session_store import SessionStore
from portal_auth.application.use_cases.list_sessions import ListSessionsUseCase
from portal_auth.application.use_cases.login_customer import LoginCustomerUseCase
from portal_auth.application.use_cases.login_user import LoginUserUseCase
from portal_auth.application.use_cases.refresh_customer_token import RefreshCustomerTokenUseCase
from portal_auth.application.use_cases.revoke_all_sessions import RevokeAllSessionsUseCase
from portal_auth.application.use_cases.revoke_other_sessions import RevokeOtherSessionsUseCase
from portal_auth.application.use_cases.revoke_session import RevokeSessionUseCase
from portal_auth.domain.entities.principal import Customer, User
from portal_auth.domain.exceptions import (
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    SessionRevokedError,
)
from portal_auth.infrastructure.security.token_service import JwtCredentialService, JwtSecrets
from tests.fakes import FakeGeoIpPort, FakePasswordHasher, FakePrincipalPort, FakeSessionPort


UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
TTL = timedelta(days=30)


class Harness:
    def __init__(self):
        self.principals = FakePrincipalPort()
        self.principals.users["u1"] = User(
            id="u1", username="admin", password_hash="hashed:pw", role_id="r1", role_name="admin"
        )
        self.principals.users["u2"] = User(
            id="u2", username="nohash", password_hash=None, role_id=None, role_name=None
        )
        self.principals.customers["c1"] = Customer(
            id="c1", username="ana", email="Ana@Example.com", password_hash="hashed:pw"
        )
        self.session_port = FakeSessionPort()
        self.session_store = SessionStore(session_port=self.session_port)
        self.credentials = JwtCredentialService(
            secrets=JwtSecrets(
                user_secret="user-secret-0123456789abcdef0123456789",
                customer_secret="customer-secret-0123456789abcdef012345",
            ),
            access_ttl_seconds=3600,
        )
        self.geoip = FakeGeoIpPort(record=GeoIpRecord("BR", "SP", "Sao Paulo", -23.5, -46.6))

    def login_user(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            principal_port=self.principals,
            password_hasher=FakePasswordHasher(),
            credential_port=self.credentials,
        )

    def login_customer(self) -> LoginCustomerUseCase:
        return LoginCustomerUseCase(
            principal_port=self.principals,
            password_hasher=FakePasswordHasher(),
            credential_port=self.credentials,
            session_store=self.session_store,
            device_fingerprinter=DeviceFingerprinter(geoip_port=self.geoip),
            refresh_ttl=TTL,
        )

    def refresh(self) -> RefreshCustomerTokenUseCase:
        return RefreshCustomerTokenUseCase(
            principal_port=self.principals,
            credential_port=self.credentials,
            session_store=self.session_store,
            refresh_ttl=TTL,
        )


def _device(ip: str = "200.160.2.3", device_id: str | None = None) -> DeviceContext:
    return DeviceContext(user_agent=UA, ip=ip, device_id=device_id)


def test_login_user_returns_user_token():
    h = Harness()

    output = h.login_user().execute(LoginUserInput(username="admin", password="pw"))

    payload = h.credentials.verify(token=output.access_token, expected_type="user")
    assert payload.subject_id == "u1"
    assert payload.role_id == "r1"
    assert payload.session_id is None
    assert output.role_name == "admin"
    assert h.session_port.sessions == {}


@pytest.mark.parametrize(
    "username,password",
    [("admin", "wrong"), ("missing", "pw"), ("nohash", "pw"), ("", "pw")],
)
def test_login_user_rejects_bad_credentials_uniformly(username, password):
    h = Harness()

    with pytest.raises(InvalidCredentialsError) as exc_info:
        h.login_user().execute(LoginUserInput(username=username, password=password))

    assert str(exc_info.value) == "Invalid credentials."


def test_login_customer_creates_session_and_binds_token():
    h = Harness()

    output = h.login_customer().execute(LoginCustomerInput(username="ana", password="pw"), _device())

    payload = h.credentials.verify(token=output.access_token, expected_type="customer")
    assert payload.subject_id == "c1"
    assert payload.session_id == output.session_id
    assert output.location.country == "BR"
    assert output.device_name == "Chrome on Windows"
    session = h.session_port.sessions[output.session_id]
    assert session.refresh_token_hash == h.session_store.hash_refresh_token(output.refresh_token)
    assert session.district == "Sao Paulo"


def test_login_customer_by_email_is_case_insensitive():
    h = Harness()

    output = h.login_customer().execute(LoginCustomerInput(email="ana@example.com", password="pw"), _device())

    assert output.customer_id == "c1"


def test_login_customer_from_private_ip_skips_geolocation():
    h = Harness()

    output = h.login_customer().execute(LoginCustomerInput(username="ana", password="pw"), _device(ip="127.0.0.1"))

    assert output.location.country is None
    assert h.geoip.calls == []


def test_login_customer_rejects_bad_credentials_without_session():
    h = Harness()

    with pytest.raises(InvalidCredentialsError):
        h.login_customer().execute(LoginCustomerInput(username="ana", password="nope"), _device())
    with pytest.raises(InvalidCredentialsError):
        h.login_customer().execute(LoginCustomerInput(password="pw"), _device())

    assert h.session_port.sessions == {}


def test_repeat_login_on_same_device_reuses_session():
    h = Harness()
    first = h.login_customer().execute(LoginCustomerInput(username="ana", password="pw"), _device(device_id="d1"))
    second = h.login_customer().execute(LoginCustomerInput(username="ana", password="pw"), _device(device_id="d1"))
    third = h.login_customer().execute(LoginCustomerInput(username="ana", password="pw"), _device(device_id="d2"))

    assert first.session_id == second.session_id
    assert third.session_id != first.session_id
    assert len(h.session_port.list_sessions_by_customer(customer_id="c1")) == 2


def test_refresh_rotates_and_old_token_becomes_reuse():
    h = Harness()
    login = h.login_customer().execute(LoginCustomerInput(username="ana", password="pw"), _device())

    refreshed = h.refresh().execute(
        RefreshCustomerTokenInput(session_id=login.session_id, refresh_token=login.refresh_token)
    )

    assert refreshed.refresh_token != login.refresh_token
    assert refreshed.session_id == login.session_id
    payload = h.credentials.verify(token=refreshed.access_token, expected_type="customer")
    assert payload.session_id == login.session_id

    with pytest.raises(InvalidRefreshTokenError):
        h.refresh().execute(
            RefreshCustomerTokenInput(session_id=login.session_id, refresh_token=login.refresh_token)
        )
    with pytest.raises(SessionRevokedError):
        h.refresh().execute(
            RefreshCustomerTokenInput(session_id=login.session_id, refresh_token=refreshed.refresh_token)
        )


def test_refresh_with_blank_token_is_rejected_without_revoking():
    h = Harness()
    login = h.login_customer().execute(LoginCustomerInput(username="ana", password="pw"), _device())

    with pytest.raises(InvalidRefreshTokenError):
        h.refresh().execute(RefreshCustomerTokenInput(session_id=login.session_id, refresh_token="   "))

    assert h.session_port.sessions[login.session_id].revoked_at is None


def test_refresh_for_deleted_customer_fails():
    h = Harness()
    login = h.login_customer().execute(LoginCustomerInput(username="ana", password="pw"), _device())
    del h.principals.customers["c1"]

    with pytest.raises(InvalidCredentialsError):
        h.refresh().execute(
            RefreshCustomerTokenInput(session_id=login.session_id, refresh_token=login.refresh_token)
        )


def test_session_management_use_cases():
    h = Harness()
    current = h.login_customer().execute(LoginCustomerInput(username="ana", password="pw"), _device(device_id="d1"))
    other = h.login_customer().execute(LoginCustomerInput(username="ana", password="pw"), _device(device_id="d2"))

    listed = ListSessionsUseCase(session_store=h.session_store).execute(
        customer_id="c1", current_session_id=current.session_id
    )
    assert {item.id for item in listed} == {current.session_id, other.session_id}
    assert [item.is_current for item in listed if item.id == current.session_id] == [True]
    assert {item.state for item in listed} == {"active"}

    revoked = RevokeSessionUseCase(session_store=h.session_store).execute(
        RevokeSessionInput(customer_id="c1", session_id=other.session_id)
    )
    assert revoked.state == "revoked"
    assert revoked.revoked_reason == "manual_logout"

    others = RevokeOtherSessionsUseCase(session_store=h.session_store).execute(
        customer_id="c1", current_session_id=current.session_id
    )
    assert others.revoked == 0

    everything = RevokeAllSessionsUseCase(session_store=h.session_store).execute(customer_id="c1")
    assert everything.revoked == 1
