from __future__ import annotations

import logging
from datetime import timedelta

from portal_auth.application.dto.auth import DeviceContext, LoginCustomerInput, LoginCustomerOutput
from portal_auth.application.ports.credential_port import CredentialPort
from portal_auth.application.ports.password_hasher_port import PasswordHasherPort
from portal_auth.application.ports.principal_port import PrincipalPort
from portal_auth.application.services.device_fingerprinter import DeviceFingerprinter
from portal_auth.application.services.session_store import SessionStore
from portal_auth.domain.exceptions import InvalidCredentialsError

from .auth_common import normalize_login, utcnow


logger = logging.getLogger(__name__)


class LoginCustomerUseCase:
    def __init__(
        self,
        *,
        principal_port: PrincipalPort,
        password_hasher: PasswordHasherPort,
        credential_port: CredentialPort,
        session_store: SessionStore,
        device_fingerprinter: DeviceFingerprinter,
        refresh_ttl: timedelta,
    ):
        self._principal_port = principal_port
        self._password_hasher = password_hasher
        self._credential_port = credential_port
        self._session_store = session_store
        self._device_fingerprinter = device_fingerprinter
        self._refresh_ttl = refresh_ttl

    def execute(self, command: LoginCustomerInput, device: DeviceContext) -> LoginCustomerOutput:
        username = normalize_login(command.username)
        email = normalize_login(command.email)
        customer = None
        if username or email:
            customer = self._principal_port.get_customer_by_login(username=username, email=email)
        if customer is None or not customer.password_hash:
            raise InvalidCredentialsError("Invalid credentials.")

        if not self._password_hasher.verify(command.password, customer.password_hash):
            raise InvalidCredentialsError("Invalid credentials.")

        location = self._device_fingerprinter.lookup_geo_location(device.ip)
        fingerprint = self._device_fingerprinter.fingerprint(device, location=location)
        session, refresh_token = self._session_store.create(
            customer_id=customer.id,
            fingerprint=fingerprint,
            ttl=self._refresh_ttl,
        )

        access_token, access_expires_at = self._credential_port.sign(
            principal=customer,
            session_id=session.id,
            now=utcnow(),
        )
        logger.info("login_customer: customer=%s session=%s", customer.id, session.id)
        return LoginCustomerOutput(
            access_token=access_token,
            access_expires_at=access_expires_at,
            refresh_token=refresh_token,
            refresh_expires_at=session.refresh_expires_at,
            session_id=session.id,
            customer_id=customer.id,
            username=customer.username,
            email=customer.email,
            device_id=session.device_id,
            device_name=session.device_name,
            location=location,
        )
