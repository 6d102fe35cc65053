from __future__ import annotations

from datetime import timedelta

from portal_auth.application.dto.auth import RefreshCustomerTokenInput, RefreshCustomerTokenOutput
from portal_auth.application.ports.credential_port import CredentialPort
from portal_auth.application.ports.principal_port import PrincipalPort
from portal_auth.application.services.session_store import SessionStore
from portal_auth.domain.exceptions import InvalidCredentialsError, InvalidRefreshTokenError

from .auth_common import utcnow


class RefreshCustomerTokenUseCase:
    def __init__(
        self,
        *,
        principal_port: PrincipalPort,
        credential_port: CredentialPort,
        session_store: SessionStore,
        refresh_ttl: timedelta,
    ):
        self._principal_port = principal_port
        self._credential_port = credential_port
        self._session_store = session_store
        self._refresh_ttl = refresh_ttl

    def execute(self, command: RefreshCustomerTokenInput) -> RefreshCustomerTokenOutput:
        token = command.refresh_token.strip()
        if not token:
            raise InvalidRefreshTokenError("Missing refresh token.")

        session, refresh_token = self._session_store.rotate(
            session_id=command.session_id,
            presented_token=token,
            ttl=self._refresh_ttl,
        )

        customer = self._principal_port.get_customer_by_id(customer_id=session.customer_id)
        if customer is None:
            raise InvalidCredentialsError("Customer not found.")

        access_token, access_expires_at = self._credential_port.sign(
            principal=customer,
            session_id=session.id,
            now=utcnow(),
        )
        return RefreshCustomerTokenOutput(
            access_token=access_token,
            access_expires_at=access_expires_at,
            refresh_token=refresh_token,
            refresh_expires_at=session.refresh_expires_at,
            session_id=session.id,
        )
