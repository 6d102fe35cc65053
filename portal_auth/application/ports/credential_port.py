from __future__ import annotations

from datetime import datetime
from typing import Protocol

from portal_auth.domain.entities.principal import (
    CredentialPayload,
    Customer,
    PrincipalType,
    User,
)


class CredentialPort(Protocol):
    def sign(
        self,
        *,
        principal: User | Customer,
        session_id: str | None,
        now: datetime,
    ) -> tuple[str, datetime]:
        ...

    def peek_principal_type(self, *, token: str) -> PrincipalType:
        ...

    def verify(self, *, token: str, expected_type: PrincipalType | None = None) -> CredentialPayload:
        ...
