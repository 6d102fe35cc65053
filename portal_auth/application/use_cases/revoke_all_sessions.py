from __future__ import annotations

from portal_auth.application.dto.session import RevokedCountOutput
from portal_auth.application.services.session_store import SessionStore


class RevokeAllSessionsUseCase:
    def __init__(self, *, session_store: SessionStore):
        self._session_store = session_store

    def execute(self, *, customer_id: str) -> RevokedCountOutput:
        return RevokedCountOutput(revoked=self._session_store.revoke_all(customer_id=customer_id))
