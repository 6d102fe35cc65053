from __future__ import annotations

from portal_auth.application.dto.session import RevokedCountOutput
from portal_auth.application.services.session_store import SessionStore


class RevokeOtherSessionsUseCase:
    def __init__(self, *, session_store: SessionStore):
        self._session_store = session_store

    def execute(self, *, customer_id: str, current_session_id: str) -> RevokedCountOutput:
        count = self._session_store.revoke_others(
            current_session_id=current_session_id,
            customer_id=customer_id,
        )
        return RevokedCountOutput(revoked=count)
