from __future__ import annotations

from portal_auth.application.dto.session import RevokeSessionInput, SessionOutput
from portal_auth.application.services.session_store import SessionStore

from .auth_common import build_session_output, utcnow


class RevokeSessionUseCase:
    def __init__(self, *, session_store: SessionStore):
        self._session_store = session_store

    def execute(self, command: RevokeSessionInput) -> SessionOutput:
        session = self._session_store.revoke(
            session_id=command.session_id,
            requester_customer_id=command.customer_id,
        )
        return build_session_output(session, now=utcnow())
