from __future__ import annotations

from portal_auth.application.dto.session import SessionOutput
from portal_auth.application.services.session_store import SessionStore

from .auth_common import build_session_output, utcnow


class ListSessionsUseCase:
    def __init__(self, *, session_store: SessionStore):
        self._session_store = session_store

    def execute(self, *, customer_id: str, current_session_id: str | None = None) -> list[SessionOutput]:
        now = utcnow()
        return [
            build_session_output(session, now=now, current_session_id=current_session_id)
            for session in self._session_store.list_by_customer(customer_id)
        ]
