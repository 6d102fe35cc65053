from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from portal_auth.domain.entities.session import CustomerSession


class SessionPort(Protocol):
    def upsert_device_session(
        self,
        *,
        session_id: str,
        customer_id: str,
        device_id: str,
        device_name: str | None,
        user_agent: str | None,
        ip_address: str | None,
        country: str | None,
        province: str | None,
        district: str | None,
        latitude: float | None,
        longitude: float | None,
        geo_location: dict[str, Any] | None,
        metadata: dict[str, Any],
        refresh_token_hash: str,
        refresh_expires_at: datetime,
        now: datetime,
    ) -> CustomerSession:
        """Insert, or overwrite the non-revoked row for (customer_id, device_id)."""
        ...

    def get_session(self, *, session_id: str) -> CustomerSession | None:
        ...

    def list_sessions_by_customer(self, *, customer_id: str) -> list[CustomerSession]:
        ...

    def swap_refresh_token(
        self,
        *,
        session_id: str,
        expected_hash: str,
        new_hash: str,
        refresh_expires_at: datetime,
        now: datetime,
    ) -> CustomerSession | None:
        """Replace the hash only if it still equals expected_hash; None otherwise."""
        ...

    def revoke_session(self, *, session_id: str, revoked_at: datetime, reason: str) -> bool:
        ...

    def revoke_customer_sessions(
        self,
        *,
        customer_id: str,
        revoked_at: datetime,
        reason: str,
        exclude_session_id: str | None = None,
    ) -> int:
        ...

    def touch_session(self, *, session_id: str, now: datetime) -> None:
        ...
