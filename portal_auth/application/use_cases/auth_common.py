from __future__ import annotations

from datetime import datetime, timezone

from portal_auth.application.dto.session import SessionOutput
from portal_auth.domain.entities.session import CustomerSession


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_login(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def build_session_output(
    session: CustomerSession,
    *,
    now: datetime,
    current_session_id: str | None = None,
) -> SessionOutput:
    return SessionOutput(
        id=session.id,
        device_id=session.device_id,
        device_name=session.device_name,
        user_agent=session.user_agent,
        ip_address=session.ip_address,
        country=session.country,
        province=session.province,
        district=session.district,
        state=session.state(now),
        refresh_expires_at=session.refresh_expires_at,
        last_activity_at=session.last_activity_at,
        revoked_at=session.revoked_at,
        revoked_reason=session.revoked_reason,
        created_at=session.created_at,
        is_current=session.id == current_session_id,
    )
