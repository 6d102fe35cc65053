from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class SessionOutput:
    id: str
    device_id: str | None
    device_name: str | None
    user_agent: str | None
    ip_address: str | None
    country: str | None
    province: str | None
    district: str | None
    state: str
    refresh_expires_at: datetime
    last_activity_at: datetime | None
    revoked_at: datetime | None
    revoked_reason: str | None
    created_at: datetime | None
    is_current: bool


@dataclass(frozen=True)
class RevokeSessionInput:
    customer_id: str
    session_id: str


@dataclass(frozen=True)
class RevokedCountOutput:
    revoked: int
