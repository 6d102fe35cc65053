from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal


SessionState = Literal["active", "revoked", "expired"]

REVOKE_REASON_MANUAL = "manual_logout"
REVOKE_REASON_OTHERS = "logout_others"
REVOKE_REASON_ALL = "logout_all"
REVOKE_REASON_REUSE = "refresh_token_reuse_or_invalid"


@dataclass(frozen=True)
class CustomerSession:
    id: str
    customer_id: str
    device_id: str | None
    device_name: str | None
    user_agent: str | None
    ip_address: str | None
    country: str | None
    province: str | None
    district: str | None
    latitude: float | None
    longitude: float | None
    geo_location: dict[str, Any] | None
    refresh_token_hash: str
    refresh_expires_at: datetime
    last_activity_at: datetime | None
    revoked_at: datetime | None
    revoked_reason: str | None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self, now: datetime) -> bool:
        return now > self.refresh_expires_at

    def state(self, now: datetime) -> SessionState:
        # expired is derived at read time, never stored
        if self.is_revoked:
            return "revoked"
        if self.is_expired(now):
            return "expired"
        return "active"
