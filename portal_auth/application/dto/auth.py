from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from portal_auth.domain.entities.device import GeoLocation


@dataclass(frozen=True)
class LoginUserInput:
    username: str
    password: str


@dataclass(frozen=True)
class LoginUserOutput:
    access_token: str
    access_expires_at: datetime
    user_id: str
    username: str
    role_name: str | None


@dataclass(frozen=True)
class DeviceContext:
    user_agent: str | None
    ip: str | None
    device_id: str | None = None
    device_name: str | None = None


@dataclass(frozen=True)
class LoginCustomerInput:
    password: str
    username: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class LoginCustomerOutput:
    access_token: str
    access_expires_at: datetime
    refresh_token: str
    refresh_expires_at: datetime
    session_id: str
    customer_id: str
    username: str | None
    email: str | None
    device_id: str | None
    device_name: str | None
    location: GeoLocation


@dataclass(frozen=True)
class RefreshCustomerTokenInput:
    session_id: str
    refresh_token: str


@dataclass(frozen=True)
class RefreshCustomerTokenOutput:
    access_token: str
    access_expires_at: datetime
    refresh_token: str
    refresh_expires_at: datetime
    session_id: str
