from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, model_validator


class UserLoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=256)


class CustomerLoginRequest(BaseModel):
    username: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    password: str = Field(..., min_length=1, max_length=256)

    @model_validator(mode="after")
    def _require_login(self):
        if not (self.username or "").strip() and not (self.email or "").strip():
            raise ValueError("username or email is required")
        return self


class RefreshRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    refresh_token: str = Field(..., min_length=1)


class UserTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    access_expires_at: datetime
    user_id: str
    username: str
    role_name: str | None = None


class DeviceLocationResponse(BaseModel):
    country: str | None = None
    province: str | None = None
    district: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class CustomerTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    access_expires_at: datetime
    refresh_token: str
    refresh_expires_at: datetime
    session_id: str
    customer_id: str
    username: str | None = None
    email: str | None = None
    device_id: str | None = None
    device_name: str | None = None
    location: DeviceLocationResponse


class RefreshResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    access_expires_at: datetime
    refresh_token: str
    refresh_expires_at: datetime
    session_id: str


class SessionResponse(BaseModel):
    id: str
    device_id: str | None = None
    device_name: str | None = None
    user_agent: str | None = None
    ip_address: str | None = None
    country: str | None = None
    province: str | None = None
    district: str | None = None
    state: str
    refresh_expires_at: datetime
    last_activity_at: datetime | None = None
    revoked_at: datetime | None = None
    revoked_reason: str | None = None
    created_at: datetime | None = None
    is_current: bool = False


class RevokedCountResponse(BaseModel):
    revoked: int


class PrincipalResponse(BaseModel):
    id: str
    username: str
    type: str
    role_id: str | None = None
    session_id: str | None = None
    issued_at: int
    expires_at: int


class WhoAmIResponse(BaseModel):
    authenticated: bool
    principal: PrincipalResponse | None = None
