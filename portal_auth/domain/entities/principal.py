from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


PrincipalType = Literal["user", "customer"]

PRINCIPAL_TYPES: tuple[PrincipalType, ...] = ("user", "customer")


@dataclass(frozen=True)
class User:
    id: str
    username: str
    password_hash: str | None
    role_id: str | None
    role_name: str | None


@dataclass(frozen=True)
class Customer:
    id: str
    username: str | None
    email: str | None
    password_hash: str | None

    @property
    def login_name(self) -> str:
        return self.username or self.email or ""


@dataclass(frozen=True)
class CredentialPayload:
    subject_id: str
    username: str
    principal_type: PrincipalType
    role_id: str | None
    session_id: str | None
    issued_at: int
    expires_at: int
